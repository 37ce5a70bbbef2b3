"""Tests for search_extract.connection module."""

import json

import pytest

from search_extract.connection import decode_descriptor, descriptor_from_row
from search_extract.errors import ConfigurationError

VALID = {
    "consumerKey": "key",
    "consumerSecret": "secret",
    "applicationName": "app",
    "endPointAuthUrl": "https://api.example.com/oauth2/token",
    "endPointUrl": "https://api.example.com/search.json",
    "searchTerm": "#news",
}


class TestDecodeDescriptor:
    def test_decodes_json_text(self) -> None:
        descriptor = decode_descriptor(json.dumps(VALID))
        assert descriptor.consumer_key == "key"
        assert descriptor.consumer_secret == "secret"
        assert descriptor.application_name == "app"
        assert descriptor.auth_endpoint_url == VALID["endPointAuthUrl"]
        assert descriptor.search_endpoint_url == VALID["endPointUrl"]
        assert descriptor.search_term == "#news"

    def test_decodes_bytes(self) -> None:
        descriptor = decode_descriptor(json.dumps(VALID).encode("utf-8"))
        assert descriptor.search_term == "#news"

    def test_accepts_mapping(self) -> None:
        assert decode_descriptor(dict(VALID)).consumer_key == "key"

    def test_ignores_extra_keys(self) -> None:
        payload = dict(VALID, other="x")
        assert decode_descriptor(payload).application_name == "app"

    def test_none_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            decode_descriptor(None)

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            decode_descriptor("{not json")

    def test_invalid_utf8_bytes_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="UTF-8"):
            decode_descriptor(b"\xff\xfe{")

    def test_non_object_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            decode_descriptor("[1, 2]")

    def test_missing_key_raises(self) -> None:
        payload = dict(VALID)
        del payload["searchTerm"]
        with pytest.raises(ConfigurationError, match="searchTerm"):
            decode_descriptor(payload)

    def test_blank_value_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="consumerSecret"):
            decode_descriptor(dict(VALID, consumerSecret="  "))

    def test_non_string_value_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            decode_descriptor(dict(VALID, consumerKey=123))


class TestDescriptorFromRow:
    def test_reads_field_zero(self) -> None:
        descriptor = descriptor_from_row([json.dumps(VALID), "other"])
        assert descriptor.search_term == "#news"

    def test_empty_row_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            descriptor_from_row([])

    def test_null_field_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            descriptor_from_row([None])
