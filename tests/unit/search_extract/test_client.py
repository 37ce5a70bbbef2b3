"""Tests for search_extract.client module."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from search_extract.client import RestSearchClient
from search_extract.errors import FetchError


def _response(json_data=None, text: str = "", status_error: Exception | None = None) -> MagicMock:
    response = MagicMock()
    response.json.return_value = json_data
    response.text = text
    response.content = text.encode("utf-8")
    if status_error:
        response.raise_for_status.side_effect = status_error
    return response


@patch("search_extract.client.requests.Session")
class TestRestSearchClient:
    def test_open_requests_bearer_token(self, mock_session_cls) -> None:
        session = mock_session_cls.return_value
        session.headers = {}
        session.post.return_value = _response({"token_type": "bearer", "access_token": "tok"})

        client = RestSearchClient(timeout=5, user_agent="test/1.0")
        client.open("my key", "s/cret", "app", "https://api.example.com/oauth2/token")

        assert client.bearer_token == "tok"
        args, kwargs = session.post.call_args
        assert args[0] == "https://api.example.com/oauth2/token"
        assert kwargs["auth"] == ("my%20key", "s%2Fcret")
        assert kwargs["data"] == {"grant_type": "client_credentials"}
        assert kwargs["timeout"] == 5
        assert session.headers["User-Agent"] == "app (test/1.0)"

    def test_open_rejects_non_bearer_token(self, mock_session_cls) -> None:
        session = mock_session_cls.return_value
        session.headers = {}
        session.post.return_value = _response({"token_type": "mac", "access_token": "tok"})

        with pytest.raises(FetchError):
            RestSearchClient().open("k", "s", "app", "https://auth")

    def test_open_wraps_http_errors(self, mock_session_cls) -> None:
        session = mock_session_cls.return_value
        session.headers = {}
        session.post.return_value = _response(status_error=requests.HTTPError("403"))

        with pytest.raises(FetchError):
            RestSearchClient().open("k", "s", "app", "https://auth")

    def test_search_sends_term_with_bearer(self, mock_session_cls) -> None:
        session = mock_session_cls.return_value
        session.headers = {}
        session.post.return_value = _response({"token_type": "bearer", "access_token": "tok"})
        session.get.return_value = _response(text='{"statuses": []}')

        client = RestSearchClient(timeout=5)
        client.open("k", "s", "app", "https://auth")
        raw = client.search("https://api.example.com/search.json", "#news")

        assert raw == '{"statuses": []}'
        args, kwargs = session.get.call_args
        assert args[0] == "https://api.example.com/search.json"
        assert kwargs["params"] == {"q": "#news"}
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_search_empty_body_is_none(self, mock_session_cls) -> None:
        session = mock_session_cls.return_value
        session.headers = {}
        session.post.return_value = _response({"token_type": "bearer", "access_token": "tok"})
        session.get.return_value = _response(text="")

        client = RestSearchClient()
        client.open("k", "s", "app", "https://auth")
        assert client.search("https://search", "x") is None

    def test_search_wraps_network_errors(self, mock_session_cls) -> None:
        session = mock_session_cls.return_value
        session.headers = {}
        session.post.return_value = _response({"token_type": "bearer", "access_token": "tok"})
        session.get.side_effect = requests.ConnectionError("down")

        client = RestSearchClient()
        client.open("k", "s", "app", "https://auth")
        with pytest.raises(FetchError):
            client.search("https://search", "x")

    def test_search_before_open_raises(self, mock_session_cls) -> None:
        with pytest.raises(FetchError):
            RestSearchClient().search("https://search", "x")

    def test_close_releases_session(self, mock_session_cls) -> None:
        session = mock_session_cls.return_value
        session.headers = {}
        session.post.return_value = _response({"token_type": "bearer", "access_token": "tok"})

        client = RestSearchClient()
        client.open("k", "s", "app", "https://auth")
        client.close()
        client.close()

        session.close.assert_called_once()
        assert client.session is None
        assert client.bearer_token is None
