"""Tests for search_extract.cli module."""

import json
from unittest.mock import MagicMock, patch

import pytest

from search_extract.cli import main
from search_extract.client import SearchClient

CONNECTION = {
    "consumerKey": "key",
    "consumerSecret": "secret",
    "applicationName": "app",
    "endPointAuthUrl": "https://api.example.com/oauth2/token",
    "endPointUrl": "https://api.example.com/search.json",
    "searchTerm": "#news",
}

RESPONSE = json.dumps({
    "statuses": [
        {"id_str": "1", "text": "hi @bob #news", "user": {"id_str": "u1", "friends_count": 2}},
        {"id_str": "2", "text": "plain", "user": {"id_str": "u2", "friends_count": 4}},
    ],
    "search_metadata": {"query": "%23news"},
})


@pytest.fixture
def connection_file(tmp_path):
    path = tmp_path / "connection.json"
    path.write_text(json.dumps(CONNECTION))
    return path


@patch("search_extract.stage.RestSearchClient")
class TestMain:
    def test_writes_jsonl_records(self, mock_client_cls, connection_file, capsys) -> None:
        client = MagicMock(spec=SearchClient)
        client.search.return_value = RESPONSE
        mock_client_cls.return_value = client

        exit_code = main(["--connection", str(connection_file), "--config", "prod"])

        assert exit_code == 0
        lines = capsys.readouterr().out.strip().splitlines()
        records = [json.loads(line) for line in lines]
        assert [r["id"] for r in records] == ["1", "2"]
        assert records[0]["mentions"] == '{"mentions":["@bob"]}'
        assert records[0]["query"] == "#news"
        assert records[0]["connection"] is None
        client.close.assert_called_once()

    def test_failed_run_exit_code(self, mock_client_cls, tmp_path, capsys) -> None:
        path = tmp_path / "connection.json"
        path.write_text("{not json")

        exit_code = main(["--connection", str(path), "--config", "test"])

        assert exit_code == 1
        assert capsys.readouterr().out == ""
        mock_client_cls.assert_not_called()

    def test_connection_from_env(self, mock_client_cls, connection_file, monkeypatch, capsys) -> None:
        client = MagicMock(spec=SearchClient)
        client.search.return_value = RESPONSE
        mock_client_cls.return_value = client
        monkeypatch.setenv("SEARCH_CONNECTION_FILE", str(connection_file))

        assert main(["--config", "test"]) == 0
        assert len(capsys.readouterr().out.strip().splitlines()) == 2

    def test_missing_connection_exits(self, mock_client_cls, monkeypatch) -> None:
        monkeypatch.delenv("SEARCH_CONNECTION_FILE", raising=False)
        with pytest.raises(SystemExit):
            main(["--config", "test"])
