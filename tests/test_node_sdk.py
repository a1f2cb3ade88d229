"""Tests for node_sdk helpers: items, HTTP client and logging context."""
import base64
import json
import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.node_sdk.basenode import NodeExecutionContext
from src.node_sdk.http import HttpApiError, HttpClient, NodeTimeoutError
from src.node_sdk.items import BinaryData, prepare_binary_data, with_binary
from src.node_sdk.observability import (
    CustomJsonFormatter,
    ExecutionContextFilter,
    setup_logging,
    with_context,
)


class TestBinaryData:
    def test_prepare_binary_data(self):
        entry = prepare_binary_data(b"col1,col2\n", "exports/report.csv")

        assert entry["fileName"] == "report.csv"
        assert entry["fileExtension"] == "csv"
        assert entry["mimeType"] == "text/csv"
        assert entry["fileSize"] == 10
        assert base64.b64decode(entry["data"]) == b"col1,col2\n"

    def test_unknown_type_defaults_to_octet_stream(self):
        entry = prepare_binary_data(b"\x00\x01", None)

        assert entry["mimeType"] == "application/octet-stream"
        assert "fileName" not in entry

    def test_from_entry(self):
        data = BinaryData.from_entry({"data": base64.b64encode(b"x").decode(), "mimeType": "text/plain"})

        assert data.mime_type == "text/plain"
        assert data.to_bytes() == b"x"

    def test_with_binary_copies_mapping(self):
        original = {"json": {"a": 1}, "binary": {"old": {"data": ""}}}

        updated = with_binary(original, "new", {"data": "eA=="})

        assert set(updated["binary"]) == {"old", "new"}
        assert set(original["binary"]) == {"old"}
        assert updated["json"] is original["json"]


class TestHttpClient:
    def test_joins_base_url_and_applies_timeout(self):
        client = HttpClient(base_url="https://api.github.com/", default_headers={"X-Test": "1"}, timeout=12)

        with patch("src.node_sdk.http.requests.request") as mock_request:
            mock_request.return_value = MagicMock(status_code=200)
            response = client.get("/users/octocat", params={"a": 1})

        kwargs = mock_request.call_args.kwargs
        assert kwargs["url"] == "https://api.github.com/users/octocat"
        assert kwargs["timeout"] == 12
        assert kwargs["headers"] == {"X-Test": "1"}
        assert response.status_code == 200

    def test_absolute_url_bypasses_base(self):
        client = HttpClient(base_url="https://api.github.com")

        with patch("src.node_sdk.http.requests.request") as mock_request:
            client.request("GET", "https://example.com/next")

        assert mock_request.call_args.kwargs["url"] == "https://example.com/next"

    def test_uses_session_when_given(self):
        session = MagicMock()
        HttpClient(base_url="https://api.github.com", session=session).get("/x")

        session.request.assert_called_once()

    def test_timeout(self):
        client = HttpClient(base_url="https://api.github.com", timeout=3)

        with patch("src.node_sdk.http.requests.request", side_effect=requests.Timeout()):
            with pytest.raises(NodeTimeoutError) as exc_info:
                client.get("/slow")

        assert exc_info.value.timeout == 3

    def test_connection_error(self):
        client = HttpClient(base_url="https://api.github.com")

        with patch("src.node_sdk.http.requests.request", side_effect=requests.ConnectionError("down")):
            with pytest.raises(HttpApiError):
                client.get("/x")


class TestExecutionContext:
    def test_item_override_wins(self):
        context = NodeExecutionContext(
            parameters={"issueNumber": 1},
            credentials={},
            input_data=[{"json": {}}, {"json": {}}],
            item_parameters=[{}, {"issueNumber": 2}],
        )

        assert context.get_node_parameter("issueNumber", 0) == 1
        assert context.get_node_parameter("issueNumber", 1) == 2
        assert context.get_node_parameter("missing", 1, "dflt") == "dflt"


class TestLoggingContext:
    def test_with_context_skips_empty_fields(self):
        assert with_context(item_index=0, operation="issue:get") == {"item_index": 0, "operation": "issue:get"}

    def test_json_formatter_includes_context(self):
        record = logging.LogRecord("node.github", logging.INFO, __file__, 1, "GET %s", ("/x",), None)
        record.operation = "issue:get"
        ExecutionContextFilter().filter(record)

        line = json.loads(CustomJsonFormatter("%(message)s").format(record))

        assert line["message"] == "GET /x"
        assert line["level"] == "INFO"
        assert line["operation"] == "issue:get"
        assert "workflow_id" not in line

    @pytest.mark.parametrize("log_json,formatter_type", [("true", CustomJsonFormatter), ("false", logging.Formatter)])
    def test_setup_logging(self, monkeypatch, log_json, formatter_type):
        monkeypatch.setenv("NODE_LOG_JSON", log_json)
        monkeypatch.setenv("NODE_LOG_LEVEL", "warning")
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level

        try:
            setup_logging()
            handler = root.handlers[0]
            assert len(root.handlers) == 1
            assert type(handler.formatter) is formatter_type
            assert root.level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
