"""Tests for GithubTransport: pagination, SHA lookup and error mapping."""
import pytest

from nodepacks.github.operations import RequestSpec, ShaLookup
from nodepacks.github.transport import GithubTransport
from src.node_sdk.basenode import NodeApiError
from src.node_sdk.http import HttpApiError, NodeTimeoutError

from conftest import FakeResponse, RecordingCaller


def page(start, count):
    return [{"id": n} for n in range(start, start + count)]


class TestRequest:
    def test_single_request(self):
        caller = RecordingCaller([FakeResponse({"id": 1, "full_name": "octocat/hello-world"})])
        transport = GithubTransport(caller)

        result = transport.request("GET", "/repos/octocat/hello-world")

        assert result["full_name"] == "octocat/hello-world"
        assert caller.calls == [
            {"method": "GET", "endpoint": "/repos/octocat/hello-world", "params": None, "json": None}
        ]

    def test_empty_body_and_query_are_omitted(self):
        caller = RecordingCaller([FakeResponse({})])

        GithubTransport(caller).request("GET", "/repos/o/r", body={}, query={})

        assert caller.calls[0]["json"] is None
        assert caller.calls[0]["params"] is None

    def test_no_content(self):
        caller = RecordingCaller([FakeResponse(None, status_code=204)])

        assert GithubTransport(caller).request("DELETE", "/repos/o/r/releases/1") == {}

    def test_api_error_carries_github_message(self):
        caller = RecordingCaller([FakeResponse({"message": "Not Found"}, status_code=404)])

        with pytest.raises(NodeApiError) as exc_info:
            GithubTransport(caller).request("GET", "/repos/o/missing")

        assert exc_info.value.status_code == 404
        assert "Not Found" in str(exc_info.value)

    def test_timeout_becomes_api_error(self):
        caller = RecordingCaller([NodeTimeoutError("timed out", timeout=30, url="https://api.github.com")])

        with pytest.raises(NodeApiError) as exc_info:
            GithubTransport(caller).request("GET", "/repos/o/r")

        assert "timed out" in str(exc_info.value)

    def test_connection_error_becomes_api_error(self):
        caller = RecordingCaller([HttpApiError("Request failed: refused")])

        with pytest.raises(NodeApiError) as exc_info:
            GithubTransport(caller).request("GET", "/repos/o/r")

        assert "refused" in str(exc_info.value)


class TestPagination:
    def test_follows_next_links(self):
        caller = RecordingCaller([
            FakeResponse(page(0, 100), next_url="https://api.github.com/x?page=2"),
            FakeResponse(page(100, 100), next_url="https://api.github.com/x?page=3"),
            FakeResponse(page(200, 30)),
        ])

        items = GithubTransport(caller).request_all_items("GET", "/repos/o/r/releases")

        assert len(items) == 230
        assert [item["id"] for item in items] == list(range(230))
        assert [call["params"]["page"] for call in caller.calls] == [1, 2, 3]
        assert all(call["params"]["per_page"] == 100 for call in caller.calls)

    def test_short_page_stops_even_with_next_link(self):
        caller = RecordingCaller([FakeResponse(page(0, 10), next_url="https://api.github.com/x?page=2")])

        items = GithubTransport(caller).request_all_items("GET", "/repos/o/r/releases")

        assert len(items) == 10
        assert len(caller.calls) == 1

    def test_empty_first_page(self):
        caller = RecordingCaller([FakeResponse([])])

        assert GithubTransport(caller).request_all_items("GET", "/users/o/repos") == []

    def test_keeps_filters_on_every_page(self):
        caller = RecordingCaller([
            FakeResponse(page(0, 2), next_url="https://api.github.com/x?page=2"),
            FakeResponse(page(2, 1)),
        ])

        items = GithubTransport(caller, page_size=2).request_all_items(
            "GET", "/repos/o/r/issues", query={"state": "open"}
        )

        assert len(items) == 3
        assert caller.calls[0]["params"] == {"state": "open", "per_page": 2, "page": 1}
        assert caller.calls[1]["params"] == {"state": "open", "per_page": 2, "page": 2}

    def test_limit_is_a_single_request(self):
        caller = RecordingCaller([FakeResponse(page(0, 50), next_url="https://api.github.com/x?page=2")])
        spec = RequestSpec("GET", "/repos/o/r/releases", query={"per_page": 50})

        items = GithubTransport(caller).execute(spec)

        assert len(items) == 50
        assert len(caller.calls) == 1
        assert caller.calls[0]["params"] == {"per_page": 50}


class TestFileSha:
    def test_sha_lookup_runs_before_write(self):
        caller = RecordingCaller([
            FakeResponse({"sha": "abc123", "path": "a.txt"}),
            FakeResponse({"content": {"sha": "def456"}}),
        ])
        spec = RequestSpec(
            "PUT",
            "/repos/o/r/contents/a.txt",
            body={"message": "m", "content": "aGk=", "branch": "dev"},
            sha_lookup=ShaLookup("o", "r", "a.txt", "dev"),
        )

        GithubTransport(caller).execute(spec)

        lookup, write = caller.calls
        assert lookup["method"] == "GET"
        assert lookup["endpoint"] == "/repos/o/r/contents/a.txt"
        assert lookup["params"] == {"ref": "dev"}
        assert write["method"] == "PUT"
        assert write["json"]["sha"] == "abc123"

    def test_sha_without_branch_has_no_ref(self):
        caller = RecordingCaller([FakeResponse({"sha": "abc123"})])

        assert GithubTransport(caller).get_file_sha("o", "r", "a.txt") == "abc123"
        assert caller.calls[0]["params"] is None

    def test_directory_has_no_sha(self):
        caller = RecordingCaller([FakeResponse([{"name": "a.txt"}, {"name": "b.txt"}])])

        with pytest.raises(NodeApiError) as exc_info:
            GithubTransport(caller).get_file_sha("o", "r", "docs")

        assert "Could not get the SHA of the file." in str(exc_info.value)
        assert len(caller.calls) == 1

    def test_missing_file_fails_before_write(self):
        caller = RecordingCaller([FakeResponse({"message": "Not Found"}, status_code=404)])
        spec = RequestSpec(
            "DELETE",
            "/repos/o/r/contents/gone.txt",
            body={"message": "rm"},
            sha_lookup=ShaLookup("o", "r", "gone.txt"),
        )

        with pytest.raises(NodeApiError):
            GithubTransport(caller).execute(spec)

        assert len(caller.calls) == 1


class TestNonJsonBody:
    def test_html_body_becomes_api_error(self):
        caller = RecordingCaller([FakeResponse(body="<html><body>Proxy login</body></html>")])

        with pytest.raises(NodeApiError) as exc_info:
            GithubTransport(caller).request("GET", "/repos/o/r")

        assert exc_info.value.status_code == 200
        assert "not JSON" in str(exc_info.value)
        assert "Proxy login" in exc_info.value.response_body

    def test_truncated_page_during_pagination(self):
        caller = RecordingCaller([FakeResponse(body='[{"id": 1}, {"id"')])

        with pytest.raises(NodeApiError):
            GithubTransport(caller).request_all_items("GET", "/repos/o/r/releases")
