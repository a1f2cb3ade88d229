"""Pytest configuration and fixtures."""
import json as jsonlib
import os
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

# Set test environment variables
os.environ["NODE_ENV"] = "test"
os.environ["NODE_LOG_JSON"] = "false"

from src.node_sdk.basenode import NodeExecutionContext  # noqa: E402
from src.node_sdk.settings import reset_settings  # noqa: E402


class FakeResponse:
    """Stands in for HttpResponse: status, body and an optional next link."""

    def __init__(
        self,
        payload: Any = None,
        status_code: int = 200,
        next_url: Optional[str] = None,
        body: Optional[str] = None,
    ):
        self.status_code = status_code
        if body is not None:
            self.text = body
        else:
            self.text = "" if payload is None else jsonlib.dumps(payload)
        self.links = {"next": {"url": next_url, "rel": "next"}} if next_url else {}

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return jsonlib.loads(self.text)


Responder = Union[FakeResponse, Callable[..., FakeResponse], Exception]


class RecordingCaller:
    """
    HttpCaller fake that records every call.

    Queued responses are handed out in order; once the queue is empty
    ``default`` answers every call.
    """

    def __init__(self, responses: Optional[List[Responder]] = None, default: Optional[Responder] = None):
        self.responses = list(responses or [])
        self.default = default
        self.calls: List[Dict[str, Any]] = []

    def request(self, method, endpoint, params=None, json=None, headers=None, timeout=None):
        call = {"method": method, "endpoint": endpoint, "params": params, "json": json}
        self.calls.append(call)
        responder = self.responses.pop(0) if self.responses else self.default
        if responder is None:
            raise AssertionError(f"Unexpected request: {method} {endpoint}")
        if isinstance(responder, Exception):
            raise responder
        if callable(responder) and not isinstance(responder, FakeResponse):
            return responder(**call)
        return responder


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test starts from settings built from its own environment."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_caller():
    """Build a RecordingCaller from queued responses."""
    return RecordingCaller


@pytest.fixture
def make_context():
    """Build a NodeExecutionContext for the GitHub node."""

    def _make(
        parameters: Dict[str, Any],
        items: Optional[List[Dict[str, Any]]] = None,
        item_parameters: Optional[List[Dict[str, Any]]] = None,
        continue_on_fail: bool = False,
        credentials: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> NodeExecutionContext:
        return NodeExecutionContext(
            parameters={"owner": "octocat", "repository": "hello-world", **parameters},
            credentials=credentials or {"githubApi": {"accessToken": "ghp_test"}},
            input_data=items if items is not None else [{"json": {}}],
            item_parameters=item_parameters,
            continue_on_fail=continue_on_fail,
            workflow_id="wf-test",
            node_name="GitHub",
        )

    return _make
