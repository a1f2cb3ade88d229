"""
GitHub transport - sends RequestSpecs through an HttpCaller.

Covers the three calls the node makes:
- request: one round trip, JSON in / JSON out
- request_all_items: follow pages until GitHub has no next page
- get_file_sha: the blob SHA GitHub wants back on file edits and deletes

SYNC-CELERY SAFE: every call goes through the caller's timeout.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from src.node_sdk.basenode import NodeApiError
from src.node_sdk.http import HttpApiError, HttpCaller, HttpResponse, NodeTimeoutError

from .operations import RequestSpec, contents_endpoint


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


def _error_message(response: HttpResponse) -> str:
    detail = None
    try:
        payload = response.json()
        if isinstance(payload, dict):
            detail = payload.get("message")
    except ValueError:
        detail = None
    detail = detail or (response.text[:200] if response.text else "no response body")
    return f"GitHub API error {response.status_code}: {detail}"


class GithubTransport:
    """Issues GitHub calls for the node, one at a time."""

    def __init__(self, caller: HttpCaller, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._caller = caller
        self.page_size = page_size

    def _send(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> HttpResponse:
        logger.debug("GitHub %s %s query=%s", method, endpoint, query)
        try:
            response = self._caller.request(
                method,
                endpoint,
                params=query or None,
                # GitHub rejects an empty JSON object on several GET endpoints
                json=body or None,
            )
        except NodeTimeoutError as e:
            raise NodeApiError(f"GitHub request timed out after {e.timeout}s") from e
        except HttpApiError as e:
            raise NodeApiError(
                str(e), status_code=e.status_code, response_body=e.response_body
            ) from e

        if not response.ok:
            raise NodeApiError(
                _error_message(response),
                status_code=response.status_code,
                response_body=response.text[:1000] if response.text else None,
            )
        return response

    @staticmethod
    def _parse(response: HttpResponse) -> Any:
        if response.status_code == 204 or not response.text:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise NodeApiError(
                f"GitHub returned a response that is not JSON (status {response.status_code})",
                status_code=response.status_code,
                response_body=response.text[:1000],
            ) from e

    def request(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Single call, parsed JSON response."""
        return self._parse(self._send(method, endpoint, body, query))

    def request_all_items(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> List[Any]:
        """
        Repeat the request page by page and concatenate the results.

        Stops when the response carries no ``rel="next"`` link or when a
        page comes back shorter than ``per_page``.
        """
        page_query = dict(query or {})
        page_query["per_page"] = self.page_size
        page = 1
        items: List[Any] = []

        while True:
            page_query["page"] = page
            response = self._send(method, endpoint, body, dict(page_query))
            data = self._parse(response)
            if not isinstance(data, list):
                data = [data] if data else []
            items.extend(data)

            if "next" not in response.links or len(data) < self.page_size:
                break
            page += 1

        logger.debug("GitHub %s %s returned %d items over %d pages", method, endpoint, len(items), page)
        return items

    def get_file_sha(
        self,
        owner: str,
        repository: str,
        file_path: str,
        branch: Optional[str] = None,
    ) -> str:
        """Current blob SHA of a file; raises if the path is not a single file."""
        query = {"ref": branch} if branch else {}
        data = self.request("GET", contents_endpoint(owner, repository, file_path), query=query)
        if not isinstance(data, dict) or not data.get("sha"):
            raise NodeApiError("Could not get the SHA of the file.")
        return data["sha"]

    def execute(self, spec: RequestSpec) -> Any:
        """Send a RequestSpec, resolving its SHA lookup first."""
        if spec.sha_lookup is not None:
            lookup = spec.sha_lookup
            sha = self.get_file_sha(lookup.owner, lookup.repository, lookup.file_path, lookup.branch)
            spec = spec.with_sha(sha)
        if spec.return_all:
            return self.request_all_items(spec.method, spec.endpoint, spec.body, spec.query)
        return self.request(spec.method, spec.endpoint, spec.body, spec.query)
