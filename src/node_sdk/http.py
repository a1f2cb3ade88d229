"""
HTTP Client - Timeout-bounded HTTP requests for nodes.

All HTTP calls MUST use timeouts (sync-Celery requirement).
This module provides a simple wrapper around requests with
sensible defaults and structured responses.

Nodes depend on the narrow ``HttpCaller`` protocol rather than on
``HttpClient`` directly, so tests can hand them a recording fake.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import requests
from requests.exceptions import Timeout, RequestException


logger = logging.getLogger(__name__)

# Default timeout in seconds (REQUIRED for sync-Celery)
DEFAULT_TIMEOUT = 30


class NodeTimeoutError(Exception):
    """Raised when an HTTP request times out."""

    def __init__(self, message: str, timeout: float, url: str):
        self.timeout = timeout
        self.url = url
        super().__init__(message)


class HttpApiError(Exception):
    """Error from HTTP request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        url: Optional[str] = None,
        method: Optional[str] = None,
    ):
        self.status_code = status_code
        self.response_body = response_body
        self.url = url
        self.method = method
        super().__init__(message)


class HttpResponse:
    """
    Wrapper for HTTP response with convenient accessors.
    """

    def __init__(self, response: requests.Response):
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def links(self) -> Dict[str, Dict[str, str]]:
        """Parsed ``Link`` header, keyed by ``rel``."""
        return self._response.links

    @property
    def text(self) -> str:
        return self._response.text

    def json(self) -> Any:
        """Parse response as JSON."""
        return self._response.json()

    @property
    def ok(self) -> bool:
        """True if status code is 2xx."""
        return self._response.ok


class HttpCaller(Protocol):
    """Anything that can issue one HTTP call and hand back an ``HttpResponse``-like object."""

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        ...


class HttpClient:
    """
    HTTP client with timeout enforcement and default headers.

    SYNC-CELERY SAFE: All requests have explicit timeouts.

    Usage:
        client = HttpClient(base_url="https://api.github.com")
        response = client.get("/repos/octocat/hello-world", params={"per_page": 10})
        data = response.json()
    """

    def __init__(
        self,
        base_url: str = "",
        default_headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Base URL for all requests
            default_headers: Headers to include in all requests
            timeout: Default timeout in seconds (REQUIRED)
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session

        # Build default headers
        self.headers: Dict[str, str] = dict(default_headers or {})

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """
        Make HTTP request with timeout enforcement.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE, etc.)
            endpoint: URL endpoint (appended to base_url)
            params: Query parameters
            json: JSON body (auto-serialized)
            headers: Additional headers (merged with defaults)
            timeout: Override default timeout

        Returns:
            HttpResponse wrapper

        Raises:
            NodeTimeoutError: If request times out
            HttpApiError: If the request could not be sent
        """
        # Absolute URLs (e.g. pagination links) bypass base_url
        if endpoint.startswith(("http://", "https://")) or not self.base_url:
            url = endpoint
        else:
            url = f"{self.base_url}{endpoint}"

        # Merge headers
        request_headers = {**self.headers, **(headers or {})}

        # Enforce timeout
        request_timeout = timeout or self.timeout

        sender = self._session or requests
        logger.debug("HTTP %s %s params=%s", method, url, params)
        try:
            response = sender.request(
                method=method,
                url=url,
                params=params,
                json=json,
                headers=request_headers,
                timeout=request_timeout,  # REQUIRED for sync-Celery
            )
            logger.debug("HTTP %s %s -> %d", method, url, response.status_code)
            return HttpResponse(response)

        except Timeout as e:
            raise NodeTimeoutError(
                message=f"Request timed out after {request_timeout}s",
                timeout=request_timeout,
                url=url,
            ) from e

        except RequestException as e:
            raise HttpApiError(
                message=f"Request failed: {e}",
                url=url,
                method=method,
            ) from e

    def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> HttpResponse:
        """Make GET request."""
        return self.request("GET", endpoint, params=params, **kwargs)


__all__ = [
    "DEFAULT_TIMEOUT",
    "HttpApiError",
    "HttpCaller",
    "HttpClient",
    "HttpResponse",
    "NodeTimeoutError",
]
