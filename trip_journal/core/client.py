"""
Core HTTP client for the Trip Journal API.

Handles authentication headers, request/response encoding and error
classification. Every call is a single-shot async request; there is no
queueing and no retry.
"""

import json
import logging
import os
import urllib.parse
from collections.abc import Callable, Container, Mapping
from typing import Any, Protocol, TypeVar

import httpx

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 30.0
SUCCESS_CODES = range(200, 300)

T = TypeVar("T")


class TripJournalError(Exception):
    """Base error class for Trip Journal errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message, "type": type(self).__name__}
        if self.details:
            result["details"] = self.details
        return result


class APIError(TripJournalError):
    """A request to the backend failed."""

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class InvalidURLError(APIError):
    """The endpoint could not be resolved against the base URL."""


class InvalidResponseError(APIError):
    """No well-formed HTTP response was received."""


class HTTPError(APIError):
    """The server answered with a status outside the success range."""

    def __init__(self, status: int, body: bytes | None = None, message: str | None = None):
        details: dict[str, Any] = {}
        parsed = _parse_error_body(body)
        if isinstance(parsed, dict):
            details = parsed
        super().__init__(message or _error_message(status, parsed), status=status, details=details)
        self.body = body


class DecodingError(APIError):
    """The response body did not match the expected shape."""


class EncodingError(APIError):
    """The request body could not be serialized."""


class ValidationError(TripJournalError):
    """Validation error for local input/data issues (not API errors)."""


class StorageError(TripJournalError):
    """The keyring or a local file could not be read or written."""


def _parse_error_body(body: bytes | None) -> Any:
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


def _error_message(status: int, parsed: Any) -> str:
    # FastAPI uses {"detail": ...}; other backends use {"error": "..."} or {"error": {"message": "..."}}
    if isinstance(parsed, dict):
        for key in ("detail", "error", "message"):
            value = parsed.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return f"Server error ({status})"


class TokenSource(Protocol):
    """Anything that can supply the current bearer token."""

    @property
    def access_token(self) -> str | None: ...


class APIClient:
    """
    Low-level async HTTP client for the Trip Journal API.

    Handles:
    - Bearer authentication from the attached session
    - JSON and form-encoded request bodies
    - Status validation and response decoding
    - Error classification (see APIError subclasses)
    """

    def __init__(
        self,
        session: TokenSource | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        event_hooks: Mapping[str, list[Callable[..., Any]]] | None = None,
    ):
        """
        Initialize the API client.

        Args:
            session: Token holder consulted before every request
            base_url: API base URL (or TRIP_JOURNAL_BASE_URL env var)
            timeout: Request timeout in seconds (or TRIP_JOURNAL_TIMEOUT env var)
            transport: Custom httpx transport (tests, proxies)
            event_hooks: httpx event hooks for request/response logging

        """
        self.session = session
        self.base_url = (base_url or os.environ.get("TRIP_JOURNAL_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        if timeout is None:
            timeout = float(os.environ.get("TRIP_JOURNAL_TIMEOUT", DEFAULT_TIMEOUT))
        self.timeout = timeout
        self._transport = transport
        self._event_hooks = {key: list(hooks) for key, hooks in (event_hooks or {}).items()}

    def _build_url(self, path: str) -> httpx.URL:
        """Resolve path against the base URL."""
        try:
            url = httpx.URL(f"{self.base_url}/{path.lstrip('/')}")
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidURLError(f"Invalid URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidURLError(f"Invalid URL: {self.base_url}/{path.lstrip('/')}")
        return url

    def _build_headers(self, headers: Mapping[str, str] | None) -> httpx.Headers:
        request_headers = httpx.Headers(headers or {})
        if "Accept" not in request_headers:
            request_headers["Accept"] = "application/json"
        token = self.session.access_token if self.session is not None else None
        if token and "Authorization" not in request_headers:
            request_headers["Authorization"] = f"Bearer {token}"
        return request_headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        form: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        parser: Callable[[Any], T] | None = None,
        success_codes: Container[int] = SUCCESS_CODES,
        discard: bool = False,
    ) -> Any:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path relative to the base URL (e.g., /trips/1)
            json: JSON-serializable request body
            form: Form fields, sent as application/x-www-form-urlencoded
            headers: Extra headers; Accept/Authorization are not overridden
            parser: Function turning the decoded JSON into a typed result
            success_codes: Status codes treated as success
            discard: Ignore the response body (delete operations)

        Returns:
            Parsed result, raw JSON if no parser, or None when discarding

        Raises:
            InvalidURLError, EncodingError, InvalidResponseError, HTTPError, DecodingError

        """
        url = self._build_url(path)
        request_headers = self._build_headers(headers)

        content: bytes | None = None
        if json is not None:
            try:
                content = _json_dumps(json)
            except (TypeError, ValueError) as e:
                raise EncodingError(f"Encoding error: {e}") from e
            request_headers["Content-Type"] = "application/json"
        elif form is not None:
            content = urllib.parse.urlencode(form).encode("utf-8")
            request_headers["Content-Type"] = "application/x-www-form-urlencoded"

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.timeout,
                event_hooks=self._event_hooks,
            ) as client:
                response = await client.request(method, url, content=content, headers=request_headers)
        except httpx.InvalidURL as e:
            raise InvalidURLError(f"Invalid URL: {e}") from e
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise InvalidResponseError(f"Invalid server response: {e}") from e

        logger.debug("%s %s -> %s", method, url, response.status_code)

        if response.status_code not in success_codes:
            logger.warning("%s %s returned %s", method, url, response.status_code)
            raise HTTPError(response.status_code, response.content)

        if discard:
            return None

        try:
            data = response.json()
        except ValueError as e:
            raise DecodingError(f"Decoding error: {e}", status=response.status_code) from e

        if parser is None:
            return data

        try:
            return parser(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DecodingError(f"Decoding error: {e!r}", status=response.status_code) from e

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    async def get(self, path: str, parser: Callable[[Any], T] | None = None) -> Any:
        """Make a GET request."""
        return await self.request("GET", path, parser=parser)

    async def post(self, path: str, data: Any = None, parser: Callable[[Any], T] | None = None) -> Any:
        """Make a POST request with a JSON body."""
        return await self.request("POST", path, json=data, parser=parser)

    async def post_form(
        self, path: str, form: Mapping[str, str], parser: Callable[[Any], T] | None = None
    ) -> Any:
        """Make a POST request with a form-encoded body."""
        return await self.request("POST", path, form=form, parser=parser)

    async def put(self, path: str, data: Any = None, parser: Callable[[Any], T] | None = None) -> Any:
        """Make a PUT request with a JSON body."""
        return await self.request("PUT", path, json=data, parser=parser)

    async def delete(self, path: str) -> None:
        """Make a DELETE request, discarding the body."""
        await self.request("DELETE", path, discard=True)


def _json_dumps(payload: Any) -> bytes:
    return json.dumps(payload, allow_nan=False).encode("utf-8")
