"""
HTTP client for the OnlineSchool backend.

This module provides a thin wrapper around ``requests.Session`` with:
- Bearer token authentication on every request
- Result<T> return values instead of exceptions
- Mapping of HTTP status codes onto ErrorKind
- Verbatim extraction of the backend's ``{"error": "..."}`` message
"""

import logging
from typing import Any, Dict, Optional

import requests

from .interfaces import ApiTransport
from ..models.result import ErrorKind, Result
from ..utils.config import DEFAULT_API_URL, SecureString


logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    Error response from the backend.

    Attributes:
        status_code: HTTP status code
        server_message: The body's ``error`` (or ``detail``) text, if any
        payload: Decoded response body, if it was JSON
    """

    def __init__(
        self,
        status_code: int,
        server_message: Optional[str] = None,
        payload: Any = None
    ):
        self.status_code = status_code
        self.server_message = server_message
        self.payload = payload
        super().__init__(server_message or f"HTTP {status_code}")


def kind_for_status(status_code: int) -> ErrorKind:
    """
    Classify an HTTP error status.

    Examples:
        >>> kind_for_status(409)
        <ErrorKind.BUSINESS_RULE: 'business_rule'>
        >>> kind_for_status(503)
        <ErrorKind.SERVER: 'server'>
    """
    if status_code == 400:
        return ErrorKind.VALIDATION
    if status_code in (401, 403):
        return ErrorKind.AUTH
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code >= 500:
        return ErrorKind.SERVER
    return ErrorKind.BUSINESS_RULE


def extract_error_message(payload: Any) -> Optional[str]:
    """
    Pull the human-readable error out of an error body.

    ``error`` is preferred; ``detail`` is the framework default and is
    used when ``error`` is absent.
    """
    if isinstance(payload, dict):
        for key in ("error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return None


def failure_message(result: Result, fallback: str) -> str:
    """
    Message to show the user for a failed result.

    The server's own error text is shown verbatim when it sent one;
    anything else (network failure, bare 500) gets ``fallback``.
    Client-side validation failures keep their own message.
    """
    if isinstance(result.error, ApiError) and result.error.server_message:
        return result.error.server_message
    if result.error is None and result.kind == ErrorKind.VALIDATION and result.message:
        return result.message
    return fallback


class ApiClient(ApiTransport):
    """
    requests-based implementation of ApiTransport.

    No retries are attempted and no timeout is applied unless one is
    configured; an in-flight request runs to completion.

    Examples:
        >>> client = ApiClient("http://127.0.0.1:8000")
        >>> client.set_token(SecureString("eyJ..."))
        >>> result = client.get("/api/teacher/lesson-history/")
        >>> if result.is_failure:
        ...     print(result.kind, result.message)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: Optional[SecureString] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize ApiClient.

        Args:
            base_url: Backend base URL
            token: Bearer access token (optional, can be set later)
            timeout: Per-request timeout in seconds (None = wait forever)
            session: Pre-built requests session (mainly for tests)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        self._token: Optional[SecureString] = None

        if token:
            self.set_token(token)

        logger.info(f"ApiClient initialized with base_url: {self.base_url}")

    @property
    def has_token(self) -> bool:
        return self._token is not None

    def set_token(self, token: SecureString):
        """Attach ``Authorization: Bearer <token>`` to every request."""
        self._token = token
        self.session.headers["Authorization"] = f"Bearer {token.get_value()}"
        logger.debug("Bearer token set")

    def clear_token(self):
        self._token = None
        self.session.headers.pop("Authorization", None)
        logger.debug("Bearer token cleared")

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Result[Any]:
        """
        Send a request and wrap the outcome in a Result.

        Args:
            method: HTTP method
            path: Endpoint path or absolute URL
            payload: JSON body
            params: Query parameters

        Returns:
            Result with the decoded JSON body (None for an empty body)
        """
        url = self._url(path)
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                params=params,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            return Result.failure(
                f"Network error: could not reach {self.base_url}",
                e,
                kind=ErrorKind.TRANSPORT
            )

        body, decode_error = self._decode(response)

        if not response.ok:
            server_message = extract_error_message(body)
            error = ApiError(response.status_code, server_message, body)
            kind = kind_for_status(response.status_code)
            logger.warning(
                f"{method} {path} -> {response.status_code} ({kind.value}): "
                f"{server_message or response.reason}"
            )
            return Result.failure(
                server_message or f"HTTP {response.status_code} {response.reason}".strip(),
                error,
                kind=kind,
                status_code=response.status_code
            )

        if decode_error is not None:
            logger.error(f"{method} {path} returned a non-JSON body")
            return Result.failure(
                "Server returned an unreadable response",
                decode_error,
                kind=ErrorKind.TRANSPORT,
                status_code=response.status_code
            )

        return Result.success(body, f"{method} {path} -> {response.status_code}")

    @staticmethod
    def _decode(response: requests.Response):
        """Return (body, error). An empty body decodes to None."""
        if response.status_code == 204 or not response.content:
            return None, None
        try:
            return response.json(), None
        except ValueError as e:
            return None, e

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Result[Any]:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Result[Any]:
        return self.request("POST", path, payload=payload or {})

    def patch(self, path: str, payload: Dict[str, Any]) -> Result[Any]:
        return self.request("PATCH", path, payload=payload)

    def delete(self, path: str) -> Result[Any]:
        return self.request("DELETE", path)

    def close(self):
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> 'ApiClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
