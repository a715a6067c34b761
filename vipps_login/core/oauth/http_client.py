"""
HTTP client abstraction for the Vipps login client.

Provides a testable, observable interface for single HTTP attempts using
httpx as the default implementation. Retries and deadlines are handled by
the protocol client (see retry.py), so a transport only ever performs one
request and either returns a response of any status or raises the
underlying httpx exception.
"""

from __future__ import annotations

import abc
import json
import logging
import threading
import time
import typing
from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx

from .constants import ClientDefaults, ValidationLimits
from .validation import validate_range

_logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class HttpClientConfig:
    """Configuration for transport and retry behaviour.

    Attributes:
        timeout: Budget in seconds for one client call (all attempts included)
        retries: Additional attempts after the first (0 to disable)
        retry_delay: Base delay in seconds; attempt N waits N * retry_delay
        enable_logging: Enable debug logging of requests/responses

    Raises:
        ProviderError: INVALID_CONFIG if any value is out of range
    """

    timeout: float = ClientDefaults.HTTP_REQUEST_TIMEOUT
    retries: int = ClientDefaults.RETRIES
    retry_delay: float = ClientDefaults.RETRY_DELAY
    enable_logging: bool = True

    def __post_init__(self) -> None:
        validate_range(
            self.timeout,
            "timeout",
            min_value=ValidationLimits.MIN_TIMEOUT_SECONDS,
            max_value=ValidationLimits.MAX_TIMEOUT_SECONDS,
        )
        validate_range(self.retries, "retries", min_value=0, max_value=ValidationLimits.MAX_RETRIES)
        validate_range(
            self.retry_delay,
            "retry_delay",
            min_value=0,
            max_value=ValidationLimits.MAX_RETRY_DELAY_SECONDS,
        )


# =============================================================================
# Response
# =============================================================================


@dataclass
class HttpResponse:
    """HTTP response wrapper adapting httpx.Response to our interface."""

    _raw: httpx.Response
    _text: str | None = field(init=False, default=None)

    @property
    def status_code(self) -> int:
        return self._raw.status_code

    @property
    def ok(self) -> bool:
        return 200 <= self._raw.status_code < 300

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._raw.headers)

    @property
    def body(self) -> bytes:
        return self._raw.content

    @property
    def text(self) -> str:
        if self._text is None:
            self._text = self._raw.text
        return self._text

    def json(self) -> typing.Any:
        return self._raw.json()

    def json_or_none(self) -> typing.Any:
        """Parse a JSON error body, or return None if there is none."""
        content_type = self._raw.headers.get("content-type", "")
        if "json" not in content_type.lower():
            return None
        try:
            return self._raw.json()
        except ValueError:
            return None


# =============================================================================
# Abstract Client
# =============================================================================


class HttpClient(abc.ABC):
    """Abstract HTTP client.

    Implementations perform exactly one request per call and must not
    raise for non-2xx statuses.
    """

    @abc.abstractmethod
    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Make an HTTP request.

        Args:
            method: HTTP method ("GET" or "POST")
            url: Request URL
            headers: Request headers
            data: Request body as bytes
            timeout: Timeout for this attempt in seconds

        Returns:
            HttpResponse

        Raises:
            httpx.HTTPError: On transport failure (timeout, connection, ...)
        """

    def post(
        self,
        url: str,
        data: bytes,
        headers: dict[str, str],
        timeout: float | None = None,
    ) -> HttpResponse:
        return self.request("POST", url, headers, data=data, timeout=timeout)

    def get(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float | None = None,
    ) -> HttpResponse:
        return self.request("GET", url, headers, timeout=timeout)

    def close(self) -> None:  # noqa: B027
        """Release pooled connections, if any."""


# =============================================================================
# httpx Implementation
# =============================================================================


class HttpxHttpClient(HttpClient):
    """Default HTTP client using httpx.

    Features:
    - Connection pooling via httpx.Client (safe to share between threads)
    - Per-attempt timeout supplied by the caller's deadline, enforced over the
      whole exchange including a slowly streamed body
    - Debug logging that records header names only, never their values

    Example:
        >>> client = HttpxHttpClient()
        >>> response = client.post(
        ...     "https://example.com/token",
        ...     b"grant_type=refresh_token",
        ...     {"Content-Type": "application/x-www-form-urlencoded"},
        ... )
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            config: Client configuration (uses defaults if None)
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.config = config or HttpClientConfig()
        self._client = httpx.Client(
            transport=transport,
            timeout=httpx.Timeout(self.config.timeout),
        )

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        effective_timeout = self.config.timeout if timeout is None else timeout

        if self.config.enable_logging:
            _logger.debug(
                "HTTP %s %s (timeout=%.1fs, headers=%s)",
                method,
                url,
                effective_timeout,
                sorted(headers),
            )

        # httpx timeouts bound each phase and each read, not the whole exchange
        expires_at = time.monotonic() + effective_timeout
        request = self._client.build_request(
            method,
            url,
            content=data,
            headers=headers,
            timeout=httpx.Timeout(effective_timeout),
        )
        streamed = self._client.send(request, stream=True)
        try:
            chunks = []
            self._check_expiry(expires_at, effective_timeout, request)
            for chunk in streamed.iter_raw():
                chunks.append(chunk)
                self._check_expiry(expires_at, effective_timeout, request)
        finally:
            streamed.close()

        response = httpx.Response(
            status_code=streamed.status_code,
            headers=streamed.headers,
            content=b"".join(chunks),
            request=request,
        )

        if self.config.enable_logging:
            _logger.debug(
                "HTTP %s from %s (body=%d bytes)",
                response.status_code,
                url,
                len(response.content),
            )

        return HttpResponse(response)

    @staticmethod
    def _check_expiry(expires_at: float, timeout: float, request: httpx.Request) -> None:
        if time.monotonic() >= expires_at:
            raise httpx.ReadTimeout(
                f"Response not completed within {timeout:.1f}s", request=request
            )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpxHttpClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


# =============================================================================
# Mock Client for Testing
# =============================================================================

ScriptedResponse = typing.Union[httpx.Response, BaseException]


class MockHttpClient(HttpClient):
    """Mock HTTP client for testing.

    Plays back a script of responses (or exceptions to raise) without
    making network requests; the last entry repeats once the script is
    exhausted. Tracks all requests made for test assertions.

    Example:
        >>> mock = MockHttpClient(status_code=200, json_response={"access_token": "test"})
        >>> response = mock.post("https://example.com", b"", {})
        >>> assert response.json()["access_token"] == "test"
        >>> assert len(mock.requests) == 1
    """

    def __init__(
        self,
        status_code: int = 200,
        json_response: typing.Any = None,
        text_response: str = "",
        raise_error: BaseException | type[BaseException] | None = None,
        script: Iterable[ScriptedResponse] | None = None,
    ) -> None:
        """Initialize mock client.

        Args:
            status_code: HTTP status code to return
            json_response: JSON response body
            text_response: Text response body (used if json_response is None)
            raise_error: Exception to raise on every request
            script: Explicit sequence of responses/exceptions (overrides the above)
        """
        if script is not None:
            self._script: list[ScriptedResponse] = list(script)
        elif raise_error is not None:
            error = raise_error() if isinstance(raise_error, type) else raise_error
            self._script = [error]
        else:
            self._script = [_build_response(status_code, json_response, text_response)]

        if not self._script:
            raise ValueError("MockHttpClient script must not be empty")

        self._lock = threading.Lock()
        self.requests: list[dict[str, typing.Any]] = []

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        with self._lock:
            index = min(len(self.requests), len(self._script) - 1)
            self.requests.append(
                {
                    "method": method,
                    "url": url,
                    "data": data,
                    "headers": headers,
                    "timeout": timeout,
                }
            )
            entry = self._script[index]

        if isinstance(entry, BaseException):
            raise entry

        return HttpResponse(
            httpx.Response(
                status_code=entry.status_code,
                headers=entry.headers,
                content=entry.content,
                request=httpx.Request(method, url),
            )
        )


def _build_response(status_code: int, json_response: typing.Any, text_response: str) -> httpx.Response:
    if json_response is not None:
        return httpx.Response(
            status_code=status_code,
            content=json.dumps(json_response).encode(),
            headers={"content-type": "application/json"},
        )
    return httpx.Response(status_code=status_code, content=text_response.encode())


__all__ = [
    "HttpClient",
    "HttpClientConfig",
    "HttpResponse",
    "HttpxHttpClient",
    "MockHttpClient",
]
