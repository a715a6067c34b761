"""
Error taxonomy for the Vipps login client.

Every failure surfaced by this package is a ProviderError carrying an
ErrorCategory. There is a single exception type: callers branch
on ``error.category`` instead of on a class hierarchy.

User-facing text is produced only by get_user_message(), so status codes
and provider error identifiers never reach the browser.

Example:
    >>> try:
    ...     client.exchange_code(code, verifier, redirect_uri)
    ... except ProviderError as e:
    ...     if e.category is ErrorCategory.INVALID_GRANT:
    ...         show(e.user_message)
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from enum import Enum
from typing import Any

import httpx


class ErrorCategory(str, Enum):
    """Failure categories for the login client.

    Grouped by how a caller should react:
    - setup faults: fatal, fail before any network call
    - protocol rejections: not retryable, ask the user to log in again
    - provider/transport faults: retried per policy, then surfaced
    - PKCE integrity faults: security relevant, never retried
    """

    # Configuration errors
    MISSING_CONFIG = "MISSING_CONFIG"
    INVALID_CONFIG = "INVALID_CONFIG"
    CLIENT_SIDE_ACCESS = "CLIENT_SIDE_ACCESS"

    # OAuth errors
    INVALID_CODE = "INVALID_CODE"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_GRANT = "INVALID_GRANT"

    # API errors
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"

    # PKCE errors
    INVALID_CODE_VERIFIER = "INVALID_CODE_VERIFIER"
    INVALID_CODE_CHALLENGE = "INVALID_CODE_CHALLENGE"

    # User info errors
    USER_INFO_ERROR = "USER_INFO_ERROR"

    UNKNOWN = "UNKNOWN"


CONFIG_CATEGORIES = frozenset(
    {
        ErrorCategory.MISSING_CONFIG,
        ErrorCategory.INVALID_CONFIG,
        ErrorCategory.CLIENT_SIDE_ACCESS,
    }
)

PKCE_CATEGORIES = frozenset(
    {
        ErrorCategory.INVALID_CODE_VERIFIER,
        ErrorCategory.INVALID_CODE_CHALLENGE,
    }
)


# Norwegian, user-safe messages. The only place user-facing text is produced.
USER_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.MISSING_CONFIG: "Vipps-konfigurasjon mangler. Kontakt systemadministrator.",
    ErrorCategory.INVALID_CONFIG: "Ugyldig Vipps-konfigurasjon. Kontakt systemadministrator.",
    ErrorCategory.CLIENT_SIDE_ACCESS: "Vipps-konfigurasjon kan ikke aksesseres fra klientsiden.",
    ErrorCategory.INVALID_CODE: "Ugyldig autorisasjonskode fra Vipps.",
    ErrorCategory.INVALID_TOKEN: "Ugyldig eller utløpt Vipps-token.",
    ErrorCategory.TOKEN_EXPIRED: "Vipps-innloggingen har utløpt. Vennligst logg inn på nytt.",
    ErrorCategory.INVALID_GRANT: "Ugyldig autorisasjon. Vennligst prøv å logge inn på nytt.",
    ErrorCategory.API_ERROR: "Feil ved kommunikasjon med Vipps. Prøv igjen senere.",
    ErrorCategory.NETWORK_ERROR: (
        "Nettverksfeil ved tilkobling til Vipps. Sjekk internettforbindelsen din."
    ),
    ErrorCategory.TIMEOUT_ERROR: "Forespørselen til Vipps tok for lang tid. Prøv igjen.",
    ErrorCategory.RATE_LIMIT_ERROR: (
        "For mange forespørsler til Vipps. Vennligst vent litt før du prøver igjen."
    ),
    ErrorCategory.INVALID_CODE_VERIFIER: (
        "Ugyldig PKCE-verifiseringskode. Prøv å logge inn på nytt."
    ),
    ErrorCategory.INVALID_CODE_CHALLENGE: "Ugyldig PKCE-utfordringskode. Prøv å logge inn på nytt.",
    ErrorCategory.USER_INFO_ERROR: "Kunne ikke hente brukerinformasjon fra Vipps.",
    ErrorCategory.UNKNOWN: "En ukjent feil oppstod. Vennligst prøv igjen.",
}


def get_user_message(category: ErrorCategory) -> str:
    """Return the localized, user-safe message for an error category."""
    return USER_MESSAGES.get(category, USER_MESSAGES[ErrorCategory.UNKNOWN])


class ProviderError(Exception):
    """Classified failure raised by every component of this package.

    Attributes:
        category: ErrorCategory describing the failure
        message: Diagnostic message (for logs, not for end users)
        status_code: HTTP status from the provider, if any
        details: Structured details (OAuth error fields, wrapped cause, ...)
        retryable: Whether the retry policy may attempt the call again
        timestamp: Creation time (seconds since the epoch)
    """

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        *,
        status_code: int | None = None,
        details: Any = None,
        retryable: bool = False,
    ) -> None:
        self.category = category
        self.message = message
        self.status_code = status_code
        self.details = details
        self.retryable = retryable
        self.timestamp = time.time()
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return get_user_message(self.category)

    @property
    def is_config_error(self) -> bool:
        return self.category in CONFIG_CATEGORIES

    @property
    def is_security_error(self) -> bool:
        return self.category in PKCE_CATEGORIES

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict (details are stringified)."""
        details = self.details
        if isinstance(details, BaseException):
            details = f"{type(details).__name__}: {details}"
        return {
            "category": self.category.value,
            "message": self.message,
            "status_code": self.status_code,
            "details": details,
            "retryable": self.retryable,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return (
            f"ProviderError(category={self.category.value}, message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )


# =============================================================================
# HTTP classification
# =============================================================================

# Provider OAuth "error" identifiers (RFC 6749 Section 5.2). Anything else is ApiError.
OAUTH_ERROR_CATEGORIES: dict[str, ErrorCategory] = {
    "invalid_grant": ErrorCategory.INVALID_GRANT,
    "access_denied": ErrorCategory.INVALID_GRANT,
    "expired_token": ErrorCategory.TOKEN_EXPIRED,
}


def _is_retryable_status(status: int) -> bool:
    return status == 429 or status >= 500


def classify_http_failure(status: int, body: Any = None) -> ProviderError:
    """Classify a non-2xx provider response.

    An OAuth error body takes precedence over the status code and is never
    retryable: the provider has already made a decision about the request.

    Args:
        status: HTTP status code
        body: Parsed JSON body, if the response had one

    Returns:
        ProviderError for the failure
    """
    if isinstance(body, Mapping) and body.get("error"):
        error = str(body["error"])
        description = body.get("error_description")
        category = OAUTH_ERROR_CATEGORIES.get(error, ErrorCategory.API_ERROR)
        return ProviderError(
            category,
            str(description or error),
            status_code=status,
            details={
                "error": error,
                "error_description": description,
                "error_uri": body.get("error_uri"),
            },
        )

    if status == 429:
        category = ErrorCategory.RATE_LIMIT_ERROR
    elif status in (401, 403):
        category = ErrorCategory.INVALID_TOKEN
    elif status in (408, 504):
        category = ErrorCategory.TIMEOUT_ERROR
    else:
        category = ErrorCategory.API_ERROR

    message = f"API request failed with status {status}"
    if isinstance(body, Mapping) and body.get("error_description"):
        message = str(body["error_description"])

    return ProviderError(
        category,
        message,
        status_code=status,
        details=body,
        retryable=_is_retryable_status(status),
    )


# =============================================================================
# Transport classification
# =============================================================================

_NETWORK_SIGNATURES = (
    "network",
    "connection",
    "econnrefused",
    "econnreset",
    "fetch",
    "name resolution",
    "unreachable",
)


def classify_transport_failure(exc: BaseException) -> ProviderError:
    """Classify an exception raised while sending a request.

    Timeouts and cancellation are not retryable; network failures and
    unrecognised transport errors are.
    """
    if isinstance(exc, ProviderError):
        return exc

    if isinstance(exc, httpx.TimeoutException):
        return ProviderError(ErrorCategory.TIMEOUT_ERROR, "Request timed out", details=exc)

    if isinstance(exc, (httpx.NetworkError, httpx.RemoteProtocolError, ConnectionError)):
        return ProviderError(
            ErrorCategory.NETWORK_ERROR,
            str(exc) or "Network error occurred",
            details=exc,
            retryable=True,
        )

    text = f"{type(exc).__name__} {exc}".lower()
    if any(signature in text for signature in _NETWORK_SIGNATURES):
        return ProviderError(
            ErrorCategory.NETWORK_ERROR,
            str(exc) or "Network error occurred",
            details=exc,
            retryable=True,
        )

    return ProviderError(
        ErrorCategory.UNKNOWN,
        str(exc) or type(exc).__name__,
        details=exc,
        retryable=True,
    )


def coerce_error(error: object) -> ProviderError:
    """Convert anything raised or returned as an error into a ProviderError."""
    if isinstance(error, ProviderError):
        return error
    if isinstance(error, BaseException):
        return ProviderError(ErrorCategory.UNKNOWN, str(error) or type(error).__name__, details=error)
    if isinstance(error, str):
        return ProviderError(ErrorCategory.UNKNOWN, error)
    return ProviderError(ErrorCategory.UNKNOWN, "An unknown error occurred", details=error)


def config_error(message: str, category: ErrorCategory = ErrorCategory.INVALID_CONFIG) -> ProviderError:
    """Build a configuration error (MissingConfig, InvalidConfig or ClientSideAccess)."""
    if category not in CONFIG_CATEGORIES:
        raise ValueError(f"{category.value} is not a configuration category")
    return ProviderError(category, message)


__all__ = [
    "ErrorCategory",
    "ProviderError",
    "USER_MESSAGES",
    "OAUTH_ERROR_CATEGORIES",
    "get_user_message",
    "classify_http_failure",
    "classify_transport_failure",
    "coerce_error",
    "config_error",
]
