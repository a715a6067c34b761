"""
Validation utilities for the Vipps login client.

Reusable field validators shared by configuration loading and the
protocol client. All of them raise ProviderError with a category chosen
by the caller, so a blank environment variable becomes MissingConfig
while a blank authorization code becomes InvalidCode.

Example:
    >>> validate_url("http://example.com/cb", "PROVIDER_REDIRECT_URI", require_https=True)
    ProviderError: Invalid 'PROVIDER_REDIRECT_URI': URL must use HTTPS scheme (got 'http://...')
"""

from __future__ import annotations

import urllib.parse

from .errors import ErrorCategory, ProviderError

# =============================================================================
# STRING VALIDATION
# =============================================================================


def validate_string(
    value: object,
    field_name: str,
    category: ErrorCategory = ErrorCategory.INVALID_CONFIG,
) -> str:
    """Validate that value is a non-blank string and return it trimmed.

    The offending value is never echoed back: these fields are often
    secrets (client secret, tokens).

    Args:
        value: The value to validate
        field_name: Name of the field (for error messages)
        category: Category of the raised error

    Returns:
        The trimmed string

    Raises:
        ProviderError: If value is not a string or is blank
    """
    if not isinstance(value, str):
        raise ProviderError(
            category, f"Invalid {field_name!r}: must be str, got {type(value).__name__}"
        )

    trimmed = value.strip()
    if not trimmed:
        raise ProviderError(category, f"Invalid {field_name!r}: must be a non-empty string")

    return trimmed


# =============================================================================
# RANGE VALIDATION
# =============================================================================


def validate_range(
    value: float,
    field_name: str,
    min_value: float | None = None,
    max_value: float | None = None,
    category: ErrorCategory = ErrorCategory.INVALID_CONFIG,
) -> None:
    """Validate that a number is within the specified range (inclusive).

    Raises:
        ProviderError: If value is not a number or is outside the range

    Example:
        >>> validate_range(500, "PROVIDER_HTTP_TIMEOUT", min_value=1, max_value=300)
        ProviderError: Invalid 'PROVIDER_HTTP_TIMEOUT': must be at most 300 (got 500)
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ProviderError(
            category, f"Invalid {field_name!r}: must be a number, got {type(value).__name__}"
        )

    if min_value is not None and value < min_value:
        raise ProviderError(
            category, f"Invalid {field_name!r}: must be at least {min_value} (got {value!r})"
        )

    if max_value is not None and value > max_value:
        raise ProviderError(
            category, f"Invalid {field_name!r}: must be at most {max_value} (got {value!r})"
        )


# =============================================================================
# FORMAT VALIDATION
# =============================================================================


def validate_url(
    value: str,
    field_name: str,
    require_https: bool = False,
    category: ErrorCategory = ErrorCategory.INVALID_CONFIG,
) -> str:
    """Validate that value is a well-formed absolute URL.

    Args:
        value: URL string to validate
        field_name: Name of the field (for error messages)
        require_https: If True, only HTTPS URLs are allowed
        category: Category of the raised error

    Returns:
        The validated URL string

    Raises:
        ProviderError: If URL is malformed or has the wrong scheme
    """
    value = validate_string(value, field_name, category)

    try:
        parsed = urllib.parse.urlparse(value)
        # Accessing .port validates the port component
        parsed.port  # noqa: B018
    except ValueError as e:
        raise ProviderError(
            category, f"Invalid {field_name!r}: malformed URL: {e} (got {value!r})"
        ) from e

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ProviderError(
            category, f"Invalid {field_name!r}: URL must have http(s) scheme and host (got {value!r})"
        )

    if require_https and parsed.scheme != "https":
        raise ProviderError(
            category, f"Invalid {field_name!r}: URL must use HTTPS scheme (got {value!r})"
        )

    return value


def validate_choice(
    value: str,
    field_name: str,
    choices: tuple[str, ...],
    category: ErrorCategory = ErrorCategory.INVALID_CONFIG,
) -> str:
    """Validate that value is exactly one of ``choices`` (case-sensitive)."""
    if value not in choices:
        allowed = " or ".join(repr(choice) for choice in choices)
        raise ProviderError(category, f"{field_name} must be either {allowed}, got: {value!r}")
    return value


__all__ = [
    "validate_string",
    "validate_range",
    "validate_url",
    "validate_choice",
]
