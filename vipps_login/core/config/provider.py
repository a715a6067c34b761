"""Provider configuration loading and validation.

Configuration is always read from an explicit key/value source. Only the
CLI passes ``os.environ``; library callers construct their own mapping (or
call load_config_from_env at their outermost layer) and inject the
resulting ProviderConfig into the protocol client.

Example:
    >>> config = load_config(
    ...     {
    ...         "PROVIDER_CLIENT_ID": "client-id",
    ...         "PROVIDER_CLIENT_SECRET": "secret",
    ...         "PROVIDER_MERCHANT_ID": "123456",
    ...         "PROVIDER_SUBSCRIPTION_KEY": "sub-key",
    ...         "PROVIDER_REDIRECT_URI": "https://example.com/auth/callback",
    ...         "PROVIDER_ENVIRONMENT": "test",
    ...     }
    ... )
    >>> config.endpoints.token
    'https://apitest.vipps.no/access-management-1.0/access/oauth2/token'
"""

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from vipps_login.core.config.schema import ClientSchema, EnvVarSpec, ProviderSchema
from vipps_login.core.oauth.constants import Environments, ProviderEndpoints, get_endpoints
from vipps_login.core.oauth.errors import ErrorCategory, ProviderError, config_error
from vipps_login.core.oauth.http_client import HttpClientConfig
from vipps_login.core.oauth.validation import validate_choice, validate_string, validate_url

_logger = logging.getLogger(__name__)

# Modules that only exist when Python runs inside a browser (Pyodide/PyScript)
_BROWSER_BRIDGE_MODULES = ("pyodide", "js", "pyscript")


@dataclass(frozen=True)
class ProviderConfig:
    """Validated provider credentials and endpoints selection.

    Construction validates every field, so an instance is always usable.
    The client secret and subscription key are hidden from ``repr``.

    Raises:
        ProviderError: MISSING_CONFIG for blank fields, INVALID_CONFIG otherwise
    """

    client_id: str
    client_secret: str = field(repr=False)
    merchant_serial_number: str
    subscription_key: str = field(repr=False)
    redirect_uri: str
    environment: str

    def __post_init__(self) -> None:
        for spec, attr in _FIELD_SPECS:
            trimmed = validate_string(
                getattr(self, attr), spec.name, category=ErrorCategory.MISSING_CONFIG
            )
            object.__setattr__(self, attr, trimmed)

        validate_choice(self.environment, ProviderSchema.PROVIDER_ENVIRONMENT.name, Environments.ALL)
        validate_url(
            self.redirect_uri,
            ProviderSchema.PROVIDER_REDIRECT_URI.name,
            require_https=self.is_production,
        )

    @property
    def is_production(self) -> bool:
        return self.environment == Environments.PRODUCTION

    @property
    def endpoints(self) -> ProviderEndpoints:
        return get_endpoints(self.environment)


_FIELD_SPECS: tuple[tuple[EnvVarSpec, str], ...] = (
    (ProviderSchema.PROVIDER_CLIENT_ID, "client_id"),
    (ProviderSchema.PROVIDER_CLIENT_SECRET, "client_secret"),
    (ProviderSchema.PROVIDER_MERCHANT_ID, "merchant_serial_number"),
    (ProviderSchema.PROVIDER_SUBSCRIPTION_KEY, "subscription_key"),
    (ProviderSchema.PROVIDER_REDIRECT_URI, "redirect_uri"),
    (ProviderSchema.PROVIDER_ENVIRONMENT, "environment"),
)


def is_browser_context() -> bool:
    """Detect Python running inside a web page (Pyodide/Emscripten)."""
    if sys.platform == "emscripten":
        return True
    return any(name in sys.modules for name in _BROWSER_BRIDGE_MODULES)


def assert_server_context() -> None:
    """Refuse to handle provider credentials outside a server process.

    Raises:
        ProviderError: CLIENT_SIDE_ACCESS in a browser execution context
    """
    if is_browser_context():
        raise config_error(
            "Provider configuration cannot be accessed from a browser context",
            ErrorCategory.CLIENT_SIDE_ACCESS,
        )


def load_config(source: Mapping[str, str]) -> ProviderConfig:
    """Build a validated ProviderConfig from a key/value source.

    Args:
        source: Mapping of environment variable names to values

    Returns:
        The validated, immutable configuration

    Raises:
        ProviderError: CLIENT_SIDE_ACCESS, MISSING_CONFIG or INVALID_CONFIG
    """
    assert_server_context()

    missing = [
        spec.name
        for spec in ProviderSchema.REQUIRED
        if not isinstance(source.get(spec.name), str) or not source[spec.name].strip()
    ]
    if missing:
        raise config_error(
            f"Missing required configuration: {', '.join(missing)}",
            ErrorCategory.MISSING_CONFIG,
        )

    values = {attr: source[spec.name] for spec, attr in _FIELD_SPECS}
    return ProviderConfig(**values)


def load_config_from_env() -> ProviderConfig:
    """Build a ProviderConfig from the process environment."""
    return load_config(os.environ)


def is_configured(source: Mapping[str, str]) -> bool:
    """Return True if ``source`` holds a complete, valid configuration."""
    try:
        load_config(source)
    except ProviderError as e:
        _logger.debug("Provider configuration is not usable: %s", e.message)
        return False
    return True


def load_env_var(spec: EnvVarSpec, source: Mapping[str, str]) -> Any:
    """Load, coerce and validate one optional variable from ``source``.

    Blank values fall back to the default.

    Raises:
        ProviderError: INVALID_CONFIG if coercion or validation fails
    """
    raw_value = source.get(spec.name)
    if raw_value is None or not raw_value.strip():
        return spec.default

    raw_value = raw_value.strip()
    try:
        if spec.type_hint is int:
            value: Any = int(raw_value)
        elif spec.type_hint is float:
            value = float(raw_value)
        else:
            value = raw_value
    except (ValueError, TypeError) as e:
        raise config_error(
            f"{spec.name}={raw_value}: Cannot convert to {spec.type_hint.__name__}: {e}"
        ) from e

    if spec.validator is not None and not spec.validator(value):
        raise config_error(f"{spec.name}={raw_value}: {spec.description}")

    return value


def load_client_settings(source: Mapping[str, str]) -> HttpClientConfig:
    """Read optional transport tuning variables into an HttpClientConfig.

    Raises:
        ProviderError: INVALID_CONFIG for non-numeric or out-of-range values
    """
    return HttpClientConfig(
        timeout=load_env_var(ClientSchema.PROVIDER_HTTP_TIMEOUT, source),
        retries=load_env_var(ClientSchema.PROVIDER_HTTP_RETRIES, source),
        retry_delay=load_env_var(ClientSchema.PROVIDER_RETRY_DELAY, source),
    )


def describe_config(config: ProviderConfig) -> list[tuple[str, str, str]]:
    """Return (variable, label, display value) rows with secrets masked."""
    rows = []
    for spec, attr in _FIELD_SPECS:
        value = getattr(config, attr)
        if spec.secret:
            value = _mask(value)
        rows.append((spec.name, spec.display_name, value))
    return rows


def _mask(value: str) -> str:
    return f"******** ({len(value)} chars)"


__all__ = [
    "ProviderConfig",
    "is_browser_context",
    "assert_server_context",
    "load_config",
    "load_config_from_env",
    "is_configured",
    "load_env_var",
    "load_client_settings",
    "describe_config",
]
