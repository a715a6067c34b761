"""Declarative schema for environment variable configuration.

This module provides a single source of truth for every environment
variable the login client reads, including type coercion, validation and
documentation generation.

The schema-based approach provides:
- Single definition point for all config options
- Automatic type coercion (str -> int/float)
- Validation with clear error messages
- Self-documenting configuration (``vipps-login config docs``)
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from vipps_login.core.oauth.constants import ClientDefaults, Environments, ValidationLimits


@dataclass(frozen=True)
class EnvVarSpec:
    """Specification for a single environment variable.

    Attributes:
        name: Environment variable name (e.g., "PROVIDER_CLIENT_ID")
        default: Default value if env var not set (ignored when required)
        type_hint: Type for coercion (int, str, float)
        description: Human-readable description for docs
        display_name: Short label used in error messages and tables
        required: Whether a missing or blank value is a MissingConfig error
        secret: Whether the value must be masked when displayed
        validator: Optional custom validation function
    """

    name: str
    default: Any
    type_hint: type
    description: str
    display_name: str = ""
    required: bool = False
    secret: bool = False
    validator: Callable[[Any], bool] | None = None


class ProviderSchema:
    """Registry of provider credentials and endpoints configuration."""

    PROVIDER_CLIENT_ID = EnvVarSpec(
        name="PROVIDER_CLIENT_ID",
        default=None,
        type_hint=str,
        description="OAuth client ID issued by the provider",
        display_name="Client ID",
        required=True,
    )

    PROVIDER_CLIENT_SECRET = EnvVarSpec(
        name="PROVIDER_CLIENT_SECRET",
        default=None,
        type_hint=str,
        description="OAuth client secret (server-side only)",
        display_name="Client Secret",
        required=True,
        secret=True,
    )

    PROVIDER_MERCHANT_ID = EnvVarSpec(
        name="PROVIDER_MERCHANT_ID",
        default=None,
        type_hint=str,
        description="Merchant serial number sent as the Merchant-Serial-Number header",
        display_name="Merchant Serial Number",
        required=True,
    )

    PROVIDER_SUBSCRIPTION_KEY = EnvVarSpec(
        name="PROVIDER_SUBSCRIPTION_KEY",
        default=None,
        type_hint=str,
        description="API subscription key sent as the Ocp-Apim-Subscription-Key header",
        display_name="Subscription Key",
        required=True,
        secret=True,
    )

    PROVIDER_REDIRECT_URI = EnvVarSpec(
        name="PROVIDER_REDIRECT_URI",
        default=None,
        type_hint=str,
        description="OAuth redirect URI (must use HTTPS in production)",
        display_name="Redirect URI",
        required=True,
    )

    PROVIDER_ENVIRONMENT = EnvVarSpec(
        name="PROVIDER_ENVIRONMENT",
        default=None,
        type_hint=str,
        description="Provider environment: 'test' or 'production'",
        display_name="Environment",
        required=True,
        validator=lambda x: x in Environments.ALL,
    )

    # Order in which required variables are checked and displayed
    REQUIRED = (
        PROVIDER_CLIENT_ID,
        PROVIDER_CLIENT_SECRET,
        PROVIDER_MERCHANT_ID,
        PROVIDER_SUBSCRIPTION_KEY,
        PROVIDER_REDIRECT_URI,
        PROVIDER_ENVIRONMENT,
    )


class ClientSchema:
    """Registry of transport tuning options for the protocol client."""

    PROVIDER_HTTP_TIMEOUT = EnvVarSpec(
        name="PROVIDER_HTTP_TIMEOUT",
        default=ClientDefaults.HTTP_REQUEST_TIMEOUT,
        type_hint=float,
        description="Timeout in seconds for one client call, shared by all its attempts",
        display_name="HTTP Timeout",
        validator=lambda x: (
            ValidationLimits.MIN_TIMEOUT_SECONDS <= x <= ValidationLimits.MAX_TIMEOUT_SECONDS
        ),
    )

    PROVIDER_HTTP_RETRIES = EnvVarSpec(
        name="PROVIDER_HTTP_RETRIES",
        default=ClientDefaults.RETRIES,
        type_hint=int,
        description="Additional attempts after the first for transient failures",
        display_name="HTTP Retries",
        validator=lambda x: 0 <= x <= ValidationLimits.MAX_RETRIES,
    )

    PROVIDER_RETRY_DELAY = EnvVarSpec(
        name="PROVIDER_RETRY_DELAY",
        default=ClientDefaults.RETRY_DELAY,
        type_hint=float,
        description="Base backoff delay in seconds (attempt N waits N times this)",
        display_name="Retry Delay",
        validator=lambda x: 0 <= x <= ValidationLimits.MAX_RETRY_DELAY_SECONDS,
    )

    LOG_LEVEL = EnvVarSpec(
        name="LOG_LEVEL",
        default="INFO",
        type_hint=str,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        display_name="Log Level",
        validator=lambda x: x.split()[0].upper() in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )


def all_specs() -> dict[str, EnvVarSpec]:
    """Get all environment variable specifications keyed by variable name."""
    specs: dict[str, EnvVarSpec] = {}
    for registry in (ProviderSchema, ClientSchema):
        for attr in dir(registry):
            value = getattr(registry, attr)
            if isinstance(value, EnvVarSpec):
                specs[value.name] = value
    return specs


def generate_markdown_docs() -> str:
    """Generate Markdown documentation for all environment variables."""
    lines = ["# Configuration Options\n\n"]
    lines.extend(
        [
            "This document is auto-generated from the configuration schema.\n\n",
            "## Environment Variables\n\n",
        ]
    )

    for _name, spec in sorted(all_specs().items()):
        default_repr = f"`{spec.default}`" if spec.default is not None else "None"
        lines.extend(
            [
                f"### `{spec.name}`\n\n",
                f"- **Type**: `{spec.type_hint.__name__}`\n",
                f"- **Required**: {'yes' if spec.required else 'no'}\n",
                f"- **Default**: {default_repr}\n",
                f"- **Description**: {spec.description}\n\n",
            ]
        )

    return "\n".join(lines)
