"""Configuration for the Vipps login client."""

from vipps_login.core.config.provider import (
    ProviderConfig,
    assert_server_context,
    describe_config,
    is_browser_context,
    is_configured,
    load_client_settings,
    load_config,
    load_config_from_env,
    load_env_var,
)
from vipps_login.core.config.schema import ClientSchema, EnvVarSpec, ProviderSchema

__all__ = [
    "ProviderConfig",
    "assert_server_context",
    "describe_config",
    "is_browser_context",
    "is_configured",
    "load_client_settings",
    "load_config",
    "load_config_from_env",
    "load_env_var",
    "ClientSchema",
    "EnvVarSpec",
    "ProviderSchema",
]
