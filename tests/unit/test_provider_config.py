"""Unit tests for provider configuration loading."""

import sys

import pytest

from tests.config import TEST_ENV
from vipps_login.core.config import (
    ProviderConfig,
    assert_server_context,
    describe_config,
    is_configured,
    load_client_settings,
    load_config,
    load_config_from_env,
    load_env_var,
)
from vipps_login.core.config.schema import ClientSchema, ProviderSchema, all_specs, generate_markdown_docs
from vipps_login.core.oauth.constants import PRODUCTION_ENDPOINTS, TEST_ENDPOINTS
from vipps_login.core.oauth.errors import ErrorCategory, ProviderError


def _without(key):
    env = dict(TEST_ENV)
    del env[key]
    return env


@pytest.mark.unit
class TestLoadConfig:
    """Test cases for load_config."""

    def test_valid_config(self, provider_env):
        """Test a complete mapping yields a ProviderConfig."""
        config = load_config(provider_env)

        assert config.client_id == "test-client-id"
        assert config.merchant_serial_number == "123456"
        assert config.environment == "test"
        assert config.endpoints == TEST_ENDPOINTS

    def test_values_are_trimmed(self, provider_env):
        """Test surrounding whitespace is stripped."""
        provider_env["PROVIDER_CLIENT_ID"] = "  padded-id \n"

        assert load_config(provider_env).client_id == "padded-id"

    @pytest.mark.parametrize("key", [spec.name for spec in ProviderSchema.REQUIRED])
    def test_missing_variable(self, key):
        """Test each required variable missing fails with MISSING_CONFIG."""
        with pytest.raises(ProviderError) as exc_info:
            load_config(_without(key))

        assert exc_info.value.category is ErrorCategory.MISSING_CONFIG
        assert key in exc_info.value.message

    @pytest.mark.parametrize("key", [spec.name for spec in ProviderSchema.REQUIRED])
    def test_blank_variable(self, provider_env, key):
        """Test whitespace-only values count as missing."""
        provider_env[key] = "   "

        with pytest.raises(ProviderError) as exc_info:
            load_config(provider_env)

        assert exc_info.value.category is ErrorCategory.MISSING_CONFIG

    def test_unknown_environment(self, provider_env):
        """Test PROVIDER_ENVIRONMENT=staging fails with INVALID_CONFIG."""
        provider_env["PROVIDER_ENVIRONMENT"] = "staging"

        with pytest.raises(ProviderError) as exc_info:
            load_config(provider_env)

        assert exc_info.value.category is ErrorCategory.INVALID_CONFIG

    def test_environment_is_case_sensitive(self, provider_env):
        """Test 'Production' is not accepted."""
        provider_env["PROVIDER_ENVIRONMENT"] = "Production"

        with pytest.raises(ProviderError) as exc_info:
            load_config(provider_env)

        assert exc_info.value.category is ErrorCategory.INVALID_CONFIG

    @pytest.mark.parametrize("uri", ["not a url", "/relative/callback", "ftp://example.com/cb"])
    def test_malformed_redirect_uri(self, provider_env, uri):
        """Test unparseable redirect URIs fail with INVALID_CONFIG."""
        provider_env["PROVIDER_REDIRECT_URI"] = uri

        with pytest.raises(ProviderError) as exc_info:
            load_config(provider_env)

        assert exc_info.value.category is ErrorCategory.INVALID_CONFIG

    def test_production_requires_https(self, provider_env):
        """Test an http redirect URI is rejected in production."""
        provider_env["PROVIDER_ENVIRONMENT"] = "production"
        provider_env["PROVIDER_REDIRECT_URI"] = "http://example.com/callback"

        with pytest.raises(ProviderError) as exc_info:
            load_config(provider_env)

        assert exc_info.value.category is ErrorCategory.INVALID_CONFIG

    def test_test_environment_allows_http(self, provider_env):
        """Test local development callbacks work against the test environment."""
        provider_env["PROVIDER_REDIRECT_URI"] = "http://localhost:3000/callback"

        assert load_config(provider_env).redirect_uri == "http://localhost:3000/callback"

    def test_production_endpoints(self, provider_env):
        """Test production selects api.vipps.no."""
        provider_env["PROVIDER_ENVIRONMENT"] = "production"

        config = load_config(provider_env)

        assert config.is_production
        assert config.endpoints == PRODUCTION_ENDPOINTS

    def test_config_is_immutable(self, provider_config):
        """Test fields cannot be reassigned."""
        with pytest.raises(AttributeError):
            provider_config.client_id = "other"  # type: ignore[misc]

    def test_repr_hides_secrets(self, provider_config):
        """Test secret values never appear in repr."""
        text = repr(provider_config)

        assert TEST_ENV["PROVIDER_CLIENT_SECRET"] not in text
        assert TEST_ENV["PROVIDER_SUBSCRIPTION_KEY"] not in text
        assert "test-client-id" in text

    def test_direct_construction_validates(self):
        """Test ProviderConfig validates on construction too."""
        with pytest.raises(ProviderError) as exc_info:
            ProviderConfig(
                client_id="id",
                client_secret="",
                merchant_serial_number="1",
                subscription_key="k",
                redirect_uri="https://example.com/cb",
                environment="test",
            )

        assert exc_info.value.category is ErrorCategory.MISSING_CONFIG

    def test_load_config_from_env(self, clean_provider_environ):
        """Test loading from the process environment."""
        for key, value in TEST_ENV.items():
            clean_provider_environ.setenv(key, value)

        assert load_config_from_env().client_id == "test-client-id"


@pytest.mark.unit
class TestServerContextGuard:
    """Test cases for the browser-context guard."""

    def test_server_context_passes(self):
        """Test a normal interpreter is a server context."""
        assert_server_context()

    def test_emscripten_platform_is_rejected(self, monkeypatch, provider_env):
        """Test Pyodide/Emscripten fails with CLIENT_SIDE_ACCESS before validation."""
        monkeypatch.setattr(sys, "platform", "emscripten")
        provider_env.pop("PROVIDER_CLIENT_ID")

        with pytest.raises(ProviderError) as exc_info:
            load_config(provider_env)

        assert exc_info.value.category is ErrorCategory.CLIENT_SIDE_ACCESS

    def test_browser_bridge_module_is_rejected(self, monkeypatch):
        """Test a loaded pyodide module marks a browser context."""
        monkeypatch.setitem(sys.modules, "pyodide", object())

        with pytest.raises(ProviderError) as exc_info:
            assert_server_context()

        assert exc_info.value.category is ErrorCategory.CLIENT_SIDE_ACCESS


@pytest.mark.unit
class TestIsConfigured:
    """Test cases for is_configured."""

    def test_true_for_valid_config(self, provider_env):
        assert is_configured(provider_env) is True

    def test_false_without_raising(self, provider_env):
        """Test invalid configurations return False."""
        assert is_configured({}) is False
        provider_env["PROVIDER_ENVIRONMENT"] = "staging"
        assert is_configured(provider_env) is False

    def test_false_in_browser_context(self, monkeypatch, provider_env):
        monkeypatch.setattr(sys, "platform", "emscripten")

        assert is_configured(provider_env) is False


@pytest.mark.unit
class TestClientSettings:
    """Test cases for transport tuning variables."""

    def test_defaults(self):
        """Test defaults apply when nothing is set."""
        settings = load_client_settings({})

        assert settings.timeout == 30.0
        assert settings.retries == 2
        assert settings.retry_delay == 1.0

    def test_overrides(self):
        """Test values are coerced from strings."""
        settings = load_client_settings(
            {
                "PROVIDER_HTTP_TIMEOUT": "12.5",
                "PROVIDER_HTTP_RETRIES": "0",
                "PROVIDER_RETRY_DELAY": "0.25",
            }
        )

        assert settings.timeout == 12.5
        assert settings.retries == 0
        assert settings.retry_delay == 0.25

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("PROVIDER_HTTP_TIMEOUT", "fast"),
            ("PROVIDER_HTTP_TIMEOUT", "0"),
            ("PROVIDER_HTTP_TIMEOUT", "301"),
            ("PROVIDER_HTTP_RETRIES", "1.5"),
            ("PROVIDER_HTTP_RETRIES", "11"),
            ("PROVIDER_RETRY_DELAY", "-1"),
        ],
    )
    def test_invalid_values(self, key, value):
        """Test bad numbers fail with INVALID_CONFIG."""
        with pytest.raises(ProviderError) as exc_info:
            load_client_settings({key: value})

        assert exc_info.value.category is ErrorCategory.INVALID_CONFIG

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, "INFO"), ("", "INFO"), ("warning", "warning"), ("DEBUG  # verbose", "DEBUG  # verbose")],
    )
    def test_log_level_accepted(self, value, expected):
        source = {} if value is None else {"LOG_LEVEL": value}

        assert load_env_var(ClientSchema.LOG_LEVEL, source) == expected

    @pytest.mark.parametrize("value", ["LOUD", "verbose", "# DEBUG"])
    def test_log_level_rejected(self, value):
        """Test unknown log levels fail with INVALID_CONFIG."""
        with pytest.raises(ProviderError) as exc_info:
            load_env_var(ClientSchema.LOG_LEVEL, {"LOG_LEVEL": value})

        assert exc_info.value.category is ErrorCategory.INVALID_CONFIG


@pytest.mark.unit
class TestSchema:
    """Test cases for the configuration schema helpers."""

    def test_all_specs_covers_both_registries(self):
        specs = all_specs()

        assert "PROVIDER_CLIENT_SECRET" in specs
        assert ClientSchema.PROVIDER_HTTP_TIMEOUT.name in specs
        assert specs["PROVIDER_SUBSCRIPTION_KEY"].secret is True

    def test_markdown_docs_lists_every_variable(self):
        docs = generate_markdown_docs()

        for name in all_specs():
            assert f"`{name}`" in docs

    def test_describe_config_masks_secrets(self, provider_config):
        """Test secret values are replaced in the display rows."""
        rows = {name: value for name, _label, value in describe_config(provider_config)}

        assert rows["PROVIDER_CLIENT_ID"] == "test-client-id"
        assert TEST_ENV["PROVIDER_CLIENT_SECRET"] not in rows["PROVIDER_CLIENT_SECRET"]
        assert TEST_ENV["PROVIDER_SUBSCRIPTION_KEY"] not in rows["PROVIDER_SUBSCRIPTION_KEY"]
