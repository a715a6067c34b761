"""Shared pytest configuration and fixtures for vipps-login tests."""

import logging

import pytest

# Import HTTP mocking fixtures from fixtures module
pytest_plugins = ["tests.fixtures.mock_http"]

# Import test configuration constants
from tests.config import TEST_ENV  # noqa: E402
from vipps_login.core.config import load_config  # noqa: E402
from vipps_login.core.oauth import HttpClientConfig  # noqa: E402


@pytest.fixture
def provider_env():
    """Complete, valid provider configuration as an env mapping."""
    return dict(TEST_ENV)


@pytest.fixture
def provider_config(provider_env):
    """Validated test-environment ProviderConfig."""
    return load_config(provider_env)


@pytest.fixture
def fast_settings():
    """Client settings with no backoff wait so retry tests never sleep."""
    return HttpClientConfig(timeout=5.0, retries=2, retry_delay=0.0)


@pytest.fixture
def clean_provider_environ(monkeypatch):
    """Remove PROVIDER_* variables (e.g. from a developer's .env) for the test."""
    import os

    for key in list(os.environ):
        if key.startswith("PROVIDER_") or key == "LOG_LEVEL":
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast, no external deps)")
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (full login flow, mocked HTTP)"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        # Add unit marker to tests in unit/ directory
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Add integration marker to tests in integration/ directory
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def reset_root_logging():
    """Restore root logger handlers after tests that call configure_logging()."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
