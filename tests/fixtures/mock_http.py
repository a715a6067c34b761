"""RESPX-based HTTP mocking fixtures for testing.

This module provides reusable fixtures for mocking the provider's token
and user-info endpoints in the test environment using RESPX.
"""

import httpx
import pytest
import respx

from tests.config import TEST_ENDPOINTS

# === Token Response Fixtures ===


@pytest.fixture
def token_payload():
    """Standard token endpoint response."""
    return {
        "access_token": "eyJhbGciOiJSUzI1NiJ9.access.mocked",
        "token_type": "Bearer",
        "expires_in": 3600,
        "refresh_token": "refresh-token-mocked",
        "scope": "openid email",
        "id_token": "eyJhbGciOiJSUzI1NiJ9.id.mocked",
    }


@pytest.fixture
def userinfo_payload():
    """User-info response with the claims a typical consent grants."""
    return {
        "sub": "c06c4afe-d9e1-4c5d-939a-177d752a0944",
        "name": "Ada Nordmann",
        "given_name": "Ada",
        "family_name": "Nordmann",
        "email": "ada.nordmann@example.com",
        "email_verified": True,
        "phone_number": "4712345678",
        "birthdate": "1990-01-31",
        "address": {
            "street_address": "Robert Levins gate 5",
            "postal_code": "0154",
            "region": "Oslo",
            "country": "NO",
            "formatted": "Robert Levins gate 5\n0154 Oslo\nNO",
            "address_type": "home",
        },
        "other_addresses": [],
        "accounts": [{"account_name": "Brukskonto", "account_number": "12345678903"}],
        "sid": "7d78a726-af92-499e-b857-de263ef9a969",
    }


# === RESPX Fixtures ===


@pytest.fixture
def mock_provider_api():
    """Mock the provider's test-environment API with RESPX.

    Usage:
        def test_exchange(mock_provider_api, token_payload):
            mock_provider_api.post(TOKEN_PATH).mock(
                return_value=httpx.Response(200, json=token_payload)
            )
    """
    with respx.mock(base_url=TEST_ENDPOINTS["base_url"]) as respx_mock:
        yield respx_mock


# === Error Helpers ===


def create_oauth_error(status_code: int, error: str, description: str | None = None) -> httpx.Response:
    """Create an OAuth error response (RFC 6749 Section 5.2)."""
    body = {"error": error}
    if description is not None:
        body["error_description"] = description
    return httpx.Response(status_code, json=body)


def create_status_error(status_code: int, text: str = "") -> httpx.Response:
    """Create a non-JSON error response."""
    return httpx.Response(status_code, text=text)
