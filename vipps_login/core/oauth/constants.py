"""
Centralized constants for the Vipps login client.

Constants are grouped by:
- Provider endpoints: Fixed per environment by the provider
- Configurable defaults: Values users may override via environment variables
- Protocol constants: Fixed by OAuth 2.0 / PKCE specifications
- Validation limits: Valid ranges for parameters
"""

from __future__ import annotations

from dataclasses import dataclass

# =============================================================================
# PROVIDER ENDPOINTS
# =============================================================================


class Environments:
    TEST = "test"
    PRODUCTION = "production"

    ALL = (TEST, PRODUCTION)


@dataclass(frozen=True)
class ProviderEndpoints:
    """Provider API endpoints for one environment.

    Attributes:
        authorize: Authorization endpoint the user's browser is sent to
        token: Token endpoint for code exchange and refresh
        userinfo: User-info endpoint for profile retrieval
        base_url: API base URL
    """

    authorize: str
    token: str
    userinfo: str
    base_url: str


TEST_ENDPOINTS = ProviderEndpoints(
    authorize="https://apitest.vipps.no/access-management-1.0/access/oauth2/auth",
    token="https://apitest.vipps.no/access-management-1.0/access/oauth2/token",
    userinfo="https://apitest.vipps.no/vipps-userinfo-api/userinfo",
    base_url="https://apitest.vipps.no",
)

PRODUCTION_ENDPOINTS = ProviderEndpoints(
    authorize="https://api.vipps.no/access-management-1.0/access/oauth2/auth",
    token="https://api.vipps.no/access-management-1.0/access/oauth2/token",
    userinfo="https://api.vipps.no/vipps-userinfo-api/userinfo",
    base_url="https://api.vipps.no",
)


def get_endpoints(environment: str) -> ProviderEndpoints:
    """Return the endpoints for 'test' or 'production'."""
    return PRODUCTION_ENDPOINTS if environment == Environments.PRODUCTION else TEST_ENDPOINTS


class ProviderHeaders:
    """Provider-specific request headers sent on every API call."""

    SUBSCRIPTION_KEY = "Ocp-Apim-Subscription-Key"
    MERCHANT_SERIAL_NUMBER = "Merchant-Serial-Number"


# =============================================================================
# CONFIGURABLE DEFAULTS
# =============================================================================


class ClientDefaults:
    """Default transport behaviour for the protocol client.

    - 30s timeout: bound for a whole call, shared by all its attempts
    - 2 retries: three attempts in total
    - 1s base delay: linear backoff, attempt N waits N seconds
    """

    HTTP_REQUEST_TIMEOUT = 30.0  # seconds
    RETRIES = 2
    RETRY_DELAY = 1.0  # seconds


class AuthorizationDefaults:
    SCOPE = "openid email"

    # Lifetime of a login attempt record in the external session store
    ATTEMPT_TTL_SECONDS = 600

    STATE_LENGTH = 32


# =============================================================================
# PROTOCOL CONSTANTS (Fixed by Standards)
# =============================================================================


class OAuthProtocol:
    """Constants defined by OAuth 2.0 and related RFCs."""

    RESPONSE_TYPE_CODE = "code"

    GRANT_TYPE_AUTH_CODE = "authorization_code"
    GRANT_TYPE_REFRESH_TOKEN = "refresh_token"

    FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
    TOKEN_TYPE_BEARER = "Bearer"


class PkceProtocol:
    """Constants defined by PKCE (RFC 7636) specification.

    Code verifier requirements (RFC 7636 Section 4.1):
    - Must be 43-128 characters
    - Using unreserved characters (A-Z, a-z, 0-9, -, ., _, ~)
    """

    CODE_VERIFIER_MIN_LENGTH = 43
    CODE_VERIFIER_MAX_LENGTH = 128
    CODE_VERIFIER_DEFAULT_LENGTH = 43

    # base64url(SHA-256) without padding is always 43 characters
    CODE_CHALLENGE_LENGTH = 43

    CODE_CHALLENGE_METHOD = "S256"


# =============================================================================
# VALIDATION RANGES
# =============================================================================


class ValidationLimits:
    """Valid ranges for user-configurable parameters."""

    MIN_TIMEOUT_SECONDS = 1
    MAX_TIMEOUT_SECONDS = 300

    MAX_RETRIES = 10

    MAX_RETRY_DELAY_SECONDS = 60


__all__ = [
    "ProviderEndpoints",
    "TEST_ENDPOINTS",
    "PRODUCTION_ENDPOINTS",
    "get_endpoints",
    "Environments",
    "ProviderHeaders",
    "ClientDefaults",
    "AuthorizationDefaults",
    "OAuthProtocol",
    "PkceProtocol",
    "ValidationLimits",
]
