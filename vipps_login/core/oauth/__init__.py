"""
Vipps Login OAuth library

Server-side OAuth 2.0 Authorization Code + PKCE client for Vipps Login.
Framework-agnostic: usable from Flask, FastAPI, Django, CLI tools or any
Python application that can keep a per-attempt session record.

This library provides:
- PKCE generation and re-validation (RFC 7636)
- Authorization URL construction and login attempt state
- Code exchange, token refresh and user-info retrieval with retry/timeout
- A single classified error type with localized user messages

Basic Usage:
    >>> from vipps_login.core.config import load_config
    >>> from vipps_login.core.oauth import ProviderClient, begin_attempt
    >>>
    >>> config = load_config(os.environ)
    >>> attempt, url = begin_attempt(config)
    >>> # ... store attempt.to_record() under attempt.state, redirect to url ...
    >>>
    >>> # In the callback route, after loading and deleting the record:
    >>> attempt = OAuthAttemptState.from_record(record)
    >>> with ProviderClient(config) as client:
    ...     tokens = client.exchange_code(code, attempt.code_verifier, attempt.redirect_uri)
    ...     profile = client.get_user_info(tokens.access_token)

For Testing:
    >>> from vipps_login.core.oauth import MockHttpClient
    >>> client = ProviderClient(config, http_client=MockHttpClient(json_response={...}))
"""

# Authorization request
from .authorization import (
    OAuthAttemptState,
    begin_attempt,
    build_authorization_url,
    generate_state,
)

# Protocol client
from .client import ProviderClient

# Constants
from .constants import (
    PRODUCTION_ENDPOINTS,
    TEST_ENDPOINTS,
    Environments,
    ProviderEndpoints,
    get_endpoints,
)

# Errors
from .errors import (
    ErrorCategory,
    ProviderError,
    classify_http_failure,
    classify_transport_failure,
    coerce_error,
    get_user_message,
)

# HTTP client
from .http_client import (
    HttpClient,
    HttpClientConfig,
    HttpResponse,
    HttpxHttpClient,
    MockHttpClient,
)

# Models
from .models import Account, Address, TokenResponse, UserInfo

# PKCE
from .pkce import (
    PkceParams,
    derive_challenge,
    generate_pkce,
    generate_verifier,
    validate_stored_params,
    verify_challenge,
)

# Retry
from .retry import Deadline, RetryPolicy

__all__ = [
    # Authorization
    "OAuthAttemptState",
    "begin_attempt",
    "build_authorization_url",
    "generate_state",
    # Client
    "ProviderClient",
    # Constants
    "PRODUCTION_ENDPOINTS",
    "TEST_ENDPOINTS",
    "Environments",
    "ProviderEndpoints",
    "get_endpoints",
    # Errors
    "ErrorCategory",
    "ProviderError",
    "classify_http_failure",
    "classify_transport_failure",
    "coerce_error",
    "get_user_message",
    # HTTP
    "HttpClient",
    "HttpClientConfig",
    "HttpResponse",
    "HttpxHttpClient",
    "MockHttpClient",
    # Models
    "Account",
    "Address",
    "TokenResponse",
    "UserInfo",
    # PKCE
    "PkceParams",
    "derive_challenge",
    "generate_pkce",
    "generate_verifier",
    "validate_stored_params",
    "verify_challenge",
    # Retry
    "Deadline",
    "RetryPolicy",
]
