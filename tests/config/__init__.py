"""Test configuration module for vipps-login tests."""

from .test_config import (
    RFC7636_CHALLENGE,
    RFC7636_VERIFIER,
    TEST_ENDPOINTS,
    TEST_ENV,
    TOKEN_PATH,
    USERINFO_PATH,
)

__all__ = [
    "RFC7636_CHALLENGE",
    "RFC7636_VERIFIER",
    "TEST_ENDPOINTS",
    "TEST_ENV",
    "TOKEN_PATH",
    "USERINFO_PATH",
]
