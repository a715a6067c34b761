"""
PKCE (Proof Key for Code Exchange) utilities for OAuth security.

PKCE is an extension to the Authorization Code flow to prevent
authorization code interception attacks (RFC 7636). The code verifier
stays on the server; only the derived challenge travels with the
authorization request.

This module generates verifier/challenge pairs and re-validates pairs
reloaded from the external session store.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import math
import re
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .constants import PkceProtocol
from .errors import ErrorCategory, ProviderError

# PKCE integrity faults are logged apart from ordinary protocol errors
_security_logger = logging.getLogger("vipps_login.security")

_VERIFIER_CHARSET = re.compile(r"[A-Za-z0-9\-._~]+")
_CHALLENGE_CHARSET = re.compile(r"[A-Za-z0-9\-_]+")


@dataclass(frozen=True)
class PkceParams:
    """PKCE code verifier and challenge pair.

    Attributes:
        code_verifier: Cryptographically random string (43-128 chars)
        code_challenge: Base64url-encoded SHA256 hash of verifier (43 chars)
        code_challenge_method: Always "S256"
    """

    code_verifier: str
    code_challenge: str
    code_challenge_method: str = PkceProtocol.CODE_CHALLENGE_METHOD

    def to_dict(self) -> dict[str, str]:
        return {
            "code_verifier": self.code_verifier,
            "code_challenge": self.code_challenge,
            "code_challenge_method": self.code_challenge_method,
        }

    def __repr__(self) -> str:
        return f"PkceParams(code_challenge={self.code_challenge!r}, code_challenge_method='S256')"


def base64url_encode(data: bytes) -> str:
    """Base64url-encode bytes without padding.

    Example:
        >>> base64url_encode(b"hello world")
        'aGVsbG8gd29ybGQ'
    """
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def is_valid_verifier(code_verifier: object) -> bool:
    """Check a code verifier against RFC 7636 Section 4.1."""
    if not isinstance(code_verifier, str):
        return False
    if not (
        PkceProtocol.CODE_VERIFIER_MIN_LENGTH
        <= len(code_verifier)
        <= PkceProtocol.CODE_VERIFIER_MAX_LENGTH
    ):
        return False
    return _VERIFIER_CHARSET.fullmatch(code_verifier) is not None


def is_valid_challenge(code_challenge: object) -> bool:
    """Check that a code challenge looks like an S256 challenge."""
    if not isinstance(code_challenge, str):
        return False
    if len(code_challenge) != PkceProtocol.CODE_CHALLENGE_LENGTH:
        return False
    return _CHALLENGE_CHARSET.fullmatch(code_challenge) is not None


def generate_verifier(length: int = PkceProtocol.CODE_VERIFIER_DEFAULT_LENGTH) -> str:
    """Generate a cryptographically random code verifier.

    The verifier is:
    - ``ceil(length * 3 / 4)`` random bytes from the secrets module
    - Base64url-encoded (no padding) and truncated to ``length``
    - Re-checked against the RFC 7636 charset before being returned

    Args:
        length: Verifier length, 43-128 (default 43)

    Returns:
        The code verifier

    Raises:
        ProviderError: INVALID_CODE_VERIFIER if length is out of range
    """
    if (
        isinstance(length, bool)
        or not isinstance(length, int)
        or not (
            PkceProtocol.CODE_VERIFIER_MIN_LENGTH <= length <= PkceProtocol.CODE_VERIFIER_MAX_LENGTH
        )
    ):
        raise ProviderError(
            ErrorCategory.INVALID_CODE_VERIFIER,
            f"Code verifier length must be between {PkceProtocol.CODE_VERIFIER_MIN_LENGTH} "
            f"and {PkceProtocol.CODE_VERIFIER_MAX_LENGTH} characters (got {length!r})",
        )

    byte_length = math.ceil(length * 3 / 4)
    verifier = base64url_encode(secrets.token_bytes(byte_length))[:length]

    if len(verifier) != length or not is_valid_verifier(verifier):
        raise ProviderError(
            ErrorCategory.INVALID_CODE_VERIFIER, "Generated code verifier is invalid"
        )

    return verifier


def derive_challenge(code_verifier: str) -> str:
    """Derive the S256 code challenge: BASE64URL(SHA256(ASCII(code_verifier))).

    Raises:
        ProviderError: INVALID_CODE_VERIFIER if the verifier is malformed
    """
    if not is_valid_verifier(code_verifier):
        raise ProviderError(ErrorCategory.INVALID_CODE_VERIFIER, "Invalid code verifier format")

    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64url_encode(digest)


def verify_challenge(code_verifier: str, code_challenge: str) -> bool:
    """Check that ``code_challenge`` was derived from ``code_verifier``.

    Never raises; any failure yields False.
    """
    try:
        expected = derive_challenge(code_verifier)
        if not isinstance(code_challenge, str):
            return False
        return hmac.compare_digest(expected.encode("ascii"), code_challenge.encode("utf-8"))
    except Exception:
        return False


def generate_pkce(verifier_length: int = PkceProtocol.CODE_VERIFIER_DEFAULT_LENGTH) -> PkceParams:
    """Generate a verifier, its challenge and the S256 method.

    Example:
        >>> pkce = generate_pkce()
        >>> len(pkce.code_challenge)
        43
    """
    code_verifier = generate_verifier(verifier_length)
    return PkceParams(
        code_verifier=code_verifier,
        code_challenge=derive_challenge(code_verifier),
    )


def _pick(raw: Mapping[str, Any], snake: str, camel: str) -> Any:
    return raw[snake] if snake in raw else raw.get(camel)


def validate_stored_params(raw: object) -> PkceParams:
    """Re-validate PKCE parameters reloaded from the session store.

    Accepts snake_case or camelCase keys. Besides the format checks, the
    challenge is recomputed from the verifier so a tampered or corrupted
    record is rejected.

    Args:
        raw: Mapping with code_verifier, code_challenge, code_challenge_method

    Returns:
        The validated PkceParams

    Raises:
        ProviderError: INVALID_CODE_VERIFIER or INVALID_CODE_CHALLENGE
    """
    if not isinstance(raw, Mapping):
        raise ProviderError(ErrorCategory.INVALID_CODE_VERIFIER, "Invalid PKCE parameters")

    code_verifier = _pick(raw, "code_verifier", "codeVerifier")
    code_challenge = _pick(raw, "code_challenge", "codeChallenge")
    method = _pick(raw, "code_challenge_method", "codeChallengeMethod")

    if not is_valid_verifier(code_verifier):
        raise ProviderError(ErrorCategory.INVALID_CODE_VERIFIER, "Invalid code verifier")

    if not is_valid_challenge(code_challenge):
        raise ProviderError(ErrorCategory.INVALID_CODE_CHALLENGE, "Invalid code challenge")

    if method != PkceProtocol.CODE_CHALLENGE_METHOD:
        raise ProviderError(
            ErrorCategory.INVALID_CODE_CHALLENGE,
            "Invalid code challenge method. Only S256 is supported.",
        )

    if not verify_challenge(code_verifier, code_challenge):
        _security_logger.warning("Stored PKCE challenge does not match its verifier")
        raise ProviderError(
            ErrorCategory.INVALID_CODE_CHALLENGE, "Code challenge does not match code verifier"
        )

    return PkceParams(code_verifier=code_verifier, code_challenge=code_challenge)


__all__ = [
    "PkceParams",
    "base64url_encode",
    "is_valid_verifier",
    "is_valid_challenge",
    "generate_verifier",
    "derive_challenge",
    "verify_challenge",
    "generate_pkce",
    "validate_stored_params",
]
