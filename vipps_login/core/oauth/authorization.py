"""
Authorization request construction.

Builds the URL the user's browser is redirected to, and the per-attempt
record (state + PKCE material) the application must keep in its session
store until the provider redirects back.

Example:
    >>> attempt, url = begin_attempt(config)
    >>> session_store.put(attempt.state, attempt.to_record(), ttl=600)
    >>> redirect(url)
"""

from __future__ import annotations

import datetime
import secrets
import string
import urllib.parse
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .constants import AuthorizationDefaults, OAuthProtocol, PkceProtocol
from .errors import ErrorCategory, ProviderError
from .pkce import PkceParams, generate_pkce, validate_stored_params

if TYPE_CHECKING:
    from vipps_login.core.config.provider import ProviderConfig

_STATE_ALPHABET = string.ascii_letters + string.digits


def build_authorization_url(
    config: ProviderConfig,
    state: str,
    code_challenge: str,
    scope: str = AuthorizationDefaults.SCOPE,
    login_hint: str | None = None,
) -> str:
    """Build the provider authorization URL.

    Parameters are emitted in a fixed order; ``login_hint`` is added only
    when given.

    Args:
        config: Validated provider configuration
        state: Opaque anti-CSRF value, echoed back on the callback
        code_challenge: S256 PKCE challenge
        scope: Space-separated scopes
        login_hint: Optional phone number or similar to prefill the login

    Returns:
        Absolute authorization URL
    """
    params = [
        ("client_id", config.client_id),
        ("response_type", OAuthProtocol.RESPONSE_TYPE_CODE),
        ("scope", scope),
        ("state", state),
        ("redirect_uri", config.redirect_uri),
        ("code_challenge", code_challenge),
        ("code_challenge_method", PkceProtocol.CODE_CHALLENGE_METHOD),
    ]
    if login_hint:
        params.append(("login_hint", login_hint))

    return f"{config.endpoints.authorize}?{urllib.parse.urlencode(params)}"


def generate_state(length: int = AuthorizationDefaults.STATE_LENGTH) -> str:
    """Generate a random alphanumeric state value."""
    return "".join(secrets.choice(_STATE_ALPHABET) for _ in range(length))


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class OAuthAttemptState:
    """Everything needed to finish one login attempt after the callback.

    The application stores this keyed by ``state`` and deletes it on first
    use. The verifier never leaves the server.
    """

    state: str
    code_verifier: str = field(repr=False)
    code_challenge: str
    redirect_uri: str
    scope: str
    created_at: datetime.datetime
    expires_at: datetime.datetime

    @property
    def pkce(self) -> PkceParams:
        return PkceParams(code_verifier=self.code_verifier, code_challenge=self.code_challenge)

    def is_expired(self, now: datetime.datetime | None = None) -> bool:
        return (now or _utcnow()) >= self.expires_at

    def to_record(self) -> dict[str, Any]:
        """Serialize for the session store (JSON friendly)."""
        return {
            "state": self.state,
            "code_verifier": self.code_verifier,
            "code_challenge": self.code_challenge,
            "code_challenge_method": PkceProtocol.CODE_CHALLENGE_METHOD,
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> OAuthAttemptState:
        """Rebuild from a session store record, re-validating the PKCE pair.

        Raises:
            ProviderError: INVALID_CODE_VERIFIER / INVALID_CODE_CHALLENGE for bad
                PKCE material, INVALID_GRANT if the record is otherwise unusable
        """
        pkce = validate_stored_params(record)
        try:
            created_at = datetime.datetime.fromisoformat(record["created_at"])
            expires_at = datetime.datetime.fromisoformat(record["expires_at"])
            state = str(record["state"])
            redirect_uri = str(record["redirect_uri"])
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(
                ErrorCategory.INVALID_GRANT, "Stored login attempt is incomplete or corrupt"
            ) from e

        return cls(
            state=state,
            code_verifier=pkce.code_verifier,
            code_challenge=pkce.code_challenge,
            redirect_uri=redirect_uri,
            scope=str(record.get("scope") or AuthorizationDefaults.SCOPE),
            created_at=created_at,
            expires_at=expires_at,
        )


def begin_attempt(
    config: ProviderConfig,
    scope: str = AuthorizationDefaults.SCOPE,
    login_hint: str | None = None,
    ttl: float = AuthorizationDefaults.ATTEMPT_TTL_SECONDS,
    now: datetime.datetime | None = None,
) -> tuple[OAuthAttemptState, str]:
    """Start a login attempt: fresh state and PKCE pair plus the redirect URL."""
    now = now or _utcnow()
    pkce = generate_pkce()
    attempt = OAuthAttemptState(
        state=generate_state(),
        code_verifier=pkce.code_verifier,
        code_challenge=pkce.code_challenge,
        redirect_uri=config.redirect_uri,
        scope=scope,
        created_at=now,
        expires_at=now + datetime.timedelta(seconds=ttl),
    )
    url = build_authorization_url(
        config, attempt.state, attempt.code_challenge, scope=scope, login_hint=login_hint
    )
    return attempt, url


__all__ = [
    "OAuthAttemptState",
    "begin_attempt",
    "build_authorization_url",
    "generate_state",
]
