"""
Response models for the provider's token and user-info endpoints.

Payloads are validated once, at the boundary, and turned into frozen
dataclasses. Tokens are excluded from ``repr`` so they cannot leak into
logs by accident.
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .constants import OAuthProtocol
from .errors import ErrorCategory, ProviderError


def _optional_str(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class TokenResponse:
    """Tokens returned by the token endpoint (code exchange or refresh).

    Attributes:
        access_token: Access token for API requests
        token_type: Token type, normally "Bearer"
        expires_in: Lifetime of the access token in seconds
        refresh_token: Refresh token, if issued
        scope: Granted scopes (space separated)
        id_token: OpenID Connect ID token (JWT), if the openid scope was requested
    """

    access_token: str = field(repr=False)
    token_type: str
    expires_in: int
    refresh_token: str | None = field(default=None, repr=False)
    scope: str = ""
    id_token: str | None = field(default=None, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> TokenResponse:
        """Build from a decoded token endpoint response.

        Raises:
            ProviderError: API_ERROR if required fields are missing or malformed
        """
        if not isinstance(payload, Mapping):
            raise ProviderError(ErrorCategory.API_ERROR, "Token response is not a JSON object")

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ProviderError(ErrorCategory.API_ERROR, "Token response is missing access_token")

        expires_in = payload.get("expires_in")
        if isinstance(expires_in, bool):
            expires_in = None
        try:
            expires_in = int(expires_in)  # type: ignore[arg-type]
        except (TypeError, ValueError) as e:
            raise ProviderError(
                ErrorCategory.API_ERROR, "Token response has invalid expires_in"
            ) from e

        return cls(
            access_token=access_token,
            token_type=str(payload.get("token_type") or OAuthProtocol.TOKEN_TYPE_BEARER),
            expires_in=expires_in,
            refresh_token=_optional_str(payload, "refresh_token"),
            scope=str(payload.get("scope") or ""),
            id_token=_optional_str(payload, "id_token"),
        )

    @property
    def scopes(self) -> list[str]:
        return self.scope.split()

    def expires_at(self, now: datetime.datetime | None = None) -> datetime.datetime:
        """Absolute expiry time of the access token (UTC)."""
        now = now or datetime.datetime.now(datetime.timezone.utc)
        return now + datetime.timedelta(seconds=self.expires_in)


@dataclass(frozen=True)
class Address:
    street_address: str | None = None
    postal_code: str | None = None
    region: str | None = None
    country: str | None = None
    formatted: str | None = None
    address_type: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Address:
        return cls(
            street_address=_optional_str(payload, "street_address"),
            postal_code=_optional_str(payload, "postal_code"),
            region=_optional_str(payload, "region"),
            country=_optional_str(payload, "country"),
            formatted=_optional_str(payload, "formatted"),
            address_type=_optional_str(payload, "address_type"),
        )


@dataclass(frozen=True)
class Account:
    account_number: str | None = None
    account_name: str | None = None
    bank_name: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Account:
        return cls(
            account_number=_optional_str(payload, "account_number"),
            account_name=_optional_str(payload, "account_name"),
            bank_name=_optional_str(payload, "bank_name"),
        )


def _address_list(value: Any) -> tuple[Address, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(Address.from_payload(item) for item in value if isinstance(item, Mapping))


@dataclass(frozen=True)
class UserInfo:
    """User profile returned by the user-info endpoint.

    Only ``sub`` is guaranteed; every other claim depends on the scopes the
    user consented to. The decoded payload is kept in ``raw`` for claims
    not modelled here.
    """

    sub: str
    email: str | None = None
    email_verified: bool | None = None
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    birthdate: str | None = None
    phone_number: str | None = None
    nin: str | None = field(default=None, repr=False)
    sid: str | None = None
    address: Address | None = None
    other_addresses: tuple[Address, ...] = ()
    accounts: tuple[Account, ...] = ()
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_payload(cls, payload: Any) -> UserInfo:
        """Build from a decoded user-info response.

        Raises:
            ProviderError: USER_INFO_ERROR if the payload is not an object or lacks ``sub``
        """
        if not isinstance(payload, Mapping):
            raise ProviderError(ErrorCategory.USER_INFO_ERROR, "User info response is not a JSON object")

        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub.strip():
            raise ProviderError(ErrorCategory.USER_INFO_ERROR, "User info response is missing sub")

        address = payload.get("address")
        email_verified = payload.get("email_verified")
        accounts = payload.get("accounts")

        return cls(
            sub=sub,
            email=_optional_str(payload, "email"),
            email_verified=email_verified if isinstance(email_verified, bool) else None,
            name=_optional_str(payload, "name"),
            given_name=_optional_str(payload, "given_name"),
            family_name=_optional_str(payload, "family_name"),
            birthdate=_optional_str(payload, "birthdate"),
            phone_number=_optional_str(payload, "phone_number"),
            nin=_optional_str(payload, "nin"),
            sid=_optional_str(payload, "sid"),
            address=Address.from_payload(address) if isinstance(address, Mapping) else None,
            other_addresses=_address_list(payload.get("other_addresses")),
            accounts=tuple(
                Account.from_payload(item)
                for item in (accounts if isinstance(accounts, list) else [])
                if isinstance(item, Mapping)
            ),
            raw=dict(payload),
        )

    @property
    def display_name(self) -> str:
        """Best available human-readable name for the user."""
        if self.name:
            return self.name
        full = " ".join(part for part in (self.given_name, self.family_name) if part)
        return full or self.email or self.sub


__all__ = ["TokenResponse", "UserInfo", "Address", "Account"]
