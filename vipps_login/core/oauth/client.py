"""
Protocol client for the provider's token and user-info endpoints.

The client holds an immutable configuration snapshot and a thread-safe
connection pool; one instance can serve concurrent login attempts.

Each public call runs under a Deadline shared by all of its attempts.
Failed attempts are classified into ProviderError and retried according
to a RetryPolicy; whatever escapes a public method is a ProviderError.

Example:
    >>> client = ProviderClient(load_config(os.environ))
    >>> tokens = client.exchange_code(code, attempt.code_verifier, attempt.redirect_uri)
    >>> profile = client.get_user_info(tokens.access_token)
"""

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from .constants import OAuthProtocol, ProviderHeaders
from .errors import ErrorCategory, ProviderError, classify_http_failure, classify_transport_failure
from .http_client import HttpClient, HttpClientConfig, HttpxHttpClient
from .models import TokenResponse, UserInfo
from .pkce import is_valid_verifier
from .retry import Deadline, RetryPolicy
from .validation import validate_string

if TYPE_CHECKING:
    from vipps_login.core.config.provider import ProviderConfig

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProviderClient:
    """Client for code exchange, token refresh and user-info retrieval."""

    def __init__(
        self,
        config: ProviderConfig,
        settings: HttpClientConfig | None = None,
        http_client: HttpClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Validated provider configuration
            settings: Timeout and retry settings (defaults if None)
            http_client: Transport (an HttpxHttpClient is created if None)
        """
        self.config = config
        self.settings = settings or HttpClientConfig()
        self.policy = RetryPolicy(retries=self.settings.retries, base_delay=self.settings.retry_delay)
        self._owns_http_client = http_client is None
        self.http_client = http_client or HttpxHttpClient(self.settings)

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def exchange_code(
        self,
        code: str,
        code_verifier: str,
        redirect_uri: str,
        deadline: Deadline | None = None,
    ) -> TokenResponse:
        """Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the provider callback
            code_verifier: PKCE verifier stored when the attempt began
            redirect_uri: Redirect URI used in the authorization request
            deadline: Optional caller-owned deadline/cancellation token

        Returns:
            TokenResponse

        Raises:
            ProviderError: INVALID_CODE / INVALID_CODE_VERIFIER before any request,
                otherwise the classified provider or transport failure
        """
        code = validate_string(code, "code", category=ErrorCategory.INVALID_CODE)
        if not is_valid_verifier(code_verifier):
            raise ProviderError(ErrorCategory.INVALID_CODE_VERIFIER, "Invalid code verifier format")
        redirect_uri = validate_string(redirect_uri, "redirect_uri")

        form = {
            "grant_type": OAuthProtocol.GRANT_TYPE_AUTH_CODE,
            "code": code,
            "code_verifier": code_verifier,
            "redirect_uri": redirect_uri,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        return self._post_token_form("exchange_code", form, deadline)

    def refresh_token(self, refresh_token: str, deadline: Deadline | None = None) -> TokenResponse:
        """Obtain new tokens with a refresh token.

        Raises:
            ProviderError: INVALID_GRANT for a blank refresh token, otherwise
                the classified provider or transport failure
        """
        refresh_token = validate_string(
            refresh_token, "refresh_token", category=ErrorCategory.INVALID_GRANT
        )
        form = {
            "grant_type": OAuthProtocol.GRANT_TYPE_REFRESH_TOKEN,
            "refresh_token": refresh_token,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        return self._post_token_form("refresh_token", form, deadline)

    def get_user_info(self, access_token: str, deadline: Deadline | None = None) -> UserInfo:
        """Fetch the user's profile with a bearer access token.

        Raises:
            ProviderError: INVALID_TOKEN for a blank token, USER_INFO_ERROR for an
                unusable profile, otherwise the classified failure
        """
        access_token = validate_string(
            access_token, "access_token", category=ErrorCategory.INVALID_TOKEN
        )
        headers = self._provider_headers()
        headers["Authorization"] = f"{OAuthProtocol.TOKEN_TYPE_BEARER} {access_token}"

        return self._request(
            "get_user_info",
            "GET",
            self.config.endpoints.userinfo,
            headers,
            data=None,
            deadline=deadline,
            parse=UserInfo.from_payload,
            invalid_json=ErrorCategory.USER_INFO_ERROR,
        )

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> ProviderClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _provider_headers(self) -> dict[str, str]:
        return {
            ProviderHeaders.SUBSCRIPTION_KEY: self.config.subscription_key,
            ProviderHeaders.MERCHANT_SERIAL_NUMBER: self.config.merchant_serial_number,
            "Accept": "application/json",
        }

    def _post_token_form(
        self, operation: str, form: dict[str, str], deadline: Deadline | None
    ) -> TokenResponse:
        headers = self._provider_headers()
        headers["Content-Type"] = OAuthProtocol.FORM_CONTENT_TYPE
        return self._request(
            operation,
            "POST",
            self.config.endpoints.token,
            headers,
            data=urllib.parse.urlencode(form).encode(),
            deadline=deadline,
            parse=TokenResponse.from_payload,
            invalid_json=ErrorCategory.API_ERROR,
        )

    def _request(
        self,
        operation: str,
        method: str,
        url: str,
        headers: dict[str, str],
        data: bytes | None,
        deadline: Deadline | None,
        parse: Callable[[Any], T],
        invalid_json: ErrorCategory,
    ) -> T:
        """Run attempts until one succeeds or the policy gives up."""
        deadline = deadline or Deadline(self.settings.timeout)
        attempt = 0

        while True:
            attempt += 1
            try:
                deadline.check()
                payload = self._attempt(method, url, headers, data, deadline, invalid_json)
                result = parse(payload)
            except ProviderError as error:
                if not self.policy.should_retry(error, attempt):
                    _logger.debug(
                        "%s failed on attempt %d: %s (%s)",
                        operation,
                        attempt,
                        error.category.value,
                        error.message,
                    )
                    raise

                delay = self.policy.delay_for(attempt)
                if delay > 0 and delay >= deadline.remaining():
                    _logger.warning(
                        "%s: not retrying, %.1fs backoff exceeds remaining deadline", operation, delay
                    )
                    raise

                _logger.warning(
                    "%s attempt %d/%d failed (%s), retrying in %.1fs",
                    operation,
                    attempt,
                    self.policy.max_attempts,
                    error.category.value,
                    delay,
                )
                if operation == "exchange_code":
                    # Authorization codes are single-use at the provider
                    _logger.warning("Retrying code exchange; the code may already be consumed")

                if not deadline.wait(delay):
                    raise ProviderError(
                        ErrorCategory.TIMEOUT_ERROR, "Request was cancelled"
                    ) from error
                continue

            if attempt > 1:
                _logger.info("%s succeeded on attempt %d", operation, attempt)
            return result

    def _attempt(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: bytes | None,
        deadline: Deadline,
        invalid_json: ErrorCategory,
    ) -> Any:
        """Perform one HTTP attempt and return the decoded JSON payload."""
        try:
            response = self.http_client.request(
                method, url, headers, data=data, timeout=deadline.remaining()
            )
        except ProviderError:
            raise
        except Exception as exc:
            raise classify_transport_failure(exc) from exc

        if not response.ok:
            raise classify_http_failure(response.status_code, response.json_or_none())

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                invalid_json,
                "Provider returned an invalid JSON response",
                status_code=response.status_code,
            ) from e


__all__ = ["ProviderClient"]
