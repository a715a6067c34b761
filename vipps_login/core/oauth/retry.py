"""
Retry policy and call deadlines for the protocol client.

The policy is a pair of pure functions over (error, attempt number), so it
can be tested without a transport or a clock. A Deadline bounds one whole
client call, including every retry and every backoff wait, and doubles as
a cancellation token.

Attempts are numbered from 1. With ``retries=2`` a call makes at most
three attempts and waits ``1 * base_delay`` then ``2 * base_delay``.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from .constants import ClientDefaults
from .errors import ErrorCategory, ProviderError


@dataclass(frozen=True)
class RetryPolicy:
    """Linear-backoff retry policy.

    Attributes:
        retries: Additional attempts after the first
        base_delay: Seconds to wait after attempt 1; attempt N waits N times this
    """

    retries: int = ClientDefaults.RETRIES
    base_delay: float = ClientDefaults.RETRY_DELAY

    @property
    def max_attempts(self) -> int:
        return self.retries + 1

    def should_retry(self, error: ProviderError, attempt: int) -> bool:
        """Return True if a failed ``attempt`` may be followed by another."""
        return attempt <= self.retries and error.retryable

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed ``attempt`` before the next one."""
        return attempt * self.base_delay


class Deadline:
    """Time budget and cancellation token for one client call.

    Example:
        >>> deadline = Deadline(30.0)
        >>> worker = threading.Thread(target=client.refresh_token, args=(token, deadline))
        >>> worker.start()
        >>> deadline.cancel()  # aborts the current wait and any further attempts
    """

    def __init__(self, timeout: float = ClientDefaults.HTTP_REQUEST_TIMEOUT) -> None:
        self.timeout = timeout
        self._expires_at = time.monotonic() + timeout
        self._cancelled = threading.Event()

    def remaining(self) -> float:
        """Seconds left in the budget, never negative."""
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def wait(self, seconds: float) -> bool:
        """Sleep for ``seconds`` unless cancelled first.

        Returns:
            True if the full wait elapsed, False if the call was cancelled
        """
        if seconds <= 0:
            return not self.cancelled
        return not self._cancelled.wait(seconds)

    def check(self) -> None:
        """Raise a non-retryable TIMEOUT_ERROR if cancelled or out of time."""
        if self.cancelled:
            raise ProviderError(ErrorCategory.TIMEOUT_ERROR, "Request was cancelled")
        if self.expired:
            raise ProviderError(
                ErrorCategory.TIMEOUT_ERROR,
                f"Request exceeded its {self.timeout:g}s deadline",
            )

    def __repr__(self) -> str:
        return (
            f"Deadline(timeout={self.timeout!r}, remaining={self.remaining():.2f}, "
            f"cancelled={self.cancelled})"
        )


__all__ = ["RetryPolicy", "Deadline"]
