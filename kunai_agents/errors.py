"""
错误类型定义。

``RateLimited`` is transient and retried inside the gateway;
``BackendUnavailable`` is what callers of the core ever see.
"""

from __future__ import annotations

from typing import Optional


class KunaiError(Exception):
    """Base class for all kunai_agents errors."""


class BackendError(KunaiError):
    """Raised by a backend when the generative call fails."""

    def __init__(self, message: str = "", status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(message or "backend call failed")


class RateLimited(BackendError):
    """The backend rejected the call because of rate limiting (HTTP 429).

    ``retry_after`` carries the server hint when one was sent. It is
    informational only: the gateway always backs off linearly.
    """

    def __init__(self, message: str = "", retry_after: Optional[float] = None) -> None:
        self.retry_after = retry_after
        super().__init__(message or "rate limited", status=429)


class BackendUnavailable(KunaiError):
    """Terminal failure for the current turn.

    Attributes:
        label: Usage label of the call that failed.
        attempts: Number of backend attempts made.
        rate_limited: True when the retry budget was exhausted by rate limiting.
    """

    def __init__(
        self,
        label: str = "",
        attempts: int = 0,
        rate_limited: bool = False,
        reason: str = "",
    ) -> None:
        self.label = label
        self.attempts = attempts
        self.rate_limited = rate_limited
        where = f" ({label})" if label else ""
        super().__init__(
            f"Backend unavailable{where} after {attempts} attempt(s): {reason}"
        )
