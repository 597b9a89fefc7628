"""
BackendGateway — 带限流重试的单次 LLM 调用封装。

核心流程:
    request → backend.invoke → [rate limited?] → sleep (i+1)s → retry → ... → response

- 限流 (RateLimited) 最多重试 ``max_retries - 1`` 次，线性退避
- 其他错误立即以 ``BackendUnavailable`` 抛出
- 成功后通过 ``UsageRecorder`` 记录 token 用量

Usage::

    gateway = BackendGateway(OpenAIBackend())
    response = await gateway.call(
        BackendRequest(model="gpt-4o-mini", messages=[Message.user("Hi")]),
        max_retries=3,
        label="chat for session s1",
    )
    print(response.text)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol, runtime_checkable

from kunai_agents.errors import BackendUnavailable, RateLimited
from kunai_agents.llm.types import BackendRequest, BackendResponse, CallOutcome
from kunai_agents.llm.usage import LoggingUsageRecorder, UsageRecorder

logger = logging.getLogger("kunai_agents.llm")

SleepFn = Callable[[float], Awaitable[None]]

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0  # seconds


@runtime_checkable
class Backend(Protocol):
    """A generative backend.

    ``invoke`` returns a ``BackendResponse`` or raises ``RateLimited`` for
    rate limiting; any other exception counts as a non-retryable failure.
    """

    async def invoke(self, request: BackendRequest) -> BackendResponse: ...


def backoff_delay(retry_index: int, base_delay: float = DEFAULT_BASE_DELAY) -> float:
    """Delay before the ``retry_index``-th retry (0-indexed): linear, not exponential."""
    return (retry_index + 1) * base_delay


async def attempt(backend: Backend, request: BackendRequest) -> CallOutcome:
    """Run one backend call and classify its result."""
    try:
        response = await backend.invoke(request)
    except RateLimited as e:
        return CallOutcome.limited(e)
    except Exception as e:
        return CallOutcome.failure(e)
    return CallOutcome.success(response)


async def retry_rate_limited(
    call: Callable[[], Awaitable[CallOutcome]],
    max_retries: int,
    sleep_fn: SleepFn = asyncio.sleep,
    base_delay: float = DEFAULT_BASE_DELAY,
    label: str = "",
) -> BackendResponse:
    """Repeat ``call`` while it reports rate limiting, up to ``max_retries`` attempts.

    Raises:
        BackendUnavailable: On a non-rate-limit failure (immediately) or
            when every attempt was rate limited.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be >= 1")

    outcome: Optional[CallOutcome] = None
    for i in range(max_retries):
        outcome = await call()
        if outcome.ok:
            return outcome.response  # type: ignore[return-value]

        if not outcome.rate_limited:
            raise BackendUnavailable(
                label=label, attempts=i + 1, reason=str(outcome.error)
            ) from outcome.error

        if i < max_retries - 1:
            delay = backoff_delay(i, base_delay)
            logger.warning(
                "Rate limited%s, retrying in %dms (attempt %d/%d)",
                f" ({label})" if label else "",
                int(delay * 1000),
                i + 1,
                max_retries,
            )
            await sleep_fn(delay)

    assert outcome is not None
    raise BackendUnavailable(
        label=label,
        attempts=max_retries,
        rate_limited=True,
        reason=str(outcome.error),
    ) from outcome.error


class BackendGateway:
    """Resilient wrapper around a single generative-backend call.

    Stateless between calls; retries happen within one ``call``.

    Parameters:
        backend: The backend to invoke.
        usage_recorder: Sink for token usage (default: log lines).
        sleep_fn: Async sleep used between retries (inject a fake in tests).
        base_delay: Seconds of delay per retry step (default 1.0).
    """

    def __init__(
        self,
        backend: Backend,
        usage_recorder: Optional[UsageRecorder] = None,
        sleep_fn: SleepFn = asyncio.sleep,
        base_delay: float = DEFAULT_BASE_DELAY,
    ) -> None:
        self._backend = backend
        self._usage = usage_recorder if usage_recorder is not None else LoggingUsageRecorder()
        self._sleep_fn = sleep_fn
        self._base_delay = base_delay

    @property
    def backend(self) -> Backend:
        return self._backend

    async def call(
        self,
        request: BackendRequest,
        max_retries: int = DEFAULT_MAX_RETRIES,
        label: str = "",
    ) -> BackendResponse:
        """Invoke the backend with bounded retry on rate limiting.

        Raises:
            BackendUnavailable: When retries are exhausted or a
                non-retryable error occurs. The original exception is chained.
        """
        response = await retry_rate_limited(
            lambda: attempt(self._backend, request),
            max_retries=max_retries,
            sleep_fn=self._sleep_fn,
            base_delay=self._base_delay,
            label=label,
        )
        self._usage.record(label, request.model, response.usage)
        return response
