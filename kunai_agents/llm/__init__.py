"""
LLM 后端调用层 — 限流重试网关 + token 用量记录 + OpenAI 适配器。

Quick Start::

    from kunai_agents.llm import BackendGateway, BackendRequest, OpenAIBackend

    gateway = BackendGateway(OpenAIBackend(api_key="sk-..."))
    response = await gateway.call(BackendRequest(model="gpt-4o-mini", messages=msgs))
"""

from kunai_agents.llm.types import (
    BackendRequest,
    BackendResponse,
    CallOutcome,
    OutcomeKind,
    Usage,
)
from kunai_agents.llm.usage import (
    InMemoryUsageRecorder,
    LoggingUsageRecorder,
    UsageRecord,
    UsageRecorder,
)
from kunai_agents.llm.gateway import (
    Backend,
    BackendGateway,
    attempt,
    backoff_delay,
    retry_rate_limited,
)
from kunai_agents.llm.openai_backend import OpenAIBackend

__all__ = [
    "BackendRequest",
    "BackendResponse",
    "CallOutcome",
    "OutcomeKind",
    "Usage",
    "InMemoryUsageRecorder",
    "LoggingUsageRecorder",
    "UsageRecord",
    "UsageRecorder",
    "Backend",
    "BackendGateway",
    "attempt",
    "backoff_delay",
    "retry_rate_limited",
    "OpenAIBackend",
]
