"""
KunAI Agents — stateful help-desk dialogue engine.

维护每个会话与 LLM 的多轮对话，按需压缩历史，检测"工单就绪"标记，
并从模型输出中提取结构化工单字段。

Quick Start:
    from kunai_agents import AgentConfig, build_processor

    processor = build_processor(AgentConfig.from_env())
    result = await processor.process_turn("My VPN keeps dropping", "chat-42")
    print(result.reply_text, result.terminal, result.fields)
"""

__version__ = "0.1.0"

from kunai_agents.errors import BackendError, BackendUnavailable, KunaiError, RateLimited
from kunai_agents.core.config import AgentConfig
from kunai_agents.session.types import Message, Role, Session
from kunai_agents.session.store import SessionStore
from kunai_agents.session.compactor import CompactorConfig, ContextCompactor
from kunai_agents.llm.types import BackendRequest, BackendResponse, Usage
from kunai_agents.llm.gateway import Backend, BackendGateway
from kunai_agents.llm.usage import InMemoryUsageRecorder, LoggingUsageRecorder
from kunai_agents.llm.openai_backend import OpenAIBackend
from kunai_agents.ticket.analyzer import (
    TicketFields,
    analyze,
    extract_fields,
    is_terminal,
    sanitize,
)
from kunai_agents.ticket.dispatch import Ticket, TicketDispatcher, TicketSink
from kunai_agents.guardrails.toxicity import ToxicityClassifier, ToxicityGuard
from kunai_agents.agent.turn import TurnConfig, TurnProcessor, TurnResult
from kunai_agents.app import build_agent, build_processor

__all__ = [
    "KunaiError",
    "BackendError",
    "BackendUnavailable",
    "RateLimited",
    "AgentConfig",
    "Message",
    "Role",
    "Session",
    "SessionStore",
    "CompactorConfig",
    "ContextCompactor",
    "BackendRequest",
    "BackendResponse",
    "Usage",
    "Backend",
    "BackendGateway",
    "InMemoryUsageRecorder",
    "LoggingUsageRecorder",
    "OpenAIBackend",
    "TicketFields",
    "analyze",
    "extract_fields",
    "is_terminal",
    "sanitize",
    "Ticket",
    "TicketDispatcher",
    "TicketSink",
    "ToxicityClassifier",
    "ToxicityGuard",
    "TurnConfig",
    "TurnProcessor",
    "TurnResult",
    "build_agent",
    "build_processor",
    "__version__",
]
