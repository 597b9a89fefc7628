"""
Session 管理 — 进程内会话存储 + 历史摘要压缩。

Quick Start::

    from kunai_agents.session import SessionStore, ContextCompactor

    store = SessionStore()
    session = store.get_or_create("chat-42")
    compactor = ContextCompactor(store, gateway)
    await compactor.maybe_compact("chat-42")
"""

from kunai_agents.session.types import Message, Role, Session
from kunai_agents.session.store import SessionStore
from kunai_agents.session.compactor import (
    CompactorConfig,
    ContextCompactor,
    EMPTY_SUMMARY_FALLBACK,
    SUMMARY_PREFIX,
)

__all__ = [
    "Message",
    "Role",
    "Session",
    "SessionStore",
    "CompactorConfig",
    "ContextCompactor",
    "EMPTY_SUMMARY_FALLBACK",
    "SUMMARY_PREFIX",
]
