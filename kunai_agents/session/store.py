"""
SessionStore — 进程内会话存储。

会话键 → 有序消息列表。首次访问时惰性创建（仅含系统指令），
只有显式删除/重置才会清理，不会自动过期。
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Optional

from kunai_agents.prompts import DEFAULT_SYSTEM_PROMPT
from kunai_agents.session.types import Message, Role, Session

logger = logging.getLogger("kunai_agents.session")


class SessionStore:
    """In-memory mapping from session key to conversation state.

    Not persistent: data lives for the lifetime of this object. ``hold(key)``
    keeps at most one turn in flight per session. Per-key locks are
    reference-counted over holders and waiters and are dropped only when
    nobody holds or waits for them, independently of ``delete``.

    Parameters:
        system_prompt: The fixed system instruction every session starts with.
    """

    def __init__(self, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> None:
        self._system_prompt = system_prompt
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def new_system_message(self) -> Message:
        return Message.system(self._system_prompt)

    def get_or_create(self, key: str) -> Session:
        """Return the session for ``key``, creating it on first reference."""
        session = self._sessions.get(key)
        if session is None:
            session = Session(key=key, messages=[self.new_system_message()])
            self._sessions[key] = session
            logger.info("New session created: %s", key)
        return session

    def get(self, key: str) -> Optional[Session]:
        return self._sessions.get(key)

    def replace(self, key: str, messages: Iterable[Message]) -> Session:
        """Swap the whole message sequence of ``key`` in one step.

        Raises:
            ValueError: If ``messages`` is empty or does not start with a
                system message.
        """
        new_messages: List[Message] = list(messages)
        if not new_messages or new_messages[0].role != Role.SYSTEM:
            raise ValueError("Session messages must start with a system message")
        session = Session(key=key, messages=new_messages)
        self._sessions[key] = session
        return session

    def reset(self, key: str) -> Session:
        """Start ``key`` over with a single fresh system message."""
        logger.info("Session reset: %s", key)
        return self.replace(key, [self.new_system_message()])

    def delete(self, key: str) -> None:
        """Remove ``key`` entirely. Deleting an unknown key is a no-op."""
        if self._sessions.pop(key, None) is not None:
            logger.info("Session deleted: %s", key)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Serialize work on ``key``: one holder at a time, FIFO for waiters."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[key] - 1
            if remaining:
                self._lock_users[key] = remaining
            else:
                del self._lock_users[key]
                del self._locks[key]

    def is_held(self, key: str) -> bool:
        """True while some task holds or waits for ``key``."""
        return key in self._lock_users

    def keys(self) -> List[str]:
        return list(self._sessions.keys())

    def clear(self) -> None:
        self._sessions.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
