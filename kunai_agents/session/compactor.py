"""Context Compactor — summarizes long session history into a single message."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from kunai_agents.llm.gateway import BackendGateway
from kunai_agents.llm.types import BackendRequest
from kunai_agents.prompts import SUMMARY_PROMPT
from kunai_agents.session.store import SessionStore
from kunai_agents.session.types import Message

logger = logging.getLogger("kunai_agents.session")

SUMMARY_PREFIX = "Conversation summary so far:"
EMPTY_SUMMARY_FALLBACK = "Summary of the previous conversation so far (details omitted)."


@dataclass
class CompactorConfig:
    model: str = "gpt-4o-mini"
    threshold: int = 20
    max_output_tokens: int = 200
    temperature: float = 0.2
    max_retries: int = 3
    instruction: str = SUMMARY_PROMPT
    prefix: str = SUMMARY_PREFIX


class ContextCompactor:
    def __init__(
        self,
        store: SessionStore,
        gateway: BackendGateway,
        config: Optional[CompactorConfig] = None,
    ) -> None:
        self.config = config or CompactorConfig()
        self._store = store
        self._gateway = gateway

    def needs_compaction(self, key: str) -> bool:
        session = self._store.get(key)
        if session is None:
            return False
        return len(session.history) > self.config.threshold

    async def maybe_compact(self, key: str) -> bool:
        """Replace the history of ``key`` with a summary once it exceeds the threshold.

        Returns True if the session was compacted. A failing summary call
        raises ``BackendUnavailable`` and leaves the session untouched.
        """
        session = self._store.get(key)
        if session is None:
            return False

        history = session.history
        if len(history) <= self.config.threshold:
            return False

        logger.info("Summarizing context for session %s. Messages: %d", key, len(history))

        request = BackendRequest(
            model=self.config.model,
            messages=[Message.system(self.config.instruction), *history],
            max_output_tokens=self.config.max_output_tokens,
            temperature=self.config.temperature,
        )
        response = await self._gateway.call(
            request,
            max_retries=self.config.max_retries,
            label=f"summary for session {key}",
        )

        summary = response.text.strip() or EMPTY_SUMMARY_FALLBACK
        compacted = self._store.replace(
            key,
            [
                session.system_message,
                Message.assistant(f"{self.config.prefix}\n{summary}"),
            ],
        )
        logger.info("Context summarized for session %s. New length: %d", key, len(compacted))
        return True
