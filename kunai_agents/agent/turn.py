"""
TurnProcessor — 单轮对话编排。

核心流程:
    User Input → [compact history?] → [input guard?] → append user → LLM
      → detect marker / extract fields → append sanitized reply → TurnResult

Usage::

    processor = TurnProcessor(store, gateway, compactor)
    result = await processor.process_turn("My laptop won't boot", "chat-42")
    print(result.reply_text)
    if result.terminal:
        print(result.fields.summary, result.fields.category)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from kunai_agents.guardrails.toxicity import InputGuard
from kunai_agents.llm.gateway import BackendGateway
from kunai_agents.llm.types import BackendRequest
from kunai_agents.session.compactor import ContextCompactor
from kunai_agents.session.store import SessionStore
from kunai_agents.session.types import Message
from kunai_agents.ticket.analyzer import TicketFields, analyze

logger = logging.getLogger("kunai_agents.agent")

DEFAULT_SESSION_KEY = "default-session"
EMPTY_REPLY_FALLBACK = "Sorry, I had trouble answering that."


@dataclass
class TurnConfig:
    model: str = "gpt-4o-mini"
    max_output_tokens: int = 400
    temperature: float = 0.3
    max_retries: int = 3


@dataclass
class TurnResult:
    """Outcome of one user turn.

    Attributes:
        reply_text: Text safe to show the user (marker and tags removed).
        terminal: True when the model signalled that a ticket is ready.
        fields: Fields extracted from the raw reply (all None if absent).
        flagged: True when an input guard answered instead of the model.
    """

    reply_text: str = ""
    terminal: bool = False
    fields: TicketFields = field(default_factory=TicketFields)
    flagged: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "replyText": self.reply_text,
            "terminal": self.terminal,
            "fields": self.fields.to_dict(),
        }


class TurnProcessor:
    """Orchestrates one user turn against a session.

    Turns on the same session key are serialized with ``store.hold(key)``;
    different keys run concurrently. Callers that must run follow-up work
    under the same hold (ticket dispatch) use ``process_held``.

    Parameters:
        store: Session store (shared with the compactor).
        gateway: Backend gateway for the main reply.
        compactor: Compactor run before the user message is appended.
        config: Model and generation parameters.
        input_guard: Optional pre-check (e.g. ``ToxicityGuard``).
    """

    def __init__(
        self,
        store: SessionStore,
        gateway: BackendGateway,
        compactor: Optional[ContextCompactor] = None,
        config: Optional[TurnConfig] = None,
        input_guard: Optional[InputGuard] = None,
    ) -> None:
        self.store = store
        self.config = config or TurnConfig()
        self._gateway = gateway
        self._compactor = compactor if compactor is not None else ContextCompactor(store, gateway)
        self._input_guard = input_guard

    async def process_turn(self, message: str, session_key: str = "") -> TurnResult:
        """Process one user message.

        Raises:
            BackendUnavailable: If the summary or main call fails. The user
                message stays in the session; no assistant message is added.
        """
        key = session_key or DEFAULT_SESSION_KEY
        async with self.store.hold(key):
            return await self.process_held(message, key)

    async def process_held(self, message: str, key: str) -> TurnResult:
        """Same as ``process_turn``; the caller already holds ``store.hold(key)``."""
        self.store.get_or_create(key)
        await self._compactor.maybe_compact(key)
        session = self.store.get_or_create(key)

        logger.debug("Incoming message | session=%s | text=%s", key, message)

        if self._input_guard is not None:
            verdict = await self._input_guard.check(message)
            if not verdict.passed:
                session.append(Message.user(message))
                session.append(Message.assistant(verdict.reply))
                return TurnResult(reply_text=verdict.reply, flagged=True)

        session.append(Message.user(message))

        request = BackendRequest(
            model=self.config.model,
            messages=list(session.messages),
            max_output_tokens=self.config.max_output_tokens,
            temperature=self.config.temperature,
        )
        response = await self._gateway.call(
            request,
            max_retries=self.config.max_retries,
            label=f"chat for session {key}",
        )

        raw = response.text or EMPTY_REPLY_FALLBACK
        logger.debug("Assistant reply (raw) | session=%s | %s", key, raw)

        analysis = analyze(raw)
        session.append(Message.assistant(analysis.display_text))

        if analysis.terminal:
            logger.info(
                "Ticket ready | session=%s | category=%s",
                key,
                analysis.fields.category,
            )

        return TurnResult(
            reply_text=analysis.display_text,
            terminal=analysis.terminal,
            fields=analysis.fields,
        )

    def reset_session(self, session_key: str) -> None:
        """Discard all history for ``session_key``. Always succeeds."""
        self.store.delete(session_key)
