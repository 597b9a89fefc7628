"""
TicketDispatcher — 对话完成后的工单分发（调用方侧）。

On a terminal turn: build a ``Ticket`` with defaults for missing fields,
notify every notifier sink, submit to the issue tracker sink, and reset the
session only if the tracker accepted the ticket. Concrete sinks (e-mail,
issue trackers) live outside this package and implement ``TicketSink``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from kunai_agents.session.store import SessionStore

if TYPE_CHECKING:
    from kunai_agents.agent.turn import TurnResult

logger = logging.getLogger("kunai_agents.ticket")

DEFAULT_SUMMARY = "New support request from KunAI"
DEFAULT_CATEGORY = "Uncategorized"


@dataclass
class Ticket:
    summary: str
    description: str
    category: str
    reply_text: str = ""
    session_key: str = ""

    @classmethod
    def from_turn(cls, result: TurnResult, session_key: str = "") -> "Ticket":
        """Build a ticket, substituting defaults for fields the model left out."""
        fields = result.fields
        category = fields.category or DEFAULT_CATEGORY
        description = fields.description or (
            f"{result.reply_text}\n\n(Category: {category})"
        )
        return cls(
            summary=fields.summary or DEFAULT_SUMMARY,
            description=description,
            category=category,
            reply_text=result.reply_text,
            session_key=session_key,
        )


@runtime_checkable
class TicketSink(Protocol):
    """Downstream consumer of completed tickets.

    ``submit`` returns an external reference (e.g. an issue key) or None.
    """

    name: str

    async def submit(self, ticket: Ticket) -> Optional[str]: ...


@dataclass
class DispatchOutcome:
    """What happened to a terminal turn downstream.

    Attributes:
        ticket: The ticket that was dispatched (None for non-terminal turns).
        issue_key: Reference returned by the tracker sink, if any.
        notified: Names of notifier sinks that succeeded.
        errors: Sink name → error message for sinks that failed.
        session_reset: True if the session was reset afterwards.
    """

    ticket: Optional[Ticket] = None
    issue_key: Optional[str] = None
    notified: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    session_reset: bool = False


class TicketDispatcher:
    """Runs the side effects of a completed conversation.

    Parameters:
        store: Session store, used to reset the session after a tracked ticket.
        notifiers: Best-effort sinks (failures are logged, never raised).
        tracker: Issue-tracker sink; its success triggers the session reset.
    """

    def __init__(
        self,
        store: SessionStore,
        notifiers: Optional[Sequence[TicketSink]] = None,
        tracker: Optional[TicketSink] = None,
    ) -> None:
        self._store = store
        self._notifiers = list(notifiers or [])
        self._tracker = tracker

    async def dispatch(self, result: TurnResult, session_key: str) -> DispatchOutcome:
        if not result.terminal:
            return DispatchOutcome()

        ticket = Ticket.from_turn(result, session_key)
        outcome = DispatchOutcome(ticket=ticket)
        logger.info("Ticket completed | session=%s | dispatching", session_key)

        for sink in self._notifiers:
            try:
                await sink.submit(ticket)
                outcome.notified.append(sink.name)
                logger.info("Notifier %s succeeded", sink.name)
            except Exception as e:
                outcome.errors[sink.name] = str(e)
                logger.error("Notifier %s failed: %s", sink.name, e)

        if self._tracker is None:
            return outcome

        try:
            outcome.issue_key = await self._tracker.submit(ticket)
        except Exception as e:
            outcome.errors[self._tracker.name] = str(e)
            logger.error("Failed to create issue via %s: %s", self._tracker.name, e)
            return outcome

        logger.info("Issue created: %s", outcome.issue_key)
        self._store.reset(session_key)
        outcome.session_reset = True
        return outcome
