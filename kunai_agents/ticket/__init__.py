"""
Ticket — 完成检测、字段提取与工单分发。

Quick Start::

    from kunai_agents.ticket import analyze, TicketDispatcher

    analysis = analyze(raw_model_text)
    if analysis.terminal:
        print(analysis.fields.summary)
"""

from kunai_agents.ticket.analyzer import (
    Analysis,
    FIELD_TAGS,
    TERMINAL_MARKER,
    TicketFields,
    analyze,
    extract_fields,
    is_terminal,
    sanitize,
)
from kunai_agents.ticket.dispatch import (
    DEFAULT_CATEGORY,
    DEFAULT_SUMMARY,
    DispatchOutcome,
    Ticket,
    TicketDispatcher,
    TicketSink,
)

__all__ = [
    "Analysis",
    "FIELD_TAGS",
    "TERMINAL_MARKER",
    "TicketFields",
    "analyze",
    "extract_fields",
    "is_terminal",
    "sanitize",
    "DEFAULT_CATEGORY",
    "DEFAULT_SUMMARY",
    "DispatchOutcome",
    "Ticket",
    "TicketDispatcher",
    "TicketSink",
]
