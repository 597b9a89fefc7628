"""
Completion & Extraction Analyzer — 从模型原始输出中检测完成标记并提取工单字段。

输出约定（模型侧）::

    <ticket>
    <su>short summary</su>
    <de>full description</de>
    <ca>Category</ca>
    </ticket>
    [[ORDER_COMPLETED]]

Tag names and the marker are matched case-insensitively but are otherwise
fixed strings. Extraction always reads the raw text; ``sanitize`` is
destructive and must run afterwards.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Optional

TERMINAL_MARKER = "[[ORDER_COMPLETED]]"

FIELD_TAGS: Dict[str, str] = {
    "summary": "su",
    "description": "de",
    "category": "ca",
}

_MARKER_RE = re.compile(re.escape(TERMINAL_MARKER), re.IGNORECASE)
_TICKET_BLOCK_RE = re.compile(r"<ticket>[\s\S]*?</ticket>", re.IGNORECASE)
_TAG_RES: Dict[str, "re.Pattern[str]"] = {
    name: re.compile(rf"<{tag}>([\s\S]*?)</{tag}>", re.IGNORECASE)
    for name, tag in FIELD_TAGS.items()
}
# Stand-in for a removed construct until its surrounding whitespace is collapsed.
_GAP = "\x00"
_GAP_RE = re.compile(r"\s*\x00(?:\s*\x00)*\s*")


@dataclass
class TicketFields:
    """Structured fields carried by a tagged extraction block."""

    summary: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.summary is None and self.description is None and self.category is None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "summary": self.summary,
            "description": self.description,
            "category": self.category,
        }


@dataclass
class Analysis:
    terminal: bool = False
    fields: TicketFields = field(default_factory=TicketFields)
    display_text: str = ""


def is_terminal(text: str) -> bool:
    """True iff ``text`` contains the terminal marker in any casing."""
    return TERMINAL_MARKER.lower() in (text or "").lower()


def extract_fields(text: str) -> TicketFields:
    """Extract the first ``<su>``, ``<de>`` and ``<ca>`` regions.

    A missing (or blank) region yields None for that field; this never raises.
    """
    values: Dict[str, Optional[str]] = {}
    for name, pattern in _TAG_RES.items():
        match = pattern.search(text or "")
        value = match.group(1).strip() if match else ""
        values[name] = value or None
    return TicketFields(**values)


def _close_gap(match: "re.Match[str]") -> str:
    return "\n\n" if "\n" in match.group(0) else " "


def sanitize(text: str) -> str:
    """Remove the marker and every complete tagged block, producing display text."""
    cleaned = (text or "").replace(_GAP, "")
    cleaned = _TICKET_BLOCK_RE.sub(_GAP, cleaned)
    for pattern in _TAG_RES.values():
        cleaned = pattern.sub(_GAP, cleaned)
    cleaned = _MARKER_RE.sub(_GAP, cleaned)
    # A gap never collapses to nothing, so no new tag or marker can be spliced together.
    cleaned = _GAP_RE.sub(_close_gap, cleaned)
    return cleaned.strip()


def analyze(text: str) -> Analysis:
    """Run detection and extraction on the raw text, then sanitize it."""
    terminal = is_terminal(text)
    fields = extract_fields(text)
    return Analysis(terminal=terminal, fields=fields, display_text=sanitize(text))
