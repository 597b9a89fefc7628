"""
Usage 记录 — 每次 LLM 调用的 token 用量观测接口。

Components receive a ``UsageRecorder`` instead of printing directly, so the
sink can be swapped (logs in production, in-memory in tests).
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import List, Protocol, runtime_checkable

from kunai_agents.llm.types import Usage

logger = logging.getLogger("kunai_agents.llm")


@runtime_checkable
class UsageRecorder(Protocol):
    """Sink for per-call token usage."""

    def record(self, label: str, model: str, usage: Usage) -> None: ...


@dataclass
class UsageRecord:
    label: str
    model: str
    usage: Usage
    timestamp: float = field(default_factory=time.time)


class LoggingUsageRecorder:
    """Writes one INFO line per backend call."""

    def __init__(self, log: logging.Logger = logger) -> None:
        self._log = log

    def record(self, label: str, model: str, usage: Usage) -> None:
        self._log.info(
            "LLM usage%s model=%s | input_tokens=%s output_tokens=%s total_tokens=%s",
            f" ({label})" if label else "",
            model,
            usage.input_tokens,
            usage.output_tokens,
            usage.total_tokens,
        )


class InMemoryUsageRecorder:
    """Keeps every record in memory. Useful for tests and ad-hoc accounting."""

    def __init__(self) -> None:
        self._records: List[UsageRecord] = []
        self._lock = threading.Lock()

    def record(self, label: str, model: str, usage: Usage) -> None:
        with self._lock:
            self._records.append(UsageRecord(label=label, model=model, usage=usage))

    @property
    def records(self) -> List[UsageRecord]:
        with self._lock:
            return list(self._records)

    def totals(self) -> Usage:
        """Sum of all known counters (unknown counters count as 0)."""
        total = Usage(input_tokens=0, output_tokens=0, total_tokens=0)
        for r in self.records:
            total.input_tokens += r.usage.input_tokens or 0
            total.output_tokens += r.usage.output_tokens or 0
            total.total_tokens += r.usage.total_tokens or 0
        return total

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        return len(self.records)
