"""
Agent — 单轮对话编排。

Quick Start::

    from kunai_agents.agent import TurnProcessor

    processor = TurnProcessor(store, gateway)
    result = await processor.process_turn("Hi", "s1")
"""

from kunai_agents.agent.turn import (
    DEFAULT_SESSION_KEY,
    EMPTY_REPLY_FALLBACK,
    TurnConfig,
    TurnProcessor,
    TurnResult,
)

__all__ = [
    "DEFAULT_SESSION_KEY",
    "EMPTY_REPLY_FALLBACK",
    "TurnConfig",
    "TurnProcessor",
    "TurnResult",
]
