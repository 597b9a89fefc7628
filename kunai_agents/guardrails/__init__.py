"""
Guardrails — 输入护栏。

Quick Start::

    from kunai_agents.guardrails import ToxicityClassifier, ToxicityGuard

    guard = ToxicityGuard(ToxicityClassifier(gateway))
    verdict = await guard.check("you are useless")
"""

from kunai_agents.guardrails.toxicity import (
    DEFAULT_SAFE_REPLY,
    GuardVerdict,
    InputGuard,
    OFFENSIVE,
    RUDE,
    SAFE,
    ToxicityClassifier,
    ToxicityGuard,
    parse_label,
)

__all__ = [
    "DEFAULT_SAFE_REPLY",
    "GuardVerdict",
    "InputGuard",
    "OFFENSIVE",
    "RUDE",
    "SAFE",
    "ToxicityClassifier",
    "ToxicityGuard",
    "parse_label",
]
