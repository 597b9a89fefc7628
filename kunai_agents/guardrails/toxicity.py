"""
Toxicity Guard — 用户输入毒性分类护栏（默认关闭）。

Classifies each inbound message as ``safe`` / ``rude`` / ``offensive`` with
a small LLM call. A non-safe message short-circuits the turn with a canned
reply instead of reaching the main model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from kunai_agents.llm.gateway import BackendGateway
from kunai_agents.llm.types import BackendRequest
from kunai_agents.prompts import TOXICITY_PROMPT
from kunai_agents.session.types import Message

logger = logging.getLogger("kunai_agents.guardrails")

SAFE = "safe"
RUDE = "rude"
OFFENSIVE = "offensive"

DEFAULT_SAFE_REPLY = (
    "Hey, I'm just the help desk bot here. Let's keep it friendly: "
    "what can I help you with?"
)


@dataclass
class GuardVerdict:
    """Result of an input check.

    Attributes:
        passed: True if the message may reach the main model.
        label: Classifier label ("safe", "rude", "offensive").
        reply: Reply to show the user when the check fails.
    """

    passed: bool = True
    label: str = SAFE
    reply: str = ""


@runtime_checkable
class InputGuard(Protocol):
    """Pre-check run by the Turn Processor before the main model call."""

    async def check(self, message: str) -> GuardVerdict: ...


def parse_label(raw: Optional[str]) -> str:
    """Map a classifier reply to a label; anything unrecognized is ``safe``."""
    text = (raw or "").strip().lower()
    if not text:
        return SAFE
    for label in (RUDE, OFFENSIVE, SAFE):
        if label in text:
            return label
    return SAFE


class ToxicityClassifier:
    """LLM-backed toxicity classifier.

    Parameters:
        gateway: Gateway used for the classification call.
        model: Model identifier.
        max_retries: Retry budget for the call (default 3).
    """

    def __init__(
        self,
        gateway: BackendGateway,
        model: str = "gpt-4o-mini",
        max_retries: int = 3,
        instruction: str = TOXICITY_PROMPT,
    ) -> None:
        self._gateway = gateway
        self._model = model
        self._max_retries = max_retries
        self._instruction = instruction

    async def classify(self, message: str) -> str:
        request = BackendRequest(
            model=self._model,
            messages=[Message.system(self._instruction), Message.user(message)],
        )
        response = await self._gateway.call(
            request, max_retries=self._max_retries, label="sentiment"
        )
        return parse_label(response.text)


class ToxicityGuard:
    def __init__(
        self,
        classifier: ToxicityClassifier,
        reply: str = DEFAULT_SAFE_REPLY,
    ) -> None:
        self._classifier = classifier
        self._reply = reply

    async def check(self, message: str) -> GuardVerdict:
        label = await self._classifier.classify(message)
        if label == SAFE:
            return GuardVerdict(passed=True, label=label)
        logger.info("Input flagged as %s", label)
        return GuardVerdict(passed=False, label=label, reply=self._reply)
