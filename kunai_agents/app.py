"""
组装工具 — 从 AgentConfig 构建完整的处理链路。

Usage::

    from kunai_agents.app import build_processor

    processor = build_processor(AgentConfig.from_env())
    result = await processor.process_turn("Hi", "s1")
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from kunai_agents.agent.turn import TurnConfig, TurnProcessor
from kunai_agents.core.config import AgentConfig
from kunai_agents.guardrails.toxicity import ToxicityClassifier, ToxicityGuard
from kunai_agents.llm.gateway import Backend, BackendGateway, SleepFn
from kunai_agents.llm.openai_backend import OpenAIBackend
from kunai_agents.llm.usage import UsageRecorder
from kunai_agents.session.compactor import CompactorConfig, ContextCompactor
from kunai_agents.session.store import SessionStore
from kunai_agents.ticket.dispatch import TicketDispatcher, TicketSink


def build_processor(
    config: AgentConfig,
    backend: Optional[Backend] = None,
    store: Optional[SessionStore] = None,
    usage_recorder: Optional[UsageRecorder] = None,
    sleep_fn: SleepFn = asyncio.sleep,
) -> TurnProcessor:
    """Wire store, gateway, compactor and (optionally) the toxicity guard."""
    store = store if store is not None else SessionStore()
    if backend is None:
        backend = OpenAIBackend(api_key=config.openai_api_key)
    gateway = BackendGateway(backend, usage_recorder=usage_recorder, sleep_fn=sleep_fn)

    compactor = ContextCompactor(
        store,
        gateway,
        CompactorConfig(
            model=config.model,
            threshold=config.summary_threshold,
            max_retries=config.max_retries,
        ),
    )

    guard = None
    if config.moderation_enabled:
        guard = ToxicityGuard(
            ToxicityClassifier(gateway, model=config.model, max_retries=config.max_retries)
        )

    return TurnProcessor(
        store,
        gateway,
        compactor,
        TurnConfig(model=config.model, max_retries=config.max_retries),
        input_guard=guard,
    )


def build_agent(
    config: AgentConfig,
    notifiers: Optional[Sequence[TicketSink]] = None,
    tracker: Optional[TicketSink] = None,
    backend: Optional[Backend] = None,
):
    """Build a ready-to-run ``KunaiAgent``."""
    from kunai_agents.core.agent import KunaiAgent

    processor = build_processor(config, backend=backend)
    dispatcher = TicketDispatcher(processor.store, notifiers=notifiers, tracker=tracker)
    return KunaiAgent(config, processor, dispatcher)
