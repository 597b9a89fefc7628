"""
毒性护栏测试。
"""

import pytest

from kunai_agents.errors import BackendUnavailable
from kunai_agents.guardrails.toxicity import (
    DEFAULT_SAFE_REPLY,
    OFFENSIVE,
    RUDE,
    SAFE,
    InputGuard,
    ToxicityClassifier,
    ToxicityGuard,
    parse_label,
)
from kunai_agents.llm.gateway import BackendGateway
from kunai_agents.llm.types import BackendResponse


class ScriptedBackend:
    def __init__(self, *script):
        self.script = list(script)
        self.requests = []

    async def invoke(self, request):
        self.requests.append(request)
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return BackendResponse(text=item)


async def _no_sleep(seconds):
    pass


def _classifier(*script):
    backend = ScriptedBackend(*script)
    return ToxicityClassifier(BackendGateway(backend, sleep_fn=_no_sleep)), backend


class TestParseLabel:
    def test_exact(self):
        assert parse_label("safe") == SAFE
        assert parse_label("Rude") == RUDE
        assert parse_label(" OFFENSIVE\n") == OFFENSIVE

    def test_unknown_or_empty_is_safe(self):
        assert parse_label("") == SAFE
        assert parse_label(None) == SAFE
        assert parse_label("neutral") == SAFE

    def test_containment_order(self):
        assert parse_label("this is rude, maybe offensive") == RUDE


class TestToxicityClassifier:

    @pytest.mark.asyncio
    async def test_request_shape(self):
        classifier, backend = _classifier("safe")
        label = await classifier.classify("hello")

        assert label == SAFE
        request = backend.requests[0]
        assert [m.role for m in request.messages] == ["system", "user"]
        assert request.messages[1].content == "hello"

    @pytest.mark.asyncio
    async def test_failure_propagates(self):
        classifier, _ = _classifier(RuntimeError("down"))
        with pytest.raises(BackendUnavailable):
            await classifier.classify("hello")


class TestToxicityGuard:

    @pytest.mark.asyncio
    async def test_safe_passes(self):
        classifier, _ = _classifier("safe")
        verdict = await ToxicityGuard(classifier).check("hello")
        assert verdict.passed is True
        assert verdict.label == SAFE

    @pytest.mark.asyncio
    async def test_rude_blocked(self):
        classifier, _ = _classifier("rude")
        guard = ToxicityGuard(classifier)
        verdict = await guard.check("hurry up idiot")
        assert verdict.passed is False
        assert verdict.label == RUDE
        assert verdict.reply == DEFAULT_SAFE_REPLY
        assert isinstance(guard, InputGuard)

    @pytest.mark.asyncio
    async def test_custom_reply(self):
        classifier, _ = _classifier("offensive")
        verdict = await ToxicityGuard(classifier, reply="Calma.").check("...")
        assert verdict.reply == "Calma."
