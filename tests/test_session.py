"""
Session 存储与历史压缩全量测试。
"""

import pytest

from kunai_agents.errors import BackendUnavailable, RateLimited
from kunai_agents.llm.gateway import BackendGateway
from kunai_agents.llm.types import BackendResponse
from kunai_agents.session.compactor import (
    CompactorConfig,
    ContextCompactor,
    EMPTY_SUMMARY_FALLBACK,
    SUMMARY_PREFIX,
)
from kunai_agents.session.store import SessionStore
from kunai_agents.session.types import Message, Role, Session


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


def _fill(store, key, n):
    session = store.get_or_create(key)
    for i in range(n):
        if i % 2 == 0:
            session.append(Message.user(f"user {i}"))
        else:
            session.append(Message.assistant(f"assistant {i}"))
    return session


# ══════════════════════════════════════════════
# Message / Session
# ══════════════════════════════════════════════

class TestMessage:
    def test_to_dict(self):
        assert Message.user("hi").to_dict() == {"role": "user", "content": "hi"}

    def test_from_dict_defaults(self):
        m = Message.from_dict({})
        assert m.role == Role.USER
        assert m.content == ""

    def test_unknown_role(self):
        with pytest.raises(ValueError):
            Message(role="tool", content="x")

    def test_immutable(self):
        m = Message.user("hi")
        with pytest.raises(AttributeError):
            m.content = "changed"


class TestSession:
    def test_history_excludes_system(self):
        s = Session("k", [Message.system("sys"), Message.user("a")])
        assert s.system_message.content == "sys"
        assert s.history == [Message.user("a")]
        assert len(s) == 2


# ══════════════════════════════════════════════
# SessionStore
# ══════════════════════════════════════════════

class TestSessionStore:
    def test_new_session_has_only_system(self):
        store = SessionStore(system_prompt="You are KunAI")
        session = store.get_or_create("s1")
        assert len(session.messages) == 1
        assert session.messages[0].role == Role.SYSTEM
        assert session.messages[0].content == "You are KunAI"

    def test_get_or_create_is_idempotent(self):
        store = SessionStore()
        first = store.get_or_create("s1")
        first.append(Message.user("hello"))
        second = store.get_or_create("s1")
        assert second is first
        assert len(second) == 2
        assert len(store) == 1

    def test_get_missing(self):
        assert SessionStore().get("nope") is None

    def test_replace(self):
        store = SessionStore()
        _fill(store, "s1", 4)
        new = store.replace("s1", [Message.system("sys"), Message.assistant("summary")])
        assert store.get("s1") is new
        assert [m.role for m in new.messages] == ["system", "assistant"]

    def test_replace_requires_system_first(self):
        store = SessionStore()
        with pytest.raises(ValueError):
            store.replace("s1", [Message.user("x")])
        with pytest.raises(ValueError):
            store.replace("s1", [])

    def test_reset(self):
        store = SessionStore(system_prompt="sys")
        _fill(store, "s1", 6)
        session = store.reset("s1")
        assert session.messages == [Message.system("sys")]

    def test_delete_then_recreate(self):
        store = SessionStore()
        _fill(store, "s1", 5)
        store.delete("s1")
        assert "s1" not in store
        session = store.get_or_create("s1")
        assert len(session.messages) == 1
        assert session.messages[0].role == Role.SYSTEM

    def test_delete_missing_is_noop(self):
        store = SessionStore()
        store.delete("ghost")
        store.delete("ghost")
        assert len(store) == 0

    def test_keys_and_clear(self):
        store = SessionStore()
        store.get_or_create("a")
        store.get_or_create("b")
        assert sorted(store.keys()) == ["a", "b"]
        store.clear()
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_hold_released_after_use(self):
        store = SessionStore()
        async with store.hold("a"):
            assert store.is_held("a")
            assert not store.is_held("b")
        assert not store.is_held("a")

    @pytest.mark.asyncio
    async def test_hold_survives_delete(self):
        store = SessionStore()
        store.get_or_create("a")
        async with store.hold("a"):
            store.delete("a")
            assert store.is_held("a")
        assert "a" not in store
        assert not store.is_held("a")


# ══════════════════════════════════════════════
# ContextCompactor
# ══════════════════════════════════════════════

class TestContextCompactor:

    def _make(self, *script, threshold=20):
        store = SessionStore(system_prompt="sys")
        backend = ScriptedBackend(*script)
        gateway = BackendGateway(backend, sleep_fn=_no_sleep)
        compactor = ContextCompactor(store, gateway, CompactorConfig(threshold=threshold))
        return store, backend, compactor

    @pytest.mark.asyncio
    async def test_missing_session_noop(self):
        store, backend, compactor = self._make()
        assert await compactor.maybe_compact("nope") is False
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_at_threshold_noop(self):
        store, backend, compactor = self._make()
        _fill(store, "s1", 20)
        assert compactor.needs_compaction("s1") is False
        assert await compactor.maybe_compact("s1") is False
        assert len(store.get("s1").messages) == 21
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_over_threshold_compacts_to_two(self):
        store, backend, compactor = self._make("User has a broken printer.")
        _fill(store, "s1", 21)

        assert compactor.needs_compaction("s1") is True
        assert await compactor.maybe_compact("s1") is True

        messages = store.get("s1").messages
        assert len(messages) == 2
        assert messages[0] == Message.system("sys")
        assert messages[1].role == Role.ASSISTANT
        assert messages[1].content == f"{SUMMARY_PREFIX}\nUser has a broken printer."

    @pytest.mark.asyncio
    async def test_always_two_regardless_of_length(self):
        for n in (21, 35, 100):
            store, backend, compactor = self._make("summary")
            _fill(store, "s1", n)
            await compactor.maybe_compact("s1")
            assert len(store.get("s1").messages) == 2

    @pytest.mark.asyncio
    async def test_summary_request_shape(self):
        store, backend, compactor = self._make("summary")
        _fill(store, "s1", 22)
        await compactor.maybe_compact("s1")

        request = backend.requests[0]
        assert request.max_output_tokens == 200
        assert request.temperature == 0.2
        assert request.messages[0].role == Role.SYSTEM
        assert request.messages[0].content != "sys"
        # full non-system history follows the summary instruction
        assert len(request.messages) == 1 + 22
        assert request.messages[1] == Message.user("user 0")

    @pytest.mark.asyncio
    async def test_empty_summary_fallback(self):
        store, backend, compactor = self._make("   ")
        _fill(store, "s1", 21)
        await compactor.maybe_compact("s1")
        assert store.get("s1").messages[1].content.endswith(EMPTY_SUMMARY_FALLBACK)

    @pytest.mark.asyncio
    async def test_failure_leaves_session_untouched(self):
        store, backend, compactor = self._make(RateLimited(), RateLimited(), RateLimited())
        before = list(_fill(store, "s1", 25).messages)

        with pytest.raises(BackendUnavailable):
            await compactor.maybe_compact("s1")

        assert store.get("s1").messages == before

    @pytest.mark.asyncio
    async def test_compacted_session_not_recompacted(self):
        store, backend, compactor = self._make("first summary")
        _fill(store, "s1", 21)
        await compactor.maybe_compact("s1")
        assert await compactor.maybe_compact("s1") is False
        assert len(backend.requests) == 1
