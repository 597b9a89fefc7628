"""
AgentConfig 与组装测试。
"""

import logging

import pytest

from kunai_agents.app import build_processor
from kunai_agents.core.config import AgentConfig
from kunai_agents.guardrails.toxicity import ToxicityGuard
from kunai_agents.llm.types import BackendResponse
from kunai_agents.llm.usage import InMemoryUsageRecorder
from kunai_agents.session.store import SessionStore
from kunai_agents.utils.logger import setup_logging

_ENV_KEYS = [
    "OPENAI_API_KEY",
    "KUNAI_MODEL",
    "KUNAI_MAX_RETRIES",
    "KUNAI_SUMMARY_THRESHOLD",
    "KUNAI_MODERATION",
    "TELEGRAM_BOT_TOKEN",
    "RUNTIME_MODE",
    "TELEGRAM_WEBHOOK_URL",
    "WEBAPP_PORT",
    "DEBUG",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in _ENV_KEYS:
        # setenv first so monkeypatch removes anything load_dotenv adds later
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return tmp_path / "missing.env"


class EchoBackend:
    async def invoke(self, request):
        return BackendResponse(text="echo")


class TestAgentConfig:
    def test_defaults(self, clean_env):
        cfg = AgentConfig.from_env(str(clean_env))
        assert cfg.model == "gpt-4o-mini"
        assert cfg.max_retries == 3
        assert cfg.summary_threshold == 20
        assert cfg.moderation_enabled is False
        assert cfg.runtime_mode == "webhook"

    def test_env_overrides(self, clean_env, monkeypatch):
        monkeypatch.setenv("KUNAI_MODEL", "gpt-4.1-mini")
        monkeypatch.setenv("KUNAI_MAX_RETRIES", "5")
        monkeypatch.setenv("KUNAI_MODERATION", "yes")
        monkeypatch.setenv("RUNTIME_MODE", "POLLING")
        monkeypatch.setenv("WEBAPP_PORT", "not-a-number")
        cfg = AgentConfig.from_env(str(clean_env))
        assert cfg.model == "gpt-4.1-mini"
        assert cfg.max_retries == 5
        assert cfg.moderation_enabled is True
        assert cfg.runtime_mode == "polling"
        assert cfg.webhook_port == 8443

    def test_invalid_runtime_mode(self, clean_env, monkeypatch):
        monkeypatch.setenv("RUNTIME_MODE", "carrier-pigeon")
        assert AgentConfig.from_env(str(clean_env)).runtime_mode == "webhook"

    def test_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("KUNAI_SUMMARY_THRESHOLD=8\n", encoding="utf-8")
        cfg = AgentConfig.from_env(str(env_file))
        assert cfg.summary_threshold == 8

    def test_summary_masks_secrets(self):
        cfg = AgentConfig(openai_api_key="sk-abcdefghijklmnop", bot_token="123456789:SECRETSECRET")
        text = cfg.summary()
        assert "sk-abcdefghijklmnop" not in text
        assert "SECRETSECRET" not in text


class TestBuildProcessor:

    @pytest.mark.asyncio
    async def test_wires_components(self):
        cfg = AgentConfig(summary_threshold=4, model="m1")
        processor = build_processor(cfg, backend=EchoBackend())
        result = await processor.process_turn("hi", "s1")
        assert result.reply_text == "echo"
        assert processor.config.model == "m1"

    def test_moderation_guard(self):
        cfg = AgentConfig(moderation_enabled=True)
        processor = build_processor(cfg, backend=EchoBackend())
        assert isinstance(processor._input_guard, ToxicityGuard)

    @pytest.mark.asyncio
    async def test_empty_injected_store_and_recorder_are_used(self):
        store = SessionStore(system_prompt="custom prompt")
        recorder = InMemoryUsageRecorder()
        processor = build_processor(
            AgentConfig(), backend=EchoBackend(), store=store, usage_recorder=recorder
        )

        await processor.process_turn("Hi", "s1")

        assert processor.store is store
        assert "s1" in store
        assert store.get("s1").messages[0].content == "custom prompt"
        assert len(recorder) == 1


class TestSetupLogging:
    def test_returns_package_logger(self, tmp_path):
        log = setup_logging(log_file=str(tmp_path / "logs" / "kunai.log"), debug=True)
        assert log.name == "kunai_agents"
        assert logging.getLogger().level == logging.DEBUG
        assert (tmp_path / "logs").is_dir()
