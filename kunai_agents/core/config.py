"""
Agent 配置管理。

支持从环境变量 (.env) 或代码直接构造。
Runtime: "webhook" 或 "polling"。
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: Optional[str], default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class AgentConfig:
    """KunAI 运行配置。"""

    # ── LLM ──
    openai_api_key: str = ""
    model: str = "gpt-4o-mini"
    max_retries: int = 3
    summary_threshold: int = 20
    moderation_enabled: bool = False

    # ── Telegram ──
    bot_token: str = ""
    runtime_mode: str = "webhook"  # "webhook" | "polling"

    # ── Webhook ──
    webhook_url: str = ""
    webhook_path: str = ""
    webhook_host: str = "0.0.0.0"
    webhook_port: int = 8443
    webhook_secret: str = ""

    # ── 调试 ──
    debug: bool = False
    log_file: str = ""

    # ── 扩展配置 (业务层自行使用) ──
    extras: dict = field(default_factory=dict)

    @classmethod
    def from_env(cls, env_file: str = ".env") -> AgentConfig:
        """
        从 .env 文件和环境变量中加载配置。

        环境变量优先级高于 .env 文件。
        """
        load_dotenv(env_file, override=False)

        runtime_mode = os.getenv("RUNTIME_MODE", "webhook").strip().lower()
        if runtime_mode not in {"webhook", "polling"}:
            runtime_mode = "webhook"

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", "").strip(),
            model=os.getenv("KUNAI_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini",
            max_retries=max(1, _to_int(os.getenv("KUNAI_MAX_RETRIES"), 3)),
            summary_threshold=_to_int(os.getenv("KUNAI_SUMMARY_THRESHOLD"), 20),
            moderation_enabled=_to_bool(os.getenv("KUNAI_MODERATION")),
            bot_token=os.getenv("TELEGRAM_BOT_TOKEN", "").strip(),
            runtime_mode=runtime_mode,
            webhook_url=os.getenv("TELEGRAM_WEBHOOK_URL", "").strip(),
            webhook_path=os.getenv("WEBHOOK_PATH", "").strip(),
            webhook_host=os.getenv("WEBAPP_HOST", "0.0.0.0").strip(),
            webhook_port=_to_int(os.getenv("WEBAPP_PORT"), 8443),
            webhook_secret=os.getenv("WEBHOOK_SECRET_TOKEN", "").strip(),
            debug=_to_bool(os.getenv("DEBUG")),
            log_file=os.getenv("LOG_FILE", "").strip(),
        )

    def summary(self) -> str:
        """返回配置摘要（敏感信息脱敏）。"""
        token_display = f"{self.bot_token[:10]}..." if self.bot_token else "未配置"
        key_display = f"{self.openai_api_key[:6]}..." if self.openai_api_key else "未配置"
        return (
            f"Model: {self.model}\n"
            f"OpenAI key: {key_display}\n"
            f"Token: {token_display}\n"
            f"Runtime: {self.runtime_mode.upper()}\n"
            f"Webhook: {self.webhook_url[:50]}...\n"
            f"Port: {self.webhook_port}\n"
            f"Summary threshold: {self.summary_threshold}\n"
            f"Moderation: {self.moderation_enabled}\n"
            f"Debug: {self.debug}"
        )
