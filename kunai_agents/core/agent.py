"""
KunaiAgent — 聊天渠道入口。

封装 python-telegram-bot 的 Application，自动完成：
  - 文本消息 → TurnProcessor（chat id 作为会话键）
  - 完成的工单 → TicketDispatcher，回复中附带工单号
  - /reset 命令清空会话
  - Webhook / Polling 启动
"""

from __future__ import annotations

import logging
from typing import Optional

from telegram import Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from kunai_agents.agent.turn import DEFAULT_SESSION_KEY, TurnProcessor
from kunai_agents.core.config import AgentConfig
from kunai_agents.errors import BackendUnavailable
from kunai_agents.ticket.dispatch import TicketDispatcher

logger = logging.getLogger("kunai_agents")

RATE_LIMITED_REPLY = "I'm getting a bit overwhelmed 😅. Try again shortly!"
ERROR_REPLY = "Sorry, something went wrong on my side. Please try again."
RESET_REPLY = "Conversation reset. How can I help?"


class KunaiAgent:
    """
    KunAI 的渠道主入口。

    Usage::

        config = AgentConfig.from_env()
        agent = KunaiAgent(config, processor, dispatcher)
        agent.run()
    """

    def __init__(
        self,
        config: AgentConfig,
        processor: TurnProcessor,
        dispatcher: Optional[TicketDispatcher] = None,
    ) -> None:
        self._config = config
        self._processor = processor
        self._dispatcher = dispatcher
        self._application: Optional[Application] = None

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def application(self) -> Optional[Application]:
        return self._application

    # ─── 渠道无关的处理逻辑 ───

    async def handle_text(self, session_key: str, text: str) -> str:
        """Run one turn and return the reply to send back to the chat.

        The turn and its ticket dispatch run under one hold of the session
        key, so the post-ticket reset cannot wipe a later turn.
        """
        key = session_key or DEFAULT_SESSION_KEY
        async with self._processor.store.hold(key):
            try:
                result = await self._processor.process_held(text, key)
            except BackendUnavailable as e:
                logger.exception("Turn failed | session=%s: %s", key, e)
                return RATE_LIMITED_REPLY if e.rate_limited else ERROR_REPLY

            reply = result.reply_text
            if result.terminal and self._dispatcher is not None:
                outcome = await self._dispatcher.dispatch(result, key)
                if outcome.issue_key:
                    reply += f"\n\n✅ Ticket created: {outcome.issue_key}"
            return reply

    async def handle_reset(self, session_key: str) -> str:
        """Reset after any in-flight turn on the same key has finished."""
        logger.info("Reset request for session: %s", session_key)
        async with self._processor.store.hold(session_key):
            self._processor.reset_session(session_key)
        return RESET_REPLY

    # ─── 构建 Application ───

    def build(self) -> Application:
        """构建 python-telegram-bot Application 实例。"""
        cfg = self._config
        if not cfg.bot_token:
            raise ValueError("bot_token 为空！请在 .env 中配置 TELEGRAM_BOT_TOKEN。")

        application = ApplicationBuilder().token(cfg.bot_token).build()

        async def _on_reset(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            if update.effective_chat is None or update.message is None:
                return
            reply = await self.handle_reset(str(update.effective_chat.id))
            await update.message.reply_text(reply)

        async def _on_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            if update.effective_chat is None or update.message is None:
                return
            text = (update.message.text or "").strip()
            if not text:
                return
            chat_id = str(update.effective_chat.id)
            logger.info("[input] chat=%s text=%s", chat_id, text)
            reply = await self.handle_text(chat_id, text)
            await update.message.reply_text(reply)

        application.add_handler(CommandHandler("reset", _on_reset))
        application.add_handler(
            MessageHandler(filters.TEXT & ~filters.COMMAND, _on_text)
        )
        application.add_error_handler(_default_error_handler)

        self._application = application
        return application

    # ─── 运行 ───

    def run(self) -> None:
        """构建并启动 Bot。"""
        cfg = self._config
        application = self.build()

        logger.info("KunAI agent v%s", _get_version())
        logger.info(cfg.summary())

        if cfg.runtime_mode == "webhook":
            if not cfg.webhook_url:
                raise ValueError("runtime_mode=webhook 但 webhook_url 为空！")
            webhook_full = cfg.webhook_url.rstrip("/")
            if cfg.webhook_path:
                webhook_full += "/" + cfg.webhook_path.strip("/")
            logger.info("启动 Webhook: %s", webhook_full)
            application.run_webhook(
                listen=cfg.webhook_host,
                port=cfg.webhook_port,
                url_path=cfg.webhook_path.strip("/") if cfg.webhook_path else "",
                webhook_url=webhook_full,
                secret_token=cfg.webhook_secret or None,
            )
        else:
            logger.info("启动 Polling 模式")
            application.run_polling()


def _get_version() -> str:
    try:
        from kunai_agents import __version__
        return __version__
    except ImportError:
        return "unknown"


async def _default_error_handler(
    update: object, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """默认错误处理器。"""
    logger.exception("处理更新时出错: %s", context.error)
