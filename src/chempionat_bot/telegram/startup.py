"""Startup hook that registers the bot once the application is up."""

from __future__ import annotations

import logging

from telegram.error import TelegramError

from chempionat_bot.core.config import Settings
from chempionat_bot.core.errors import BotRegistrationError

from .bot import TelegramBot
from .registrar import TelegramBotsApi

logger = logging.getLogger(__name__)


class TelegramBotStartup:
    """Registers ``bot`` with ``registrar`` on the first startup signal.

    Skipped entirely under the test profile.  A registration failure is
    logged and re-raised so that application startup aborts.
    """

    def __init__(
        self,
        settings: Settings,
        bot: TelegramBot,
        registrar: TelegramBotsApi,
    ) -> None:
        self._settings = settings
        self._bot = bot
        self._registrar = registrar
        self._fired = False

    @property
    def enabled(self) -> bool:
        return not self._settings.is_test

    @property
    def fired(self) -> bool:
        return self._fired

    async def on_startup(self) -> None:
        if not self.enabled:
            logger.info(
                "Telegram bot registration skipped (profile=%s)",
                self._settings.profile.value,
            )
            return
        if self._fired:
            logger.debug("Telegram bot registration already ran")
            return
        self._fired = True

        logger.info("Initializing Telegram Bot API...")
        try:
            await self._registrar.register_bot(self._bot)
        except (TelegramError, BotRegistrationError):
            logger.exception("Failed to register Telegram bot")
            raise
        logger.info(
            "Telegram bot registered successfully: %s", self._bot.username,
        )
