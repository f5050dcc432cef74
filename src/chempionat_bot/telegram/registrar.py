"""Registrar that connects bot clients to the Telegram Bot API.

Registration initializes the bot's ``Application`` (which calls ``getMe``
and rejects bad tokens), verifies the reported username and starts a
long-polling session.  Registered bots are kept until ``shutdown()``.
"""

from __future__ import annotations

import logging

from telegram.error import TelegramError

from chempionat_bot.core.errors import BotRegistrationError

from .bot import TelegramBot

logger = logging.getLogger(__name__)


def _normalize(username: str) -> str:
    return username.lstrip("@").lower()


class TelegramBotsApi:
    """Registers bots and owns their long-polling sessions."""

    def __init__(
        self,
        *,
        poll_interval: float = 0.0,
        drop_pending_updates: bool = False,
    ) -> None:
        self._poll_interval = poll_interval
        self._drop_pending_updates = drop_pending_updates
        self._sessions: list[TelegramBot] = []

    @property
    def registered(self) -> list[TelegramBot]:
        return list(self._sessions)

    async def register_bot(self, bot: TelegramBot) -> None:
        """Initialize *bot* and start polling for its updates.

        Raises
        ------
        TelegramError
            The Bot API rejected the token or could not be reached.
        BotRegistrationError
            The token belongs to a different bot than configured.
        """
        application = bot.application
        try:
            await application.initialize()

            actual = application.bot.username
            if bot.username and _normalize(actual) != _normalize(bot.username):
                raise BotRegistrationError(
                    bot.username,
                    f"token belongs to @{actual}",
                )

            await application.updater.start_polling(
                poll_interval=self._poll_interval,
                drop_pending_updates=self._drop_pending_updates,
            )
            await application.start()
        except (TelegramError, BotRegistrationError):
            # PTB refuses to shut down while the updater is still polling.
            if application.updater is not None and application.updater.running:
                await application.updater.stop()
            await application.shutdown()
            raise

        self._sessions.append(bot)
        logger.debug("Polling session started for %s", bot.username)

    async def shutdown(self) -> None:
        """Stop every registered bot, most recent first."""
        while self._sessions:
            bot = self._sessions.pop()
            application = bot.application
            try:
                if application.updater is not None and application.updater.running:
                    await application.updater.stop()
                if application.running:
                    await application.stop()
                await application.shutdown()
            except TelegramError:
                logger.exception("Failed to stop Telegram bot %s", bot.username)
            else:
                logger.info("Telegram bot stopped: %s", bot.username)
