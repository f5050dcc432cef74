"""Long-polling bot client descriptor.

Wraps a python-telegram-bot ``Application``.  The application is built
lazily so that constructing a ``TelegramBot`` never touches the token or
the network; only registration does.
"""

from __future__ import annotations

import logging

from telegram.ext import Application

from chempionat_bot.core.config import TelegramConfig

logger = logging.getLogger(__name__)


class TelegramBot:
    """A bot client identified by its token and public username."""

    def __init__(
        self,
        token: str,
        username: str,
        application: Application | None = None,
    ) -> None:
        self._token = token
        self._username = username
        self._application = application

    @classmethod
    def from_config(cls, config: TelegramConfig) -> TelegramBot:
        return cls(token=config.token, username=config.username)

    @property
    def username(self) -> str:
        return self._username

    @property
    def application(self) -> Application:
        """The underlying ``Application``, built on first access."""
        if self._application is None:
            self._application = Application.builder().token(self._token).build()
            logger.debug("Built Telegram application for %s", self._username)
        return self._application

    def __repr__(self) -> str:
        return f"TelegramBot(username={self._username!r})"
