"""Application bootstrap.

Wires every component by explicit constructor calls and serves the HTTP
application with uvicorn.  Startup order:

1. Load settings and validate bot credentials.
2. Set up logging.
3. Build the context: event bus, listeners, bot, registrar, startup hook.
4. Create the FastAPI app; its lifespan starts the context.
"""

from __future__ import annotations

import logging
from typing import Any

import uvicorn
from fastapi import FastAPI

from .api.app import create_app
from .core.config import Settings, load_settings
from .core.context import AppContext
from .infrastructure.event_bus import InMemoryEventBus
from .notifications.listener import NotificationEventListener
from .observability.logger import setup_logging
from .telegram.bot import TelegramBot
from .telegram.registrar import TelegramBotsApi
from .telegram.startup import TelegramBotStartup

logger = logging.getLogger(__name__)


def build_context(
    settings: Settings,
    bot: TelegramBot | None = None,
) -> AppContext:
    """Construct the application context for *settings*.

    *bot* replaces the client built from ``settings.telegram``.
    """
    notifications = settings.notifications
    event_bus = InMemoryEventBus(
        workers=notifications.workers,
        history_size=notifications.history_size,
        dead_letter_size=notifications.dead_letter_size,
    )
    NotificationEventListener().register(event_bus)

    if bot is None:
        bot = TelegramBot.from_config(settings.telegram)
    registrar = TelegramBotsApi(
        poll_interval=settings.telegram.poll_interval,
        drop_pending_updates=settings.telegram.drop_pending_updates,
    )
    bot_startup = TelegramBotStartup(settings, bot, registrar)

    return AppContext(
        settings=settings,
        event_bus=event_bus,
        bot=bot,
        registrar=registrar,
        bot_startup=bot_startup,
    )


def create_application(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> FastAPI:
    """Load config, validate, wire modules and return the HTTP app."""
    settings = load_settings(config_path=config_path, overrides=overrides)
    settings.validate_telegram()

    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )

    logger.info(
        "Starting chempionat-bot",
        extra={
            "profile": settings.profile.value,
            "bot_username": settings.telegram.username,
        },
    )

    return create_app(build_context(settings))


def run(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> None:
    """Main entry point. Build the app and serve it until interrupted."""
    app = create_application(config_path=config_path, overrides=overrides)
    api = app.state.context.settings.api
    uvicorn.run(app, host=api.host, port=api.port, log_config=None)
