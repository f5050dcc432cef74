"""AppContext: the process-wide container with explicit init/teardown.

Owns the event bus and the Telegram components.  The HTTP lifespan calls
``start()`` before serving requests and ``stop()`` after the last one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .config import Settings

if TYPE_CHECKING:
    from chempionat_bot.domain.events import DomainEvent
    from chempionat_bot.infrastructure.event_bus import InMemoryEventBus
    from chempionat_bot.telegram.bot import TelegramBot
    from chempionat_bot.telegram.registrar import TelegramBotsApi
    from chempionat_bot.telegram.startup import TelegramBotStartup

logger = logging.getLogger(__name__)


class AppContext:
    """Wiring of long-lived components for one application process."""

    def __init__(
        self,
        settings: Settings,
        event_bus: InMemoryEventBus,
        bot: TelegramBot,
        registrar: TelegramBotsApi,
        bot_startup: TelegramBotStartup,
    ) -> None:
        self.settings = settings
        self.event_bus = event_bus
        self.bot = bot
        self.registrar = registrar
        self.bot_startup = bot_startup
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Startup sequence: event bus first, then bot registration.

        A registration failure stops the bus again and propagates.
        """
        if self._started:
            return
        await self.event_bus.start()
        try:
            await self.bot_startup.on_startup()
        except Exception:
            await self.event_bus.stop()
            raise
        self._started = True
        logger.info(
            "Application context started",
            extra={"profile": self.settings.profile.value},
        )

    async def stop(self) -> None:
        """Teardown in reverse order: bot sessions, then the event bus."""
        if not self._started:
            return
        await self.registrar.shutdown()
        await self.event_bus.stop()
        self._started = False
        logger.info("Application context stopped")

    async def publish(self, event: DomainEvent) -> None:
        await self.event_bus.publish(event)
