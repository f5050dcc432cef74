"""Listener that reacts to user lifecycle facts.

Delivery to users (email, push) is not implemented yet; for now every
fact is recorded as a structured log entry.  The listener is subscribed
with ``Dispatch.ASYNC`` so the publisher (the ``/start`` flow) never waits
on it and never sees its failures.
"""

from __future__ import annotations

import logging

from chempionat_bot.core.enums import Dispatch
from chempionat_bot.domain.events import UserStarted
from chempionat_bot.infrastructure.event_bus import IEventBus

logger = logging.getLogger(__name__)


class NotificationEventListener:
    """Observer for ``UserStarted`` facts."""

    async def handle_user_started(self, event: UserStarted) -> None:
        logger.info(
            "User started notification: userId=%s, username=%s",
            event.user_id,
            event.username,
            extra={
                "user_id": event.user_id,
                "username": event.username,
                "event_id": event.event_id,
            },
        )

    def register(self, bus: IEventBus) -> None:
        """Subscribe this listener's handlers on *bus*."""
        bus.subscribe(
            UserStarted,
            self.handle_user_started,
            dispatch=Dispatch.ASYNC,
            name="notifications.user_started",
        )
