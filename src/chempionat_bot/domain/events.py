"""Domain events (facts) for the bot application.

Design invariants
-----------------
1.  Every event is **immutable** (``frozen=True``).
2.  ``event_id`` is a UUID4 generated at creation time.
3.  ``source`` names the component that published the event.
4.  Events are never persisted; they live until every subscriber finishes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from chempionat_bot.core.ids import new_id as _uuid
from chempionat_bot.core.ids import utc_now as _now
from chempionat_bot.core.models import User

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DomainEvent:
    """Immutable base for every domain event.

    Shared fields
    ~~~~~~~~~~~~~
    event_id        Unique identity (UUID4).
    timestamp       UTC creation time.
    correlation_id  Groups events from the same causal chain.
    causation_id    The ``event_id`` that directly caused this event.
    source          Component that produced this event.
    """

    event_id: str = field(default_factory=_uuid)
    timestamp: datetime = field(default_factory=_now)
    correlation_id: str = ""
    causation_id: str = ""
    source: str = ""


# =========================================================================
# Users
# =========================================================================

@dataclass(frozen=True)
class UserStarted(DomainEvent):
    """A user sent ``/start`` to the bot."""

    user: User | None = None

    def __post_init__(self) -> None:
        if self.user is None:
            raise ValueError("UserStarted requires a user")

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def username(self) -> str | None:
        return self.user.username
