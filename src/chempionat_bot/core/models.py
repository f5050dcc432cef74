"""Core domain models shared by the bot, the event bus and the API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .enums import Role


class User(BaseModel):
    """A bot user as known to the application.

    ``telegram_id`` is the Telegram account id; ``id`` is the
    application's own identifier.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    telegram_id: int | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: Role = Role.USER

