"""Shared fixtures for the chempionat-bot test suite."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from chempionat_bot.core.config import Settings
from chempionat_bot.core.enums import Profile, Role
from chempionat_bot.core.models import User
from chempionat_bot.infrastructure.event_bus import InMemoryEventBus
from chempionat_bot.telegram.bot import TelegramBot


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def test_settings() -> Settings:
    """Settings under the test profile (no external calls)."""
    return Settings(profile=Profile.TEST)


@pytest.fixture
def prod_settings(monkeypatch) -> Settings:
    """Settings for a real deployment with a bot token in the environment."""
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123456:TEST-TOKEN")
    return Settings(
        profile=Profile.PROD,
        telegram={"username": "chempionat_x_bot"},
    )


# ---------------------------------------------------------------------------
# Domain
# ---------------------------------------------------------------------------

@pytest.fixture
def alice() -> User:
    return User(
        id=1,
        telegram_id=100500,
        username="alice",
        first_name="Alice",
        role=Role.USER,
    )


# ---------------------------------------------------------------------------
# Event bus
# ---------------------------------------------------------------------------

@pytest.fixture
async def event_bus():
    """A started InMemoryEventBus, stopped after the test."""
    bus = InMemoryEventBus(workers=2, history_size=100)
    await bus.start()
    yield bus
    await bus.stop()


# ---------------------------------------------------------------------------
# Telegram fakes
# ---------------------------------------------------------------------------

def make_fake_application(username: str = "chempionat_x_bot") -> MagicMock:
    """Stand-in for a python-telegram-bot ``Application``."""
    application = MagicMock(name="Application")
    application.initialize = AsyncMock()
    application.start = AsyncMock()
    application.stop = AsyncMock()
    application.shutdown = AsyncMock()
    application.running = True
    application.bot.username = username
    application.updater.start_polling = AsyncMock()
    application.updater.stop = AsyncMock()
    application.updater.running = True
    return application


@pytest.fixture
def fake_application() -> MagicMock:
    return make_fake_application()


@pytest.fixture
def telegram_bot(fake_application) -> TelegramBot:
    return TelegramBot(
        token="123456:TEST-TOKEN",
        username="chempionat_x_bot",
        application=fake_application,
    )
