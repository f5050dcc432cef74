"""Chempionat-X Telegram bot: event bus, bot registration and HTTP glue."""

__version__ = "0.1.0"
