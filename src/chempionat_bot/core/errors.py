"""Custom exception hierarchy for the bot application."""


class ChempionatError(Exception):
    """Base exception for all application errors."""


# --- Configuration ---
class ConfigError(ChempionatError):
    """Invalid or missing configuration."""


# --- Telegram ---
class BotRegistrationError(ChempionatError):
    """The bot could not be registered with the Telegram Bot API."""

    def __init__(self, username: str, reason: str):
        self.username = username
        self.reason = reason
        super().__init__(f"Bot registration failed [{username}]: {reason}")
