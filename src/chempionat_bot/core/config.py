"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, EnvSettingsSource

from .enums import Profile


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class TelegramConfig(BaseModel):
    token_env: str = "TELEGRAM_BOT_TOKEN"  # Name of env var holding the token
    username: str = ""
    drop_pending_updates: bool = False
    poll_interval: float = 0.0  # seconds between getUpdates calls

    @property
    def token(self) -> str:
        return os.environ.get(self.token_env, "")


class NotificationConfig(BaseModel):
    workers: int = Field(default=2, ge=1)  # Async dispatch worker pool size
    history_size: int = Field(default=0, ge=0)  # Published events kept in memory
    dead_letter_size: int = Field(default=100, ge=0)


class ApiConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    See ``load_settings`` for the full precedence.
    """

    profile: Profile = Profile.DEFAULT

    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "CHEMPIONAT_", "env_nested_delimiter": "__"}

    @property
    def is_test(self) -> bool:
        return self.profile == Profile.TEST

    def validate_telegram(self) -> None:
        """Require bot credentials unless running under the test profile."""
        from .errors import ConfigError

        if self.is_test:
            return

        if not self.telegram.token:
            raise ConfigError(
                f"Telegram bot token missing: set the "
                f"{self.telegram.token_env} environment variable."
            )
        if not self.telegram.username:
            raise ConfigError("Telegram bot username (telegram.username) is not set.")


def _deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Precedence, lowest first: TOML file, ``CHEMPIONAT_*`` environment
    variables, *overrides*.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    # Values passed to Settings() outrank its env source, so the env layer
    # is merged over the file here.
    data = _deep_merge(data, EnvSettingsSource(Settings)())
    data = _deep_merge(data, overrides or {})

    return Settings(**data)
