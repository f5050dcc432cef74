"""CLI entry point for the bot application."""

from __future__ import annotations

import json

import click

from .core.enums import Profile


@click.group()
def main() -> None:
    """Chempionat-X Telegram bot."""


@main.command()
@click.option("--config", default="configs/bot.toml", help="Config file path")
@click.option("--host", default=None, help="HTTP bind host override")
@click.option("--port", default=None, type=int, help="HTTP port override")
@click.option(
    "--profile",
    default=None,
    type=click.Choice([p.value for p in Profile]),
    help="Configuration profile override",
)
def serve(config: str, host: str | None, port: int | None, profile: str | None) -> None:
    """Register the bot and serve the HTTP API."""
    from .main import run

    overrides: dict = {}
    if profile:
        overrides["profile"] = profile
    if host:
        overrides.setdefault("api", {})["host"] = host
    if port:
        overrides.setdefault("api", {})["port"] = port

    run(config_path=config, overrides=overrides)


@main.command("show-config")
@click.option("--config", default="configs/bot.toml", help="Config file path")
def show_config(config: str) -> None:
    """Print the effective settings (token redacted)."""
    from .core.config import load_settings

    settings = load_settings(config_path=config)
    data = settings.model_dump(mode="json")
    data["telegram"]["token_set"] = bool(settings.telegram.token)
    click.echo(json.dumps(data, indent=2, sort_keys=True))
