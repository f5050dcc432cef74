"""Telegram Bot API integration: client descriptor, registrar, startup hook."""
