"""Notification listeners subscribed to domain events."""

from chempionat_bot.notifications.listener import NotificationEventListener

__all__ = ["NotificationEventListener"]
