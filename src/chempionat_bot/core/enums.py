"""Enumerations used across the bot application."""

from enum import Enum


class Profile(str, Enum):
    DEFAULT = "default"
    DEV = "dev"
    PROD = "prod"
    TEST = "test"  # No external calls (bot registration skipped)


class Role(str, Enum):
    USER = "user"
    ORGANIZER = "organizer"
    ADMIN = "admin"


class Dispatch(str, Enum):
    """How the event bus delivers an event to a handler."""

    INLINE = "inline"  # Awaited by the publisher
    ASYNC = "async"  # Handed to the worker pool, publisher does not wait
