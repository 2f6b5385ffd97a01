# src/todo_companion/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/notification surfaces swappable and makes testing easier.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Protocol

Clock = Callable[[], datetime]
# Returns the current instant; always timezone-aware.


def utc_now() -> datetime:
    return datetime.now(UTC)


class KeyValueStore(Protocol):
    """
    Opaque string-keyed persistence (the browser localStorage equivalent).

    Values are serialized strings; the store never interprets them.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class Notifier(Protocol):
    """
    Presentation-side port: how the reminder scanner surfaces an alert.

    The notifier decides how long the alert stays visible and how it looks.
    """

    def notify(self, notification: Any) -> None: ...
