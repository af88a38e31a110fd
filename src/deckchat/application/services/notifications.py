"""Non-fatal user notifications."""

from collections import deque
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

MAX_NOTIFICATIONS = 50

Level = Literal["info", "warning", "error"]


class Notification(BaseModel):
    level: Level = "info"
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationCenter:
    """Bounded buffer of notifications for the renderer to display."""

    def __init__(self, limit: int = MAX_NOTIFICATIONS) -> None:
        self._items: deque[Notification] = deque(maxlen=limit)

    def push(self, message: str, level: Level = "info") -> None:
        self._items.append(Notification(level=level, message=message))

    def items(self) -> list[Notification]:
        return list(self._items)

    def drain(self) -> list[Notification]:
        """Return and clear all notifications."""
        items = list(self._items)
        self._items.clear()
        return items
