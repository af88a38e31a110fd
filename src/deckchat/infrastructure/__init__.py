"""Infrastructure layer."""

from deckchat.infrastructure.event_queue import EventQueue
from deckchat.infrastructure.persistence import Database, SqliteSessionRepository
from deckchat.infrastructure.timeline import InMemoryTimeline

__all__ = ["Database", "EventQueue", "InMemoryTimeline", "SqliteSessionRepository"]
