"""Persistence infrastructure."""

from deckchat.infrastructure.persistence.database import Database
from deckchat.infrastructure.persistence.session_repository import (
    SqliteSessionRepository,
)

__all__ = ["Database", "SqliteSessionRepository"]
