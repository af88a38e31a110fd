"""Async SQLite engine and session management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from deckchat.config.models import DatabaseConfig
from deckchat.domain.errors import PersistenceError

# Register the session tables on SQLModel.metadata
from deckchat.infrastructure.persistence import records  # noqa: F401

MEMORY_PATH = ":memory:"
BUSY_TIMEOUT_MS = 5000


def sqlite_path(url: str) -> Path | None:
    """Return the database file behind a SQLite URL.

    Returns:
        The file path, or None for non-SQLite and in-memory databases.
    """
    parsed = urlparse(url)
    if not parsed.scheme.startswith("sqlite"):
        return None
    # sqlite:///relative.db parses to "/relative.db", sqlite:////abs.db to "//abs.db"
    raw = parsed.path[1:] if parsed.path.startswith("/") else parsed.path
    if not raw or raw == MEMORY_PATH:
        return None
    return Path(raw)


def _set_sqlite_pragmas(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute(f"PRAGMA busy_timeout = {BUSY_TIMEOUT_MS}")
    cursor.close()


class Database:
    """Owns the async engine holding the session documents.

    Example:
        >>> database = Database.from_config(DatabaseConfig())
        >>> await database.initialize()
        >>> async with database.get_session() as session:
        ...     header = await session.get(ChannelListRecord, "alice")
        >>> await database.close()
    """

    def __init__(self, url: str) -> None:
        """Initialize Database with connection URL.

        Args:
            url: SQLAlchemy-style async URL, e.g. ``sqlite+aiosqlite:///deck.db``.

        Raises:
            ValueError: If the URL is empty or names no async driver.
        """
        if not url:
            raise ValueError("Database URL cannot be empty")
        if "+" not in urlparse(url).scheme:
            raise ValueError(f"Invalid database URL format: {url}")

        self._url = url
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "Database":
        return cls(config.url)

    @property
    def url(self) -> str:
        return self._url

    @property
    def engine(self) -> AsyncEngine:
        """Return the async engine.

        Raises:
            RuntimeError: If initialize() has not been called.
        """
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._engine

    async def initialize(self) -> None:
        """Create the engine and the session tables.

        The parent directory of a SQLite file is created when missing.

        Raises:
            PersistenceError: If the database cannot be opened or the tables
                cannot be created.
        """
        path = sqlite_path(self._url)
        if path is not None:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise PersistenceError(f"Cannot create {path.parent}: {e}") from e

        engine = create_async_engine(self._url, echo=False)
        if path is not None:
            event.listen(engine.sync_engine, "connect", _set_sqlite_pragmas)

        try:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        except SQLAlchemyError as e:
            await engine.dispose()
            raise PersistenceError(f"Failed to initialize database: {e}") from e

        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    async def close(self) -> None:
        """Dispose the engine. Safe to call more than once."""
        engine, self._engine = self._engine, None
        self._session_factory = None
        if engine is not None:
            await engine.dispose()

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """Open a session that commits on exit and rolls back on error.

        Yields:
            AsyncSession: One unit of work.

        Raises:
            RuntimeError: If the database is not initialized or was closed.
            PersistenceError: If SQLAlchemy fails inside the session.
        """
        if self._session_factory is None:
            raise RuntimeError("Database not initialized or has been closed.")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceError(str(e)) from e
            except Exception:
                await session.rollback()
                raise
