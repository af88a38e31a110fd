"""Tests for SessionLoop."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from deckchat.application.handlers.event_handlers import EventHandlerRegistry
from deckchat.application.services.session_loop import SessionLoop
from deckchat.domain.entities.event import EventType, KeyEvent, SelectChannelEvent


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def logger() -> structlog.stdlib.BoundLogger:
    return structlog.get_logger()


class TestSessionLoop:
    async def test_dispatches_to_registered_handler(
        self, session: MagicMock, logger: structlog.stdlib.BoundLogger
    ) -> None:
        loop = SessionLoop(session, logger=logger)

        handled = await loop.process(KeyEvent(key="cancel"))

        assert handled is True
        session.handle_key.assert_called_once()

    async def test_missing_handler_returns_false(
        self, session: MagicMock, logger: structlog.stdlib.BoundLogger
    ) -> None:
        loop = SessionLoop(session, logger=logger, registry=EventHandlerRegistry())

        assert await loop.process(KeyEvent(key="cancel")) is False

    async def test_handler_error_propagates(
        self, session: MagicMock, logger: structlog.stdlib.BoundLogger
    ) -> None:
        handler = MagicMock()
        handler.handle = AsyncMock(side_effect=RuntimeError("boom"))
        registry = EventHandlerRegistry()
        registry.register(EventType.SELECT_CHANNEL, handler)
        loop = SessionLoop(session, logger=logger, registry=registry)

        with pytest.raises(RuntimeError, match="boom"):
            await loop.process(SelectChannelEvent(index=0))
