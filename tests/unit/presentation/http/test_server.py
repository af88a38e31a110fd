"""Tests for HTTPServer."""

import asyncio
from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import aiohttp
import pytest
import structlog
from aiohttp.test_utils import TestClient

from deckchat.application.services.session import ChatSession
from deckchat.config.models import ServerConfig, SessionConfig
from deckchat.domain.entities.event import (
    Key,
    KeyEvent,
    MessageEvent,
    SubmitChannelEvent,
)
from deckchat.domain.entities.message import Message
from deckchat.infrastructure.event_queue import EventQueue
from deckchat.infrastructure.network import MockReactionPublisher
from deckchat.infrastructure.persistence import Database, SqliteSessionRepository
from deckchat.infrastructure.timeline import InMemoryTimeline
from deckchat.presentation.http.server import HTTPServer


@pytest.fixture
def event_queue() -> EventQueue:
    return EventQueue()


@pytest.fixture
def logger() -> structlog.BoundLogger:
    return structlog.get_logger()


@pytest.fixture
async def session(
    tmp_path: Path, event_queue: EventQueue
) -> AsyncIterator[ChatSession]:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'deckchat.db'}")
    await database.initialize()
    session = await ChatSession.load(
        SessionConfig(identity="alice", default_relays=["wss://relay.one"]),
        SqliteSessionRepository(database),
        InMemoryTimeline(),
        MockReactionPublisher(),
        event_queue,
    )
    yield session
    await session.close()
    await database.close()


@pytest.fixture
def http_server(
    event_queue: EventQueue, session: ChatSession, logger: structlog.BoundLogger
) -> HTTPServer:
    config = ServerConfig(host="127.0.0.1", port=8080)
    return HTTPServer(
        config=config, event_queue=event_queue, session=session, logger=logger
    )


@pytest.fixture
async def client(http_server: HTTPServer, aiohttp_client) -> TestClient:
    return await aiohttp_client(http_server.create_app())


class TestEventEndpoint:
    """Tests for POST /api/v1/events."""

    async def test_health_check(self, client: TestClient) -> None:
        response = await client.get("/healthz")

        assert response.status == 200
        assert response.content_type == "application/json"
        assert await response.json() == {"status": "ok"}

    async def test_key_event_enqueued(
        self, client: TestClient, event_queue: EventQueue
    ) -> None:
        response = await client.post(
            "/api/v1/events",
            json={"type": "key", "payload": {"key": "quick_switcher"}},
        )

        assert response.status == 200
        data = await response.json()

        event = await asyncio.wait_for(event_queue.dequeue(), timeout=1.0)
        assert isinstance(event, KeyEvent)
        assert event.id == data["event_id"]

    async def test_message_event_enqueued(
        self, client: TestClient, event_queue: EventQueue
    ) -> None:
        payload = {
            "message": {
                "id": "m1",
                "author": "bob",
                "created_at": "2024-06-01T12:00:00+00:00",
                "hashtags": ["general"],
                "content": "hello",
            }
        }
        response = await client.post(
            "/api/v1/events", json={"type": "message", "payload": payload}
        )

        assert response.status == 200
        event = await asyncio.wait_for(event_queue.dequeue(), timeout=1.0)
        assert isinstance(event, MessageEvent)
        assert event.message.content == "hello"

    async def test_http_handler_does_not_mutate_session(
        self, client: TestClient, session: ChatSession
    ) -> None:
        response = await client.post(
            "/api/v1/events",
            json={
                "type": "submit_channel",
                "payload": {"name": "Coffee", "hashtags": ["coffee"]},
            },
        )

        assert response.status == 200
        assert [c.name for c in session.channels().channels] == ["General"]

    async def test_event_with_delay(
        self, client: TestClient, event_queue: EventQueue
    ) -> None:
        response = await client.post(
            "/api/v1/events",
            json={
                "type": "submit_channel",
                "payload": {"name": "Coffee", "hashtags": ["coffee"]},
                "delay": 0.1,
            },
        )

        assert response.status == 200

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(event_queue.dequeue(), timeout=0.05)

        event = await asyncio.wait_for(event_queue.dequeue(), timeout=0.2)
        assert isinstance(event, SubmitChannelEvent)

    async def test_invalid_json(self, client: TestClient) -> None:
        response = await client.post(
            "/api/v1/events",
            data="not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status == 400
        assert await response.json() == {"error": "Invalid JSON"}

    async def test_missing_type_field(self, client: TestClient) -> None:
        response = await client.post("/api/v1/events", json={"payload": {}})

        assert response.status == 400
        assert await response.json() == {"error": "Missing required field: type"}

    async def test_invalid_event_type(self, client: TestClient) -> None:
        response = await client.post("/api/v1/events", json={"type": "unknown"})

        assert response.status == 400
        assert await response.json() == {"error": "Invalid event type: unknown"}

    async def test_internal_event_types_rejected(self, client: TestClient) -> None:
        response = await client.post(
            "/api/v1/events",
            json={"type": "reaction_result", "payload": {"note_id": "n1"}},
        )

        assert response.status == 400

    async def test_invalid_payload(self, client: TestClient) -> None:
        response = await client.post(
            "/api/v1/events", json={"type": "key", "payload": {"key": "f13"}}
        )

        assert response.status == 400
        data = await response.json()
        assert data["error"] == "Invalid payload"
        assert data["details"][0]["loc"] == ["key"]

    async def test_non_object_payload(self, client: TestClient) -> None:
        response = await client.post(
            "/api/v1/events", json={"type": "key", "payload": ["cancel"]}
        )

        assert response.status == 400
        assert await response.json() == {"error": "Invalid payload"}


class TestReadEndpoints:
    """Tests for the GET endpoints."""

    async def test_session_snapshot(
        self, client: TestClient, session: ChatSession
    ) -> None:
        session.handle_key(Key.QUICK_SWITCHER)

        response = await client.get("/api/v1/session")

        assert response.status == 200
        data = await response.json()
        assert data["active_user"] == "alice"
        assert data["relays"] == ["wss://relay.one"]
        assert data["switcher"]["open"] is True
        assert data["dialog"]["open"] is False
        assert data["thread"] == {"open": False, "anchor": None}

    async def test_channels(self, client: TestClient) -> None:
        response = await client.get("/api/v1/users/alice/channels")

        assert response.status == 200
        data = await response.json()
        assert data["user"] == "alice"
        assert data["selected"] == 0
        assert [c["name"] for c in data["channels"]] == ["General"]
        assert data["channels"][0]["badge"] == ""

    async def test_unknown_user(
        self, client: TestClient, session: ChatSession
    ) -> None:
        response = await client.get("/api/v1/users/mallory/channels")

        assert response.status == 404
        assert await response.json() == {"error": "Unknown user: mallory"}
        assert "mallory" not in session.store.by_user

        response = await client.get("/api/v1/users/mallory/blocks")
        assert response.status == 404

    async def test_blocks(self, client: TestClient, session: ChatSession) -> None:
        t0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        for i, offset in enumerate((0, 60, 600)):
            session.ingest(
                Message(
                    id=f"m{i}",
                    author="bob",
                    created_at=t0 + timedelta(seconds=offset),
                    hashtags=["general"],
                    content=f"hello {i}",
                )
            )

        response = await client.get("/api/v1/users/alice/blocks")

        assert response.status == 200
        data = await response.json()
        assert data["channel_id"] == session.channels().channels[0].id
        blocks = data["blocks"]
        assert [[n["id"] for n in b["notes"]] for b in blocks] == [
            ["m0", "m1"],
            ["m2"],
        ]
        assert blocks[0]["notes"][0]["body"] == "hello 0"
        assert blocks[0]["notes"][0]["reacted"] is False


class TestServerLifecycle:
    async def test_server_start_stop(
        self,
        event_queue: EventQueue,
        session: ChatSession,
        logger: structlog.BoundLogger,
    ) -> None:
        config = ServerConfig(host="127.0.0.1", port=0)
        server = HTTPServer(
            config=config, event_queue=event_queue, session=session, logger=logger
        )

        await server.start()
        try:
            assert server.is_running

            async with aiohttp.ClientSession() as client:
                async with client.get(
                    f"http://127.0.0.1:{server.actual_port}/healthz"
                ) as response:
                    assert response.status == 200
        finally:
            await server.stop()

        assert not server.is_running

    async def test_actual_port_when_stopped(self, http_server: HTTPServer) -> None:
        with pytest.raises(RuntimeError):
            _ = http_server.actual_port
