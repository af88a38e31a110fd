"""Tests for SqliteSessionRepository."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from deckchat.domain.entities.channel import Channel, ChannelList
from deckchat.domain.entities.relay_config import RelayConfig
from deckchat.infrastructure.persistence.database import Database
from deckchat.infrastructure.persistence.session_repository import (
    SqliteSessionRepository,
)


@pytest.fixture
async def database(tmp_path: Path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'deckchat.db'}")
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def repository(database: Database) -> SqliteSessionRepository:
    return SqliteSessionRepository(database)


class TestChannelsCache:
    """Channel list persistence."""

    async def test_empty_database(self, repository: SqliteSessionRepository) -> None:
        assert await repository.load_channels_cache() == {}

    async def test_empty_list_round_trip(
        self, repository: SqliteSessionRepository
    ) -> None:
        await repository.save_channel_list("alice", ChannelList())

        loaded = await repository.load_channels_cache()

        assert loaded == {"alice": ChannelList()}

    async def test_channel_fields_preserved(
        self, repository: SqliteSessionRepository
    ) -> None:
        last_read = datetime(2024, 6, 1, 12, 0, 30, tzinfo=timezone.utc)
        channel = Channel(
            id="c1",
            name="Bitcoin",
            hashtags=["bitcoin", "btc"],
            subscribed=True,
            unread_count=7,
            last_read=last_read,
        )
        await repository.save_channel_list(
            "alice", ChannelList(channels=[channel], selected=0)
        )

        loaded = (await repository.load_channels_cache())["alice"]

        assert loaded.selected == 0
        restored = loaded.channels[0]
        assert restored == channel
        assert restored.last_read is not None
        assert restored.last_read.tzinfo is not None
        assert restored.last_read == last_read

    async def test_order_and_shared_hashtags(
        self, repository: SqliteSessionRepository
    ) -> None:
        """Ten channels keep their order even when hashtag sets overlap."""
        channels = [
            Channel(id=f"c{i}", name=f"Channel {i}", hashtags=["shared", f"tag{i}"])
            for i in range(10)
        ]
        await repository.save_channel_list(
            "alice", ChannelList(channels=channels, selected=4)
        )

        loaded = (await repository.load_channels_cache())["alice"]

        assert [c.id for c in loaded.channels] == [f"c{i}" for i in range(10)]
        assert all(c.hashtags[0] == "shared" for c in loaded.channels)
        assert loaded.selected == 4

    async def test_save_replaces_previous(
        self, repository: SqliteSessionRepository
    ) -> None:
        first = ChannelList(
            channels=[
                Channel(id="a", name="A", hashtags=["a"]),
                Channel(id="b", name="B", hashtags=["b"]),
            ],
            selected=1,
        )
        await repository.save_channel_list("alice", first)
        await repository.save_channel_list(
            "alice",
            ChannelList(channels=[Channel(id="b", name="B", hashtags=["b"])]),
        )

        loaded = (await repository.load_channels_cache())["alice"]

        assert [c.id for c in loaded.channels] == ["b"]
        assert loaded.selected is None

    async def test_multiple_users_are_independent(
        self, repository: SqliteSessionRepository
    ) -> None:
        await repository.save_channel_list(
            "alice", ChannelList(channels=[Channel(id="a", name="A", hashtags=["a"])])
        )
        await repository.save_channel_list(
            "bob",
            ChannelList(
                channels=[Channel(id="b", name="B", hashtags=["b"])], selected=0
            ),
        )

        loaded = await repository.load_channels_cache()

        assert set(loaded) == {"alice", "bob"}
        assert loaded["alice"].selected is None
        assert loaded["bob"].channels[0].id == "b"

    async def test_delete_channel_list(
        self, repository: SqliteSessionRepository
    ) -> None:
        await repository.save_channel_list(
            "alice", ChannelList(channels=[Channel(id="a", name="A", hashtags=["a"])])
        )
        await repository.save_channel_list("bob", ChannelList())

        await repository.delete_channel_list("alice")

        assert set(await repository.load_channels_cache()) == {"bob"}

    async def test_offset_last_read_is_stored_as_utc(
        self, repository: SqliteSessionRepository
    ) -> None:
        offset = timezone(timedelta(hours=9))
        last_read = datetime(2024, 6, 1, 21, 0, tzinfo=offset)
        await repository.save_channel_list(
            "alice",
            ChannelList(
                channels=[
                    Channel(id="a", name="A", hashtags=["a"], last_read=last_read)
                ]
            ),
        )

        loaded = (await repository.load_channels_cache())["alice"]

        assert loaded.channels[0].last_read == last_read


class TestRelayConfig:
    """Relay configuration persistence."""

    async def test_never_saved(self, repository: SqliteSessionRepository) -> None:
        assert await repository.load_relay_config() is None

    async def test_round_trip(self, repository: SqliteSessionRepository) -> None:
        config = RelayConfig(relays={"wss://a.example", "wss://b.example"})

        await repository.save_relay_config(config)

        assert await repository.load_relay_config() == config

    async def test_overwrite(self, repository: SqliteSessionRepository) -> None:
        await repository.save_relay_config(RelayConfig(relays={"wss://a.example"}))
        await repository.save_relay_config(RelayConfig(relays=set()))

        loaded = await repository.load_relay_config()

        assert loaded is not None
        assert loaded.relays == set()
