"""SQLite implementation of SessionRepository."""

from collections import defaultdict
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy import delete
from sqlmodel import select
from structlog.stdlib import BoundLogger

from deckchat.domain.entities.channel import Channel, ChannelList
from deckchat.domain.entities.relay_config import RelayConfig
from deckchat.infrastructure.logging import get_logger
from deckchat.infrastructure.persistence.database import Database
from deckchat.infrastructure.persistence.records import (
    ChannelListRecord,
    ChannelRecord,
    RelayConfigRecord,
)

RELAY_CONFIG_ROW_ID = 1


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo; values are always written in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc)
    return value


class SqliteSessionRepository:
    """SQLite implementation of SessionRepository.

    Each save replaces the whole document inside one session, so a failed
    write leaves the previous state intact and the next save rewrites
    everything.
    """

    def __init__(self, database: Database, logger: BoundLogger | None = None) -> None:
        """Initialize the repository.

        Args:
            database: Database instance for session management.
            logger: Logger instance.
        """
        self._database = database
        self._logger = logger or get_logger(__name__)

    async def load_channels_cache(self) -> dict[str, ChannelList]:
        """Load every persisted channel list, keyed by identity."""
        async with self._database.get_session() as session:
            headers = (await session.execute(select(ChannelListRecord))).scalars().all()
            rows = (
                await session.execute(
                    select(ChannelRecord).order_by(
                        ChannelRecord.user_id,  # type: ignore[arg-type]
                        ChannelRecord.position,  # type: ignore[arg-type]
                    )
                )
            ).scalars().all()

        channels_by_user: dict[str, list[Channel]] = defaultdict(list)
        for row in rows:
            try:
                channel = Channel(
                    id=row.id,
                    name=row.name,
                    hashtags=list(row.hashtags),
                    subscribed=row.subscribed,
                    unread_count=row.unread_count,
                    last_read=_as_utc(row.last_read),
                )
            except ValidationError as e:
                self._logger.warning(
                    "Skipping invalid persisted channel",
                    user=row.user_id,
                    channel_id=row.id,
                    error=str(e),
                )
                continue
            channels_by_user[row.user_id].append(channel)

        return {
            header.user_id: ChannelList(
                channels=channels_by_user.get(header.user_id, []),
                selected=header.selected,
            )
            for header in headers
        }

    async def save_channel_list(self, user: str, channel_list: ChannelList) -> None:
        """Replace the persisted channel list of one identity."""
        async with self._database.get_session() as session:
            await session.execute(
                delete(ChannelRecord).where(
                    ChannelRecord.user_id == user  # type: ignore[arg-type]
                )
            )

            header = await session.get(ChannelListRecord, user)
            if header is None:
                header = ChannelListRecord(user_id=user)
            header.selected = channel_list.selected
            session.add(header)

            for position, channel in enumerate(channel_list.channels):
                session.add(
                    ChannelRecord(
                        user_id=user,
                        id=channel.id,
                        position=position,
                        name=channel.name,
                        hashtags=list(channel.hashtags),
                        subscribed=channel.subscribed,
                        unread_count=channel.unread_count,
                        last_read=_to_utc(channel.last_read),
                    )
                )

        self._logger.debug(
            "Saved channel list", user=user, channels=len(channel_list.channels)
        )

    async def delete_channel_list(self, user: str) -> None:
        """Remove the persisted channel list of one identity."""
        async with self._database.get_session() as session:
            await session.execute(
                delete(ChannelRecord).where(
                    ChannelRecord.user_id == user  # type: ignore[arg-type]
                )
            )
            await session.execute(
                delete(ChannelListRecord).where(
                    ChannelListRecord.user_id == user  # type: ignore[arg-type]
                )
            )

    async def load_relay_config(self) -> RelayConfig | None:
        """Load the relay configuration, None if it was never saved."""
        async with self._database.get_session() as session:
            record = await session.get(RelayConfigRecord, RELAY_CONFIG_ROW_ID)
            if record is None:
                return None
            return RelayConfig(relays=set(record.relays))

    async def save_relay_config(self, relay_config: RelayConfig) -> None:
        """Replace the persisted relay configuration."""
        async with self._database.get_session() as session:
            record = await session.get(RelayConfigRecord, RELAY_CONFIG_ROW_ID)
            relays = sorted(relay_config.relays)
            if record is None:
                record = RelayConfigRecord(id=RELAY_CONFIG_ROW_ID, relays=relays)
            else:
                record.relays = relays
            session.add(record)

        self._logger.debug("Saved relay config", relays=len(relay_config.relays))
