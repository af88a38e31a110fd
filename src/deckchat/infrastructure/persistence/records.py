"""SQLModel tables backing the channels_cache and relay_config documents."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Index
from sqlalchemy.types import JSON
from sqlmodel import Field, SQLModel


class ChannelListRecord(SQLModel, table=True):
    """Per-identity header of a channel list.

    Attributes:
        user_id: Owning identity.
        selected: Selected channel index, None when nothing is selected.
    """

    __tablename__ = "channel_lists"

    user_id: str = Field(primary_key=True)
    selected: int | None = Field(default=None)


class ChannelRecord(SQLModel, table=True):
    """One channel of an identity's list.

    Attributes:
        user_id: Owning identity.
        id: Channel id, unique within the owner's list.
        position: Zero-based position in the list.
        name: Channel name.
        hashtags: Normalized hashtags in display order.
        subscribed: Whether the channel's filter is subscribed.
        unread_count: Unread messages at the time of the write.
        last_read: When the channel was last selected.
    """

    __tablename__ = "channels"
    __table_args__ = (Index("idx_channels_user_position", "user_id", "position"),)

    user_id: str = Field(primary_key=True)
    id: str = Field(primary_key=True)
    position: int
    name: str
    hashtags: list[str] = Field(sa_column=Column(JSON, nullable=False))
    subscribed: bool = Field(default=True)
    unread_count: int = Field(default=0)
    last_read: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )


class RelayConfigRecord(SQLModel, table=True):
    """Singleton row holding the global relay list."""

    __tablename__ = "relay_configs"

    id: int = Field(default=1, primary_key=True)
    relays: list[str] = Field(sa_column=Column(JSON, nullable=False))
