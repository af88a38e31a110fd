"""Channel entities: a named, hashtag-filtered view over the message stream."""

from collections.abc import Iterable
from datetime import datetime

import ulid
from pydantic import BaseModel, Field, field_validator, model_validator

UNREAD_BADGE_LIMIT = 99


def normalize_hashtags(hashtags: str | Iterable[str]) -> list[str]:
    """Normalize raw hashtags.

    Strips whitespace and leading ``#`` characters, lower-cases, drops empty
    entries and removes duplicates while keeping first-seen order.

    Args:
        hashtags: Raw hashtags as typed by the user, either as an iterable
            or as one comma-separated string.

    Returns:
        The normalized hashtag list (possibly empty).
    """
    if isinstance(hashtags, str):
        hashtags = hashtags.split(",")
    seen: dict[str, None] = {}
    for raw in hashtags:
        tag = raw.strip().lstrip("#").strip().lower()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


def unread_badge(count: int) -> str:
    """Return the sidebar badge text for an unread count."""
    if count <= 0:
        return ""
    if count > UNREAD_BADGE_LIMIT:
        return f"{UNREAD_BADGE_LIMIT}+"
    return str(count)


class Channel(BaseModel):
    """A single channel owned by one identity.

    Attributes:
        id: Opaque identifier, unique within the owning list.
        name: Display name.
        hashtags: Normalized, non-empty hashtag set in insertion order.
        subscribed: Whether the channel's filter is subscribed.
        unread_count: Messages arrived since the channel was last selected.
        last_read: When the channel was last selected.
    """

    id: str = Field(default_factory=lambda: str(ulid.new()))
    name: str
    hashtags: list[str]
    subscribed: bool = False
    unread_count: int = Field(default=0, ge=0)
    last_read: datetime | None = None

    @field_validator("hashtags")
    @classmethod
    def _normalize(cls, value: list[str]) -> list[str]:
        tags = normalize_hashtags(value)
        if not tags:
            raise ValueError("hashtags must not be empty")
        return tags

    @property
    def filter_key(self) -> frozenset[str]:
        """Return the order-independent key identifying this channel's filter."""
        return frozenset(self.hashtags)

    @property
    def badge(self) -> str:
        """Return the unread badge text."""
        return unread_badge(self.unread_count)


class ChannelList(BaseModel):
    """Ordered channels of one identity plus the selected index."""

    channels: list[Channel] = Field(default_factory=list)
    selected: int | None = None

    @model_validator(mode="after")
    def _check_selected(self) -> "ChannelList":
        # A stale index from a persisted document degrades to no selection.
        if self.selected is not None and not 0 <= self.selected < len(self.channels):
            self.selected = None
        return self

    def get(self, index: int) -> Channel | None:
        """Return the channel at ``index`` or None when out of range."""
        if 0 <= index < len(self.channels):
            return self.channels[index]
        return None

    def index_of(self, channel_id: str) -> int | None:
        """Return the index of the channel with ``channel_id``."""
        for index, channel in enumerate(self.channels):
            if channel.id == channel_id:
                return index
        return None

    def find(self, channel_id: str) -> Channel | None:
        """Return the channel with ``channel_id`` or None."""
        index = self.index_of(channel_id)
        return None if index is None else self.channels[index]

    def selected_channel(self) -> Channel | None:
        """Return the selected channel, if any."""
        if self.selected is None:
            return None
        return self.get(self.selected)
