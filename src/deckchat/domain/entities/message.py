"""Message entities delivered by the timeline collaborator."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NoteKind(str, Enum):
    """Closed set of note kinds the renderer knows how to draw."""

    TEXT = "text"
    REPOST = "repost"
    REACTION = "reaction"
    UNKNOWN = "unknown"

    @classmethod
    def from_kind(cls, kind: int) -> "NoteKind":
        """Map a numeric event kind to a NoteKind, falling back to UNKNOWN."""
        return _KIND_NUMBERS.get(kind, cls.UNKNOWN)


_KIND_NUMBERS: dict[int, NoteKind] = {
    1: NoteKind.TEXT,
    6: NoteKind.REPOST,
    7: NoteKind.REACTION,
}


class Message(BaseModel):
    """A message as seen by this core.

    Read-only: the core never mutates messages, it only orders, groups and
    counts them.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    author: str
    created_at: datetime
    hashtags: list[str] = Field(default_factory=list)
    kind: int = 1
    content: str = ""

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # Timestamps without an offset are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def note_kind(self) -> NoteKind:
        """Return the closed kind classification of this message."""
        return NoteKind.from_kind(self.kind)


class MessageBlock(BaseModel):
    """Consecutive messages of one author rendered under a single header."""

    author: str
    first_timestamp: datetime
    last_timestamp: datetime
    message_ids: list[str]
    show_header: bool = True
