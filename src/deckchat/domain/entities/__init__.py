"""Domain entities."""

from deckchat.domain.entities.channel import (
    Channel,
    ChannelList,
    normalize_hashtags,
    unread_badge,
)
from deckchat.domain.entities.event import (
    CloseTrigger,
    Event,
    EventType,
    Key,
    Surface,
)
from deckchat.domain.entities.message import Message, MessageBlock, NoteKind
from deckchat.domain.entities.note_action import NoteAction, NoteActionType
from deckchat.domain.entities.relay_config import RelayConfig

__all__ = [
    "Channel",
    "ChannelList",
    "CloseTrigger",
    "Event",
    "EventType",
    "Key",
    "Message",
    "MessageBlock",
    "NoteAction",
    "NoteActionType",
    "NoteKind",
    "RelayConfig",
    "Surface",
    "normalize_hashtags",
    "unread_badge",
]
