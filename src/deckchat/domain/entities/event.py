"""Event entities consumed by the session loop."""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

import ulid
from pydantic import BaseModel, Field

from deckchat.domain.entities.message import Message
from deckchat.domain.entities.note_action import NoteAction


class EventType(str, Enum):
    """Event type enumeration."""

    MESSAGE = "message"
    ACTION = "action"
    KEY = "key"
    CLOSE = "close"
    SELECT_CHANNEL = "select_channel"
    OPEN_EDIT_DIALOG = "open_edit_dialog"
    SUBMIT_CHANNEL = "submit_channel"
    DELETE_CHANNEL = "delete_channel"
    SWITCHER_QUERY = "switcher_query"
    SWITCH_IDENTITY = "switch_identity"
    ADD_RELAY = "add_relay"
    REMOVE_RELAY = "remove_relay"
    REACTION_RESULT = "reaction_result"
    REACTION_RETRY = "reaction_retry"


class Key(str, Enum):
    """Logical key identities; platform key codes are mapped by the renderer."""

    CANCEL = "cancel"
    CREATE_CHANNEL = "create_channel"
    QUICK_SWITCHER = "quick_switcher"
    ARROW_UP = "arrow_up"
    ARROW_DOWN = "arrow_down"
    ENTER = "enter"


class Surface(str, Enum):
    """Modal surfaces that can be closed from the renderer."""

    THREAD = "thread"
    DIALOG = "dialog"
    SWITCHER = "switcher"


class CloseTrigger(str, Enum):
    """UI sources that close a surface. All of them close it the same way."""

    DISMISS = "dismiss"
    CANCEL_KEY = "cancel_key"
    OUTSIDE_CLICK = "outside_click"


class Event(BaseModel):
    """Base class for all events."""

    id: str = Field(default_factory=lambda: str(ulid.new()))
    type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = "api"

    def get_identity_key(self) -> str:
        """Return the identity key for deduplication."""
        return self.id


class MessageEvent(Event):
    """A message delivered by the timeline collaborator."""

    type: Literal[EventType.MESSAGE] = EventType.MESSAGE
    source: str = "timeline"
    message: Message


class NoteActionEvent(Event):
    """A note action emitted by a rendered message block."""

    type: Literal[EventType.ACTION] = EventType.ACTION
    source: str = "renderer"
    action: NoteAction


class KeyEvent(Event):
    """A single logical key press."""

    type: Literal[EventType.KEY] = EventType.KEY
    source: str = "renderer"
    key: Key


class CloseEvent(Event):
    """Close a surface through a non-keyboard trigger."""

    type: Literal[EventType.CLOSE] = EventType.CLOSE
    source: str = "renderer"
    surface: Surface
    trigger: CloseTrigger = CloseTrigger.DISMISS


class SelectChannelEvent(Event):
    type: Literal[EventType.SELECT_CHANNEL] = EventType.SELECT_CHANNEL
    user: str | None = None
    index: int


class OpenEditDialogEvent(Event):
    type: Literal[EventType.OPEN_EDIT_DIALOG] = EventType.OPEN_EDIT_DIALOG
    user: str | None = None
    index: int


class SubmitChannelEvent(Event):
    """Submission of the channel dialog form."""

    type: Literal[EventType.SUBMIT_CHANNEL] = EventType.SUBMIT_CHANNEL
    user: str | None = None
    name: str
    hashtags: str


class DeleteChannelEvent(Event):
    type: Literal[EventType.DELETE_CHANNEL] = EventType.DELETE_CHANNEL
    user: str | None = None
    channel_id: str


class SwitcherQueryEvent(Event):
    type: Literal[EventType.SWITCHER_QUERY] = EventType.SWITCHER_QUERY
    query: str


class SwitchIdentityEvent(Event):
    type: Literal[EventType.SWITCH_IDENTITY] = EventType.SWITCH_IDENTITY
    user: str


class AddRelayEvent(Event):
    type: Literal[EventType.ADD_RELAY] = EventType.ADD_RELAY
    url: str


class RemoveRelayEvent(Event):
    type: Literal[EventType.REMOVE_RELAY] = EventType.REMOVE_RELAY
    url: str


class ReactionResultEvent(Event):
    """Completion report of one reaction publish attempt."""

    type: Literal[EventType.REACTION_RESULT] = EventType.REACTION_RESULT
    source: str = "internal"
    note_id: str
    attempt: int
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class ReactionRetryEvent(Event):
    """Delayed retry of a failed reaction publish."""

    type: Literal[EventType.REACTION_RETRY] = EventType.REACTION_RETRY
    source: str = "internal"
    note_id: str
    attempt: int

    def get_identity_key(self) -> str:
        """Retries of the same note supersede each other."""
        return f"reaction:{self.note_id}"
