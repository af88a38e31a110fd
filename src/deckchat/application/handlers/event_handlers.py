"""Event handler implementations."""

from deckchat.application.handlers import EventHandler
from deckchat.application.services.session import ChatSession
from deckchat.domain.entities.event import (
    AddRelayEvent,
    CloseEvent,
    DeleteChannelEvent,
    EventType,
    KeyEvent,
    MessageEvent,
    NoteActionEvent,
    OpenEditDialogEvent,
    ReactionResultEvent,
    ReactionRetryEvent,
    RemoveRelayEvent,
    SelectChannelEvent,
    SubmitChannelEvent,
    SwitcherQueryEvent,
    SwitchIdentityEvent,
)


class MessageEventHandler:
    """Delivers timeline messages to every matching channel."""

    async def handle(self, event: MessageEvent, session: ChatSession) -> None:
        session.ingest(event.message)


class NoteActionEventHandler:
    async def handle(self, event: NoteActionEvent, session: ChatSession) -> None:
        session.route_action(event.action)


class KeyEventHandler:
    async def handle(self, event: KeyEvent, session: ChatSession) -> None:
        session.handle_key(event.key)


class CloseEventHandler:
    async def handle(self, event: CloseEvent, session: ChatSession) -> None:
        session.close_surface(event.surface, event.trigger)


class SelectChannelEventHandler:
    async def handle(self, event: SelectChannelEvent, session: ChatSession) -> None:
        session.select_channel(event.index, user=event.user)


class OpenEditDialogEventHandler:
    async def handle(self, event: OpenEditDialogEvent, session: ChatSession) -> None:
        session.open_edit_dialog(event.index, user=event.user)


class SubmitChannelEventHandler:
    """Creates a channel, or edits one when the dialog is in edit mode."""

    async def handle(self, event: SubmitChannelEvent, session: ChatSession) -> None:
        session.submit_channel(event.name, event.hashtags, user=event.user)


class DeleteChannelEventHandler:
    async def handle(self, event: DeleteChannelEvent, session: ChatSession) -> None:
        session.delete_channel(event.channel_id, user=event.user)


class SwitcherQueryEventHandler:
    async def handle(self, event: SwitcherQueryEvent, session: ChatSession) -> None:
        session.set_switcher_query(event.query)


class SwitchIdentityEventHandler:
    async def handle(self, event: SwitchIdentityEvent, session: ChatSession) -> None:
        session.switch_identity(event.user)


class AddRelayEventHandler:
    async def handle(self, event: AddRelayEvent, session: ChatSession) -> None:
        session.add_relay(event.url)


class RemoveRelayEventHandler:
    async def handle(self, event: RemoveRelayEvent, session: ChatSession) -> None:
        session.remove_relay(event.url)


class ReactionResultEventHandler:
    """Reconciles a finished publish attempt with the optimistic mark."""

    async def handle(self, event: ReactionResultEvent, session: ChatSession) -> None:
        await session.reconcile_reaction(event)


class ReactionRetryEventHandler:
    async def handle(self, event: ReactionRetryEvent, session: ChatSession) -> None:
        session.retry_reaction(event)


class EventHandlerRegistry:
    """Registry for event handlers."""

    def __init__(self) -> None:
        """Initialize the registry."""
        self._handlers: dict[EventType, EventHandler] = {}

    def register(self, event_type: EventType, handler: EventHandler) -> None:
        """Register a handler for an event type.

        Args:
            event_type: The event type to handle.
            handler: The handler to register.
        """
        self._handlers[event_type] = handler

    def get_handler(self, event_type: EventType) -> EventHandler | None:
        """Get handler for an event type.

        Args:
            event_type: The event type.

        Returns:
            The handler if registered, None otherwise.
        """
        return self._handlers.get(event_type)


def create_default_registry() -> EventHandlerRegistry:
    """Create a registry with a handler for every event type."""
    registry = EventHandlerRegistry()
    registry.register(EventType.MESSAGE, MessageEventHandler())
    registry.register(EventType.ACTION, NoteActionEventHandler())
    registry.register(EventType.KEY, KeyEventHandler())
    registry.register(EventType.CLOSE, CloseEventHandler())
    registry.register(EventType.SELECT_CHANNEL, SelectChannelEventHandler())
    registry.register(EventType.OPEN_EDIT_DIALOG, OpenEditDialogEventHandler())
    registry.register(EventType.SUBMIT_CHANNEL, SubmitChannelEventHandler())
    registry.register(EventType.DELETE_CHANNEL, DeleteChannelEventHandler())
    registry.register(EventType.SWITCHER_QUERY, SwitcherQueryEventHandler())
    registry.register(EventType.SWITCH_IDENTITY, SwitchIdentityEventHandler())
    registry.register(EventType.ADD_RELAY, AddRelayEventHandler())
    registry.register(EventType.REMOVE_RELAY, RemoveRelayEventHandler())
    registry.register(EventType.REACTION_RESULT, ReactionResultEventHandler())
    registry.register(EventType.REACTION_RETRY, ReactionRetryEventHandler())
    return registry
