"""Event handler module."""

from typing import Protocol, runtime_checkable

from deckchat.application.services.session import ChatSession
from deckchat.domain.entities.event import Event


@runtime_checkable
class EventHandler(Protocol):
    """Protocol for event handlers that apply an event to the session."""

    async def handle(self, event: Event, session: ChatSession) -> None:
        """Apply an event.

        Args:
            event: The event to apply.
            session: The session whose state the event mutates.
        """
        ...
