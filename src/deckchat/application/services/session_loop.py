"""Session loop implementation."""

from structlog.stdlib import BoundLogger

from deckchat.application.handlers.event_handlers import (
    EventHandlerRegistry,
    create_default_registry,
)
from deckchat.application.services.session import ChatSession
from deckchat.domain.entities.event import Event


class SessionLoop:
    """Applies queued events to the chat session, one at a time."""

    def __init__(
        self,
        session: ChatSession,
        logger: BoundLogger,
        registry: EventHandlerRegistry | None = None,
    ) -> None:
        """Initialize the session loop.

        Args:
            session: Session mutated by the handlers.
            logger: Logger instance.
            registry: Handler registry; defaults to one handler per event type.
        """
        self._session = session
        self._logger = logger
        self._handler_registry = registry or create_default_registry()

    @property
    def session(self) -> ChatSession:
        return self._session

    async def process(self, event: Event) -> bool:
        """Process one event.

        Args:
            event: The event to process.

        Returns:
            True if a handler applied the event, False if none is registered.

        Raises:
            Exception: If the handler fails.
        """
        self._logger.debug(
            "Processing event",
            event_id=event.id,
            event_type=event.type.value,
        )

        handler = self._handler_registry.get_handler(event.type)
        if handler is None:
            self._logger.warning(
                "No handler found for event type",
                event_type=event.type.value,
            )
            return False

        try:
            await handler.handle(event, self._session)
        except Exception as e:
            self._logger.error(
                "Error processing event",
                event_id=event.id,
                event_type=event.type.value,
                error=str(e),
                exc_info=True,
            )
            raise

        return True
