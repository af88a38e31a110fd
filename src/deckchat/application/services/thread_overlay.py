"""Single-slot thread overlay state machine."""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from structlog.stdlib import BoundLogger

from deckchat.domain.entities.event import CloseTrigger
from deckchat.infrastructure.logging import get_logger


class ThreadOverlayClosed(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["closed"] = "closed"


class ThreadOverlayOpen(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["open"] = "open"
    anchor: str


ThreadOverlayState = ThreadOverlayClosed | ThreadOverlayOpen

CLOSED = ThreadOverlayClosed()


class ThreadOverlayController:
    """Holds at most one open thread.

    Opening replaces the anchor without keeping history, and closing never
    touches any other component's state.
    """

    def __init__(self, logger: BoundLogger | None = None) -> None:
        self._state: ThreadOverlayState = CLOSED
        self._logger = logger or get_logger(__name__)

    @property
    def state(self) -> ThreadOverlayState:
        return self._state

    @property
    def is_open(self) -> bool:
        return isinstance(self._state, ThreadOverlayOpen)

    @property
    def anchor(self) -> str | None:
        """Return the anchor note id of the open thread, if any."""
        if isinstance(self._state, ThreadOverlayOpen):
            return self._state.anchor
        return None

    def open(self, note_id: str) -> None:
        """Open the thread anchored at ``note_id``, replacing any open thread."""
        previous = self.anchor
        self._state = ThreadOverlayOpen(anchor=note_id)
        self._logger.debug("Opened thread", anchor=note_id, replaced=previous)

    def close(self, trigger: CloseTrigger = CloseTrigger.DISMISS) -> bool:
        """Close the overlay. Idempotent.

        Args:
            trigger: The UI source of the close; every trigger behaves the same.

        Returns:
            True if an open thread was closed.
        """
        if not self.is_open:
            return False
        self._logger.debug("Closed thread", anchor=self.anchor, trigger=trigger.value)
        self._state = CLOSED
        return True
