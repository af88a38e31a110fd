"""Routing of note actions to local state or the network collaborator."""

import asyncio
from enum import Enum

from structlog.stdlib import BoundLogger

from deckchat.application.services.notifications import NotificationCenter
from deckchat.application.services.thread_overlay import ThreadOverlayController
from deckchat.config.models import ReactionConfig
from deckchat.domain.entities.event import ReactionResultEvent, ReactionRetryEvent
from deckchat.domain.entities.note_action import (
    NoteAction,
    OpenAction,
    ReactAction,
    ReplyAction,
    RepostAction,
    SelectProfileAction,
)
from deckchat.domain.errors import NetworkDispatchError
from deckchat.domain.repositories.gateways import ReactionPublisher
from deckchat.infrastructure.event_queue import EventQueue
from deckchat.infrastructure.logging import get_logger


class ReactionStatus(str, Enum):
    """Two-phase local reaction mark."""

    PENDING = "pending"
    CONFIRMED = "confirmed"


class ReactionTracker:
    """Optimistic reaction marks keyed by note id."""

    def __init__(self) -> None:
        self._marks: dict[str, ReactionStatus] = {}

    def status(self, note_id: str) -> ReactionStatus | None:
        return self._marks.get(note_id)

    def is_reacted(self, note_id: str) -> bool:
        """Return True for pending and confirmed marks alike."""
        return note_id in self._marks

    def mark_pending(self, note_id: str) -> bool:
        """Mark a note as reacted before confirmation.

        Returns:
            False if the note already carries a mark.
        """
        if note_id in self._marks:
            return False
        self._marks[note_id] = ReactionStatus.PENDING
        return True

    def confirm(self, note_id: str) -> None:
        if note_id in self._marks:
            self._marks[note_id] = ReactionStatus.CONFIRMED

    def revert(self, note_id: str) -> None:
        self._marks.pop(note_id, None)

    def snapshot(self) -> dict[str, ReactionStatus]:
        return dict(self._marks)


class ActionRouter:
    """Maps note actions emitted by message blocks to their effects.

    Open, Reply and Repost open the thread overlay (Reply and Repost have no
    dedicated surface yet). React marks the note optimistically and publishes
    in the background; the outcome comes back through the event queue as a
    ReactionResultEvent and is reconciled here. A failed publish is retried
    after ``retry_delay`` until ``max_attempts`` is reached, then the mark is
    reverted and the user is notified.
    """

    def __init__(
        self,
        overlay: ThreadOverlayController,
        publisher: ReactionPublisher,
        event_queue: EventQueue,
        notifications: NotificationCenter,
        config: ReactionConfig | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._overlay = overlay
        self._publisher = publisher
        self._event_queue = event_queue
        self._notifications = notifications
        self._config = config or ReactionConfig()
        self._logger = logger or get_logger(__name__)
        self._tasks: set[asyncio.Task[None]] = set()
        self.reactions = ReactionTracker()

    @property
    def in_flight(self) -> int:
        """Return the number of publishes not yet completed."""
        return len(self._tasks)

    def route(self, action: NoteAction) -> None:
        """Apply one note action."""
        if isinstance(action, OpenAction | ReplyAction | RepostAction):
            self._overlay.open(action.note_id)
        elif isinstance(action, ReactAction):
            if self.reactions.mark_pending(action.note_id):
                self._dispatch(action.note_id, attempt=1)
        elif isinstance(action, SelectProfileAction):
            self._logger.debug("Profile selection ignored", identity=action.identity)

    async def reconcile(self, result: ReactionResultEvent) -> None:
        """Reconcile a publish outcome against the optimistic mark."""
        note_id = result.note_id
        if result.succeeded:
            self.reactions.confirm(note_id)
            self._logger.info("Reaction confirmed", note_id=note_id)
            return

        if result.attempt < self._config.max_attempts:
            self._logger.warning(
                "Reaction publish failed, retrying",
                note_id=note_id,
                attempt=result.attempt,
                error=result.error,
            )
            await self._event_queue.enqueue(
                ReactionRetryEvent(note_id=note_id, attempt=result.attempt + 1),
                delay=self._config.retry_delay,
            )
            return

        self.reactions.revert(note_id)
        self._logger.error(
            "Reaction publish failed, mark reverted",
            note_id=note_id,
            attempts=result.attempt,
            error=result.error,
        )
        self._notifications.push("Your reaction could not be sent.", level="warning")

    def retry(self, event: ReactionRetryEvent) -> None:
        """Publish again unless the mark was reverted or confirmed meanwhile."""
        if self.reactions.status(event.note_id) == ReactionStatus.PENDING:
            self._dispatch(event.note_id, attempt=event.attempt)

    async def drain(self) -> None:
        """Wait for every in-flight publish to report back."""
        if self._tasks:
            await asyncio.gather(*self._tasks)

    def _dispatch(self, note_id: str, attempt: int) -> None:
        task = asyncio.create_task(self._publish(note_id, attempt))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _publish(self, note_id: str, attempt: int) -> None:
        error: str | None = None
        try:
            await self._publisher.publish_reaction(note_id)
        except NetworkDispatchError as e:
            error = str(e) or type(e).__name__
        except Exception as e:
            self._logger.error(
                "Unexpected error publishing reaction",
                note_id=note_id,
                error=str(e),
                exc_info=True,
            )
            error = str(e) or type(e).__name__

        await self._event_queue.enqueue(
            ReactionResultEvent(note_id=note_id, attempt=attempt, error=error)
        )
