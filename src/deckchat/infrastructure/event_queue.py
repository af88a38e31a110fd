"""EventQueue feeding the single-threaded session loop."""

import asyncio

from deckchat.domain.entities.event import Event


class EventQueue:
    """In-memory event queue with identity-key superseding and delays.

    Every state mutation of the session happens while processing an event
    taken from this queue, so producers (HTTP handlers, background publish
    tasks) never mutate session state directly.

    Supports:
    - Superseding: a newer event with the same identity_key replaces an
      older pending one
    - Delayed enqueue, cancelled when superseded
    - Processing state tracking
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self._pending: dict[str, Event] = {}
        # Keyed by event.id so events sharing an identity_key can be in flight
        self._processing: dict[str, Event] = {}
        self._delay_tasks: dict[str, asyncio.Task[None]] = {}

    @property
    def pending_count(self) -> int:
        """Return the number of pending events."""
        return len(self._pending)

    @property
    def processing_count(self) -> int:
        """Return the number of events being processed."""
        return len(self._processing)

    @property
    def delayed_count(self) -> int:
        """Return the number of events waiting for their delay to elapse."""
        return len(self._delay_tasks)

    async def enqueue(self, event: Event, delay: float = 0) -> None:
        """Add an event to the queue.

        Args:
            event: The event to enqueue.
            delay: Delay in seconds before the event becomes available.
        """
        key = event.get_identity_key()
        await self._cancel_delayed(key)

        if delay > 0:
            self._delay_tasks[key] = asyncio.create_task(
                self._delayed_enqueue(event, delay)
            )
        else:
            # A superseded event may still sit in the queue; dequeue skips it.
            self._pending[key] = event
            await self._queue.put(event)

    def enqueue_nowait(self, event: Event) -> None:
        """Add an event immediately from synchronous code."""
        self._pending[event.get_identity_key()] = event
        self._queue.put_nowait(event)

    async def _cancel_delayed(self, key: str) -> None:
        task = self._delay_tasks.pop(key, None)
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _delayed_enqueue(self, event: Event, delay: float) -> None:
        key = event.get_identity_key()
        try:
            await asyncio.sleep(delay)
            self._pending[key] = event
            await self._queue.put(event)
        finally:
            if self._delay_tasks.get(key) is asyncio.current_task():
                del self._delay_tasks[key]

    async def dequeue(self) -> Event:
        """Get the next event, skipping superseded ones.

        Returns:
            The next event to process.
        """
        while True:
            event = await self._queue.get()
            key = event.get_identity_key()

            if key in self._pending and self._pending[key].id == event.id:
                del self._pending[key]
                self._processing[event.id] = event
                return event

    def mark_done(self, event: Event) -> None:
        """Mark an event as done processing."""
        self._processing.pop(event.id, None)

    async def close(self) -> None:
        """Cancel all delayed enqueues."""
        for key in list(self._delay_tasks):
            await self._cancel_delayed(key)
