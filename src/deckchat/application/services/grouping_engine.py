"""Grouping of an ordered message stream into render-ready blocks."""

from collections.abc import Iterator, Sequence
from datetime import datetime, timedelta

from deckchat.domain.entities.message import Message, MessageBlock

DEFAULT_GROUP_THRESHOLD = 300.0

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR


class MessageBlocks:
    """Lazy, restartable sequence of message blocks.

    Each iteration performs a fresh single pass over the messages, holding
    only the block being built.
    """

    def __init__(self, messages: Sequence[Message], threshold: timedelta) -> None:
        self._messages = messages
        self._threshold = threshold

    def __iter__(self) -> Iterator[MessageBlock]:
        block: MessageBlock | None = None
        for message in self._messages:
            if (
                block is not None
                and message.author == block.author
                and message.created_at - block.last_timestamp <= self._threshold
            ):
                block.message_ids.append(message.id)
                block.last_timestamp = message.created_at
                continue

            if block is not None:
                yield block
            block = MessageBlock(
                author=message.author,
                first_timestamp=message.created_at,
                last_timestamp=message.created_at,
                message_ids=[message.id],
                show_header=True,
            )

        if block is not None:
            yield block


class GroupingEngine:
    """Groups consecutive same-author messages within a time threshold.

    A message joins the current block when it has the block's author and
    arrived at most ``threshold_seconds`` after the previous message of that
    block. The comparison is against the previous message, not the block
    start, so a steady conversation never splits on total duration.
    """

    def __init__(self, threshold_seconds: float = DEFAULT_GROUP_THRESHOLD) -> None:
        """Initialize the engine.

        Args:
            threshold_seconds: Maximum inclusive gap between consecutive
                messages of one block.
        """
        self._threshold = timedelta(seconds=threshold_seconds)
        self._cache_key: tuple[str, int, str | None, str | None] | None = None
        self._cache: list[MessageBlock] = []

    @property
    def threshold(self) -> timedelta:
        return self._threshold

    def group(self, messages: Sequence[Message]) -> MessageBlocks:
        """Return the lazy block sequence for messages ordered by created_at."""
        return MessageBlocks(messages, self._threshold)

    def blocks_for(
        self, channel_id: str, messages: Sequence[Message]
    ) -> list[MessageBlock]:
        """Return the blocks of the active channel, cached between renders.

        The cache is rebuilt when the channel, the message count, the head or
        the tail message changes. A bounded buffer that drops its head to make
        room for a late message keeps its count and tail, so the head is part
        of the key. Switching channel always starts from scratch.
        """
        head_id = messages[0].id if messages else None
        tail_id = messages[-1].id if messages else None
        key = (channel_id, len(messages), head_id, tail_id)
        if key != self._cache_key:
            self._cache = list(self.group(messages))
            self._cache_key = key
        return self._cache

    def invalidate(self) -> None:
        """Drop cached blocks."""
        self._cache_key = None
        self._cache = []


def format_timestamp(created_at: datetime, now: datetime) -> str:
    """Format a block header timestamp relative to ``now``.

    Args:
        created_at: When the block's first message was created.
        now: The current time.

    Returns:
        A short label such as "Just now", "5m ago", "2h ago" or "Yesterday".
    """
    diff = max(0, int((now - created_at).total_seconds()))

    if diff < MINUTE:
        return "Just now"
    if diff < HOUR:
        return f"{diff // MINUTE}m ago"
    if diff < DAY:
        return f"{diff // HOUR}h ago"
    if diff < 2 * DAY:
        return "Yesterday"
    return f"{diff // DAY}d ago"
