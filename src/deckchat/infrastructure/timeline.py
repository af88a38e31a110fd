"""In-memory timeline collaborator."""

import bisect
from collections.abc import Sequence
from typing import Any

import ulid

from deckchat.domain.entities.channel import normalize_hashtags
from deckchat.domain.entities.message import Message


class InMemoryTimeline:
    """Keeps one ordered message buffer per hashtag subscription.

    Messages are pushed by the relay side through ``ingest``; a message lands
    in every open subscription whose filter shares at least one hashtag with
    it.
    """

    def __init__(self, max_messages: int = 1000) -> None:
        """Initialize the timeline.

        Args:
            max_messages: Messages kept per subscription; older ones are dropped.
        """
        self._max_messages = max_messages
        self._filters: dict[str, frozenset[str]] = {}
        self._messages: dict[str, list[Message]] = {}

    def open(self, filter_: dict[str, Any]) -> str:
        handle = str(ulid.new())
        self._filters[handle] = frozenset(filter_.get("#t", ()))
        self._messages[handle] = []
        return handle

    def close(self, handle: str) -> None:
        self._filters.pop(handle, None)
        self._messages.pop(handle, None)

    def messages(self, handle: str) -> Sequence[Message]:
        return self._messages.get(handle, [])

    @property
    def handles(self) -> list[str]:
        return list(self._filters)

    def ingest(self, message: Message) -> list[str]:
        """Store a message in every matching subscription.

        Arrival is expected in non-decreasing ``created_at`` order; a late
        message is inserted at its ordered position.

        Returns:
            Handles of the subscriptions that received the message.
        """
        tags = frozenset(normalize_hashtags(message.hashtags))
        matched: list[str] = []
        for handle, filter_tags in self._filters.items():
            if not tags & filter_tags:
                continue
            buffer = self._messages[handle]
            if buffer and buffer[-1].created_at > message.created_at:
                bisect.insort_right(buffer, message, key=lambda m: m.created_at)
            else:
                buffer.append(message)
            if len(buffer) > self._max_messages:
                del buffer[: len(buffer) - self._max_messages]
            matched.append(handle)
        return matched
