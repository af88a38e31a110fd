"""Protocols for the timeline and network collaborators."""

from collections.abc import Sequence
from typing import Any, Protocol

from deckchat.domain.entities.message import Message

# Event kinds a channel filter asks the relays for
TEXT_NOTE_KIND = 1


def hashtag_filter(hashtags: frozenset[str]) -> dict[str, Any]:
    """Build the subscription filter descriptor for a hashtag set.

    Args:
        hashtags: Normalized hashtags of a channel.

    Returns:
        Filter descriptor in relay filter form, tags sorted for stability.
    """
    return {"kinds": [TEXT_NOTE_KIND], "#t": sorted(hashtags)}


class Timeline(Protocol):
    """Timeline collaborator that owns subscriptions and message buffers."""

    def open(self, filter_: dict[str, Any]) -> str:
        """Open a subscription for a filter and return its handle."""
        ...

    def close(self, handle: str) -> None:
        """Close a subscription. Unknown handles are ignored."""
        ...

    def messages(self, handle: str) -> Sequence[Message]:
        """Return the messages of a subscription, ordered by created_at."""
        ...

    def ingest(self, message: Message) -> list[str]:
        """Deliver a message and return the handles whose filter matched it.

        The session calls back into ChannelStore.record_incoming for every
        channel behind those handles, selected or not.
        """
        ...


class ReactionPublisher(Protocol):
    """Network collaborator that publishes reactions."""

    async def publish_reaction(self, note_id: str) -> None:
        """Publish a reaction to a note.

        Args:
            note_id: The reacted note.

        Raises:
            NetworkDispatchError: If the publish fails.
        """
        ...
