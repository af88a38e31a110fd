"""Network collaborator adapters."""

from deckchat.infrastructure.network.reaction_publisher import (
    HttpReactionPublisher,
    MockReactionPublisher,
    create_publisher,
)

__all__ = ["HttpReactionPublisher", "MockReactionPublisher", "create_publisher"]
