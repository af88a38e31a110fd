"""SessionRepository protocol."""

from typing import Protocol

from deckchat.domain.entities.channel import ChannelList
from deckchat.domain.entities.relay_config import RelayConfig


class SessionRepository(Protocol):
    """Repository protocol for the durable session documents.

    Every save writes the full current state of its document; there are no
    partial or merge writes. Failures raise PersistenceError.
    """

    async def load_channels_cache(self) -> dict[str, ChannelList]:
        """Load every persisted channel list.

        Returns:
            Mapping from user identity to that identity's channel list.
        """
        ...

    async def save_channel_list(self, user: str, channel_list: ChannelList) -> None:
        """Replace the persisted channel list of one identity.

        Args:
            user: The owning identity.
            channel_list: The full list to persist.
        """
        ...

    async def delete_channel_list(self, user: str) -> None:
        """Remove the persisted channel list of one identity."""
        ...

    async def load_relay_config(self) -> RelayConfig | None:
        """Load the relay configuration.

        Returns:
            The saved configuration, or None if none was ever saved.
        """
        ...

    async def save_relay_config(self, relay_config: RelayConfig) -> None:
        """Replace the persisted relay configuration."""
        ...
