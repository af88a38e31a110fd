"""Global relay configuration."""

from pydantic import BaseModel, Field, field_serializer


class RelayConfig(BaseModel):
    """Relays the application connects to. Not owned by any channel."""

    relays: set[str] = Field(default_factory=set)

    @field_serializer("relays")
    def _serialize_relays(self, relays: set[str]) -> list[str]:
        return sorted(relays)

    def add_relay(self, url: str) -> bool:
        """Add a relay URL.

        Returns:
            True if the relay was not configured before.
        """
        url = url.strip()
        if not url or url in self.relays:
            return False
        self.relays.add(url)
        return True

    def remove_relay(self, url: str) -> bool:
        """Remove a relay URL.

        Returns:
            True if the relay was configured.
        """
        url = url.strip()
        if url not in self.relays:
            return False
        self.relays.discard(url)
        return True

    def has_relay(self, url: str) -> bool:
        """Return True if ``url`` is configured."""
        return url.strip() in self.relays
