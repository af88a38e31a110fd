"""Reaction publisher adapters."""

import os

import aiohttp

from deckchat.config.models import ReactionConfig
from deckchat.domain.errors import NetworkDispatchError

DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpReactionPublisher:
    """Publishes reactions by POSTing ``{"note_id": ...}`` to a gateway URL."""

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        """Initialize the publisher.

        Args:
            url: Gateway endpoint accepting reaction publish requests.
            timeout: Total request timeout in seconds.
        """
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def url(self) -> str:
        return self._url

    async def publish_reaction(self, note_id: str) -> None:
        """Publish a reaction.

        Raises:
            NetworkDispatchError: On connection errors or non-2xx responses.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

        try:
            async with self._session.post(self._url, json={"note_id": note_id}) as resp:
                if resp.status >= 300:
                    raise NetworkDispatchError(
                        f"Reaction publish rejected with status {resp.status}"
                    )
        except aiohttp.ClientError as e:
            raise NetworkDispatchError(f"Reaction publish failed: {e}") from e
        except TimeoutError as e:
            raise NetworkDispatchError("Reaction publish timed out") from e

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None


class MockReactionPublisher:
    """Publisher for development and tests that never touches the network."""

    def __init__(self, raise_error: bool = False) -> None:
        """Initialize the mock publisher.

        Args:
            raise_error: If True, every publish fails with NetworkDispatchError.
        """
        self._raise_error = raise_error
        self.published: list[str] = []

    async def publish_reaction(self, note_id: str) -> None:
        if self._raise_error:
            raise NetworkDispatchError("Mock publisher error for testing")
        self.published.append(note_id)

    async def close(self) -> None:
        return None


ReactionPublisherAdapter = HttpReactionPublisher | MockReactionPublisher


def create_publisher(config: ReactionConfig) -> ReactionPublisherAdapter:
    """Create a reaction publisher based on configuration and environment.

    Args:
        config: Reaction configuration.

    Returns:
        MockReactionPublisher if MOCK_PUBLISHER=true or no publisher URL is
        configured, a failing MockReactionPublisher if MOCK_PUBLISHER=error,
        otherwise HttpReactionPublisher.
    """
    mock = os.getenv("MOCK_PUBLISHER", "").lower()

    if mock == "error":
        return MockReactionPublisher(raise_error=True)

    if mock == "true" or not config.publisher_url:
        return MockReactionPublisher()

    return HttpReactionPublisher(config.publisher_url)
