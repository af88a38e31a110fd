"""Hashtag-set keyed subscriptions shared between channels."""

from dataclasses import dataclass, field

from structlog.stdlib import BoundLogger

from deckchat.domain.entities.channel import Channel
from deckchat.domain.repositories.gateways import Timeline, hashtag_filter
from deckchat.infrastructure.logging import get_logger

# (user, channel_id)
ChannelRef = tuple[str, str]


@dataclass
class _Subscription:
    handle: str
    refs: set[ChannelRef] = field(default_factory=set)


class SubscriptionBridge:
    """Maps channel hashtag sets to timeline subscriptions.

    One timeline subscription exists per distinct normalized hashtag set.
    Channels referencing the same set (in one identity's list or across
    identities) share it; the subscription is closed when the last
    referencing channel unsubscribes.
    """

    def __init__(self, timeline: Timeline, logger: BoundLogger | None = None) -> None:
        """Initialize the bridge.

        Args:
            timeline: Timeline collaborator that opens and closes subscriptions.
            logger: Logger instance.
        """
        self._timeline = timeline
        self._logger = logger or get_logger(__name__)
        self._by_filter: dict[frozenset[str], _Subscription] = {}
        self._by_handle: dict[str, frozenset[str]] = {}

    @property
    def subscription_count(self) -> int:
        """Return the number of open timeline subscriptions."""
        return len(self._by_filter)

    def subscribe(self, user: str, channel: Channel) -> str:
        """Subscribe a channel, reusing an existing subscription if possible.

        Calling this repeatedly for the same channel is idempotent.

        Args:
            user: Identity owning the channel.
            channel: The channel to subscribe.

        Returns:
            The subscription handle.
        """
        key = channel.filter_key
        subscription = self._by_filter.get(key)
        if subscription is None:
            handle = self._timeline.open(hashtag_filter(key))
            subscription = _Subscription(handle=handle)
            self._by_filter[key] = subscription
            self._by_handle[handle] = key
            self._logger.info(
                "Opened subscription",
                handle=handle,
                hashtags=sorted(key),
            )
        subscription.refs.add((user, channel.id))
        return subscription.handle

    def unsubscribe(self, user: str, channel: Channel) -> None:
        """Drop a channel's reference to its subscription.

        No-op when no subscription exists for the channel's filter.

        Args:
            user: Identity owning the channel.
            channel: The channel to unsubscribe.
        """
        key = channel.filter_key
        subscription = self._by_filter.get(key)
        if subscription is None:
            return

        subscription.refs.discard((user, channel.id))
        if subscription.refs:
            return

        del self._by_filter[key]
        del self._by_handle[subscription.handle]
        self._timeline.close(subscription.handle)
        self._logger.info(
            "Closed subscription",
            handle=subscription.handle,
            hashtags=sorted(key),
        )

    def handle_for(self, channel: Channel) -> str | None:
        """Return the subscription handle serving a channel's filter."""
        subscription = self._by_filter.get(channel.filter_key)
        return subscription.handle if subscription else None

    def channels_for(self, handle: str) -> set[ChannelRef]:
        """Return the channels referencing a subscription handle."""
        key = self._by_handle.get(handle)
        if key is None:
            return set()
        return set(self._by_filter[key].refs)
