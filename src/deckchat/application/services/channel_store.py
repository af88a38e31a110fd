"""Per-identity channel lists with selection and unread bookkeeping."""

from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from structlog.stdlib import BoundLogger

from deckchat.application.services.subscription_bridge import SubscriptionBridge
from deckchat.config.models import ChannelTemplate
from deckchat.domain.entities.channel import Channel, ChannelList, normalize_hashtags
from deckchat.domain.entities.message import Message
from deckchat.domain.errors import (
    ChannelIndexError,
    ChannelNotFoundError,
    ChannelValidationError,
)
from deckchat.infrastructure.logging import get_logger


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChannelStore:
    """Owns one ChannelList per identity.

    Lists are created lazily on first access and seeded with the default
    channels. Mutations that matter to durability (create, edit, select,
    delete) notify ``on_change`` with the affected identity; unread
    increments do not.
    """

    def __init__(
        self,
        bridge: SubscriptionBridge,
        default_channels: Iterable[ChannelTemplate] = (),
        clock: Callable[[], datetime] = utc_now,
        on_change: Callable[[str], None] | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            bridge: Subscription bridge used for channel filters.
            default_channels: Channels seeded into a new identity's list.
            clock: Source of the current time for ``last_read``.
            on_change: Callback invoked with the identity after durable mutations.
            logger: Logger instance.
        """
        self._bridge = bridge
        self._default_channels = list(default_channels)
        self._clock = clock
        self._on_change = on_change
        self._logger = logger or get_logger(__name__)
        self.by_user: dict[str, ChannelList] = {}

    def install(self, lists: dict[str, ChannelList]) -> None:
        """Install persisted channel lists and subscribe their channels.

        Args:
            lists: Mapping from identity to its persisted channel list.
        """
        for user, channel_list in lists.items():
            self.by_user[user] = channel_list
            for channel in channel_list.channels:
                if channel.subscribed:
                    self._bridge.subscribe(user, channel)
        self._logger.info("Installed channel lists", identities=len(lists))

    def channels(self, user: str) -> ChannelList:
        """Return the identity's channel list, creating it on first access."""
        channel_list = self.by_user.get(user)
        if channel_list is None:
            channel_list = ChannelList()
            self.by_user[user] = channel_list
            for template in self._default_channels:
                self._append(user, channel_list, template.name, template.hashtags)
            self._logger.info(
                "Created channel list",
                user=user,
                channels=len(channel_list.channels),
            )
        return channel_list

    def selected_channel(self, user: str) -> Channel | None:
        """Return the identity's selected channel, if any."""
        return self.channels(user).selected_channel()

    def create_channel(
        self, user: str, name: str, hashtags: str | Iterable[str]
    ) -> Channel:
        """Create a channel at the end of the identity's list.

        A channel created into an empty list is selected; otherwise the
        selection is unchanged.

        Args:
            user: Owning identity.
            name: Channel name.
            hashtags: Raw hashtags, normalized before validation.

        Returns:
            The created channel.

        Raises:
            ChannelValidationError: If the name or the normalized hashtags are empty.
        """
        channel_list = self.channels(user)
        channel = self._append(user, channel_list, name, hashtags)
        self._logger.info(
            "Created channel",
            user=user,
            channel_id=channel.id,
            name=channel.name,
            hashtags=channel.hashtags,
        )
        self._changed(user)
        return channel

    def edit_channel(
        self, user: str, index: int, name: str, hashtags: str | Iterable[str]
    ) -> Channel:
        """Rename and re-tag a channel.

        The channel keeps its id, unread count and position. When the hashtag
        set changes the channel moves to the subscription for the new set.

        Raises:
            ChannelIndexError: If ``index`` is out of range.
            ChannelValidationError: If the name or the normalized hashtags are empty.
        """
        channel_list = self.channels(user)
        channel = channel_list.get(index)
        if channel is None:
            raise ChannelIndexError(f"No channel at index {index}")
        name, tags = _validated(name, hashtags)

        if frozenset(tags) != channel.filter_key and channel.subscribed:
            self._bridge.unsubscribe(user, channel)
            channel.hashtags = tags
            self._bridge.subscribe(user, channel)
        else:
            channel.hashtags = tags
        channel.name = name

        self._logger.info(
            "Updated channel", user=user, channel_id=channel.id, name=name
        )
        self._changed(user)
        return channel

    def select_channel(self, user: str, index: int) -> None:
        """Select a channel and mark it read.

        Only the selected channel's unread state is reset.

        Raises:
            ChannelIndexError: If ``index`` is out of range; selection is unchanged.
        """
        channel_list = self.channels(user)
        channel = channel_list.get(index)
        if channel is None:
            raise ChannelIndexError(f"No channel at index {index}")

        channel_list.selected = index
        channel.unread_count = 0
        channel.last_read = self._clock()
        self._logger.debug("Selected channel", user=user, channel_id=channel.id)
        self._changed(user)

    def record_incoming(self, user: str, channel_id: str, message: Message) -> None:
        """Account for a message delivered to a channel.

        A message for a channel other than the selected one increments its
        unread count; the selected channel reads it immediately. Messages are
        not deduplicated here.
        """
        channel_list = self.channels(user)
        index = channel_list.index_of(channel_id)
        if index is None:
            self._logger.debug(
                "Message for unknown channel ignored",
                user=user,
                channel_id=channel_id,
                message_id=message.id,
            )
            return
        if index == channel_list.selected:
            return
        channel_list.channels[index].unread_count += 1

    def delete_channel(self, user: str, channel_id: str) -> Channel:
        """Remove a channel and drop its subscription reference.

        A selection pointing at the removed channel is cleared; one pointing
        after it shifts down to keep the same channel selected.

        Returns:
            The removed channel.

        Raises:
            ChannelNotFoundError: If no channel has ``channel_id``.
        """
        channel_list = self.channels(user)
        index = channel_list.index_of(channel_id)
        if index is None:
            raise ChannelNotFoundError(f"Channel not found: {channel_id}")

        removed = channel_list.channels.pop(index)
        if channel_list.selected == index:
            channel_list.selected = None
        elif channel_list.selected is not None and channel_list.selected > index:
            channel_list.selected -= 1

        if removed.subscribed:
            self._bridge.unsubscribe(user, removed)
            removed.subscribed = False

        self._logger.info("Deleted channel", user=user, channel_id=channel_id)
        self._changed(user)
        return removed

    def remove_user(self, user: str) -> None:
        """Unsubscribe every channel of an identity and forget its list."""
        channel_list = self.by_user.pop(user, None)
        if channel_list is None:
            return
        for channel in channel_list.channels:
            if channel.subscribed:
                self._bridge.unsubscribe(user, channel)
        self._logger.info("Removed channel list", user=user)

    def _append(
        self,
        user: str,
        channel_list: ChannelList,
        name: str,
        hashtags: str | Iterable[str],
    ) -> Channel:
        name, tags = _validated(name, hashtags)
        channel = Channel(name=name, hashtags=tags, subscribed=True)
        while channel_list.find(channel.id) is not None:
            channel = Channel(name=name, hashtags=tags, subscribed=True)

        was_empty = not channel_list.channels
        channel_list.channels.append(channel)
        self._bridge.subscribe(user, channel)
        if was_empty:
            channel_list.selected = 0
            channel.last_read = self._clock()
        return channel

    def _changed(self, user: str) -> None:
        if self._on_change is not None:
            self._on_change(user)


def _validated(
    name: str, hashtags: str | Iterable[str]
) -> tuple[str, list[str]]:
    name = name.strip()
    if not name:
        raise ChannelValidationError("Channel name must not be empty")
    tags = normalize_hashtags(hashtags)
    if not tags:
        raise ChannelValidationError("Channel needs at least one hashtag")
    return name, tags
