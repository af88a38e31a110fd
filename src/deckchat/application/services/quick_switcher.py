"""Quick switcher state: search, keyboard navigation and confirmation."""

from deckchat.domain.entities.channel import Channel, ChannelList
from deckchat.domain.entities.event import Key


class QuickSwitcher:
    """Modal channel switcher.

    ``highlighted`` indexes into the filtered results, not the channel list.
    """

    def __init__(self) -> None:
        self.is_open = False
        self.query = ""
        self.highlighted = 0

    def open(self) -> None:
        self.is_open = True
        self.query = ""
        self.highlighted = 0

    def close(self) -> None:
        self.is_open = False

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    def set_query(self, query: str) -> None:
        self.query = query
        self.highlighted = 0

    def results(self, channel_list: ChannelList) -> list[tuple[int, Channel]]:
        """Return ``(list index, channel)`` pairs whose name contains the query."""
        needle = self.query.strip().lower()
        return [
            (index, channel)
            for index, channel in enumerate(channel_list.channels)
            if not needle or needle in channel.name.lower()
        ]

    def handle_key(self, key: Key, channel_list: ChannelList) -> int | None:
        """Apply a navigation key.

        Args:
            key: ARROW_UP, ARROW_DOWN or ENTER; other keys are ignored.
            channel_list: The active identity's channels.

        Returns:
            The channel list index to select when ENTER confirms a result,
            otherwise None.
        """
        results = self.results(channel_list)
        if key == Key.ARROW_DOWN:
            self.highlighted = min(self.highlighted + 1, max(len(results) - 1, 0))
        elif key == Key.ARROW_UP:
            self.highlighted = max(self.highlighted - 1, 0)
        elif key == Key.ENTER and results:
            index = results[min(self.highlighted, len(results) - 1)][0]
            self.close()
            return index
        return None
