"""Tests for QuickSwitcher."""

import pytest

from deckchat.application.services.quick_switcher import QuickSwitcher
from deckchat.domain.entities.channel import Channel, ChannelList
from deckchat.domain.entities.event import Key


@pytest.fixture
def channel_list() -> ChannelList:
    return ChannelList(
        channels=[
            Channel(name="General", hashtags=["general"]),
            Channel(name="Bitcoin", hashtags=["btc"]),
            Channel(name="Nostr Dev", hashtags=["nostr"]),
            Channel(name="bitcoin-dev", hashtags=["bitcoindev"]),
        ],
        selected=0,
    )


class TestQuickSwitcher:
    def test_toggle(self) -> None:
        switcher = QuickSwitcher()

        switcher.toggle()
        assert switcher.is_open is True
        switcher.toggle()
        assert switcher.is_open is False

    def test_open_resets_query(self) -> None:
        switcher = QuickSwitcher()
        switcher.open()
        switcher.set_query("bit")
        switcher.highlighted = 1

        switcher.close()
        switcher.open()

        assert switcher.query == ""
        assert switcher.highlighted == 0

    def test_empty_query_lists_everything(self, channel_list: ChannelList) -> None:
        switcher = QuickSwitcher()

        assert [i for i, _ in switcher.results(channel_list)] == [0, 1, 2, 3]

    def test_case_insensitive_substring(self, channel_list: ChannelList) -> None:
        switcher = QuickSwitcher()
        switcher.set_query("BIT")

        assert [c.name for _, c in switcher.results(channel_list)] == [
            "Bitcoin",
            "bitcoin-dev",
        ]

    def test_arrows_clamped(self, channel_list: ChannelList) -> None:
        switcher = QuickSwitcher()
        switcher.open()
        switcher.set_query("bit")

        switcher.handle_key(Key.ARROW_UP, channel_list)
        assert switcher.highlighted == 0
        for _ in range(5):
            switcher.handle_key(Key.ARROW_DOWN, channel_list)
        assert switcher.highlighted == 1

    def test_enter_returns_list_index(self, channel_list: ChannelList) -> None:
        switcher = QuickSwitcher()
        switcher.open()
        switcher.set_query("bit")
        switcher.handle_key(Key.ARROW_DOWN, channel_list)

        index = switcher.handle_key(Key.ENTER, channel_list)

        assert index == 3
        assert switcher.is_open is False

    def test_enter_without_results(self, channel_list: ChannelList) -> None:
        switcher = QuickSwitcher()
        switcher.open()
        switcher.set_query("zzz")

        assert switcher.handle_key(Key.ENTER, channel_list) is None
        assert switcher.is_open is True

    def test_query_change_resets_highlight(self, channel_list: ChannelList) -> None:
        switcher = QuickSwitcher()
        switcher.open()
        switcher.handle_key(Key.ARROW_DOWN, channel_list)

        switcher.set_query("nostr")

        assert switcher.highlighted == 0
