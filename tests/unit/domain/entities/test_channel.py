"""Tests for channel entities."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from deckchat.domain.entities.channel import (
    Channel,
    ChannelList,
    normalize_hashtags,
    unread_badge,
)


class TestNormalizeHashtags:
    def test_strips_hash_and_lowercases(self) -> None:
        assert normalize_hashtags(["#Bitcoin", " BTC "]) == ["bitcoin", "btc"]

    def test_removes_duplicates_keeping_order(self) -> None:
        assert normalize_hashtags(["btc", "#BTC", "bitcoin", "btc"]) == [
            "btc",
            "bitcoin",
        ]

    def test_drops_empty_entries(self) -> None:
        assert normalize_hashtags(["", "  ", "#", "nostr"]) == ["nostr"]

    def test_comma_separated_string(self) -> None:
        assert normalize_hashtags("coffee, #Espresso,,latte ") == [
            "coffee",
            "espresso",
            "latte",
        ]

    def test_empty_input(self) -> None:
        assert normalize_hashtags([]) == []
        assert normalize_hashtags("") == []


class TestUnreadBadge:
    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, ""), (1, "1"), (42, "42"), (99, "99"), (100, "99+"), (5000, "99+")],
    )
    def test_badge_text(self, count: int, expected: str) -> None:
        assert unread_badge(count) == expected


class TestChannel:
    def test_hashtags_are_normalized(self) -> None:
        channel = Channel(name="Bitcoin", hashtags=["#BTC", "bitcoin", "btc"])

        assert channel.hashtags == ["btc", "bitcoin"]

    def test_empty_hashtags_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Channel(name="Nothing", hashtags=["#", " "])

    def test_negative_unread_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Channel(name="General", hashtags=["general"], unread_count=-1)

    def test_ids_are_generated_and_distinct(self) -> None:
        first = Channel(name="a", hashtags=["a"])
        second = Channel(name="a", hashtags=["a"])

        assert first.id
        assert first.id != second.id

    def test_filter_key_is_order_independent(self) -> None:
        first = Channel(name="a", hashtags=["btc", "bitcoin"])
        second = Channel(name="b", hashtags=["Bitcoin", "#btc"])

        assert first.filter_key == second.filter_key == frozenset({"btc", "bitcoin"})

    def test_badge(self) -> None:
        channel = Channel(name="busy", hashtags=["busy"], unread_count=150)

        assert channel.badge == "99+"

    def test_defaults(self) -> None:
        channel = Channel(name="General", hashtags=["general"])

        assert channel.subscribed is False
        assert channel.unread_count == 0
        assert channel.last_read is None


class TestChannelList:
    def _list(self, selected: int | None = None) -> ChannelList:
        return ChannelList(
            channels=[
                Channel(id="c1", name="one", hashtags=["one"]),
                Channel(id="c2", name="two", hashtags=["two"]),
            ],
            selected=selected,
        )

    def test_get(self) -> None:
        channel_list = self._list()

        assert channel_list.get(1).id == "c2"  # type: ignore[union-attr]
        assert channel_list.get(2) is None
        assert channel_list.get(-1) is None

    def test_index_of_and_find(self) -> None:
        channel_list = self._list()

        assert channel_list.index_of("c2") == 1
        assert channel_list.index_of("missing") is None
        assert channel_list.find("c1").name == "one"  # type: ignore[union-attr]
        assert channel_list.find("missing") is None

    def test_selected_channel(self) -> None:
        assert self._list(selected=1).selected_channel().id == "c2"  # type: ignore[union-attr]
        assert self._list().selected_channel() is None

    def test_stale_selection_degrades_to_none(self) -> None:
        """A persisted index past the end is dropped on load."""
        assert self._list(selected=5).selected is None
        assert ChannelList(selected=0).selected is None

    def test_empty_list_is_valid(self) -> None:
        channel_list = ChannelList()

        assert channel_list.channels == []
        assert channel_list.selected is None

    def test_last_read_round_trips_through_json(self) -> None:
        read_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        channel_list = ChannelList(
            channels=[Channel(name="g", hashtags=["g"], last_read=read_at)],
            selected=0,
        )

        restored = ChannelList.model_validate_json(channel_list.model_dump_json())

        assert restored == channel_list
