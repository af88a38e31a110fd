"""Tests for note actions."""

import pytest
from pydantic import TypeAdapter, ValidationError

from deckchat.domain.entities.note_action import (
    NoteAction,
    OpenAction,
    ReactAction,
    ReplyAction,
    RepostAction,
    SelectProfileAction,
)

adapter: TypeAdapter[NoteAction] = TypeAdapter(NoteAction)


class TestNoteAction:
    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            ({"type": "open", "note_id": "n1"}, OpenAction),
            ({"type": "react", "note_id": "n1"}, ReactAction),
            ({"type": "reply", "note_id": "n1"}, ReplyAction),
            ({"type": "repost", "note_id": "n1"}, RepostAction),
            ({"type": "select_profile", "identity": "npub1"}, SelectProfileAction),
        ],
    )
    def test_discriminated_by_type(self, payload: dict, expected: type) -> None:
        assert isinstance(adapter.validate_python(payload), expected)

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            adapter.validate_python({"type": "zap", "note_id": "n1"})

    def test_missing_note_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            adapter.validate_python({"type": "react"})
