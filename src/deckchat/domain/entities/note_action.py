"""Actions emitted by rendered message blocks."""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class NoteActionType(str, Enum):
    """Note action type enumeration."""

    OPEN = "open"
    REACT = "react"
    REPLY = "reply"
    REPOST = "repost"
    SELECT_PROFILE = "select_profile"


class OpenAction(BaseModel):
    type: Literal[NoteActionType.OPEN] = NoteActionType.OPEN
    note_id: str


class ReactAction(BaseModel):
    type: Literal[NoteActionType.REACT] = NoteActionType.REACT
    note_id: str


class ReplyAction(BaseModel):
    type: Literal[NoteActionType.REPLY] = NoteActionType.REPLY
    note_id: str


class RepostAction(BaseModel):
    type: Literal[NoteActionType.REPOST] = NoteActionType.REPOST
    note_id: str


class SelectProfileAction(BaseModel):
    type: Literal[NoteActionType.SELECT_PROFILE] = NoteActionType.SELECT_PROFILE
    identity: str


NoteAction = Annotated[
    OpenAction | ReactAction | ReplyAction | RepostAction | SelectProfileAction,
    Field(discriminator="type"),
]
