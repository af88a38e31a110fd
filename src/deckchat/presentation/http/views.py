"""JSON views of session state for the HTTP surface."""

from datetime import datetime
from typing import Any

from deckchat.application.services.grouping_engine import format_timestamp
from deckchat.domain.entities.channel import ChannelList
from deckchat.domain.entities.message import Message, MessageBlock, NoteKind


def render_note(message: Message) -> dict[str, Any]:
    """Render one note according to its kind.

    Every NoteKind has an explicit branch; unknown kinds get a placeholder
    instead of their raw content.
    """
    kind = message.note_kind
    if kind == NoteKind.TEXT:
        body = message.content
    elif kind == NoteKind.REPOST:
        body = "Reposted a note"
    elif kind == NoteKind.REACTION:
        body = message.content or "+"
    else:
        body = f"Unsupported note (kind {message.kind})"
    return {
        "id": message.id,
        "kind": kind.value,
        "created_at": message.created_at.isoformat(),
        "body": body,
    }


def channel_list_view(user: str, channel_list: ChannelList) -> dict[str, Any]:
    return {
        "user": user,
        "selected": channel_list.selected,
        "channels": [
            {
                "id": channel.id,
                "name": channel.name,
                "hashtags": channel.hashtags,
                "subscribed": channel.subscribed,
                "unread_count": channel.unread_count,
                "badge": channel.badge,
                "last_read": (
                    channel.last_read.isoformat() if channel.last_read else None
                ),
            }
            for channel in channel_list.channels
        ],
    }


def blocks_view(
    blocks: list[MessageBlock],
    messages: list[Message],
    reacted: set[str],
    now: datetime,
) -> list[dict[str, Any]]:
    """Render message blocks with their notes.

    Args:
        blocks: Blocks of the selected channel.
        messages: Messages the blocks were built from.
        reacted: Note ids carrying a local reaction mark.
        now: Reference time for relative header timestamps.
    """
    by_id = {message.id: message for message in messages}
    rendered = []
    for block in blocks:
        notes = []
        for message_id in block.message_ids:
            note = render_note(by_id[message_id])
            note["reacted"] = message_id in reacted
            notes.append(note)
        rendered.append(
            {
                "author": block.author,
                "show_header": block.show_header,
                "first_timestamp": block.first_timestamp.isoformat(),
                "last_timestamp": block.last_timestamp.isoformat(),
                "time": format_timestamp(block.first_timestamp, now),
                "notes": notes,
            }
        )
    return rendered
