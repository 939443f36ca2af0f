"""Message payload to archived record mapper."""

from __future__ import annotations

from typing import Iterable

from discord_chunk_archive.archive.mappers.user import map_author
from discord_chunk_archive.archive.payloads import RawAttachment, RawMessage
from discord_chunk_archive.archive.records import (
    ArchivedAttachment,
    ArchivedMessage,
    ArchivedReferencedMessage,
)


def map_attachment(data: RawAttachment) -> ArchivedAttachment:
    """Convert a raw attachment, keeping only what the archive needs."""
    return ArchivedAttachment(
        id=data.id,
        url=data.url,
        filename=data.filename,
        size=data.size,
        ephemeral=data.ephemeral,
    )


def map_referenced_message(data: RawMessage) -> ArchivedReferencedMessage:
    """Convert the message being replied to into its reduced record.

    Only one level is kept: a reference's own reference is dropped.
    """
    return ArchivedReferencedMessage(
        id=data.id,
        author=map_author(data.author),
        attachments=tuple(map_attachment(a) for a in data.attachments),
        content=data.content,
        pinned=data.pinned,
    )


def map_message(
    data: RawMessage, referenced: RawMessage | None = None
) -> ArchivedMessage:
    """Convert a raw message into an archived record.

    Args:
        data: Parsed message from the Discord API
        referenced: Replied-to message; defaults to the one embedded in
            ``data`` when omitted

    Returns:
        ArchivedMessage with an attachment tuple and a 0-or-1 length
        referenced message tuple (both empty rather than absent)
    """
    if referenced is None:
        referenced = data.referenced_message

    references: tuple[ArchivedReferencedMessage, ...] = ()
    if referenced is not None:
        references = (map_referenced_message(referenced),)

    return ArchivedMessage(
        id=data.id,
        author=map_author(data.author),
        attachments=tuple(map_attachment(a) for a in data.attachments),
        pinned=data.pinned,
        content=data.content,
        referenced_messages=references,
    )


def map_messages(data_list: Iterable[RawMessage]) -> list[ArchivedMessage]:
    """Convert a page of raw messages, preserving order."""
    return [map_message(data) for data in data_list]
