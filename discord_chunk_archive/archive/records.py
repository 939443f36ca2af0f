"""Storage-ready archival records and the chunk file codec.

Records serialize with capitalized keys (``Id``, ``Author``, ...) in the
archive's on-disk format. ``Ephermeral`` is the format's spelling of the
attachment flag.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from discord_chunk_archive.archive.logger import logger


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ArchivedAuthor(_Record):
    username: str = Field(alias="Username")
    discriminator: str = Field(default="", alias="Discriminator")
    id: str = Field(alias="Id")
    mfa: bool = Field(default=False, alias="Mfa")
    bot: bool = Field(default=False, alias="Bot")
    avatar: str = Field(default="", alias="Avatar")


class ArchivedAttachment(_Record):
    id: str = Field(alias="Id")
    url: str = Field(alias="Url")
    filename: str = Field(alias="Filename")
    size: int = Field(alias="Size")
    ephemeral: bool = Field(default=False, alias="Ephermeral")


class ArchivedReferencedMessage(_Record):
    id: str = Field(alias="Id")
    author: ArchivedAuthor = Field(alias="Author")
    attachments: tuple[ArchivedAttachment, ...] = Field(default=(), alias="Attachments")
    content: str = Field(default="", alias="Content")
    pinned: bool = Field(default=False, alias="Pinned")


class ArchivedMessage(_Record):
    """One archived message.

    ``referenced_messages`` holds the replied-to message, if any; Discord
    allows at most one.
    """

    id: str = Field(alias="Id")
    author: ArchivedAuthor = Field(alias="Author")
    attachments: tuple[ArchivedAttachment, ...] = Field(default=(), alias="Attachments")
    pinned: bool = Field(default=False, alias="Pinned")
    content: str = Field(default="", alias="Content")
    referenced_messages: tuple[ArchivedReferencedMessage, ...] = Field(
        default=(), alias="ReferencedMessage"
    )


class GuildMetadata(_Record):
    """Contents of a guild directory's ``server.json``."""

    id: str = Field(alias="Id")
    name: str = Field(default="", alias="Name")
    icon: str = Field(default="", alias="Icon")
    owner_id: str = Field(default="", alias="OwnerId")
    description: str = Field(default="", alias="Description")


class ChannelMetadata(_Record):
    """Contents of a channel directory's ``channel.json``."""

    id: str = Field(alias="Id")
    name: str = Field(default="", alias="Name")
    topic: str = Field(default="", alias="Topic")


_CHUNK_ADAPTER = TypeAdapter(list[ArchivedMessage])


def dump_chunk(messages: Iterable[ArchivedMessage]) -> bytes:
    """Serialize messages as a compact JSON array in archive format."""
    return _CHUNK_ADAPTER.dump_json(list(messages), by_alias=True)


def load_chunk(data: str | bytes) -> list[ArchivedMessage]:
    """Parse one chunk file's contents."""
    return _CHUNK_ADAPTER.validate_json(data)


def read_channel_archive(directory: str | Path) -> list[ArchivedMessage]:
    """Read the chunk files of a channel directory in index order.

    Chunks are numbered contiguously from ``0``; reading stops at the first
    missing index. Downloaded attachments share the directory, so a numeric
    file that does not parse as a chunk also ends the read.
    """
    path = Path(directory)
    messages: list[ArchivedMessage] = []
    index = 0
    while (path / str(index)).is_file():
        try:
            messages.extend(load_chunk((path / str(index)).read_bytes()))
        except ValidationError as e:
            logger.warning(f"{path / str(index)} is not a chunk file: {e}")
            break
        index += 1
    return messages
