"""Mappers for converting parsed Discord payloads to archive records."""

from discord_chunk_archive.archive.mappers.channel import map_channel_metadata
from discord_chunk_archive.archive.mappers.guild import map_guild_metadata
from discord_chunk_archive.archive.mappers.message import (
    map_attachment,
    map_message,
    map_messages,
    map_referenced_message,
)
from discord_chunk_archive.archive.mappers.user import map_author

__all__ = [
    "map_attachment",
    "map_author",
    "map_channel_metadata",
    "map_guild_metadata",
    "map_message",
    "map_messages",
    "map_referenced_message",
]
