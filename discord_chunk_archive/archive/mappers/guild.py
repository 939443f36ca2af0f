"""Guild payload mapper."""

from __future__ import annotations

from discord_chunk_archive.archive.payloads import RawGuild
from discord_chunk_archive.archive.records import GuildMetadata
from discord_chunk_archive.utils.cdn import guild_icon_url


def map_guild_metadata(guild: RawGuild) -> GuildMetadata:
    """Build the ``server.json`` record for a guild directory."""
    return GuildMetadata(
        id=guild.id,
        name=guild.name,
        icon=guild_icon_url(guild.id, guild.icon),
        owner_id=guild.owner_id or "",
        description=guild.description or "",
    )
