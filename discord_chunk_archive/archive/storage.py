"""Archive directory layout.

    <output_dir>/<guildId>/server.json
    <output_dir>/<guildId>/<channelId>/channel.json
    <output_dir>/<guildId>/<channelId>/<chunkIndex>

Downloaded attachments land in the channel directory next to the chunks.
"""

from __future__ import annotations

from pathlib import Path

from discord_chunk_archive.archive.logger import logger
from discord_chunk_archive.archive.records import ChannelMetadata, GuildMetadata

GUILD_METADATA_FILE = "server.json"
CHANNEL_METADATA_FILE = "channel.json"


def guild_dir(output_dir: str | Path, guild_id: int | str) -> Path:
    return Path(output_dir) / str(guild_id)


def channel_dir(output_dir: str | Path, guild_id: int | str, channel_id: int | str) -> Path:
    return guild_dir(output_dir, guild_id) / str(channel_id)


def ensure_dir(path: Path) -> bool:
    """Create a directory (and parents) if missing; False if that failed."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create directory {path}: {e}")
        return False
    return True


def _write_record(path: Path, record: GuildMetadata | ChannelMetadata) -> bool:
    try:
        path.write_text(record.model_dump_json(by_alias=True), encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write {path}: {e}")
        return False
    return True


def write_guild_metadata(directory: Path, metadata: GuildMetadata) -> bool:
    return _write_record(directory / GUILD_METADATA_FILE, metadata)


def write_channel_metadata(directory: Path, metadata: ChannelMetadata) -> bool:
    return _write_record(directory / CHANNEL_METADATA_FILE, metadata)
