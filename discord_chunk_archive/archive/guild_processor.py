"""Guild processing logic.

Handles per-guild processing: guild metadata, channel enumeration, and the
per-channel pipeline (backfill, classify, chunk, download).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import httpx
from pydantic import ValidationError

from discord_chunk_archive.archive.backfill import backfill_channel
from discord_chunk_archive.archive.chunk_writer import (
    DEFAULT_CHUNK_SIZE,
    ChunkWriteResult,
    write_chunks,
)
from discord_chunk_archive.archive.classifier import classify_attachments
from discord_chunk_archive.archive.client import MAX_PAGE_SIZE, DiscordAPIError, DiscordClient
from discord_chunk_archive.archive.downloader import (
    DEFAULT_DOWNLOADER,
    DownloadResult,
    dispatch_downloads,
)
from discord_chunk_archive.archive.logger import logger
from discord_chunk_archive.archive.mappers import map_channel_metadata, map_guild_metadata
from discord_chunk_archive.archive.mappers.channel import channel_type_name, is_archivable
from discord_chunk_archive.archive.payloads import RawChannel, RawGuild
from discord_chunk_archive.archive.storage import (
    channel_dir,
    ensure_dir,
    guild_dir,
    write_channel_metadata,
    write_guild_metadata,
)
from discord_chunk_archive.config.settings import AppSettings


@dataclass
class ArchiveOptions:
    """Per-run knobs for the archive pipeline."""

    output_dir: Path = Path(".")
    chunk_size: int = DEFAULT_CHUNK_SIZE
    page_size: int = MAX_PAGE_SIZE
    downloader: str = DEFAULT_DOWNLOADER

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "ArchiveOptions":
        return cls(
            output_dir=Path(settings.output_dir),
            chunk_size=settings.chunk_size,
            page_size=settings.page_size,
            downloader=settings.downloader,
        )


@dataclass
class ChannelProcessResult:
    """Result of processing a channel."""

    messages_archived: int = 0
    is_complete: bool = True
    chunks: ChunkWriteResult = field(default_factory=ChunkWriteResult)
    downloads: list[DownloadResult] = field(default_factory=list)


@dataclass
class GuildProcessResult:
    """Result of processing a guild."""

    channels_processed: int = 0
    channels_failed: int = 0
    messages_archived: int = 0
    chunks_written: int = 0
    downloads_attempted: int = 0


async def fetch_guild(client: DiscordClient, guild_id: int | str) -> RawGuild | None:
    """Look up a guild; None (logged) if the lookup fails."""
    try:
        return RawGuild.model_validate(await client.get_guild(guild_id))
    except (DiscordAPIError, httpx.HTTPError, ValidationError) as e:
        logger.warning(f"Failed to fetch guild {guild_id}: {e}")
        return None


async def fetch_channels(client: DiscordClient, guild_id: int | str) -> list[RawChannel]:
    """List a guild's channels; empty (logged) if the listing fails."""
    try:
        data = await client.get_guild_channels(guild_id)
        return [RawChannel.model_validate(c) for c in data or []]
    except (DiscordAPIError, httpx.HTTPError, ValidationError) as e:
        logger.error(f"Failed to list channels for guild {guild_id}: {e}")
        return []


def filter_archivable_channels(channels: list[RawChannel]) -> list[RawChannel]:
    """Keep guild text channels, in listing order."""
    archivable = []
    for channel in channels:
        if is_archivable(channel.type):
            archivable.append(channel)
        else:
            logger.debug(
                f"Skipping {channel_type_name(channel.type)} channel {channel.name or channel.id}"
            )
    return archivable


async def process_guild(
    client: DiscordClient,
    guild_id: int | str,
    options: ArchiveOptions,
) -> GuildProcessResult:
    """Archive every text channel of a guild.

    A failing channel is logged and counted; the remaining channels are
    still processed.

    Args:
        client: Discord client
        guild_id: Guild ID to process
        options: Output location and pipeline sizes

    Returns:
        Processing result with stats
    """
    result = GuildProcessResult()

    guild = await fetch_guild(client, guild_id)
    logger.guild_start(guild_id, guild.name if guild else f"Guild {guild_id}")

    root = guild_dir(options.output_dir, guild_id)
    ensure_dir(root)
    if guild is not None:
        write_guild_metadata(root, map_guild_metadata(guild))

    channels = filter_archivable_channels(await fetch_channels(client, guild_id))
    total = len(channels)

    for index, channel in enumerate(channels, start=1):
        try:
            channel_result = await process_channel(
                client=client,
                channel=channel,
                guild_id=guild_id,
                options=options,
                position=(index, total),
            )
        except Exception as e:
            logger.error(f"Error archiving channel {channel.name or channel.id}: {e}")
            result.channels_failed += 1
            continue

        result.channels_processed += 1
        result.messages_archived += channel_result.messages_archived
        result.chunks_written += len(channel_result.chunks.written)
        result.downloads_attempted += len(channel_result.downloads)

    return result


async def process_channel(
    client: DiscordClient,
    channel: RawChannel,
    guild_id: int | str,
    options: ArchiveOptions,
    position: tuple[int, int] = (1, 1),
) -> ChannelProcessResult:
    """Archive one channel: backfill, classify, write chunks, download.

    Args:
        client: Discord client
        channel: Parsed channel payload
        guild_id: Guild ID
        options: Output location and pipeline sizes
        position: (index, total) of this channel within the guild, for output

    Returns:
        Processing result with message, chunk and download details
    """
    result = ChannelProcessResult()
    channel_name = channel.name or f"Channel {channel.id}"
    directory = channel_dir(options.output_dir, guild_id, channel.id)

    with logger.block(channel_name) as block:
        block.field("channel ID", channel.id)

        if not ensure_dir(directory):
            block.skip("could not create channel directory")
            return result
        write_channel_metadata(directory, map_channel_metadata(channel))

        backfill = await backfill_channel(
            client=client,
            channel_id=channel.id,
            before_id=channel.last_message_id,
            batch_size=options.page_size,
        )
        logger.channel_complete(channel_name, *position)
        result.messages_archived = backfill.messages_count
        result.is_complete = backfill.is_complete
        if not backfill.is_complete:
            block.field("history", "incomplete (page fetch failed)", color="yellow")

        queues = classify_attachments(backfill.messages)
        result.chunks = write_chunks(backfill.messages, directory, options.chunk_size)
        result.downloads = await dispatch_downloads(queues, directory, options.downloader)

        if result.chunks.dropped:
            block.field("not written", f"{result.chunks.dropped:,} messages", color="yellow")
        block.result(
            f"archived {backfill.messages_count:,} messages "
            f"({len(result.chunks.written)} chunks, {len(result.downloads)} downloads)",
            success=not result.chunks.failed,
        )

    return result
