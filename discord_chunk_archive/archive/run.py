"""Main orchestration for the archive pipeline.

Archives guilds one at a time under a single process-wide RunGuard: while a
guild is being archived, any further archive request is rejected.
"""

from __future__ import annotations

from discord_chunk_archive.archive.client import DiscordClient
from discord_chunk_archive.archive.guild_processor import (
    ArchiveOptions,
    GuildProcessResult,
    process_guild,
)
from discord_chunk_archive.archive.logger import logger
from discord_chunk_archive.archive.state import RunGuard
from discord_chunk_archive.config.settings import AppSettings, load_config
from discord_chunk_archive.core import BaseOrchestrator


class ArchiveOrchestrator(BaseOrchestrator):
    """Orchestrates archive runs and owns the run guard."""

    def __init__(self, settings: AppSettings, guard: RunGuard | None = None) -> None:
        super().__init__(settings.output_dir)
        self.settings = settings
        self.options = ArchiveOptions.from_settings(settings)
        self.guard = guard or RunGuard()
        # Stats
        self.guilds_processed = 0
        self.channels_processed = 0
        self.messages_archived = 0
        self.chunks_written = 0
        self.downloads_attempted = 0

    async def archive_guild(
        self, client: DiscordClient, guild_id: int | str
    ) -> GuildProcessResult | None:
        """Archive one guild if no other run is active.

        Returns:
            The guild result, or None if the run guard was already held
        """
        if not self.guard.try_acquire(guild_id):
            logger.warning(
                f"Archive of guild {self.guard.guild_id} still running, "
                f"rejected request for guild {guild_id}"
            )
            return None

        try:
            result = await process_guild(client, guild_id, self.options)
        finally:
            self.guard.release()

        self.guilds_processed += 1
        self.channels_processed += result.channels_processed
        self.messages_archived += result.messages_archived
        self.chunks_written += result.chunks_written
        self.downloads_attempted += result.downloads_attempted
        logger.success(f"Completed guild {guild_id}")
        return result

    async def _run_pipeline(self, guild_id: int | None = None) -> None:
        """Archive the requested guild, or every guild in the config."""
        guild_ids = [str(guild_id)] if guild_id else list(self.settings.guilds)
        if not guild_ids:
            logger.warning("No guilds to archive (pass --guild-id or set guilds)")
            return

        async with DiscordClient(
            token=self.settings.token,
            user_agent=self.settings.user_agent,
        ) as client:
            for gid in guild_ids:
                await self.archive_guild(client, gid)

    def _log_summary(self, elapsed: float) -> None:
        """Log the final archive summary."""
        logger.summary(
            guilds=self.guilds_processed,
            channels=self.channels_processed,
            messages=self.messages_archived,
            chunks=self.chunks_written,
            downloads=self.downloads_attempted,
            elapsed=elapsed,
        )


async def run_archive(
    config_path: str = "config.json",
    guild_id: int | None = None,
) -> None:
    """Entry point for running the archive pipeline."""
    settings = load_config(config_path)
    if not settings.token:
        raise ValueError(f"No bot token configured in {config_path}")
    orchestrator = ArchiveOrchestrator(settings)
    await orchestrator.run(guild_id=guild_id)
