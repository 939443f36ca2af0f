"""Rich-based logging utilities for the archive pipeline.

Provides console output for guild and channel progress, retry warnings
and the end-of-run summary panel.
"""

from __future__ import annotations

from typing import Any

from discord_chunk_archive.utils.pipeline_logger import BasePipelineLogger


class ArchiveLogger(BasePipelineLogger):
    """Logger for archive runs with rich output."""

    def __init__(self) -> None:
        super().__init__(__name__)

    # -------------------------------------------------------------------------
    # Rate Limiting & Retries
    # -------------------------------------------------------------------------

    def rate_limit(self, retry_after: float) -> None:
        """Log a rate limit warning with retry time."""
        self._logger.warning(f"Rate limited. Waiting {retry_after:.1f}s...")

    def retry(
        self, attempt: int, max_attempts: int, wait_time: float, reason: str = ""
    ) -> None:
        """Log a retry attempt with optional reason."""
        msg = f"Retry {attempt}/{max_attempts} in {wait_time:.1f}s"
        if reason:
            msg += f" ({reason})"
        self._logger.warning(msg)

    # -------------------------------------------------------------------------
    # Guild & Channel Processing
    # -------------------------------------------------------------------------

    def guild_start(self, guild_id: int | str, guild_name: str) -> None:
        """Log the start of guild processing."""
        self.console.print()
        self.console.rule(f"[bold cyan]{guild_name}[/bold cyan]", style="cyan")
        self.console.print(f"[dim]Guild ID: {guild_id}[/dim]")

    def channel_complete(self, channel_name: str, index: int, total: int) -> None:
        """Log that a channel's history has been fully walked."""
        self._clear_progress_line()
        self.console.print(f"    [dim]completed: {channel_name} [{index}/{total}][/dim]")

    def chunk_saved(self, index: int, count: int) -> None:
        self._clear_progress_line()
        self.console.print(f"    [dim]saved chunk {index} ({count:,} messages)[/dim]")

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def summary(
        self,
        guilds: int = 0,
        channels: int = 0,
        messages: int = 0,
        chunks: int = 0,
        downloads: int = 0,
        elapsed: float = 0.0,
        **kwargs: Any,
    ) -> None:
        """Print final archive summary."""
        self.print_summary(
            "Archive",
            elapsed=elapsed,
            stats={
                "Guilds": guilds,
                "Channels": channels,
                "Messages archived": messages,
                "Chunks written": chunks,
                "Downloads attempted": downloads,
            },
            style="cyan",
        )


# Global logger instance
logger = ArchiveLogger()
