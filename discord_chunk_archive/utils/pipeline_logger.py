"""Base pipeline logger with shared components.

Provides reusable building blocks for pipeline-specific loggers:
- StructuredBlock: Context manager for key-value style output
- BasePipelineLogger: Abstract base with common logging methods
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Generator

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from discord_chunk_archive.utils.logging import console

if TYPE_CHECKING:
    from typing import Self


class StructuredBlock:
    """A context manager for displaying structured key-value info blocks.

    Usage:
        with logger.block("general") as block:
            block.field("channel ID", 123456789)
            block.field("chunks", 2, color="magenta")
            block.result("archived 8,000 messages")

    Output:
        general
            channel ID: 123456789
            chunks: 2
            ✓ archived 8,000 messages
    """

    def __init__(self, title: str, parent: "BasePipelineLogger") -> None:
        self.title = title
        self.console = parent.console
        self._parent = parent

    def __enter__(self) -> "Self":
        self._parent._clear_progress_line()
        self.console.print(f"\n[bold]{self.title}[/bold]")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self._parent._clear_progress_line()

    def field(self, key: str, value: Any, color: str | None = None) -> None:
        """Add a key-value field to the block."""
        if color:
            self.console.print(f"    [dim]{key}:[/dim] [{color}]{value}[/{color}]")
        else:
            self.console.print(f"    [dim]{key}:[/dim] {value}")

    def result(self, message: str, success: bool = True) -> None:
        """Show the final result of the block."""
        self._parent._clear_progress_line()
        icon = "[green]✓[/green]" if success else "[red]✗[/red]"
        self.console.print(f"    {icon} {message}")

    def skip(self, reason: str) -> None:
        """Show that this block was skipped."""
        self._parent._clear_progress_line()
        self.console.print(f"    [dim]Skipped: {reason}[/dim]")


class BasePipelineLogger(ABC):
    """Abstract base class for pipeline loggers.

    Provides the shared console, in-place progress line handling,
    standard logging methods, structured blocks and a summary panel.
    Subclasses implement summary() and their own pipeline events.
    """

    def __init__(self, logger_name: str | None = None) -> None:
        self.console: Console = console
        self._has_progress_line = False
        self._logger = logging.getLogger(logger_name or self.__class__.__module__)

    def _clear_progress_line(self) -> None:
        """Clear the in-place progress line if present."""
        if self._has_progress_line:
            print("\033[2K", end="\r")
            self._has_progress_line = False

    @contextmanager
    def block(self, title: str) -> Generator[StructuredBlock, None, None]:
        """Create a structured block for key-value style output."""
        block = StructuredBlock(title, self)
        with block:
            yield block

    # -------------------------------------------------------------------------
    # Standard Logging (goes through Python logging)
    # -------------------------------------------------------------------------

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def debug(self, message: str) -> None:
        self._logger.debug(message)

    def success(self, message: str) -> None:
        """Log a success message with green checkmark."""
        self.console.print(f"[green]✓[/green] {message}")

    # -------------------------------------------------------------------------
    # Common Rich Output Methods
    # -------------------------------------------------------------------------

    def batch_progress(
        self,
        count: int,
        *,
        oldest_date: str | None = None,
        prefix: str = "Fetched",
        unit: str = "messages",
    ) -> None:
        """Log batch processing progress (inline update).

        Args:
            count: Number of items processed so far
            oldest_date: Oldest date reached so far (optional)
            prefix: Action prefix (e.g., "Fetched", "Downloaded")
            unit: Unit name
        """
        date_info = f" [→ {oldest_date}]" if oldest_date else ""
        print("\033[2K", end="")
        self.console.print(
            f"    [dim]{prefix} {count:,} {unit}{date_info}[/dim]",
            end="\r",
        )
        self._has_progress_line = True

    def print_summary(
        self,
        pipeline_name: str,
        *,
        elapsed: float,
        stats: dict[str, int | str],
        style: str = "cyan",
    ) -> None:
        """Print a pipeline summary panel.

        Args:
            pipeline_name: Name of the pipeline
            elapsed: Time elapsed in seconds
            stats: Main statistics as {label: value}
            style: Border color style
        """
        self._clear_progress_line()
        self.console.print()

        table = Table.grid(padding=(0, 2))
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right", style="green")

        for label, value in stats.items():
            if isinstance(value, int):
                table.add_row(label, f"{value:,}")
            else:
                table.add_row(label, str(value))
        table.add_row("Time elapsed", f"{elapsed:.1f}s")

        panel = Panel(
            table,
            title=f"[bold]{pipeline_name} Complete[/bold]",
            border_style=style,
            padding=(1, 2),
        )
        self.console.print(panel)

    @abstractmethod
    def summary(self, **kwargs: Any) -> None:
        """Print final summary. Implementation varies by pipeline."""
        ...
