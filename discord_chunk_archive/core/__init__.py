"""Base orchestrator for pipeline execution.

Provides common infrastructure for pipeline orchestrators:
- Output root handling
- Timing and statistics tracking
- Common run() interface with guild filtering

Usage:
    class MyOrchestrator(BaseOrchestrator):
        async def _run_pipeline(self, guild_id):
            # Implementation
            pass

        def _log_summary(self, elapsed):
            # Log final statistics
            pass
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from pathlib import Path


class BaseOrchestrator(ABC):
    """Abstract base class for pipeline orchestrators.

    Subclasses must implement:
    - _run_pipeline(): The actual pipeline logic
    - _log_summary(): Log final statistics
    """

    def __init__(self, output_dir: str | Path) -> None:
        """Initialize the orchestrator.

        Args:
            output_dir: Root directory the archive tree is written under.
        """
        self.output_dir = Path(output_dir)
        self.start_time: float = 0.0

    def init_output(self) -> None:
        """Create the archive root if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

    async def run(self, guild_id: int | None = None) -> None:
        """Run the pipeline.

        Args:
            guild_id: If provided, only process this guild.
        """
        self.start_time = time.time()

        self.init_output()
        await self._run_pipeline(guild_id=guild_id)

        elapsed = time.time() - self.start_time
        self._log_summary(elapsed)

    @abstractmethod
    async def _run_pipeline(self, guild_id: int | None = None) -> None:
        """Execute the pipeline logic."""
        ...

    @abstractmethod
    def _log_summary(self, elapsed: float) -> None:
        """Log the final summary statistics.

        Args:
            elapsed: Total time elapsed in seconds.
        """
        ...
