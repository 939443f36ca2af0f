"""Run state for the archive pipeline.

Only one archive run may be active per process. The guard is checked and
set without awaiting in between, so on a single event loop no second
trigger can slip past it.
"""

from __future__ import annotations


class RunGuard:
    """Single-run-at-a-time guard (Idle -> Running -> Idle)."""

    def __init__(self) -> None:
        self._running = False
        self._guild_id: str | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def guild_id(self) -> str | None:
        """Guild currently being archived, if any."""
        return self._guild_id

    def try_acquire(self, guild_id: int | str | None = None) -> bool:
        """Take the guard; False if a run is already in progress."""
        if self._running:
            return False
        self._running = True
        self._guild_id = str(guild_id) if guild_id is not None else None
        return True

    def release(self) -> None:
        """Return to idle. Safe to call when already idle."""
        self._running = False
        self._guild_id = None
