"""Attachment download dispatch through an external downloader.

Each attachment is fetched by running ``<downloader> <url> -d <dir>``
(aria2c by default), one process at a time: the ephemeral queue first,
then the durable queue. Exit status is recorded in a DownloadResult but
never acted on; a failed download does not stop the ones after it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from discord_chunk_archive.archive.classifier import DownloadQueues
from discord_chunk_archive.archive.logger import logger

DEFAULT_DOWNLOADER = "aria2c"


@dataclass(frozen=True)
class DownloadTask:
    url: str
    destination: Path


@dataclass(frozen=True)
class DownloadResult:
    """Outcome of one downloader invocation.

    ``returncode`` is None when the process could not be started at all.
    """

    task: DownloadTask
    returncode: int | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def build_download_tasks(queues: DownloadQueues, destination: Path) -> list[DownloadTask]:
    """Turn classified attachments into tasks, in download order."""
    return [
        DownloadTask(url=attachment.url, destination=destination)
        for attachment in queues.in_priority_order()
    ]


async def run_downloader(
    task: DownloadTask, downloader: str = DEFAULT_DOWNLOADER
) -> DownloadResult:
    """Run the downloader for one task and wait for it to exit."""
    try:
        process = await asyncio.create_subprocess_exec(
            downloader,
            task.url,
            "-d",
            str(task.destination),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        return DownloadResult(task=task, returncode=None, error=str(e))

    await process.communicate()
    return DownloadResult(task=task, returncode=process.returncode)


async def dispatch_downloads(
    queues: DownloadQueues,
    destination: Path,
    downloader: str = DEFAULT_DOWNLOADER,
) -> list[DownloadResult]:
    """Download every queued attachment into `destination`, one at a time.

    Returns:
        One DownloadResult per task, in the order they ran
    """
    results: list[DownloadResult] = []
    for task in build_download_tasks(queues, destination):
        result = await run_downloader(task, downloader)
        if not result.ok:
            logger.debug(
                f"Download of {task.url} failed "
                f"(exit {result.returncode}{', ' + result.error if result.error else ''})"
            )
        results.append(result)
    return results
