"""Chunked persistence of a channel's accumulated messages.

A channel with fewer than `chunk_size` messages is written as a single
chunk ``0``. Longer channels are written as consecutive full chunks of
exactly `chunk_size` messages; messages past the last full chunk are NOT
written. The size of that remainder is returned in
``ChunkWriteResult.dropped`` and logged as a warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from pydantic_core import PydanticSerializationError

from discord_chunk_archive.archive.logger import logger
from discord_chunk_archive.archive.records import ArchivedMessage, dump_chunk

DEFAULT_CHUNK_SIZE = 4000


@dataclass
class ChunkPlan:
    chunks: list[Sequence[ArchivedMessage]]
    dropped: int


@dataclass
class ChunkWriteResult:
    """Result of writing one channel's chunks."""

    written: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    dropped: int = 0


def plan_chunks(
    messages: Sequence[ArchivedMessage], chunk_size: int = DEFAULT_CHUNK_SIZE
) -> ChunkPlan:
    """Split messages into the chunks that will be written."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    if len(messages) < chunk_size:
        return ChunkPlan(chunks=[messages], dropped=0)

    full_chunks = len(messages) // chunk_size
    chunks = [
        messages[i * chunk_size : (i + 1) * chunk_size] for i in range(full_chunks)
    ]
    return ChunkPlan(chunks=chunks, dropped=len(messages) - full_chunks * chunk_size)


def write_chunks(
    messages: Sequence[ArchivedMessage],
    directory: str | Path,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> ChunkWriteResult:
    """Write a channel's messages as numbered chunk files.

    A chunk that fails to serialize or write is logged and skipped; its
    index is still consumed so later chunks keep their positions.

    Args:
        messages: Accumulated messages in pagination order
        directory: The channel's archive directory (must exist)
        chunk_size: Maximum messages per chunk

    Returns:
        ChunkWriteResult listing written and failed chunk indices
    """
    directory = Path(directory)
    plan = plan_chunks(messages, chunk_size)
    result = ChunkWriteResult(dropped=plan.dropped)

    for index, chunk in enumerate(plan.chunks):
        try:
            payload = dump_chunk(chunk)
        except PydanticSerializationError as e:
            logger.error(f"Invalid JSON data for chunk {index}: {e}")
            result.failed.append(index)
            continue

        try:
            (directory / str(index)).write_bytes(payload)
        except OSError as e:
            logger.error(f"Failed to save chunk {index}: {e}")
            result.failed.append(index)
            continue

        result.written.append(index)
        logger.chunk_saved(index, len(chunk))

    if plan.dropped:
        logger.warning(
            f"{plan.dropped:,} messages past the last full chunk were not written"
        )

    return result
