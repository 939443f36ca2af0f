"""Backfill logic for walking a channel's message history.

Backfill fetches messages from newest to oldest using the `before` parameter,
starting from the channel's last message id. Pages are appended in the order
Discord returns them (newest first), so the accumulated sequence runs from
newest to oldest.

A page holding one message or none ends the walk. A page that cannot be
fetched also ends it, but the result is flagged incomplete.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from discord_chunk_archive.archive.client import MAX_PAGE_SIZE, DiscordAPIError
from discord_chunk_archive.archive.logger import logger
from discord_chunk_archive.archive.mappers import map_messages
from discord_chunk_archive.archive.payloads import RawMessage, parse_messages
from discord_chunk_archive.archive.records import ArchivedMessage
from discord_chunk_archive.utils.snowflake import snowflake_date

if TYPE_CHECKING:
    from discord_chunk_archive.archive.client import DiscordClient


class PageStatus(enum.Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class PageResult:
    """Outcome of one page request."""

    status: PageStatus
    messages: list[RawMessage] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status is PageStatus.FAILED


@dataclass
class BackfillResult:
    """Result of a backfill operation."""

    messages: list[ArchivedMessage]
    pages: int
    is_complete: bool

    @property
    def messages_count(self) -> int:
        return len(self.messages)


async def fetch_page(
    client: "DiscordClient",
    channel_id: int | str,
    before: int | str | None,
    limit: int = MAX_PAGE_SIZE,
) -> PageResult:
    """Fetch and parse one page of messages older than `before`.

    API failures that survive the client's retries, and pages that do not
    parse, come back as a FAILED result instead of raising.
    """
    try:
        data = await client.get_messages(channel_id=channel_id, limit=limit, before=before)
        messages = parse_messages(data or [])
    except (DiscordAPIError, httpx.HTTPError, ValidationError) as e:
        logger.warning(f"Failed to fetch messages for channel {channel_id}: {e}")
        return PageResult(status=PageStatus.FAILED, error=str(e))

    if not messages:
        return PageResult(status=PageStatus.EMPTY)
    return PageResult(status=PageStatus.OK, messages=messages)


async def backfill_channel(
    client: "DiscordClient",
    channel_id: int | str,
    before_id: int | str | None,
    batch_size: int = MAX_PAGE_SIZE,
) -> BackfillResult:
    """Walk a channel's history and accumulate archived records.

    Args:
        client: Discord API client
        channel_id: Channel to walk
        before_id: Starting cursor, normally the channel's last message id.
            Only messages strictly older than it are fetched.
        batch_size: Messages per API call (max 100)

    Returns:
        BackfillResult with the accumulated records, newest first
    """
    messages: list[ArchivedMessage] = []
    cursor = before_id
    pages = 0

    while True:
        page = await fetch_page(client, channel_id, cursor, limit=batch_size)

        if page.failed:
            return BackfillResult(messages=messages, pages=pages, is_complete=False)

        pages += 1
        messages.extend(map_messages(page.messages))

        if len(page.messages) <= 1:
            return BackfillResult(messages=messages, pages=pages, is_complete=True)

        # Discord returns messages newest-first, so the last item is the oldest
        cursor = page.messages[-1].id
        logger.batch_progress(len(messages), oldest_date=snowflake_date(cursor))
