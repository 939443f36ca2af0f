# discord_chunk_archive/utils/snowflake.py
from __future__ import annotations

from datetime import datetime, timezone

DISCORD_EPOCH = 1420070400000  # 2015-01-01 UTC (ms)


def snowflake_to_datetime(snowflake: int | str) -> datetime:
    ms = (int(snowflake) >> 22) + DISCORD_EPOCH
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def snowflake_date(snowflake: int | str) -> str:
    """Calendar date (UTC) a snowflake was minted on, as YYYY-MM-DD."""
    return snowflake_to_datetime(snowflake).strftime("%Y-%m-%d")
