"""Discord REST API client with rate limit handling.

This module provides an async HTTP client for Discord's REST API with:
- Automatic rate limit handling (429 responses)
- Exponential backoff for server errors (5xx) and transport failures
- Bot token authorization headers
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx

from discord_chunk_archive.archive.logger import logger


BASE_URL = "https://discord.com/api/v10"

# Retry configuration
MAX_RETRIES = 5
MAX_RATE_LIMIT_RETRIES = 30  # Cap on consecutive 429 retries
INITIAL_BACKOFF = 1.0  # seconds
MAX_BACKOFF = 64.0  # seconds

# Discord caps a single message page at 100
MAX_PAGE_SIZE = 100


class DiscordAPIError(Exception):
    """Raised when Discord API returns an error."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Discord API error {status_code}: {message}")


@dataclass
class DiscordClient:
    """Async Discord REST API client authenticated as a bot.

    Handles rate limits and retries automatically.
    """

    token: str
    user_agent: str

    def __post_init__(self) -> None:
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Build request headers."""
        return {
            "Authorization": f"Bot {self.token}",
            "User-Agent": self.user_agent,
            "Content-Type": "application/json",
        }

    async def __aenter__(self) -> "DiscordClient":
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            headers=self.headers,
            timeout=30.0,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Make a request with rate limit and retry handling."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with.")

        backoff = INITIAL_BACKOFF
        rate_limit_retries = 0
        attempt = 0

        while attempt <= MAX_RETRIES:
            try:
                response = await self._client.request(
                    method, path, params=params, json=json
                )
            except (httpx.TimeoutException, httpx.TransportError) as e:
                if attempt < MAX_RETRIES:
                    reason = "timeout" if isinstance(e, httpx.TimeoutException) else str(e)
                    logger.retry(attempt + 1, MAX_RETRIES, backoff, reason)
                    await asyncio.sleep(backoff)
                    backoff = min(backoff * 2, MAX_BACKOFF)
                    attempt += 1
                    continue
                raise

            if response.status_code in (200, 201):
                return response.json()

            if response.status_code == 204:
                return None

            # Rate limited: wait and retry without spending an attempt
            if response.status_code == 429:
                rate_limit_retries += 1
                if rate_limit_retries > MAX_RATE_LIMIT_RETRIES:
                    raise DiscordAPIError(429, "Max rate limit retries exceeded")
                retry_after = float(response.headers.get("Retry-After", 1.0))
                logger.rate_limit(retry_after)
                await asyncio.sleep(retry_after)
                continue

            if response.status_code in (401, 403, 404):
                raise DiscordAPIError(response.status_code, _error_message(response))

            if response.status_code >= 500 and attempt < MAX_RETRIES:
                logger.retry(
                    attempt + 1,
                    MAX_RETRIES,
                    backoff,
                    f"HTTP {response.status_code}",
                )
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, MAX_BACKOFF)
                attempt += 1
                continue

            raise DiscordAPIError(response.status_code, response.text)

        raise DiscordAPIError(500, "Max retries exceeded")

    # -------------------------------------------------------------------------
    # Guild endpoints
    # -------------------------------------------------------------------------

    async def get_guild(self, guild_id: int | str) -> dict[str, Any]:
        """Fetch guild information."""
        return await self._request("GET", f"/guilds/{guild_id}")

    async def get_guild_channels(self, guild_id: int | str) -> list[dict[str, Any]]:
        """Fetch all channels in a guild (excludes threads)."""
        return await self._request("GET", f"/guilds/{guild_id}/channels")

    # -------------------------------------------------------------------------
    # Message endpoints
    # -------------------------------------------------------------------------

    async def get_messages(
        self,
        channel_id: int | str,
        limit: int = MAX_PAGE_SIZE,
        before: int | str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch a page of messages from a channel.

        Args:
            channel_id: The channel to fetch from
            limit: Max messages to return (1-100)
            before: Get messages strictly older than this message ID

        Returns:
            List of message objects, ordered by ID descending (newest first)
        """
        params: dict[str, Any] = {"limit": min(limit, MAX_PAGE_SIZE)}
        if before:
            params["before"] = before
        return await self._request(
            "GET", f"/channels/{channel_id}/messages", params=params
        )

    async def create_message(self, channel_id: int | str, content: str) -> dict[str, Any]:
        """Post a plain text message to a channel."""
        return await self._request(
            "POST", f"/channels/{channel_id}/messages", json={"content": content}
        )

    # -------------------------------------------------------------------------
    # User endpoints
    # -------------------------------------------------------------------------

    async def get_current_user(self) -> dict[str, Any]:
        """Fetch current user (the bot account)."""
        return await self._request("GET", "/users/@me")


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message", response.text)
    except ValueError:
        return response.text
