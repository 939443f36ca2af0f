"""In-chat command handling.

Feed MESSAGE_CREATE payloads from whatever gateway connection the bot runs
to CommandHandler.handle_message. A message whose whole content equals the
trigger keyword archives the guild it was sent in.

Usage:
    settings = load_config("config.json")
    orchestrator = ArchiveOrchestrator(settings)

    async with DiscordClient(settings.token, settings.user_agent) as client:
        handler = CommandHandler(client, orchestrator)
        async for event in gateway_events():  # host-provided MESSAGE_CREATE dicts
            await handler.handle_message(event)
"""

from __future__ import annotations

import enum
from typing import Any

import httpx
from pydantic import ValidationError

from discord_chunk_archive.archive.client import DiscordAPIError, DiscordClient
from discord_chunk_archive.archive.logger import logger
from discord_chunk_archive.archive.payloads import RawMessageCreate
from discord_chunk_archive.archive.run import ArchiveOrchestrator

PING_KEYWORD = "ping"
LOCKED_REPLY = "locked, please wait for this to unlock"


class CommandOutcome(enum.Enum):
    IGNORED = "ignored"
    PONG = "pong"
    REJECTED = "rejected"
    COMPLETED = "completed"


class CommandHandler:
    """Dispatches trigger messages to the archive orchestrator."""

    def __init__(
        self,
        client: DiscordClient,
        orchestrator: ArchiveOrchestrator,
        trigger: str | None = None,
    ) -> None:
        self.client = client
        self.orchestrator = orchestrator
        self.trigger = trigger or orchestrator.settings.trigger
        self._bot_user_id: str | None = None

    async def bot_user_id(self) -> str | None:
        """Id of the bot account, fetched once."""
        if self._bot_user_id is None:
            try:
                user = await self.client.get_current_user()
                self._bot_user_id = str(user["id"])
            except (DiscordAPIError, httpx.HTTPError, KeyError) as e:
                logger.warning(f"Could not resolve bot user: {e}")
        return self._bot_user_id

    async def handle_message(self, data: dict[str, Any]) -> CommandOutcome:
        """Handle one MESSAGE_CREATE payload.

        Returns:
            What the handler did with the message
        """
        try:
            message = RawMessageCreate.model_validate(data)
        except ValidationError as e:
            logger.debug(f"Ignoring malformed message event: {e}")
            return CommandOutcome.IGNORED

        if message.author.id == await self.bot_user_id():
            return CommandOutcome.IGNORED

        if message.content == PING_KEYWORD:
            logger.info("pong")
            return CommandOutcome.PONG

        if message.content != self.trigger or not message.guild_id:
            return CommandOutcome.IGNORED

        if self.orchestrator.guard.is_running:
            await self._reply(message, LOCKED_REPLY)
            return CommandOutcome.REJECTED

        result = await self.orchestrator.archive_guild(self.client, message.guild_id)
        if result is None:
            await self._reply(message, LOCKED_REPLY)
            return CommandOutcome.REJECTED

        await self._reply(
            message,
            f"completed: {result.messages_archived:,} messages "
            f"from {result.channels_processed} channels",
        )
        return CommandOutcome.COMPLETED

    async def _reply(self, message: RawMessageCreate, content: str) -> None:
        if not message.channel_id:
            return
        try:
            await self.client.create_message(message.channel_id, content)
        except (DiscordAPIError, httpx.HTTPError) as e:
            logger.warning(f"Failed to reply in channel {message.channel_id}: {e}")
