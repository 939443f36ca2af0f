"""Tests for discord_chunk_archive.archive.guild_processor module."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from discord_chunk_archive.archive.client import DiscordAPIError
from discord_chunk_archive.archive.guild_processor import (
    ArchiveOptions,
    ChannelProcessResult,
    fetch_channels,
    fetch_guild,
    filter_archivable_channels,
    process_channel,
    process_guild,
)
from discord_chunk_archive.archive.mappers.channel import (
    CHANNEL_TYPE_CATEGORY,
    CHANNEL_TYPE_TEXT,
    CHANNEL_TYPE_VOICE,
)
from discord_chunk_archive.archive.payloads import RawChannel
from discord_chunk_archive.config.settings import AppSettings

GUILD_ID = "100"


def _channel(channel_id: str, channel_type: int = CHANNEL_TYPE_TEXT, **kwargs) -> dict:
    return {
        "id": channel_id,
        "type": channel_type,
        "guild_id": GUILD_ID,
        "name": f"chan-{channel_id}",
        "last_message_id": "1000",
        **kwargs,
    }


def _attachment(att_id: str, ephemeral: bool = False) -> dict:
    return {
        "id": att_id,
        "url": f"https://cdn.discordapp.com/attachments/{att_id}/f.png",
        "filename": "f.png",
        "size": 10,
        "ephemeral": ephemeral,
    }


def _message(msg_id: int, attachments: list[dict] | None = None) -> dict:
    return {
        "id": str(msg_id),
        "author": {"id": "7", "username": "user", "discriminator": "0001", "avatar": None},
        "content": f"message {msg_id}",
        "pinned": False,
        "attachments": attachments or [],
    }


def _process(returncode: int = 0) -> MagicMock:
    process = MagicMock()
    process.communicate = AsyncMock(return_value=(b"", b""))
    process.returncode = returncode
    return process


@pytest.fixture
def mock_client() -> AsyncMock:
    client = AsyncMock()
    client.get_guild.return_value = {
        "id": GUILD_ID,
        "name": "Test Guild",
        "icon": None,
        "owner_id": "7",
        "description": None,
    }
    client.get_guild_channels.return_value = [_channel("200")]
    client.get_messages.return_value = []
    return client


@pytest.fixture
def options(tmp_path: Path) -> ArchiveOptions:
    return ArchiveOptions(output_dir=tmp_path)


@pytest.fixture(autouse=True)
def mock_loggers():
    with patch("discord_chunk_archive.archive.guild_processor.logger") as m, patch(
        "discord_chunk_archive.archive.backfill.logger"
    ), patch("discord_chunk_archive.archive.chunk_writer.logger"), patch(
        "discord_chunk_archive.archive.downloader.logger"
    ), patch("discord_chunk_archive.archive.storage.logger"):
        yield m


@pytest.fixture
def mock_exec():
    with patch(
        "discord_chunk_archive.archive.downloader.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
    ) as m:
        m.return_value = _process()
        yield m


class TestArchiveOptions:
    """Tests for ArchiveOptions.from_settings."""

    def test_copies_pipeline_settings(self, tmp_path: Path) -> None:
        settings = AppSettings(
            output_dir=tmp_path, chunk_size=10, page_size=50, downloader="wget2"
        )

        options = ArchiveOptions.from_settings(settings)

        assert options.output_dir == tmp_path
        assert options.chunk_size == 10
        assert options.page_size == 50
        assert options.downloader == "wget2"


class TestFilterArchivableChannels:
    """Tests for filter_archivable_channels."""

    def test_keeps_only_text_channels_in_order(self) -> None:
        channels = [
            RawChannel.model_validate(_channel("1")),
            RawChannel.model_validate(_channel("2", CHANNEL_TYPE_VOICE)),
            RawChannel.model_validate(_channel("3", CHANNEL_TYPE_CATEGORY)),
            RawChannel.model_validate(_channel("4")),
        ]

        result = filter_archivable_channels(channels)

        assert [c.id for c in result] == ["1", "4"]


class TestFetchers:
    """Tests for fetch_guild and fetch_channels."""

    @pytest.mark.asyncio
    async def test_fetch_guild_failure_returns_none(self, mock_client, mock_loggers) -> None:
        mock_client.get_guild.side_effect = DiscordAPIError(404, "Unknown Guild")

        assert await fetch_guild(mock_client, GUILD_ID) is None
        mock_loggers.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_fetch_channels_failure_returns_empty(self, mock_client) -> None:
        mock_client.get_guild_channels.side_effect = DiscordAPIError(403, "Missing Access")

        assert await fetch_channels(mock_client, GUILD_ID) == []


class TestProcessGuild:
    """Tests for process_guild."""

    @pytest.mark.asyncio
    async def test_creates_layout_and_metadata(self, mock_client, options, mock_exec) -> None:
        mock_client.get_messages.side_effect = [[_message(3), _message(2)], [_message(1)]]

        result = await process_guild(mock_client, GUILD_ID, options)

        root = options.output_dir / GUILD_ID
        server = json.loads((root / "server.json").read_text())
        assert server == {
            "Id": GUILD_ID,
            "Name": "Test Guild",
            "Icon": "",
            "OwnerId": "7",
            "Description": "",
        }
        channel = json.loads((root / "200" / "channel.json").read_text())
        assert channel == {"Id": "200", "Name": "chan-200", "Topic": ""}
        chunk = json.loads((root / "200" / "0").read_bytes())
        assert [m["Id"] for m in chunk] == ["3", "2", "1"]
        assert result.channels_processed == 1
        assert result.messages_archived == 3
        assert result.chunks_written == 1

    @pytest.mark.asyncio
    async def test_skips_non_text_channels(self, mock_client, options, mock_exec) -> None:
        mock_client.get_guild_channels.return_value = [
            _channel("200"),
            _channel("300", CHANNEL_TYPE_VOICE),
        ]

        result = await process_guild(mock_client, GUILD_ID, options)

        assert result.channels_processed == 1
        assert not (options.output_dir / GUILD_ID / "300").exists()
        channel_ids = [c.kwargs["channel_id"] for c in mock_client.get_messages.call_args_list]
        assert channel_ids == ["200"]

    @pytest.mark.asyncio
    async def test_guild_lookup_failure_continues(self, mock_client, options, mock_exec) -> None:
        mock_client.get_guild.side_effect = DiscordAPIError(500, "Max retries exceeded")

        result = await process_guild(mock_client, GUILD_ID, options)

        assert result.channels_processed == 1
        assert not (options.output_dir / GUILD_ID / "server.json").exists()
        assert (options.output_dir / GUILD_ID / "200" / "0").exists()

    @pytest.mark.asyncio
    async def test_channel_error_continues_with_next(
        self, mock_client, options, mock_loggers
    ) -> None:
        mock_client.get_guild_channels.return_value = [_channel("200"), _channel("201")]

        with patch(
            "discord_chunk_archive.archive.guild_processor.process_channel",
            new_callable=AsyncMock,
        ) as mock_process_channel:
            mock_process_channel.side_effect = [
                RuntimeError("boom"),
                ChannelProcessResult(messages_archived=5),
            ]
            result = await process_guild(mock_client, GUILD_ID, options)

        assert mock_process_channel.await_count == 2
        assert result.channels_failed == 1
        assert result.channels_processed == 1
        assert result.messages_archived == 5
        mock_loggers.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_ephemeral_attachment_downloaded_first(
        self, mock_client, options, mock_exec
    ) -> None:
        mock_client.get_messages.return_value = [
            _message(5, [_attachment("durable"), _attachment("eph", ephemeral=True)])
        ]

        result = await process_guild(mock_client, GUILD_ID, options)

        calls = mock_exec.call_args_list
        assert [c.args[1] for c in calls] == [
            "https://cdn.discordapp.com/attachments/eph/f.png",
            "https://cdn.discordapp.com/attachments/durable/f.png",
        ]
        expected_dest = str(options.output_dir / GUILD_ID / "200")
        assert all(c.args[2:] == ("-d", expected_dest) for c in calls)
        assert result.downloads_attempted == 2

    @pytest.mark.asyncio
    async def test_rerun_is_byte_identical(self, mock_client, options, mock_exec) -> None:
        pages = [[_message(i) for i in range(50, 40, -1)], [_message(40)]]
        mock_client.get_messages.side_effect = [*pages, *pages]
        chunk_path = options.output_dir / GUILD_ID / "200" / "0"

        await process_guild(mock_client, GUILD_ID, options)
        first = chunk_path.read_bytes()
        await process_guild(mock_client, GUILD_ID, options)

        assert chunk_path.read_bytes() == first


class TestProcessChannel:
    """Tests for process_channel."""

    @pytest.mark.asyncio
    async def test_walk_starts_before_last_message(self, mock_client, options, mock_exec) -> None:
        channel = RawChannel.model_validate(_channel("200", last_message_id="999"))

        await process_channel(mock_client, channel, GUILD_ID, options)

        assert mock_client.get_messages.call_args.kwargs["before"] == "999"

    @pytest.mark.asyncio
    async def test_incomplete_history_is_reported(self, mock_client, options, mock_exec) -> None:
        mock_client.get_messages.side_effect = DiscordAPIError(403, "Missing Access")
        channel = RawChannel.model_validate(_channel("200"))

        result = await process_channel(mock_client, channel, GUILD_ID, options)

        assert result.is_complete is False
        assert result.messages_archived == 0
        # An empty chunk is still written for the channel
        assert result.chunks.written == [0]

    @pytest.mark.asyncio
    async def test_uses_configured_chunk_size(self, mock_client, tmp_path, mock_exec) -> None:
        options = ArchiveOptions(output_dir=tmp_path, chunk_size=2)
        mock_client.get_messages.side_effect = [
            [_message(5), _message(4), _message(3), _message(2), _message(1)],
            [],
        ]
        channel = RawChannel.model_validate(_channel("200"))

        result = await process_channel(mock_client, channel, GUILD_ID, options)

        assert result.chunks.written == [0, 1]
        assert result.chunks.dropped == 1
