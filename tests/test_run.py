"""Unit tests for discord_chunk_archive.archive.run."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from discord_chunk_archive.archive.guild_processor import GuildProcessResult
from discord_chunk_archive.archive.run import ArchiveOrchestrator, run_archive
from discord_chunk_archive.archive.state import RunGuard
from discord_chunk_archive.config.settings import AppSettings

PATCH_BASE = "discord_chunk_archive.archive.run"


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(token="test-token", output_dir=tmp_path, guilds=["100", "200"])


@pytest.fixture(autouse=True)
def mock_logger():
    with patch(f"{PATCH_BASE}.logger") as m:
        yield m


def _result(**kwargs) -> GuildProcessResult:
    defaults = dict(
        channels_processed=2, messages_archived=10, chunks_written=2, downloads_attempted=3
    )
    defaults.update(kwargs)
    return GuildProcessResult(**defaults)


# ---------------------------------------------------------------------------
# TestArchiveGuild
# ---------------------------------------------------------------------------


class TestArchiveGuild:
    """Tests for ArchiveOrchestrator.archive_guild."""

    @pytest.mark.asyncio
    @patch(f"{PATCH_BASE}.process_guild", new_callable=AsyncMock)
    async def test_runs_guild_and_releases_guard(self, mock_process, settings):
        mock_process.return_value = _result()
        orch = ArchiveOrchestrator(settings)
        client = MagicMock()

        result = await orch.archive_guild(client, "100")

        assert result == _result()
        mock_process.assert_awaited_once_with(client, "100", orch.options)
        assert orch.guard.is_running is False

    @pytest.mark.asyncio
    @patch(f"{PATCH_BASE}.process_guild", new_callable=AsyncMock)
    async def test_rejected_while_guard_held(self, mock_process, settings, mock_logger):
        guard = RunGuard()
        guard.try_acquire("999")
        orch = ArchiveOrchestrator(settings, guard=guard)

        result = await orch.archive_guild(MagicMock(), "100")

        assert result is None
        mock_process.assert_not_awaited()
        mock_logger.warning.assert_called_once()
        # The active run keeps the guard
        assert guard.guild_id == "999"

    @pytest.mark.asyncio
    @patch(f"{PATCH_BASE}.process_guild", new_callable=AsyncMock)
    async def test_guard_released_on_error(self, mock_process, settings):
        mock_process.side_effect = RuntimeError("boom")
        orch = ArchiveOrchestrator(settings)

        with pytest.raises(RuntimeError):
            await orch.archive_guild(MagicMock(), "100")

        assert orch.guard.is_running is False
        assert orch.guilds_processed == 0

    @pytest.mark.asyncio
    @patch(f"{PATCH_BASE}.process_guild", new_callable=AsyncMock)
    async def test_accumulates_stats(self, mock_process, settings):
        mock_process.side_effect = [_result(), _result(messages_archived=5)]
        orch = ArchiveOrchestrator(settings)

        await orch.archive_guild(MagicMock(), "100")
        await orch.archive_guild(MagicMock(), "200")

        assert orch.guilds_processed == 2
        assert orch.channels_processed == 4
        assert orch.messages_archived == 15
        assert orch.chunks_written == 4
        assert orch.downloads_attempted == 6


# ---------------------------------------------------------------------------
# TestRunPipeline
# ---------------------------------------------------------------------------


class TestRunPipeline:
    """Tests for ArchiveOrchestrator._run_pipeline."""

    @pytest.mark.asyncio
    @patch.object(ArchiveOrchestrator, "archive_guild", new_callable=AsyncMock)
    @patch(f"{PATCH_BASE}.DiscordClient")
    async def test_configured_guilds_in_order(self, mock_client_cls, mock_archive, settings):
        client = AsyncMock()
        mock_client_cls.return_value.__aenter__.return_value = client
        orch = ArchiveOrchestrator(settings)

        await orch._run_pipeline()

        mock_client_cls.assert_called_once_with(
            token="test-token", user_agent=settings.user_agent
        )
        assert [c.args[1] for c in mock_archive.await_args_list] == ["100", "200"]

    @pytest.mark.asyncio
    @patch.object(ArchiveOrchestrator, "archive_guild", new_callable=AsyncMock)
    @patch(f"{PATCH_BASE}.DiscordClient")
    async def test_guild_id_overrides_config(self, mock_client_cls, mock_archive, settings):
        mock_client_cls.return_value.__aenter__.return_value = AsyncMock()
        orch = ArchiveOrchestrator(settings)

        await orch._run_pipeline(guild_id=555)

        mock_archive.assert_awaited_once()
        assert mock_archive.await_args.args[1] == "555"

    @pytest.mark.asyncio
    @patch.object(ArchiveOrchestrator, "archive_guild", new_callable=AsyncMock)
    @patch(f"{PATCH_BASE}.DiscordClient")
    async def test_no_guilds_warns(self, mock_client_cls, mock_archive, tmp_path, mock_logger):
        orch = ArchiveOrchestrator(AppSettings(token="t", output_dir=tmp_path))

        await orch._run_pipeline()

        mock_client_cls.assert_not_called()
        mock_archive.assert_not_awaited()
        mock_logger.warning.assert_called_once()


# ---------------------------------------------------------------------------
# TestRun
# ---------------------------------------------------------------------------


class TestRun:
    """Tests for the BaseOrchestrator.run wrapper."""

    @pytest.mark.asyncio
    @patch.object(ArchiveOrchestrator, "_run_pipeline", new_callable=AsyncMock)
    async def test_run_logs_summary(self, mock_pipeline, settings, mock_logger):
        orch = ArchiveOrchestrator(settings)
        orch.messages_archived = 7

        await orch.run(guild_id=1)

        mock_pipeline.assert_awaited_once_with(guild_id=1)
        mock_logger.summary.assert_called_once()
        assert mock_logger.summary.call_args.kwargs["messages"] == 7


# ---------------------------------------------------------------------------
# TestRunArchive
# ---------------------------------------------------------------------------


class TestRunArchive:
    """Tests for run_archive."""

    @pytest.mark.asyncio
    async def test_missing_token_raises(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"guilds": ["1"]}))

        with pytest.raises(ValueError, match="token"):
            await run_archive(str(config))

    @pytest.mark.asyncio
    @patch.object(ArchiveOrchestrator, "run", new_callable=AsyncMock)
    async def test_runs_orchestrator_from_config(self, mock_run, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"token": "abc", "output_dir": str(tmp_path)}))

        await run_archive(str(config), guild_id=42)

        mock_run.assert_awaited_once_with(guild_id=42)
