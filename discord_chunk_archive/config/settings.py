"""Configuration management using pydantic-settings.

Provides validated configuration with support for:
- JSON config file (config.json)
- Type coercion and validation
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = "DiscordBot (discord-chunk-archive, 0.1.0)"


class AppSettings(BaseSettings):
    """Application settings with validation.

    Settings are loaded from a JSON config file (config.json). Keys the
    file leaves out fall back to ``DISCORD_ARCHIVE_*`` environment
    variables, then to the defaults below; a key present in the file
    always wins over the environment.
    """

    token: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    output_dir: Path = Path(".")
    downloader: str = "aria2c"
    chunk_size: int = Field(default=4000, gt=0)
    page_size: int = Field(default=100, ge=1, le=100)
    trigger: str = "channels"
    guilds: list[str] = []

    model_config = SettingsConfigDict(
        env_prefix="DISCORD_ARCHIVE_",
        extra="ignore",
    )

    @field_validator("guilds", mode="before")
    @classmethod
    def ensure_string_list(cls, v: Any) -> list[str]:
        """Ensure guilds are strings (for snowflake IDs)."""
        if isinstance(v, list):
            return [str(g) for g in v]
        return v

    @field_validator("token", mode="before")
    @classmethod
    def strip_bot_prefix(cls, v: Any) -> Any:
        """Accept tokens pasted with or without the "Bot " prefix."""
        if isinstance(v, str) and v.startswith("Bot "):
            return v[len("Bot ") :]
        return v

    @classmethod
    def from_json(cls, path: str | Path = "config.json") -> "AppSettings":
        """Load settings from a JSON config file.

        Args:
            path: Path to the JSON config file

        Returns:
            AppSettings instance with validated configuration
        """
        config_path = Path(path)
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls(**data)
        return cls()


def load_config(path: str | Path = "config.json") -> AppSettings:
    """Load configuration from a JSON file."""
    return AppSettings.from_json(path)
