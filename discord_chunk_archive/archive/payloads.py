"""Immutable value types for raw Discord REST payloads.

API JSON is parsed into these once at the ingestion boundary. Nothing past
the mappers sees them; the archive only stores the records in
``discord_chunk_archive.archive.records``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _snowflakes_as_str(cls, v: Any, info: ValidationInfo) -> Any:
        # Snowflakes are strings on the wire; ints are accepted too
        if info.field_name.endswith("id") and isinstance(v, int):
            return str(v)
        return v


class RawUser(_Payload):
    id: str
    username: str = ""
    discriminator: str | None = None
    avatar: str | None = None
    bot: bool = False
    mfa_enabled: bool = False


class RawAttachment(_Payload):
    id: str
    url: str = ""
    filename: str = ""
    size: int = 0
    ephemeral: bool = False


class RawMessage(_Payload):
    id: str
    channel_id: str | None = None
    author: RawUser
    content: str = ""
    pinned: bool = False
    attachments: tuple[RawAttachment, ...] = ()
    referenced_message: RawMessage | None = None


class RawMessageCreate(RawMessage):
    """Gateway MESSAGE_CREATE event payload."""

    guild_id: str | None = None


class RawChannel(_Payload):
    id: str
    type: int
    guild_id: str | None = None
    name: str | None = None
    topic: str | None = None
    last_message_id: str | None = None


class RawGuild(_Payload):
    id: str
    name: str = ""
    icon: str | None = None
    owner_id: str | None = None
    description: str | None = None


def parse_messages(data: list[dict[str, Any]]) -> list[RawMessage]:
    """Parse a page of message JSON objects, preserving API order."""
    return [RawMessage.model_validate(m) for m in data]
