"""User payload to archived author mapper."""

from __future__ import annotations

from discord_chunk_archive.archive.payloads import RawUser
from discord_chunk_archive.archive.records import ArchivedAuthor
from discord_chunk_archive.utils.cdn import avatar_url


def map_author(user: RawUser) -> ArchivedAuthor:
    """Convert a raw user into the author snapshot embedded in a message.

    The avatar hash is resolved to a CDN URL here; the hash itself is not
    kept.
    """
    discriminator = user.discriminator or ""
    return ArchivedAuthor(
        username=user.username,
        discriminator=discriminator,
        id=user.id,
        mfa=user.mfa_enabled,
        bot=user.bot,
        avatar=avatar_url(user.id, user.avatar, discriminator),
    )
