# discord_chunk_archive/utils/cdn.py
from __future__ import annotations

CDN_URL = "https://cdn.discordapp.com"


def default_avatar_index(user_id: int | str, discriminator: str | None) -> int:
    """Index of the embed avatar Discord shows for users without one.

    Legacy users pick by discriminator; migrated users (discriminator
    "0" or missing) pick by the snowflake.
    """
    if discriminator and discriminator.isdigit() and int(discriminator) != 0:
        return int(discriminator) % 5
    try:
        return (int(user_id) >> 22) % 6
    except (TypeError, ValueError):
        return 0


def avatar_url(
    user_id: int | str,
    avatar_hash: str | None,
    discriminator: str | None = None,
) -> str:
    """Resolve a user's avatar hash to a CDN URL.

    Animated hashes ("a_" prefix) resolve to .gif, everything else to .png.
    Never raises: a missing hash falls back to the default embed avatar.
    """
    if not avatar_hash:
        index = default_avatar_index(user_id, discriminator)
        return f"{CDN_URL}/embed/avatars/{index}.png"

    ext = "gif" if avatar_hash.startswith("a_") else "png"
    return f"{CDN_URL}/avatars/{user_id}/{avatar_hash}.{ext}"


def guild_icon_url(guild_id: int | str, icon_hash: str | None) -> str:
    """Resolve a guild icon hash to a CDN URL, or "" when the guild has none."""
    if not icon_hash:
        return ""
    ext = "gif" if icon_hash.startswith("a_") else "png"
    return f"{CDN_URL}/icons/{guild_id}/{icon_hash}.{ext}"
