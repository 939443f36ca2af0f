"""Discord Chunk Archive pipeline.

This package archives every text channel of a guild into numbered JSON
chunk files and fetches the attachments with an external downloader.

Usage:
    python -m discord_chunk_archive.archive              # Archive all guilds in config
    python -m discord_chunk_archive.archive --guild-id X # Archive a specific guild
"""
