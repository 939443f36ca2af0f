"""CLI entry point for discord_chunk_archive.archive.

Usage:
    python -m discord_chunk_archive.archive                  # Archive all guilds in config
    python -m discord_chunk_archive.archive --guild-id 123   # Archive one guild
    python -m discord_chunk_archive.archive --verbose        # Show more details
    python -m discord_chunk_archive.archive --debug          # Show debug info
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from discord_chunk_archive.archive.logger import logger
from discord_chunk_archive.archive.run import run_archive
from discord_chunk_archive.utils.logging import setup_logging


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Archive Discord guild channels to chunked JSON files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m discord_chunk_archive.archive
      Archive every guild listed in config.json

  python -m discord_chunk_archive.archive --guild-id 123456789
      Archive only the specified guild

  python -m discord_chunk_archive.archive --config /path/to/config.json
      Use a custom config file
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="Path to config.json (default: config.json)",
    )
    parser.add_argument(
        "--guild-id",
        type=int,
        help="Archive only this guild ID",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (DEBUG level)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with third-party library logs",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Optional file to write logs to",
    )

    args = parser.parse_args()

    setup_logging(
        level=logging.DEBUG if (args.debug or args.verbose) else logging.INFO,
        log_file=args.log_file,
        debug_third_party=args.debug,
    )

    logger.info("Starting Discord chunk archive")

    try:
        asyncio.run(run_archive(config_path=args.config, guild_id=args.guild_id))
        logger.success("Archive complete!")
    except ValueError as e:
        # Includes pydantic ValidationError from a bad config file
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise


if __name__ == "__main__":
    main()
