#!/usr/bin/env python3
"""
Sentinel - Syria Discord Moderation Bot Entry Point
===================================================

A moderation bot built specifically for discord.gg/syria.

Features:
- Badword filtering
- Spam detection (rate, duplicates, mentions, links, invites, emoji, caps)
- Automatic warnings, mutes and read-only demotion
- Mutes that survive restarts

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import sys

from dotenv import load_dotenv

from src.core.logger import logger
from src.core.config import ConfigValidationError, get_config, validate_and_log_config
from src.bot import SentinelBot


async def main() -> None:
    """
    Main entry point for the Sentinel Discord bot.

    Handles the complete bot lifecycle:
    1. Loads environment configuration
    2. Validates configuration (fails fast on a missing token)
    3. Initializes bot instance with proper intents
    4. Establishes connection to Discord API
    5. Handles graceful shutdown on interruption

    Raises:
        SystemExit: If configuration is invalid or the bot fails to start.
    """
    load_dotenv()

    logger.tree("SENTINEL STARTING", [
        ("Server", "discord.gg/syria"),
        ("Structure", "Organized with src/"),
    ], emoji="🛡️")

    try:
        validate_and_log_config()
    except ConfigValidationError as e:
        logger.critical(str(e))
        sys.exit(1)

    bot = SentinelBot()
    try:
        await bot.start(get_config().discord_token)
    except Exception as e:
        logger.error("Bot Crashed", [
            ("Error Type", type(e).__name__),
            ("Error", str(e)[:200]),
        ])
        sys.exit(1)
    finally:
        if not bot.is_closed():
            await bot.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("🛑 Bot stopped by user (Ctrl+C)")
