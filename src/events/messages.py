"""
Sentinel Discord Bot - Message Events
=====================================

Routes new guild messages into the moderation service.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.core.logger import logger

if TYPE_CHECKING:
    from src.bot import SentinelBot


class MessageEvents(commands.Cog):
    """Message event handlers."""

    def __init__(self, bot: "SentinelBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        """
        Event handler for messages.

        DESIGN:
            Bots and DMs are dropped here before any moderation work.
            Everything else goes to the moderation service, which
            handles its own exemptions and never raises.
        """
        if message.author.bot or message.guild is None:
            return

        if self.bot.moderation is None:
            return

        await self.bot.moderation.handle_message(message)


async def setup(bot: "SentinelBot") -> None:
    """Add the message events cog to the bot."""
    await bot.add_cog(MessageEvents(bot))
    logger.debug("Message Events Loaded")
