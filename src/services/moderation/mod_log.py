"""
SentinelBot - Moderation Log
============================

Running per-user report in the moderation channel.

DESIGN:
    One log message per subject user. A new report edits the previous
    message when it can still be fetched; otherwise a new message is
    sent and its id remembered (in the state store's bounded map).
    The staff role is pinged on every post when it exists.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Optional

import discord

from src.core.config import Config
from src.core.logger import logger
from src.services.moderation.actions import find_role
from src.services.moderation.state import ModerationStateStore


class ModerationLog:
    """Create-or-update delivery of moderation reports."""

    def __init__(self, config: Config, state: ModerationStateStore) -> None:
        self.config = config
        self.state = state

    def _get_channel(self, guild: discord.Guild) -> Optional[discord.abc.Messageable]:
        channel_id = self.config.moderation_log_channel_id
        if not channel_id:
            logger.debug("Moderation Log Skipped", [("Reason", "MODERATION_LOG_CHANNEL_ID not set")])
            return None

        channel = guild.get_channel(channel_id)
        if channel is None:
            logger.warning("Moderation Log Channel Not Found", [
                ("Channel ID", str(channel_id)),
                ("Guild ID", str(guild.id)),
            ])
        return channel

    async def _edit_existing(
        self,
        channel: discord.abc.Messageable,
        message_id: int,
        content: Optional[str],
        embed: discord.Embed,
    ) -> bool:
        try:
            old_message = await channel.fetch_message(message_id)
            await old_message.edit(content=content, embed=embed)
            return True
        except discord.NotFound:
            return False
        except discord.HTTPException as e:
            logger.warning("Moderation Log Edit Failed", [
                ("Message ID", str(message_id)),
                ("Error", str(e)[:100]),
            ])
            return False

    async def deliver(
        self,
        guild: discord.Guild,
        embed: discord.Embed,
        subject: discord.abc.User,
    ) -> bool:
        """
        Post or update the report for a subject user.

        Args:
            guild: Guild whose moderation channel receives the report.
            embed: Report embed.
            subject: The user the report is about.

        Returns:
            True if a message was edited or sent.
        """
        channel = self._get_channel(guild)
        if channel is None:
            return False

        staff_role = find_role(guild, self.config.mod_role_name)
        content = staff_role.mention if staff_role else None
        key = (guild.id, subject.id)

        old_id = self.state.get_report_message(key)
        if old_id is not None and await self._edit_existing(channel, old_id, content, embed):
            logger.debug("Moderation Log Updated", [("User ID", str(subject.id))])
            return True

        try:
            new_message = await channel.send(content=content, embed=embed)
        except discord.HTTPException as e:
            logger.warning("Moderation Log Send Failed", [
                ("Channel ID", str(self.config.moderation_log_channel_id)),
                ("User ID", str(subject.id)),
                ("Error", str(e)[:100]),
            ])
            return False

        self.state.set_report_message(key, new_message.id)
        logger.debug("Moderation Log Sent", [
            ("User ID", str(subject.id)),
            ("Message ID", str(new_message.id)),
        ])
        return True


__all__ = ["ModerationLog"]
