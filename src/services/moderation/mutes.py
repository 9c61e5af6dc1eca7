"""
SentinelBot - Mute Manager
==========================

Timed mutes with durable records and restart reconciliation.

DESIGN:
    A guild with a role named "muted" (case-insensitive) gets role mutes:
    the role is added, the mute is persisted with its expiry and a timer
    lifts it. Without such a role the native Discord timeout is used;
    Discord expires those itself so they are not persisted.

    A persisted record exists exactly while the user is muted: lifting
    a mute removes the record even if the role removal fails.

    On startup restore() walks every record:
    - guild not available: left for a later restart
    - member gone: record dropped
    - expired: role removed and record dropped immediately
    - still running: rescheduled for the remaining time

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from dataclasses import dataclass
from typing import Any, Optional

import discord

from src.core.config import Config
from src.core.constants import TIMER_MUTE_EXPIRY
from src.core.database import DatabaseManager
from src.core.logger import logger
from src.services.moderation.actions import add_role, find_role, remove_role, timeout_member
from src.services.moderation.state import ModerationStateStore
from src.utils.timers import TimerRegistry
from src.utils.validators import ValidationError, Validators


@dataclass
class RestoreSummary:
    """Counts from one restore pass."""

    restored: int = 0
    expired: int = 0
    dropped: int = 0
    skipped: int = 0


class MuteManager:
    """Applies, lifts and restores timed mutes."""

    def __init__(
        self,
        bot: Any,
        config: Config,
        state: ModerationStateStore,
        db: DatabaseManager,
        timers: TimerRegistry,
    ) -> None:
        self.bot = bot
        self.config = config
        self.state = state
        self.db = db
        self.timers = timers

    def find_muted_role(self, guild: discord.Guild) -> Optional[discord.Role]:
        return find_role(guild, self.config.muted_role_name, case_insensitive=True)

    # =========================================================================
    # Apply
    # =========================================================================

    async def apply_mute(self, member: discord.Member, reason: str, duration: float) -> bool:
        """
        Mute a member for duration seconds.

        Returns:
            True if the role or timeout was applied.
        """
        guild = member.guild
        muted_role = self.find_muted_role(guild)

        if muted_role is None:
            applied = await timeout_member(member, duration, reason[:500])
            if applied:
                logger.tree("Timeout Applied", [
                    ("User", str(member)),
                    ("User ID", str(member.id)),
                    ("Duration", f"{int(duration)}s"),
                    ("Reason", reason[:50]),
                ], emoji="⏳")
            return applied

        if not await add_role(member, muted_role, reason=reason[:500]):
            return False

        key = (guild.id, member.id)
        expires_at = time.time() + duration
        self.state.mark_muted(key)
        self.db.record_mute(guild.id, member.id, expires_at, Validators.sanitize_reason(reason))
        self._schedule_lift(guild.id, member.id, duration)

        logger.tree("Mute Applied", [
            ("User", str(member)),
            ("User ID", str(member.id)),
            ("Duration", f"{int(duration)}s"),
            ("Reason", reason[:50]),
        ], emoji="🔇")
        return True

    def _schedule_lift(self, guild_id: int, user_id: int, delay: float) -> None:
        async def lift() -> None:
            await self.lift_mute(guild_id, user_id, reason="Mute duration expired")

        self.timers.schedule(TIMER_MUTE_EXPIRY, (guild_id, user_id), delay, lift)

    # =========================================================================
    # Lift
    # =========================================================================

    async def _resolve_member(self, guild: discord.Guild, user_id: int) -> Optional[discord.Member]:
        """Cached member, else fetched. None if the user left."""
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.NotFound:
            return None

    async def lift_mute(self, guild_id: int, user_id: int, reason: str = "Mute lifted") -> bool:
        """
        End a role mute: remove the role, the muted marker and the record.

        Returns:
            True if a persisted record was removed.
        """
        key = (guild_id, user_id)
        self.timers.cancel(TIMER_MUTE_EXPIRY, key)

        guild = self.bot.get_guild(guild_id)
        if guild is not None:
            muted_role = self.find_muted_role(guild)
            if muted_role is not None:
                try:
                    member = await self._resolve_member(guild, user_id)
                except discord.HTTPException as e:
                    logger.warning("Unmute Member Lookup Failed", [
                        ("User ID", str(user_id)),
                        ("Error", str(e)[:100]),
                    ])
                    member = None
                if member is not None:
                    await remove_role(member, muted_role, reason=reason)

        self.state.unmark_muted(key)
        removed = self.db.remove_mute(guild_id, user_id)

        logger.tree("Mute Lifted", [
            ("Guild ID", str(guild_id)),
            ("User ID", str(user_id)),
            ("Reason", reason),
        ], emoji="🔓")
        return removed

    # =========================================================================
    # Restore
    # =========================================================================

    async def restore(self) -> RestoreSummary:
        """Reconcile persisted mutes with the current time."""
        summary = RestoreSummary()
        now = time.time()

        for raw_guild_id, guild_mutes in self.db.get_all_mutes().items():
            try:
                guild_id = Validators.validate_discord_id(raw_guild_id, "guild_id")
            except ValidationError as e:
                logger.warning("Invalid Persisted Mute Dropped", [("Error", str(e)[:100])])
                for raw_user_id in guild_mutes:
                    self.db.remove_mute(raw_guild_id, raw_user_id)
                summary.dropped += len(guild_mutes)
                continue

            guild = self.bot.get_guild(guild_id)
            if guild is None:
                summary.skipped += len(guild_mutes)
                continue

            muted_role = self.find_muted_role(guild)

            for raw_user_id, record in guild_mutes.items():
                try:
                    user_id = Validators.validate_discord_id(raw_user_id, "user_id")
                except ValidationError as e:
                    logger.warning("Invalid Persisted Mute Dropped", [("Error", str(e)[:100])])
                    self.db.remove_mute(guild_id, raw_user_id)
                    summary.dropped += 1
                    continue

                try:
                    member = await self._resolve_member(guild, user_id)
                except discord.HTTPException as e:
                    logger.warning("Mute Restore Lookup Failed", [
                        ("User ID", str(user_id)),
                        ("Error", str(e)[:100]),
                    ])
                    summary.skipped += 1
                    continue

                key = (guild_id, user_id)
                if member is None:
                    self.db.remove_mute(guild_id, user_id)
                    self.state.unmark_muted(key)
                    summary.dropped += 1
                    continue

                if record["expires_at"] <= now:
                    if muted_role is not None:
                        await remove_role(member, muted_role, reason="Mute expired while offline")
                    self.db.remove_mute(guild_id, user_id)
                    self.state.unmark_muted(key)
                    summary.expired += 1
                    continue

                self.state.mark_muted(key)
                self._schedule_lift(guild_id, user_id, record["expires_at"] - now)
                summary.restored += 1

        logger.tree("Mute State Restored", [
            ("Active", str(summary.restored)),
            ("Expired", str(summary.expired)),
            ("Dropped", str(summary.dropped)),
            ("Skipped", str(summary.skipped)),
        ], emoji="🔇")
        return summary


__all__ = ["MuteManager", "RestoreSummary"]
