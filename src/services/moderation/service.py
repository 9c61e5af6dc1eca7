"""
SentinelBot - Moderation Service
================================

Entry point of the moderation pipeline for every guild message.

DESIGN:
    One service object owns all moderation state for the process. It is
    created once by the bot, started when the gateway is ready and
    stopped on shutdown. Starting reconciles persisted mutes and spam
    ledger resets with the current time.

    Per message:
    1. exemptions (bots, DMs, exempt channels, bypass roles)
    2. badwords: delete, report, read-only ledger, read-only role
    3. spam: every detector runs, then warnings, short mute, ledgers,
       long mute, report and read-only role

    handle_message() never raises. Every Discord side effect is isolated
    so a failed report does not stop a role assignment.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import discord

from src.core.config import Config, get_config
from src.core.constants import LEDGER_SPAM, TIMER_LEDGER_RESET
from src.core.database import DATA_DIR, DatabaseManager, get_db
from src.core.logger import logger
from src.services.moderation.actions import assign_read_only_role, delete_message
from src.services.moderation.badwords import BadwordIndex
from src.services.moderation.detectors import MessageSignals, detect_spam
from src.services.moderation.embeds import (
    build_badword_report,
    build_long_mute_notice,
    build_long_mute_report,
    build_reset_notice,
    build_spam_report,
    format_duration,
)
from src.services.moderation.escalation import EscalationEngine, SpamDecision
from src.services.moderation.exemptions import exemption_reason
from src.services.moderation.mod_log import ModerationLog
from src.services.moderation.mutes import MuteManager
from src.services.moderation.state import ModerationStateStore, UserKey
from src.utils.async_utils import create_safe_task, gather_with_logging, safe_async_operation
from src.utils.dm_helpers import DmRateLimiter
from src.utils.timers import TimerRegistry
from src.utils.validators import ValidationError, Validators

if TYPE_CHECKING:
    from src.bot import SentinelBot


BADWORDS_JSON_PATH = DATA_DIR / "badwords.json"
BADWORDS_TEXT_PATH = DATA_DIR / "badwords-list.txt"


class ModerationService:
    """
    Badword and spam moderation for every guild message.

    Attributes:
        config: Thresholds and routing.
        state: In-memory per-user state.
        escalation: Warning / mute / read-only decisions.
        mutes: Role mutes, timeouts and restore.
        mod_log: Moderation channel reports.
        badwords: Restricted-term index.
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(
        self,
        bot: "SentinelBot",
        config: Optional[Config] = None,
        db: Optional[DatabaseManager] = None,
        badwords: Optional[BadwordIndex] = None,
    ) -> None:
        self.bot = bot
        self.config = config or get_config()
        self.db = db or get_db()

        self.state = ModerationStateStore(self.config)
        self.timers = TimerRegistry()
        self.escalation = EscalationEngine(self.config, self.state, self.db)
        self.mutes = MuteManager(bot, self.config, self.state, self.db, self.timers)
        self.mod_log = ModerationLog(self.config, self.state)
        self.dm_limiter = DmRateLimiter(
            min_gap=self.config.dm_rate_limit,
            global_limit=self.config.dm_global_limit,
            global_window=self.config.dm_global_window,
        )

        if badwords is None:
            badwords = BadwordIndex.from_files(BADWORDS_JSON_PATH, BADWORDS_TEXT_PATH)
        self.badwords = badwords

        self._cleanup_task: Optional[asyncio.Task] = None
        self._started = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Restore persisted mutes and ledger resets, start the cleanup loop (once)."""
        if self._started:
            return
        self._started = True

        await safe_async_operation("Restore Mutes", self.mutes.restore(), log_level="error")
        await safe_async_operation("Restore Ledger Resets", self._restore_ledger_resets(), log_level="error")
        self._cleanup_task = create_safe_task(self._cleanup_loop(), "Moderation Cleanup")

        logger.tree("Moderation Service Started", [
            ("Badword Terms", str(len(self.badwords))),
            ("Cleanup Interval", f"{self.config.cleanup_interval:g}s"),
            ("Map Ceiling", str(self.config.max_map_entries)),
        ], emoji="🛡️")

    async def stop(self) -> None:
        """Cancel the cleanup loop and every pending timer."""
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
        self._cleanup_task = None

        cancelled = self.timers.cancel_all()
        self._started = False
        logger.info("Moderation Service Stopped", [("Timers Cancelled", str(cancelled))])

    # =========================================================================
    # Message Entry Point
    # =========================================================================

    async def handle_message(self, message: discord.Message) -> None:
        """Moderate one message. Never raises."""
        try:
            await self._process(message)
        except Exception as e:
            logger.error("Moderation Pipeline Failed", [
                ("Message ID", str(getattr(message, "id", "?"))),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])

    async def _process(self, message: discord.Message) -> None:
        reason = exemption_reason(message, self.config)
        if reason is not None:
            return

        now = time.time()
        key: UserKey = (message.guild.id, message.author.id)
        content = message.content or ""

        if self.badwords.contains(content):
            await self._handle_badwords(message, key, content, now)

        await self._handle_spam(message, key, content, now)

    # =========================================================================
    # Badwords
    # =========================================================================

    async def _handle_badwords(
        self,
        message: discord.Message,
        key: UserKey,
        content: str,
        now: float,
    ) -> None:
        member = message.author
        terms = self.badwords.find(content)

        await delete_message(message, "Badword")

        decision = self.escalation.register_badwords(key, terms, content, now)
        record = self.state.badwords.get(key)

        await safe_async_operation(
            "Badword Report",
            self.mod_log.deliver(message.guild, build_badword_report(member, decision, record, content), member),
        )

        if decision.read_only:
            await safe_async_operation(
                "Assign Read-Only Role",
                assign_read_only_role(member, self.config.read_only_role_name, decision.read_only_total),
            )

        logger.tree("Badword Detected", [
            ("User", str(member)),
            ("User ID", str(member.id)),
            ("Channel", f"#{getattr(message.channel, 'name', message.channel.id)}"),
            ("Terms", ", ".join(terms)[:100]),
            ("Read-Only Ledger", f"{decision.read_only_total}/{self.config.read_only_threshold}"),
        ], emoji="🔴")

    # =========================================================================
    # Spam
    # =========================================================================

    async def _handle_spam(
        self,
        message: discord.Message,
        key: UserKey,
        content: str,
        now: float,
    ) -> None:
        window = self.state.activity_for(key, now)
        violations = detect_spam(window, MessageSignals.from_message(message), now, self.config)
        if not violations:
            return

        member = message.author
        keep_message = bool(self.config.general_chat_id) and message.channel.id == self.config.general_chat_id
        if not keep_message:
            await delete_message(message, "Spam")

        decision = self.escalation.register_spam(key, violations, content, now)
        action = "Warning"

        if decision.short_mute:
            muted = await self.mutes.apply_mute(member, ", ".join(violations), self.config.mute_duration)
            if muted:
                self.escalation.confirm_short_mute(key)
                action = f"Muted for {format_duration(self.config.mute_duration)}"

        if self.escalation.should_long_mute(key, decision.spam_total) and self.state.try_begin_long_mute(key):
            try:
                if await self._apply_long_mute(member, key, decision.spam_total):
                    action = (
                        f"Auto-Muted for {format_duration(self.config.long_mute_duration)} "
                        f"({decision.spam_total} total spam violations)"
                    )
            finally:
                self.state.end_long_mute(key)

        if keep_message:
            action = f"{action} (message kept)"

        await self._report_spam(message, decision, action, content)

        if decision.read_only:
            await safe_async_operation(
                "Assign Read-Only Role",
                assign_read_only_role(member, self.config.read_only_role_name, decision.read_only_total),
            )

        logger.tree("Spam Detected", [
            ("User", str(member)),
            ("User ID", str(member.id)),
            ("Violations", ", ".join(violations)[:100]),
            ("Warnings", f"{decision.warnings}/{self.config.warnings_before_mute}"),
            ("Spam Ledger", f"{decision.spam_total}/{self.config.long_mute_threshold}"),
            ("Action", action),
        ], emoji="🚨")

    async def _report_spam(
        self,
        message: discord.Message,
        decision: SpamDecision,
        action: str,
        content: str,
    ) -> None:
        member = message.author
        record = self.state.violations.get((message.guild.id, member.id))
        if record is None:
            return
        embed = build_spam_report(
            member,
            getattr(message.channel, "mention", str(message.channel.id)),
            decision,
            record,
            action,
            content,
            self.config.warnings_before_mute,
        )
        await safe_async_operation("Spam Report", self.mod_log.deliver(message.guild, embed, member))

    # =========================================================================
    # Long Mute
    # =========================================================================

    async def _apply_long_mute(self, member: discord.Member, key: UserKey, total: int) -> bool:
        """Apply the long mute, notify, log and schedule the ledger reset."""
        threshold = self.config.long_mute_threshold
        duration = self.config.long_mute_duration

        muted = await self.mutes.apply_mute(
            member,
            f"Automatic mute: {threshold}+ spam violations",
            duration,
        )
        if not muted:
            return False

        guild_id, user_id = key
        self.db.schedule_ledger_reset(LEDGER_SPAM, guild_id, user_id, time.time() + duration)
        self._schedule_ledger_reset(key, duration)

        await gather_with_logging(
            ("Long Mute DM", self.dm_limiter.send(
                member,
                embed=build_long_mute_notice(member.guild.name, total, threshold, duration),
                context="Long Mute",
            )),
            ("Long Mute Log", self.mod_log.deliver(
                member.guild,
                build_long_mute_report(member, total, threshold, duration),
                member,
            )),
            context="Long Mute",
        )

        logger.tree("Long Mute Applied", [
            ("User", str(member)),
            ("User ID", str(member.id)),
            ("Spam Ledger", f"{total}/{threshold}"),
            ("Duration", f"{int(duration)}s"),
        ], emoji="🔇")
        return True

    def _schedule_ledger_reset(self, key: UserKey, delay: float) -> None:
        guild_id, user_id = key

        async def reset() -> None:
            await self._on_long_mute_expired(guild_id, user_id)

        self.timers.schedule(TIMER_LEDGER_RESET, key, delay, reset)

    async def _restore_ledger_resets(self) -> None:
        """
        Finish spam ledger resets that fell due while offline and
        reschedule the rest.

        Overdue resets run here, before the first message is handled, so
        a user whose long mute ended during downtime starts from zero.
        """
        now = time.time()
        completed = rescheduled = 0

        for guild_id, user_id, due_at in self.db.get_ledger_resets(LEDGER_SPAM):
            key = (guild_id, user_id)
            if due_at <= now:
                self.escalation.complete_long_mute(key)
                create_safe_task(self._notify_ledger_reset(guild_id, user_id), "Ledger Reset DM")
                completed += 1
            else:
                self._schedule_ledger_reset(key, due_at - now)
                rescheduled += 1

        if completed or rescheduled:
            logger.tree("Ledger Resets Restored", [
                ("Completed", str(completed)),
                ("Rescheduled", str(rescheduled)),
            ], emoji="🧹")

    async def _on_long_mute_expired(self, guild_id: int, user_id: int) -> None:
        self.escalation.complete_long_mute((guild_id, user_id))
        await self._notify_ledger_reset(guild_id, user_id)

    async def _notify_ledger_reset(self, guild_id: int, user_id: int) -> None:
        guild = self.bot.get_guild(guild_id)
        member = guild.get_member(user_id) if guild is not None else None
        if member is not None:
            await self.dm_limiter.send(
                member,
                embed=build_reset_notice(guild.name),
                context="Ledger Reset",
            )

    # =========================================================================
    # Operator Actions
    # =========================================================================

    def reset_user_violations(self, guild_id: Any, user_id: Any) -> bool:
        """
        Clear a user's ledgers, history and warnings.

        IDs come from outside the gateway and are validated first.

        Returns:
            True if the reset ran, False if the IDs were refused.
        """
        try:
            guild_id = Validators.validate_discord_id(guild_id, "guild_id")
            user_id = Validators.validate_discord_id(user_id, "user_id")
        except ValidationError as e:
            logger.warning("Violation Reset Refused", [("Error", str(e)[:100])])
            return False

        key = (guild_id, user_id)
        self.escalation.reset_user(key)
        self.timers.cancel(TIMER_LEDGER_RESET, key)

        logger.tree("Violations Reset", [
            ("Guild ID", str(guild_id)),
            ("User ID", str(user_id)),
        ], emoji="🧹")
        return True

    # =========================================================================
    # Cleanup
    # =========================================================================

    def run_cleanup(self, now: Optional[float] = None) -> Dict[str, int]:
        """One sweep of every in-memory map."""
        removed = self.state.sweep(time.time() if now is None else now)
        if any(removed.values()):
            details: List = [(f"Removed {name}", str(count)) for name, count in removed.items() if count]
            details.extend((f"Size {name}", str(size)) for name, size in self.state.stats().items())
            logger.tree("Moderation Cleanup", details, emoji="🧹")
        return removed

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.cleanup_interval)
            try:
                self.run_cleanup()
            except Exception as e:
                logger.error("Moderation Cleanup Failed", [
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:200]),
                ])

    def stats(self) -> Dict[str, int]:
        """Map sizes plus pending timers."""
        stats = self.state.stats()
        stats["timers"] = len(self.timers)
        return stats


__all__ = ["ModerationService", "BADWORDS_JSON_PATH", "BADWORDS_TEXT_PATH"]
