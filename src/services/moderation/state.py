"""
SentinelBot - Moderation State Store
====================================

Process-local per-user state for the moderation pipeline.

DESIGN:
    All maps are BoundedMaps keyed by (guild_id, user_id) and share one
    capacity ceiling. Two cleanup policies apply:
    - idle sweep: activity windows with no timestamp inside the idle
      horizon are dropped (session-scoped state)
    - retention purge + capacity eviction: violation and badword
      records, warnings and report message ids (long-lived aggregates)

    sweep() is called by the service on a fixed interval. Capacity
    eviction runs inside every insert.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Dict, Iterable, Optional, Set, Tuple

from src.core.config import Config
from src.core.constants import HISTORY_EXCERPT_LENGTH
from src.services.moderation.models import (
    UserActivityWindow,
    ViolationRecord,
    WarningState,
)
from src.utils.bounded_map import BoundedMap


UserKey = Tuple[int, int]
"""(guild_id, user_id)"""


class ModerationStateStore:
    """Owner of every in-memory moderation map."""

    def __init__(self, config: Config) -> None:
        self.config = config
        limit = config.max_map_entries

        self.activity: BoundedMap[UserKey, UserActivityWindow] = BoundedMap(
            limit, activity_key=lambda w: w.last_activity
        )
        self.violations: BoundedMap[UserKey, ViolationRecord] = BoundedMap(
            limit, activity_key=lambda r: r.last_updated
        )
        self.badwords: BoundedMap[UserKey, ViolationRecord] = BoundedMap(
            limit, activity_key=lambda r: r.last_updated
        )
        self.warnings: BoundedMap[UserKey, WarningState] = BoundedMap(
            limit, activity_key=lambda w: w.last_warning
        )
        self.report_messages: BoundedMap[UserKey, int] = BoundedMap(limit)

        self.muted: Set[UserKey] = set()
        self.long_mute_in_progress: Set[UserKey] = set()

    # =========================================================================
    # Activity Windows
    # =========================================================================

    def activity_for(self, key: UserKey, now: float) -> UserActivityWindow:
        """Get or lazily create the activity window for a user."""
        return self.activity.get_or_create(key, lambda: UserActivityWindow(link_window_start=now))

    # =========================================================================
    # Warnings
    # =========================================================================

    def add_warning(self, key: UserKey, now: float) -> int:
        """Register a warning and return the user's current count."""
        state = self.warnings.get_or_create(key, WarningState)
        return state.add(now, self.config.warning_reset)

    def warning_count(self, key: UserKey, now: float) -> int:
        """Current count, 0 once the reset window has passed."""
        state = self.warnings.get(key)
        if state is None:
            return 0
        if now - state.last_warning > self.config.warning_reset:
            self.warnings.pop(key)
            return 0
        return state.count

    def clear_warnings(self, key: UserKey) -> None:
        self.warnings.pop(key)

    # =========================================================================
    # Violation History
    # =========================================================================

    def record_violations(
        self,
        key: UserKey,
        categories: Iterable[str],
        content: str,
        now: float,
    ) -> ViolationRecord:
        record = self.violations.get_or_create(key, lambda: ViolationRecord(last_updated=now))
        record.record(categories, content[:HISTORY_EXCERPT_LENGTH], now, self.config.history_max_entries)
        return record

    def record_badwords(
        self,
        key: UserKey,
        terms: Iterable[str],
        content: str,
        now: float,
    ) -> ViolationRecord:
        record = self.badwords.get_or_create(key, lambda: ViolationRecord(last_updated=now))
        record.record_message(terms, content[:HISTORY_EXCERPT_LENGTH], now, self.config.history_max_entries)
        return record

    def clear_violation_history(self, key: UserKey) -> None:
        self.violations.pop(key)

    # =========================================================================
    # Mute Tracking
    # =========================================================================

    def is_muted(self, key: UserKey) -> bool:
        return key in self.muted

    def mark_muted(self, key: UserKey) -> None:
        self.muted.add(key)

    def unmark_muted(self, key: UserKey) -> bool:
        if key in self.muted:
            self.muted.discard(key)
            return True
        return False

    def try_begin_long_mute(self, key: UserKey) -> bool:
        """Claim the long-mute marker. False if another message holds it."""
        if key in self.long_mute_in_progress:
            return False
        self.long_mute_in_progress.add(key)
        return True

    def end_long_mute(self, key: UserKey) -> None:
        self.long_mute_in_progress.discard(key)

    # =========================================================================
    # Mod Log Message IDs
    # =========================================================================

    def get_report_message(self, key: UserKey) -> Optional[int]:
        return self.report_messages.get(key)

    def set_report_message(self, key: UserKey, message_id: int) -> None:
        self.report_messages.set(key, message_id)

    # =========================================================================
    # Cleanup
    # =========================================================================

    def sweep(self, now: float) -> Dict[str, int]:
        """
        Run the periodic cleanup pass.

        Returns:
            Number of entries removed per map.
        """
        idle_cutoff = now - self.config.activity_idle
        violation_cutoff = now - self.config.violation_history_retention
        badword_cutoff = now - self.config.badword_history_retention
        warning_reset = self.config.warning_reset

        removed = {
            "activity": self.activity.sweep(lambda _, w: not w.has_activity_since(idle_cutoff)),
            "violations": self.violations.sweep(lambda _, r: r.last_updated < violation_cutoff),
            "badwords": self.badwords.sweep(lambda _, r: r.last_updated < badword_cutoff),
            "warnings": self.warnings.sweep(lambda _, w: now - w.last_warning > warning_reset),
        }

        # Report ids go with their last history
        removed["report_messages"] = self.report_messages.sweep(
            lambda k, _: k not in self.violations and k not in self.badwords
        )
        return removed

    def stats(self) -> Dict[str, int]:
        """Sizes of every map, for diagnostics."""
        return {
            "activity": len(self.activity),
            "violations": len(self.violations),
            "badwords": len(self.badwords),
            "warnings": len(self.warnings),
            "report_messages": len(self.report_messages),
            "muted": len(self.muted),
            "long_mute_in_progress": len(self.long_mute_in_progress),
        }


__all__ = ["ModerationStateStore", "UserKey"]
