"""
SentinelBot - Database Violation Ledger Module
==============================================

Persisted per-user violation counters.

DESIGN:
    Two ledgers share one table and are never merged:
    - read_only: badword and spam violations, compared against the
      read-only role threshold
    - spam: spam violations only, compared against the long mute
      threshold and reset when that mute completes. The reset due time
      is kept in ledger_resets so it survives a restart.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import List, Tuple, TYPE_CHECKING

from src.core.logger import logger

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class LedgersMixin:
    """Mixin for violation ledger operations."""

    def increment_violations(
        self: "DatabaseManager",
        ledger: str,
        guild_id: int,
        user_id: int,
        delta: int = 1,
    ) -> int:
        """
        Add delta to a user's ledger and return the new total.

        Args:
            ledger: Ledger name (see src.core.constants).
            guild_id: Guild ID.
            user_id: User ID.
            delta: Number of violations to add.

        Returns:
            New cumulative count.
        """
        now = time.time()
        with self.transaction() as tx:
            tx.execute(
                """INSERT INTO violation_ledgers (ledger, guild_id, user_id, count, updated_at)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(ledger, guild_id, user_id)
                   DO UPDATE SET count = count + excluded.count, updated_at = excluded.updated_at""",
                (ledger, guild_id, user_id, delta, now)
            )
            tx.execute(
                "SELECT count FROM violation_ledgers WHERE ledger = ? AND guild_id = ? AND user_id = ?",
                (ledger, guild_id, user_id)
            )
            row = tx.fetchone()

        total = row["count"] if row else 0
        logger.debug("Violation Ledger Incremented", [
            ("Ledger", ledger),
            ("User ID", str(user_id)),
            ("Delta", str(delta)),
            ("Total", str(total)),
        ])
        return total

    def get_violation_count(self: "DatabaseManager", ledger: str, guild_id: int, user_id: int) -> int:
        """Get a user's ledger total (0 when no record exists)."""
        row = self.fetchone(
            "SELECT count FROM violation_ledgers WHERE ledger = ? AND guild_id = ? AND user_id = ?",
            (ledger, guild_id, user_id)
        )
        return row["count"] if row else 0

    def reset_violations(self: "DatabaseManager", ledger: str, guild_id: int, user_id: int) -> None:
        """Reset a user's ledger to zero and drop any pending reset for it."""
        with self.transaction() as tx:
            tx.execute(
                "DELETE FROM violation_ledgers WHERE ledger = ? AND guild_id = ? AND user_id = ?",
                (ledger, guild_id, user_id)
            )
            tx.execute(
                "DELETE FROM ledger_resets WHERE ledger = ? AND guild_id = ? AND user_id = ?",
                (ledger, guild_id, user_id)
            )

        logger.tree("Violation Ledger Reset", [
            ("Ledger", ledger),
            ("Guild ID", str(guild_id)),
            ("User ID", str(user_id)),
        ], emoji="🧹")

    # =========================================================================
    # Scheduled Resets
    # =========================================================================

    def schedule_ledger_reset(
        self: "DatabaseManager",
        ledger: str,
        guild_id: int,
        user_id: int,
        due_at: float,
    ) -> None:
        """
        Persist the time a user's ledger is due to be reset.

        DESIGN:
            The in-memory timer is lost on restart; this row lets the
            next start finish an overdue reset or schedule a future one.
            Written whether the mute used the role or a native timeout.
        """
        self.execute(
            """INSERT OR REPLACE INTO ledger_resets (ledger, guild_id, user_id, due_at)
               VALUES (?, ?, ?, ?)""",
            (ledger, guild_id, user_id, due_at)
        )

    def get_ledger_resets(self: "DatabaseManager", ledger: str) -> List[Tuple[int, int, float]]:
        """Get every pending reset of a ledger as (guild_id, user_id, due_at)."""
        rows = self.fetchall(
            "SELECT guild_id, user_id, due_at FROM ledger_resets WHERE ledger = ? ORDER BY due_at",
            (ledger,)
        )
        return [(row["guild_id"], row["user_id"], float(row["due_at"])) for row in rows]


__all__ = ["LedgersMixin"]
