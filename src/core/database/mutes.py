"""
SentinelBot - Database Mute Operations Module
=============================================

Persisted role mutes with expiry, keyed by guild then user.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import Dict, Optional, TYPE_CHECKING

from src.core.logger import logger
from src.core.database.models import MuteRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class MutesMixin:
    """Mixin for mute-related database operations."""

    # =========================================================================
    # Write Operations
    # =========================================================================

    def record_mute(
        self: "DatabaseManager",
        guild_id: int,
        user_id: int,
        expires_at: float,
        reason: Optional[str] = None,
    ) -> None:
        """
        Persist an active mute.

        DESIGN:
            Uses INSERT OR REPLACE so a re-mute overwrites the expiry.
            Committed immediately so a crash never loses an active mute.

        Args:
            guild_id: Guild where the mute applies.
            user_id: Muted user.
            expires_at: Unix timestamp when the mute ends.
            reason: Optional reason text.
        """
        self.execute(
            """INSERT OR REPLACE INTO active_mutes
               (guild_id, user_id, expires_at, reason, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (guild_id, user_id, expires_at, reason, time.time())
        )

        logger.tree("Mute Persisted", [
            ("Guild ID", str(guild_id)),
            ("User ID", str(user_id)),
            ("Expires In", f"{max(0, int(expires_at - time.time()))}s"),
            ("Reason", (reason or "None")[:50]),
        ], emoji="💾")

    def remove_mute(self: "DatabaseManager", guild_id: int, user_id: int) -> bool:
        """
        Remove a persisted mute.

        Returns:
            True if a record existed and was removed.
        """
        cursor = self.execute(
            "DELETE FROM active_mutes WHERE guild_id = ? AND user_id = ?",
            (guild_id, user_id)
        )
        return cursor.rowcount > 0

    # =========================================================================
    # Read Operations
    # =========================================================================

    def is_muted(self: "DatabaseManager", guild_id: int, user_id: int) -> bool:
        """Check whether a persisted mute exists for the user."""
        row = self.fetchone(
            "SELECT 1 FROM active_mutes WHERE guild_id = ? AND user_id = ?",
            (guild_id, user_id)
        )
        return row is not None

    def count_mutes(self: "DatabaseManager") -> int:
        row = self.fetchone("SELECT COUNT(*) FROM active_mutes")
        return row[0] if row else 0

    def get_all_mutes(self: "DatabaseManager") -> Dict[int, Dict[int, MuteRecord]]:
        """
        Get every persisted mute as guild_id -> user_id -> record.

        DESIGN:
            Rows with an unreadable expiry are dropped with a warning
            instead of failing the restore at startup.
        """
        result: Dict[int, Dict[int, MuteRecord]] = {}
        for row in self.fetchall("SELECT * FROM active_mutes"):
            try:
                expires_at = float(row["expires_at"])
            except (TypeError, ValueError):
                logger.warning("Corrupt Mute Record Dropped", [
                    ("Guild ID", str(row["guild_id"])),
                    ("User ID", str(row["user_id"])),
                    ("Expires At", str(row["expires_at"])[:30]),
                ])
                self.remove_mute(row["guild_id"], row["user_id"])
                continue

            result.setdefault(row["guild_id"], {})[row["user_id"]] = MuteRecord(
                expires_at=expires_at,
                reason=row["reason"],
                created_at=row["created_at"],
            )
        return result


__all__ = ["MutesMixin"]
