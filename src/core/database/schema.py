"""
Database Schema Module
======================

Table definitions for the moderation database.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class SchemaMixin:
    """Mixin for database schema initialization."""

    def _init_tables(self: "DatabaseManager") -> None:
        """
        Initialize all database tables.

        DESIGN: Tables are created if not exist, allowing safe restarts.
        Indexes added for frequently queried columns.
        """
        conn = self._ensure_connection()
        cursor = conn.cursor()

        # -----------------------------------------------------------------
        # Active Mutes Table
        # DESIGN: A row exists only while the user is muted by the bot.
        # Role-based mutes only; native timeouts expire on their own.
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS active_mutes (
                guild_id INTEGER NOT NULL,
                user_id INTEGER NOT NULL,
                expires_at REAL NOT NULL,
                reason TEXT,
                created_at REAL NOT NULL,
                PRIMARY KEY (guild_id, user_id)
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_active_mutes_expires ON active_mutes(expires_at)"
        )

        # -----------------------------------------------------------------
        # Violation Ledgers Table
        # DESIGN: One counter per (ledger, guild, user). Two ledgers are
        # kept apart: "read_only" (badword + spam) and "spam" (spam only).
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS violation_ledgers (
                ledger TEXT NOT NULL,
                guild_id INTEGER NOT NULL,
                user_id INTEGER NOT NULL,
                count INTEGER NOT NULL DEFAULT 0,
                updated_at REAL NOT NULL,
                PRIMARY KEY (ledger, guild_id, user_id)
            )
        """)

        # -----------------------------------------------------------------
        # Ledger Resets Table
        # DESIGN: When a ledger is due to be reset (spam ledger at the end
        # of a long mute). Independent of active_mutes, so a mute applied
        # as a native timeout still gets its reset after a restart.
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS ledger_resets (
                ledger TEXT NOT NULL,
                guild_id INTEGER NOT NULL,
                user_id INTEGER NOT NULL,
                due_at REAL NOT NULL,
                PRIMARY KEY (ledger, guild_id, user_id)
            )
        """)

        conn.commit()


__all__ = ["SchemaMixin"]
