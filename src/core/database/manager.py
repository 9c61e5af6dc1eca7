"""
SentinelBot - Database Manager
==============================

SQLite store for the two pieces of moderation state that must survive
a restart: active role mutes and the violation ledgers.

DESIGN:
    Every write commits on its own, so a crash loses at most the write
    in flight. Multi-statement updates (increment then read back) run
    inside transaction(), which holds the lock for the whole block.
    The file is opened synchronously when the bot starts and closed
    on shutdown.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from src.core.logger import logger
from src.core.constants import DB_CONNECTION_TIMEOUT, SQLITE_BUSY_TIMEOUT

from src.core.database.schema import SchemaMixin
from src.core.database.mutes import MutesMixin
from src.core.database.ledgers import LedgersMixin


# =============================================================================
# Constants
# =============================================================================

# Path: src/core/database/manager.py -> project root / data
DATA_DIR: Path = Path(__file__).parent.parent.parent.parent / "data"
DB_PATH: Path = DATA_DIR / "moderation.db"

CONNECTION_PRAGMAS: Tuple[str, ...] = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA temp_store=MEMORY",
    f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT}",
)


# =============================================================================
# Database Manager (Singleton)
# =============================================================================

class DatabaseManager(
    SchemaMixin,
    MutesMixin,
    LedgersMixin,
):
    """
    Process-wide moderation database.

    DESIGN: One connection shared by the event loop and any executor
    thread, guarded by a lock. Rows come back as sqlite3.Row.
    """

    _instance: Optional["DatabaseManager"] = None
    _lock: threading.Lock = threading.Lock()

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return

        self._db_lock: threading.Lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self.path: Path = DB_PATH

        DATA_DIR.mkdir(parents=True, exist_ok=True)
        self._connect()
        self._init_tables()
        healthy = self._check_integrity()
        self._initialized = True

        logger.tree("Moderation Database Ready", [
            ("Path", str(self.path)),
            ("Active Mutes", str(self.count_mutes())),
            ("Integrity", "OK" if healthy else "FAILED"),
        ], emoji="🗄️")

    # =========================================================================
    # Connection Management
    # =========================================================================

    def _connect(self) -> None:
        try:
            conn = sqlite3.connect(
                str(self.path),
                check_same_thread=False,
                timeout=DB_CONNECTION_TIMEOUT,
            )
            for pragma in CONNECTION_PRAGMAS:
                conn.execute(pragma)
            conn.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            logger.error("Moderation Database Connection Failed", [
                ("Path", str(self.path)),
                ("Error", str(e)),
            ])
            raise
        self._conn = conn

    def _ensure_connection(self) -> sqlite3.Connection:
        """Live connection, reopened if it was closed or went stale."""
        if self._conn is None:
            self._connect()
            return self._conn
        try:
            self._conn.execute("SELECT 1")
        except sqlite3.Error:
            self._connect()
        return self._conn

    def _check_integrity(self) -> bool:
        """Run a quick check so a damaged file is reported at startup."""
        row = self.fetchone("PRAGMA quick_check")
        if row is not None and row[0] == "ok":
            return True
        logger.error("Moderation Database Integrity Check Failed", [
            ("Path", str(self.path)),
            ("Result", str(row[0] if row else "no result")[:200]),
        ])
        return False

    def close(self) -> None:
        with self._db_lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        logger.info("Moderation Database Closed")

    # =========================================================================
    # Queries
    # =========================================================================

    def execute(self, query: str, params: Tuple = (), commit: bool = True) -> sqlite3.Cursor:
        """Run one statement under the lock, committing unless told not to."""
        with self._db_lock:
            conn = self._ensure_connection()
            cursor = conn.execute(query, params)
            if commit:
                conn.commit()
            return cursor

    def fetchone(self, query: str, params: Tuple = ()) -> Optional[sqlite3.Row]:
        return self.execute(query, params, commit=False).fetchone()

    def fetchall(self, query: str, params: Tuple = ()) -> List[sqlite3.Row]:
        return self.execute(query, params, commit=False).fetchall()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """
        Atomic block of statements.

        Usage:
            with db.transaction() as tx:
                tx.execute("UPDATE ...", (...))
                tx.execute("SELECT ...", (...))
                row = tx.fetchone()

        Commits when the block exits normally, rolls back and re-raises
        otherwise.
        """
        with self._db_lock:
            conn = self._ensure_connection()
            conn.execute("BEGIN IMMEDIATE")
            cursor = conn.cursor()
            try:
                yield cursor
            except BaseException as e:
                conn.rollback()
                logger.warning("Moderation Database Rollback", [
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ])
                raise
            conn.commit()


# =============================================================================
# Global Instance
# =============================================================================

def get_db() -> DatabaseManager:
    """Get the global database manager instance."""
    return DatabaseManager()


__all__ = ["DatabaseManager", "get_db", "DB_PATH", "DATA_DIR"]
