"""
SentinelBot - Database Module
=============================

Centralized database management for SentinelBot.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from src.core.database.manager import (
    DatabaseManager,
    get_db,
    DATA_DIR,
    DB_PATH,
)
from src.core.database.models import MuteRecord

__all__ = [
    "DatabaseManager",
    "get_db",
    "DATA_DIR",
    "DB_PATH",
    "MuteRecord",
]
