"""
SentinelBot - Database Type Definitions
=======================================

TypedDict definitions for database records.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Optional, TypedDict


class MuteRecord(TypedDict):
    """Type for persisted mute records (keyed by guild then user)."""
    expires_at: float
    reason: Optional[str]
    created_at: float


__all__ = [
    "MuteRecord",
]
