"""
SentinelBot - DM Helper Utilities
=================================

Rate-limited direct messages for moderation notices.

DESIGN:
    Discord throttles bots that open many DMs at once. Two limits apply
    before every send:
    - per user: a minimum gap between two DMs to the same user
    - global: at most N DMs inside a sliding window
    The sender waits out whichever delay is longer, then sends once.
    DMs are best-effort: closed DMs and API errors are logged, not raised.

Usage:
    from src.utils.dm_helpers import DmRateLimiter

    limiter = DmRateLimiter(min_gap=2.0, global_limit=5, global_window=5.0)
    sent = await limiter.send(member, embed=notice, context="Long Mute DM")

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import time
from collections import deque
from typing import Deque, Dict, Optional, Union

import discord

from src.core.logger import logger


class DmRateLimiter:
    """Per-user and global rate limiting for outgoing DMs."""

    # Forget per-user timestamps older than this on periodic pruning
    USER_ENTRY_TTL: float = 60.0

    def __init__(self, min_gap: float = 2.0, global_limit: int = 5, global_window: float = 5.0) -> None:
        self.min_gap = min_gap
        self.global_limit = global_limit
        self.global_window = global_window
        self._last_dm: Dict[int, float] = {}
        self._recent: Deque[float] = deque()
        self._sent_total = 0

    # =========================================================================
    # Bookkeeping
    # =========================================================================

    def _prune_global(self, now: float) -> None:
        while self._recent and self._recent[0] < now - self.global_window:
            self._recent.popleft()

    def get_delay(self, user_id: int, now: Optional[float] = None) -> float:
        """Seconds to wait before a DM to user_id is allowed (0 = now)."""
        now = time.monotonic() if now is None else now

        last = self._last_dm.get(user_id)
        user_delay = 0.0 if last is None else max(0.0, self.min_gap - (now - last))

        self._prune_global(now)
        global_delay = 0.0
        if len(self._recent) >= self.global_limit:
            global_delay = max(0.0, self.global_window - (now - self._recent[0]))

        return max(user_delay, global_delay)

    def can_send(self, user_id: int, now: Optional[float] = None) -> bool:
        return self.get_delay(user_id, now) == 0.0

    def record(self, user_id: int, now: Optional[float] = None) -> None:
        """Record a DM to user_id."""
        now = time.monotonic() if now is None else now
        self._last_dm[user_id] = now
        self._recent.append(now)
        self._sent_total += 1

        if self._sent_total % 100 == 0:
            cutoff = now - self.USER_ENTRY_TTL
            for uid in [u for u, ts in self._last_dm.items() if ts < cutoff]:
                del self._last_dm[uid]

    # =========================================================================
    # Sending
    # =========================================================================

    async def send(
        self,
        user: Union[discord.User, discord.Member],
        embed: Optional[discord.Embed] = None,
        content: Optional[str] = None,
        context: Optional[str] = None,
    ) -> bool:
        """
        Send a DM after waiting for the rate limits.

        Returns:
            True if the DM was delivered, False otherwise.
        """
        delay = self.get_delay(user.id)
        if delay > 0:
            await asyncio.sleep(delay)
        self.record(user.id)

        try:
            await user.send(content=content, embed=embed)
            return True
        except discord.Forbidden:
            logger.debug("DM Blocked", [("Context", context or "N/A"), ("User ID", str(user.id))])
            return False
        except discord.HTTPException as e:
            logger.warning("DM Send Failed", [
                ("Context", context or "N/A"),
                ("User ID", str(user.id)),
                ("Error", str(e)[:100]),
            ])
            return False


__all__ = ["DmRateLimiter"]
