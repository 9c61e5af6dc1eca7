"""
Sentinel Discord Bot - Cancellable Timers
=========================================

Deferred actions keyed by (scope, key), e.g. ("mute_expiry", (guild_id, user_id)).

DESIGN:
    Each timer is an asyncio task that sleeps then runs a callback.
    Scheduling the same (scope, key) again cancels the previous timer,
    so a reschedule never fires twice. A finished timer only removes
    its own registry entry, never a newer one for the same key.

Usage:
    timers = TimerRegistry()
    timers.schedule("mute_expiry", (guild_id, user_id), 300, lift_mute)
    timers.cancel("mute_expiry", (guild_id, user_id))

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

from src.core.logger import logger


TimerKey = Tuple[str, Hashable]


class TimerRegistry:
    """Registry of named, cancellable deferred callbacks."""

    def __init__(self) -> None:
        self._tasks: Dict[TimerKey, asyncio.Task] = {}

    def schedule(
        self,
        scope: str,
        key: Hashable,
        delay: float,
        callback: Callable[[], Awaitable[Any]],
    ) -> asyncio.Task:
        """
        Run callback after delay seconds, replacing any timer for (scope, key).

        Args:
            scope: Timer family (mute expiry, ledger reset, ...).
            key: Subject inside the scope.
            delay: Seconds to wait. Negative values run immediately.
            callback: Zero-argument coroutine function.

        Returns:
            The scheduled task.
        """
        timer_key = (scope, key)
        self.cancel(scope, key)

        task = asyncio.create_task(self._run(timer_key, max(0.0, delay), callback))
        self._tasks[timer_key] = task
        return task

    def cancel(self, scope: str, key: Hashable) -> bool:
        """
        Cancel a pending timer.

        Returns:
            True if a pending timer was cancelled.
        """
        task = self._tasks.pop((scope, key), None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def is_scheduled(self, scope: str, key: Hashable) -> bool:
        task = self._tasks.get((scope, key))
        return task is not None and not task.done()

    def cancel_all(self) -> int:
        """Cancel every pending timer (shutdown)."""
        cancelled = 0
        for task in self._tasks.values():
            if not task.done():
                task.cancel()
                cancelled += 1
        self._tasks.clear()
        return cancelled

    def __len__(self) -> int:
        return sum(1 for t in self._tasks.values() if not t.done())

    async def _run(
        self,
        timer_key: TimerKey,
        delay: float,
        callback: Callable[[], Awaitable[Any]],
    ) -> None:
        await asyncio.sleep(delay)

        # Drop our own entry before running so the callback may reschedule
        current: Optional[asyncio.Task] = self._tasks.get(timer_key)
        if current is asyncio.current_task():
            del self._tasks[timer_key]

        try:
            await callback()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Scheduled Timer Failed", [
                ("Scope", timer_key[0]),
                ("Key", str(timer_key[1])),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])


__all__ = ["TimerRegistry"]
