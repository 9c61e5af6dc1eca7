"""
Sentinel Discord Bot - Utils Package
====================================

Utility modules shared by the bot and its services.

DESIGN:
    Utils are helper functions and classes that can be used anywhere
    in the codebase. They do not depend on bot state.

Available Utilities:
    BoundedMap: Capacity-capped map with oldest-first eviction
    TimerRegistry: Cancellable deferred callbacks keyed by scope
    Async helpers: Fault-isolated side effects and background tasks
    DmRateLimiter: Per-user and global DM throttling
    Validators: Discord ID validation for external input

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# =============================================================================
# Utility Imports
# =============================================================================

from .bounded_map import BoundedMap
from .timers import TimerRegistry
from .async_utils import create_safe_task, gather_with_logging, safe_async_operation
from .dm_helpers import DmRateLimiter
from .validators import ValidationError, Validators, validate_discord_id


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Bounded map
    "BoundedMap",
    # Timers
    "TimerRegistry",
    # Async
    "create_safe_task",
    "gather_with_logging",
    "safe_async_operation",
    # DMs
    "DmRateLimiter",
    # Validation
    "ValidationError",
    "Validators",
    "validate_discord_id",
]
