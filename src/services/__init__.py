"""
Sentinel Discord Bot - Services Package
=======================================

Services owned by the bot process.

DESIGN:
    Services are standalone classes created once in bot.py. They should:
    - Be async-compatible for non-blocking I/O
    - Handle their own error cases gracefully
    - Expose start/stop hooks for the bot lifecycle

Available Services:
    ModerationService: Badword filter, spam detection and escalation

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# =============================================================================
# Service Imports
# =============================================================================

from .moderation import ModerationService


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "ModerationService",
]
