"""
SentinelBot - Centralized Constants
===================================

Fixed values that are not worth an environment variable.
Import from this module instead of hardcoding values.

Author: John Hamwi
Server: discord.gg/syria
"""

# =============================================================================
# Database Constants
# =============================================================================

DB_CONNECTION_TIMEOUT = 30.0          # sqlite3.connect timeout (seconds)
SQLITE_BUSY_TIMEOUT = 5000            # PRAGMA busy_timeout (milliseconds)

# =============================================================================
# Violation Ledgers
# =============================================================================

LEDGER_READ_ONLY = "read_only"        # Badword + spam, drives the read-only role
LEDGER_SPAM = "spam"                  # Spam only, drives the long mute

# =============================================================================
# Timer Scopes
# =============================================================================

TIMER_MUTE_EXPIRY = "mute_expiry"
TIMER_LEDGER_RESET = "ledger_reset"

# =============================================================================
# Text Limits
# =============================================================================

HISTORY_EXCERPT_LENGTH = 100          # Excerpt stored per violation entry
REPORT_PREVIEW_LENGTH = 200           # Message preview in mod-log reports
REPORT_MAX_ENTRIES = 8                # Recent violations listed in a report

# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "DB_CONNECTION_TIMEOUT",
    "SQLITE_BUSY_TIMEOUT",
    "LEDGER_READ_ONLY",
    "LEDGER_SPAM",
    "TIMER_MUTE_EXPIRY",
    "TIMER_LEDGER_RESET",
    "HISTORY_EXCERPT_LENGTH",
    "REPORT_PREVIEW_LENGTH",
    "REPORT_MAX_ENTRIES",
]
