"""
Sentinel Discord Bot - Configuration Module
===========================================

Centralized configuration management with environment variable validation.

DESIGN:
    This module provides a single source of truth for all configuration,
    loaded from environment variables at startup. Using a dataclass ensures
    type safety, and every moderation threshold can be overridden on its own.

    Key patterns:
    - Singleton pattern via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - Durations are read in milliseconds and stored in seconds

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Set
from zoneinfo import ZoneInfo


# =============================================================================
# Timezone Configuration
# =============================================================================

NY_TZ = ZoneInfo("America/New_York")
"""Eastern timezone for consistent timestamps across all bot operations."""


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    DESIGN:
        Only the token is required. Channel and role routing is optional
        and the matching feature is skipped when a value is missing.
        All IDs are integers to prevent string comparison bugs.
        All windows and durations are seconds (floats).
    """

    # -------------------------------------------------------------------------
    # Required: Discord
    # -------------------------------------------------------------------------

    discord_token: str

    # -------------------------------------------------------------------------
    # Optional: Channels
    # -------------------------------------------------------------------------

    moderation_log_channel_id: Optional[int] = None
    general_chat_id: Optional[int] = None
    bug_reports_channel_id: Optional[int] = None
    filter_exempt_channel_ids: Set[int] = field(default_factory=set)
    filter_enforced_category_ids: Set[int] = field(default_factory=set)

    # -------------------------------------------------------------------------
    # Optional: Roles & Permissions
    # -------------------------------------------------------------------------

    bypass_role_ids: Set[int] = field(default_factory=set)
    allowed_global_mention_ids: Set[int] = field(default_factory=set)
    muted_role_name: str = "muted"
    read_only_role_name: str = "Read Only"
    mod_role_name: str = "Staff"

    # -------------------------------------------------------------------------
    # Optional: Spam Detection
    # -------------------------------------------------------------------------

    rate_window: float = 8.0
    rate_max_messages: int = 5
    duplicate_window: float = 30.0
    duplicate_max: int = 3
    max_mentions: int = 5
    max_role_mentions: int = 2
    max_everyone_mentions: int = 1
    max_links: int = 3
    link_window: float = 60.0
    max_emojis: int = 15
    caps_enabled: bool = False
    caps_min_length: int = 10
    caps_percentage: int = 70
    invite_enabled: bool = True
    allowed_invites: List[str] = field(default_factory=list)

    # -------------------------------------------------------------------------
    # Optional: Escalation
    # -------------------------------------------------------------------------

    warnings_before_mute: int = 3
    mute_duration: float = 300.0            # Short mute after repeated warnings
    warning_reset: float = 3600.0           # Inactivity before warnings start over
    long_mute_threshold: int = 10           # Spam ledger total for the long mute
    long_mute_duration: float = 86400.0
    read_only_threshold: int = 10           # Shared ledger total for the read-only role

    # -------------------------------------------------------------------------
    # Optional: State Retention
    # -------------------------------------------------------------------------

    violation_history_retention: float = 7200.0
    badword_history_retention: float = 21600.0
    history_max_entries: int = 50
    cleanup_interval: float = 300.0
    activity_idle: float = 60.0
    max_map_entries: int = 5000

    # -------------------------------------------------------------------------
    # Optional: DM Rate Limiting
    # -------------------------------------------------------------------------

    dm_rate_limit: float = 2.0
    dm_global_limit: int = 5
    dm_global_window: float = 5.0

    # -------------------------------------------------------------------------
    # Optional: Webhooks
    # -------------------------------------------------------------------------

    error_webhook_url: Optional[str] = None


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Color palette for moderation log and DM embeds."""

    GREEN = 0x1F5E2E    # Resets, lifted mutes
    GOLD = 0xE6B84A     # Warnings
    ORANGE = 0xFF9800   # Spam detected
    RED = 0xDC3545      # Mutes, badwords

    SUCCESS = GREEN
    WARNING = GOLD
    SPAM = ORANGE
    MUTE = RED


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """
    Raised when required configuration is missing or invalid.

    DESIGN:
        Custom exception type allows callers to distinguish config
        errors from other startup failures.
    """

    pass


def _parse_int_optional(value: Optional[str]) -> Optional[int]:
    """
    Parse optional string to integer, returning None on failure.

    Args:
        value: String value from environment variable, may be None.

    Returns:
        Parsed integer or None if parsing fails.
    """
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_int_set(value: Optional[str]) -> Set[int]:
    """
    Parse comma-separated string to set of integers.

    Args:
        value: Comma-separated string of integers (e.g., "123,456,789").

    Returns:
        Set of parsed integers, empty set if input is None or empty.
    """
    if not value:
        return set()
    result = set()
    for part in value.split(","):
        part = part.strip()
        if part:
            try:
                result.add(int(part))
            except ValueError:
                pass  # Skip invalid entries silently
    return result


def _parse_str_list(value: Optional[str]) -> List[str]:
    """Parse comma-separated string to a list of non-empty stripped strings."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        from src.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        from src.core.logger import logger
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        from src.core.logger import logger
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _parse_ms_as_seconds(
    name: str,
    default_ms: int,
    min_ms: Optional[int] = None,
    max_ms: Optional[int] = None,
) -> float:
    """Read a millisecond env var and return it as seconds."""
    ms = _parse_int_with_default(os.getenv(name), default_ms, name, min_val=min_ms, max_val=max_ms)
    return ms / 1000.0


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """
    Validate URL format for webhooks.

    Args:
        value: URL string to validate.
        name: Variable name for warning messages.

    Returns:
        URL if valid, None if invalid or empty.
    """
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from src.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing or invalid.
    """
    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        raise ConfigValidationError("Missing required environment variables: DISCORD_TOKEN")

    # -------------------------------------------------------------------------
    # Build Config Object
    # -------------------------------------------------------------------------

    return Config(
        discord_token=discord_token,
        moderation_log_channel_id=_parse_int_optional(os.getenv("MODERATION_LOG_CHANNEL_ID")),
        general_chat_id=_parse_int_optional(os.getenv("GENERAL_CHAT_ID")),
        bug_reports_channel_id=_parse_int_optional(os.getenv("BUG_REPORTS_CHANNEL_ID")),
        filter_exempt_channel_ids=_parse_int_set(os.getenv("FILTER_EXEMPT_CHANNEL_IDS")),
        filter_enforced_category_ids=_parse_int_set(os.getenv("FILTER_ENFORCED_CATEGORY_IDS")),
        bypass_role_ids=_parse_int_set(os.getenv("BYPASS_ROLE_IDS")),
        allowed_global_mention_ids=_parse_int_set(os.getenv("ALLOWED_GLOBAL_MENTION_IDS")),
        muted_role_name=os.getenv("MUTED_ROLE_NAME", "muted"),
        read_only_role_name=os.getenv("READ_ONLY_ROLE_NAME", "Read Only"),
        mod_role_name=os.getenv("MOD_ROLE_NAME", "Staff"),
        # Spam detection
        rate_window=_parse_ms_as_seconds("SPAM_RATE_WINDOW_MS", 8000, min_ms=1000),
        rate_max_messages=_parse_int_with_default(
            os.getenv("SPAM_RATE_MAX_MESSAGES"), 5, "SPAM_RATE_MAX_MESSAGES", min_val=1, max_val=100
        ),
        duplicate_window=_parse_ms_as_seconds("SPAM_DUP_WINDOW_MS", 30000, min_ms=1000),
        duplicate_max=_parse_int_with_default(
            os.getenv("SPAM_DUP_MAX"), 3, "SPAM_DUP_MAX", min_val=2, max_val=50
        ),
        max_mentions=_parse_int_with_default(
            os.getenv("SPAM_MAX_MENTIONS"), 5, "SPAM_MAX_MENTIONS", min_val=1, max_val=100
        ),
        max_role_mentions=_parse_int_with_default(
            os.getenv("SPAM_MAX_ROLE_MENTIONS"), 2, "SPAM_MAX_ROLE_MENTIONS", min_val=0, max_val=100
        ),
        max_everyone_mentions=_parse_int_with_default(
            os.getenv("SPAM_MAX_EVERYONE_MENTIONS"), 1, "SPAM_MAX_EVERYONE_MENTIONS", min_val=0, max_val=10
        ),
        max_links=_parse_int_with_default(
            os.getenv("SPAM_MAX_LINKS"), 3, "SPAM_MAX_LINKS", min_val=0, max_val=100
        ),
        link_window=_parse_ms_as_seconds("SPAM_LINK_WINDOW_MS", 60000, min_ms=1000),
        max_emojis=_parse_int_with_default(
            os.getenv("SPAM_MAX_EMOJIS"), 15, "SPAM_MAX_EMOJIS", min_val=1, max_val=500
        ),
        caps_enabled=os.getenv("SPAM_CAPS_ENABLED") == "true",
        caps_min_length=_parse_int_with_default(
            os.getenv("SPAM_CAPS_MIN_LENGTH"), 10, "SPAM_CAPS_MIN_LENGTH", min_val=1, max_val=2000
        ),
        caps_percentage=_parse_int_with_default(
            os.getenv("SPAM_CAPS_PERCENTAGE"), 70, "SPAM_CAPS_PERCENTAGE", min_val=1, max_val=100
        ),
        invite_enabled=os.getenv("SPAM_INVITE_ENABLED") != "false",
        allowed_invites=_parse_str_list(os.getenv("SPAM_ALLOWED_INVITES")),
        # Escalation
        warnings_before_mute=_parse_int_with_default(
            os.getenv("SPAM_WARNINGS_BEFORE_MUTE"), 3, "SPAM_WARNINGS_BEFORE_MUTE", min_val=1, max_val=100
        ),
        mute_duration=_parse_ms_as_seconds("SPAM_MUTE_DURATION_MS", 5 * 60 * 1000, min_ms=1000),
        warning_reset=_parse_ms_as_seconds("SPAM_WARNING_RESET_MS", 60 * 60 * 1000, min_ms=1000),
        long_mute_threshold=_parse_int_with_default(
            os.getenv("SPAM_LONG_MUTE_THRESHOLD"), 10, "SPAM_LONG_MUTE_THRESHOLD", min_val=1, max_val=1000
        ),
        long_mute_duration=_parse_ms_as_seconds("SPAM_LONG_MUTE_DURATION_MS", 24 * 60 * 60 * 1000, min_ms=1000),
        read_only_threshold=_parse_int_with_default(
            os.getenv("READ_ONLY_THRESHOLD"), 10, "READ_ONLY_THRESHOLD", min_val=1, max_val=1000
        ),
        # State retention
        violation_history_retention=_parse_ms_as_seconds(
            "VIOLATION_HISTORY_RETENTION_MS", 2 * 60 * 60 * 1000, min_ms=1000
        ),
        badword_history_retention=_parse_ms_as_seconds(
            "BADWORD_HISTORY_RETENTION_MS", 6 * 60 * 60 * 1000, min_ms=1000
        ),
        history_max_entries=_parse_int_with_default(
            os.getenv("VIOLATION_HISTORY_MAX_ENTRIES"), 50, "VIOLATION_HISTORY_MAX_ENTRIES", min_val=1, max_val=1000
        ),
        cleanup_interval=_parse_ms_as_seconds("MODERATION_CLEANUP_INTERVAL_MS", 5 * 60 * 1000, min_ms=1000),
        activity_idle=_parse_ms_as_seconds("ACTIVITY_IDLE_MS", 60 * 1000, min_ms=1000),
        max_map_entries=_parse_int_with_default(
            os.getenv("MAX_MAP_ENTRIES"), 5000, "MAX_MAP_ENTRIES", min_val=10, max_val=1_000_000
        ),
        # DM rate limiting
        dm_rate_limit=_parse_ms_as_seconds("DM_RATE_LIMIT_MS", 2000, min_ms=0),
        dm_global_limit=_parse_int_with_default(
            os.getenv("DM_GLOBAL_LIMIT"), 5, "DM_GLOBAL_LIMIT", min_val=1, max_val=100
        ),
        dm_global_window=_parse_ms_as_seconds("DM_GLOBAL_WINDOW_MS", 5000, min_ms=100),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Returns:
        The global Config instance.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


# =============================================================================
# Config Validation & Logging
# =============================================================================

def validate_and_log_config() -> None:
    """
    Validate configuration and log results at startup.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from src.core.logger import logger

    config = get_config()

    missing_optional = []
    if not config.moderation_log_channel_id:
        missing_optional.append("MODERATION_LOG_CHANNEL_ID")
    if not config.general_chat_id:
        missing_optional.append("GENERAL_CHAT_ID")

    for var in missing_optional:
        logger.info(f"Optional config not set: {var}")

    logger.tree("Configuration Validated", [
        ("Required", "✅ All required variables set"),
        ("Rate Limit", f"{config.rate_max_messages} msgs / {config.rate_window:g}s"),
        ("Duplicates", f"{config.duplicate_max}x / {config.duplicate_window:g}s"),
        ("Warnings Before Mute", str(config.warnings_before_mute)),
        ("Long Mute Threshold", str(config.long_mute_threshold)),
        ("Read-Only Threshold", str(config.read_only_threshold)),
        ("Caps Detection", "Enabled" if config.caps_enabled else "Disabled"),
        ("Invite Detection", "Enabled" if config.invite_enabled else "Disabled"),
        ("Bypass Roles", str(len(config.bypass_role_ids))),
    ], emoji="⚙️")


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "NY_TZ",
    "get_config",
    "load_config",
    "validate_and_log_config",
]
