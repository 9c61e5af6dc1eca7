"""
SentinelBot - Moderation Constants
==================================

Compiled patterns, host lists and reason labels used by the detectors.
Numeric thresholds live in src.core.config so they can be overridden.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import re
from typing import Pattern, Tuple

# =============================================================================
# Normalization Patterns
# =============================================================================

ZERO_WIDTH_PATTERN: Pattern = re.compile(r"[\u200B-\u200D\uFEFF]")
"""Zero-width characters used to split words invisibly."""

OBFUSCATION_STAR_PATTERN: Pattern = re.compile(r"\*")
"""Asterisks inside words (p**n -> pn)."""

SYMBOL_PATTERN: Pattern = re.compile(r"[\-_. ,/\\+~=`'\"()\[\]{}<>^%$#@!?;:|]")
"""Punctuation and symbols replaced by a single space."""

WHITESPACE_PATTERN: Pattern = re.compile(r"\s+")

REPEAT_PATTERN: Pattern = re.compile(r"(.)\1{2,}")
"""A run of 3+ identical characters."""

REPEAT_KEEP: int = 2
"""Length a repeated run is compressed down to."""

LEET_SUBSTITUTIONS: Tuple[Tuple[Pattern, str], ...] = (
    (re.compile(r"0"), "o"),
    (re.compile(r"[1l!|]"), "i"),
    (re.compile(r"[3?]"), "e"),
    (re.compile(r"4|@"), "a"),
    (re.compile(r"5|\$"), "s"),
    (re.compile(r"7"), "t"),
    (re.compile(r"8"), "b"),
    (re.compile(r"9"), "g"),
)
"""Leetspeak folds, applied in order (spam normalization only)."""

# =============================================================================
# Badword Patterns
# =============================================================================

URL_STRIP_PATTERN: Pattern = re.compile(r"https?://\S+|discord\.gg/\S+|www\.\S+", re.IGNORECASE)
"""URLs removed before badword matching (domain names cause false hits)."""

TOKEN_PATTERN: Pattern = re.compile(r"[a-z0-9]+")
"""Contiguous alphanumeric runs after normalization."""

NON_TOKEN_PATTERN: Pattern = re.compile(r"[^a-z0-9]")

# =============================================================================
# Spam Patterns
# =============================================================================

URL_PATTERN: Pattern = re.compile(r"https?://[^\s]+", re.IGNORECASE)

DISCORD_INVITE_PATTERN: Pattern = re.compile(
    r"(?:discord\.(?:gg|io|me|li)|discordapp\.com/invite)/[a-zA-Z0-9]+",
    re.IGNORECASE,
)

EMOJI_PATTERN: Pattern = re.compile(
    r"<a?:[a-zA-Z0-9_]+:\d+>"
    r"|[\U0001F300-\U0001F9FF]"
    r"|[\u2600-\u26FF]"
    r"|[\u2700-\u27BF]"
)
"""Custom emoji tags plus the common emoji code point blocks."""

ASCII_LETTER_PATTERN: Pattern = re.compile(r"[A-Za-z]")

GIF_HOSTS: Tuple[str, ...] = (
    "tenor.com",
    "media.tenor.com",
    "giphy.com",
    "media.giphy.com",
)
"""GIF hosts whose links never count as link spam (subdomains included)."""

STRETCHED_MIN_LENGTH: int = 6
STRETCHED_RATIO: float = 0.55
"""Stretched text: compressed length / normalized length at or below this."""

# =============================================================================
# Violation Labels
# =============================================================================

REASON_RATE_LIMIT = "Rate limit exceeded (too many messages)"
REASON_DUPLICATE = "Duplicate message spam"
REASON_MENTION_PREFIX = "Mention spam"
REASON_LINK = "Link spam (too many links)"
REASON_INVITE_PREFIX = "Unauthorized Discord invite"
REASON_EMOJI = "Emoji spam (excessive emojis)"
REASON_CAPS = "Caps spam (excessive capitals)"
REASON_STRETCHED = "Stretched characters/letters"
REASON_EVERYONE = "@everyone/@here mention not allowed"

CATEGORY_BADWORD = "Bad Words"

# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "ZERO_WIDTH_PATTERN",
    "OBFUSCATION_STAR_PATTERN",
    "SYMBOL_PATTERN",
    "WHITESPACE_PATTERN",
    "REPEAT_PATTERN",
    "REPEAT_KEEP",
    "LEET_SUBSTITUTIONS",
    "URL_STRIP_PATTERN",
    "TOKEN_PATTERN",
    "NON_TOKEN_PATTERN",
    "URL_PATTERN",
    "DISCORD_INVITE_PATTERN",
    "EMOJI_PATTERN",
    "ASCII_LETTER_PATTERN",
    "GIF_HOSTS",
    "STRETCHED_MIN_LENGTH",
    "STRETCHED_RATIO",
    "REASON_RATE_LIMIT",
    "REASON_DUPLICATE",
    "REASON_MENTION_PREFIX",
    "REASON_LINK",
    "REASON_INVITE_PREFIX",
    "REASON_EMOJI",
    "REASON_CAPS",
    "REASON_STRETCHED",
    "REASON_EVERYONE",
    "CATEGORY_BADWORD",
]
