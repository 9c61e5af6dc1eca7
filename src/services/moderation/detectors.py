"""
SentinelBot - Spam Signal Detectors
===================================

Independent spam predicates over a message and the author's activity window.

DESIGN:
    Each detector returns a DetectionResult (flag + reason) and never
    short-circuits the others: detect_spam() runs all of them and collects
    every reason before any action is taken.

    Stateful detectors (rate, duplicate, link) update the window they are
    given, so they run exactly once per message.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass
from typing import Any, Iterable, List
from urllib.parse import urlsplit

from src.core.config import Config
from src.services.moderation.constants import (
    ASCII_LETTER_PATTERN,
    DISCORD_INVITE_PATTERN,
    EMOJI_PATTERN,
    GIF_HOSTS,
    REASON_CAPS,
    REASON_DUPLICATE,
    REASON_EMOJI,
    REASON_EVERYONE,
    REASON_INVITE_PREFIX,
    REASON_LINK,
    REASON_MENTION_PREFIX,
    REASON_RATE_LIMIT,
    REASON_STRETCHED,
    STRETCHED_MIN_LENGTH,
    STRETCHED_RATIO,
    URL_PATTERN,
)
from src.services.moderation.models import UserActivityWindow
from src.services.moderation.normalizer import (
    compress_repeats,
    fingerprint,
    normalize_for_spam,
    remove_zero_width,
    strip_diacritics,
)


# =============================================================================
# Result Types
# =============================================================================

@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of a single detector.

    Attributes:
        triggered: Whether the message violates this rule.
        reason: Audit label, empty when not triggered.
    """

    triggered: bool
    reason: str = ""


NOT_TRIGGERED = DetectionResult(False)


@dataclass(frozen=True)
class MessageSignals:
    """The parts of a message the detectors look at."""

    content: str
    author_id: int
    user_mentions: int = 0
    role_mentions: int = 0
    mentions_everyone: bool = False

    @classmethod
    def from_message(cls, message: Any) -> "MessageSignals":
        return cls(
            content=message.content or "",
            author_id=message.author.id,
            user_mentions=len({u.id for u in message.mentions}),
            role_mentions=len({r.id for r in message.role_mentions}),
            mentions_everyone=bool(message.mention_everyone),
        )


# =============================================================================
# Stateful Detectors
# =============================================================================

def check_rate_limit(window: UserActivityWindow, now: float, config: Config) -> DetectionResult:
    """Sliding window: more than N messages inside W seconds."""
    window.message_timestamps = [
        ts for ts in window.message_timestamps if now - ts < config.rate_window
    ]
    window.message_timestamps.append(now)

    if len(window.message_timestamps) > config.rate_max_messages:
        return DetectionResult(True, REASON_RATE_LIMIT)
    return NOT_TRIGGERED


def check_duplicate(
    window: UserActivityWindow,
    content: str,
    now: float,
    config: Config,
) -> DetectionResult:
    """
    Same fingerprint sent duplicate_max times inside the window.

    The current message counts: with a max of 3, two earlier matches
    make this one a violation.
    """
    window.fingerprints = [
        (fp, ts) for fp, ts in window.fingerprints if now - ts < config.duplicate_window
    ]
    key = fingerprint(content)
    prior = sum(1 for fp, _ in window.fingerprints if fp == key)
    window.fingerprints.append((key, now))

    if prior >= config.duplicate_max - 1:
        return DetectionResult(True, REASON_DUPLICATE)
    return NOT_TRIGGERED


def is_gif_link(link: str) -> bool:
    """GIF file paths and known GIF hosts (subdomains included)."""
    try:
        parts = urlsplit(link)
        host = (parts.hostname or "").lower()
    except ValueError:
        return False

    if parts.path.lower().endswith(".gif"):
        return True
    return any(host == gif_host or host.endswith(f".{gif_host}") for gif_host in GIF_HOSTS)


def count_links(content: str) -> int:
    """Number of non-GIF URLs in content."""
    return sum(1 for link in URL_PATTERN.findall(content) if not is_gif_link(link))


def check_link_spam(
    window: UserActivityWindow,
    content: str,
    now: float,
    config: Config,
) -> DetectionResult:
    """Fixed window: the counter resets once the window has elapsed."""
    if now - window.link_window_start > config.link_window:
        window.link_count = 0
        window.link_window_start = now

    window.link_count += count_links(content)

    if window.link_count > config.max_links:
        return DetectionResult(True, REASON_LINK)
    return NOT_TRIGGERED


# =============================================================================
# Stateless Detectors
# =============================================================================

def check_mentions(
    user_mentions: int,
    role_mentions: int,
    mentions_everyone: bool,
    allowed_global: bool,
    config: Config,
) -> DetectionResult:
    """
    Mention caps, checked in precedence order.

    Unauthorized @everyone/@here always triggers. Authors on the global
    allow-list skip the everyone cap and it is left out of their total.
    """
    everyone = 1 if mentions_everyone else 0

    if everyone and not allowed_global:
        return DetectionResult(True, f"{REASON_MENTION_PREFIX}: {REASON_EVERYONE}")
    if not allowed_global and everyone > config.max_everyone_mentions:
        return DetectionResult(
            True,
            f"{REASON_MENTION_PREFIX}: @everyone/@here mention (limit {config.max_everyone_mentions})",
        )

    total = user_mentions + role_mentions + (0 if allowed_global else everyone)
    if total > config.max_mentions:
        return DetectionResult(True, f"{REASON_MENTION_PREFIX}: {total} total mentions")
    if role_mentions > config.max_role_mentions:
        return DetectionResult(True, f"{REASON_MENTION_PREFIX}: {role_mentions} role mentions")
    return NOT_TRIGGERED


def find_unauthorized_invites(content: str, allowed: Iterable[str]) -> List[str]:
    """Invite links containing none of the allowed strings."""
    allowed = list(allowed)
    return [
        match.group(0)
        for match in DISCORD_INVITE_PATTERN.finditer(content)
        if not any(entry in match.group(0) for entry in allowed)
    ]


def check_invites(content: str, config: Config) -> DetectionResult:
    if not config.invite_enabled:
        return NOT_TRIGGERED
    invites = find_unauthorized_invites(content, config.allowed_invites)
    if invites:
        return DetectionResult(True, f"{REASON_INVITE_PREFIX}: {', '.join(invites)}")
    return NOT_TRIGGERED


def check_emoji_spam(content: str, config: Config) -> DetectionResult:
    if len(EMOJI_PATTERN.findall(content)) > config.max_emojis:
        return DetectionResult(True, REASON_EMOJI)
    return NOT_TRIGGERED


def check_caps(content: str, config: Config) -> DetectionResult:
    """Uppercase share of ASCII letters, once there are enough letters."""
    if not config.caps_enabled:
        return NOT_TRIGGERED

    letters = ASCII_LETTER_PATTERN.findall(strip_diacritics(remove_zero_width(content or "")))
    if len(letters) < config.caps_min_length:
        return NOT_TRIGGERED

    upper = sum(1 for ch in letters if ch.isupper())
    if upper / len(letters) * 100 >= config.caps_percentage:
        return DetectionResult(True, REASON_CAPS)
    return NOT_TRIGGERED


def check_stretched(content: str) -> DetectionResult:
    """Elongated words: compression removes 45% or more of the text."""
    normalized = normalize_for_spam(content)
    if len(normalized) < STRETCHED_MIN_LENGTH:
        return NOT_TRIGGERED

    ratio = len(compress_repeats(normalized)) / max(len(normalized), 1)
    if ratio <= STRETCHED_RATIO:
        return DetectionResult(True, REASON_STRETCHED)
    return NOT_TRIGGERED


# =============================================================================
# Aggregate
# =============================================================================

def detect_spam(
    window: UserActivityWindow,
    signals: MessageSignals,
    now: float,
    config: Config,
) -> List[str]:
    """
    Run every detector on one message.

    Args:
        window: The author's activity window (mutated).
        signals: Extracted message features.
        now: Current time in seconds.
        config: Thresholds.

    Returns:
        Reasons for every detector that triggered, in evaluation order.
    """
    allowed_global = signals.author_id in config.allowed_global_mention_ids

    content = signals.content
    results = [check_rate_limit(window, now, config)]

    # Empty messages (attachments, stickers) have nothing to compare
    if content:
        results.append(check_duplicate(window, content, now, config))

    results.extend([
        check_mentions(
            signals.user_mentions,
            signals.role_mentions,
            signals.mentions_everyone,
            allowed_global,
            config,
        ),
        check_link_spam(window, content, now, config),
        check_invites(content, config),
        check_emoji_spam(content, config),
        check_caps(content, config),
        check_stretched(content),
    ])

    return [r.reason for r in results if r.triggered]


__all__ = [
    "DetectionResult",
    "MessageSignals",
    "check_rate_limit",
    "check_duplicate",
    "is_gif_link",
    "count_links",
    "check_link_spam",
    "check_mentions",
    "find_unauthorized_invites",
    "check_invites",
    "check_emoji_spam",
    "check_caps",
    "check_stretched",
    "detect_spam",
]
