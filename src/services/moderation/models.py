"""
SentinelBot - Moderation State Models
=====================================

Per-user records held by the moderation state store.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple


@dataclass
class UserActivityWindow:
    """
    Short-lived sliding state for one user.

    Attributes:
        message_timestamps: Send times inside the rate-limit window.
        fingerprints: (fingerprint, timestamp) pairs inside the duplicate window.
        link_count: Non-GIF links counted in the current fixed link window.
        link_window_start: Start of the current link window.
    """

    link_window_start: float
    message_timestamps: List[float] = field(default_factory=list)
    fingerprints: List[Tuple[str, float]] = field(default_factory=list)
    link_count: int = 0

    @property
    def last_activity(self) -> float:
        latest = self.link_window_start
        if self.message_timestamps:
            latest = max(latest, self.message_timestamps[-1])
        if self.fingerprints:
            latest = max(latest, self.fingerprints[-1][1])
        return latest

    def has_activity_since(self, cutoff: float) -> bool:
        """True if any message or fingerprint timestamp is newer than cutoff."""
        return any(ts > cutoff for ts in self.message_timestamps) or any(
            ts > cutoff for _, ts in self.fingerprints
        )


@dataclass
class ViolationEntry:
    """One recorded violation."""

    category: str
    excerpt: str
    timestamp: float


@dataclass
class ViolationRecord:
    """
    Capped violation history plus per-category counts for one user.

    The entry list keeps the newest max_entries items. Counts are cumulative
    for as long as the record lives.
    """

    last_updated: float
    entries: List[ViolationEntry] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)

    def record(self, categories: Iterable[str], excerpt: str, now: float, max_entries: int) -> None:
        """Append one entry per category and bump its count."""
        for category in categories:
            self.entries.append(ViolationEntry(category=category, excerpt=excerpt, timestamp=now))
            self.counts[category] = self.counts.get(category, 0) + 1
        self._trim(max_entries, now)

    def record_message(self, categories: Iterable[str], excerpt: str, now: float, max_entries: int) -> None:
        """Append one entry naming every category and bump each count."""
        categories = list(categories)
        self.entries.append(ViolationEntry(category=", ".join(categories), excerpt=excerpt, timestamp=now))
        for category in categories:
            self.counts[category] = self.counts.get(category, 0) + 1
        self._trim(max_entries, now)

    def _trim(self, max_entries: int, now: float) -> None:
        overflow = len(self.entries) - max_entries
        if overflow > 0:
            del self.entries[:overflow]
        self.last_updated = now

    @property
    def total(self) -> int:
        return sum(self.counts.values())


@dataclass
class WarningState:
    """Warning counter that restarts at 1 after a quiet period."""

    count: int = 0
    last_warning: float = 0.0

    def add(self, now: float, reset_after: float) -> int:
        """Register a warning and return the new count."""
        if now - self.last_warning > reset_after:
            self.count = 1
        else:
            self.count += 1
        self.last_warning = now
        return self.count


__all__ = [
    "UserActivityWindow",
    "ViolationEntry",
    "ViolationRecord",
    "WarningState",
]
