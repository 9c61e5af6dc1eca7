"""
SentinelBot - Escalation Engine
===============================

Turns the violations found on one message into escalation decisions.

DESIGN:
    The engine records state and decides. It never talks to Discord:
    the service applies the side effects it asks for, then reports back
    (confirm_short_mute, complete_long_mute) so state follows reality.

    Escalation ladder for one user:
    1. every violating message adds a warning (restarting at 1 after a
       quiet period) and records each violation in capped history
    2. warnings reaching warnings_before_mute ask for a short mute;
       once it lands the warnings are cleared, so the next one is 1
    3. the spam ledger reaching long_mute_threshold asks for a long mute
       unless the user is already muted
    4. the read_only ledger (badwords + spam) reaching its threshold asks
       for the read-only role, regardless of mute state

    The two persisted ledgers reset differently: the spam ledger is
    reset when a long mute expires, the read-only ledger never is.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass
from typing import List, Sequence

from src.core.config import Config
from src.core.constants import LEDGER_READ_ONLY, LEDGER_SPAM
from src.core.database import DatabaseManager
from src.services.moderation.state import ModerationStateStore, UserKey


# =============================================================================
# Decisions
# =============================================================================

@dataclass
class SpamDecision:
    """
    What a spam message should lead to.

    Attributes:
        violations: Reasons found on the message.
        warnings: Warning count after this message.
        short_mute: Warnings reached the short-mute threshold.
        spam_total: Spam ledger total after this message.
        read_only_total: Read-only ledger total after this message.
        read_only: Read-only ledger reached its threshold.
    """

    violations: List[str]
    warnings: int
    short_mute: bool
    spam_total: int
    read_only_total: int
    read_only: bool


@dataclass
class BadwordDecision:
    """What a badword message should lead to."""

    terms: List[str]
    term_total: int
    read_only_total: int
    read_only: bool


# =============================================================================
# Engine
# =============================================================================

class EscalationEngine:
    """Warning, mute and read-only escalation for one process."""

    def __init__(self, config: Config, state: ModerationStateStore, db: DatabaseManager) -> None:
        self.config = config
        self.state = state
        self.db = db

    # =========================================================================
    # Spam
    # =========================================================================

    def register_spam(
        self,
        key: UserKey,
        violations: Sequence[str],
        content: str,
        now: float,
    ) -> SpamDecision:
        """
        Record a spam message and decide the next steps.

        Args:
            key: (guild_id, user_id).
            violations: Non-empty list of detector reasons.
            content: Raw message content, excerpted into history.
            now: Current time in seconds.
        """
        guild_id, user_id = key
        count = len(violations)

        warnings = self.state.add_warning(key, now)
        self.state.record_violations(key, violations, content, now)

        spam_total = self.db.increment_violations(LEDGER_SPAM, guild_id, user_id, count)
        read_only_total = self.db.increment_violations(LEDGER_READ_ONLY, guild_id, user_id, count)

        return SpamDecision(
            violations=list(violations),
            warnings=warnings,
            short_mute=warnings >= self.config.warnings_before_mute,
            spam_total=spam_total,
            read_only_total=read_only_total,
            read_only=read_only_total >= self.config.read_only_threshold,
        )

    def confirm_short_mute(self, key: UserKey) -> None:
        """The short mute landed: warnings start over."""
        self.state.clear_warnings(key)

    def should_long_mute(self, key: UserKey, spam_total: int) -> bool:
        """Spam ledger at threshold and the user is not already muted."""
        return spam_total >= self.config.long_mute_threshold and not self.state.is_muted(key)

    def complete_long_mute(self, key: UserKey) -> None:
        """Long mute over: spam ledger back to zero, history forgotten."""
        guild_id, user_id = key
        self.db.reset_violations(LEDGER_SPAM, guild_id, user_id)
        self.state.clear_violation_history(key)

    # =========================================================================
    # Badwords
    # =========================================================================

    def register_badwords(
        self,
        key: UserKey,
        terms: Sequence[str],
        content: str,
        now: float,
    ) -> BadwordDecision:
        """Record restricted terms and update the read-only ledger."""
        guild_id, user_id = key

        record = self.state.record_badwords(key, terms, content, now)
        read_only_total = self.db.increment_violations(
            LEDGER_READ_ONLY, guild_id, user_id, len(terms)
        )

        return BadwordDecision(
            terms=list(terms),
            term_total=record.total,
            read_only_total=read_only_total,
            read_only=read_only_total >= self.config.read_only_threshold,
        )

    # =========================================================================
    # Manual Reset
    # =========================================================================

    def reset_user(self, key: UserKey) -> None:
        """Clear both ledgers and all in-memory history for a user."""
        guild_id, user_id = key
        self.db.reset_violations(LEDGER_SPAM, guild_id, user_id)
        self.db.reset_violations(LEDGER_READ_ONLY, guild_id, user_id)
        self.state.clear_violation_history(key)
        self.state.badwords.pop(key)
        self.state.clear_warnings(key)


__all__ = [
    "SpamDecision",
    "BadwordDecision",
    "EscalationEngine",
]
