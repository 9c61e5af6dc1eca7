"""
Sentinel Discord Bot - Database Tests
=====================================

Tests for the database layer to ensure data integrity.
"""

import time
import pytest

from src.core.constants import LEDGER_READ_ONLY, LEDGER_SPAM


GUILD = 987654321987654321
USER = 123456789123456789
OTHER_USER = 223456789123456789


class TestMuteOperations:
    """Tests for persisted mute records."""

    def test_count_mutes(self, test_db):
        """Test the active mute count."""
        assert test_db.count_mutes() == 0
        test_db.record_mute(GUILD, USER, time.time() + 300)
        test_db.record_mute(GUILD, OTHER_USER, time.time() + 300)
        assert test_db.count_mutes() == 2

    def test_record_mute(self, test_db):
        """Test recording a mute stores its expiry and reason."""
        expires = time.time() + 300
        test_db.record_mute(GUILD, USER, expires, "Rate limit exceeded")

        info = test_db.get_all_mutes()[GUILD][USER]
        assert info["expires_at"] == pytest.approx(expires)
        assert info["reason"] == "Rate limit exceeded"

    def test_record_mute_replaces_existing(self, test_db):
        """Test a re-mute overwrites the previous expiry."""
        test_db.record_mute(GUILD, USER, time.time() + 60)
        later = time.time() + 3600
        test_db.record_mute(GUILD, USER, later)

        mutes = test_db.get_all_mutes()
        assert list(mutes[GUILD]) == [USER]
        assert mutes[GUILD][USER]["expires_at"] == pytest.approx(later)

    def test_remove_mute(self, test_db):
        """Test removing a mute deletes the record."""
        test_db.record_mute(GUILD, USER, time.time() + 300)

        assert test_db.remove_mute(GUILD, USER) is True
        assert test_db.is_muted(GUILD, USER) is False
        assert test_db.get_all_mutes() == {}

    def test_remove_mute_not_muted(self, test_db):
        """Test removing a missing mute returns False."""
        assert test_db.remove_mute(GUILD, USER) is False

    def test_is_muted(self, test_db):
        """Test is_muted reflects the stored records."""
        assert test_db.is_muted(GUILD, USER) is False
        test_db.record_mute(GUILD, USER, time.time() + 300)
        assert test_db.is_muted(GUILD, USER) is True

    def test_get_all_mutes_grouped_by_guild(self, test_db):
        """Test get_all_mutes returns guild -> user -> record."""
        other_guild = 887654321987654321
        test_db.record_mute(GUILD, USER, time.time() + 300)
        test_db.record_mute(GUILD, OTHER_USER, time.time() + 600)
        test_db.record_mute(other_guild, USER, time.time() + 900)

        mutes = test_db.get_all_mutes()
        assert set(mutes) == {GUILD, other_guild}
        assert set(mutes[GUILD]) == {USER, OTHER_USER}
        assert set(mutes[other_guild]) == {USER}

    def test_get_all_mutes_drops_corrupt_expiry(self, test_db):
        """Test a row with an unreadable expiry is dropped."""
        test_db.execute(
            "INSERT INTO active_mutes (guild_id, user_id, expires_at, reason, created_at) VALUES (?, ?, ?, ?, ?)",
            (GUILD, USER, "not-a-number", None, time.time()),
        )

        assert test_db.get_all_mutes() == {}
        assert test_db.is_muted(GUILD, USER) is False

    def test_mutes_survive_reconnect(self, test_db):
        """Test a recorded mute is read back after closing the connection."""
        expires = time.time() + 300
        test_db.record_mute(GUILD, USER, expires)
        test_db.close()

        assert test_db.get_all_mutes()[GUILD][USER]["expires_at"] == pytest.approx(expires)


class TestViolationLedgers:
    """Tests for the persisted violation counters."""

    def test_count_defaults_to_zero(self, test_db):
        """Test a user without a record has a count of 0."""
        assert test_db.get_violation_count(LEDGER_SPAM, GUILD, USER) == 0

    def test_increment_returns_new_total(self, test_db):
        """Test increments accumulate and return the running total."""
        assert test_db.increment_violations(LEDGER_SPAM, GUILD, USER) == 1
        assert test_db.increment_violations(LEDGER_SPAM, GUILD, USER, 3) == 4
        assert test_db.get_violation_count(LEDGER_SPAM, GUILD, USER) == 4

    def test_ledgers_are_independent(self, test_db):
        """Test the spam and read-only ledgers never share a count."""
        test_db.increment_violations(LEDGER_SPAM, GUILD, USER, 2)
        test_db.increment_violations(LEDGER_READ_ONLY, GUILD, USER, 5)

        assert test_db.get_violation_count(LEDGER_SPAM, GUILD, USER) == 2
        assert test_db.get_violation_count(LEDGER_READ_ONLY, GUILD, USER) == 5

    def test_users_are_independent(self, test_db):
        """Test counts are kept per user."""
        test_db.increment_violations(LEDGER_SPAM, GUILD, USER, 2)
        assert test_db.get_violation_count(LEDGER_SPAM, GUILD, OTHER_USER) == 0

    def test_reset_only_touches_one_ledger(self, test_db):
        """Test resetting the spam ledger leaves the read-only ledger alone."""
        test_db.increment_violations(LEDGER_SPAM, GUILD, USER, 4)
        test_db.increment_violations(LEDGER_READ_ONLY, GUILD, USER, 4)

        test_db.reset_violations(LEDGER_SPAM, GUILD, USER)

        assert test_db.get_violation_count(LEDGER_SPAM, GUILD, USER) == 0
        assert test_db.get_violation_count(LEDGER_READ_ONLY, GUILD, USER) == 4

    def test_increment_after_reset_starts_over(self, test_db):
        """Test a reset ledger counts from zero again."""
        test_db.increment_violations(LEDGER_SPAM, GUILD, USER, 10)
        test_db.reset_violations(LEDGER_SPAM, GUILD, USER)
        assert test_db.increment_violations(LEDGER_SPAM, GUILD, USER) == 1


class TestLedgerResets:
    """Tests for persisted ledger reset times."""

    def test_schedule_and_list(self, test_db):
        """Test pending resets are listed per ledger, soonest first."""
        now = time.time()
        test_db.schedule_ledger_reset(LEDGER_SPAM, GUILD, USER, now + 600)
        test_db.schedule_ledger_reset(LEDGER_SPAM, GUILD, OTHER_USER, now + 60)

        resets = test_db.get_ledger_resets(LEDGER_SPAM)
        assert [user for _, user, _ in resets] == [OTHER_USER, USER]
        assert resets[1][2] == pytest.approx(now + 600)
        assert test_db.get_ledger_resets(LEDGER_READ_ONLY) == []

    def test_reschedule_replaces_due_time(self, test_db):
        """Test a second long mute moves the reset instead of adding one."""
        test_db.schedule_ledger_reset(LEDGER_SPAM, GUILD, USER, 100.0)
        test_db.schedule_ledger_reset(LEDGER_SPAM, GUILD, USER, 200.0)

        assert test_db.get_ledger_resets(LEDGER_SPAM) == [(GUILD, USER, 200.0)]

    def test_reset_violations_clears_pending_reset(self, test_db):
        """Test resetting the ledger also drops its scheduled reset."""
        test_db.increment_violations(LEDGER_SPAM, GUILD, USER, 10)
        test_db.schedule_ledger_reset(LEDGER_SPAM, GUILD, USER, time.time() + 60)

        test_db.reset_violations(LEDGER_SPAM, GUILD, USER)

        assert test_db.get_ledger_resets(LEDGER_SPAM) == []

    def test_resets_survive_reconnect(self, test_db):
        """Test a pending reset is read back after closing the connection."""
        test_db.schedule_ledger_reset(LEDGER_SPAM, GUILD, USER, 1234.5)
        test_db.close()

        assert test_db.get_ledger_resets(LEDGER_SPAM) == [(GUILD, USER, 1234.5)]


class TestTransactions:
    """Tests for the transaction context manager."""

    def test_transaction_rolls_back_on_error(self, test_db):
        """Test an exception inside a transaction discards its writes."""
        with pytest.raises(RuntimeError):
            with test_db.transaction() as tx:
                tx.execute(
                    "INSERT INTO active_mutes (guild_id, user_id, expires_at, reason, created_at) VALUES (?, ?, ?, ?, ?)",
                    (GUILD, USER, time.time() + 60, None, time.time()),
                )
                raise RuntimeError("boom")

        assert test_db.is_muted(GUILD, USER) is False
