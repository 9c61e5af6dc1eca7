"""
Sentinel Discord Bot - Spam Detector Tests
==========================================

Tests for every spam signal and the aggregate detector.
"""

from dataclasses import replace
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from src.services.moderation.constants import (
    REASON_CAPS,
    REASON_DUPLICATE,
    REASON_EMOJI,
    REASON_LINK,
    REASON_RATE_LIMIT,
    REASON_STRETCHED,
)
from src.services.moderation.detectors import (
    MessageSignals,
    check_caps,
    check_duplicate,
    check_emoji_spam,
    check_invites,
    check_link_spam,
    check_mentions,
    check_rate_limit,
    check_stretched,
    count_links,
    detect_spam,
    is_gif_link,
)
from src.services.moderation.models import UserActivityWindow


AUTHOR_ID = 123456789123456789


@pytest.fixture
def window():
    return UserActivityWindow(link_window_start=0.0)


# =============================================================================
# Rate Limit
# =============================================================================

class TestRateLimit:
    """Tests for the sliding message-rate window."""

    def test_sixth_message_in_window_triggers(self, window, config):
        """Test the 6th message within 8 seconds is flagged."""
        results = [check_rate_limit(window, float(t), config) for t in range(6)]
        assert [r.triggered for r in results] == [False] * 5 + [True]
        assert results[-1].reason == REASON_RATE_LIMIT

    def test_spaced_messages_never_trigger(self, window, config):
        """Test messages 2 seconds apart stay under the limit."""
        results = [check_rate_limit(window, float(t), config) for t in range(0, 40, 2)]
        assert not any(r.triggered for r in results)

    def test_old_timestamps_pruned(self, window, config):
        """Test timestamps outside the window are dropped."""
        for t in range(5):
            check_rate_limit(window, float(t), config)
        check_rate_limit(window, 100.0, config)
        assert window.message_timestamps == [100.0]


# =============================================================================
# Duplicates
# =============================================================================

class TestDuplicates:
    """Tests for duplicate-message detection."""

    def test_third_duplicate_triggers(self, window, config):
        """Test the third identical message inside the window is flagged."""
        results = [check_duplicate(window, "buy now", float(t), config) for t in range(3)]
        assert [r.triggered for r in results] == [False, False, True]
        assert results[-1].reason == REASON_DUPLICATE

    def test_variants_share_a_fingerprint(self, window, config):
        """Test case, punctuation and stretching do not dodge detection."""
        check_duplicate(window, "buyyy now", 0.0, config)
        check_duplicate(window, "BUYYY NOW!!!", 1.0, config)
        assert check_duplicate(window, "buyyyyyyy now", 2.0, config).triggered is True

    def test_expired_duplicates_ignored(self, window, config):
        """Test copies older than the window no longer count."""
        check_duplicate(window, "buy now", 0.0, config)
        check_duplicate(window, "buy now", 1.0, config)
        assert check_duplicate(window, "buy now", 40.0, config).triggered is False

    def test_different_messages_do_not_count(self, window, config):
        """Test distinct messages are never duplicates."""
        for t, text in enumerate(["one", "two", "three", "four"]):
            assert check_duplicate(window, text, float(t), config).triggered is False


# =============================================================================
# Links
# =============================================================================

class TestLinks:
    """Tests for link counting and link spam."""

    def test_gif_hosts_excluded(self):
        """Test Tenor and Giphy links (and subdomains) are GIFs."""
        assert is_gif_link("https://tenor.com/view/cat-123") is True
        assert is_gif_link("https://media.tenor.com/abc.mp4") is True
        assert is_gif_link("https://giphy.com/gifs/dog") is True
        assert is_gif_link("https://example.com/funny.GIF") is True
        assert is_gif_link("https://example.com/page") is False

    def test_lookalike_host_is_not_gif(self):
        """Test a host that merely ends with a GIF host name is not a GIF."""
        assert is_gif_link("https://nottenor.com/x") is False

    def test_count_links(self):
        """Test only non-GIF URLs are counted."""
        content = "https://a.com https://tenor.com/view/x http://b.com/page"
        assert count_links(content) == 2

    def test_four_plain_links_trigger(self, window, config):
        """Test four plain URLs in one message exceed the limit of three."""
        content = "https://a.com https://b.com https://c.com https://d.com"
        result = check_link_spam(window, content, 1.0, config)
        assert result.triggered is True
        assert result.reason == REASON_LINK

    def test_four_gif_links_do_not_trigger(self, window, config):
        """Test four Tenor links are ignored."""
        content = " ".join(f"https://tenor.com/view/gif-{i}" for i in range(4))
        assert check_link_spam(window, content, 1.0, config).triggered is False

    def test_links_accumulate_within_window(self, window, config):
        """Test links across messages share one window."""
        assert check_link_spam(window, "https://a.com https://b.com", 1.0, config).triggered is False
        assert check_link_spam(window, "https://c.com https://d.com", 2.0, config).triggered is True

    def test_window_resets(self, window, config):
        """Test the counter restarts after the window has passed."""
        check_link_spam(window, "https://a.com https://b.com https://c.com", 1.0, config)
        result = check_link_spam(window, "https://d.com", 100.0, config)
        assert result.triggered is False
        assert window.link_count == 1
        assert window.link_window_start == 100.0


# =============================================================================
# Mentions
# =============================================================================

class TestMentions:
    """Tests for mention caps and their precedence."""

    def test_everyone_not_allowed(self, config):
        """Test unauthorized @everyone always triggers first."""
        result = check_mentions(0, 0, True, False, config)
        assert result.triggered is True
        assert result.reason == "Mention spam: @everyone/@here mention not allowed"

    def test_everyone_allowed_for_listed_author(self, config):
        """Test allow-listed authors may mention everyone."""
        assert check_mentions(0, 0, True, True, config).triggered is False

    def test_allowed_everyone_left_out_of_total(self, config):
        """Test an allowed @everyone does not count toward the total."""
        assert check_mentions(5, 0, True, True, config).triggered is False

    def test_too_many_total_mentions(self, config):
        """Test more than five mentions in total trigger."""
        result = check_mentions(6, 0, False, False, config)
        assert result.reason == "Mention spam: 6 total mentions"

    def test_total_checked_before_roles(self, config):
        """Test the total cap wins over the role cap."""
        result = check_mentions(3, 3, False, False, config)
        assert result.reason == "Mention spam: 6 total mentions"

    def test_too_many_role_mentions(self, config):
        """Test more than two role mentions trigger."""
        result = check_mentions(0, 3, False, False, config)
        assert result.reason == "Mention spam: 3 role mentions"

    def test_under_limits(self, config):
        """Test a normal amount of mentions is fine."""
        assert check_mentions(5, 0, False, False, config).triggered is False
        assert check_mentions(2, 2, False, False, config).triggered is False


# =============================================================================
# Invites, Emojis, Caps, Stretched
# =============================================================================

class TestInvites:
    """Tests for unauthorized Discord invites."""

    def test_invite_flagged(self, config):
        """Test an invite link is flagged with the link in the reason."""
        result = check_invites("join discord.gg/abc123 now", config)
        assert result.triggered is True
        assert result.reason == "Unauthorized Discord invite: discord.gg/abc123"

    def test_all_invite_forms(self, config):
        """Test every invite domain form is recognized."""
        for link in ["discord.io/abc", "discord.me/abc", "discord.li/abc", "discordapp.com/invite/abc"]:
            assert check_invites(link, config).triggered is True

    def test_allowed_invite_ignored(self, config):
        """Test invites containing an allowed string are fine."""
        config = replace(config, allowed_invites=["syria"])
        assert check_invites("discord.gg/syria", config).triggered is False

    def test_disabled(self, config):
        """Test invite detection can be turned off."""
        config = replace(config, invite_enabled=False)
        assert check_invites("discord.gg/abc123", config).triggered is False


class TestEmojis:
    """Tests for emoji spam."""

    def test_over_limit(self, config):
        """Test more than fifteen emojis trigger."""
        result = check_emoji_spam("😀" * 16, config)
        assert result.triggered is True
        assert result.reason == REASON_EMOJI

    def test_at_limit(self, config):
        """Test exactly fifteen emojis are fine."""
        assert check_emoji_spam("😀" * 15, config).triggered is False

    def test_custom_emojis_count(self, config):
        """Test custom emoji tags are counted."""
        content = " ".join(f"<:pepe:{1000 + i}>" for i in range(16))
        assert check_emoji_spam(content, config).triggered is True


class TestCaps:
    """Tests for excessive capitals."""

    def test_disabled_by_default(self, config):
        """Test caps detection is off unless enabled."""
        assert check_caps("THIS IS VERY LOUD TEXT", config).triggered is False

    def test_shouting_triggers(self, config):
        """Test mostly uppercase text triggers once enabled."""
        config = replace(config, caps_enabled=True)
        result = check_caps("THIS IS VERY LOUD TEXT", config)
        assert result.triggered is True
        assert result.reason == REASON_CAPS

    def test_short_text_ignored(self, config):
        """Test fewer letters than the minimum never trigger."""
        config = replace(config, caps_enabled=True)
        assert check_caps("HI!!!", config).triggered is False

    def test_normal_text(self, config):
        """Test mixed case text is fine."""
        config = replace(config, caps_enabled=True)
        assert check_caps("Hello World Everyone", config).triggered is False


class TestStretched:
    """Tests for elongated text."""

    def test_stretched_word(self):
        """Test a heavily stretched word triggers."""
        result = check_stretched("heyyyyyyyyy")
        assert result.triggered is True
        assert result.reason == REASON_STRETCHED

    def test_stretched_sentence(self):
        """Test several stretched words trigger."""
        assert check_stretched("sooooooo gooooood").triggered is True

    def test_normal_text(self):
        """Test ordinary text is fine."""
        assert check_stretched("hello world").triggered is False

    def test_short_text_ignored(self):
        """Test very short text is never flagged."""
        assert check_stretched("aaaaa").triggered is False


# =============================================================================
# Aggregate
# =============================================================================

class TestDetectSpam:
    """Tests for detect_spam()."""

    def test_clean_message(self, window, config):
        """Test a normal message yields no reasons."""
        signals = MessageSignals(content="hello there", author_id=AUTHOR_ID)
        assert detect_spam(window, signals, 1.0, config) == []

    def test_all_reasons_collected(self, window, config):
        """Test every triggered detector is reported, in order."""
        signals = MessageSignals(
            content="https://a.com https://b.com https://c.com https://d.com",
            author_id=AUTHOR_ID,
            user_mentions=6,
        )
        reasons = detect_spam(window, signals, 1.0, config)
        assert reasons == ["Mention spam: 6 total mentions", REASON_LINK]

    def test_empty_content_skips_duplicates(self, window, config):
        """Test attachment-only messages are never duplicates."""
        signals = MessageSignals(content="", author_id=AUTHOR_ID)
        for t in range(3):
            assert REASON_DUPLICATE not in detect_spam(window, signals, float(t), config)
        assert window.fingerprints == []

    def test_allow_list_from_config(self, window, config):
        """Test the author allow-list comes from the configuration."""
        config = replace(config, allowed_global_mention_ids={AUTHOR_ID})
        signals = MessageSignals(content="hi all", author_id=AUTHOR_ID, mentions_everyone=True)
        assert detect_spam(window, signals, 1.0, config) == []


class TestMessageSignals:
    """Tests for extracting signals from a message."""

    def test_from_message_counts_distinct_mentions(self):
        """Test repeated mentions of the same user count once."""
        message = MagicMock()
        message.content = "hey"
        message.author.id = AUTHOR_ID
        message.mentions = [SimpleNamespace(id=1), SimpleNamespace(id=1), SimpleNamespace(id=2)]
        message.role_mentions = [SimpleNamespace(id=9)]
        message.mention_everyone = False

        signals = MessageSignals.from_message(message)
        assert signals.user_mentions == 2
        assert signals.role_mentions == 1
        assert signals.mentions_everyone is False
        assert signals.author_id == AUTHOR_ID

    def test_from_message_none_content(self):
        """Test a message without content gives empty text."""
        message = MagicMock()
        message.content = None
        message.mentions = []
        message.role_mentions = []
        message.mention_everyone = True

        signals = MessageSignals.from_message(message)
        assert signals.content == ""
        assert signals.mentions_everyone is True
