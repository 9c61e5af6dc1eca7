"""
Sentinel Discord Bot - Normalizer Tests
=======================================

Tests for the text normalization pipelines.
"""

import pytest

from src.services.moderation.normalizer import (
    NormalizationMode,
    compress_repeats,
    fingerprint,
    fold_leetspeak,
    normalize,
    normalize_for_badwords,
    normalize_for_spam,
    normalize_symbols,
    strip_diacritics,
)


class TestPipelineSteps:
    """Tests for the individual normalization steps."""

    def test_strip_diacritics(self):
        """Test accents are removed after decomposition."""
        assert strip_diacritics("café naïve") == "cafe naive"

    def test_symbols_become_single_spaces(self):
        """Test punctuation turns into one space and is trimmed."""
        assert normalize_symbols("  hello,,, world!!  ") == "hello world"

    def test_zero_width_characters_removed(self):
        """Test zero-width characters do not split words."""
        assert normalize_symbols("ba\u200bd wo\ufeffrd") == "bad word"

    def test_non_breaking_space_is_whitespace(self):
        """Test a non-breaking space behaves like a normal space."""
        assert normalize_symbols("bad\u00a0word") == "bad word"

    def test_obfuscation_stars_removed(self):
        """Test asterisks inside words are dropped, not spaced."""
        assert normalize_symbols("f**k") == "fk"

    def test_fold_leetspeak(self):
        """Test digit substitutions fold back to letters."""
        assert fold_leetspeak("h3ll0 w0rld") == "heiio worid"
        assert fold_leetspeak("5p4m 7o 8ig9") == "spam to bigg"

    def test_compress_repeats(self):
        """Test runs of three or more collapse to two."""
        assert compress_repeats("heyyyyy") == "heyy"
        assert compress_repeats("hello") == "hello"
        assert compress_repeats("aaabbbccc") == "aabbcc"


class TestPipelines:
    """Tests for the public pipelines."""

    @pytest.mark.parametrize("func", [normalize_for_badwords, normalize_for_spam, fingerprint])
    def test_empty_input(self, func):
        """Test empty and None input give an empty string."""
        assert func("") == ""
        assert func(None) == ""

    def test_badword_mode_keeps_digits(self):
        """Test badword normalization does not fold leetspeak."""
        assert normalize_for_badwords("B4D-Wörd!") == "b4d word"

    def test_spam_mode_folds_leetspeak(self):
        """Test spam normalization adds leetspeak folding."""
        assert normalize_for_spam("B4D-Wörd!") == "bad word"

    def test_fingerprint_compresses_repeats(self):
        """Test fingerprints ignore stretched letters and punctuation."""
        assert fingerprint("Heyyyyy!!!") == fingerprint("heyy")

    def test_fingerprint_ignores_case_and_accents(self):
        """Test variants of one message share a fingerprint."""
        assert fingerprint("BUY NÖW") == fingerprint("buy now")

    def test_deterministic(self):
        """Test the same input always gives the same output."""
        text = "Ｔest\u200b m3ssage!!"
        assert normalize_for_spam(text) == normalize_for_spam(text)


class TestNormalizeDispatch:
    """Tests for normalize() mode selection."""

    def test_default_mode_is_spam(self):
        """Test normalize() defaults to spam mode."""
        assert normalize("h3llo") == normalize_for_spam("h3llo")

    def test_badword_mode(self):
        """Test badword mode skips leetspeak folding."""
        assert normalize("h3llo", NormalizationMode.BADWORD) == "h3llo"

    def test_mode_accepts_string_value(self):
        """Test the mode can be passed by its string value."""
        assert normalize("heyyyy", "fingerprint") == "heyy"

    def test_unknown_mode_raises(self):
        """Test an unknown mode is rejected."""
        with pytest.raises(ValueError):
            normalize("text", "nonsense")
