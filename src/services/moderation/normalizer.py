"""
SentinelBot - Text Normalizer
=============================

Canonical forms of message text for matching and comparison.

DESIGN:
    Every step is a pure function and the pipeline order is fixed:
    1. lowercase
    2. strip diacritics (NFD decomposition, combining marks dropped)
    3. remove zero-width characters
    4. remove obfuscation asterisks
    5. symbols -> single space, collapse whitespace, trim
    6. leetspeak folding (spam mode only)

    Badword mode stops after step 5: folding "1" and "l" together would
    let distinct words collide. Duplicate fingerprints add a final pass
    that compresses runs of 3+ identical characters down to 2.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import unicodedata
from enum import Enum

from src.services.moderation.constants import (
    LEET_SUBSTITUTIONS,
    OBFUSCATION_STAR_PATTERN,
    REPEAT_KEEP,
    REPEAT_PATTERN,
    SYMBOL_PATTERN,
    WHITESPACE_PATTERN,
    ZERO_WIDTH_PATTERN,
)


class NormalizationMode(str, Enum):
    """Which pipeline normalize() runs."""

    BADWORD = "badword"
    SPAM = "spam"
    FINGERPRINT = "fingerprint"


# =============================================================================
# Pipeline Steps
# =============================================================================

def strip_diacritics(text: str) -> str:
    """Remove combining marks after canonical decomposition (é -> e)."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def remove_zero_width(text: str) -> str:
    return ZERO_WIDTH_PATTERN.sub("", text)


def normalize_symbols(text: str) -> str:
    """
    Turn punctuation into word breaks.

    Non-breaking spaces become spaces, zero-width characters and asterisks
    disappear, every symbol in the class becomes a space, and whitespace
    is collapsed and trimmed.
    """
    text = text.replace("\u00a0", " ")
    text = remove_zero_width(text)
    text = OBFUSCATION_STAR_PATTERN.sub("", text)
    text = SYMBOL_PATTERN.sub(" ", text)
    text = WHITESPACE_PATTERN.sub(" ", text)
    return text.strip()


def fold_leetspeak(text: str) -> str:
    """Map common digit/symbol substitutions back to letters."""
    for pattern, replacement in LEET_SUBSTITUTIONS:
        text = pattern.sub(replacement, text)
    return text


def compress_repeats(text: str) -> str:
    """Shorten every run of 3+ identical characters to exactly 2."""
    return REPEAT_PATTERN.sub(lambda m: m.group(1) * REPEAT_KEEP, text)


# =============================================================================
# Public Pipelines
# =============================================================================

def normalize_for_badwords(text: str) -> str:
    if not text:
        return ""
    return normalize_symbols(strip_diacritics(text.lower()))


def normalize_for_spam(text: str) -> str:
    if not text:
        return ""
    return fold_leetspeak(normalize_for_badwords(text)).strip()


def fingerprint(text: str) -> str:
    """Duplicate-detection key: spam normalization plus repeat compression."""
    return compress_repeats(normalize_for_spam(text))


def normalize(text: str, mode: NormalizationMode = NormalizationMode.SPAM) -> str:
    """
    Normalize text for the given mode.

    Args:
        text: Raw message content. None and empty both give "".
        mode: BADWORD, SPAM or FINGERPRINT.

    Returns:
        The normalized string. Deterministic for the same input.
    """
    mode = NormalizationMode(mode)
    if mode is NormalizationMode.BADWORD:
        return normalize_for_badwords(text)
    if mode is NormalizationMode.FINGERPRINT:
        return fingerprint(text)
    return normalize_for_spam(text)


__all__ = [
    "NormalizationMode",
    "strip_diacritics",
    "remove_zero_width",
    "normalize_symbols",
    "fold_leetspeak",
    "compress_repeats",
    "normalize_for_badwords",
    "normalize_for_spam",
    "fingerprint",
    "normalize",
]
