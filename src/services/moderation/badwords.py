"""
SentinelBot - Badword Matcher
=============================

Obfuscation-resistant lookup of restricted terms.

DESIGN:
    The corpus is split once into two partitions:
    - single tokens: normalized to [a-z0-9] and matched against whole
      tokens only, so "spam" never fires inside "spammy"
    - phrases: matched on symbol-normalized text, anchored on whitespace
      or string edges, so "bad phrase" never fires inside "badphrase"

    URLs are stripped first since domain names produce false hits.
    No leetspeak folding happens here: folding makes distinct words collide.

    The index is immutable once built. A missing or unreadable corpus
    file is logged and skipped (fail open); startup never crashes on it.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import json
import re
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Pattern, Tuple, Union

from src.core.logger import logger
from src.services.moderation.constants import (
    NON_TOKEN_PATTERN,
    TOKEN_PATTERN,
    URL_STRIP_PATTERN,
)
from src.services.moderation.normalizer import (
    normalize_for_badwords,
    remove_zero_width,
    strip_diacritics,
)


PathLike = Union[str, Path]


# =============================================================================
# Corpus Loading
# =============================================================================

def _load_json_words(path: Path) -> List[str]:
    """Read a {"words": [...]} file (a bare list is accepted too)."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Badword Corpus Missing", [("File", str(path))])
        return []
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Badword Corpus Unreadable", [
            ("File", str(path)),
            ("Error", str(e)[:100]),
        ])
        return []

    words = data.get("words", []) if isinstance(data, dict) else data
    if not isinstance(words, list):
        logger.warning("Badword Corpus Malformed", [
            ("File", str(path)),
            ("Reason", "'words' is not a list"),
        ])
        return []
    return [w for w in words if isinstance(w, str)]


def _load_text_words(path: Path) -> List[str]:
    """Read a one-term-per-line file. Blank lines and # comments are skipped."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Badword List Missing", [("File", str(path))])
        return []
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Badword List Unreadable", [
            ("File", str(path)),
            ("Error", str(e)[:100]),
        ])
        return []

    words = []
    for line in raw.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            words.append(line)
    return words


def load_word_corpus(json_path: Optional[PathLike], text_path: Optional[PathLike]) -> List[str]:
    """
    Merge both corpus sources, de-duplicated, first occurrence wins.

    Returns:
        Ordered list of raw dictionary entries (possibly empty).
    """
    entries: List[str] = []
    if json_path is not None:
        entries.extend(_load_json_words(Path(json_path)))
    if text_path is not None:
        entries.extend(_load_text_words(Path(text_path)))
    return list(dict.fromkeys(entries))


# =============================================================================
# Index
# =============================================================================

def normalize_token(word: str) -> str:
    """Lowercase, accent-free, alphanumeric-only form of a single token."""
    return NON_TOKEN_PATTERN.sub("", remove_zero_width(strip_diacritics(word.lower())))


def remove_urls(text: str) -> str:
    return URL_STRIP_PATTERN.sub(" ", text)


class BadwordIndex:
    """Exact-token set plus boundary-anchored phrase patterns."""

    def __init__(self, entries: Iterable[str]) -> None:
        tokens: Dict[str, str] = {}
        phrases: List[Tuple[Pattern, str]] = []
        seen_phrases = set()

        for entry in entries:
            original = entry.strip()
            if not original:
                continue

            if re.search(r"\s", original):
                normalized = normalize_for_badwords(original)
                if not normalized or normalized in seen_phrases:
                    continue
                seen_phrases.add(normalized)
                pattern = re.compile(rf"(?:^|\s){re.escape(normalized)}(?:\s|$)")
                phrases.append((pattern, original))
            else:
                normalized = normalize_token(original)
                if not normalized:
                    continue
                # Later spellings of the same token replace the reverse lookup
                tokens[normalized] = original

        self._tokens: Dict[str, str] = tokens
        self._token_set: FrozenSet[str] = frozenset(tokens)
        self._phrases: Tuple[Tuple[Pattern, str], ...] = tuple(phrases)

    @classmethod
    def from_files(cls, json_path: Optional[PathLike], text_path: Optional[PathLike]) -> "BadwordIndex":
        entries = load_word_corpus(json_path, text_path)
        index = cls(entries)
        logger.tree("Badword Index Built", [
            ("Entries", str(len(entries))),
            ("Tokens", str(index.token_count)),
            ("Phrases", str(index.phrase_count)),
        ], emoji="📖")
        return index

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def token_count(self) -> int:
        return len(self._token_set)

    @property
    def phrase_count(self) -> int:
        return len(self._phrases)

    def __len__(self) -> int:
        return self.token_count + self.phrase_count

    # =========================================================================
    # Matching
    # =========================================================================

    @staticmethod
    def _tokens_of(text: str) -> List[str]:
        return TOKEN_PATTERN.findall(normalize_for_badwords(remove_urls(text)))

    @staticmethod
    def _phrase_text(text: str) -> str:
        return normalize_for_badwords(remove_urls(text))

    def contains(self, text: Optional[str]) -> bool:
        """True if any whole token or phrase of text is restricted."""
        if not text:
            return False

        for token in self._tokens_of(text):
            if token in self._token_set:
                return True

        if self._phrases:
            phrase_text = self._phrase_text(text)
            for pattern, _ in self._phrases:
                if pattern.search(phrase_text):
                    return True
        return False

    def find(self, text: Optional[str]) -> List[str]:
        """
        Find the restricted terms used in text.

        Returns:
            Distinct original dictionary entries, in order of detection
            (tokens first, then phrases).
        """
        if not text:
            return []

        matched: Dict[str, None] = {}
        for token in self._tokens_of(text):
            original = self._tokens.get(token)
            if original is not None:
                matched[original] = None

        if self._phrases:
            phrase_text = self._phrase_text(text)
            for pattern, original in self._phrases:
                if pattern.search(phrase_text):
                    matched[original] = None

        return list(matched)


__all__ = [
    "BadwordIndex",
    "load_word_corpus",
    "normalize_token",
    "remove_urls",
]
