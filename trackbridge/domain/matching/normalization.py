"""Pure text normalization and similarity checks for catalog matching.

These functions contain no external dependencies. ``similar`` expects both
arguments to have been passed through ``normalize`` first.
"""

import re
import unicodedata

# Minimum share of shared words for two strings to count as similar
WORD_OVERLAP_THRESHOLD = 0.8

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize(value: str) -> str:
    """Lowercase, strip punctuation, collapse whitespace and trim.

    Input is composed to NFC first so accented letters survive whichever
    Unicode form the catalog sent.
    """
    lowered = unicodedata.normalize("NFC", value).lower()
    without_punctuation = _PUNCTUATION.sub("", lowered)
    return _WHITESPACE.sub(" ", without_punctuation).strip()


def word_overlap(a: str, b: str) -> float:
    """Share of distinct words two strings have in common."""
    words_a = set(a.split(" "))
    words_b = set(b.split(" "))
    return len(words_a & words_b) / max(len(words_a), len(words_b))


def similar(a: str, b: str) -> bool:
    """Check whether two normalized strings refer to the same thing.

    True on an exact match, when one string contains the other, or when at
    least ``WORD_OVERLAP_THRESHOLD`` of their words are shared.
    """
    if a == b:
        return True

    if a in b or b in a:
        return True

    return word_overlap(a, b) >= WORD_OVERLAP_THRESHOLD
