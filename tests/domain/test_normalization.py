"""Tests for text normalization and similarity used by catalog matching."""

import pytest

from trackbridge.domain.matching import (
    WORD_OVERLAP_THRESHOLD,
    normalize,
    similar,
    word_overlap,
)


class TestNormalize:
    """Test normalize()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("The Beatles", "the beatles"),
            ("  Hey   Jude  ", "hey jude"),
            ("Don't Stop Me Now!", "dont stop me now"),
            ("AC/DC", "acdc"),
            ("Song (feat. Someone) - Remastered 2011", "song feat someone remastered 2011"),
            ("tab\tand\nnewline", "tab and newline"),
            ("", ""),
            ("!!!", ""),
        ],
    )
    def test_normalizes_case_punctuation_and_whitespace(self, raw, expected):
        assert normalize(raw) == expected

    @pytest.mark.parametrize(
        "raw", ["The Beatles", "  Hey   Jude  ", "Don't (Stop)", "Beyoncé", ""]
    )
    def test_is_idempotent(self, raw):
        once = normalize(raw)
        assert normalize(once) == once

    def test_keeps_underscores_and_digits(self):
        assert normalize("track_01 Mix") == "track_01 mix"

    def test_decomposed_accents_match_composed(self):
        decomposed = "Beyonce\u0301"
        assert normalize(decomposed) == normalize("Beyonc\u00e9") == "beyonc\u00e9"
        assert similar(normalize(decomposed), normalize("BEYONC\u00c9"))
        assert normalize(normalize(decomposed)) == normalize(decomposed)


class TestWordOverlap:
    """Test word_overlap()."""

    def test_identical_word_sets(self):
        assert word_overlap("a b c", "c b a") == 1.0

    def test_divides_by_larger_set(self):
        assert word_overlap("a b", "a b c d") == 0.5

    def test_disjoint(self):
        assert word_overlap("a b", "c d") == 0.0


class TestSimilar:
    """Test similar() on already normalized strings."""

    def test_exact_match(self):
        assert similar("hey jude", "hey jude")

    def test_substring_either_direction(self):
        assert similar("beatles", "the beatles")
        assert similar("the beatles", "beatles")

    def test_normalized_band_name_prefix(self):
        assert similar(normalize("The Beatles"), normalize("beatles"))

    def test_word_overlap_at_threshold(self):
        # 4 of 5 words shared
        assert word_overlap("a b c d e", "a b c d x") == WORD_OVERLAP_THRESHOLD
        assert similar("a b c d e", "a b c d x")

    def test_word_overlap_below_threshold(self):
        assert not similar("a b c d", "a b x y")

    def test_unrelated(self):
        assert not similar("a b", "c d")

    def test_empty_string_is_contained_in_anything(self):
        assert similar("", "anything")
