"""
Tests for pkgprobe.catalog.matching module.

Tests best-candidate selection including:
- Primary word extraction
- Relevance filtering (primary word, publisher filter)
- Additive scoring
- Exact id short-circuit
- Threshold and tie-breaking
"""

from __future__ import annotations

import pytest

from pkgprobe.catalog.matching import (
    MIN_SCORE,
    is_relevant,
    primary_word,
    resolve_match,
    score_candidate,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def putty_candidates(make_candidate):
    return [
        make_candidate("TTYPlus.MTPutty", "MTPuTTY"),
        make_candidate("PuTTY.PuTTY", "PuTTY", publisher="Simon Tatham"),
        make_candidate("9XCODE.ExtraPuTTY", "ExtraPuTTY"),
    ]


class TestPrimaryWord:
    """Tests for primary_word."""

    def test_skips_version_tokens(self):
        """Test that bare version numbers are not primary words."""
        assert primary_word("Notepad++ 8.6.2") == "notepad++"
        assert primary_word("2024 Office") == "office"

    def test_all_version_tokens(self):
        """Test that a purely numeric term is used as-is."""
        assert primary_word("2024") == "2024"

    def test_lowercases(self):
        assert primary_word("Visual Studio Code") == "visual"

    def test_strips_surrounding_whitespace(self):
        assert primary_word("  2024  ") == "2024"
        assert primary_word("\tPuTTY ") == "putty"


class TestRelevance:
    """Tests for is_relevant."""

    def test_primary_word_in_id_name_or_publisher(self, make_candidate):
        """Test that the primary word may appear in any descriptive field."""
        assert is_relevant(make_candidate("Foo.PuTTY"), "putty")
        assert is_relevant(make_candidate("Foo.Bar", "PuTTY Tools"), "putty")
        assert is_relevant(make_candidate("Foo.Bar", publisher="PuTTY Org"), "putty")
        assert not is_relevant(make_candidate("Foo.Bar", "Baz"), "putty")

    def test_publisher_equality_or_substring(self, make_candidate):
        """Test that the publisher filter accepts equality and containment."""
        candidate = make_candidate("Microsoft.Edge", "Edge", publisher="Microsoft Corporation")
        assert is_relevant(candidate, "edge", "Microsoft Corporation")
        assert is_relevant(candidate, "edge", "microsoft")
        assert not is_relevant(candidate, "edge", "Google")


class TestScoring:
    """Tests for score_candidate."""

    def test_exact_putty(self, make_candidate):
        """Test every bonus that applies to PuTTY.PuTTY for "PuTTY"."""
        candidate = make_candidate("PuTTY.PuTTY", "PuTTY")
        # base 10 + id term.term 100 + name exact 50 + name primary 30
        # + name starts term 25 + name starts primary 20 + id starts 15
        # + id segment 10
        assert score_candidate(candidate, "PuTTY") == 260

    def test_upstream_score_is_halved_and_floored(self, make_candidate):
        """Test that SearchScore contributes floor(score * 0.5)."""
        candidate = make_candidate("Other.Thing", "Thing", search_score=31.5)
        plain = make_candidate("Other.Thing", "Thing")
        assert score_candidate(candidate, "zzz") - score_candidate(plain, "zzz") == 15

    def test_publisher_exact_bonus(self, make_candidate):
        """Test the publisher equality bonus."""
        candidate = make_candidate("Foo.Bar", "Bar", publisher="Foo Inc")
        with_pub = score_candidate(candidate, "Bar", "foo inc")
        without = score_candidate(candidate, "Bar")
        assert with_pub - without == 75

    def test_substring_only_scores_base(self, make_candidate):
        """Test that a mere substring match gets only the base score."""
        candidate = make_candidate("TTYPlus.MTPutty", "MTPuTTY")
        assert score_candidate(candidate, "PuTTY") == 10


class TestResolveMatch:
    """Tests for resolve_match."""

    def test_putty_selects_exact_package(self, putty_candidates):
        """Test that PuTTY.PuTTY wins over MTPuTTY and ExtraPuTTY."""
        result = resolve_match(putty_candidates, "PuTTY")

        assert result.found
        assert result.candidate.id == "PuTTY.PuTTY"
        assert result.score == 260
        assert result.candidate_count == 3

    def test_package_id_filter_not_found(self, putty_candidates):
        """Test that an unmatched id filter returns not found despite scores."""
        result = resolve_match(putty_candidates, "PuTTY", package_id="Nope.Nope")

        assert not result.found
        assert result.candidate_count == 3

    def test_package_id_filter_is_case_sensitive(self, putty_candidates):
        """Test that the id short-circuit needs an exact-case match."""
        assert not resolve_match(putty_candidates, "PuTTY", package_id="putty.putty").found
        result = resolve_match(putty_candidates, "anything", package_id="9XCODE.ExtraPuTTY")
        assert result.candidate.id == "9XCODE.ExtraPuTTY"

    def test_publisher_filter_not_found(self, putty_candidates):
        """Test that a publisher matching nobody yields not found."""
        result = resolve_match(putty_candidates, "PuTTY", publisher="Microsoft")
        assert not result.found

    def test_below_threshold_not_found(self, make_candidate):
        """Test that relevant candidates scoring under MIN_SCORE are dropped."""
        candidates = [make_candidate("TTYPlus.MTPutty", "MTPuTTY")]
        assert score_candidate(candidates[0], "PuTTY") < MIN_SCORE
        assert not resolve_match(candidates, "PuTTY").found

    def test_empty_candidates(self):
        """Test that an empty search result is not found with count 0."""
        result = resolve_match([], "PuTTY")
        assert not result.found
        assert result.candidate_count == 0

    def test_tie_keeps_first_seen(self, make_candidate):
        """Test that equal scores resolve to the earlier candidate."""
        first = make_candidate("Alpha.Editor", "Editor Pro")
        second = make_candidate("Beta.Editor", "Editor Pro")
        assert score_candidate(first, "Editor") == score_candidate(second, "Editor")

        result = resolve_match([first, second], "Editor")
        assert result.candidate is first

    def test_version_in_term_uses_primary_word(self, make_candidate):
        """Test that "Notepad++ 8.6" still matches Notepad++."""
        candidates = [
            make_candidate("Notepad++.Notepad++", "Notepad++"),
            make_candidate("Other.Tool", "Tool"),
        ]
        result = resolve_match(candidates, "Notepad++ 8.6")
        assert result.candidate.id == "Notepad++.Notepad++"

    def test_padded_term_matches_like_trimmed(self, make_candidate):
        """Test that surrounding whitespace in the term does not change the result."""
        candidates = [make_candidate("Foo.2024", "2024")]

        padded = resolve_match(candidates, " 2024 ")
        trimmed = resolve_match(candidates, "2024")

        assert padded.found and trimmed.found
        assert padded.candidate is trimmed.candidate
        assert padded.score == trimmed.score
