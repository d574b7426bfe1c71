"""
Tests for pkgprobe.versioning module.

Tests WinGet-style version ordering including:
- Numeric segment comparison
- Zero padding of the shorter version
- Leading "v" prefix handling
- Case-insensitive string fallback
- Latest-version selection and sorting
"""

from __future__ import annotations

import pytest

from pkgprobe.versioning import compare_versions, latest_version, sort_versions

pytestmark = pytest.mark.unit


class TestCompareVersions:
    """Tests for compare_versions."""

    @pytest.mark.parametrize(
        "older, newer",
        [
            ("1.2.3", "1.2.4"),
            ("1.9", "1.10"),
            ("24.09", "24.10"),
            ("0.80.0.0", "0.81.0.0"),
            ("2", "10"),
        ],
    )
    def test_numeric_segments(self, older, newer):
        """Test that numeric segments compare as integers, not strings."""
        assert compare_versions(older, newer) == -1
        assert compare_versions(newer, older) == 1

    def test_shorter_version_is_zero_padded(self):
        """Test that "1.0" equals "1.0.0" and "1.0.0.0"."""
        assert compare_versions("1.0", "1.0.0") == 0
        assert compare_versions("1", "1.0.0.0") == 0
        assert compare_versions("1.0", "1.0.1") == -1

    def test_leading_v_is_ignored(self):
        """Test that a single leading v/V prefix is stripped."""
        assert compare_versions("v1.2.3", "1.2.3") == 0
        assert compare_versions("V2.0", "v1.9") == 1

    def test_non_numeric_segments_compare_case_insensitively(self):
        """Test that string segments compare ordinally ignoring case."""
        assert compare_versions("1.0.beta", "1.0.BETA") == 0
        assert compare_versions("1.0.alpha", "1.0.beta") == -1

    def test_mixed_segment_falls_back_to_string(self):
        """Test that a numeric vs non-numeric pair is compared as strings."""
        # "10" vs "9a": string comparison puts "1" before "9"
        assert compare_versions("1.10", "1.9a") == -1

    def test_known_orderings(self):
        assert compare_versions("2.0", "1.9.9") == 1
        assert compare_versions("1.9.9", "2.0") == -1

    def test_equal_versions(self):
        """Test that identical versions compare equal."""
        assert compare_versions("3.4.5", "3.4.5") == 0

    def test_antisymmetry(self):
        """Test that swapping arguments negates the result."""
        pairs = [("1.2", "1.10"), ("1.0.beta", "1.0.1"), ("v3", "2.9.9")]
        for a, b in pairs:
            assert compare_versions(a, b) == -compare_versions(b, a)


class TestLatestVersion:
    """Tests for latest_version and sort_versions."""

    def test_latest_of_unsorted_list(self):
        """Test that the highest version is picked regardless of order."""
        versions = ["0.80.0.0", "0.81.0.0", "0.79.0.0"]
        assert latest_version(versions) == "0.81.0.0"

    def test_latest_is_numeric_not_lexicographic(self):
        """Test that "1.10" beats "1.9" (string max would not)."""
        assert latest_version(["1.9", "1.10", "1.2"]) == "1.10"

    def test_latest_simple_cases(self):
        assert latest_version(["1.0", "2.0", "1.5"]) == "2.0"
        assert latest_version(["9"]) == "9"

    def test_latest_of_empty_is_none(self):
        """Test that an empty list has no latest version."""
        assert latest_version([]) is None

    def test_latest_keeps_first_of_equal_versions(self):
        """Test that equal versions resolve to the first one seen."""
        assert latest_version(["1.0", "1.0.0"]) == "1.0"

    def test_sort_descending_by_default(self):
        """Test that sort_versions puts the newest first."""
        assert sort_versions(["1.2", "1.10", "1.9"]) == ["1.10", "1.9", "1.2"]

    def test_sort_ascending(self):
        """Test ascending sort."""
        assert sort_versions(["2.0", "v1.5", "1.10"], descending=False) == [
            "v1.5",
            "1.10",
            "2.0",
        ]
