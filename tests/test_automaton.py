"""Tests for the Aho-Corasick pattern matcher."""

from __future__ import annotations

from pathlib import Path

import pytest

from contentfinder.models import FileOpenError
from contentfinder.search.automaton import Match, PatternMatcher


class TestConstruction:
    """Test automaton construction."""

    def test_empty_pattern_list_rejected(self) -> None:
        """Should refuse to build without patterns."""
        with pytest.raises(ValueError):
            PatternMatcher([])

    def test_empty_pattern_rejected(self) -> None:
        """Should refuse a zero-length pattern."""
        with pytest.raises(ValueError):
            PatternMatcher(["foo", ""])

    def test_duplicates_collapse(self) -> None:
        """Should keep one logical pattern per byte sequence."""
        matcher = PatternMatcher(["foo", "bar", "foo", b"bar"])

        assert matcher.patterns == ("foo", "bar")
        assert len(matcher) == 2

    def test_shared_prefixes_share_states(self) -> None:
        """Should build a trie where common prefixes share states."""
        matcher = PatternMatcher(["ab", "abc"])

        assert matcher.state_count == 4


class TestIterMatches:
    """Test occurrence reporting."""

    def test_classic_overlaps(self) -> None:
        """Should report overlapping and nested occurrences."""
        matcher = PatternMatcher(["he", "she", "his", "hers"])

        matches = list(matcher.iter_matches(b"ushers"))

        assert matches == [
            Match(pattern="she", start=1, end=4),
            Match(pattern="he", start=2, end=4),
            Match(pattern="hers", start=2, end=6),
        ]

    def test_self_overlapping_pattern(self) -> None:
        """Should report every start offset of a repeating pattern."""
        matcher = PatternMatcher(["aa"])

        starts = [match.start for match in matcher.iter_matches(b"aaaa")]

        assert starts == [0, 1, 2]

    def test_failure_transition(self) -> None:
        """Should recover through the failure links after a partial match."""
        matcher = PatternMatcher(["abcd", "bce"])

        matches = list(matcher.iter_matches(b"abce"))

        assert matches == [Match(pattern="bce", start=1, end=4)]

    def test_no_matches(self) -> None:
        """Should yield nothing when no pattern occurs."""
        matcher = PatternMatcher(["needle"])

        assert list(matcher.iter_matches(b"haystack")) == []
        assert list(matcher.iter_matches(b"")) == []


class TestFindPatterns:
    """Test per-buffer deduplicated results."""

    def test_substring_patterns_both_reported(self) -> None:
        """Should report both a pattern and its extension."""
        matcher = PatternMatcher(["ab", "abc"])

        assert matcher.find_patterns(b"xxabcxx") == ("ab", "abc")

    def test_first_occurrence_order(self) -> None:
        """Should order patterns by where they first start."""
        matcher = PatternMatcher(["bar", "foo"])

        assert matcher.find_patterns(b"foobar foo bar") == ("foo", "bar")

    def test_tie_keeps_pattern_order(self) -> None:
        """Should break same-offset ties by pattern list order."""
        matcher = PatternMatcher(["abc", "ab"])

        assert matcher.find_patterns(b"abc") == ("abc", "ab")

    def test_longer_pattern_ending_later_starts_earlier(self) -> None:
        """Should order by start offset even when matches end out of order."""
        matcher = PatternMatcher(["cd", "abcde"])

        assert matcher.find_patterns(b"abcde") == ("abcde", "cd")

    def test_repeated_occurrences_reported_once(self) -> None:
        """Should deduplicate by pattern, not by occurrence."""
        matcher = PatternMatcher(["x"])

        assert matcher.find_patterns(b"xxxxx") == ("x",)

    def test_case_sensitive(self) -> None:
        """Should match bytes exactly."""
        matcher = PatternMatcher(["Foo"])

        assert matcher.find_patterns(b"foo FOO") == ()

    def test_binary_patterns(self) -> None:
        """Should match arbitrary byte sequences."""
        matcher = PatternMatcher([b"\x00\xff", b"\xde\xad"])

        assert matcher.find_patterns(b"\x01\x00\xff\x02") == (b"\x00\xff",)

    def test_utf8_patterns(self) -> None:
        """Should encode text patterns as UTF-8."""
        matcher = PatternMatcher(["caffè"])

        assert matcher.find_patterns("un caffè".encode("utf-8")) == ("caffè",)

    def test_reusable_across_buffers(self) -> None:
        """Should give independent results for each buffer."""
        matcher = PatternMatcher(["foo", "bar"])

        assert matcher.find_patterns(b"foo") == ("foo",)
        assert matcher.find_patterns(b"bar") == ("bar",)
        assert matcher.find_patterns(b"baz") == ()


class TestScanFile:
    """Test scanning files from disk."""

    def test_scan_file(self, tmp_path: Path) -> None:
        """Should read the whole file and report its patterns."""
        target = tmp_path / "data.txt"
        target.write_bytes(b"prefix " * 1000 + b"bar then foo")
        matcher = PatternMatcher(["foo", "bar"])

        assert matcher.scan_file(str(target)) == ("bar", "foo")

    def test_scan_missing_file(self, tmp_path: Path) -> None:
        """Should raise FileOpenError for a file that cannot be opened."""
        matcher = PatternMatcher(["foo"])

        with pytest.raises(FileOpenError):
            matcher.scan_file(str(tmp_path / "gone.txt"))
