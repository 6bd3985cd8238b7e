"""Tests for screenplay name utilities."""

import pytest

from scriptmeta.utils import ScreenplayUtils


class TestNameHelpers:
    """Test name normalization helpers."""

    def test_collapse_whitespace(self):
        """Test trimming and collapsing inner whitespace."""
        assert ScreenplayUtils.collapse_whitespace("  DR.   PATEL \t") == "DR. PATEL"

    def test_lookup_key(self):
        """Test case and spacing insensitive keys."""
        assert ScreenplayUtils.lookup_key("Sylvia's  House") == ScreenplayUtils.lookup_key(
            "SYLVIA'S HOUSE"
        )

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("SYLVIA'S HOUSE", "Sylvia's House"),
            ("THERAPIST'S OFFICE", "Therapist's Office"),
            ("PALM  SPRINGS STREET", "Palm Springs Street"),
            ("WALK-IN CLOSET", "Walk-In Closet"),
        ],
    )
    def test_display_case(self, text, expected):
        """Test display casing of heading fragments."""
        assert ScreenplayUtils.display_case(text) == expected


class TestTransitions:
    """Test transition detection."""

    @pytest.mark.parametrize(
        "line",
        ["CUT TO:", "SMASH CUT TO:", "FADE IN:", "FADE OUT.", "> THE END", "DISSOLVE TO:"],
    )
    def test_transitions(self, line):
        """Test lines that are transitions."""
        assert ScreenplayUtils.is_transition(line)

    @pytest.mark.parametrize("line", ["", "SYLVIA", "BERNARD (V.O.)", "> CENTERED <"])
    def test_not_transitions(self, line):
        """Test lines that are not transitions."""
        assert not ScreenplayUtils.is_transition(line)


class TestChapterOrdering:
    """Test natural ordering of chapter identifiers."""

    def test_natural_sort(self):
        """Test that numbers compare numerically."""
        identifiers = ["chapter-10", "chapter-2", "Chapter-1", "appendix"]
        assert sorted(identifiers, key=ScreenplayUtils.natural_sort_key) == [
            "appendix",
            "Chapter-1",
            "chapter-2",
            "chapter-10",
        ]

    def test_split_lines_crlf(self):
        """Test that CRLF text splits like LF text."""
        assert ScreenplayUtils.split_lines("A\r\nB\r\n") == ["A", "B", ""]
