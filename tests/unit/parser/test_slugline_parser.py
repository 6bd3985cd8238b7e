"""Tests for scene heading parsing."""

import pytest

from scriptmeta.models import DEFAULT_AREA, Lighting
from scriptmeta.parser import AliasResolver, SluglineParser


@pytest.fixture
def parser():
    """Parser without location aliases."""
    return SluglineParser()


class TestSluglineParser:
    """Test SluglineParser.parse."""

    def test_location_area_and_time(self, parser):
        """Test a heading with location, area and time."""
        result = parser.parse("INT. SYLVIA'S HOUSE - KITCHEN - DAY")
        assert result is not None
        assert result.location == "Sylvia's House"
        assert result.lighting == Lighting.INT
        assert result.area == "Kitchen"
        assert result.time == "DAY"
        assert result.establishing is False
        assert result.has_area is True

    def test_no_area_uses_default_marker(self, parser):
        """Test that a heading without area gets the reserved area key."""
        result = parser.parse("EXT. PALM SPRINGS STREET - NIGHT")
        assert result.location == "Palm Springs Street"
        assert result.lighting == Lighting.EXT
        assert result.area == DEFAULT_AREA
        assert result.time == "NIGHT"
        assert result.has_area is False

    def test_trailing_parenthetical_is_stripped_from_time(self, parser):
        """Test that narrative context is not part of the time."""
        result = parser.parse("INT. THERAPIST'S OFFICE - DAY (PRESENT)")
        assert result.location == "Therapist's Office"
        assert result.time == "DAY"

    def test_establishing_shot_is_tagged(self, parser):
        """Test that EST. headings are marked as establishing shots."""
        result = parser.parse("EST. CEMETERY - DAY")
        assert result.establishing is True
        assert result.lighting is None
        assert result.location == "Cemetery"
        assert result.time == "DAY"

    @pytest.mark.parametrize(
        "line",
        [
            "INT/EXT. CAR - MOVING - NIGHT",
            "I/E. CAR - MOVING - NIGHT",
            "INT./EXT. CAR - MOVING - NIGHT",
        ],
    )
    def test_combined_lighting_tokens(self, parser, line):
        """Test every spelling of the combined interior/exterior token."""
        result = parser.parse(line)
        assert result.lighting == Lighting.INT_EXT
        assert result.location == "Car"
        assert result.area == "Moving"
        assert result.time == "NIGHT"

    def test_multiple_area_segments_are_joined(self, parser):
        """Test that middle segments form one area."""
        result = parser.parse("INT. HOSPITAL - WARD B - ROOM 4 - NIGHT")
        assert result.location == "Hospital"
        assert result.area == "Ward B - Room 4"
        assert result.time == "NIGHT"

    def test_heading_without_time(self, parser):
        """Test a heading with only a location."""
        result = parser.parse("INT. KITCHEN")
        assert result.location == "Kitchen"
        assert result.time == ""
        assert result.area == DEFAULT_AREA

    def test_scene_number_is_ignored(self, parser):
        """Test that a trailing Fountain scene number is dropped."""
        result = parser.parse("INT. KITCHEN - DAY #12A#")
        assert result.time == "DAY"

    def test_literal_default_area_does_not_collide(self, parser):
        """Test that an area spelled _default stays distinct from no area."""
        result = parser.parse("INT. STUDIO - _DEFAULT - DAY")
        assert result.area != DEFAULT_AREA
        assert result.area == "__default"

    def test_lowercase_token(self, parser):
        """Test that heading tokens are matched regardless of case."""
        result = parser.parse("int. kitchen - day")
        assert result.lighting == Lighting.INT
        assert result.location == "Kitchen"

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "SYLVIA",
            "She walks INT. the room.",
            "INTERIOR. KITCHEN - DAY",
            "INT KITCHEN - DAY",
            "INT.",
            "CUT TO:",
        ],
    )
    def test_non_headings(self, parser, line):
        """Test that other lines are not headings."""
        assert parser.parse(line) is None
        assert parser.is_heading(line) is False

    def test_location_aliases(self):
        """Test that variants resolve to the canonical location."""
        parser = SluglineParser(AliasResolver({"Sylvia's House": ["HOME", "HOUSE"]}))
        assert parser.parse("INT. HOME - NIGHT").location == "Sylvia's House"
        assert parser.parse("INT. HOUSE - DAY").location == "Sylvia's House"
        result = parser.parse("INT. HOME - NIGHT")
        assert result.raw_location == "HOME"
