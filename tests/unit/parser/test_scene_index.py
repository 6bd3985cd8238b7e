"""Tests for scene index construction."""

import pytest

from scriptmeta.models import DEFAULT_AREA, LeadsTo, Lighting
from scriptmeta.parser import (
    AliasResolver,
    HeadingRecord,
    SceneIndexBuilder,
    SluglineParser,
    scan_headings,
)


@pytest.fixture
def parser():
    """Parser with a location alias table."""
    return SluglineParser(AliasResolver({"Sylvia's House": ["HOME", "HOUSE"]}))


@pytest.fixture
def builder():
    """Scene index builder."""
    return SceneIndexBuilder()


def record(parser, chapter, line, text):
    """Build a heading record from heading text."""
    return HeadingRecord(chapter=chapter, line=line, heading=parser.parse(text))


class TestEstablishingShots:
    """Test linking of EST. headings."""

    def test_establishing_shot_links_to_next_heading(self, parser, builder):
        """Test that the following heading becomes the shot's target."""
        index = builder.build(
            [
                record(parser, 1, 393, "EST. CEMETERY - DAY"),
                record(parser, 1, 408, "EXT. CEMETERY - DAY"),
            ]
        )

        cemetery = index.get("Cemetery")
        assert len(cemetery.establishing) == 1
        shot = cemetery.establishing[0]
        assert shot.line == 393
        assert shot.time == "DAY"
        assert shot.leads_to == LeadsTo(lighting=Lighting.EXT, area=DEFAULT_AREA, line=408)
        occurrences = cemetery.lighting[Lighting.EXT][DEFAULT_AREA]
        assert [(o.chapter, o.line, o.time) for o in occurrences] == [(1, 408, "DAY")]
        assert index.orphaned == []

    def test_establishing_shot_is_not_an_occurrence(self, parser, builder):
        """Test that EST. headings never land in the scene table."""
        index = builder.build([record(parser, 1, 1, "EST. CEMETERY - DAY")])
        cemetery = index.get("Cemetery")
        assert cemetery.lighting == {}
        assert cemetery.establishing[0].leads_to is None

    def test_target_at_another_location(self, parser, builder):
        """Test that a target elsewhere records its location."""
        index = builder.build(
            [
                record(parser, 2, 14, "EST. PALM SPRINGS STREET - NIGHT"),
                record(parser, 2, 16, "INT. THERAPIST'S OFFICE - DAY (PRESENT)"),
            ]
        )
        shot = index.get("Palm Springs Street").establishing[0]
        assert shot.leads_to.location == "Therapist's Office"
        assert shot.leads_to.lighting == Lighting.INT

    def test_back_to_back_establishing_shots(self, parser, builder):
        """Test that the earlier of two EST. headings stays orphaned."""
        index = builder.build(
            [
                record(parser, 1, 10, "EST. CEMETERY - DAY"),
                record(parser, 1, 12, "EST. CHURCH - DAY"),
                record(parser, 1, 14, "INT. CHURCH - NAVE - DAY"),
            ]
        )
        assert index.get("Cemetery").establishing[0].leads_to is None
        church_shot = index.get("Church").establishing[0]
        assert church_shot.leads_to == LeadsTo(lighting=Lighting.INT, area="Nave", line=14)
        assert [(o.location, o.line) for o in index.orphaned] == [("Cemetery", 10)]

    def test_link_into_next_chapter(self, parser, builder):
        """Test that a shot closing a chapter links to the next chapter's heading."""
        index = builder.build(
            [
                record(parser, 1, 50, "EST. CEMETERY - DAY"),
                record(parser, 2, 1, "EXT. CEMETERY - DAY"),
            ]
        )
        shot = index.get("Cemetery").establishing[0]
        assert shot.leads_to == LeadsTo(
            lighting=Lighting.EXT, area=DEFAULT_AREA, line=1, chapter=2
        )
        assert index.orphaned == []

    def test_last_shot_in_stream_is_orphaned(self, parser, builder):
        """Test that a shot with no heading after it in any chapter stays orphaned."""
        index = builder.build(
            [
                record(parser, 1, 3, "EXT. CEMETERY - DAY"),
                record(parser, 2, 40, "EST. CEMETERY - NIGHT"),
            ]
        )
        assert index.get("Cemetery").establishing[0].is_orphaned
        assert [(o.chapter, o.line) for o in index.orphaned] == [(2, 40)]


class TestGrouping:
    """Test location, lighting and area grouping."""

    def test_aliases_share_a_bucket_sorted(self, parser, builder):
        """Test that variants land in one location ordered by chapter and line."""
        index = builder.build(
            [
                record(parser, 2, 5, "INT. HOUSE - NIGHT"),
                record(parser, 1, 30, "INT. HOME - DAY"),
                record(parser, 1, 7, "INT. SYLVIA'S HOUSE - DAY"),
            ]
        )
        assert [location.name for location in index.locations] == ["Sylvia's House"]
        bucket = index.get("Sylvia's House").lighting[Lighting.INT][DEFAULT_AREA]
        assert [(o.chapter, o.line) for o in bucket] == [(1, 7), (1, 30), (2, 5)]

    def test_areas_and_lighting(self, parser, builder):
        """Test nested lighting and area buckets."""
        index = builder.build(
            [
                record(parser, 1, 1, "INT. SYLVIA'S HOUSE - KITCHEN - DAY"),
                record(parser, 1, 9, "EXT. SYLVIA'S HOUSE - GARDEN - NIGHT"),
                record(parser, 1, 20, "INT. HOME - KITCHEN - NIGHT"),
                record(parser, 1, 30, "INT. HOME - DAY"),
            ]
        )
        house = index.get("Sylvia's House")
        assert set(house.lighting) == {Lighting.INT, Lighting.EXT}
        assert list(house.lighting[Lighting.INT]) == ["Kitchen", DEFAULT_AREA]
        assert [o.time for o in house.lighting[Lighting.INT]["Kitchen"]] == ["DAY", "NIGHT"]
        assert [o.line for o in house.occurrences()] == [1, 9, 20, 30]

    def test_locations_in_first_appearance_order(self, parser, builder):
        """Test location ordering."""
        index = builder.build(
            [
                record(parser, 1, 1, "EXT. CEMETERY - DAY"),
                record(parser, 1, 5, "INT. CHURCH - DAY"),
                record(parser, 1, 9, "EXT. CEMETERY - NIGHT"),
            ]
        )
        assert [location.name for location in index.locations] == ["Cemetery", "Church"]


class TestScanHeadings:
    """Test heading extraction from chapter text."""

    def test_scan_headings(self, parser):
        """Test that only heading lines are returned with line numbers."""
        text = "EST. CEMETERY - DAY\n\nRows of stones.\n\nEXT. CEMETERY - DAY\n"
        records = scan_headings(text, 3, parser)
        assert [(r.chapter, r.line, r.heading.establishing) for r in records] == [
            (3, 1, True),
            (3, 5, False),
        ]
