"""Scene index construction from parsed scene headings."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from scriptmeta.config import get_logger
from scriptmeta.exceptions import OrphanedEstablishingShotError
from scriptmeta.models.document import (
    EstablishingShot,
    LeadsTo,
    SceneLocation,
    SceneOccurrence,
)
from scriptmeta.parser.slugline_parser import SluglineParser, SluglineResult
from scriptmeta.utils import ScreenplayUtils

logger = get_logger(__name__)


@dataclass(frozen=True)
class HeadingRecord:
    """A parsed scene heading and where it was found."""

    chapter: int
    line: int
    heading: SluglineResult


@dataclass
class SceneIndex:
    """Locations built from a heading stream, plus unlinked establishing shots."""

    locations: list[SceneLocation] = field(default_factory=list)
    orphaned: list[OrphanedEstablishingShotError] = field(default_factory=list)

    def get(self, name: str) -> SceneLocation | None:
        """Return the location with the given canonical name."""
        for location in self.locations:
            if location.name == name:
                return location
        return None


def scan_headings(
    text: str, chapter: int, parser: SluglineParser
) -> list[HeadingRecord]:
    """Parse every scene heading in one chapter's text.

    Args:
        text: Raw chapter text
        chapter: 1-based chapter number
        parser: Slugline parser carrying the location alias table

    Returns:
        Heading records in line order
    """
    records = []
    for index, line in enumerate(ScreenplayUtils.split_lines(text)):
        heading = parser.parse(line)
        if heading is not None:
            records.append(HeadingRecord(chapter=chapter, line=index + 1, heading=heading))
    return records


class SceneIndexBuilder:
    """Group scene headings by location, lighting and area.

    Headings are processed in chapter then line order with at most one pending
    establishing shot. The next regular heading, in this chapter or a later one,
    becomes the pending shot's ``leads_to`` target. A second EST. heading before
    that, or the end of the stream, leaves the pending shot unlinked.
    """

    def build(self, headings: Iterable[HeadingRecord]) -> SceneIndex:
        """Build the location hierarchy.

        Args:
            headings: Heading records in any order; they are re-sorted by
                chapter and line before linking

        Returns:
            Locations in order of first appearance and the orphaned shots
        """
        locations: dict[str, SceneLocation] = {}
        pending: tuple[SceneLocation, EstablishingShot] | None = None

        for record in sorted(headings, key=lambda r: (r.chapter, r.line)):
            heading = record.heading
            location = self._location(locations, heading.location)

            if heading.establishing or heading.lighting is None:
                shot = EstablishingShot(
                    chapter=record.chapter, time=heading.time, line=record.line
                )
                location.establishing.append(shot)
                pending = (location, shot)
                continue

            if pending is not None:
                pending_location, shot = pending
                shot.leads_to = LeadsTo(
                    lighting=heading.lighting,
                    area=heading.area,
                    line=record.line,
                    location=(
                        heading.location
                        if heading.location != pending_location.name
                        else None
                    ),
                    chapter=(
                        record.chapter if record.chapter != shot.chapter else None
                    ),
                )
                pending = None

            areas = location.lighting.setdefault(heading.lighting, {})
            areas.setdefault(heading.area, []).append(
                SceneOccurrence(
                    chapter=record.chapter, time=heading.time, line=record.line
                )
            )

        index = SceneIndex(locations=list(locations.values()))
        for location in index.locations:
            for shot in location.establishing:
                if shot.is_orphaned:
                    index.orphaned.append(
                        OrphanedEstablishingShotError(
                            location=location.name,
                            chapter=shot.chapter,
                            line=shot.line,
                        )
                    )

        logger.debug(
            "Built scene index",
            locations=len(index.locations),
            orphaned=len(index.orphaned),
        )
        return index

    @staticmethod
    def _location(locations: dict[str, SceneLocation], name: str) -> SceneLocation:
        location = locations.get(name)
        if location is None:
            location = locations[name] = SceneLocation(name=name)
        return location
