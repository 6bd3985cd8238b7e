"""Scene heading (slugline) parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from re import Pattern
from typing import ClassVar

from scriptmeta.models.document import DEFAULT_AREA, Lighting
from scriptmeta.parser.aliases import AliasResolver
from scriptmeta.utils import ScreenplayUtils


@dataclass(frozen=True)
class SluglineResult:
    """A parsed scene heading.

    Attributes:
        location: Canonical location name
        area: Display-cased area, or ``_default`` when the heading names none
        time: Time of day with narrative parentheticals removed
        lighting: INT, EXT or INT/EXT; None for establishing shots
        establishing: True for EST. headings
        raw_location: Location text as written in the heading
    """

    location: str
    area: str
    time: str
    lighting: Lighting | None = None
    establishing: bool = False
    raw_location: str = ""

    @property
    def has_area(self) -> bool:
        """True when the heading named an area."""
        return self.area != DEFAULT_AREA


class SluglineParser:
    """Turn a scene heading line into a ``SluglineResult``.

    Recognized tokens are ``INT.``, ``EXT.``, ``INT/EXT.``, ``INT./EXT.``,
    ``I/E.`` and ``EST.``. The remainder is split on `` - `` into location,
    optional area and time. Any other line is not a heading.
    """

    SEPARATOR = " - "

    LIGHTING_TOKENS: ClassVar[dict[str, Lighting | None]] = {
        "INT./EXT": Lighting.INT_EXT,
        "INT/EXT": Lighting.INT_EXT,
        "I/E": Lighting.INT_EXT,
        "INT": Lighting.INT,
        "EXT": Lighting.EXT,
        "EST": None,
    }

    HEADING_PATTERN: ClassVar[Pattern[str]] = re.compile(
        r"^(?P<token>INT\./EXT|INT/EXT|I/E|INT|EXT|EST)\.\s*(?P<rest>.*)$",
        re.IGNORECASE,
    )
    SCENE_NUMBER_PATTERN: ClassVar[Pattern[str]] = re.compile(r"\s*#[^#]*#\s*$")
    TRAILING_PAREN_PATTERN: ClassVar[Pattern[str]] = re.compile(r"\s*\([^()]*\)\s*$")

    def __init__(self, resolver: AliasResolver | None = None) -> None:
        """Initialize the parser.

        Args:
            resolver: Location alias resolver; names are display-cased when a
                heading's location is not in the table
        """
        self.resolver = resolver or AliasResolver()

    def is_heading(self, line: str) -> bool:
        """Check whether a line starts with a recognized heading token."""
        return self.parse(line) is not None

    def parse(self, line: str) -> SluglineResult | None:
        """Parse one line.

        Args:
            line: Candidate scene heading

        Returns:
            Parsed heading, or None if the line is not a scene heading
        """
        match = self.HEADING_PATTERN.match(line.strip())
        if not match:
            return None

        token = match.group("token").upper()
        rest = self.SCENE_NUMBER_PATTERN.sub("", match.group("rest")).strip()
        if not rest:
            return None

        segments = [segment.strip() for segment in rest.split(self.SEPARATOR)]
        # Narrative context such as (PRESENT) or (FLASHBACK) is not part of
        # the last segment's value
        segments[-1] = self._strip_parentheticals(segments[-1])

        raw_location = segments[0]
        if not raw_location:
            return None

        time = ""
        area = DEFAULT_AREA
        if len(segments) >= 2:
            time = segments[-1]
        if len(segments) >= 3:
            area = self._area_key(self.SEPARATOR.join(segments[1:-1]))

        location = self.resolver.canonical(
            raw_location, default=ScreenplayUtils.display_case(raw_location)
        )
        lighting = self.LIGHTING_TOKENS[token]

        return SluglineResult(
            location=location,
            area=area,
            time=ScreenplayUtils.collapse_whitespace(time),
            lighting=lighting,
            establishing=token == "EST",
            raw_location=raw_location,
        )

    def _strip_parentheticals(self, text: str) -> str:
        stripped = text
        while True:
            shorter = self.TRAILING_PAREN_PATTERN.sub("", stripped)
            if shorter == stripped:
                return stripped.strip()
            stripped = shorter

    @staticmethod
    def _area_key(text: str) -> str:
        area = ScreenplayUtils.display_case(text)
        if not area:
            return DEFAULT_AREA
        if area.startswith("_"):
            # Keep a literal "_default" area apart from the no-area marker
            return "_" + area
        return area
