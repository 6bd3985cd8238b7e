"""Character cue extraction from chapter text."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from re import Pattern
from typing import ClassVar

from scriptmeta.config import get_logger
from scriptmeta.models.document import CharacterEntry, Gender, SourcePosition
from scriptmeta.parser.aliases import AliasResolver
from scriptmeta.parser.slugline_parser import SluglineParser
from scriptmeta.utils import ScreenplayUtils

logger = get_logger(__name__)


@dataclass
class CueSpan:
    """One dialogue cue and the dialogue block under it."""

    name: str
    raw: str
    line: int
    dialogue_lines: int = 0


@dataclass
class Introduction:
    """An action line introducing a character, e.g. ``SYLVIA (52, F)``."""

    name: str
    line: int
    gender: Gender = Gender.NOT_SPECIFIED


@dataclass
class ChapterCharacters:
    """Characters found in one chapter, before merging across chapters."""

    chapter: int
    identifier: str = ""
    cues: list[CueSpan] = field(default_factory=list)
    introductions: list[Introduction] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        """Canonical names in first-cue order."""
        seen: dict[str, str] = {}
        for cue in self.cues:
            seen.setdefault(ScreenplayUtils.lookup_key(cue.name), cue.name)
        return list(seen.values())


@dataclass
class _Accumulator:
    name: str
    first: tuple[int, int]
    dialogue_lines: int = 0
    gender_source: tuple[int, int] | None = None
    gender: Gender = Gender.NOT_SPECIFIED


class CharacterExtractor:
    """Find dialogue cues, normalize names and count dialogue lines.

    A cue is a line holding only an upper-case name, optional parentheticals
    and an optional dual-dialogue ``^``, followed by a non-blank line. A line
    whose parenthetical states a gender is an introduction instead. Lines
    forced with ``@`` are cues regardless of case.
    """

    MAX_CUE_LENGTH = 50

    CUE_PATTERN: ClassVar[Pattern[str]] = re.compile(
        r"^(?P<name>[^()^]+?)\s*(?P<paren>(?:\([^()]*\)\s*)*)(?P<dual>\^)?$"
    )
    PARENTHETICAL_PATTERN: ClassVar[Pattern[str]] = re.compile(r"\([^()]*\)")
    NAME_PUNCTUATION: ClassVar[Pattern[str]] = re.compile(r"['.0-9\s&\-]")
    INTRODUCTION_PATTERN: ClassVar[Pattern[str]] = re.compile(
        r"(?P<name>[A-Z][A-Z0-9'.\-]*(?: [A-Z][A-Z0-9'.\-]*)*)\s*"
        r"\((?P<descriptor>[^()]*)\)"
    )
    # Gender letter closing a descriptor: "52, F", "F", "60sM", "30s, NB"
    GENDER_PATTERN: ClassVar[Pattern[str]] = re.compile(
        r"(?:^|(?<=[^A-Z])|(?<=\dS))(?P<gender>NB|M|F)$"
    )
    # Fountain forcing prefixes that mark a line as something other than a cue
    NON_CUE_PREFIXES: ClassVar[tuple[str, ...]] = (".", "!", ">", "~", "=", "#", "[")

    def __init__(
        self,
        resolver: AliasResolver | None = None,
        slugline_parser: SluglineParser | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            resolver: Character alias resolver
            slugline_parser: Parser used to recognize scene headings
        """
        self.resolver = resolver or AliasResolver()
        self.sluglines = slugline_parser or SluglineParser()

    def is_cue_line(self, line: str) -> bool:
        """Check whether a line has the shape of a character cue.

        The line after it is not inspected; see ``extract_cues``.
        """
        stripped = line.strip()
        if not stripped or len(stripped) > self.MAX_CUE_LENGTH:
            return False
        if stripped.startswith("@"):
            return bool(self._base_name(stripped[1:]))
        if stripped.startswith(self.NON_CUE_PREFIXES):
            return False
        if self.sluglines.is_heading(stripped) or ScreenplayUtils.is_transition(
            stripped
        ):
            return False

        match = self.CUE_PATTERN.match(stripped)
        if not match:
            return False
        # "SYLVIA (52, F)" alone on a line is an introduction, not a cue
        if any(
            self._descriptor_gender(paren[1:-1]) is not Gender.NOT_SPECIFIED
            for paren in self.PARENTHETICAL_PATTERN.findall(match.group("paren"))
        ):
            return False
        cleaned = self.NAME_PUNCTUATION.sub("", match.group("name"))
        return len(cleaned) > 1 and cleaned.isalpha() and cleaned.isupper()

    def extract_cues(self, text: str) -> list[tuple[str, int]]:
        """Find character cues in chapter text.

        Args:
            text: Raw chapter text

        Returns:
            (raw cue, 1-based line number) pairs in line order
        """
        lines = ScreenplayUtils.split_lines(text)
        return [(lines[i].strip(), i + 1) for i in self._cue_indices(lines)]

    def normalize(self, raw_cue: str) -> str:
        """Reduce a raw cue to its canonical character name.

        Removes the ``@`` forcing prefix, the dual-dialogue ``^`` and every
        parenthetical, including (V.O.), (O.S.), (O.C.) and (CONT'D), then
        resolves the name through the alias table.

        Args:
            raw_cue: Cue as written, e.g. ``BERNARD (V.O.)``

        Returns:
            Canonical name, e.g. ``BERNARD``
        """
        name = raw_cue.strip()
        if name.startswith("@"):
            name = name[1:]
        return self.resolver.canonical(self._base_name(name))

    def detect_gender(self, intro_line: str, name: str | None = None) -> Gender:
        """Read a gender letter from an introduction such as ``SYLVIA (52, F)``.

        Args:
            intro_line: Action or description line
            name: Only consider introductions of this character

        Returns:
            M, F or NB when the descriptor ends with that letter, otherwise NS
        """
        wanted = ScreenplayUtils.lookup_key(self.normalize(name)) if name else None
        for match in self.INTRODUCTION_PATTERN.finditer(intro_line):
            found = self.normalize(match.group("name"))
            if wanted is not None and ScreenplayUtils.lookup_key(found) != wanted:
                continue
            return self._descriptor_gender(match.group("descriptor"))
        return Gender.NOT_SPECIFIED

    def extract_chapter(
        self, text: str, chapter: int, identifier: str = ""
    ) -> ChapterCharacters:
        """Extract cues, dialogue counts and introductions from one chapter.

        Args:
            text: Raw chapter text
            chapter: 1-based chapter number
            identifier: Chapter file identifier, for logging

        Returns:
            Per-chapter partial result
        """
        lines = ScreenplayUtils.split_lines(text)
        cue_indices = self._cue_indices(lines)
        cue_set = set(cue_indices)
        spoken: set[int] = set()
        result = ChapterCharacters(chapter=chapter, identifier=identifier)

        for index in cue_indices:
            end = index + 1
            while end < len(lines) and self._continues_dialogue(lines[end], end, cue_set):
                spoken.add(end)
                end += 1
            raw = lines[index].strip()
            result.cues.append(
                CueSpan(
                    name=self.normalize(raw),
                    raw=raw,
                    line=index + 1,
                    dialogue_lines=end - index - 1,
                )
            )

        for index, line in enumerate(lines):
            if index in cue_set or index in spoken or not line.strip():
                continue
            if self.sluglines.is_heading(line):
                continue
            for match in self.INTRODUCTION_PATTERN.finditer(line):
                result.introductions.append(
                    Introduction(
                        name=self.normalize(match.group("name")),
                        line=index + 1,
                        gender=self._descriptor_gender(match.group("descriptor")),
                    )
                )

        logger.debug(
            "Extracted chapter characters",
            chapter=chapter,
            identifier=identifier,
            cues=len(result.cues),
            introductions=len(result.introductions),
        )
        return result

    def merge(
        self,
        partials: Iterable[ChapterCharacters],
        existing: Iterable[CharacterEntry] = (),
    ) -> list[CharacterEntry]:
        """Fold per-chapter results into one ordered character list.

        Partials may arrive in any order; they are re-sorted by chapter and
        line first. Dialogue counts are summed, the earliest cue or
        introduction is the first introduction, and the earliest gendered
        introduction sets the gender. A previously recorded gender survives
        when no introduction states one.

        Args:
            partials: Per-chapter results
            existing: Characters currently in the document

        Returns:
            Characters ordered by first introduction
        """
        ordered = sorted(partials, key=lambda p: p.chapter)
        records: dict[str, _Accumulator] = {}

        for partial in ordered:
            for cue in sorted(partial.cues, key=lambda c: c.line):
                key = ScreenplayUtils.lookup_key(cue.name)
                position = (partial.chapter, cue.line)
                record = records.get(key)
                if record is None:
                    record = records[key] = _Accumulator(name=cue.name, first=position)
                record.first = min(record.first, position)
                record.dialogue_lines += cue.dialogue_lines

        for partial in ordered:
            for intro in partial.introductions:
                record = records.get(ScreenplayUtils.lookup_key(intro.name))
                if record is None:
                    continue
                position = (partial.chapter, intro.line)
                record.first = min(record.first, position)
                if intro.gender is Gender.NOT_SPECIFIED:
                    continue
                if record.gender_source is None or position < record.gender_source:
                    record.gender_source = position
                    record.gender = intro.gender

        previous = {ScreenplayUtils.lookup_key(e.name): e for e in existing}
        entries = []
        for key, record in records.items():
            gender = record.gender
            name = record.name
            if key in previous:
                name = previous[key].name
                if gender is Gender.NOT_SPECIFIED:
                    gender = previous[key].gender
            entries.append(
                CharacterEntry(
                    name=name,
                    gender=gender,
                    introduced=SourcePosition(
                        chapter=record.first[0], line=record.first[1]
                    ),
                    dialogue_lines=record.dialogue_lines,
                )
            )

        # Stable sort: same-line introductions stay in first-cue order
        entries.sort(
            key=lambda e: (e.introduced.chapter, e.introduced.line)
            if e.introduced
            else (0, 0)
        )
        return entries

    def _cue_indices(self, lines: list[str]) -> list[int]:
        indices = []
        for index, line in enumerate(lines):
            if not self.is_cue_line(line):
                continue
            following = lines[index + 1] if index + 1 < len(lines) else ""
            if not following.strip() or self.sluglines.is_heading(following):
                continue
            indices.append(index)
        return indices

    def _continues_dialogue(self, line: str, index: int, cue_set: set[int]) -> bool:
        if not line.strip() or index in cue_set:
            return False
        return not self.sluglines.is_heading(line)

    def _base_name(self, name: str) -> str:
        name = name.strip()
        if name.endswith("^"):
            name = name[:-1]
        name = self.PARENTHETICAL_PATTERN.sub(" ", name)
        return ScreenplayUtils.collapse_whitespace(name)

    def _descriptor_gender(self, descriptor: str) -> Gender:
        match = self.GENDER_PATTERN.search(descriptor.strip().upper())
        if not match:
            return Gender.NOT_SPECIFIED
        return Gender(match.group("gender"))
