"""Section rebuild stages.

Each stage is a function ``(document, context) -> StageResult`` that derives
one section from chapter text and returns a new document with only that
section replaced. ``REBUILD_STAGES`` fixes the order in which a full rebuild
folds them.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from scriptmeta.config.settings import ScriptMetaSettings
from scriptmeta.models.document import (
    ChapterEntry,
    ChapterList,
    ChapterStatus,
    CharactersSection,
    FilesSection,
    ProjectDocument,
    ScenesSection,
    StatusSummary,
    VoiceEntry,
    VoicesSection,
)
from scriptmeta.models.report import RebuildWarning, SectionDiff, WarningKind
from scriptmeta.parser import (
    AliasResolver,
    CharacterExtractor,
    SceneIndexBuilder,
    SluglineParser,
    scan_headings,
)
from scriptmeta.rebuild.diff import diff_entries, keyed
from scriptmeta.rebuild.intake import CancelSignal, ChapterIntake, map_chapters
from scriptmeta.utils import ScreenplayUtils


class SectionKind(str, Enum):
    """Sections a rebuild can target."""

    CHAPTERS = "chapters"
    CHARACTERS = "characters"
    VOICES = "voices"
    SCENES = "scenes"
    STATUS = "status"
    ALL = "all"


@dataclass(frozen=True)
class RebuildContext:
    """Inputs shared by every stage of one rebuild pass.

    Attributes:
        intake: Ordered chapters and intake warnings
        settings: Settings for worker pool size and default phase
        now: Timestamp stamped on every section rebuilt in this pass
        cancel: Optional cooperative cancellation flag
    """

    intake: ChapterIntake
    settings: ScriptMetaSettings
    now: datetime
    cancel: CancelSignal | None = None

    def chapter_identifier(self, number: int) -> str | None:
        """Identifier of the chapter with the given 1-based number."""
        if 1 <= number <= len(self.intake.identifiers):
            return self.intake.identifiers[number - 1]
        return None


@dataclass
class StageResult:
    """Document produced by a stage, its section diff and its warnings."""

    document: ProjectDocument
    diff: SectionDiff
    warnings: list[RebuildWarning] = field(default_factory=list)


RebuildStage = Callable[[ProjectDocument, RebuildContext], StageResult]


def _replace(
    document: ProjectDocument, context: RebuildContext, **sections: Any
) -> ProjectDocument:
    return document.model_copy(update={**sections, "updated": context.now.date()})


def _alias_warnings(resolver: AliasResolver, section: str) -> list[RebuildWarning]:
    return [
        RebuildWarning(kind=WarningKind.ALIAS, message=collision.message, section=section)
        for collision in resolver.collisions
    ]


def rebuild_chapters(document: ProjectDocument, context: RebuildContext) -> StageResult:
    """List chapter files in natural order.

    Focus, intent and status of known chapters are kept. New chapters start
    incomplete. A chapter that could not be read keeps its existing entry and
    is not added when it has none.
    """
    files = document.files or FilesSection()
    existing = {entry.file: entry for entry in files.chapters.items}
    failed = set(context.intake.failed)

    items = []
    for identifier in context.intake.identifiers:
        if identifier in existing:
            items.append(existing[identifier].model_copy())
        elif identifier not in failed:
            items.append(ChapterEntry(file=identifier))

    section = files.model_copy(
        update={"chapters": ChapterList(items=items), "rebuilt_at": context.now}
    )
    diff = diff_entries(
        SectionKind.CHAPTERS.value,
        keyed(files.chapters.items, "file"),
        keyed(items, "file"),
    )
    return StageResult(document=_replace(document, context, files=section), diff=diff)


def rebuild_characters(
    document: ProjectDocument, context: RebuildContext
) -> StageResult:
    """Derive the character list from dialogue cues in every readable chapter."""
    characters = document.characters or CharactersSection()
    resolver = AliasResolver(characters.aliases, table_name="characters.aliases")
    extractor = CharacterExtractor(resolver)
    stage = SectionKind.CHARACTERS.value

    partials, warnings = map_chapters(
        lambda chapter: extractor.extract_chapter(
            chapter.text, chapter.number, chapter.identifier
        ),
        context.intake.chapters,
        stage=stage,
        max_workers=context.settings.max_workers,
        cancel=context.cancel,
    )
    entries = extractor.merge(
        [partial for _, partial in partials], existing=characters.entries
    )

    section = characters.model_copy(
        update={"entries": entries, "rebuilt_at": context.now}
    )
    diff = diff_entries(
        stage, keyed(characters.entries, "name"), keyed(entries, "name")
    )
    return StageResult(
        document=_replace(document, context, characters=section),
        diff=diff,
        warnings=_alias_warnings(resolver, stage) + warnings,
    )


def rebuild_voices(document: ProjectDocument, context: RebuildContext) -> StageResult:
    """Project the current characters onto the voice list.

    Casting fields of existing voices are kept. Voices whose character is
    gone stay in the list, after the current ones, marked stale.
    """
    voices = document.voices or VoicesSection()
    characters = document.characters.entries if document.characters else []
    previous = {ScreenplayUtils.lookup_key(v.name): v for v in voices.entries}

    entries: list[VoiceEntry] = []
    current: set[str] = set()
    for character in characters:
        key = ScreenplayUtils.lookup_key(character.name)
        current.add(key)
        projected = {
            "name": character.name,
            "gender": character.gender,
            "introduced": character.introduced,
            "dialogue_lines": character.dialogue_lines,
        }
        voice = previous.get(key)
        if voice is None:
            entries.append(VoiceEntry(**projected))
        else:
            entries.append(voice.model_copy(update={**projected, "stale": None}))

    for key, voice in previous.items():
        if key not in current:
            entries.append(voice.model_copy(update={"stale": True}))

    section = voices.model_copy(update={"entries": entries, "rebuilt_at": context.now})
    diff = diff_entries(
        SectionKind.VOICES.value, keyed(voices.entries, "name"), keyed(entries, "name")
    )
    return StageResult(document=_replace(document, context, voices=section), diff=diff)


def rebuild_scenes(document: ProjectDocument, context: RebuildContext) -> StageResult:
    """Index scene headings by location, linking establishing shots."""
    scenes = document.scenes or ScenesSection()
    resolver = AliasResolver(scenes.aliases, table_name="scenes.aliases")
    parser = SluglineParser(resolver)
    stage = SectionKind.SCENES.value

    batches, warnings = map_chapters(
        lambda chapter: scan_headings(chapter.text, chapter.number, parser),
        context.intake.chapters,
        stage=stage,
        max_workers=context.settings.max_workers,
        cancel=context.cancel,
    )
    index = SceneIndexBuilder().build(
        record for _, batch in batches for record in batch
    )

    orphan_warnings = [
        RebuildWarning(
            kind=WarningKind.ORPHAN,
            message=orphan.message,
            section=stage,
            chapter=context.chapter_identifier(orphan.chapter),
        )
        for orphan in index.orphaned
    ]

    section = scenes.model_copy(
        update={"locations": index.locations, "rebuilt_at": context.now}
    )
    diff = diff_entries(
        stage, keyed(scenes.locations, "name"), keyed(index.locations, "name")
    )
    return StageResult(
        document=_replace(document, context, scenes=section),
        diff=diff,
        warnings=_alias_warnings(resolver, stage) + warnings + orphan_warnings,
    )


def _status_snapshot(status: StatusSummary | None) -> dict[str, Any]:
    if status is None:
        return {}
    return {
        "phase": status.phase,
        "chaptersComplete": status.chapters_complete,
        "chaptersTotal": status.chapters_total,
        "danglingThreads": list(status.dangling_threads),
    }


def rebuild_status(document: ProjectDocument, context: RebuildContext) -> StageResult:
    """Recount chapter progress; phase and dangling threads are kept."""
    previous = document.status
    items = document.files.chapters.items if document.files else []

    status = StatusSummary(
        phase=previous.phase if previous else context.settings.default_phase,
        chapters_complete=sum(
            1 for item in items if item.status == ChapterStatus.COMPLETE
        ),
        chapters_total=len(items),
        dangling_threads=list(previous.dangling_threads) if previous else [],
        rebuilt_at=context.now,
    )
    diff = diff_entries(
        SectionKind.STATUS.value, _status_snapshot(previous), _status_snapshot(status)
    )
    return StageResult(document=_replace(document, context, status=status), diff=diff)


REBUILD_STAGES: tuple[tuple[SectionKind, RebuildStage], ...] = (
    (SectionKind.CHAPTERS, rebuild_chapters),
    (SectionKind.CHARACTERS, rebuild_characters),
    (SectionKind.VOICES, rebuild_voices),
    (SectionKind.SCENES, rebuild_scenes),
    (SectionKind.STATUS, rebuild_status),
)
