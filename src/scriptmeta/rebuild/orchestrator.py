"""Run rebuild stages in dependency order and collect the diff report."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone

from pydantic import ValidationError as PydanticValidationError

from scriptmeta.config import get_logger, get_settings
from scriptmeta.config.settings import ScriptMetaSettings
from scriptmeta.exceptions import (
    MalformedStructureError,
    RebuildCancelledError,
    UnsupportedSchemaVersionError,
)
from scriptmeta.models.document import SUPPORTED_SCHEMA_VERSIONS, ProjectDocument
from scriptmeta.models.report import DiffReport, RebuildResult
from scriptmeta.rebuild.intake import CancelSignal, ChapterSource, load_chapters
from scriptmeta.rebuild.stages import (
    REBUILD_STAGES,
    RebuildContext,
    RebuildStage,
    SectionKind,
)
from scriptmeta.utils import ScreenplayUtils

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class RebuildOrchestrator:
    """Rebuild derived document sections from chapter text.

    The input document is never modified. Each call returns a new document
    and a ``DiffReport``. Stages run in the fixed order chapters, characters,
    voices, scenes, status; a full rebuild feeds each stage the output of the
    previous one.
    """

    def __init__(
        self,
        settings: ScriptMetaSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            settings: Settings for worker pool size and default phase
                (defaults to the global settings)
            clock: Source of rebuild timestamps
        """
        self.settings = settings or get_settings()
        self.clock = clock or _utc_now

    def rebuild_section(
        self,
        kind: SectionKind | str,
        document: ProjectDocument,
        chapter_texts: Mapping[str, ChapterSource],
        cancel: CancelSignal | None = None,
    ) -> RebuildResult:
        """Rebuild one section, or every section for ``SectionKind.ALL``.

        Args:
            kind: Section to rebuild
            document: Current document
            chapter_texts: Chapter identifier to raw text
            cancel: Optional cooperative cancellation flag

        Returns:
            Updated document and diff report

        Raises:
            UnsupportedSchemaVersionError: If the schema version is not 1.0
            MalformedStructureError: If the document is internally inconsistent
        """
        kind = SectionKind(kind)
        if kind is SectionKind.ALL:
            return self.rebuild_all(document, chapter_texts, cancel=cancel)
        stages = [(k, stage) for k, stage in REBUILD_STAGES if k is kind]
        return self._run(stages, document, chapter_texts, cancel)

    def rebuild_all(
        self,
        document: ProjectDocument,
        chapter_texts: Mapping[str, ChapterSource],
        cancel: CancelSignal | None = None,
    ) -> RebuildResult:
        """Rebuild every derived section in one pass.

        Args:
            document: Current document
            chapter_texts: Chapter identifier to raw text
            cancel: Optional cooperative cancellation flag

        Returns:
            Updated document and diff report

        Raises:
            UnsupportedSchemaVersionError: If the schema version is not 1.0
            MalformedStructureError: If the document is internally inconsistent
        """
        return self._run(REBUILD_STAGES, document, chapter_texts, cancel)

    def _run(
        self,
        stages: Iterable[tuple[SectionKind, RebuildStage]],
        document: ProjectDocument,
        chapter_texts: Mapping[str, ChapterSource],
        cancel: CancelSignal | None,
    ) -> RebuildResult:
        self.validate_document(document)

        current = document.model_copy(deep=True)
        intake = load_chapters(chapter_texts)
        report = DiffReport(warnings=list(intake.warnings))
        context = RebuildContext(
            intake=intake, settings=self.settings, now=self.clock(), cancel=cancel
        )

        logger.info(
            "Starting rebuild",
            title=document.title,
            chapters=len(intake.identifiers),
            unreadable=len(intake.warnings),
        )

        for kind, stage in stages:
            try:
                if cancel is not None and cancel.is_set():
                    raise RebuildCancelledError(kind.value)
                result = stage(current, context)
            except RebuildCancelledError as e:
                logger.info(
                    "Rebuild stopped", stage=e.stage, completed=list(report.sections)
                )
                report.cancelled = True
                return RebuildResult(document=current, report=report)

            current = result.document
            report.sections[kind.value] = result.diff
            report.warnings.extend(result.warnings)
            logger.info(
                "Rebuilt section",
                section=kind.value,
                added=len(result.diff.added),
                removed=len(result.diff.removed),
                changed=len(result.diff.changed),
                warnings=len(result.warnings),
            )

        return RebuildResult(document=current, report=report)

    @staticmethod
    def validate_document(document: ProjectDocument) -> None:
        """Refuse documents that cannot be rebuilt safely.

        Args:
            document: Document about to be rebuilt

        Raises:
            UnsupportedSchemaVersionError: If the schema version is not supported
            MalformedStructureError: If a field holds invalid data, the header
                is incomplete, or a section lists the same key twice
        """
        if not document.is_rebuildable:
            raise UnsupportedSchemaVersionError(
                document.schema_version, list(SUPPORTED_SCHEMA_VERSIONS)
            )

        # Direct attribute edits bypass validation, so check the whole model
        try:
            ProjectDocument.model_validate(document.model_dump())
        except PydanticValidationError as e:
            error = e.errors(include_url=False)[0]
            location = ".".join(str(part) for part in error["loc"])
            raise MalformedStructureError(f"{location}: {error['msg']}") from e

        if not document.is_valid:
            raise MalformedStructureError(
                "document must have type 'project', a title and an author"
            )

        # Characters and voices are matched by lookup key during the rebuild
        exact = str
        folded = ScreenplayUtils.lookup_key
        keyed_sections: list[tuple[str, list[str], Callable[[str], str]]] = []
        if document.files:
            keyed_sections.append(
                (
                    "files.chapters.items",
                    [e.file for e in document.files.chapters.items],
                    exact,
                )
            )
        if document.characters:
            keyed_sections.append(
                (
                    "characters.list",
                    [e.name for e in document.characters.entries],
                    folded,
                )
            )
        if document.voices:
            keyed_sections.append(
                ("voices.list", [e.name for e in document.voices.entries], folded)
            )
        if document.scenes:
            keyed_sections.append(
                ("scenes.locations", [e.name for e in document.scenes.locations], exact)
            )

        for section, names, key in keyed_sections:
            counts = Counter(key(name) for name in names)
            duplicates = [name for name in names if counts[key(name)] > 1]
            if duplicates:
                raise MalformedStructureError(
                    f"{section} lists '{duplicates[0]}' more than once",
                    details={"section": section, "duplicates": duplicates},
                )


def rebuild_section(
    kind: SectionKind | str,
    document: ProjectDocument,
    chapter_texts: Mapping[str, ChapterSource],
    cancel: CancelSignal | None = None,
) -> RebuildResult:
    """Rebuild one section with the global settings."""
    return RebuildOrchestrator().rebuild_section(kind, document, chapter_texts, cancel)


def rebuild_all(
    document: ProjectDocument,
    chapter_texts: Mapping[str, ChapterSource],
    cancel: CancelSignal | None = None,
) -> RebuildResult:
    """Rebuild every section with the global settings."""
    return RebuildOrchestrator().rebuild_all(document, chapter_texts, cancel)
