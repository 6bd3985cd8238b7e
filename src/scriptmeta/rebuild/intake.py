"""Chapter text intake and per-chapter parallel extraction."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from scriptmeta.config import get_logger
from scriptmeta.exceptions import RebuildCancelledError
from scriptmeta.models.report import RebuildWarning, WarningKind
from scriptmeta.utils import ScreenplayUtils

logger = get_logger(__name__)

ResultT = TypeVar("ResultT")

# What the file discovery collaborator may hand over for one chapter: the
# text, undecoded bytes, or the error it hit while reading
ChapterSource = str | bytes | BaseException | None


class CancelSignal(Protocol):
    """Cooperative cancellation flag; ``threading.Event`` satisfies it."""

    def is_set(self) -> bool: ...


@dataclass(frozen=True)
class ChapterText:
    """Readable text of one chapter."""

    identifier: str
    number: int
    text: str


@dataclass
class ChapterIntake:
    """Every chapter identifier in order plus the chapters that could be read.

    Attributes:
        identifiers: All chapter identifiers in natural sort order
        chapters: Readable chapters, numbered by position in ``identifiers``
        warnings: One warning per chapter that could not be read
    """

    identifiers: list[str] = field(default_factory=list)
    chapters: list[ChapterText] = field(default_factory=list)
    warnings: list[RebuildWarning] = field(default_factory=list)

    @property
    def failed(self) -> list[str]:
        """Identifiers of chapters that could not be read."""
        readable = {chapter.identifier for chapter in self.chapters}
        return [i for i in self.identifiers if i not in readable]


def load_chapters(chapter_texts: Mapping[str, ChapterSource]) -> ChapterIntake:
    """Order chapters and decode their text.

    Chapters are numbered from 1 in natural sort order of their identifiers,
    so ``chapter-2`` comes before ``chapter-10``. Unreadable chapters keep
    their number and produce a warning.

    Args:
        chapter_texts: Chapter identifier to text, bytes or read error

    Returns:
        Ordered intake result
    """
    intake = ChapterIntake(
        identifiers=sorted(chapter_texts, key=ScreenplayUtils.natural_sort_key)
    )
    for number, identifier in enumerate(intake.identifiers, start=1):
        source = chapter_texts[identifier]
        problem: str | None = None
        text = ""
        if isinstance(source, BaseException):
            problem = f"could not be read: {source}"
        elif source is None:
            problem = "no text was provided"
        elif isinstance(source, bytes):
            try:
                text = source.decode("utf-8")
            except UnicodeDecodeError as e:
                problem = f"is not valid UTF-8: {e.reason} at byte {e.start}"
        else:
            text = source

        if problem is not None:
            message = f"Chapter {identifier} {problem}"
            logger.warning("Skipping unreadable chapter", chapter=identifier, reason=problem)
            intake.warnings.append(
                RebuildWarning(kind=WarningKind.FILE, message=message, chapter=identifier)
            )
            continue
        intake.chapters.append(ChapterText(identifier=identifier, number=number, text=text))

    return intake


def map_chapters(
    func: Callable[[ChapterText], ResultT],
    chapters: list[ChapterText],
    stage: str,
    max_workers: int = 1,
    cancel: CancelSignal | None = None,
) -> tuple[list[tuple[ChapterText, ResultT]], list[RebuildWarning]]:
    """Run a per-chapter extraction across a bounded worker pool.

    Results come back in chapter order regardless of completion order. A
    chapter whose extraction raises is skipped with a warning.

    Args:
        func: Extraction applied to each chapter
        chapters: Chapters to process
        stage: Stage name for warnings and logging
        max_workers: Pool size; 1 runs inline
        cancel: Checked between chapters

    Returns:
        (chapter, result) pairs in chapter order and per-chapter warnings

    Raises:
        RebuildCancelledError: If the cancel signal is set between chapters
    """
    results: dict[int, tuple[ChapterText, ResultT]] = {}
    warnings: list[RebuildWarning] = []

    def record_failure(chapter: ChapterText, error: Exception) -> None:
        logger.warning(
            "Chapter extraction failed",
            stage=stage,
            chapter=chapter.identifier,
            error=str(error),
        )
        warnings.append(
            RebuildWarning(
                kind=WarningKind.FILE,
                message=f"Chapter {chapter.identifier} could not be processed: {error}",
                section=stage,
                chapter=chapter.identifier,
            )
        )

    if max_workers <= 1 or len(chapters) <= 1:
        for chapter in chapters:
            _check_cancel(cancel, stage)
            try:
                results[chapter.number] = (chapter, func(chapter))
            except Exception as e:
                record_failure(chapter, e)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures: dict[Future[ResultT], ChapterText] = {
                executor.submit(func, chapter): chapter for chapter in chapters
            }
            try:
                for future in as_completed(futures):
                    _check_cancel(cancel, stage)
                    chapter = futures[future]
                    try:
                        results[chapter.number] = (chapter, future.result())
                    except Exception as e:
                        record_failure(chapter, e)
            except RebuildCancelledError:
                for future in futures:
                    future.cancel()
                raise

    ordered = [results[number] for number in sorted(results)]
    warnings.sort(key=lambda w: ScreenplayUtils.natural_sort_key(w.chapter or ""))
    return ordered, warnings


def _check_cancel(cancel: CancelSignal | None, stage: str) -> None:
    if cancel is not None and cancel.is_set():
        logger.info("Rebuild cancelled", stage=stage)
        raise RebuildCancelledError(stage)
