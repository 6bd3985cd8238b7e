"""Result data structures for section rebuilds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from scriptmeta.models.document import ProjectDocument


class WarningKind(str, Enum):
    """Category of a non-fatal rebuild problem."""

    FILE = "file"
    ALIAS = "alias"
    ORPHAN = "orphan"


@dataclass
class RebuildWarning:
    """A problem that did not stop the rebuild.

    Attributes:
        kind: Category of the problem
        message: Human readable description
        section: Section whose stage reported it, None for chapter intake
        chapter: Chapter identifier the problem belongs to, if any
    """

    kind: WarningKind
    message: str
    section: str | None = None
    chapter: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "section": self.section,
            "chapter": self.chapter,
        }


@dataclass
class SectionDiff:
    """Entry-level changes one stage made to its section.

    Keys are chapter file names, character or voice names, location names,
    or status field names depending on the section.
    """

    section: str
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    changed: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """True if anything was added, removed or changed."""
        return bool(self.added or self.removed or self.changed)

    def to_dict(self) -> dict[str, list[str]]:
        """Convert to a plain dictionary."""
        return {
            "added": list(self.added),
            "removed": list(self.removed),
            "changed": list(self.changed),
        }


@dataclass
class DiffReport:
    """Aggregated outcome of a rebuild across every stage that ran.

    Attributes:
        sections: Per-section diffs in stage order
        warnings: Per-file, alias and orphan warnings
        cancelled: True if the rebuild stopped early on request
    """

    sections: dict[str, SectionDiff] = field(default_factory=dict)
    warnings: list[RebuildWarning] = field(default_factory=list)
    cancelled: bool = False

    @property
    def has_changes(self) -> bool:
        """True if any section changed."""
        return any(diff.has_changes for diff in self.sections.values())

    def warnings_for(self, kind: WarningKind) -> list[RebuildWarning]:
        """Warnings of one kind, in the order they were reported."""
        return [w for w in self.warnings if w.kind == kind]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary for display or serialization."""
        return {
            "sections": {
                name: diff.to_dict() for name, diff in self.sections.items()
            },
            "warnings": [w.to_dict() for w in self.warnings],
            "cancelled": self.cancelled,
        }


@dataclass
class RebuildResult:
    """A rebuilt document together with its diff report.

    When ``cancelled`` is True the document is the one produced by the last
    stage that finished.
    """

    document: ProjectDocument
    report: DiffReport

    @property
    def cancelled(self) -> bool:
        """True if the rebuild stopped before every stage ran."""
        return self.report.cancelled
