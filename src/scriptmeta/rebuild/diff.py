"""Entry-level comparison of a section before and after a rebuild."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from scriptmeta.models.report import SectionDiff


def entry_snapshot(entry: BaseModel) -> dict[str, Any]:
    """Comparable form of a section entry."""
    return entry.model_dump(mode="json", exclude_none=True)


def keyed(entries: Iterable[BaseModel], key: str) -> dict[str, dict[str, Any]]:
    """Index entries by one of their attributes, keeping order."""
    return {str(getattr(entry, key)): entry_snapshot(entry) for entry in entries}


def diff_entries(
    section: str,
    before: dict[str, Any],
    after: dict[str, Any],
) -> SectionDiff:
    """Compare two keyed snapshots.

    Args:
        section: Section name for the report
        before: Key to comparable value before the rebuild
        after: Key to comparable value after the rebuild

    Returns:
        Added keys and changed keys in ``after`` order, removed keys in
        ``before`` order
    """
    return SectionDiff(
        section=section,
        added=[key for key in after if key not in before],
        removed=[key for key in before if key not in after],
        changed=[key for key in after if key in before and before[key] != after[key]],
    )
