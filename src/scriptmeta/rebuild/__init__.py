"""Section rebuild pipeline."""

from scriptmeta.rebuild.formatter import OutputFormat, ReportFormatter
from scriptmeta.rebuild.intake import (
    CancelSignal,
    ChapterIntake,
    ChapterText,
    load_chapters,
    map_chapters,
)
from scriptmeta.rebuild.orchestrator import (
    RebuildOrchestrator,
    rebuild_all,
    rebuild_section,
)
from scriptmeta.rebuild.stages import (
    REBUILD_STAGES,
    RebuildContext,
    SectionKind,
    StageResult,
    rebuild_chapters,
    rebuild_characters,
    rebuild_scenes,
    rebuild_status,
    rebuild_voices,
)

__all__ = [
    "REBUILD_STAGES",
    "CancelSignal",
    "ChapterIntake",
    "ChapterText",
    "OutputFormat",
    "RebuildContext",
    "RebuildOrchestrator",
    "ReportFormatter",
    "SectionKind",
    "StageResult",
    "load_chapters",
    "map_chapters",
    "rebuild_all",
    "rebuild_chapters",
    "rebuild_characters",
    "rebuild_scenes",
    "rebuild_section",
    "rebuild_status",
    "rebuild_voices",
]
