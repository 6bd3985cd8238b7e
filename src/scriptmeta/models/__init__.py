"""Data models for project metadata documents."""

from scriptmeta.models.document import (
    DEFAULT_AREA,
    SCHEMA_VERSION,
    SUPPORTED_SCHEMA_VERSIONS,
    AudioExportSettings,
    ChapterEntry,
    ChapterList,
    ChapterStatus,
    CharacterEntry,
    CharactersSection,
    EstablishingShot,
    ExtensionSettings,
    FilesSection,
    Gender,
    LeadsTo,
    Lighting,
    ProjectDocument,
    ProjectIntent,
    SceneLocation,
    SceneOccurrence,
    ScenesSection,
    SourcePosition,
    StatusSummary,
    VoiceEntry,
    VoicesSection,
)
from scriptmeta.models.report import (
    DiffReport,
    RebuildResult,
    RebuildWarning,
    SectionDiff,
    WarningKind,
)

__all__ = [
    "DEFAULT_AREA",
    "SCHEMA_VERSION",
    "SUPPORTED_SCHEMA_VERSIONS",
    "AudioExportSettings",
    "ChapterEntry",
    "ChapterList",
    "ChapterStatus",
    "CharacterEntry",
    "CharactersSection",
    "DiffReport",
    "EstablishingShot",
    "ExtensionSettings",
    "FilesSection",
    "Gender",
    "LeadsTo",
    "Lighting",
    "ProjectDocument",
    "ProjectIntent",
    "RebuildResult",
    "RebuildWarning",
    "SceneLocation",
    "SceneOccurrence",
    "ScenesSection",
    "SectionDiff",
    "SourcePosition",
    "StatusSummary",
    "VoiceEntry",
    "VoicesSection",
    "WarningKind",
]
