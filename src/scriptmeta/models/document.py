"""Project metadata document models.

The project document is a YAML front matter block followed by free-form
prose. These models describe the front matter. YAML keys are camelCase and map
onto snake_case attributes through field aliases; both spellings are accepted
when constructing a model.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, ClassVar, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from scriptmeta.exceptions import ExtensionDecodeError

SCHEMA_VERSION = "1.0"
SUPPORTED_SCHEMA_VERSIONS: tuple[str, ...] = (SCHEMA_VERSION,)

# Area key used when a scene heading names no area
DEFAULT_AREA = "_default"


class Gender(str, Enum):
    """Gender of a character role."""

    MALE = "M"
    FEMALE = "F"
    NON_BINARY = "NB"
    NOT_SPECIFIED = "NS"

    @property
    def display_name(self) -> str:
        """Human readable name for presentation layers."""
        return {
            Gender.MALE: "Male",
            Gender.FEMALE: "Female",
            Gender.NON_BINARY: "Non-Binary",
            Gender.NOT_SPECIFIED: "Not Specified",
        }[self]


class ChapterStatus(str, Enum):
    """Writing status of a chapter file."""

    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


class Lighting(str, Enum):
    """Interior/exterior designation of a scene heading."""

    INT = "INT"
    EXT = "EXT"
    INT_EXT = "INT/EXT"


class DocumentModel(BaseModel):
    """Base class for every front matter model."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class CuratedModel(BaseModel):
    """Base class for hand-edited sections; unknown keys are kept."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


# Manually curated sections


class ProjectIntent(CuratedModel):
    """What the production is about, written by hand."""

    logline: str | None = None
    premise: str | None = None
    themes: list[str] | None = None
    notes: str | None = None


class AudioExportSettings(CuratedModel):
    """Audio export preferences consumed by the audio pipeline."""

    DEFAULT_FORMAT: ClassVar[str] = "m4a"
    DEFAULT_DIRECTORY: ClassVar[str] = "audio"

    format: str | None = None
    directory: str | None = None
    provider: str | None = None

    @property
    def resolved_format(self) -> str:
        """Export format, defaulting to m4a."""
        return self.format or self.DEFAULT_FORMAT

    @property
    def resolved_directory(self) -> str:
        """Export directory, defaulting to audio."""
        return self.directory or self.DEFAULT_DIRECTORY


# Chapters


class ChapterEntry(DocumentModel):
    """One chapter source file."""

    file: str = Field(min_length=1)
    focus: str | None = None
    intent: str | None = None
    status: ChapterStatus = ChapterStatus.INCOMPLETE


class ChapterList(DocumentModel):
    """Ordered chapter entries."""

    items: list[ChapterEntry] = Field(default_factory=list)


class FilesSection(DocumentModel):
    """Chapter files of the project."""

    DEFAULT_DIRECTORY: ClassVar[str] = "episodes"
    DEFAULT_PATTERNS: ClassVar[tuple[str, ...]] = ("*.fountain",)

    directory: str | None = None
    patterns: list[str] | None = None
    chapters: ChapterList = Field(default_factory=ChapterList)
    rebuilt_at: datetime | None = Field(default=None, alias="rebuiltAt")

    @property
    def resolved_directory(self) -> str:
        """Directory holding chapter files, defaulting to episodes."""
        return self.directory or self.DEFAULT_DIRECTORY

    @property
    def resolved_patterns(self) -> list[str]:
        """Glob patterns for chapter discovery, defaulting to *.fountain."""
        return list(self.patterns or self.DEFAULT_PATTERNS)


# Characters and voices


class SourcePosition(DocumentModel):
    """A chapter number and 1-based line number."""

    chapter: int = Field(ge=1)
    line: int = Field(ge=1)


class CharacterEntry(DocumentModel):
    """A speaking character, keyed by canonical name."""

    name: str = Field(min_length=1)
    gender: Gender = Gender.NOT_SPECIFIED
    introduced: SourcePosition | None = None
    dialogue_lines: int | None = Field(default=None, alias="dialogueLines", ge=0)


class VoiceEntry(CharacterEntry):
    """Casting notes for a character's voice."""

    age: str | int | None = None
    description: str | None = None
    tone: str | None = None
    voice: str | None = None
    stale: bool | None = None


class CharactersSection(DocumentModel):
    """Characters derived from dialogue cues plus the curated alias table."""

    aliases: dict[str, list[str]] = Field(default_factory=dict)
    entries: list[CharacterEntry] = Field(default_factory=list, alias="list")
    rebuilt_at: datetime | None = Field(default=None, alias="rebuiltAt")

    def get(self, name: str) -> CharacterEntry | None:
        """Return the entry with the given canonical name."""
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None


class VoicesSection(DocumentModel):
    """Voice casting, one entry per character."""

    entries: list[VoiceEntry] = Field(default_factory=list, alias="list")
    rebuilt_at: datetime | None = Field(default=None, alias="rebuiltAt")

    def get(self, name: str) -> VoiceEntry | None:
        """Return the entry with the given canonical name."""
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None


# Scenes


class SceneOccurrence(DocumentModel):
    """One scene heading filed under a location, lighting and area."""

    chapter: int = Field(ge=1)
    time: str = ""
    line: int = Field(ge=1)


class LeadsTo(DocumentModel):
    """The scene heading an establishing shot introduces.

    ``location`` is set when the heading is at another location and
    ``chapter`` when it is in a later chapter than the shot.
    """

    lighting: Lighting
    area: str = DEFAULT_AREA
    line: int = Field(ge=1)
    location: str | None = None
    chapter: int | None = Field(default=None, ge=1)


class EstablishingShot(DocumentModel):
    """An EST. heading; ``leads_to`` is None when nothing follows it."""

    chapter: int = Field(ge=1)
    time: str = ""
    line: int = Field(ge=1)
    leads_to: LeadsTo | None = Field(default=None, alias="leadsTo")

    @property
    def is_orphaned(self) -> bool:
        """True when no scene heading followed the shot."""
        return self.leads_to is None


class SceneLocation(DocumentModel):
    """Every scene heading and establishing shot at one canonical location."""

    name: str = Field(min_length=1)
    establishing: list[EstablishingShot] = Field(default_factory=list)
    lighting: dict[Lighting, dict[str, list[SceneOccurrence]]] = Field(
        default_factory=dict
    )

    def occurrences(self) -> list[SceneOccurrence]:
        """All occurrences at this location in chapter/line order."""
        found = [
            occurrence
            for areas in self.lighting.values()
            for occurrences in areas.values()
            for occurrence in occurrences
        ]
        return sorted(found, key=lambda o: (o.chapter, o.line))


class ScenesSection(DocumentModel):
    """Scene index derived from scene headings plus the curated alias table."""

    aliases: dict[str, list[str]] = Field(default_factory=dict)
    locations: list[SceneLocation] = Field(default_factory=list)
    rebuilt_at: datetime | None = Field(default=None, alias="rebuiltAt")

    def get(self, name: str) -> SceneLocation | None:
        """Return the location with the given canonical name."""
        for location in self.locations:
            if location.name == name:
                return location
        return None


# Status


class StatusSummary(DocumentModel):
    """Progress of the production."""

    phase: str
    chapters_complete: int = Field(default=0, alias="chaptersComplete", ge=0)
    chapters_total: int = Field(default=0, alias="chaptersTotal", ge=0)
    dangling_threads: list[str] = Field(
        default_factory=list, alias="danglingThreads"
    )
    rebuilt_at: datetime | None = Field(default=None, alias="rebuiltAt")


# Extension sections


class ExtensionSettings(BaseModel):
    """Base class for typed views over an extension section.

    Subclasses set ``section_key`` to the top-level front matter key they own.
    """

    section_key: ClassVar[str]

    model_config = ConfigDict(populate_by_name=True)


ExtensionT = TypeVar("ExtensionT", bound=ExtensionSettings)


class ProjectDocument(DocumentModel):
    """Front matter of a project metadata document."""

    type: Literal["project"] = "project"
    schema_version: str = Field(default=SCHEMA_VERSION, alias="schemaVersion")
    title: str
    short_title: str | None = Field(default=None, alias="shortTitle")
    author: str
    created: datetime
    updated: date
    intent: ProjectIntent | None = None
    files: FilesSection | None = None
    characters: CharactersSection | None = None
    voices: VoicesSection | None = None
    scenes: ScenesSection | None = None
    audio_export: AudioExportSettings | None = Field(default=None, alias="audioExport")
    status: StatusSummary | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)

    @field_validator("schema_version", mode="before")
    @classmethod
    def coerce_schema_version(cls, v: Any) -> Any:
        """Accept an unquoted YAML version such as ``1.0``."""
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("created", mode="before")
    @classmethod
    def coerce_created(cls, v: Any) -> Any:
        """Accept a bare date as midnight UTC."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time(), tzinfo=timezone.utc)
        return v

    @field_validator("updated", mode="before")
    @classmethod
    def coerce_updated(cls, v: Any) -> Any:
        """Accept a full timestamp and keep only its date."""
        if isinstance(v, datetime):
            return v.date()
        return v

    @classmethod
    def new(
        cls,
        title: str,
        author: str,
        short_title: str | None = None,
        now: datetime | None = None,
    ) -> ProjectDocument:
        """Create an empty project document.

        Args:
            title: Project title
            author: Project author
            short_title: Optional abbreviated title
            now: Creation timestamp (defaults to the current UTC time)

        Returns:
            Document with no optional sections
        """
        created = now or datetime.now(timezone.utc).replace(microsecond=0)
        return cls(
            title=title,
            short_title=short_title,
            author=author,
            created=created,
            updated=created.date(),
        )

    @property
    def is_valid(self) -> bool:
        """True if type is project and title and author are present."""
        return (
            self.type == "project"
            and bool(self.title.strip())
            and bool(self.author.strip())
        )

    @property
    def is_rebuildable(self) -> bool:
        """True if this release can rebuild the document's sections."""
        return self.schema_version in SUPPORTED_SCHEMA_VERSIONS

    @classmethod
    def reserved_keys(cls) -> frozenset[str]:
        """Top-level keys owned by the schema; extensions may not use them."""
        return frozenset(
            field.alias or name
            for name, field in cls.model_fields.items()
            if name != "extensions"
        )

    def has_extension(self, settings_type: type[ExtensionSettings]) -> bool:
        """Check if an extension section exists for a settings type."""
        return settings_type.section_key in self.extensions

    def get_extension(self, settings_type: type[ExtensionT]) -> ExtensionT | None:
        """Decode an extension section into a typed settings object.

        Args:
            settings_type: Settings class naming the section via ``section_key``

        Returns:
            The decoded settings, or None when the section is absent

        Raises:
            ExtensionDecodeError: If the stored payload does not match the type
        """
        key = settings_type.section_key
        if key not in self.extensions:
            return None
        try:
            return settings_type.model_validate(self.extensions[key])
        except PydanticValidationError as e:
            raise ExtensionDecodeError(
                message=(
                    f"Extension section '{key}' does not match "
                    f"{settings_type.__name__}"
                ),
                hint="Check the section's keys and value types",
                details={"section": key, "errors": e.errors(include_url=False)},
            ) from e

    def set_extension(self, settings: ExtensionSettings) -> None:
        """Store a typed settings object as an extension section.

        Overwrites any existing payload under the same section key.

        Args:
            settings: Settings instance to store

        Raises:
            ValueError: If the section key is a reserved document key
        """
        key = type(settings).section_key
        if key in self.reserved_keys():
            raise ValueError(f"'{key}' is a reserved front matter key")
        self.extensions[key] = settings.model_dump(
            mode="json", by_alias=True, exclude_none=True
        )

    def remove_extension(self, settings_type: type[ExtensionSettings]) -> bool:
        """Delete an extension section; returns True if it existed."""
        return self.extensions.pop(settings_type.section_key, None) is not None
