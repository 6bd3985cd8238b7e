"""Declarative layout of the project document front matter.

``FRONT_MATTER_SCHEMA`` lists every top-level key in serialization order.
The codec walks this one table for both decoding and encoding.
"""

from __future__ import annotations

from dataclasses import dataclass

DELIMITER = "---"


@dataclass(frozen=True)
class FieldSpec:
    """One top-level front matter key.

    Attributes:
        key: YAML key as written in the document
        attribute: ProjectDocument attribute holding the value
        required: Decoding fails when a required key is absent
    """

    key: str
    attribute: str
    required: bool = False


FRONT_MATTER_SCHEMA: tuple[FieldSpec, ...] = (
    FieldSpec("type", "type", required=True),
    FieldSpec("schemaVersion", "schema_version", required=True),
    FieldSpec("title", "title", required=True),
    FieldSpec("shortTitle", "short_title"),
    FieldSpec("author", "author", required=True),
    FieldSpec("created", "created", required=True),
    FieldSpec("updated", "updated", required=True),
    FieldSpec("intent", "intent"),
    FieldSpec("files", "files"),
    FieldSpec("characters", "characters"),
    FieldSpec("voices", "voices"),
    FieldSpec("scenes", "scenes"),
    FieldSpec("audioExport", "audio_export"),
    FieldSpec("status", "status"),
)

REQUIRED_KEYS: tuple[str, ...] = tuple(
    spec.key for spec in FRONT_MATTER_SCHEMA if spec.required
)
KNOWN_KEYS: frozenset[str] = frozenset(spec.key for spec in FRONT_MATTER_SCHEMA)
