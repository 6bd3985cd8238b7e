"""Decode and encode project metadata documents.

A document is a YAML front matter block between two ``---`` lines, followed
by free-form prose. Known keys follow ``FRONT_MATTER_SCHEMA``; any other
top-level key is an extension section and is carried through unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import frontmatter
import yaml
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from scriptmeta.config import get_logger
from scriptmeta.document.schema import FRONT_MATTER_SCHEMA, KNOWN_KEYS
from scriptmeta.exceptions import (
    MalformedStructureError,
    MissingDelimitersError,
    MissingRequiredFieldError,
)
from scriptmeta.models.document import ProjectDocument

logger = get_logger(__name__)

# Long prose stays on one line instead of being folded
YAML_WIDTH = 4096


class FrontMatterDumper(yaml.SafeDumper):
    """SafeDumper writing enums as plain values and prose in block style."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def _represent_enum(dumper: yaml.SafeDumper, data: Enum) -> yaml.Node:
    return dumper.represent_data(data.value)


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.Node:
    # Keep-chomped block scalars would lose trailing newlines at the end of
    # the block, so only single trailing newlines use block style
    if "\n" in data and not data.endswith("\n\n"):
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_str(data)


FrontMatterDumper.add_multi_representer(Enum, _represent_enum)
FrontMatterDumper.add_representer(str, _represent_str)


def normalize_body(text: str) -> str:
    """Trim leading and trailing blank lines and trailing whitespace.

    Indentation of the first non-blank line is kept.
    """
    lines = text.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines).rstrip()


def decode(text: str) -> tuple[ProjectDocument, str]:
    """Parse document text into front matter and body.

    Args:
        text: Complete document text

    Returns:
        The decoded document and its body prose

    Raises:
        MissingDelimitersError: If fewer than two ``---`` lines are present
        MissingRequiredFieldError: If a required header field is absent
        MalformedStructureError: If the YAML is invalid or a field has the
            wrong shape
    """
    handler = frontmatter.YAMLHandler()
    boundaries = handler.FM_BOUNDARY.findall(text)
    if len(boundaries) < 2:
        raise MissingDelimitersError(found=len(boundaries))

    first = handler.FM_BOUNDARY.search(text)
    if first is not None and text[: first.start()].strip():
        logger.warning(
            "Ignoring text before the front matter",
            characters=len(text[: first.start()].strip()),
        )

    front, content = handler.split(text)
    try:
        data = handler.load(front)
    except yaml.YAMLError as e:
        raise MalformedStructureError(
            "front matter is not valid YAML", details={"error": str(e)}
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedStructureError(
            f"front matter must be a mapping, got {type(data).__name__}"
        )
    for key in data:
        if not isinstance(key, str):
            raise MalformedStructureError(f"top-level key {key!r} is not a string")

    values: dict[str, Any] = {}
    for spec in FRONT_MATTER_SCHEMA:
        if spec.key in data:
            values[spec.attribute] = data[spec.key]
        elif spec.required:
            raise MissingRequiredFieldError(spec.key)
    values["extensions"] = {k: v for k, v in data.items() if k not in KNOWN_KEYS}

    try:
        document = ProjectDocument.model_validate(values)
    except PydanticValidationError as e:
        error = e.errors(include_url=False)[0]
        location = ".".join(str(part) for part in error["loc"])
        raise MalformedStructureError(
            f"{location}: {error['msg']}",
            details={"errors": e.error_count()},
        ) from e

    logger.debug(
        "Decoded project document",
        title=document.title,
        extensions=list(document.extensions),
    )
    return document, normalize_body(content)


def _plain(value: Any) -> Any:
    """Dump models by alias.

    Declared fields set to None are omitted. Extra keys of hand-edited
    sections are written as they are, explicit nulls included.
    """
    if isinstance(value, BaseModel):
        data: dict[str, Any] = {}
        for name, info in type(value).model_fields.items():
            field_value = getattr(value, name)
            if field_value is not None:
                data[info.alias or name] = _plain(field_value)
        for key, extra in (value.model_extra or {}).items():
            data[key] = _plain(extra)
        return data
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def encode(document: ProjectDocument, body: str = "") -> str:
    """Serialize a document to text.

    Header fields come first, then optional sections in schema order, then
    extension sections in insertion order. Absent sections are omitted.

    Args:
        document: Document to serialize
        body: Prose written after the front matter

    Returns:
        Document text ending with a newline

    Raises:
        MalformedStructureError: If an extension section reuses a schema key
    """
    metadata: dict[str, Any] = {}
    for spec in FRONT_MATTER_SCHEMA:
        value = getattr(document, spec.attribute)
        if value is not None:
            metadata[spec.key] = _plain(value)

    for key, payload in document.extensions.items():
        if key in KNOWN_KEYS:
            raise MalformedStructureError(
                f"extension section '{key}' shadows a schema field"
            )
        metadata[key] = payload

    post = frontmatter.Post(normalize_body(body))
    post.metadata.update(metadata)
    text = frontmatter.dumps(
        post, Dumper=FrontMatterDumper, sort_keys=False, width=YAML_WIDTH
    )
    return text + "\n"
