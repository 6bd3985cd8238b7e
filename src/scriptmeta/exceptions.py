"""Custom exception hierarchy for scriptmeta with helpful error messages."""

from __future__ import annotations

from typing import Any


class ScriptMetaError(Exception):
    """Base exception with helpful formatting for all scriptmeta errors.

    Provides structured error messages with hints and details to help users
    understand and fix problems.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception with structured error information.

        Args:
            message: Primary error message describing what went wrong
            hint: Optional hint suggesting how to fix the problem
            details: Optional dictionary with additional debugging information
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Format the error message with hint and details.

        Returns:
            Formatted error string with all available information
        """
        output = f"Error: {self.message}"
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(
                f"  {key}: {value}" for key, value in self.details.items()
            )
            output += f"\nDetails:\n{details_str}"
        return output


class ConfigurationError(ScriptMetaError):
    """Configuration errors including invalid settings and missing config files."""

    pass


class FormatError(ScriptMetaError):
    """Project document text could not be decoded or encoded.

    Always fatal to the operation in progress and never retried.
    """

    pass


class MissingDelimitersError(FormatError):
    """The front matter block is not bracketed by two ``---`` lines."""

    def __init__(self, found: int = 0) -> None:
        """Initialize with the number of delimiter lines that were found.

        Args:
            found: How many delimiter lines were located (0 or 1)
        """
        self.found = found
        super().__init__(
            message="No front matter found (must be delimited by two '---' lines)",
            hint="Start the document with '---', then the metadata, then '---'",
            details={"delimiters_found": found},
        )


class MissingRequiredFieldError(FormatError):
    """A declared-required front matter field is absent."""

    def __init__(self, field: str) -> None:
        """Initialize with the missing field name.

        Args:
            field: Front matter key that is missing
        """
        self.field = field
        super().__init__(
            message=f"Missing required field: {field}",
            hint=f"Add a '{field}:' entry to the front matter",
            details={"field": field},
        )


class MalformedStructureError(FormatError):
    """Front matter is present but structurally invalid."""

    def __init__(self, detail: str, details: dict[str, Any] | None = None) -> None:
        """Initialize with a description of the structural problem.

        Args:
            detail: Human readable description of what is wrong
            details: Optional additional debugging information
        """
        self.detail = detail
        super().__init__(
            message=f"Malformed front matter: {detail}",
            details=details,
        )


class ValidationError(ScriptMetaError):
    """Document content is readable but violates a semantic rule."""

    pass


class AliasCollisionError(ValidationError):
    """A variant string maps to more than one canonical name."""

    def __init__(self, table: str, variant: str, canonicals: list[str]) -> None:
        """Initialize alias collision error.

        Args:
            table: Which alias table the collision was found in
            variant: The ambiguous variant string
            canonicals: Every canonical name the variant maps to
        """
        self.table = table
        self.variant = variant
        self.canonicals = canonicals
        super().__init__(
            message=(
                f"Alias '{variant}' in {table} maps to more than one name: "
                f"{', '.join(canonicals)}"
            ),
            hint="Keep each variant under exactly one canonical name",
            details={"table": table, "variant": variant, "canonicals": canonicals},
        )


class UnsupportedSchemaVersionError(ValidationError):
    """The document's schema version cannot be rebuilt by this release."""

    def __init__(self, version: str, supported: list[str]) -> None:
        """Initialize unsupported schema version error.

        Args:
            version: Version string found in the document
            supported: Versions this release can rebuild
        """
        self.version = version
        self.supported = supported
        super().__init__(
            message=f"Unsupported schema version: {version}",
            hint=(
                "The document can still be read and written, "
                "but sections cannot be rebuilt"
            ),
            details={"schema_version": version, "supported": supported},
        )


class OrphanedEstablishingShotError(ValidationError):
    """An establishing shot is not followed by a scene heading."""

    def __init__(self, location: str, chapter: int, line: int) -> None:
        """Initialize orphaned establishing shot error.

        Args:
            location: Canonical location of the establishing shot
            chapter: Chapter number of the shot
            line: Line number of the shot
        """
        self.location = location
        self.chapter = chapter
        self.line = line
        super().__init__(
            message=(
                f"Establishing shot of {location} (chapter {chapter}, "
                f"line {line}) is not followed by a scene heading"
            ),
            details={"location": location, "chapter": chapter, "line": line},
        )


class ExtensionDecodeError(ValidationError):
    """A stored extension section does not match the requested type."""

    pass


class RebuildCancelledError(ScriptMetaError):
    """Raised inside a stage when the caller's cancellation signal is set."""

    def __init__(self, stage: str) -> None:
        """Initialize cancellation error.

        Args:
            stage: Name of the stage that observed the cancellation
        """
        self.stage = stage
        super().__init__(message=f"Rebuild cancelled during {stage} stage")


def check_config_keys(config: dict[str, Any]) -> None:
    """Check for common configuration mistakes.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: With hints about correct configuration keys
    """
    wrong_keys = {
        "workers": "max_workers",
        "threads": "max_workers",
        "phase": "default_phase",
    }

    for wrong, correct in wrong_keys.items():
        if wrong in config:
            raise ConfigurationError(
                message=f"Invalid configuration key '{wrong}'",
                hint=f"Use '{correct}' instead of '{wrong}'",
                details={
                    "found_keys": list(config.keys()),
                    "invalid_key": wrong,
                    "correct_key": correct,
                },
            )
