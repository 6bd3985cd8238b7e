"""Tests for typed access to extension sections."""

from typing import ClassVar

import pytest
from pydantic import Field

from scriptmeta.document import decode, encode
from scriptmeta.exceptions import ExtensionDecodeError
from scriptmeta.models import ExtensionSettings


class AppSettings(ExtensionSettings):
    """Example host application settings."""

    section_key: ClassVar[str] = "appSettings"

    theme: str = "light"
    recent_files: list[str] = Field(default_factory=list, alias="recentFiles")
    font_size: int = Field(default=12, alias="fontSize")


class ReservedSettings(ExtensionSettings):
    """Settings that would shadow a schema key."""

    section_key: ClassVar[str] = "status"


class TestExtensionAccess:
    """Test get/set/has/remove of extension sections."""

    def test_absent_section(self, project_document):
        """Test reading a section that is not there."""
        assert project_document.get_extension(AppSettings) is None
        assert project_document.has_extension(AppSettings) is False

    def test_set_and_get(self, project_document):
        """Test storing and reading back typed settings."""
        project_document.set_extension(AppSettings(theme="dark", font_size=14))

        assert project_document.has_extension(AppSettings)
        assert project_document.extensions["appSettings"] == {
            "theme": "dark",
            "recentFiles": [],
            "fontSize": 14,
        }
        settings = project_document.get_extension(AppSettings)
        assert settings == AppSettings(theme="dark", font_size=14)

    def test_payload_mismatch(self, project_document):
        """Test that a payload of the wrong shape fails to decode."""
        project_document.extensions["appSettings"] = {"fontSize": "huge"}
        with pytest.raises(ExtensionDecodeError) as exc_info:
            project_document.get_extension(AppSettings)
        assert exc_info.value.details["section"] == "appSettings"

    def test_reserved_key(self, project_document):
        """Test that schema keys cannot be used as extension sections."""
        with pytest.raises(ValueError, match="reserved"):
            project_document.set_extension(ReservedSettings())

    def test_remove(self, project_document):
        """Test deleting an extension section."""
        project_document.set_extension(AppSettings())
        assert project_document.remove_extension(AppSettings) is True
        assert project_document.remove_extension(AppSettings) is False

    def test_extension_survives_codec(self, project_document):
        """Test that a typed section round-trips through document text."""
        project_document.set_extension(AppSettings(recent_files=["a.fountain"]))
        document, _ = decode(encode(project_document))
        assert document.get_extension(AppSettings).recent_files == ["a.fountain"]

    def test_reserved_keys(self):
        """Test the list of schema keys."""
        from scriptmeta.models import ProjectDocument

        keys = ProjectDocument.reserved_keys()
        assert "schemaVersion" in keys
        assert "audioExport" in keys
        assert "extensions" not in keys
