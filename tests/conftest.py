"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from scriptmeta.config import ScriptMetaSettings, reset_settings, set_settings
from scriptmeta.models import ProjectDocument

FIXTURES_DIR = Path(__file__).parent / "fixtures"
CHAPTERS_DIR = FIXTURES_DIR / "chapters"

FIXED_NOW = datetime(2025, 11, 17, 10, 30, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Run every test with default settings and no SCRIPTMETA_ environment."""
    for var in [k for k in os.environ if k.startswith("SCRIPTMETA_")]:
        monkeypatch.delenv(var)
    reset_settings()
    set_settings(ScriptMetaSettings(max_workers=1))
    yield
    reset_settings()


@pytest.fixture
def chapter_texts():
    """Chapter fixture texts keyed by identifier."""
    return {
        path.stem: path.read_text(encoding="utf-8")
        for path in sorted(CHAPTERS_DIR.glob("*.fountain"))
    }


@pytest.fixture
def project_document():
    """Empty project document with a fixed creation time."""
    return ProjectDocument.new(
        title="The Long Goodbye",
        author="Test Author",
        short_title="Goodbye",
        now=FIXED_NOW,
    )


@pytest.fixture
def fixed_clock():
    """Clock returning a constant timestamp."""
    return lambda: FIXED_NOW
