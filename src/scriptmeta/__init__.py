"""scriptmeta: screenplay metadata indexing.

scriptmeta reads scene headings and dialogue cues from screenplay chapters and
keeps a project metadata document (YAML front matter plus prose) up to date
with chapters, characters, voices, scenes and production status.
"""

# Configuration imports
from .config import ScriptMetaSettings, get_logger, get_settings

# Document format imports
from .document import decode, encode

# Model imports
from .models import DiffReport, ProjectDocument, RebuildResult

# Parser imports
from .parser import AliasResolver, CharacterExtractor, SceneIndexBuilder, SluglineParser

# Rebuild imports
from .rebuild import RebuildOrchestrator, SectionKind, rebuild_all, rebuild_section

__version__ = "0.1.0"

__all__ = [
    "AliasResolver",
    "CharacterExtractor",
    "DiffReport",
    "ProjectDocument",
    "RebuildOrchestrator",
    "RebuildResult",
    "SceneIndexBuilder",
    "ScriptMetaSettings",
    "SectionKind",
    "SluglineParser",
    "__version__",
    "decode",
    "encode",
    "get_logger",
    "get_settings",
    "rebuild_all",
    "rebuild_section",
]
