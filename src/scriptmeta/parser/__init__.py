"""Screenplay text parsing for scriptmeta."""

from scriptmeta.parser.aliases import AliasResolver
from scriptmeta.parser.character_extractor import (
    ChapterCharacters,
    CharacterExtractor,
    CueSpan,
    Introduction,
)
from scriptmeta.parser.scene_index import (
    HeadingRecord,
    SceneIndex,
    SceneIndexBuilder,
    scan_headings,
)
from scriptmeta.parser.slugline_parser import SluglineParser, SluglineResult

__all__ = [
    "AliasResolver",
    "ChapterCharacters",
    "CharacterExtractor",
    "CueSpan",
    "HeadingRecord",
    "Introduction",
    "SceneIndex",
    "SceneIndexBuilder",
    "SluglineParser",
    "SluglineResult",
    "scan_headings",
]
