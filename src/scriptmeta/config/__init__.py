"""Settings and logging for scriptmeta.

Logging is configured from the global settings the first time a logger is
requested, so importing a module never touches the root logger.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from scriptmeta.config import logging as _logging
from scriptmeta.config import settings as _settings
from scriptmeta.config.logging import configure_logging
from scriptmeta.config.settings import ScriptMetaSettings, get_settings, set_settings

__all__ = [
    "ScriptMetaSettings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "reset_settings",
    "set_settings",
]


@lru_cache(maxsize=1)
def _configured() -> bool:
    configure_logging(get_settings())
    return True


@lru_cache(maxsize=None)
def get_logger(name: str) -> Any:
    """Return the structlog logger for ``name``, one instance per name."""
    _configured()
    return _logging.get_logger(name)


def reset_settings() -> None:
    """Forget the global settings and every cached logger."""
    _settings.reset_settings()
    _configured.cache_clear()
    get_logger.cache_clear()
