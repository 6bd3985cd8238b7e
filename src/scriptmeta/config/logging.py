"""Logging setup: stdlib handlers rendered through structlog.

Every record, whether emitted by a structlog logger inside the rebuild
pipeline or by a third-party library through ``logging``, ends up in a
``ProcessorFormatter`` so console and file output share one renderer.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import (
    CallsiteParameter,
    CallsiteParameterAdder,
    TimeStamper,
    add_log_level,
    dict_tracebacks,
    format_exc_info,
)
from structlog.stdlib import (
    ProcessorFormatter,
    add_logger_name,
    filter_by_level,
    render_to_log_kwargs,
)

from scriptmeta.config.settings import ScriptMetaSettings

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Formats whose final rendering happens in the stdlib formatter
_FORMATTER_RENDERED = frozenset({"json", "structured"})


def _resolve_level(name: str) -> int:
    level = logging.getLevelNamesMapping().get(name.upper())
    if level is None:
        known = sorted(
            key for key in logging.getLevelNamesMapping() if key != "NOTSET"
        )
        raise ValueError(
            f"Invalid log level '{name}'. Valid levels are: {', '.join(known)}"
        )
    return level


def _renderer(log_format: str) -> Any:
    """Final structlog processor for a format name."""
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "structured":
        return structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "logger", "event", "section", "chapter"],
            drop_missing=True,
        )
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.rich_traceback,
    )


def _make_handlers(settings: ScriptMetaSettings, level: int) -> list[logging.Handler]:
    formatter = ProcessorFormatter(
        processor=_renderer(settings.log_format),
        foreign_pre_chain=[TimeStamper(fmt="iso"), add_log_level, add_logger_name],
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        path = Path(settings.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
    return handlers


def _processor_chain(settings: ScriptMetaSettings) -> list[Any]:
    chain: list[Any] = [
        merge_contextvars,
        filter_by_level,
        TimeStamper(fmt="iso"),
        add_log_level,
        dict_tracebacks,
    ]
    if settings.debug:
        chain.append(
            CallsiteParameterAdder(
                parameters=[
                    CallsiteParameter.MODULE,
                    CallsiteParameter.FUNC_NAME,
                    CallsiteParameter.LINENO,
                ]
            )
        )
    chain.append(format_exc_info)

    # caplog only captures records that reach a stdlib handler
    under_pytest = "PYTEST_CURRENT_TEST" in os.environ or "pytest" in sys.modules
    if settings.log_format in _FORMATTER_RENDERED or under_pytest:
        chain += [render_to_log_kwargs, ProcessorFormatter.wrap_for_formatter]
    else:
        chain.append(_renderer(settings.log_format))
    return chain


def configure_logging(settings: ScriptMetaSettings) -> None:
    """Install handlers on the root logger and configure structlog.

    Args:
        settings: Settings providing ``log_level``, ``log_format``,
            ``log_file`` and ``debug``.

    Raises:
        ValueError: If the log level is not known to the logging module.
    """
    level = _resolve_level(settings.log_level)
    logging.basicConfig(
        level=level, handlers=_make_handlers(settings, level), force=True
    )

    structlog.configure(
        processors=_processor_chain(settings),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Return a structlog logger; see ``scriptmeta.config.get_logger``."""
    return structlog.get_logger(name)
