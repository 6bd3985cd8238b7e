"""scriptmeta configuration settings."""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scriptmeta.exceptions import ConfigurationError, check_config_keys


class ScriptMetaSettings(BaseSettings):
    """scriptmeta configuration settings.

    Settings are loaded with the following precedence (highest to lowest):
    1. Explicit overrides passed by the caller
    2. Config file values (YAML, TOML, or JSON), later files win
    3. Environment variables (prefixed with SCRIPTMETA_)
       Example: export SCRIPTMETA_MAX_WORKERS=8
    4. .env file in the current directory
    5. Default values (defined in field declarations below)
    """

    model_config = SettingsConfigDict(
        env_prefix="SCRIPTMETA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Debug settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="console",
        description="Log output format (console, json, structured)",
        pattern="^(console|json|structured)$",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    # Rebuild settings
    max_workers: int = Field(
        default=4,
        description=(
            "Upper bound on worker threads used for per-chapter extraction "
            "(1 = extract chapters inline)"
        ),
        ge=1,
        le=64,
    )
    default_phase: str = Field(
        default="drafting",
        description="Status phase written when a document has no status section yet",
        min_length=1,
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        """Expand environment variables and resolve path."""
        if v is None:
            return None
        if isinstance(v, str):
            expanded = os.path.expandvars(v)
            return Path(expanded).expanduser().resolve()
        if isinstance(v, Path):
            return v.resolve()
        raise ValueError(
            f"Path fields must be str or Path, got {type(v).__name__}: {v!r}"
        )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.upper()
        raise ValueError(f"log_level must be a string, got {type(v).__name__}")

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v: Any) -> str:
        """Normalize log format to lowercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.lower()
        raise ValueError(f"log_format must be a string, got {type(v).__name__}")

    @classmethod
    def from_env(cls) -> ScriptMetaSettings:
        """Create settings from environment variables."""
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> ScriptMetaSettings:
        """Load settings from a YAML, TOML or JSON file.

        Raises:
            ConfigurationError: If the suffix is unknown or the file does not
                hold a mapping.
            FileNotFoundError: If config file doesn't exist.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        suffix = config_path.suffix.lower()
        loader = _LOADERS.get(suffix)
        if loader is None:
            raise ConfigurationError(
                message=f"Unsupported configuration file format: {suffix}",
                hint="Rename the file to .yaml, .yml, .toml or .json",
                details={
                    "file": str(config_path),
                    "detected_format": suffix,
                    "supported_formats": sorted(_LOADERS),
                },
            )

        data = loader(config_path)
        if not isinstance(data, dict):
            raise ConfigurationError(
                message=f"Configuration file must contain a mapping: {config_path}",
                details={"file": str(config_path), "found": type(data).__name__},
            )

        check_config_keys(data)
        return cls(**data)

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: list[Path | str] | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> ScriptMetaSettings:
        """Merge config files and explicit overrides into one settings object.

        Args:
            config_files: Files to load; later files override earlier ones.
                Missing files are logged and skipped.
            overrides: Explicit values that win over every other source.
                ``None`` values are ignored.
        """
        data: dict[str, Any] = {}

        for config_file in config_files or []:
            try:
                file_settings = cls.from_file(config_file)
            except FileNotFoundError:
                from scriptmeta.config.logging import get_logger as _get_logger

                _get_logger("scriptmeta.config.settings").warning(
                    "Configuration file not found, using defaults",
                    config_file=str(config_file),
                )
                continue
            data.update(file_settings.model_dump(exclude_unset=True))

        if overrides:
            data.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**data)


def _load_yaml(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_toml(path: Path) -> Any:
    with path.open("rb") as f:
        return tomllib.load(f)


def _load_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


_LOADERS: dict[str, Callable[[Path], Any]] = {
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
    ".toml": _load_toml,
    ".json": _load_json,
}

_settings: ScriptMetaSettings | None = None

# Searched in order; later files override earlier ones
_CONFIG_LOCATIONS = (
    ("home", ".config/scriptmeta/config.yaml"),
    ("home", ".config/scriptmeta/config.toml"),
    ("cwd", "scriptmeta.yaml"),
    ("cwd", "scriptmeta.toml"),
    ("cwd", "scriptmeta.json"),
)


def _get_config_paths() -> list[Path | str]:
    """Config files that exist on this machine, lowest priority first."""
    found: list[Path | str] = []
    for base, relative in _CONFIG_LOCATIONS:
        path = (Path.home() if base == "home" else Path.cwd()) / relative
        try:
            if path.is_file():
                found.append(path)
        except OSError:
            continue
    return found


def get_settings() -> ScriptMetaSettings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        config_paths = _get_config_paths()
        if config_paths:
            _settings = ScriptMetaSettings.from_multiple_sources(
                config_files=config_paths
            )
        else:
            _settings = ScriptMetaSettings.from_env()
    return _settings


def set_settings(settings: ScriptMetaSettings) -> None:
    """Replace the process-wide settings."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Drop the cached settings so the next ``get_settings`` reloads them."""
    global _settings
    _settings = None
