"""Audit configuration and settings.

This module provides the configuration model and I/O functions for an
audit run. Settings come from three layers, later ones winning:

1. Built-in defaults (conventional pacman/archdiff locations)
2. The TOML configuration file (/etc/archdiff/archdiff.toml)
3. Command-line options

Example configuration::

    root = "/"
    dbpath = "/var/lib/pacman"
    repo = "/usr/share/archdiff"
    ignore = "/etc/archdiff/ignore"
    workers = 8
    repo_source = "git"
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from archdiff.audit.repo import RepoSource
from archdiff.core.paths import (
    DEFAULT_DBPATH,
    DEFAULT_IGNORE,
    DEFAULT_REPO,
    DEFAULT_ROOT,
    get_config_path,
    normalize_dir,
)

logger = logging.getLogger(__name__)


class AuditConfig(BaseModel):
    """Configuration for a single audit run.

    Attributes:
        root: Live filesystem root to audit.
        dbpath: pacman database directory (contains ``local/``).
        repo: Reference repo tree mirroring the live root.
        ignore: Directory of gitignore-style exclusion rule files.
        workers: Thread count for the parallel passes (None = executor default).
        repo_source: How reference files are listed ("walk" or "git").
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: Annotated[str, Field(description="Live filesystem root")] = DEFAULT_ROOT
    dbpath: Annotated[str, Field(description="pacman database directory")] = DEFAULT_DBPATH
    repo: Annotated[str, Field(description="Reference repo directory")] = DEFAULT_REPO
    ignore: Annotated[str, Field(description="Exclusion rule directory")] = DEFAULT_IGNORE
    workers: Annotated[
        int | None,
        Field(ge=1, le=256, description="Worker threads (1-256, None = auto)"),
    ] = None
    repo_source: Annotated[
        RepoSource,
        Field(description="Reference file listing strategy"),
    ] = RepoSource.WALK

    @field_validator("root", "dbpath", "repo", "ignore")
    @classmethod
    def ensure_trailing_separator(cls, v: str) -> str:
        """Normalize directory options to end with a path separator."""
        return normalize_dir(v)

    def with_overrides(self, **values: Any) -> "AuditConfig":
        """Return a copy with the given non-None values applied.

        Args:
            **values: Field overrides; None means "not given".

        Returns:
            Validated AuditConfig with overrides applied.

        Raises:
            ConfigError: If an override violates the schema.
        """
        data = self.model_dump()
        data.update({key: value for key, value in values.items() if value is not None})
        try:
            return AuditConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid option: {e}") from e


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when a config file cannot be parsed."""


def load_config(path: Path | None = None, *, required: bool = False) -> AuditConfig:
    """Load audit configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.
        required: If True, a missing file is an error instead of meaning
            "use defaults".

    Returns:
        Validated AuditConfig object.

    Raises:
        ConfigNotFoundError: If the file is required but doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if required:
            raise ConfigNotFoundError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return AuditConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return AuditConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def dump_config(config: AuditConfig) -> str:
    """Serialize a configuration to TOML text.

    Only includes non-None values, since TOML has no null.

    Args:
        config: The AuditConfig to serialize.

    Returns:
        TOML document as a string.
    """
    data = {
        key: value
        for key, value in config.model_dump(mode="json").items()
        if value is not None
    }
    return tomli_w.dumps(data)
