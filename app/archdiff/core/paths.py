"""Conventional system locations used by archdiff.

Defaults:
- Live root: /
- Package database: /var/lib/pacman/
- Reference repo tree: /usr/share/archdiff/
- Exclusion rules: /etc/archdiff/ignore/
- Configuration file: /etc/archdiff/archdiff.toml
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "archdiff"

DEFAULT_ROOT = "/"
DEFAULT_DBPATH = "/var/lib/pacman"
DEFAULT_REPO = f"/usr/share/{APP_NAME}"
DEFAULT_IGNORE = f"/etc/{APP_NAME}/ignore"

# Environment variable overriding the configuration file location
CONFIG_ENV_VAR = "ARCHDIFF_CONFIG"
_DEFAULT_CONFIG = f"/etc/{APP_NAME}/{APP_NAME}.toml"


def get_config_path() -> Path:
    """Get the configuration file path.

    Returns:
        Path from $ARCHDIFF_CONFIG if set, else /etc/archdiff/archdiff.toml.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path(_DEFAULT_CONFIG)


def normalize_dir(path: str) -> str:
    """Ensure a directory path ends with exactly one trailing separator.

    Relative paths are stripped of the root prefix by plain string slicing,
    so every directory handed to the audit must end with a separator.

    Args:
        path: Directory path, with or without a trailing separator.

    Returns:
        The path with a trailing separator appended when missing.
    """
    if not path:
        msg = "Directory path cannot be empty"
        raise ValueError(msg)
    if path.endswith(os.sep):
        return path
    return path + os.sep
