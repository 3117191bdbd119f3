"""Content hashing for drift detection.

pacman records an MD5 digest for every backup file, so the same digest
is used for all content comparisons.
"""

from __future__ import annotations

import hashlib
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from archdiff.audit.models import FailureReporter

DEFAULT_CHUNK_SIZE = 1024 * 1024


class HashError(Exception):
    """Raised when a file cannot be opened or read for hashing."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"failed to hash {path}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


def hash_file(path: str | os.PathLike[str], chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Compute the MD5 hex digest of a file's content.

    Args:
        path: File to hash.
        chunk_size: Read size in bytes.

    Returns:
        Lowercase hexadecimal digest.

    Raises:
        HashError: If the file cannot be opened or read.
    """
    hasher = hashlib.md5(usedforsecurity=False)
    try:
        with open(path, "rb") as handle:
            for chunk in iter(lambda: handle.read(chunk_size), b""):
                hasher.update(chunk)
    except OSError as exc:
        raise HashError(os.fspath(path), exc) from exc
    return hasher.hexdigest()


def hash_file_logged(path: str, reporter: FailureReporter) -> str | None:
    """Hash a file, reporting failures instead of raising.

    Args:
        path: File to hash.
        reporter: Receives the failure when hashing is impossible.

    Returns:
        The digest, or None if the file could not be hashed.
    """
    try:
        return hash_file(path)
    except HashError as exc:
        reporter.report(path, exc)
        return None
