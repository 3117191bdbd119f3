"""Audit domain models.

This module defines the divergence records produced by the reconciliation
passes and the failure-reporting seam the passes use for per-path I/O
errors.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class DivergenceKind(str, Enum):
    """Classification of a detected divergence.

    The values are the tag characters used in the report.

    Attributes:
        UNTRACKED: On disk, not owned by any package, not excluded.
        REPO_DRIFT: Live copy differs from the reference repo copy.
        DELETED: Owned by a package, not excluded, missing from disk.
        BACKUP_DRIFT: Backup file whose content no longer matches pacman's record.
    """

    UNTRACKED = "?"
    REPO_DRIFT = "R"
    DELETED = "D"
    BACKUP_DRIFT = "B"


@dataclass(frozen=True, slots=True)
class Divergence:
    """A single divergence between recorded and observed state.

    Attributes:
        kind: Classification tag.
        path: Path relative to the audited root (no leading separator).
    """

    kind: DivergenceKind
    path: str

    def __post_init__(self) -> None:
        """Validate divergence data after initialization."""
        if not self.path:
            msg = "Divergence path cannot be empty"
            raise ValueError(msg)


class FailureReporter(Protocol):
    """Sink for non-fatal per-path failures."""

    def report(self, path: str, cause: BaseException) -> None:
        """Record that an operation on ``path`` failed with ``cause``."""
        ...


class LoggingFailureReporter:
    """Reports failures as warnings through the logging module."""

    def report(self, path: str, cause: BaseException) -> None:
        logger.warning("IO error for operation on %s: %s", path, cause)


class CollectingFailureReporter:
    """Keeps reported failures in memory.

    Safe to share between the worker threads of the parallel passes.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._failures: list[tuple[str, BaseException]] = []

    def report(self, path: str, cause: BaseException) -> None:
        with self._lock:
            self._failures.append((path, cause))

    @property
    def failures(self) -> list[tuple[str, BaseException]]:
        """Snapshot of the failures reported so far."""
        with self._lock:
            return list(self._failures)

    @property
    def paths(self) -> list[str]:
        """Paths of the failures reported so far."""
        return [path for path, _ in self.failures]
