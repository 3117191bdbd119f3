"""Recursive directory walking with pruning.

Walks a tree without following symlinks, so a symlink is always reported
as a leaf entry (even when it points at a directory).
"""

import logging
import os
from collections.abc import Callable, Iterator

from archdiff.audit.models import FailureReporter

logger = logging.getLogger(__name__)

# prune(path, is_dir) -> True to drop the entry (and its subtree)
PruneFunc = Callable[[str, bool], bool]


def _never_prune(_path: str, _is_dir: bool) -> bool:
    return False


def walk_files(
    top: str,
    *,
    reporter: FailureReporter,
    prune: PruneFunc | None = None,
) -> Iterator[str]:
    """Yield every non-directory entry below ``top``.

    Directories are visited depth-first in name order. Each entry is
    offered to ``prune`` before it is yielded or descended into. Errors
    opening a directory or classifying an entry are handed to the reporter
    and the walk continues with the next entry.

    Args:
        top: Directory to walk. The yielded paths start with this string.
        reporter: Receives per-entry and per-directory errors.
        prune: Optional exclusion predicate.

    Yields:
        Paths of files, symlinks and other non-directory entries.
    """
    should_prune = prune or _never_prune
    stack = [top]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            reporter.report(current, exc)
            continue

        subdirs: list[str] = []
        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as exc:
                reporter.report(entry.path, exc)
                continue

            if should_prune(entry.path, is_dir):
                logger.debug("Pruned %s", entry.path)
                continue

            if is_dir:
                subdirs.append(entry.path)
            else:
                yield entry.path

        # Reversed so the stack pops subdirectories in name order
        stack.extend(reversed(subdirs))
