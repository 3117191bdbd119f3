"""Gitignore-style exclusion rules.

Rules are read from every file in the exclusion directory and compiled
with pathspec's gitignore dialect. Patterns are rooted at ``/`` and
matched against absolute paths, so a rule file reads like a .gitignore
placed at the top of the filesystem::

    # machine-local state
    /etc/machine-id
    *.pacnew
    /var/lib/*/
    !/var/lib/pacman/

A negated rule can only re-include a path whose parent directory is not
excluded itself: excluded directories are never descended.
"""

import logging
import os
import re
from collections.abc import Iterable
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

# Capture group pathspec uses for the separator after a directory match
_DIR_MARK = "ps_d"


class ExclusionError(Exception):
    """Raised when exclusion rules cannot be loaded or compiled."""


class ExclusionMatcher:
    """Answers whether a path is excluded from the audit.

    The last rule matching a path decides, so a later ``!pattern`` can
    re-include what an earlier rule excluded. Instances are read-only after
    construction and may be queried from several threads at once.

    Args:
        spec: Compiled gitignore pattern set.
    """

    def __init__(self, spec: pathspec.PathSpec) -> None:
        self._patterns = [p for p in spec.patterns if p.include is not None]

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "ExclusionMatcher":
        """Compile rule lines into a matcher.

        Raises:
            ExclusionError: If a pattern is malformed.
        """
        try:
            spec = pathspec.GitIgnoreSpec.from_lines(lines)
        except ValueError as e:
            raise ExclusionError(f"Malformed exclusion pattern: {e}") from e
        return cls(spec)

    @classmethod
    def empty(cls) -> "ExclusionMatcher":
        """Matcher with no rules; nothing is excluded."""
        return cls.from_lines([])

    def __len__(self) -> int:
        return len(self._patterns)

    def excluded(self, path: str, is_dir: bool) -> bool:
        """Check whether a path itself is excluded.

        Only rules naming the path itself count. A file below an excluded
        directory is not excluded by this check; walking never reaches it,
        and ``excluded_or_parent_excluded`` covers paths that were not walked.

        Args:
            path: Absolute path.
            is_dir: Whether the path is a directory (directory-only rules
                such as ``cache/`` apply only then).

        Returns:
            True if the last matching rule excludes the path.
        """
        return self._decide(self._normalize(path, is_dir), path_only=True) is True

    def excluded_or_parent_excluded(self, path: str) -> bool:
        """Check a path that was not reached by walking.

        Checks the path first, then each ancestor directory from the
        nearest upwards; the first one any rule matches decides.

        Args:
            path: Absolute path of a file.

        Returns:
            True if the path or a governing ancestor is excluded.
        """
        decision = self._decide(self._normalize(path, is_dir=False))
        if decision is not None:
            return decision

        parent = os.path.dirname(path.rstrip(os.sep))
        while parent and parent != os.sep:
            decision = self._decide(self._normalize(parent, is_dir=True))
            if decision is not None:
                return decision
            parent = os.path.dirname(parent)
        return False

    def _decide(self, normalized: str, *, path_only: bool = False) -> bool | None:
        """Return the verdict of the last matching rule, None if none match.

        With ``path_only``, matches a rule only produced for a descendant of
        a matching directory are skipped.
        """
        decision: bool | None = None
        for pattern in self._patterns:
            result = pattern.match_file(normalized)
            if result is None:
                continue
            if path_only and _matched_below(result.match, normalized):
                continue
            # include=True means the gitignore rule ignores the path
            decision = bool(pattern.include)
        return decision

    @staticmethod
    def _normalize(path: str, is_dir: bool) -> str:
        """Convert an absolute path to the root-relative form pathspec expects."""
        relative = path.lstrip(os.sep)
        if is_dir and not relative.endswith(os.sep):
            relative += os.sep
        return relative


def _matched_below(match: re.Match[str], normalized: str) -> bool:
    """Check whether a rule matched a directory above the path, not the path."""
    if _DIR_MARK not in match.re.groupindex:
        return False
    end = match.end(_DIR_MARK)
    return end != -1 and end < len(normalized)


def load_exclusion_rules(directory: str | os.PathLike[str]) -> ExclusionMatcher:
    """Build a matcher from every rule file in a directory.

    Files are read in name order so rule precedence does not depend on
    directory listing order. Subdirectories are ignored.

    Args:
        directory: Exclusion rule directory.

    Returns:
        Compiled ExclusionMatcher.

    Raises:
        ExclusionError: If the directory or a rule file cannot be read,
            or a pattern is malformed.
    """
    rule_dir = Path(directory)
    try:
        entries = sorted(rule_dir.iterdir())
    except OSError as e:
        raise ExclusionError(f"Failed to read directory {rule_dir}: {e}") from e

    lines: list[str] = []
    for entry in entries:
        if entry.is_dir():
            logger.warning("Ignoring subdirectory in exclusion rules: %s", entry)
            continue
        try:
            text = entry.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            raise ExclusionError(f"Failed to read exclusion rules {entry}: {e}") from e
        lines.extend(text.splitlines())
        logger.debug("Loaded exclusion rules from %s", entry)

    matcher = ExclusionMatcher.from_lines(lines)
    logger.debug("Compiled %d exclusion rules from %s", len(matcher), rule_dir)
    return matcher
