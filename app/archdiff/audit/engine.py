"""Reconciliation engine.

Compares the live root against the package state, the exclusion rules
and the reference repo tree in four passes:

1. Untracked: walk the live root; files not owned by a package are ``?``.
2. Repo drift: every reference file whose live copy hashes differently is ``R``.
3. Deleted: owned files never seen in pass 1 that do not stat are ``D``.
4. Backup drift: backup files whose live content no longer matches
   pacman's recorded hash are ``B``.

Passes 1 and 2 run on the calling thread and produce the inputs of
passes 3 and 4, which run in parallel on a thread pool.
"""

import logging
import os
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

from archdiff.audit.models import (
    Divergence,
    DivergenceKind,
    FailureReporter,
    LoggingFailureReporter,
)
from archdiff.audit.repo import RepoSource, list_repo_files
from archdiff.audit.walker import walk_files
from archdiff.core.hashing import hash_file_logged
from archdiff.core.paths import normalize_dir
from archdiff.database.models import PackageState
from archdiff.exclusion.matcher import ExclusionMatcher

logger = logging.getLogger(__name__)

# Candidates handed to one worker task in the parallel passes
_CHUNK_SIZE = 512

T = TypeVar("T")


def _chunked(items: Sequence[T], size: int = _CHUNK_SIZE) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class Reconciler:
    """Runs the four audit passes for one root.

    All inputs are treated as read-only; pass results are returned rather
    than written back into the package state, so a Reconciler can be run
    more than once against the same inputs.

    Args:
        root: Live filesystem root.
        repo: Reference repo tree mirroring the live root.
        state: Package ownership snapshot.
        matcher: Exclusion rules.
        reporter: Receives per-path I/O failures. Defaults to logging them.
        workers: Thread count for passes 3 and 4 (None = executor default).
        repo_source: How reference files are listed.
    """

    def __init__(
        self,
        root: str,
        repo: str,
        state: PackageState,
        matcher: ExclusionMatcher,
        *,
        reporter: FailureReporter | None = None,
        workers: int | None = None,
        repo_source: RepoSource = RepoSource.WALK,
    ) -> None:
        self._root = normalize_dir(root)
        self._repo = normalize_dir(repo)
        self._state = state
        self._matcher = matcher
        self._reporter = reporter or LoggingFailureReporter()
        self._workers = workers
        self._repo_source = repo_source

    @property
    def root(self) -> str:
        """Normalized live root, ending with a separator."""
        return self._root

    def run(self) -> list[Divergence]:
        """Run all passes.

        Returns:
            Unsorted divergence records, grouped in pass order.
        """
        untracked, found = self.untracked_pass()
        repo_drift, repo_paths = self.repo_drift_pass()

        deleted_candidates = sorted(self._state.owned - found)
        backup_candidates = sorted(
            (path, expected)
            for path, expected in self._state.backup.items()
            if path not in repo_paths
        )
        logger.debug(
            "Checking %d deletion and %d backup candidates",
            len(deleted_candidates),
            len(backup_candidates),
        )

        futures: list[Future[list[Divergence]]] = []
        with ThreadPoolExecutor(
            max_workers=self._workers,
            thread_name_prefix="archdiff",
        ) as executor:
            for paths in _chunked(deleted_candidates):
                futures.append(executor.submit(self.deleted_pass, paths))
            for entries in _chunked(backup_candidates):
                futures.append(executor.submit(self.backup_drift_pass, entries))

        records = [*untracked, *repo_drift]
        for future in futures:
            records.extend(future.result())
        return records

    def untracked_pass(self) -> tuple[list[Divergence], frozenset[str]]:
        """Walk the live root and report files no package owns.

        Excluded entries are pruned; excluded directories are not descended.

        Returns:
            Tuple of (untracked records, owned paths found on disk).
        """
        owned = self._state.owned
        prefix_len = len(self._root)
        records: list[Divergence] = []
        found: set[str] = set()

        for path in walk_files(self._root, reporter=self._reporter, prune=self._matcher.excluded):
            relative = path[prefix_len:]
            if relative in owned:
                found.add(relative)
            else:
                records.append(Divergence(DivergenceKind.UNTRACKED, relative))

        logger.debug("Untracked pass: %d found, %d untracked", len(found), len(records))
        return records, frozenset(found)

    def repo_drift_pass(self) -> tuple[list[Divergence], frozenset[str]]:
        """Compare every reference file with its live copy.

        Exclusion rules do not apply here. A file that cannot be hashed on
        either side is reported to the failure reporter and skipped.

        Returns:
            Tuple of (repo drift records, every repo-relative path seen).
        """
        if not os.path.isdir(self._repo):
            logger.warning("No repo tree at %s, skipping repo comparison", self._repo)
            return [], frozenset()

        records: list[Divergence] = []
        repo_paths: set[str] = set()

        for relative in list_repo_files(self._repo, self._reporter, self._repo_source):
            repo_paths.add(relative)
            repo_hash = hash_file_logged(self._repo + relative, self._reporter)
            if repo_hash is None:
                continue
            live_hash = hash_file_logged(self._root + relative, self._reporter)
            if live_hash is None:
                continue
            if repo_hash != live_hash:
                records.append(Divergence(DivergenceKind.REPO_DRIFT, relative))

        logger.debug("Repo pass: %d files, %d drifted", len(repo_paths), len(records))
        return records, frozenset(repo_paths)

    def deleted_pass(self, candidates: Iterable[str]) -> list[Divergence]:
        """Report owned paths that are missing from disk.

        Candidates are the owned paths the untracked pass did not see. A
        candidate that still stats was hidden from the walk by pruning and
        is not reported.

        Args:
            candidates: Root-relative owned paths.

        Returns:
            Deleted records.
        """
        records: list[Divergence] = []
        for relative in candidates:
            path = self._root + relative
            if self._matcher.excluded(path, False):
                continue
            try:
                os.stat(path)
            except OSError:
                records.append(Divergence(DivergenceKind.DELETED, relative))
            else:
                logger.debug("Present but not walked: %s", path)
        return records

    def backup_drift_pass(self, candidates: Iterable[tuple[str, str]]) -> list[Divergence]:
        """Report backup files whose content differs from the recorded hash.

        Args:
            candidates: (root-relative path, expected MD5) pairs, with repo
                tracked paths already removed.

        Returns:
            Backup drift records.
        """
        records: list[Divergence] = []
        for relative, expected in candidates:
            path = self._root + relative
            if self._matcher.excluded_or_parent_excluded(path):
                continue
            actual = hash_file_logged(path, self._reporter)
            if actual is not None and actual != expected:
                records.append(Divergence(DivergenceKind.BACKUP_DRIFT, relative))
        return records
