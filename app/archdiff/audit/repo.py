"""Reference repo tree listing.

The repo tree mirrors the live root: ``<repo>/etc/app.conf`` is the
reference copy of ``<root>/etc/app.conf``. Files are listed either by
walking the whole tree or, when the tree is a git checkout, by asking git
for the tracked files only.
"""

import logging
import subprocess
from enum import Enum

from archdiff.audit.models import FailureReporter
from archdiff.audit.walker import walk_files
from archdiff.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)


class RepoSource(str, Enum):
    """Strategy for listing reference files.

    Attributes:
        WALK: Every non-directory entry under the repo tree.
        GIT: Files tracked by git in the repo tree (``git ls-files``).
    """

    WALK = "walk"
    GIT = "git"


class RepoError(Exception):
    """Raised when the reference file list cannot be produced."""


def list_repo_files(
    repo: str,
    reporter: FailureReporter,
    source: RepoSource = RepoSource.WALK,
) -> list[str]:
    """List reference files as paths relative to the repo tree.

    Args:
        repo: Repo tree directory, ending with a separator.
        reporter: Receives walk errors (WALK source only).
        source: Listing strategy.

    Returns:
        Repo-relative paths in listing order.

    Raises:
        RepoError: If git is unavailable or ``git ls-files`` fails.
    """
    if source == RepoSource.GIT:
        return _git_ls_files(repo)

    prefix_len = len(repo)
    return [path[prefix_len:] for path in walk_files(repo, reporter=reporter)]


def _git_ls_files(repo: str) -> list[str]:
    """List tracked files of a git checkout.

    Uses NUL-separated output so file names are taken verbatim
    (no quoting of unusual characters).

    Args:
        repo: Checkout directory.

    Returns:
        Tracked file paths relative to the checkout.

    Raises:
        RepoError: If git is unavailable or the command fails.
    """
    if not command_exists("git"):
        msg = "git is not available on this system"
        raise RepoError(msg)

    try:
        result = run_command(["git", "ls-files", "-z"], cwd=repo, timeout=None)
    except (OSError, subprocess.SubprocessError) as e:
        raise RepoError(f"Failed to list repo files in {repo}: {e}") from e

    if not result.success:
        msg = f"git ls-files failed in {repo}: {result.stderr.strip() or 'unknown error'}"
        raise RepoError(msg)

    files = [name for name in result.stdout.split("\0") if name]
    logger.debug("git lists %d tracked files in %s", len(files), repo)
    return files
