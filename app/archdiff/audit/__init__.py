"""Filesystem audit.

This module provides the reconciliation passes, their record types and
the sorted report output.
"""

from archdiff.audit.engine import Reconciler
from archdiff.audit.models import (
    CollectingFailureReporter,
    Divergence,
    DivergenceKind,
    FailureReporter,
    LoggingFailureReporter,
)
from archdiff.audit.repo import RepoError, RepoSource, list_repo_files
from archdiff.audit.report import format_line, sort_divergences, write_report
from archdiff.audit.walker import walk_files

__all__ = [
    "CollectingFailureReporter",
    "Divergence",
    "DivergenceKind",
    "FailureReporter",
    "LoggingFailureReporter",
    "Reconciler",
    "RepoError",
    "RepoSource",
    "format_line",
    "list_repo_files",
    "sort_divergences",
    "walk_files",
    "write_report",
]
