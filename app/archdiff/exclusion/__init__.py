"""Exclusion rule loading and matching.

This module provides the gitignore-style matcher consulted by the audit
passes to prune the live walk and skip excluded package files.
"""

from archdiff.exclusion.matcher import ExclusionError, ExclusionMatcher, load_exclusion_rules

__all__ = [
    "ExclusionError",
    "ExclusionMatcher",
    "load_exclusion_rules",
]
