"""Package database access.

This module provides the read-only pacman local database reader and the
merged package state it produces.
"""

from archdiff.database.local import DatabaseError, LocalDatabase, parse_sections
from archdiff.database.models import BackupEntry, InstalledPackage, PackageState

__all__ = [
    "BackupEntry",
    "DatabaseError",
    "InstalledPackage",
    "LocalDatabase",
    "PackageState",
    "parse_sections",
]
