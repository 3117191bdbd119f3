"""Package database models.

This module defines the records read from the pacman local database and
the merged, read-only package state consumed by the audit.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class BackupEntry:
    """A backup (configuration) file recorded for a package.

    Attributes:
        path: Root-relative path (e.g., 'etc/pacman.conf').
        md5: Expected MD5 hex digest recorded at install/upgrade time.
    """

    path: str
    md5: str


@dataclass(frozen=True, slots=True)
class InstalledPackage:
    """Represents a package recorded in the local database.

    Attributes:
        name: Package name (e.g., 'pacman').
        version: Installed version string (e.g., '6.1.0-3').
        files: Root-relative paths owned by the package. Directories end
            with a separator.
        backup: Backup file records.
    """

    name: str
    version: str
    files: tuple[str, ...] = field(default=())
    backup: tuple[BackupEntry, ...] = field(default=())

    def __post_init__(self) -> None:
        """Validate package data after initialization."""
        if not self.name:
            msg = "Package name cannot be empty"
            raise ValueError(msg)
        if not self.version:
            msg = "Package version cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True, eq=False)
class PackageState:
    """Merged ownership data of all installed packages.

    Both collections are immutable snapshots, safe to share between the
    threads of the parallel audit passes.

    Attributes:
        owned: Every root-relative path owned by some package.
        backup: Backup path to expected MD5; later packages win on conflict.
    """

    owned: frozenset[str]
    backup: Mapping[str, str]

    @classmethod
    def from_packages(cls, packages: Iterable[InstalledPackage]) -> "PackageState":
        """Merge package records into a single state snapshot.

        Args:
            packages: Installed packages, each visited exactly once.

        Returns:
            PackageState with duplicates collapsed.
        """
        owned: set[str] = set()
        backup: dict[str, str] = {}
        for pkg in packages:
            owned.update(pkg.files)
            backup.update((entry.path, entry.md5) for entry in pkg.backup)
        return cls(owned=frozenset(owned), backup=MappingProxyType(backup))

    def owned_files(self) -> frozenset[str]:
        """Return the set of package-owned paths."""
        return self.owned

    def backup_files(self) -> Mapping[str, str]:
        """Return the backup path to expected hash mapping."""
        return self.backup

