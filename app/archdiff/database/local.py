"""pacman local database reader.

Reads package metadata directly from ``<dbpath>/local/``, where every
installed package has a directory holding a ``desc`` file and a
``files`` file. Both use pacman's section format::

    %FILES%
    etc/
    etc/pacman.conf

    %BACKUP%
    etc/pacman.conf	2b4c4e5f6e5c3a1e0b8f0c1d2e3f4a5b
"""

import logging
from collections.abc import Iterator
from pathlib import Path

from archdiff.database.models import BackupEntry, InstalledPackage, PackageState

logger = logging.getLogger(__name__)

_LOCAL_DIR = "local"


class DatabaseError(Exception):
    """Raised when the local package database cannot be read."""


def parse_sections(text: str) -> dict[str, list[str]]:
    """Parse pacman's ``%SECTION%`` format.

    Each section starts with a ``%NAME%`` header line and runs until the
    next blank line. Lines outside a section are ignored.

    Args:
        text: Content of a desc or files entry.

    Returns:
        Mapping of section name (without percent signs) to its lines.
    """
    sections: dict[str, list[str]] = {}
    current: list[str] | None = None
    for line in text.splitlines():
        if not line:
            current = None
            continue
        if current is None:
            if len(line) > 2 and line.startswith("%") and line.endswith("%"):
                current = sections.setdefault(line[1:-1], [])
            continue
        current.append(line)
    return sections


class LocalDatabase:
    """Read-only view of the pacman local database.

    Args:
        dbpath: Database directory (the one containing ``local/``).

    Example:
        >>> db = LocalDatabase("/var/lib/pacman/")
        >>> state = db.load_state()
        >>> "usr/bin/pacman" in state.owned_files()
        True
    """

    def __init__(self, dbpath: str | Path) -> None:
        self._local = Path(dbpath) / _LOCAL_DIR

    def packages(self) -> Iterator[InstalledPackage]:
        """Yield every installed package.

        Yields:
            InstalledPackage per package directory, in name order.

        Raises:
            DatabaseError: If the database or a package entry cannot be read.
        """
        try:
            entries = sorted(self._local.iterdir())
        except OSError as e:
            raise DatabaseError(f"Failed to open package database {self._local}: {e}") from e

        for entry in entries:
            # Skips ALPM_DB_VERSION and anything that is not a package entry
            if not (entry / "desc").is_file():
                continue
            yield self._read_package(entry)

    def load_state(self) -> PackageState:
        """Load ownership and backup records of all installed packages.

        Returns:
            Merged PackageState snapshot.

        Raises:
            DatabaseError: If the database cannot be read.
        """
        state = PackageState.from_packages(self.packages())
        logger.debug(
            "Loaded %d owned paths and %d backup records from %s",
            len(state.owned),
            len(state.backup),
            self._local,
        )
        return state

    def _read_package(self, entry: Path) -> InstalledPackage:
        """Read a single package directory.

        Args:
            entry: Package directory (``<name>-<version>``).

        Returns:
            InstalledPackage built from desc and files.

        Raises:
            DatabaseError: If an entry file is unreadable or incomplete.
        """
        desc = parse_sections(self._read_text(entry / "desc"))
        files_path = entry / "files"
        files = parse_sections(self._read_text(files_path)) if files_path.exists() else {}

        name = _first(desc.get("NAME"))
        version = _first(desc.get("VERSION"))
        if not name or not version:
            msg = f"Package entry {entry} lacks %NAME% or %VERSION%"
            raise DatabaseError(msg)

        backup: list[BackupEntry] = []
        for line in files.get("BACKUP", []):
            path, sep, md5 = line.partition("\t")
            if not sep or not path:
                logger.debug("Skipping malformed backup line in %s: %r", entry, line[:100])
                continue
            backup.append(BackupEntry(path=path, md5=md5.strip()))

        return InstalledPackage(
            name=name,
            version=version,
            files=tuple(files.get("FILES", [])),
            backup=tuple(backup),
        )

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            raise DatabaseError(f"Failed to read {path}: {e}") from e


def _first(values: list[str] | None) -> str | None:
    return values[0].strip() if values else None
