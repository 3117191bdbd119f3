"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules: a fake live
root, a fake pacman local database and the reference/exclusion
directories an audit reads.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

PackageFactory = Callable[..., Path]


@pytest.fixture
def live_root(tmp_path: Path) -> Path:
    """Empty live filesystem root."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def dbpath(tmp_path: Path) -> Path:
    """pacman database directory with an empty local database."""
    db = tmp_path / "db"
    (db / "local").mkdir(parents=True)
    (db / "local" / "ALPM_DB_VERSION").write_text("9\n")
    return db


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """Empty reference repo tree."""
    repo = tmp_path / "repo"
    repo.mkdir()
    return repo


@pytest.fixture
def ignore_dir(tmp_path: Path) -> Path:
    """Empty exclusion rule directory."""
    ignore = tmp_path / "ignore"
    ignore.mkdir()
    return ignore


@pytest.fixture
def add_package(dbpath: Path) -> PackageFactory:
    """Factory writing a package entry into the fake local database.

    Usage: ``add_package("name", files=[...], backup={"etc/x": md5})``.
    """

    def _add(
        name: str,
        version: str = "1.0-1",
        files: list[str] | None = None,
        backup: dict[str, str] | None = None,
    ) -> Path:
        entry = dbpath / "local" / f"{name}-{version}"
        entry.mkdir()
        (entry / "desc").write_text(f"%NAME%\n{name}\n\n%VERSION%\n{version}\n\n")

        lines = ["%FILES%", *(files or []), ""]
        if backup:
            lines += ["%BACKUP%", *(f"{path}\t{md5}" for path, md5 in backup.items()), ""]
        (entry / "files").write_text("\n".join(lines) + "\n")
        return entry

    return _add


@pytest.fixture
def write_file(live_root: Path) -> Callable[[str, str], Path]:
    """Factory creating a file (and its parents) below the live root."""

    def _write(relative: str, content: str = "") -> Path:
        path = live_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write
