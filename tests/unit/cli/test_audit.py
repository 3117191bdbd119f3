"""Unit tests for the audit CLI command."""

import hashlib
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest
from archdiff.cli.main import app
from archdiff.core.paths import CONFIG_ENV_VAR
from typer.testing import CliRunner

runner = CliRunner()

PackageFactory = Callable[..., Path]
WriteFile = Callable[[str, str], Path]


@pytest.fixture(autouse=True)
def _no_system_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests independent of /etc/archdiff/archdiff.toml."""
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "no-config.toml"))


def _args(live_root: Path, dbpath: Path, repo_dir: Path, ignore_dir: Path) -> list[str]:
    return [
        "audit",
        "--root",
        str(live_root),
        "--dbpath",
        str(dbpath),
        "--repo",
        str(repo_dir),
        "--ignore",
        str(ignore_dir),
    ]


class TestAuditCommand:
    """Tests for archdiff audit."""

    def test_reports_sorted_divergences(
        self,
        live_root: Path,
        dbpath: Path,
        repo_dir: Path,
        ignore_dir: Path,
        add_package: PackageFactory,
        write_file: WriteFile,
    ) -> None:
        """Every divergence kind is printed, sorted by path."""
        add_package(
            "app",
            files=["etc/", "etc/app.conf", "usr/", "usr/bin/", "usr/bin/gone"],
            backup={"etc/app.conf": hashlib.md5(b"original").hexdigest()},
        )
        write_file("etc/app.conf", "edited")
        write_file("foo.txt", "")
        (live_root / "usr" / "bin").mkdir(parents=True)

        result = runner.invoke(app, _args(live_root, dbpath, repo_dir, ignore_dir))

        assert result.exit_code == 0
        assert result.stdout == (
            f"B {live_root}/etc/app.conf\n"
            f"? {live_root}/foo.txt\n"
            f"D {live_root}/usr/bin/gone\n"
        )

    def test_repo_drift_and_exclusions(
        self,
        live_root: Path,
        dbpath: Path,
        repo_dir: Path,
        ignore_dir: Path,
        add_package: PackageFactory,
        write_file: WriteFile,
    ) -> None:
        """Repo drift is reported and excluded paths are silent."""
        add_package(
            "app",
            files=["etc/app.conf", "etc/secret.conf"],
            backup={
                "etc/app.conf": hashlib.md5(b"abc123").hexdigest(),
                "etc/secret.conf": hashlib.md5(b"original").hexdigest(),
            },
        )
        write_file("etc/app.conf", "def456")
        write_file("etc/secret.conf", "changed")
        write_file("var/log/messages", "")
        (repo_dir / "etc").mkdir()
        (repo_dir / "etc" / "app.conf").write_text("abc123")
        (ignore_dir / "local").write_text(f"{live_root}/etc/secret.conf\n/**/log/\n")

        result = runner.invoke(app, _args(live_root, dbpath, repo_dir, ignore_dir))

        assert result.exit_code == 0
        assert result.stdout == f"R {live_root}/etc/app.conf\n"

    def test_clean_system_prints_nothing(
        self,
        live_root: Path,
        dbpath: Path,
        repo_dir: Path,
        ignore_dir: Path,
        add_package: PackageFactory,
        write_file: WriteFile,
    ) -> None:
        """No divergences means empty output and success."""
        add_package("app", files=["usr/bin/app"])
        write_file("usr/bin/app", "")

        result = runner.invoke(app, _args(live_root, dbpath, repo_dir, ignore_dir))

        assert result.exit_code == 0
        assert result.stdout == ""

    def test_output_is_repeatable(
        self,
        live_root: Path,
        dbpath: Path,
        repo_dir: Path,
        ignore_dir: Path,
        add_package: PackageFactory,
        write_file: WriteFile,
    ) -> None:
        """Two runs over unchanged inputs print identical reports."""
        add_package("app", files=[f"gone-{i}" for i in range(50)])
        for i in range(50):
            write_file(f"extra/file-{i}", "")
        args = [*_args(live_root, dbpath, repo_dir, ignore_dir), "--workers", "4"]

        first = runner.invoke(app, args)
        second = runner.invoke(app, args)

        assert first.exit_code == 0
        assert first.stdout == second.stdout
        lines = first.stdout.splitlines()
        assert len(lines) == 100
        paths = [line.split(" ", 1)[1].encode() for line in lines]
        assert paths == sorted(paths)

    def test_per_file_errors_do_not_fail(
        self,
        live_root: Path,
        dbpath: Path,
        repo_dir: Path,
        ignore_dir: Path,
    ) -> None:
        """A reference file without a live copy is logged to stderr, not fatal."""
        (repo_dir / "only-in-repo").write_text("x")
        missing = str(live_root / "only-in-repo")

        result = runner.invoke(app, _args(live_root, dbpath, repo_dir, ignore_dir))

        # Rich wraps long log lines, so compare with whitespace removed
        stderr = "".join(result.stderr.split())
        assert result.exit_code == 0
        assert result.stdout == ""
        assert "IOerrorforoperationon" in stderr
        assert missing in stderr

    def test_malformed_exclusion_rule_fails(
        self, live_root: Path, dbpath: Path, repo_dir: Path, ignore_dir: Path
    ) -> None:
        """A rule that cannot be compiled aborts before any report is written."""
        (ignore_dir / "rules").write_text("/etc/machine-id\n!\n")

        result = runner.invoke(app, _args(live_root, dbpath, repo_dir, ignore_dir))

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "Malformed exclusion pattern" in result.stderr

    def test_missing_database_fails(
        self, live_root: Path, tmp_path: Path, repo_dir: Path, ignore_dir: Path
    ) -> None:
        """An unreadable package database aborts with exit code 1."""
        result = runner.invoke(app, _args(live_root, tmp_path / "nodb", repo_dir, ignore_dir))

        assert result.exit_code == 1
        assert "Failed to open package database" in result.output
        assert "? " not in result.output

    def test_missing_ignore_dir_fails(
        self, live_root: Path, dbpath: Path, repo_dir: Path, tmp_path: Path
    ) -> None:
        """An unreadable exclusion directory aborts with exit code 1."""
        result = runner.invoke(app, _args(live_root, dbpath, repo_dir, tmp_path / "noignore"))

        assert result.exit_code == 1
        assert "Failed to read directory" in result.output

    def test_git_repo_source_failure(
        self, live_root: Path, dbpath: Path, repo_dir: Path, ignore_dir: Path
    ) -> None:
        """An unusable git repo source aborts with exit code 1."""
        args = [*_args(live_root, dbpath, repo_dir, ignore_dir), "--repo-source", "git"]

        with patch("archdiff.audit.repo.command_exists", return_value=False):
            result = runner.invoke(app, args)

        assert result.exit_code == 1
        assert "git is not available" in result.output


class TestAuditConfigFile:
    """Tests for configuration file handling in archdiff audit."""

    def test_reads_config_file(
        self,
        tmp_path: Path,
        live_root: Path,
        dbpath: Path,
        repo_dir: Path,
        ignore_dir: Path,
        write_file: WriteFile,
    ) -> None:
        """Locations can come from the configuration file."""
        write_file("foo.txt", "")
        config = tmp_path / "archdiff.toml"
        config.write_text(
            f'root = "{live_root}"\n'
            f'dbpath = "{dbpath}"\n'
            f'repo = "{repo_dir}"\n'
            f'ignore = "{ignore_dir}"\n'
        )

        result = runner.invoke(app, ["audit", "--config", str(config)])

        assert result.exit_code == 0
        assert result.stdout == f"? {live_root}/foo.txt\n"

    def test_options_override_config_file(
        self,
        tmp_path: Path,
        live_root: Path,
        dbpath: Path,
        repo_dir: Path,
        ignore_dir: Path,
        write_file: WriteFile,
    ) -> None:
        """Command-line options win over the configuration file."""
        write_file("foo.txt", "")
        config = tmp_path / "archdiff.toml"
        config.write_text(f'root = "{tmp_path / "elsewhere"}"\ndbpath = "{dbpath}"\n')

        result = runner.invoke(
            app,
            [
                "audit",
                "--config",
                str(config),
                "--root",
                str(live_root),
                "--repo",
                str(repo_dir),
                "--ignore",
                str(ignore_dir),
            ],
        )

        assert result.exit_code == 0
        assert result.stdout == f"? {live_root}/foo.txt\n"

    def test_missing_explicit_config_fails(self, tmp_path: Path) -> None:
        """A --config file that does not exist is an error."""
        result = runner.invoke(app, ["audit", "--config", str(tmp_path / "absent.toml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_invalid_config_fails(self, tmp_path: Path) -> None:
        """A malformed configuration file is an error."""
        config = tmp_path / "archdiff.toml"
        config.write_text("workers = 0\n")

        result = runner.invoke(app, ["audit", "--config", str(config)])

        assert result.exit_code == 1
        assert "Invalid config content" in result.output


class TestMainApp:
    """Tests for global options."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "archdiff version" in result.stdout

    def test_no_args_shows_help(self) -> None:
        """Running without a command shows usage."""
        result = runner.invoke(app, [])

        assert "Usage" in result.output
