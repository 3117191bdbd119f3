"""Audit command implementation.

Compares the live filesystem with the pacman local database, the
exclusion rules and the reference repo tree, and prints every divergence.
"""

import sys
from pathlib import Path
from typing import Annotated

import typer

from archdiff.audit.engine import Reconciler
from archdiff.audit.repo import RepoError, RepoSource
from archdiff.audit.report import write_report
from archdiff.core.config import ConfigError, load_config
from archdiff.database.local import DatabaseError, LocalDatabase
from archdiff.exclusion.matcher import ExclusionError, load_exclusion_rules
from archdiff.utils.formatting import print_error

app = typer.Typer(
    help="Report files that drifted from the package database.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def audit(
    ctx: typer.Context,
    root: Annotated[
        str | None,
        typer.Option("--root", help="Live filesystem root [default: /]."),
    ] = None,
    dbpath: Annotated[
        str | None,
        typer.Option("--dbpath", help="pacman database directory [default: /var/lib/pacman]."),
    ] = None,
    repo: Annotated[
        str | None,
        typer.Option("--repo", help="Reference repo directory [default: /usr/share/archdiff]."),
    ] = None,
    ignore: Annotated[
        str | None,
        typer.Option("--ignore", help="Exclusion rule directory [default: /etc/archdiff/ignore]."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file to read."),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-j", help="Worker threads for the parallel checks."),
    ] = None,
    repo_source: Annotated[
        RepoSource | None,
        typer.Option(
            "--repo-source",
            help="List reference files by walking the tree or with git ls-files.",
            case_sensitive=False,
        ),
    ] = None,
) -> None:
    """Audit the filesystem and print one line per divergence.

    Each line is a tag, a space and the absolute path, sorted by path:

      ? untracked: not owned by any package
      R repo drift: differs from the reference repo copy
      D deleted: owned by a package but missing
      B backup drift: modified configuration file

    Per-file errors are logged to stderr and do not fail the run.

    Examples:
        archdiff audit
        archdiff audit --root /mnt/ --dbpath /mnt/var/lib/pacman
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        config = load_config(config_path, required=config_path is not None).with_overrides(
            root=root,
            dbpath=dbpath,
            repo=repo,
            ignore=ignore,
            workers=workers,
            repo_source=repo_source,
        )
        matcher = load_exclusion_rules(config.ignore)
        state = LocalDatabase(config.dbpath).load_state()
    except (ConfigError, ExclusionError, DatabaseError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    reconciler = Reconciler(
        config.root,
        config.repo,
        state,
        matcher,
        workers=config.workers,
        repo_source=config.repo_source,
    )

    try:
        records = reconciler.run()
    except RepoError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    write_report(records, reconciler.root, sys.stdout.buffer)
