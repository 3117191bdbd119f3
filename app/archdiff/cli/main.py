"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from archdiff import __version__
from archdiff.cli.commands import audit, config
from archdiff.utils.formatting import configure_logging

# Create main Typer app
app = typer.Typer(
    name="archdiff",
    help="Audit a pacman-managed filesystem for drift.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"archdiff version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug diagnostics on stderr.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only show errors on stderr.",
        ),
    ] = False,
) -> None:
    """archdiff - report files that drifted from the package database.

    Lists untracked (?), repo-drifted (R), deleted (D) and modified
    backup (B) files, one per line, sorted by path.
    """
    configure_logging(verbose=verbose, quiet=quiet)


# Register commands
app.add_typer(audit.app, name="audit")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
