"""CLI package for archdiff.

This package contains the Typer application and all subcommands.
"""

from archdiff.cli.main import app

__all__ = ["app"]
