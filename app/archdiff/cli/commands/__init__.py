"""CLI commands for archdiff.

This package contains all subcommand implementations.
"""

from archdiff.cli.commands import audit, config

__all__ = ["audit", "config"]
