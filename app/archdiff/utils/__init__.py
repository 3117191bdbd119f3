"""Utility modules for archdiff.

This module exports commonly used utility functions.
"""

from archdiff.utils.formatting import (
    configure_logging,
    err_console,
    print_error,
    print_warning,
)
from archdiff.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "configure_logging",
    "err_console",
    "print_error",
    "print_warning",
    "run_command",
]
