"""Utility modules for kernrepo.

This module exports commonly used utility functions.
"""

from kernrepo.utils.formatting import (
    console,
    err_console,
    format_age,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_logging,
)
from kernrepo.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "format_age",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "setup_logging",
]
