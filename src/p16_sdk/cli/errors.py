"""
CLI Error Reporting
===================

Exit codes and error reporting shared by p16asm, p16disasm and p16emu.

Assembler errors already carry "file:line: error:" and are printed as is.
Other P16 errors (a write head moved backwards, an API misuse) get a short
prefix naming the stage that failed.
"""

import logging
import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from p16_sdk.errors import AssemblerError, P16Error


class ExitCode(IntEnum):
    """Process exit codes for the P16 tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Source or image rejected
    INVALID_ARGS = 2     # Bad option value, unreadable input
    INTERNAL_ERROR = 3   # Bug
    RUN_ERROR = 4        # Emulated program faulted or never halted


def setup_logging(verbose: bool) -> None:
    """Configure logging: debug detail with -v, warnings only otherwise."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def classify_error(error: Exception, error_type: str | None = None) -> tuple[str, ExitCode]:
    """
    Map an exception to the message shown to the user and an exit code.

    Args:
        error: The exception to report
        error_type: Stage name used as prefix for non-source errors,
                    e.g. "Assembly"
    """
    if isinstance(error, AssemblerError):
        return str(error), ExitCode.BUILD_ERROR

    if isinstance(error, P16Error):
        prefix = f"{error_type} error" if error_type else "Error"
        return f"{prefix}: {error}", ExitCode.BUILD_ERROR

    if isinstance(error, (click.BadParameter, OSError)):
        return f"Error: {error}", ExitCode.INVALID_ARGS

    return f"Internal error: {error}", ExitCode.INTERNAL_ERROR


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception on stderr and exit.

    The traceback is printed only for internal errors, and only with -v.

    Raises:
        SystemExit: Always
    """
    message, code = classify_error(error, error_type)
    click.echo(message, err=True)
    if code is ExitCode.INTERNAL_ERROR and verbose:
        traceback.print_exc()
    sys.exit(code)
