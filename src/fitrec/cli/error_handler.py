"""
CLI Error Handling Utilities

Maps exceptions raised by commands to exit codes and prints them either as
a plain message on stderr or as a JSON envelope on stdout.
"""

from __future__ import annotations

import logging
import sys

import typer

from fitrec.cli.json_formatter import format_json_output
from fitrec.shared.errors import (
    AllCategoriesFailedError,
    ApplicationError,
    DomainError,
    ErrorCode,
    FitrecError,
)

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_ALL_FAILED = 3


def exit_code_for(error: Exception) -> int:
    """Exit code of an exception raised by a command."""
    if isinstance(error, AllCategoriesFailedError):
        return EXIT_ALL_FAILED
    if isinstance(error, (DomainError, ApplicationError)) and error.code in (
        ErrorCode.VALIDATION_ERROR,
        ErrorCode.MISSING_CONFIG,
        ErrorCode.INVALID_CONFIG,
    ):
        return EXIT_USAGE
    return EXIT_FAILURE


def handle_cli_error(error: Exception, command: str, *, json_output: bool = False) -> int:
    """Log and print ``error``; returns the exit code to use."""
    exit_code = exit_code_for(error)
    if isinstance(error, FitrecError):
        code = error.code.value
        message = error.message
    else:
        code = ErrorCode.CLI_UNEXPECTED_ERROR.value
        message = f"Unexpected error: {error}"

    logger.debug(
        "CLI error in %s: %s",
        command,
        message,
        extra={"context": {"command": command, "error_type": type(error).__name__}},
    )

    if json_output:
        data: dict[str, object] = {
            "error_code": code,
            "error_type": type(error).__name__,
            "exit_code": exit_code,
        }
        if isinstance(error, AllCategoriesFailedError):
            data["category_errors"] = error.category_errors
        output = format_json_output(
            success=False,
            command=command,
            errors=[message],
            data=data,
        )
        typer.echo(output.decode("utf-8"))
    else:
        sys.stderr.write(f"Error: {message}\n")
        if isinstance(error, AllCategoriesFailedError):
            for category, reason in sorted(error.category_errors.items()):
                sys.stderr.write(f"  {category}: {reason}\n")

    return exit_code


__all__ = [
    "EXIT_ALL_FAILED",
    "EXIT_FAILURE",
    "EXIT_USAGE",
    "exit_code_for",
    "handle_cli_error",
]
