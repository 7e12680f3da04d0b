"""CLI error handling for labdata-cli.

This module wraps labdata_synthetic exceptions into user-friendly
messages with appropriate exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from labdata_cli.output import error

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

    from labdata_synthetic.errors import LabDataError


# Exit codes following sysexits.h convention
EXIT_USER_ERROR = 1  # User error (configuration, generation failure)
EXIT_SYSTEM_ERROR = 2  # System error (sink write failure)
EXIT_CANCELLED = 130  # Interrupted (SIGINT)


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - customers: Input should be greater than or equal to 0"
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        msg = e["msg"]
        lines.append(f"  - {loc}: {msg}" if loc else f"  - {msg}")

    return "\n".join(lines)


def exit_code_for(err: LabDataError) -> int:
    """Map a labdata error to the CLI exit code.

    Sink failures are system errors; cancellation uses the SIGINT code;
    everything else (bad catalogs, missing dependencies, invariant
    violations, configuration) is a user error.
    """
    from labdata_synthetic.errors import GenerationCancelled, SinkWriteFailure

    if isinstance(err, SinkWriteFailure):
        return EXIT_SYSTEM_ERROR
    if isinstance(err, GenerationCancelled):
        return EXIT_CANCELLED
    return EXIT_USER_ERROR


def handle_labdata_error(err: LabDataError) -> NoReturn:
    """Re-raise a labdata error as a CLIError.

    Raises:
        CLIError: Always, with the error's user message and exit code.
    """
    raise CLIError(err.user_message, exit_code=exit_code_for(err)) from err


def handle_validation_error(err: PydanticValidationError, source: str) -> NoReturn:
    """Handle Pydantic validation errors with user-friendly messages.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    formatted = format_pydantic_error(err)
    raise CLIError(f"Invalid configuration from {source}:\n{formatted}")
