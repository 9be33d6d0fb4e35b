"""
CLI Error Handling Utilities

This module maps exceptions raised by CLI commands onto exit codes,
logs them with structured context and prints a one-line message on
stderr.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from taghash.shared.constants import CLIDefaults
from taghash.shared.errors import (
    CliError,
    InvalidInputError,
    OperationCancelledError,
    TagHashError,
    create_cli_error,
)

logger = logging.getLogger(__name__)


def handle_cli_error(error: BaseException, command: str) -> int:
    """Handle CLI errors with consistent formatting and logging.

    Args:
        error: The exception that occurred
        command: The CLI command being executed

    Returns:
        Exit code for the CLI command
    """
    error_context: dict[str, Any] = {
        "command": command,
        "error_type": type(error).__name__,
    }
    cli_error = _map_error_to_cli_error(error, command, error_context)
    _log_error(error, command, cli_error, error_context)
    sys.stderr.write(f"Error: {cli_error.message}\n")

    return cli_error.exit_code


def _map_error_to_cli_error(
    error: BaseException,
    command: str,
    error_context: dict[str, Any],
) -> CliError:
    """Map specific exception types to CLI errors."""
    if isinstance(error, CliError):
        error_context["error_code"] = error.code.value
        return error

    if isinstance(error, InvalidInputError):
        error_context["error_code"] = error.code.value
        return create_cli_error(
            message=error.message,
            command=command,
            original_error=error,
            exit_code=CLIDefaults.EXIT_INVALID_INPUT,
        )

    if isinstance(error, OperationCancelledError):
        error_context["error_code"] = error.code.value
        return create_cli_error(
            message=error.message,
            command=command,
            original_error=error,
        )

    if isinstance(error, TagHashError):
        error_context["error_code"] = error.code.value
        error_context.update(error.context.safe_dict())
        return create_cli_error(
            message=error.message,
            command=command,
            original_error=error,
        )

    if isinstance(error, KeyboardInterrupt):
        error_context["interrupt_type"] = "user_interrupt"
        return create_cli_error(
            message="Command interrupted by user",
            command=command,
            exit_code=130,
        )

    error_context["error_category"] = "unexpected"
    return create_cli_error(
        message=f"Unexpected error: {error}",
        command=command,
        original_error=error if isinstance(error, Exception) else None,
    )


def _log_error(
    error: BaseException,
    command: str,
    cli_error: CliError,
    error_context: dict[str, Any],
) -> None:
    """Log the error with structured context."""
    if isinstance(error, (KeyboardInterrupt, OperationCancelledError)):
        logger.warning(
            "Command interrupted: %s",
            cli_error.message,
            extra={"context": error_context},
        )
    elif isinstance(error, TagHashError):
        logger.error(
            "CLI error in %s: %s",
            command,
            cli_error.message,
            extra={"context": error_context, "error_code": error.code.name},
        )
    else:
        logger.error(
            "CLI error in %s: %s",
            command,
            cli_error.message,
            extra={"context": error_context},
            exc_info=error,
        )
