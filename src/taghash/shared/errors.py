"""taghash Error Handling Module

This module defines the error handling system for taghash, providing
structured error classes with context information.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides repository/operation information
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Union

from taghash.shared.constants import CLIDefaults, ResolverPhase

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Error codes for taghash.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # Input validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_TAG = "INVALID_TAG"
    INVALID_HASH = "INVALID_HASH"
    INVALID_REPOSITORY = "INVALID_REPOSITORY"

    # Remote query transport
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    API_AUTHENTICATION_FAILED = "API_AUTHENTICATION_FAILED"
    API_INVALID_RESPONSE = "API_INVALID_RESPONSE"

    # Local git introspection
    GIT_COMMAND_FAILED = "GIT_COMMAND_FAILED"
    GIT_NOT_FOUND = "GIT_NOT_FOUND"
    GIT_INVALID_OUTPUT = "GIT_INVALID_OUTPUT"

    # Cache storage
    CACHE_ERROR = "CACHE_ERROR"
    CACHE_READ_FAILED = "CACHE_READ_FAILED"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"
    DIRECTORY_CREATION_FAILED = "DIRECTORY_CREATION_FAILED"

    # Configuration
    CONFIG_ERROR = "CONFIG_ERROR"

    # Cancellation
    OPERATION_CANCELLED = "OPERATION_CANCELLED"
    OPERATION_TIMEOUT = "OPERATION_TIMEOUT"

    # CLI
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types are allowed in additional_data so that the
    context can be serialized into log records as-is.

    Attributes:
        operation: Operation name that caused the error
        repository: Repository ID ("owner/name") being resolved
        phase: Resolver phase (lookup, bulk_refresh, git_fallback, ...)
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    repository: str | None = None
    phase: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            object.__setattr__(
                self, "additional_data", _coerce_primitives(self.additional_data)
            )

    def safe_dict(self) -> dict[str, Any]:
        """Export context as dict; additional_data is always present."""
        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation
        if self.repository is not None:
            data["repository"] = self.repository
        if self.phase is not None:
            data["phase"] = self.phase
        data["additional_data"] = dict(self.additional_data or {})
        return data


class TagHashError(Exception):
    """Base exception class for all taghash errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize TagHashError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(TagHashError):
    """Domain rule violations (bad tags, bad hashes, bad entries)."""


class InfrastructureError(TagHashError):
    """Errors raised while talking to GitHub, git or the cache database."""


class ApplicationError(TagHashError):
    """Application-level errors such as configuration problems."""


class InvalidInputError(DomainError):
    """Rejected input: empty tag, malformed hash or invalid entry.

    Always raised before any network, subprocess or database I/O.
    """


class TransportError(InfrastructureError):
    """Remote bulk tag query failed (HTTP, GraphQL or payload shape)."""


class IntrospectionError(InfrastructureError):
    """Local git operation failed or produced unusable output."""


class StorageError(InfrastructureError):
    """Cache database transaction failed.

    The store is left in its last committed state.
    """


class ConfigurationError(ApplicationError):
    """Invalid configuration value (duration string, settings file...)."""


class OperationCancelledError(TagHashError):
    """The caller cancelled the operation context."""


class OperationTimeoutError(OperationCancelledError):
    """The operation context deadline passed."""


class CliError(ApplicationError):
    """CLI-specific error carrying the exit code."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        command: str | None = None,
        exit_code: int = CLIDefaults.EXIT_ERROR,
    ):
        super().__init__(code, message, context, original_error)
        self.command = command
        self.exit_code = exit_code


# Convenience functions for common error scenarios
def create_invalid_tag_error(tag: str, repository: str | None = None) -> InvalidInputError:
    """Create an error for an empty or blank tag."""
    return InvalidInputError(
        ErrorCode.INVALID_TAG,
        "require a tag",
        ErrorContext(
            operation="resolve_tag",
            repository=repository,
            phase=ResolverPhase.VALIDATION,
            additional_data={"tag": tag},
        ),
    )


def create_invalid_hash_error(value: str, repository: str | None = None) -> InvalidInputError:
    """Create an error for a value that is not a 40-hex-character SHA."""
    return InvalidInputError(
        ErrorCode.INVALID_HASH,
        f"invalid SHA: {value}",
        ErrorContext(
            operation="resolve_hash",
            repository=repository,
            phase=ResolverPhase.VALIDATION,
            additional_data={"hash": value},
        ),
    )


def create_storage_error(
    message: str,
    operation: str,
    code: ErrorCode = ErrorCode.CACHE_ERROR,
    repository: str | None = None,
    additional_data: dict[str, PrimitiveContextValue] | None = None,
    original_error: Exception | None = None,
    phase: str = ResolverPhase.STORE,
) -> StorageError:
    """Create a cache storage error with context."""
    return StorageError(
        code,
        message,
        ErrorContext(
            operation=operation,
            repository=repository,
            phase=phase,
            additional_data=additional_data,
        ),
        original_error,
    )


def create_config_error(
    message: str,
    config_key: str | None = None,
    original_error: Exception | None = None,
) -> ConfigurationError:
    """Create a configuration error with context."""
    return ConfigurationError(
        ErrorCode.CONFIG_ERROR,
        message,
        ErrorContext(
            operation="load_config",
            additional_data={"config_key": config_key} if config_key else None,
        ),
        original_error,
    )


def create_cli_error(
    message: str,
    command: str | None = None,
    original_error: Exception | None = None,
    exit_code: int = CLIDefaults.EXIT_ERROR,
) -> CliError:
    """Create a CLI error with context."""
    return CliError(
        ErrorCode.CLI_UNEXPECTED_ERROR,
        message,
        ErrorContext(
            operation="cli",
            additional_data={"command": command} if command else None,
        ),
        original_error,
        command,
        exit_code,
    )
