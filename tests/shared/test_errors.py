"""Tests for the taghash error hierarchy and factories."""

from __future__ import annotations

from pathlib import Path

import pytest

from taghash.shared.errors import (
    CliError,
    ConfigurationError,
    DomainError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    InvalidInputError,
    StorageError,
    TagHashError,
    TransportError,
    create_cli_error,
    create_config_error,
    create_invalid_hash_error,
    create_invalid_tag_error,
    create_storage_error,
)


class TestErrorContext:
    def test_path_and_enum_values_are_coerced(self) -> None:
        ctx = ErrorContext(
            operation="op",
            additional_data={"path": Path("/tmp/x"), "code": ErrorCode.CACHE_ERROR, "n": 3},
        )

        assert ctx.additional_data == {"path": "/tmp/x", "code": "CACHE_ERROR", "n": 3}

    def test_non_primitive_values_are_rejected(self) -> None:
        with pytest.raises(TypeError):
            ErrorContext(additional_data={"bad": object()})

    def test_safe_dict_always_has_additional_data(self) -> None:
        data = ErrorContext(operation="lookup", repository="actions/checkout").safe_dict()

        assert data == {
            "operation": "lookup",
            "repository": "actions/checkout",
            "additional_data": {},
        }


class TestTagHashError:
    def test_str_and_to_dict(self) -> None:
        cause = ValueError("boom")
        error = TransportError(
            ErrorCode.API_REQUEST_FAILED,
            "request failed",
            ErrorContext(operation="fetch_all_tags"),
            cause,
        )

        assert str(error) == "API_REQUEST_FAILED: request failed"
        assert error.to_dict()["original_error"] == "boom"
        assert error.to_dict()["context"]["operation"] == "fetch_all_tags"

    def test_hierarchy(self) -> None:
        assert issubclass(InvalidInputError, DomainError)
        assert issubclass(StorageError, InfrastructureError)
        assert issubclass(TransportError, InfrastructureError)
        assert issubclass(DomainError, TagHashError)


class TestFactories:
    def test_invalid_tag_error(self) -> None:
        error = create_invalid_tag_error("", "actions/checkout")

        assert isinstance(error, InvalidInputError)
        assert error.code == ErrorCode.INVALID_TAG
        assert error.message == "require a tag"
        assert error.context.phase == "validation"

    def test_invalid_hash_error(self) -> None:
        error = create_invalid_hash_error("abc", "actions/checkout")

        assert error.code == ErrorCode.INVALID_HASH
        assert error.message == "invalid SHA: abc"
        assert error.context.additional_data == {"hash": "abc"}

    def test_storage_error(self) -> None:
        error = create_storage_error(
            "disk full", "upsert", code=ErrorCode.CACHE_WRITE_FAILED, repository="cli/cli"
        )

        assert isinstance(error, StorageError)
        assert error.code == ErrorCode.CACHE_WRITE_FAILED
        assert error.context.repository == "cli/cli"

    def test_config_error(self) -> None:
        error = create_config_error("bad ttl", config_key="cache.ttl")

        assert isinstance(error, ConfigurationError)
        assert error.context.additional_data == {"config_key": "cache.ttl"}

    def test_cli_error_carries_exit_code(self) -> None:
        error = create_cli_error("bad input", command="resolve", exit_code=2)

        assert isinstance(error, CliError)
        assert error.exit_code == 2
        assert error.command == "resolve"

    def test_cli_error_defaults_to_exit_1(self) -> None:
        assert create_cli_error("boom", command="cache info").exit_code == 1
