"""
구조적 로깅 시스템 테스트.

이 모듈은 src/taghash/shared/logging.py의 구조적 로깅 기능을 테스트합니다.
"""

import json
import logging
from unittest.mock import Mock

from rich.logging import RichHandler

from taghash.shared.errors import ErrorCode, ErrorContext, StorageError
from taghash.shared.logging import (
    StructuredFormatter,
    log_operation_error,
    log_operation_start,
    log_operation_success,
    setup_structured_logger,
)


def _record(msg: str = "Test message", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestStructuredFormatter:
    """StructuredFormatter 테스트."""

    def test_format_basic_log_record(self):
        """기본 로그 레코드 포맷팅 테스트."""
        log_data = json.loads(StructuredFormatter().format(_record()))

        assert log_data["level"] == "INFO"
        assert log_data["logger"] == "test_logger"
        assert log_data["message"] == "Test message"
        assert "timestamp" in log_data

    def test_format_log_record_with_extra_fields(self):
        """추가 필드가 포함된 로그 레코드 포맷팅 테스트."""
        record = _record("Lookup failed", logging.ERROR)
        record.error_code = "CACHE_READ_FAILED"
        record.operation = "lookup_by_tag"
        record.context = {"repository": "actions/checkout"}

        log_data = json.loads(StructuredFormatter().format(record))

        assert log_data["error_code"] == "CACHE_READ_FAILED"
        assert log_data["operation"] == "lookup_by_tag"
        assert log_data["context"] == {"repository": "actions/checkout"}
        assert "duration_ms" not in log_data


class TestSetupStructuredLogger:
    """setup_structured_logger 테스트."""

    def test_rich_console_handler(self):
        """Rich 콘솔 핸들러 설정 테스트."""
        logger = setup_structured_logger(name="taghash.test.rich", level="debug")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.propagate is False

    def test_plain_handler_and_log_file(self, tmp_path):
        """JSON 스트림 핸들러와 파일 핸들러 설정 테스트."""
        log_file = tmp_path / "taghash.log"

        logger = setup_structured_logger(
            name="taghash.test.file",
            level="INFO",
            log_file=str(log_file),
            use_rich_console=False,
        )
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
        assert json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])["message"] == "hello"

        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    def test_repeated_setup_replaces_handlers(self):
        """재설정 시 핸들러 중복 방지 테스트."""
        setup_structured_logger(name="taghash.test.repeat", use_rich_console=False)
        logger = setup_structured_logger(name="taghash.test.repeat", use_rich_console=False)

        assert len(logger.handlers) == 1

    def test_unknown_level_falls_back_to_info(self):
        """알 수 없는 로그 레벨은 INFO로 처리."""
        logger = setup_structured_logger(name="taghash.test.level", level="chatty")

        assert logger.level == logging.INFO


class TestOperationLogging:
    """log_operation_* 헬퍼 테스트."""

    def test_log_operation_error_merges_context(self):
        """에러 컨텍스트와 추가 컨텍스트 병합 테스트."""
        logger = Mock()
        error = StorageError(
            ErrorCode.CACHE_WRITE_FAILED,
            "disk full",
            ErrorContext(operation="upsert", repository="actions/checkout"),
        )

        log_operation_error(logger, error, additional_context={"tag": "v4"})

        logger.log.assert_called_once()
        args, kwargs = logger.log.call_args
        assert args == (logging.ERROR, "disk full")
        assert kwargs["extra"]["error_code"] == "CACHE_WRITE_FAILED"
        assert kwargs["extra"]["operation"] == "upsert"
        assert kwargs["extra"]["context"]["repository"] == "actions/checkout"
        assert kwargs["extra"]["context"]["tag"] == "v4"
        assert kwargs["exc_info"] is False

    def test_log_operation_error_includes_traceback_for_wrapped_errors(self):
        """원본 예외가 있으면 exc_info를 기록."""
        logger = Mock()
        error = StorageError(
            ErrorCode.CACHE_READ_FAILED,
            "locked",
            ErrorContext(operation="lookup_by_tag"),
            RuntimeError("database is locked"),
        )

        log_operation_error(logger, error, operation="resolve_tag")

        _, kwargs = logger.log.call_args
        assert kwargs["extra"]["operation"] == "resolve_tag"
        assert kwargs["exc_info"] is True

    def test_log_operation_error_at_debug_level(self):
        """하위 계층은 DEBUG 레벨로 기록하고 최종 보고는 상위 계층에 맡김."""
        logger = Mock()
        error = StorageError(ErrorCode.CACHE_READ_FAILED, "locked", ErrorContext(operation="lookup"))

        log_operation_error(logger, error, level=logging.DEBUG)

        args, _ = logger.log.call_args
        assert args == (logging.DEBUG, "locked")

    def test_log_operation_success_and_start(self):
        """성공/시작 로그는 DEBUG 레벨로 기록."""
        logger = Mock()

        log_operation_start(logger, "bulk_refresh", {"repository": "cli/cli"})
        log_operation_success(
            logger,
            "bulk_refresh",
            12.5,
            {"tag_count": 3},
            ErrorContext(operation="bulk_refresh"),
        )

        assert logger.debug.call_count == 2
        _, kwargs = logger.debug.call_args
        assert kwargs["extra"]["duration_ms"] == 12.5
        assert kwargs["extra"]["result_info"] == {"tag_count": 3}
        assert kwargs["extra"]["context"]["operation"] == "bulk_refresh"
