"""
구조적 로깅 시스템 for taghash.

이 모듈은 리졸버 작업의 시작/성공/실패를 컨텍스트 정보와 함께
구조화된 로그로 기록하는 헬퍼 함수들을 제공합니다.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from taghash.shared.constants import LoggingDefaults
from taghash.shared.errors import ErrorContext, TagHashError


class StructuredFormatter(logging.Formatter):
    """
    JSON 형태로 구조화된 로그를 출력하는 포맷터.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        로그 레코드를 JSON 형태로 포맷팅합니다.

        Args:
            record: 로깅 레코드

        Returns:
            JSON 형태로 포맷팅된 로그 문자열
        """
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created,
                tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in ("error_code", "context", "operation", "duration_ms", "result_info"):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def _create_rich_console() -> Console:
    """
    Rich Console을 생성합니다 (커스텀 테마 포함, stderr 출력).

    stdout은 리졸브 결과 출력 전용이므로 로그는 항상 stderr로 보냅니다.
    """
    custom_theme = Theme(
        {
            "logging.level.debug": "cyan",
            "logging.level.info": "green",
            "logging.level.warning": "yellow",
            "logging.level.error": "red bold",
            "logging.level.critical": "red bold reverse",
            "log.time": "dim cyan",
            "log.message": "white",
            "log.path": "dim blue",
        }
    )
    return Console(theme=custom_theme, stderr=True)


def setup_structured_logger(
    name: str = LoggingDefaults.ROOT_LOGGER,
    level: str = LoggingDefaults.LEVEL,
    log_file: str | None = None,
    *,
    use_rich_console: bool = True,
) -> logging.Logger:
    """
    구조화된 로깅을 위한 로거를 설정합니다.

    Args:
        name: 로거 이름 (기본값: "taghash")
        level: 로그 레벨 (기본값: "INFO")
        log_file: 로그 파일 경로 (선택사항, 항상 JSON 형식)
        use_rich_console: Rich 기반 콘솔 출력 사용 여부

    Returns:
        설정된 로거 인스턴스
    """
    logger = logging.getLogger(name)

    # 이미 핸들러가 설정되어 있으면 제거 (중복 방지)
    if logger.handlers:
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    if use_rich_console:
        handler: logging.Handler = RichHandler(
            console=_create_rich_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            log_time_format="[%H:%M:%S]",
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredFormatter())
    handler.setLevel(log_level)
    logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    # 부모 로거로의 전파 방지 (중복 로그 방지)
    logger.propagate = False

    return logger


def _context_to_dict(context: dict[str, Any] | ErrorContext | None) -> dict[str, Any]:
    if context is None:
        return {}
    if isinstance(context, ErrorContext):
        return context.safe_dict()
    return dict(context)


def log_operation_error(
    logger: logging.Logger,
    error: TagHashError,
    operation: str | None = None,
    additional_context: dict[str, Any] | ErrorContext | None = None,
    level: int = logging.ERROR,
) -> None:
    """
    TagHashError 객체를 받아 구조화된 에러 로그를 기록합니다.

    Args:
        logger: 로거 인스턴스
        error: TagHashError 객체
        operation: 작업 이름 (선택사항)
        additional_context: 추가 컨텍스트 정보 (선택사항)
        level: 로그 레벨 (기본값 ERROR, 상위 계층이 다시 기록하는 에러는 DEBUG)
    """
    context_dict = error.context.safe_dict()
    context_dict.update(_context_to_dict(additional_context))

    logger.log(
        level,
        error.message,
        extra={
            "error_code": error.code.name,
            "context": context_dict,
            "operation": operation or error.context.operation,
        },
        exc_info=error.original_error is not None,
    )


def log_operation_success(
    logger: logging.Logger,
    operation: str,
    duration_ms: float,
    result_info: dict[str, Any] | None = None,
    context: dict[str, Any] | ErrorContext | None = None,
) -> None:
    """
    성공적인 작업에 대한 디버그 로그를 기록합니다.

    Args:
        logger: 로거 인스턴스
        operation: 작업 이름
        duration_ms: 소요 시간 (밀리초)
        result_info: 결과 정보 (선택사항)
        context: 컨텍스트 정보 (선택사항)
    """
    logger.debug(
        "Operation '%s' completed successfully",
        operation,
        extra={
            "operation": operation,
            "duration_ms": duration_ms,
            "result_info": result_info or {},
            "context": _context_to_dict(context),
        },
    )


def log_operation_start(
    logger: logging.Logger,
    operation: str,
    context: dict[str, Any] | None = None,
) -> None:
    """
    작업 시작 시점 로그를 기록합니다.

    Args:
        logger: 로거 인스턴스
        operation: 작업 이름
        context: 컨텍스트 정보 (선택사항)
    """
    logger.debug(
        "Starting operation '%s'",
        operation,
        extra={
            "operation": operation,
            "context": context or {},
        },
    )
