"""Logging configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from taghash.shared.constants import LoggingDefaults

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseModel):
    """Logging configuration.

    This class manages logging behavior including level, optional JSON
    file output and the Rich console handler.
    """

    level: str = Field(default=LoggingDefaults.LEVEL, description="Logging level")
    file: str | None = Field(default=None, description="JSON log file path")
    rich_console: bool = Field(default=True, description="Use Rich for console output")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LEVELS:
            msg = f"invalid log level: {v}"
            raise ValueError(msg)
        return level


__all__ = ["LoggingSettings"]
