"""Cache configuration model.

This module contains the cache configuration model for the tag cache
database location, its base TTL and SQLite locking behavior.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from taghash.services.ttl_policy import parse_duration
from taghash.shared.constants import Cache
from taghash.shared.errors import ConfigurationError


class CacheSettings(BaseModel):
    """Cache configuration.

    ``ttl`` is the base tag TTL in Go duration syntax; the git file,
    alias tag and query lifetimes are derived from it.
    """

    dir: str = Field(
        default="",
        description="Base cache directory (empty: platform user cache directory)",
    )
    ttl: str = Field(
        default=Cache.DEFAULT_TTL,
        description="Base cache TTL, e.g. 48h or 1h30m",
    )
    dir_perm: int = Field(
        default=Cache.DEFAULT_DIR_PERM,
        ge=0,
        le=0o777,
        description="Permission bits for a newly created cache directory",
    )
    busy_timeout_seconds: float = Field(
        default=Cache.DEFAULT_BUSY_TIMEOUT_SECONDS,
        ge=0,
        description="Seconds to wait for a SQLite lock held by another process",
    )

    @field_validator("ttl")
    @classmethod
    def validate_ttl(cls, v: str) -> str:
        try:
            parse_duration(v)
        except ConfigurationError as e:
            raise ValueError(e.message) from e
        return v.strip()


__all__ = ["CacheSettings"]
