"""Base operation class for SQLite cache operations.

This module provides shared functionality for all cache operations:
timestamp encoding and row decoding.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from taghash.services.cache_models import GitTag

if TYPE_CHECKING:
    import sqlite3

logger = logging.getLogger(__name__)

GIT_TAG_COLUMNS = "id, repo_id, tag, base_tag, commit_hash, tag_hash, expires_at"


def to_db_timestamp(value: datetime) -> str:
    """Encode a datetime as fixed-width UTC ISO-8601.

    Fixed width (always microseconds, always +00:00) keeps lexicographic
    order equal to chronological order, which the expiry filters rely on.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_db_timestamp(value: str) -> datetime:
    """Decode a timestamp written by ``to_db_timestamp``."""
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def row_to_git_tag(row: tuple) -> GitTag:
    """Build a GitTag from a row selected with ``GIT_TAG_COLUMNS``."""
    row_id, repo_id, tag, base_tag, commit_hash, tag_hash, expires_at = row
    return GitTag(
        repo_id=repo_id,
        tag=tag,
        base_tag=base_tag,
        commit_hash=commit_hash,
        tag_hash=tag_hash,
        expires_at=from_db_timestamp(expires_at),
        id=row_id,
    )


class BaseOperation:
    """Base class for cache operations with shared functionality."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize base operation.

        Args:
            conn: SQLite database connection
        """
        self.conn = conn

    def _validate_connection(self) -> None:
        """Validate database connection is available.

        Raises:
            RuntimeError: If connection is not initialized
        """
        if self.conn is None:
            raise RuntimeError("Database connection not initialized")
