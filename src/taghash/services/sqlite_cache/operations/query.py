"""Query operations for the git tag cache.

Every query filters on ``expires_at >= as_of``: an expired row is
treated exactly like a missing row, even before it is pruned.
"""

from __future__ import annotations

import logging
from datetime import datetime

from taghash.services.cache_models import GitTag
from taghash.services.sqlite_cache.operations.base import (
    GIT_TAG_COLUMNS,
    BaseOperation,
    row_to_git_tag,
    to_db_timestamp,
)
from taghash.shared.constants import Cache

logger = logging.getLogger(__name__)


class QueryOperations(BaseOperation):
    """Query operations for cache retrieval."""

    def get_by_tag(self, repo_id: str, tag: str, as_of: datetime) -> GitTag | None:
        """Retrieve the live entry for (repo_id, tag).

        Args:
            repo_id: Repository ID ("owner/name")
            tag: Tag name
            as_of: Freshness threshold

        Returns:
            The entry, or None if absent or expired
        """
        self._validate_connection()

        sql = f"""
        SELECT {GIT_TAG_COLUMNS}
        FROM {Cache.TABLE_NAME}
        WHERE repo_id = ? AND tag = ? AND expires_at >= ?
        ORDER BY id DESC
        LIMIT 1
        """
        row = self.conn.execute(sql, (repo_id, tag, to_db_timestamp(as_of))).fetchone()

        if row is None:
            logger.debug("Cache miss: repo=%s, tag=%s", repo_id, tag)
            return None

        logger.debug("Cache hit: repo=%s, tag=%s", repo_id, tag)
        return row_to_git_tag(row)

    def find_by_hash(self, repo_id: str, hash_value: str, as_of: datetime) -> list[GitTag]:
        """Retrieve all live entries whose commit or tag hash equals ``hash_value``.

        Returns:
            Matching entries ordered by tag name; empty when nothing matches
        """
        self._validate_connection()

        sql = f"""
        SELECT {GIT_TAG_COLUMNS}
        FROM {Cache.TABLE_NAME}
        WHERE repo_id = ?
          AND (commit_hash = ? OR tag_hash = ?)
          AND expires_at >= ?
        ORDER BY tag
        """
        rows = self.conn.execute(
            sql, (repo_id, hash_value, hash_value, to_db_timestamp(as_of))
        ).fetchall()

        logger.debug(
            "Cache %s: repo=%s, hash=%s, rows=%d",
            "hit" if rows else "miss",
            repo_id,
            hash_value,
            len(rows),
        )
        return [row_to_git_tag(row) for row in rows]

    def count(self, as_of: datetime) -> tuple[int, int]:
        """Return (total rows, live rows as of ``as_of``)."""
        self._validate_connection()

        total = self.conn.execute(f"SELECT COUNT(*) FROM {Cache.TABLE_NAME}").fetchone()[0]
        valid = self.conn.execute(
            f"SELECT COUNT(*) FROM {Cache.TABLE_NAME} WHERE expires_at >= ?",
            (to_db_timestamp(as_of),),
        ).fetchone()[0]
        return total, valid
