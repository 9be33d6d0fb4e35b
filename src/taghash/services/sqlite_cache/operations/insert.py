"""Insert operations for the git tag cache.

This module provides the update-else-insert write used by both the bulk
refresh and the git fallback path.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from taghash.services.cache_models import GitTag
from taghash.services.sqlite_cache.operations.base import BaseOperation, to_db_timestamp
from taghash.shared.constants import Cache

logger = logging.getLogger(__name__)


class InsertOperations(BaseOperation):
    """Insert operations for cache storage."""

    def upsert(self, entry: GitTag, now: datetime | None = None) -> None:
        """Update the row matching the entry's tag and hashes, else insert it.

        The match key is (repo_id, tag, commit_hash, tag_hash). When no row
        matches, any stale row for (repo_id, tag) belongs to a re-pointed
        tag and is replaced, so (repo_id, tag) stays unique.

        Must run inside a write transaction.

        Args:
            entry: Validated cache entry
            now: Timestamp recorded as created_at/updated_at
        """
        self._validate_connection()

        stamp = to_db_timestamp(now or datetime.now(timezone.utc))
        expires_at = to_db_timestamp(entry.expires_at)

        update_sql = f"""
        UPDATE {Cache.TABLE_NAME}
        SET base_tag = ?, expires_at = ?, updated_at = ?
        WHERE repo_id = ? AND tag = ? AND commit_hash = ? AND tag_hash = ?
        """
        cursor = self.conn.execute(
            update_sql,
            (
                entry.base_tag,
                expires_at,
                stamp,
                entry.repo_id,
                entry.tag,
                entry.commit_hash,
                entry.tag_hash,
            ),
        )
        if cursor.rowcount > 0:
            logger.debug("Cache updated: %s, expires_at=%s", entry, expires_at)
            return

        replaced = self.conn.execute(
            f"DELETE FROM {Cache.TABLE_NAME} WHERE repo_id = ? AND tag = ?",
            (entry.repo_id, entry.tag),
        ).rowcount
        if replaced:
            logger.debug("Replaced %d re-pointed row(s) for %s", replaced, entry.tag)

        insert_sql = f"""
        INSERT INTO {Cache.TABLE_NAME} (
            repo_id, tag, base_tag, commit_hash, tag_hash,
            created_at, updated_at, expires_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """
        cursor = self.conn.execute(
            insert_sql,
            (
                entry.repo_id,
                entry.tag,
                entry.base_tag,
                entry.commit_hash,
                entry.tag_hash,
                stamp,
                stamp,
                expires_at,
            ),
        )
        entry.id = cursor.lastrowid

        logger.debug("Cache inserted: %s, expires_at=%s", entry, expires_at)
