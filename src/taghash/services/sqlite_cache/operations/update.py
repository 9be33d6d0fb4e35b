"""Update operations for the git tag cache.

This module provides delete operations for cache maintenance.
"""

from __future__ import annotations

import logging
from datetime import datetime

from taghash.services.sqlite_cache.operations.base import BaseOperation, to_db_timestamp
from taghash.shared.constants import Cache

logger = logging.getLogger(__name__)


class UpdateOperations(BaseOperation):
    """Delete operations for cache management."""

    def prune(self, as_of: datetime) -> int:
        """Delete entries with ``expires_at < as_of``.

        Returns:
            Number of deleted entries
        """
        self._validate_connection()

        cursor = self.conn.execute(
            f"DELETE FROM {Cache.TABLE_NAME} WHERE expires_at < ?",
            (to_db_timestamp(as_of),),
        )
        pruned_count = cursor.rowcount

        if pruned_count > 0:
            logger.debug("Deleted %d expired cache entries", pruned_count)

        return pruned_count

    def clear(self) -> int:
        """Delete every entry.

        Returns:
            Number of deleted entries
        """
        self._validate_connection()

        cursor = self.conn.execute(f"DELETE FROM {Cache.TABLE_NAME}")
        logger.debug("Cleared all cache entries")
        return cursor.rowcount
