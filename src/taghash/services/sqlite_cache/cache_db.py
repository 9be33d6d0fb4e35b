"""SQLite git tag cache database facade.

This module ties the migration, transaction and operation classes
together behind the store interface the resolver depends on.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from taghash.services.cache_models import GitTag
from taghash.services.sqlite_cache.migration.manager import MigrationManager
from taghash.services.sqlite_cache.operations.insert import InsertOperations
from taghash.services.sqlite_cache.operations.query import QueryOperations
from taghash.services.sqlite_cache.operations.update import UpdateOperations
from taghash.services.sqlite_cache.transaction.manager import TransactionManager
from taghash.shared.constants import Cache, ResolverPhase
from taghash.shared.errors import (
    ErrorCode,
    PrimitiveContextValue,
    create_storage_error,
)
from taghash.shared.logging import log_operation_error, log_operation_success
from taghash.utils.paths import set_secure_file_permissions

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GitTagCacheDB:
    """SQLite-backed tag/hash cache with TTL-based expiration.

    Rows are keyed by (repo_id, tag) and indexed by both hashes. The
    connection runs in WAL mode so readers in other processes are not
    blocked by a bulk refresh.

    Attributes:
        db_path: Path to SQLite database file
        conn: SQLite database connection

    Example:
        >>> cache = GitTagCacheDB(Path("cache.sqlite3"))
        >>> cache.upsert(entry)
        >>> cache.lookup_by_tag("actions/checkout", "v1.1.0", datetime.now(timezone.utc))
        >>> cache.close()
    """

    def __init__(
        self,
        db_path: Path | str,
        busy_timeout: float = Cache.DEFAULT_BUSY_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the cache database.

        Args:
            db_path: Path to SQLite database file
            busy_timeout: Seconds to wait for a lock held by another process

        Raises:
            StorageError: If database initialization fails
        """
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self.conn: sqlite3.Connection | None = None
        self._initialize_db()

    @classmethod
    def from_cache_dir(
        cls,
        cache_dir: Path | str,
        busy_timeout: float = Cache.DEFAULT_BUSY_TIMEOUT_SECONDS,
    ) -> GitTagCacheDB:
        """Open ``<cache_dir>/cache.sqlite3``."""
        return cls(Path(cache_dir) / Cache.DB_FILE_NAME, busy_timeout=busy_timeout)

    def _initialize_db(self) -> None:
        """Initialize database with WAL mode and schema.

        Raises:
            StorageError: If database connection or schema creation fails
        """
        start = time.perf_counter()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            db_is_new = not self.db_path.exists()

            self.conn = sqlite3.connect(
                str(self.db_path),
                timeout=self.busy_timeout,
                check_same_thread=False,
                isolation_level=None,  # explicit transactions only
            )

            if db_is_new:
                try:
                    set_secure_file_permissions(self.db_path)
                except OSError as e:
                    logger.warning(
                        "Failed to set secure permissions for DB file %s: %s",
                        self.db_path,
                        e,
                    )

            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA synchronous=NORMAL")

            MigrationManager(self.conn).create_tables()

            self._transactions = TransactionManager(self.conn)
            self._query_ops = QueryOperations(self.conn)
            self._insert_ops = InsertOperations(self.conn)
            self._update_ops = UpdateOperations(self.conn)

        except (sqlite3.Error, OSError) as e:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
            error = create_storage_error(
                f"failed to open the cache database: {e!s}",
                operation="initialize_db",
                additional_data={"db_path": str(self.db_path)},
                original_error=e,
            )
            log_operation_error(logger, error, level=logging.DEBUG)
            raise error from e

        log_operation_success(
            logger=logger,
            operation="initialize_db",
            duration_ms=(time.perf_counter() - start) * 1000,
            context={"db_path": str(self.db_path)},
        )

    @contextmanager
    def _storage_errors(
        self,
        operation: str,
        code: ErrorCode,
        repository: str | None = None,
        additional_data: dict[str, PrimitiveContextValue] | None = None,
        phase: str = ResolverPhase.STORE,
    ) -> Iterator[None]:
        """Translate sqlite3 errors raised inside the block into StorageError."""
        if self.conn is None:
            raise create_storage_error(
                "cache database is closed",
                operation=operation,
                code=code,
                repository=repository,
                additional_data=additional_data,
                phase=phase,
            )
        try:
            yield
        except sqlite3.Error as e:
            error = create_storage_error(
                f"{operation} failed: {e!s}",
                operation=operation,
                code=code,
                repository=repository,
                additional_data=additional_data,
                phase=phase,
                original_error=e,
            )
            log_operation_error(logger, error, level=logging.DEBUG)
            raise error from e

    def _read(
        self,
        operation: str,
        func: Callable[[], T],
        repository: str,
        additional_data: dict[str, PrimitiveContextValue],
    ) -> T:
        with self._storage_errors(
            operation,
            ErrorCode.CACHE_READ_FAILED,
            repository,
            additional_data,
            ResolverPhase.LOOKUP,
        ):
            with self._transactions.transaction(read_only=True):
                return func()

    def upsert(self, entry: GitTag, now: datetime | None = None) -> None:
        """Store one entry in its own transaction.

        Raises:
            StorageError: If the write fails (nothing is committed)
        """
        self.upsert_many([entry], now=now)

    def upsert_many(self, entries: Iterable[GitTag], now: datetime | None = None) -> int:
        """Store several entries atomically.

        Either every entry is written or, on failure, none is.

        Returns:
            Number of entries written

        Raises:
            StorageError: If the write fails (nothing is committed)
        """
        batch = list(entries)
        if not batch:
            return 0

        stamp = now or datetime.now(timezone.utc)
        repository = batch[0].repo_id
        with self._storage_errors(
            "upsert",
            ErrorCode.CACHE_WRITE_FAILED,
            repository,
            {"count": len(batch), "first_tag": batch[0].tag},
        ):
            with self._transactions.transaction():
                for entry in batch:
                    self._insert_ops.upsert(entry, stamp)

        logger.debug("Upserted %d entries for %s", len(batch), repository)
        return len(batch)

    def lookup_by_tag(self, repo_id: str, tag: str, as_of: datetime) -> GitTag | None:
        """Return the live entry for (repo_id, tag), or None.

        Raises:
            StorageError: If the read fails
        """
        return self._read(
            "lookup_by_tag",
            lambda: self._query_ops.get_by_tag(repo_id, tag, as_of),
            repo_id,
            {"tag": tag},
        )

    def lookup_by_hash(self, repo_id: str, hash_value: str, as_of: datetime) -> list[GitTag]:
        """Return live entries whose commit or tag hash matches, ordered by tag.

        Raises:
            StorageError: If the read fails
        """
        return self._read(
            "lookup_by_hash",
            lambda: self._query_ops.find_by_hash(repo_id, hash_value, as_of),
            repo_id,
            {"hash": hash_value},
        )

    def prune(self, as_of: datetime) -> int:
        """Delete entries with ``expires_at < as_of``.

        Returns:
            Number of deleted entries

        Raises:
            StorageError: If the delete fails
        """
        with self._storage_errors(
            "prune",
            ErrorCode.CACHE_WRITE_FAILED,
            additional_data={"as_of": as_of.isoformat()},
            phase=ResolverPhase.PRUNE,
        ):
            with self._transactions.transaction():
                count = self._update_ops.prune(as_of)

        if count > 0:
            logger.info("Pruned %d expired cache entries", count)
        return count

    def clear(self) -> int:
        """Delete every entry.

        Returns:
            Number of deleted entries

        Raises:
            StorageError: If the delete fails
        """
        with self._storage_errors("clear", ErrorCode.CACHE_WRITE_FAILED):
            with self._transactions.transaction():
                count = self._update_ops.clear()

        logger.info("Cleared %d cache entries", count)
        return count

    def get_cache_info(self, as_of: datetime | None = None) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with total, valid and expired entry counts
        """
        threshold = as_of or datetime.now(timezone.utc)
        with self._storage_errors("get_cache_info", ErrorCode.CACHE_READ_FAILED):
            with self._transactions.transaction(read_only=True):
                total, valid = self._query_ops.count(threshold)

        return {
            "total_entries": total,
            "valid_entries": valid,
            "expired_entries": total - valid,
            "db_path": str(self.db_path),
        }

    def close(self) -> None:
        """Close database connection."""
        if self.conn is None:
            return
        try:
            self.conn.close()
        except sqlite3.Error as e:
            logger.warning("Error closing cache database: %s", e)
        finally:
            self.conn = None
        logger.debug("Closed cache database: %s", self.db_path)

    def __enter__(self) -> GitTagCacheDB:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


__all__ = ["GitTagCacheDB"]
