"""Transaction manager for the git tag cache.

The connection runs in autocommit mode (``isolation_level=None``), so
transactions are opened and closed explicitly here.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import sqlite3

logger = logging.getLogger(__name__)


class TransactionManager:
    """Transaction management for cache operations."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize transaction manager.

        Args:
            conn: SQLite database connection in autocommit mode
        """
        self.conn = conn

    def begin(self, *, read_only: bool = False) -> None:
        """Begin a transaction.

        Write transactions take the RESERVED lock up front (BEGIN IMMEDIATE)
        so two writers never deadlock on lock upgrade.
        """
        self.conn.execute("BEGIN" if read_only else "BEGIN IMMEDIATE")

    def commit(self) -> None:
        """Commit the current transaction."""
        self.conn.execute("COMMIT")

    def rollback(self) -> None:
        """Rollback the current transaction."""
        if self.conn.in_transaction:
            self.conn.execute("ROLLBACK")

    @contextmanager
    def transaction(self, *, read_only: bool = False) -> Generator[None, None, None]:
        """Context manager for transactions.

        Automatically commits on success or rolls back on exception.
        Read-only transactions additionally switch the connection to
        ``query_only`` so an accidental write fails instead of taking
        the write lock.

        Example:
            >>> with transaction_manager.transaction():
            ...     insert_ops.upsert(entry1)
            ...     insert_ops.upsert(entry2)
        """
        if read_only:
            self.conn.execute("PRAGMA query_only = ON")
        try:
            self.begin(read_only=read_only)
            try:
                yield
                self.commit()
            except BaseException:
                self.rollback()
                raise
        finally:
            if read_only:
                self.conn.execute("PRAGMA query_only = OFF")
