"""Migration manager for the git tag cache.

This module provides database schema creation and version tracking.
"""

from __future__ import annotations

import logging
import sqlite3

from taghash.shared.constants import Cache

logger = logging.getLogger(__name__)


class MigrationManager:
    """Database schema migration manager."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize migration manager.

        Args:
            conn: SQLite database connection
        """
        self.conn = conn
        self._current_version = self._get_current_version()

    def get_current_version(self) -> int:
        """Get current schema version.

        Returns:
            Current schema version number (0 for an empty database)
        """
        return self._current_version

    def _get_current_version(self) -> int:
        cursor = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
        )
        if cursor.fetchone() is None:
            return 0

        cursor = self.conn.execute("SELECT MAX(version) FROM schema_version")
        row = cursor.fetchone()
        return row[0] if row and row[0] is not None else 0

    def create_tables(self) -> None:
        """Create database schema (v1) if it does not exist yet."""
        if self._current_version >= Cache.SCHEMA_VERSION:
            logger.debug("Schema already at version %d", self._current_version)
            return

        schema_sql = f"""
        CREATE TABLE IF NOT EXISTS {Cache.TABLE_NAME} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,

            -- Logical key: (repo_id, tag)
            repo_id TEXT NOT NULL,
            tag TEXT NOT NULL,
            base_tag TEXT NOT NULL,

            -- Hashes (aliasing allowed: not unique)
            commit_hash TEXT NOT NULL,
            tag_hash TEXT NOT NULL,

            -- TTL and metadata (ISO-8601 UTC, microsecond precision)
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            expires_at TEXT NOT NULL,

            -- Constraints
            CHECK (length(repo_id) > 0),
            CHECK (length(tag) > 0),
            CHECK (length(commit_hash) = {Cache.SHA_LENGTH}),
            CHECK (length(tag_hash) = {Cache.SHA_LENGTH})
        );

        -- Indexes for lookups and pruning
        CREATE INDEX IF NOT EXISTS idx_git_tags_repo_tag ON {Cache.TABLE_NAME}(repo_id, tag);
        CREATE INDEX IF NOT EXISTS idx_git_tags_repo_commit ON {Cache.TABLE_NAME}(repo_id, commit_hash);
        CREATE INDEX IF NOT EXISTS idx_git_tags_repo_tag_hash ON {Cache.TABLE_NAME}(repo_id, tag_hash);
        CREATE INDEX IF NOT EXISTS idx_git_tags_expires_at ON {Cache.TABLE_NAME}(expires_at);

        -- Schema version tracking
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP NOT NULL
        );
        """

        self.conn.executescript(schema_sql)
        self.conn.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (Cache.SCHEMA_VERSION,),
        )
        self._current_version = Cache.SCHEMA_VERSION

        logger.info("Created database schema (v%d)", Cache.SCHEMA_VERSION)

    def validate_schema(self) -> bool:
        """Validate current schema integrity.

        Returns:
            True if the required tables exist and the version is known
        """
        for table in (Cache.TABLE_NAME, "schema_version"):
            cursor = self.conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
                (table,),
            )
            if cursor.fetchone() is None:
                logger.error("Required table '%s' not found", table)
                return False

        version = self._get_current_version()
        if version != Cache.SCHEMA_VERSION:
            logger.error("Unexpected schema version: %d", version)
            return False

        return True
