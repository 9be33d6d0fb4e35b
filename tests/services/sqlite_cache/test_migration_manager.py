"""Tests for the cache schema MigrationManager."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from taghash.services.sqlite_cache.migration.manager import MigrationManager


class TestMigrationManager:
    """Test suite for MigrationManager."""

    def test_empty_database_is_version_zero(self, tmp_path: Path) -> None:
        conn = sqlite3.connect(str(tmp_path / "m.sqlite3"))

        assert MigrationManager(conn).get_current_version() == 0
        conn.close()

    def test_create_tables(self, tmp_path: Path) -> None:
        # Given
        conn = sqlite3.connect(str(tmp_path / "m.sqlite3"), isolation_level=None)
        manager = MigrationManager(conn)

        # When
        manager.create_tables()

        # Then
        assert manager.get_current_version() == 1
        assert manager.validate_schema() is True
        indexes = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='index'")
        }
        assert {"idx_git_tags_repo_tag", "idx_git_tags_expires_at"} <= indexes
        conn.close()

    def test_create_tables_is_idempotent(self, tmp_path: Path) -> None:
        conn = sqlite3.connect(str(tmp_path / "m.sqlite3"), isolation_level=None)
        MigrationManager(conn).create_tables()

        reopened = MigrationManager(conn)
        reopened.create_tables()

        assert reopened.get_current_version() == 1
        assert conn.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0] == 1
        conn.close()

    def test_validate_schema_detects_missing_table(self, tmp_path: Path) -> None:
        conn = sqlite3.connect(str(tmp_path / "m.sqlite3"))

        assert MigrationManager(conn).validate_schema() is False
        conn.close()
