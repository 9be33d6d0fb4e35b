"""SQLite cache migration module.

This module provides database schema migration management.
"""

from taghash.services.sqlite_cache.migration.manager import MigrationManager

__all__ = ["MigrationManager"]
