"""SQLite cache module with modular operations.

This module provides the git tag cache database with separated concerns
for query, insert, update, migration, and transaction operations.
"""

from taghash.services.sqlite_cache.cache_db import GitTagCacheDB

__all__ = ["GitTagCacheDB"]
