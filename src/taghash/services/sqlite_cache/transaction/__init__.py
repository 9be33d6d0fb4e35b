"""SQLite cache transaction module.

This module provides transaction management for cache operations.
"""

from taghash.services.sqlite_cache.transaction.manager import TransactionManager

__all__ = ["TransactionManager"]
