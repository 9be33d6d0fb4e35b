"""Services module for taghash.

This module contains the resolver core (cache store, bulk refresh,
point resolver, TTL policy) and its GitHub and git collaborators.
"""

from .bulk_refresh import BulkRefresher, RefreshResult
from .cache_models import GitTag
from .git import GitDescribeExecutor
from .github import GitHubGraphQLClient
from .resolver import TagHashResolver
from .sqlite_cache import GitTagCacheDB
from .ttl_policy import CacheTTL, parse_duration

__all__ = [
    "BulkRefresher",
    "CacheTTL",
    "GitDescribeExecutor",
    "GitHubGraphQLClient",
    "GitTag",
    "GitTagCacheDB",
    "RefreshResult",
    "TagHashResolver",
    "parse_duration",
]
