"""Bulk refresh of a repository's complete tag table."""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime

from taghash.services.cache_models import GitTag
from taghash.services.sqlite_cache import GitTagCacheDB
from taghash.services.ttl_policy import CacheTTL
from taghash.shared.constants import ResolverPhase
from taghash.shared.context import OperationContext
from taghash.shared.logging import log_operation_start, log_operation_success
from taghash.shared.models import Hash, Repository
from taghash.shared.protocols import TagSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshResult:
    """Summary of one bulk refresh."""

    repo_id: str
    tag_count: int
    alias_count: int
    pruned_count: int


class BulkRefresher:
    """Reconcile the remote tag table into the cache store.

    Tags sharing a (commit_hash, tag_hash) pair with another tag are
    "aliases" (``latest``, ``v1`` next to ``v1.2.3``) and tend to move,
    so every member of such a group gets the short alias TTL. Tags are
    visited in lexicographic order, which makes the canonical member of
    each group deterministic.
    """

    def __init__(self, tag_source: TagSource, store: GitTagCacheDB, ttl: CacheTTL) -> None:
        self.tag_source = tag_source
        self.store = store
        self.ttl = ttl

    def refresh(
        self,
        repo: Repository,
        now: datetime,
        context: OperationContext,
    ) -> RefreshResult:
        """Fetch every tag of ``repo``, store them, then prune expired rows.

        A fetch failure aborts before the store is touched.

        Raises:
            TransportError: If the tag listing fails
            StorageError: If the write or the prune fails
            OperationCancelledError: If the context is cancelled
        """
        log_operation_start(logger, "bulk_refresh", {"repository": repo.repo_id})
        start = time.perf_counter()

        tags = self.tag_source.fetch_all_tags(repo, context)
        context.check("bulk_refresh", repo.repo_id)

        entries = self.build_entries(repo, tags, now)
        alias_count = sum(
            len(names) for names in _group_by_hash(tags).values() if len(names) > 1
        )
        self.store.upsert_many(entries, now=now)

        pruned = self.store.prune(now)

        result = RefreshResult(
            repo_id=repo.repo_id,
            tag_count=len(entries),
            alias_count=alias_count,
            pruned_count=pruned,
        )
        log_operation_success(
            logger,
            "bulk_refresh",
            (time.perf_counter() - start) * 1000,
            result_info={
                "tags": result.tag_count,
                "aliases": result.alias_count,
                "pruned": result.pruned_count,
            },
            context={"repository": repo.repo_id, "phase": ResolverPhase.BULK_REFRESH},
        )
        logger.info(
            "Refreshed %d tags for %s (%d aliased)",
            result.tag_count,
            repo.repo_id,
            result.alias_count,
        )
        return result

    def build_entries(
        self,
        repo: Repository,
        tags: dict[str, Hash],
        now: datetime,
    ) -> list[GitTag]:
        """Turn a tag table into cache entries with their expiry assigned."""
        groups = _group_by_hash(tags)

        entries = []
        for name in sorted(tags):
            hash_pair = tags[name]
            if len(groups[hash_pair]) > 1:
                expires_at = now + self.ttl.git_alias_tag_ttl
            else:
                expires_at = now + self.ttl.git_tag_ttl
            entries.append(
                GitTag(
                    repo_id=repo.repo_id,
                    tag=name,
                    base_tag=name,
                    commit_hash=hash_pair.commit_hash,
                    tag_hash=hash_pair.tag_hash,
                    expires_at=expires_at,
                )
            )
        return entries


def _group_by_hash(tags: dict[str, Hash]) -> dict[Hash, list[str]]:
    groups: dict[Hash, list[str]] = defaultdict(list)
    for name in sorted(tags):
        groups[tags[name]].append(name)
    return groups
