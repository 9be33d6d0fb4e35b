"""Tag/hash point resolver.

Reads go to the cache store first. A miss triggers one bulk refresh of
the repository's tag table followed by a second read; a second miss
falls back to asking a local git clone directly.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TypeVar

from taghash.services.bulk_refresh import BulkRefresher
from taghash.services.cache_models import GitTag
from taghash.services.sqlite_cache import GitTagCacheDB
from taghash.services.ttl_policy import CacheTTL
from taghash.shared.constants import LoggingDefaults, ResolverPhase
from taghash.shared.context import OperationContext
from taghash.shared.errors import (
    ErrorCode,
    ErrorContext,
    IntrospectionError,
    TagHashError,
    create_invalid_hash_error,
    create_invalid_tag_error,
)
from taghash.shared.logging import log_operation_error, log_operation_success
from taghash.shared.models import Repository, is_sha
from taghash.shared.protocols import GitIntrospector, TagSource

T = TypeVar("T")

# first attempt reads the cache, second reads it again after a bulk refresh
_LOOKUP_ATTEMPTS = 2


class TagHashResolver:
    """Resolve tags to hashes and hashes to tags for GitHub repositories.

    Args:
        store: Cache store
        tag_source: Remote bulk tag listing
        git: Local git introspection
        ttl: Cache lifetimes
        logger: Logger for resolver events (default ``taghash.resolver``)
        clock: Returns the current UTC time

    Example:
        >>> with TagHashResolver(store, client, executor, CacheTTL.parse("48h")) as resolver:
        ...     entry = resolver.resolve_tag(Repository("actions", "checkout"), "v1.1.0")
        ...     entry.commit_hash
        '0b496e91ec7ae4428c3ed2eeb4c3a40df431f2cc'
    """

    def __init__(
        self,
        store: GitTagCacheDB,
        tag_source: TagSource,
        git: GitIntrospector,
        ttl: CacheTTL,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.git = git
        self.ttl = ttl
        self.logger = logger or logging.getLogger(LoggingDefaults.RESOLVER_LOGGER)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.refresher = BulkRefresher(tag_source, store, ttl)

    def resolve_tag(
        self,
        repo: Repository,
        tag: str,
        context: OperationContext | None = None,
    ) -> GitTag:
        """Resolve a tag name to its commit and tag hashes.

        Raises:
            InvalidInputError: If the tag is empty (before any I/O)
            TransportError: If the bulk refresh fails
            IntrospectionError: If the git fallback fails
            StorageError: If the cache store fails
            OperationCancelledError: If the context is cancelled
        """
        if not tag or not tag.strip():
            raise create_invalid_tag_error(tag or "", repo.repo_id)

        ctx = context or OperationContext.background()
        now = self._clock()
        start = time.perf_counter()

        def lookup() -> GitTag | None:
            return self.store.lookup_by_tag(repo.repo_id, tag, now)

        with self._logged("resolve_tag", repo, {"tag": tag}):
            entry = self._lookup_or_refresh(repo, lookup, now, ctx, "resolve_tag")
            if entry is None:
                entry = self._tag_from_git(repo, tag, now, ctx)

        self._log_resolved("resolve_tag", repo, start, {"tag": tag, "commit": entry.commit_hash})
        return entry

    def resolve_hash(
        self,
        repo: Repository,
        hash_value: str,
        context: OperationContext | None = None,
    ) -> list[GitTag]:
        """Resolve a commit or tag hash to the tags referencing it.

        Returns:
            Entries ordered by tag name (never empty on success)

        Raises:
            InvalidInputError: If the value is not a 40-character hex SHA
            TransportError: If the bulk refresh fails
            IntrospectionError: If the git fallback fails
            StorageError: If the cache store fails
            OperationCancelledError: If the context is cancelled
        """
        if not is_sha(hash_value):
            raise create_invalid_hash_error(hash_value, repo.repo_id)
        hash_value = hash_value.strip()

        ctx = context or OperationContext.background()
        now = self._clock()
        start = time.perf_counter()

        def lookup() -> list[GitTag] | None:
            return self.store.lookup_by_hash(repo.repo_id, hash_value, now) or None

        with self._logged("resolve_hash", repo, {"hash": hash_value}):
            entries = self._lookup_or_refresh(repo, lookup, now, ctx, "resolve_hash")
            if entries is None:
                entries = [self._hash_from_git(repo, hash_value, now, ctx)]

        self._log_resolved(
            "resolve_hash", repo, start, {"hash": hash_value, "tags": len(entries)}
        )
        return entries

    def prune_cache(self, as_of: datetime | None = None) -> int:
        """Delete cache entries expired before ``as_of`` (default: now)."""
        return self.store.prune(as_of or self._clock())

    def clear_all(self) -> int:
        """Delete every cache entry."""
        count = self.store.clear()
        self.logger.info("Cleared %d cache entries", count)
        return count

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> TagHashResolver:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _lookup_or_refresh(
        self,
        repo: Repository,
        lookup: Callable[[], T | None],
        now: datetime,
        ctx: OperationContext,
        operation: str,
    ) -> T | None:
        """Read, bulk refresh on a miss, read again. None means still missing."""
        for attempt in range(_LOOKUP_ATTEMPTS):
            ctx.check(operation, repo.repo_id)
            if attempt > 0:
                self.logger.debug("Cache miss for %s, refreshing all tags", repo.repo_id)
                self.refresher.refresh(repo, now, ctx)

            found = lookup()
            if found is not None:
                return found
        return None

    def _tag_from_git(
        self, repo: Repository, tag: str, now: datetime, ctx: OperationContext
    ) -> GitTag:
        self.logger.debug("Tag %s not listed for %s, asking git", tag, repo.repo_id)

        tag_hash = self.git.rev_parse(repo, tag, ctx)
        base_tag = self.git.describe(repo, tag_hash, ctx, abbrev0=True)
        commit_hash = self.git.rev_list_first(repo, tag, ctx)
        return self._store_fallback(repo, tag, base_tag, commit_hash, tag_hash, now, ctx)

    def _hash_from_git(
        self, repo: Repository, hash_value: str, now: datetime, ctx: OperationContext
    ) -> GitTag:
        self.logger.debug("Hash %s not listed for %s, asking git", hash_value, repo.repo_id)

        tag = self.git.describe(repo, hash_value, ctx)
        base_tag = self.git.describe(repo, hash_value, ctx, abbrev0=True)
        tag_hash = self.git.rev_parse(repo, tag, ctx)
        commit_hash = self.git.rev_list_first(repo, tag, ctx)
        return self._store_fallback(repo, tag, base_tag, commit_hash, tag_hash, now, ctx)

    def _store_fallback(
        self,
        repo: Repository,
        tag: str,
        base_tag: str,
        commit_hash: str,
        tag_hash: str,
        now: datetime,
        ctx: OperationContext,
    ) -> GitTag:
        for name, value in (("commit_hash", commit_hash), ("tag_hash", tag_hash)):
            if not is_sha(value):
                raise IntrospectionError(
                    ErrorCode.GIT_INVALID_OUTPUT,
                    f"git returned an invalid {name} for {tag}: {value!r}",
                    ErrorContext(
                        operation="git_fallback",
                        repository=repo.repo_id,
                        phase=ResolverPhase.GIT_FALLBACK,
                        additional_data={"tag": tag},
                    ),
                )

        ctx.check("git_fallback", repo.repo_id)
        entry = GitTag(
            repo_id=repo.repo_id,
            tag=tag,
            base_tag=base_tag,
            commit_hash=commit_hash,
            tag_hash=tag_hash,
            expires_at=now + self.ttl.git_file_ttl,
        )
        self.store.upsert(entry, now=now)
        return entry

    @contextmanager
    def _logged(
        self, operation: str, repo: Repository, data: dict[str, str]
    ) -> Iterator[None]:
        """Log a TagHashError escaping a resolve call at debug level, then re-raise."""
        try:
            yield
        except TagHashError as e:
            log_operation_error(
                self.logger,
                e,
                operation=operation,
                additional_context={"repository": repo.repo_id, **data},
                level=logging.DEBUG,
            )
            raise

    def _log_resolved(
        self, operation: str, repo: Repository, start: float, result_info: dict
    ) -> None:
        log_operation_success(
            self.logger,
            operation,
            (time.perf_counter() - start) * 1000,
            result_info=result_info,
            context={"repository": repo.repo_id},
        )

