"""Dependency Injection container for taghash.

This module provides a centralized DI container using dependency-injector
to wire the resolver to its collaborators.

The container manages:
- Settings (Singleton)
- Cache TTL policy and cache directory
- Cache store (GitTagCacheDB)
- GitHub GraphQL client and its cached HTTP session
- Git describe executor
- Tag/hash resolver
"""

from __future__ import annotations

from dependency_injector import containers, providers

from taghash.config.loader import load_settings
from taghash.config.models.settings import Settings
from taghash.services import (
    CacheTTL,
    GitDescribeExecutor,
    GitHubGraphQLClient,
    GitTagCacheDB,
    TagHashResolver,
)
from taghash.services.github import create_cached_session, resolve_token
from taghash.shared.constants import GitHubConfig
from taghash.utils.paths import make_cache_dir


def _cache_dir(config: Settings):
    return make_cache_dir(config.cache.dir or None, config.cache.dir_perm)


def _cache_ttl(config: Settings) -> CacheTTL:
    return CacheTTL.parse(config.cache.ttl)


def _http_session(config: Settings, cache_dir, ttl: CacheTTL):
    return create_cached_session(
        cache_dir / GitHubConfig.QUERY_CACHE_NAME,
        expire_after=ttl.query_ttl,
        max_retries=config.api.max_retries,
        token=resolve_token(config.api.token),
    )


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for taghash services.

    The CLI overrides ``config`` and ``cache_ttl`` with the values its
    options produce before asking for the resolver.

    Example:
        >>> container = Container()
        >>> container.cache_ttl.override(providers.Object(CacheTTL.parse("1h")))
        >>> with container.resolver() as resolver:
        ...     resolver.resolve_tag(Repository("actions", "checkout"), "v1.1.0")
    """

    # Configuration
    config = providers.Singleton(load_settings)

    cache_ttl = providers.Singleton(_cache_ttl, config=config)
    cache_dir = providers.Singleton(_cache_dir, config=config)

    # Cache store
    cache_db = providers.Singleton(
        GitTagCacheDB.from_cache_dir,
        cache_dir=cache_dir,
        busy_timeout=config.provided.cache.busy_timeout_seconds,
    )

    # GitHub tag source
    http_session = providers.Singleton(
        _http_session,
        config=config,
        cache_dir=cache_dir,
        ttl=cache_ttl,
    )

    graphql_client = providers.Singleton(
        GitHubGraphQLClient,
        session=http_session,
        graphql_url=config.provided.api.graphql_url,
        page_size=config.provided.api.page_size,
        timeout=config.provided.api.timeout_seconds,
    )

    # Local git
    git_executor = providers.Singleton(
        GitDescribeExecutor,
        cache_dir=cache_dir,
        file_ttl=cache_ttl.provided.git_file_ttl,
        executable=config.provided.git.executable,
        clone_url_template=config.provided.git.clone_url_template,
    )

    # Resolver
    resolver = providers.Factory(
        TagHashResolver,
        store=cache_db,
        tag_source=graphql_client,
        git=git_executor,
        ttl=cache_ttl,
    )
