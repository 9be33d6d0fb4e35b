"""GitHub GraphQL client listing every tag of a repository.

Responses go through a ``requests_cache.CachedSession`` so repeated bulk
refreshes within the query TTL cost no API rate limit.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import timedelta
from pathlib import Path
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from requests_cache import CachedSession
from urllib3.util.retry import Retry

from taghash import __version__
from taghash.shared.constants import GitHubConfig, ResolverPhase
from taghash.shared.context import OperationContext
from taghash.shared.errors import ErrorCode, ErrorContext, TransportError
from taghash.shared.logging import log_operation_success
from taghash.shared.models import Hash, Repository, is_sha

log = logging.getLogger(__name__)


def resolve_token(token: str | None = None) -> str | None:
    """Pick the explicit token, else the first of GH_TOKEN / GITHUB_TOKEN."""
    if token:
        return token
    for env_var in GitHubConfig.TOKEN_ENV_VARS:
        value = os.environ.get(env_var, "").strip()
        if value:
            return value
    return None


def create_cached_session(
    cache_path: Path | str,
    expire_after: timedelta,
    max_retries: int = GitHubConfig.DEFAULT_MAX_RETRIES,
    token: str | None = None,
) -> CachedSession:
    """Create a cached session with a retry strategy for 5xx responses.

    Args:
        cache_path: SQLite file (without extension) for cached responses
        expire_after: Query TTL; zero disables the response cache
        max_retries: Transport-level retries for 5xx responses
        token: GitHub token sent as a bearer token

    Returns:
        Configured CachedSession
    """
    session = CachedSession(
        cache_name=str(cache_path),
        backend="sqlite",
        expire_after=expire_after,
        # GraphQL queries are POSTs; the body is part of the cache key
        allowed_methods=("GET", "HEAD", "POST"),
        stale_if_error=False,
    )

    retry_strategy = Retry(
        total=max_retries,
        status_forcelist=list(GitHubConfig.RETRY_STATUS_CODES),
        backoff_factor=1,
        allowed_methods=["GET", "HEAD", "POST"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)

    session.headers["User-Agent"] = f"taghash/{__version__}"
    session.headers["Accept"] = "application/json"
    if token:
        session.headers["Authorization"] = f"bearer {token}"

    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


def extract_sha_from_commit_resource_path(path: str) -> str:
    """Return the commit SHA at the end of ``/owner/name/commit/<sha>``.

    Raises:
        ValueError: If the last path segment is not a SHA
    """
    sha = path.rsplit("/", 1)[-1]
    if not is_sha(sha):
        raise ValueError(f"invalid SHA: {sha}")
    return sha


class GitHubGraphQLClient:
    """Tag source backed by the GitHub GraphQL API.

    Example:
        >>> client = GitHubGraphQLClient(create_cached_session(path, timedelta(hours=24)))
        >>> tags = client.fetch_all_tags(Repository("actions", "checkout"), ctx)
    """

    def __init__(
        self,
        session: requests.Session,
        graphql_url: str | None = None,
        page_size: int = GitHubConfig.MAX_PAGE_SIZE,
        timeout: float = GitHubConfig.DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.session = session
        self.graphql_url = graphql_url
        self.page_size = min(max(page_size, 1), GitHubConfig.MAX_PAGE_SIZE)
        self.timeout = timeout

    def endpoint_for(self, repo: Repository) -> str:
        """GraphQL endpoint for the repository's host (GHES aware)."""
        if self.graphql_url:
            return self.graphql_url
        if repo.host == GitHubConfig.DEFAULT_HOST:
            return GitHubConfig.GRAPHQL_URL
        return GitHubConfig.ENTERPRISE_GRAPHQL_URL_TEMPLATE.format(host=repo.host)

    def fetch_all_tags(
        self,
        repo: Repository,
        context: OperationContext,
    ) -> dict[str, Hash]:
        """Page through ``refs/tags/`` and map each tag to its hashes.

        Raises:
            TransportError: On HTTP, GraphQL or payload errors
            OperationCancelledError: If the context is cancelled, even mid-request
            OperationTimeoutError: If the context deadline passes
        """
        start = time.perf_counter()
        url = self.endpoint_for(repo)
        tags: dict[str, Hash] = {}
        cursor: str | None = None
        pages = 0

        log.debug("Fetching tags and oids: repo=%s", repo.repo_id)

        while True:
            context.check("fetch_all_tags", repo.repo_id)
            refs = self._query_page(url, repo, cursor, context)
            context.check("fetch_all_tags", repo.repo_id)
            pages += 1

            for node in refs.get("nodes") or []:
                name, hash_pair = self._parse_node(node, repo, cursor)
                tags[name] = hash_pair

            page_info = refs.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            cursor = page_info.get("endCursor")
            if not cursor:
                raise self._error(
                    "hasNextPage without endCursor", repo, cursor, ErrorCode.API_INVALID_RESPONSE
                )
            log.debug("Fetching next page of tags: repo=%s, cursor=%s", repo.repo_id, cursor)

        log_operation_success(
            log,
            "fetch_all_tags",
            (time.perf_counter() - start) * 1000,
            result_info={"tags": len(tags), "pages": pages},
            context={"repository": repo.repo_id},
        )
        return tags

    def _query_page(
        self,
        url: str,
        repo: Repository,
        cursor: str | None,
        context: OperationContext,
    ) -> dict[str, Any]:
        payload = {
            "query": GitHubConfig.TAGS_QUERY,
            "variables": {
                "owner": repo.owner,
                "name": repo.name,
                "first": self.page_size,
                "after": cursor,
            },
        }

        timeout = context.timeout(self.timeout)
        try:
            response = context.run(
                "fetch_all_tags",
                lambda: self.session.post(url, json=payload, timeout=timeout),
                repo.repo_id,
            )
        except requests.exceptions.RequestException as e:
            # past the deadline any request failure reports as a timeout
            context.check("fetch_all_tags", repo.repo_id)
            raise self._error(f"request failed: {e!s}", repo, cursor, original_error=e) from e

        if response.status_code in (401, 403):
            raise self._error(
                f"authentication failed (HTTP {response.status_code}); set GH_TOKEN",
                repo,
                cursor,
                ErrorCode.API_AUTHENTICATION_FAILED,
            )
        try:
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.HTTPError as e:
            raise self._error(f"HTTP {response.status_code}", repo, cursor, original_error=e) from e
        except ValueError as e:
            raise self._error(
                "response is not JSON", repo, cursor, ErrorCode.API_INVALID_RESPONSE, e
            ) from e

        if body.get("errors"):
            messages = "; ".join(str(err.get("message", err)) for err in body["errors"])
            raise self._error(messages, repo, cursor, ErrorCode.API_INVALID_RESPONSE)

        repository = (body.get("data") or {}).get("repository")
        if repository is None:
            raise self._error(
                "repository not found", repo, cursor, ErrorCode.API_INVALID_RESPONSE
            )

        refs = repository.get("refs")
        if not isinstance(refs, dict):
            raise self._error("missing refs", repo, cursor, ErrorCode.API_INVALID_RESPONSE)
        return refs

    def _parse_node(
        self,
        node: dict[str, Any],
        repo: Repository,
        cursor: str | None,
    ) -> tuple[str, Hash]:
        target = node.get("target") or {}
        name = node.get("name")
        oid = target.get("oid", "")
        try:
            commit_hash = extract_sha_from_commit_resource_path(
                target.get("commitResourcePath") or ""
            )
        except ValueError as e:
            raise self._error(
                f"{e!s} (tag {name})", repo, cursor, ErrorCode.API_INVALID_RESPONSE, e
            ) from e

        if not name or not is_sha(oid):
            raise self._error(
                f"invalid tag node: name={name!r}, oid={oid!r}",
                repo,
                cursor,
                ErrorCode.API_INVALID_RESPONSE,
            )
        return name, Hash(commit_hash=commit_hash, tag_hash=oid)

    def _error(
        self,
        message: str,
        repo: Repository,
        cursor: str | None,
        code: ErrorCode = ErrorCode.API_REQUEST_FAILED,
        original_error: Exception | None = None,
    ) -> TransportError:
        return TransportError(
            code,
            f"error fetching tag and oid: {message}",
            ErrorContext(
                operation="fetch_all_tags",
                repository=repo.repo_id,
                phase=ResolverPhase.BULK_REFRESH,
                additional_data={"cursor": cursor} if cursor else None,
            ),
            original_error,
        )

    def clear_cache(self) -> None:
        """Drop every cached GraphQL response."""
        cache = getattr(self.session, "cache", None)
        if cache is not None:
            cache.clear()
            log.info("GraphQL response cache cleared")

    def close(self) -> None:
        self.session.close()
