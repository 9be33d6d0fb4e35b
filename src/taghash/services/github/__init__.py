"""GitHub GraphQL tag source."""

from taghash.services.github.graphql_client import (
    GitHubGraphQLClient,
    create_cached_session,
    extract_sha_from_commit_resource_path,
    resolve_token,
)

__all__ = [
    "GitHubGraphQLClient",
    "create_cached_session",
    "extract_sha_from_commit_resource_path",
    "resolve_token",
]
