"""GitHub API configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from taghash.shared.constants import GitHubConfig


class APISettings(BaseModel):
    """GitHub GraphQL API configuration.

    Security: token is hidden from __repr__ to prevent accidental
    exposure in logs.
    """

    host: str = Field(default=GitHubConfig.DEFAULT_HOST, description="GitHub host")
    graphql_url: str | None = Field(
        default=None,
        description="GraphQL endpoint override (default derived from host)",
    )
    token: str = Field(
        default="",
        repr=False,
        description="GitHub token (falls back to GH_TOKEN / GITHUB_TOKEN)",
    )
    page_size: int = Field(
        default=GitHubConfig.MAX_PAGE_SIZE,
        ge=1,
        le=GitHubConfig.MAX_PAGE_SIZE,
        description="Tags requested per GraphQL page",
    )
    timeout_seconds: float = Field(
        default=GitHubConfig.DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Request timeout in seconds",
    )
    max_retries: int = Field(
        default=GitHubConfig.DEFAULT_MAX_RETRIES,
        ge=0,
        description="Transport-level retries for 5xx responses",
    )


__all__ = ["APISettings"]
