"""Repository identity and hash pair models."""

from __future__ import annotations

import re
from dataclasses import dataclass

from taghash.shared.constants import Cache, GitHubConfig
from taghash.shared.errors import ErrorCode, ErrorContext, InvalidInputError

_SHA_RE = re.compile(Cache.SHA_PATTERN)

# owner/name segments as GitHub accepts them
_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_.-]+$")

# https://host/owner/name(.git), ssh://git@host/owner/name(.git), git@host:owner/name(.git)
_REMOTE_URL_RE = re.compile(
    r"^(?:(?:https?|ssh|git)://(?:[^@/]+@)?(?P<host1>[^/:]+)(?::\d+)?/"
    r"|[^@]+@(?P<host2>[^:]+):)"
    r"(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)


def is_sha(value: str) -> bool:
    """Return True if the string is a 40-character lowercase hex SHA."""
    return bool(_SHA_RE.match(value.strip()))


@dataclass(frozen=True)
class Hash:
    """The two hashes of a tag: the peeled commit and the tag object."""

    commit_hash: str
    tag_hash: str

    @property
    def is_lightweight(self) -> bool:
        return self.commit_hash == self.tag_hash


@dataclass(frozen=True)
class Repository:
    """GitHub repository identity.

    Attributes:
        owner: Repository owner (user or organization)
        name: Repository name
        host: GitHub host (github.com or a GHES hostname)
    """

    owner: str
    name: str
    host: str = GitHubConfig.DEFAULT_HOST

    @property
    def repo_id(self) -> str:
        """Repository ID formatted as "owner/name"."""
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.repo_id

    @classmethod
    def parse(cls, value: str, default_host: str = GitHubConfig.DEFAULT_HOST) -> Repository:
        """Parse "owner/name" (on ``default_host``) or "host/owner/name".

        Raises:
            InvalidInputError: If the value is not a repository ID
        """
        parts = value.strip().split("/")
        if len(parts) == 2:
            host = default_host
            owner, name = parts
        elif len(parts) == 3:
            host, owner, name = parts
        else:
            raise _invalid_repository(value)

        if not host or not _SEGMENT_RE.match(owner) or not _SEGMENT_RE.match(name):
            raise _invalid_repository(value)

        return cls(owner=owner, name=name, host=host)

    @classmethod
    def from_remote_url(cls, url: str) -> Repository:
        """Build a repository from a git remote URL (https or ssh form)."""
        match = _REMOTE_URL_RE.match(url.strip())
        if match is None:
            raise _invalid_repository(url)

        host = match.group("host1") or match.group("host2")
        return cls(owner=match.group("owner"), name=match.group("name"), host=host)


def _invalid_repository(value: str) -> InvalidInputError:
    return InvalidInputError(
        ErrorCode.INVALID_REPOSITORY,
        f'expected the "[HOST/]OWNER/REPO" format, got "{value}"',
        ErrorContext(operation="parse_repository", additional_data={"value": value}),
    )
