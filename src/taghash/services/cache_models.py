"""Cache entry dataclass model.

This module defines the dataclass for git tag cache entries,
providing type safety and validation for tag/hash records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from taghash.shared.errors import ErrorCode, ErrorContext, InvalidInputError
from taghash.shared.models import Hash, is_sha

__all__ = ["GitTag"]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class GitTag:
    """Cached knowledge about one tag of one repository.

    Attributes:
        repo_id: Repository ID formatted as "owner/name"
        tag: Git tag name (may be a describe name like v4.1.6-4-g6ccd57f)
        base_tag: Nearest reachable release tag (equals tag for real tags)
        commit_hash: Commit hash the tag points to (peeled)
        tag_hash: Hash of the tag object; equals commit_hash for lightweight tags
        expires_at: Time after which the record must not be trusted
        id: Row id once stored

    Example:
        >>> GitTag(
        ...     repo_id="actions/checkout",
        ...     tag="v1.1.0",
        ...     base_tag="v1.1.0",
        ...     commit_hash="0b496e91ec7ae4428c3ed2eeb4c3a40df431f2cc",
        ...     tag_hash="ec3afacf7f605c9fc12c70bc1c9e1708ddb99eca",
        ...     expires_at=datetime.now(timezone.utc) + timedelta(hours=48),
        ... )
    """

    repo_id: str
    tag: str
    base_tag: str
    commit_hash: str
    tag_hash: str
    expires_at: datetime
    id: int | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate fields.

        Raises:
            InvalidInputError: If a key is empty or a hash is not a 40-char SHA
        """
        if not self.repo_id.strip():
            raise self._invalid("repo_id must be non-empty", "repo_id")
        if not self.tag.strip():
            raise self._invalid("tag must be non-empty", "tag")

        for name in ("commit_hash", "tag_hash"):
            value = getattr(self, name).strip()
            if not is_sha(value):
                raise self._invalid(f"{name} must be a 40-character hex SHA, got {value!r}", name)
            setattr(self, name, value)

        if not self.base_tag:
            self.base_tag = self.tag

        self.expires_at = _as_utc(self.expires_at)

    def _invalid(self, message: str, field_name: str) -> InvalidInputError:
        return InvalidInputError(
            ErrorCode.VALIDATION_ERROR,
            message,
            ErrorContext(
                operation="validate_git_tag",
                repository=self.repo_id or None,
                additional_data={"field": field_name, "tag": self.tag},
            ),
        )

    @property
    def hash(self) -> Hash:
        return Hash(commit_hash=self.commit_hash, tag_hash=self.tag_hash)

    @property
    def is_lightweight(self) -> bool:
        """True when the tag has no separate tag object."""
        return self.commit_hash == self.tag_hash

    def is_expired(self, as_of: datetime | None = None) -> bool:
        """Check whether the record is expired as of ``as_of`` (default: now)."""
        now = _as_utc(as_of) if as_of is not None else datetime.now(timezone.utc)
        return self.expires_at < now

    def to_dict(self) -> dict[str, Any]:
        return {
            "repoId": self.repo_id,
            "tag": self.tag,
            "baseTag": self.base_tag,
            "commitHash": self.commit_hash,
            "tagHash": self.tag_hash,
            "expiresAt": self.expires_at.isoformat(),
        }

    def __str__(self) -> str:
        return (
            f"RepoID={self.repo_id}, Tag={self.tag}, "
            f"CommitHash={self.commit_hash}, TagHash={self.tag_hash}"
        )
