"""Tests for the GitTag cache entry model."""

from datetime import datetime, timedelta, timezone

import pytest

from taghash.services.cache_models import GitTag
from taghash.shared.errors import InvalidInputError
from taghash.shared.models import Hash

TAG_HASH = "ec3afacf7f605c9fc12c70bc1c9e1708ddb99eca"
COMMIT = "0b496e91ec7ae4428c3ed2eeb4c3a40df431f2cc"


def _tag(**overrides) -> GitTag:
    values = {
        "repo_id": "actions/checkout",
        "tag": "v1.1.0",
        "base_tag": "v1.1.0",
        "commit_hash": COMMIT,
        "tag_hash": TAG_HASH,
        "expires_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return GitTag(**values)


class TestGitTag:
    """Test suite for GitTag."""

    def test_valid_annotated_tag(self) -> None:
        # When
        entry = _tag()

        # Then
        assert entry.hash == Hash(commit_hash=COMMIT, tag_hash=TAG_HASH)
        assert entry.is_lightweight is False
        assert entry.id is None

    def test_lightweight_tag(self) -> None:
        entry = _tag(tag="v4", base_tag="v4", tag_hash=COMMIT)

        assert entry.is_lightweight is True

    def test_empty_base_tag_defaults_to_tag(self) -> None:
        entry = _tag(base_tag="")

        assert entry.base_tag == "v1.1.0"

    def test_hash_whitespace_is_stripped(self) -> None:
        entry = _tag(commit_hash=f" {COMMIT}\n")

        assert entry.commit_hash == COMMIT

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("repo_id", ""),
            ("tag", "  "),
            ("commit_hash", "abc"),
            ("tag_hash", "Z" * 40),
        ],
    )
    def test_invalid_fields_are_rejected(self, field: str, value: str) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            _tag(**{field: value})

        assert exc_info.value.context.additional_data["field"] == field

    def test_naive_expiry_is_taken_as_utc(self) -> None:
        entry = _tag(expires_at=datetime(2024, 5, 1, 12, 0))

        assert entry.expires_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_is_expired_boundary(self) -> None:
        # Given
        entry = _tag()

        # Then
        assert entry.is_expired(entry.expires_at) is False
        assert entry.is_expired(entry.expires_at + timedelta(microseconds=1)) is True

    def test_id_is_not_compared(self) -> None:
        first = _tag()
        second = _tag()
        second.id = 7

        assert first == second

    def test_to_dict(self) -> None:
        data = _tag().to_dict()

        assert data == {
            "repoId": "actions/checkout",
            "tag": "v1.1.0",
            "baseTag": "v1.1.0",
            "commitHash": COMMIT,
            "tagHash": TAG_HASH,
            "expiresAt": "2024-05-01T00:00:00+00:00",
        }

    def test_str(self) -> None:
        assert str(_tag()) == (
            f"RepoID=actions/checkout, Tag=v1.1.0, CommitHash={COMMIT}, TagHash={TAG_HASH}"
        )
