"""
Pytest configuration and shared fixtures for taghash tests.

The fakes below reproduce a slice of the actions/checkout tag table so
resolver tests never touch the network or a real git clone.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from taghash.services.resolver import TagHashResolver
from taghash.services.sqlite_cache import GitTagCacheDB
from taghash.services.ttl_policy import CacheTTL
from taghash.shared.context import OperationContext
from taghash.shared.models import Hash, Repository

# actions/checkout
V1_1_0_TAG_HASH = "ec3afacf7f605c9fc12c70bc1c9e1708ddb99eca"
V1_1_0_COMMIT = "0b496e91ec7ae4428c3ed2eeb4c3a40df431f2cc"
V4_1_6_COMMIT = "a4aa98b93cab29d9b1101a6143fb8bce00e2eac4"
UNTAGGED_COMMIT = "6ccd57f4c5d15bdc2fef309bd9fb6cc9db2ef1c6"

CHECKOUT_TAGS: dict[str, Hash] = {
    "v1.1.0": Hash(commit_hash=V1_1_0_COMMIT, tag_hash=V1_1_0_TAG_HASH),
    "v4.1.6": Hash(commit_hash=V4_1_6_COMMIT, tag_hash=V4_1_6_COMMIT),
    "v4": Hash(commit_hash=V4_1_6_COMMIT, tag_hash=V4_1_6_COMMIT),
}


class FakeTagSource:
    """In-memory TagSource counting its calls."""

    def __init__(self, tags: dict[str, Hash] | None = None, error: Exception | None = None):
        self.tags = dict(CHECKOUT_TAGS if tags is None else tags)
        self.error = error
        self.calls = 0

    def fetch_all_tags(self, repo: Repository, context: OperationContext) -> dict[str, Hash]:
        self.calls += 1
        context.check("fetch_all_tags", repo.repo_id)
        if self.error is not None:
            raise self.error
        return dict(self.tags)


class FakeGitIntrospector:
    """GitIntrospector answering from fixed tables, recording every call.

    ``objects`` maps a ref to the hash rev-parse prints, ``commits`` maps a
    ref to the peeled commit, ``describe_names`` maps a revision to the
    (describe, describe --abbrev=0) pair.
    """

    def __init__(self) -> None:
        describe_name = "v4.1.6-4-g6ccd57f"
        self.objects = {
            "v1.1.0": V1_1_0_TAG_HASH,
            "v4.1.6": V4_1_6_COMMIT,
            describe_name: UNTAGGED_COMMIT,
        }
        self.commits = {
            "v1.1.0": V1_1_0_COMMIT,
            "v4.1.6": V4_1_6_COMMIT,
            describe_name: UNTAGGED_COMMIT,
        }
        self.describe_names = {
            V1_1_0_TAG_HASH: ("v1.1.0", "v1.1.0"),
            V1_1_0_COMMIT: ("v1.1.0", "v1.1.0"),
            UNTAGGED_COMMIT: (describe_name, "v4.1.6"),
        }
        self.calls: list[tuple[str, str]] = []

    def rev_parse(self, repo: Repository, ref: str, context: OperationContext) -> str:
        self.calls.append(("rev_parse", ref))
        return self.objects[ref]

    def rev_list_first(self, repo: Repository, ref: str, context: OperationContext) -> str:
        self.calls.append(("rev_list_first", ref))
        return self.commits[ref]

    def describe(
        self,
        repo: Repository,
        rev: str,
        context: OperationContext,
        *,
        abbrev0: bool = False,
    ) -> str:
        self.calls.append(("describe_abbrev0" if abbrev0 else "describe", rev))
        full, base = self.describe_names[rev]
        return base if abbrev0 else full


@pytest.fixture
def checkout_repo() -> Repository:
    return Repository(owner="actions", name="checkout")


@pytest.fixture
def cache_ttl() -> CacheTTL:
    return CacheTTL.parse("48h")


@pytest.fixture
def cache_db(tmp_path: Path) -> Generator[GitTagCacheDB, None, None]:
    """Fresh cache database in a temporary directory."""
    db = GitTagCacheDB(tmp_path / "cache.sqlite3")
    yield db
    db.close()


@pytest.fixture
def tag_source() -> FakeTagSource:
    return FakeTagSource()


@pytest.fixture
def git_introspector() -> FakeGitIntrospector:
    return FakeGitIntrospector()


@pytest.fixture
def resolver(
    cache_db: GitTagCacheDB,
    tag_source: FakeTagSource,
    git_introspector: FakeGitIntrospector,
    cache_ttl: CacheTTL,
) -> TagHashResolver:
    return TagHashResolver(cache_db, tag_source, git_introspector, cache_ttl)


@pytest.fixture(autouse=True)
def _isolated_env(
    request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Keep user configuration and tokens out of the tests.

    Tests marked ``network`` keep GH_TOKEN / GITHUB_TOKEN.
    """
    if request.node.get_closest_marker("network") is None:
        for name in ("GH_TOKEN", "GITHUB_TOKEN"):
            monkeypatch.delenv(name, raising=False)
    for name in [k for k in os.environ if k.startswith("TAGHASH_")]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
