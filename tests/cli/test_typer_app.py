"""Tests for the taghash Typer application."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from taghash import __version__
from taghash.cli.typer_app import app
from taghash.services.cache_models import GitTag
from taghash.services.resolver import TagHashResolver
from taghash.services.sqlite_cache import GitTagCacheDB
from taghash.shared.errors import ErrorCode, ErrorContext, TransportError
from taghash.shared.models import Repository

V1_1_0_TAG_HASH = "ec3afacf7f605c9fc12c70bc1c9e1708ddb99eca"
V1_1_0_COMMIT = "0b496e91ec7ae4428c3ed2eeb4c3a40df431f2cc"
V4_1_6_COMMIT = "a4aa98b93cab29d9b1101a6143fb8bce00e2eac4"
UNTAGGED_COMMIT = "6ccd57f4c5d15bdc2fef309bd9fb6cc9db2ef1c6"

runner = CliRunner()


@pytest.fixture(autouse=True)
def _workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def graphql_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def build_container(
    mocker, cache_db, tag_source, git_introspector, cache_ttl, graphql_client
) -> MagicMock:
    """Patch build_container so ``resolve`` runs against the in-memory fakes.

    The command closes its resolver, so each call gets a fresh one on the
    same database file.
    """

    def make_resolver() -> TagHashResolver:
        store = GitTagCacheDB(cache_db.db_path)
        return TagHashResolver(store, tag_source, git_introspector, cache_ttl)

    fake = MagicMock()
    fake.resolver.side_effect = make_resolver
    fake.graphql_client.return_value = graphql_client
    return mocker.patch("taghash.cli.typer_app.build_container", return_value=fake)


def _resolve(*args: str):
    return runner.invoke(app, ["resolve", "--log-level", "error", *args])


def _cache(command: str, base: Path, *args: str):
    return runner.invoke(
        app, ["cache", command, "--log-level", "error", "--cache-dir", str(base), *args]
    )


class TestResolveCommand:
    """Test the resolve command."""

    def test_resolve_annotated_tag_text(self, build_container) -> None:
        result = _resolve("-R", "actions/checkout", "v1.1.0")

        assert result.exit_code == 0, result.output
        assert result.stdout == (
            f"tagHash: {V1_1_0_TAG_HASH}\ncommitHash: {V1_1_0_COMMIT}\n"
        )

    def test_resolve_tag_simple_and_json(self, build_container) -> None:
        simple = _resolve("--repo", "actions/checkout", "--format", "simple", "v1.1.0")
        as_json = _resolve("--repo", "actions/checkout", "--format", "JSON", "v1.1.0")

        assert simple.stdout == f"{V1_1_0_TAG_HASH}\n{V1_1_0_COMMIT}\n"
        assert json.loads(as_json.stdout) == {
            "commitHash": V1_1_0_COMMIT,
            "tagHash": V1_1_0_TAG_HASH,
        }

    def test_lightweight_tag_prints_single_hash(self, build_container) -> None:
        result = _resolve("-R", "actions/checkout", "v4")

        assert result.stdout == f"{V4_1_6_COMMIT}\n"

    def test_resolve_hash_prints_every_tag(self, build_container) -> None:
        result = _resolve("-R", "actions/checkout", V4_1_6_COMMIT)

        assert result.exit_code == 0, result.output
        assert result.stdout == "v4\nv4.1.6\n"

    def test_resolve_hash_json(self, build_container) -> None:
        result = _resolve("-R", "actions/checkout", "--format", "json", V1_1_0_TAG_HASH)

        assert json.loads(result.stdout) == {"tag": "v1.1.0"}

    def test_show_base_tag(self, build_container) -> None:
        plain = _resolve("-R", "actions/checkout", UNTAGGED_COMMIT)
        base = _resolve("-R", "actions/checkout", "--show-base-tag", UNTAGGED_COMMIT)

        assert plain.stdout == "v4.1.6-4-g6ccd57f\n"
        assert base.stdout == "v4.1.6\n"

    def test_multiple_values_in_order(self, build_container, tag_source) -> None:
        result = _resolve("-R", "actions/checkout", "v4", V1_1_0_COMMIT)

        assert result.stdout == f"{V4_1_6_COMMIT}\nv1.1.0\n"
        assert tag_source.calls == 1

    def test_repository_defaults_to_origin_remote(self, build_container, mocker) -> None:
        current = mocker.patch(
            "taghash.cli.typer_app.current_repository",
            return_value=Repository(owner="actions", name="checkout"),
        )

        result = _resolve("v4")

        assert result.exit_code == 0, result.output
        current.assert_called_once()

    def test_cache_ttl_option_reaches_container(self, build_container) -> None:
        _resolve("-R", "actions/checkout", "--cache-ttl", "1h", "v4")

        ttl = build_container.call_args.args[1]
        assert ttl.git_tag_ttl == timedelta(hours=1)
        assert ttl.query_ttl == timedelta(minutes=30)

    def test_no_cache_clears_store_and_query_cache(
        self, build_container, graphql_client, tag_source, cache_db
    ) -> None:
        # Given - a stale entry that a cached read would have returned
        cache_db.upsert(
            GitTag(
                repo_id="actions/checkout",
                tag="v4",
                base_tag="v4",
                commit_hash=V1_1_0_COMMIT,
                tag_hash=V1_1_0_COMMIT,
                expires_at=datetime.now(timezone.utc) + timedelta(days=1),
            )
        )

        # When
        result = _resolve("-R", "actions/checkout", "--no-cache", "v4")

        # Then
        assert result.stdout == f"{V4_1_6_COMMIT}\n"
        assert build_container.call_args.args[1].query_ttl == timedelta(0)
        graphql_client.clear_cache.assert_called_once()
        graphql_client.close.assert_called_once()
        assert tag_source.calls == 1

    def test_invalid_repository_exits_2(self, build_container) -> None:
        result = _resolve("-R", "not-a-repo", "v4")

        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_missing_values_is_usage_error(self) -> None:
        result = _resolve("-R", "actions/checkout")

        assert result.exit_code == 2

    def test_failure_exits_1(self, build_container, tag_source) -> None:
        tag_source.error = TransportError(
            ErrorCode.API_REQUEST_FAILED,
            "error fetching tag and oid: HTTP 502",
            ErrorContext(operation="fetch_all_tags"),
        )

        result = _resolve("-R", "actions/checkout", "v1.1.0")

        assert result.exit_code == 1
        assert "HTTP 502" in result.output


class TestCacheCommands:
    """Test the cache sub-commands against a real database."""

    @pytest.fixture
    def populated(self, tmp_path: Path) -> Path:
        base = tmp_path / "base"
        now = datetime.now(timezone.utc)
        with GitTagCacheDB.from_cache_dir(base / "taghash") as db:
            db.upsert_many(
                [
                    GitTag(
                        repo_id="actions/checkout",
                        tag="v1.1.0",
                        base_tag="v1.1.0",
                        commit_hash=V1_1_0_COMMIT,
                        tag_hash=V1_1_0_TAG_HASH,
                        expires_at=now + timedelta(hours=48),
                    ),
                    GitTag(
                        repo_id="actions/checkout",
                        tag="v4",
                        base_tag="v4",
                        commit_hash=V4_1_6_COMMIT,
                        tag_hash=V4_1_6_COMMIT,
                        expires_at=now - timedelta(hours=1),
                    ),
                ],
                now=now - timedelta(hours=7),
            )
        return base

    def test_info(self, populated: Path) -> None:
        result = _cache("info", populated)

        assert result.exit_code == 0, result.output
        assert "entries: 2\n" in result.stdout
        assert "valid: 1\n" in result.stdout
        assert "expired: 1\n" in result.stdout
        assert "ttl: {tag-alias=6h0m0s, git=1440h0m0s, tag=48h0m0s, query=24h0m0s}" in result.stdout

    def test_prune(self, populated: Path) -> None:
        result = _cache("prune", populated)

        assert result.exit_code == 0, result.output
        assert result.stdout == "pruned 1 expired entries\n"

    def test_prune_as_of_past_keeps_everything(self, populated: Path) -> None:
        result = _cache("prune", populated, "--as-of", "2000-01-01T00:00:00")

        assert result.stdout == "pruned 0 expired entries\n"

    def test_prune_invalid_as_of(self, populated: Path) -> None:
        result = _cache("prune", populated, "--as-of", "yesterday")

        assert result.exit_code == 2
        assert "invalid --as-of timestamp" in result.output

    def test_clear(self, populated: Path) -> None:
        result = _cache("clear", populated)

        assert result.exit_code == 0, result.output
        assert result.stdout == "cleared 2 entries\n"
        with GitTagCacheDB.from_cache_dir(populated / "taghash") as db:
            assert db.get_cache_info()["total_entries"] == 0


class TestMainCallback:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert result.stdout.strip() == f"taghash {__version__}"

    def test_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])

        assert "resolve" in result.output
