"""Tests for cache directory helpers."""

from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from taghash.shared.errors import ErrorCode, StorageError
from taghash.utils.paths import make_cache_dir, set_secure_file_permissions, user_cache_dir

posix_only = pytest.mark.skipif(sys.platform in ("win32", "darwin"), reason="XDG layout")


class TestUserCacheDir:
    @posix_only
    def test_xdg_cache_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg"))

        assert user_cache_dir() == tmp_path / "xdg"

    @posix_only
    def test_relative_xdg_is_ignored(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_CACHE_HOME", "relative/cache")
        monkeypatch.setenv("HOME", str(tmp_path))

        assert user_cache_dir() == tmp_path / ".cache"


class TestMakeCacheDir:
    def test_explicit_base(self, tmp_path: Path) -> None:
        cache_dir = make_cache_dir(tmp_path / "base")

        assert cache_dir == (tmp_path / "base" / "taghash").resolve()
        assert cache_dir.is_dir()

    @posix_only
    def test_blank_base_uses_user_cache_dir(self, tmp_path: Path) -> None:
        # conftest points XDG_CACHE_HOME at tmp_path / "xdg-cache"
        assert make_cache_dir("  ") == (tmp_path / "xdg-cache" / "taghash").resolve()

    @posix_only
    def test_dir_perm(self, tmp_path: Path) -> None:
        cache_dir = make_cache_dir(tmp_path / "base", dir_perm=0o700)

        assert stat.S_IMODE(cache_dir.stat().st_mode) & 0o077 == 0

    def test_uncreatable_directory(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        with pytest.raises(StorageError) as exc_info:
            make_cache_dir(blocker)

        assert exc_info.value.code == ErrorCode.DIRECTORY_CREATION_FAILED


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_set_secure_file_permissions(tmp_path: Path) -> None:
    path = tmp_path / "cache.sqlite3"
    path.write_text("")

    set_secure_file_permissions(path)

    assert stat.S_IMODE(path.stat().st_mode) == 0o600
