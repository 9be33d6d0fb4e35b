"""Cache directory and file permission utilities.

Cross-platform helpers for locating the user cache directory and
creating the taghash cache directory with restricted permissions.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from taghash.shared.constants import Cache
from taghash.shared.errors import ErrorCode, create_storage_error

logger = logging.getLogger(__name__)


def user_cache_dir() -> Path:
    """Return the platform user cache directory.

    - Windows: %LOCALAPPDATA%
    - macOS: ~/Library/Caches
    - other: $XDG_CACHE_HOME or ~/.cache
    """
    if sys.platform == "win32":
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            return Path(local_app_data)
        return Path.home() / "AppData" / "Local"

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches"

    xdg_cache_home = os.environ.get("XDG_CACHE_HOME", "").strip()
    if xdg_cache_home and Path(xdg_cache_home).is_absolute():
        return Path(xdg_cache_home)
    return Path.home() / ".cache"


def make_cache_dir(
    dir_path: str | Path | None = None,
    dir_perm: int = Cache.DEFAULT_DIR_PERM,
) -> Path:
    """Create and return ``<dir_path or user cache dir>/taghash``.

    Args:
        dir_path: Base directory; blank or None selects the user cache dir
        dir_perm: Permission bits for newly created directories

    Returns:
        Absolute path to the taghash cache directory

    Raises:
        StorageError: If the directory cannot be created
    """
    base = str(dir_path).strip() if dir_path is not None else ""
    base_path = Path(base).expanduser() if base else user_cache_dir()
    cache_dir = (base_path / Cache.APP_DIR_NAME).resolve()

    try:
        cache_dir.mkdir(mode=dir_perm, parents=True, exist_ok=True)
    except OSError as e:
        raise create_storage_error(
            f"failed to create a cache directory: {cache_dir}",
            operation="make_cache_dir",
            code=ErrorCode.DIRECTORY_CREATION_FAILED,
            additional_data={"path": str(cache_dir)},
            original_error=e,
        ) from e

    return cache_dir


def set_secure_file_permissions(file_path: Path | str) -> None:
    """Set owner-only read/write permissions (600) on POSIX systems."""
    file_path = Path(file_path)
    if sys.platform == "win32":
        # NTFS ACLs are inherited from the user profile directory
        return

    file_path.chmod(0o600)
    logger.debug("Unix permissions (600) set for: %s", file_path)
