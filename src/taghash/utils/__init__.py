"""Utility helpers for taghash."""

from .paths import make_cache_dir, set_secure_file_permissions, user_cache_dir

__all__ = ["make_cache_dir", "set_secure_file_permissions", "user_cache_dir"]
