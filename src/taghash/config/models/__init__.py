"""Configuration domain models."""

from __future__ import annotations

from .api_settings import APISettings
from .app_settings import LoggingSettings
from .cache_settings import CacheSettings
from .git_settings import GitSettings
from .settings import Settings

__all__ = [
    "APISettings",
    "CacheSettings",
    "GitSettings",
    "LoggingSettings",
    "Settings",
]
