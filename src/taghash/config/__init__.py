"""taghash Configuration Module

This module provides unified access to configuration models and settings
management:
- Settings: Main configuration facade
- Loader functions: get_config, load_settings, reload_config
- Domain models: cache, api, git and logging settings
"""

from __future__ import annotations

from .models import APISettings, CacheSettings, GitSettings, LoggingSettings, Settings
from .loader import get_config, load_settings, reload_config

__all__ = [
    "APISettings",
    "CacheSettings",
    "GitSettings",
    "LoggingSettings",
    "Settings",
    "get_config",
    "load_settings",
    "reload_config",
]
