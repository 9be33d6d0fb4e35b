"""Settings loader and singleton manager.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- Thread-safe singleton pattern for Settings instance
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import toml
from dotenv import load_dotenv
from pydantic import ValidationError

from taghash.config.models.settings import Settings
from taghash.shared.constants import Cache
from taghash.shared.errors import create_config_error

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = f"{Cache.APP_DIR_NAME}.toml"


def default_config_paths() -> list[Path]:
    """Configuration files tried in order when no path is given."""
    return [
        Path(CONFIG_FILE_NAME),
        Path.home() / ".config" / Cache.APP_DIR_NAME / "config.toml",
    ]


class SettingsLoader:
    """Thread-safe singleton manager for Settings.

    Uses double-checked locking pattern to ensure thread-safety
    while minimizing lock overhead.
    """

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        """Get the global settings instance (thread-safe).

        Returns:
            The global Settings instance, loading it if necessary.
        """
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()

        return self._instance

    def reload_config(self, config_path: str | Path | None = None) -> Settings:
        """Reload the global settings instance from configuration files.

        Returns:
            The reloaded Settings instance.
        """
        with self._lock:
            self._instance = load_settings(config_path)

        return self._instance


def _load_env_file(env_file: Path = Path(".env")) -> None:
    """Load environment variables from a .env file when one exists.

    Variables already set in the process environment win.
    """
    if env_file.exists():
        load_dotenv(env_file, override=False)
        logger.debug("Loaded environment file: %s", env_file)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from TOML configuration file or environment.

    Args:
        config_path: Optional path to TOML configuration file. If None, tries
            the default locations, then environment variables alone.

    Returns:
        Settings instance loaded from the specified source

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    _load_env_file()

    if config_path:
        candidates = [Path(config_path)]
    else:
        candidates = [p for p in default_config_paths() if p.exists()][:1]

    try:
        if candidates:
            return Settings.from_toml_file(candidates[0])
        return Settings()
    except FileNotFoundError as e:
        raise create_config_error(str(e), config_key="config", original_error=e) from e
    except toml.TomlDecodeError as e:
        raise create_config_error(
            f"invalid TOML in {candidates[0]}: {e}", config_key="config", original_error=e
        ) from e
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first["loc"])
        raise create_config_error(
            f"invalid setting {key}: {first['msg']}", config_key=key, original_error=e
        ) from e


# Global loader instance
_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance (thread-safe)."""
    return _loader.get_config()


def reload_config(config_path: str | Path | None = None) -> Settings:
    """Reload the global settings instance from configuration files."""
    return _loader.reload_config(config_path)
