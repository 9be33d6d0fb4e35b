"""taghash Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from taghash.config.models.api_settings import APISettings
from taghash.config.models.app_settings import LoggingSettings
from taghash.config.models.cache_settings import CacheSettings
from taghash.config.models.git_settings import GitSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Settings facade providing unified configuration access.

    Values come from (highest priority first) ``TAGHASH_*`` environment
    variables, a TOML file, then field defaults. Nested fields use ``__``,
    e.g. ``TAGHASH_CACHE__TTL=12h``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TAGHASH_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    cache: CacheSettings = Field(default_factory=CacheSettings)
    api: APISettings = Field(default_factory=APISettings)
    git: GitSettings = Field(default_factory=GitSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # file values arrive as init kwargs; the environment overrides them
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        logger.debug("Loaded configuration file: %s", file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file.

        The API token is never written; keep it in GH_TOKEN or ``.env``.
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(exclude_none=True)
        data["api"].pop("token", None)
        with file_path.open("w", encoding="utf-8") as f:
            toml.dump(data, f)


__all__ = ["Settings"]
