"""Per-command setup: settings, logging and the DI container."""

from __future__ import annotations

import logging
from pathlib import Path

from dependency_injector import providers

from taghash.config.loader import load_settings
from taghash.config.models.settings import Settings
from taghash.containers import Container
from taghash.services.ttl_policy import CacheTTL
from taghash.shared.logging import setup_structured_logger

logger = logging.getLogger(__name__)


def load_cli_settings(
    config_path: Path | None,
    cache_dir: Path | None = None,
    log_level: str | None = None,
) -> Settings:
    """Load settings and apply command-line overrides, then set up logging."""
    settings = load_settings(config_path)

    if cache_dir is not None:
        settings = settings.model_copy(
            update={"cache": settings.cache.model_copy(update={"dir": str(cache_dir)})}
        )
    if log_level:
        settings = settings.model_copy(
            update={"logging": settings.logging.model_copy(update={"level": log_level.upper()})}
        )

    setup_structured_logger(
        level=settings.logging.level,
        log_file=settings.logging.file,
        use_rich_console=settings.logging.rich_console,
    )
    return settings


def build_container(settings: Settings, ttl: CacheTTL | None = None) -> Container:
    """Create a container bound to ``settings`` (and ``ttl`` when given)."""
    container = Container()
    container.config.override(providers.Object(settings))
    if ttl is not None:
        container.cache_ttl.override(providers.Object(ttl))

    logger.debug(
        "Cache TTL: %s",
        ttl if ttl is not None else CacheTTL.parse(settings.cache.ttl),
    )
    return container
