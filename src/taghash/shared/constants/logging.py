"""Logging constants."""


class LoggingDefaults:
    """Default logging configuration."""

    ROOT_LOGGER = "taghash"
    RESOLVER_LOGGER = "taghash.resolver"
    LEVEL = "INFO"
