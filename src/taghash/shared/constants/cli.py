"""CLI constants."""

from enum import Enum


class OutputFormat(str, Enum):
    """Output formats accepted by ``--format``."""

    TEXT = "text"
    SIMPLE = "simple"
    JSON = "json"


class CLIDefaults:
    """CLI default values and exit codes."""

    EXIT_ERROR = 1
    EXIT_INVALID_INPUT = 2

    JSON_INDENT = 4
    COMMIT_HASH_KEY = "commitHash"
    TAG_HASH_KEY = "tagHash"
    TAG_KEY = "tag"


class CLIHelp:
    """Help texts for the Typer application."""

    APP_NAME = "taghash"
    APP_DESCRIPTION = "Resolve git tags to hashes and hashes to tags for GitHub repositories."
    RESOLVE_HELP = "Resolve tags to hashes, or 40-character hashes to tags."
    VALUES_HELP = "Tags or commit/tag hashes to resolve."
    REPO_HELP = "GitHub repository ID (OWNER/NAME). Defaults to the origin remote of the current directory."
    FORMAT_HELP = "Output format (text, simple, json)."
    SHOW_BASE_TAG_HELP = "Show the base tag when resolving a tag from a commit hash."
    CACHE_DIR_HELP = "Cache directory path. Defaults to the user cache directory."
    CACHE_TTL_HELP = "Base cache TTL (time-to-live), e.g. 48h or 1h30m."
    NO_CACHE_HELP = "Clear the cache before resolving and disable the query cache."
    TIMEOUT_HELP = "Abort the command after this many seconds."
    LOG_LEVEL_HELP = "Log level (debug, info, warning, error)."
    CONFIG_HELP = "Path to a TOML configuration file."
    CACHE_APP_HELP = "Inspect and maintain the local cache database."
    PRUNE_HELP = "Delete cache entries that expired before --as-of (default: now)."
    AS_OF_HELP = "ISO-8601 timestamp used as the expiry threshold."
    CLEAR_HELP = "Delete every cache entry."
    INFO_HELP = "Show cache database statistics."
