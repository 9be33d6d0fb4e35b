"""
Cache Configuration Constants

TTL ratios and storage layout for the tag/hash cache database.
"""


class CacheTTLRatios:
    """Ratios applied to the base git tag TTL."""

    GIT_FILE_MULTIPLIER = 30
    ALIAS_TAG_DIVISOR = 8
    QUERY_DIVISOR = 2


class Cache:
    """Cache database constants."""

    APP_DIR_NAME = "taghash"
    DB_FILE_NAME = "cache.sqlite3"
    REPOS_DIR_NAME = "repos"
    TABLE_NAME = "git_tags"
    SCHEMA_VERSION = 1

    DEFAULT_TTL = "48h"
    DEFAULT_DIR_PERM = 0o750
    DEFAULT_BUSY_TIMEOUT_SECONDS = 5.0

    SHA_LENGTH = 40
    SHA_PATTERN = r"^[0-9a-f]{40}$"
