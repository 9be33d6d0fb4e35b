"""Cache TTL policy.

One user-facing duration (the lifetime of an ordinary tag's cache entry)
fans out into four lifetimes calibrated to each data source:

- git_file_ttl: local clone data, far more expensive to refresh
- git_alias_tag_ttl: tags sharing a hash with another tag, likely to move
- git_tag_ttl: ordinary tags
- query_ttl: the GraphQL response cache
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import timedelta

from taghash.shared.constants import Cache, CacheTTLRatios
from taghash.shared.errors import create_config_error

_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,  # micro sign
    "μs": 1,  # greek mu
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
}

_COMPONENT_RE = re.compile(r"(\d*\.?\d*)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a Go-style duration string such as ``48h``, ``1h30m`` or ``1.5s``.

    Args:
        text: Duration string

    Returns:
        Parsed duration

    Raises:
        ConfigurationError: If the string is malformed or negative
    """
    value = text.strip()
    if value in ("0", "+0", "-0"):
        return timedelta(0)

    sign = 1
    if value[:1] in ("+", "-"):
        sign = -1 if value[0] == "-" else 1
        value = value[1:]

    if not value:
        raise create_config_error(f'invalid duration "{text}"', config_key="cache.ttl")

    total_us = 0.0
    pos = 0
    while pos < len(value):
        match = _COMPONENT_RE.match(value, pos)
        if match is None or match.group(1) in ("", "."):
            raise create_config_error(
                f'invalid duration "{text}"', config_key="cache.ttl"
            )
        total_us += float(match.group(1)) * _UNIT_MICROSECONDS[match.group(2)]
        pos = match.end()

    if sign < 0 and total_us > 0:
        raise create_config_error(
            f'duration must not be negative: "{text}"', config_key="cache.ttl"
        )

    return timedelta(microseconds=total_us)


def format_duration(duration: timedelta) -> str:
    """Format a duration the way Go prints ``time.Duration`` (``7m30s``, ``30h0m0s``)."""
    total = duration.total_seconds()
    if total == 0:
        return "0s"

    sign = "-" if total < 0 else ""
    total = abs(total)
    if total < 1:
        return f"{sign}{total * 1000:g}ms"

    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    seconds_text = f"{seconds:.6f}".rstrip("0").rstrip(".")
    if hours:
        return f"{sign}{int(hours)}h{int(minutes)}m{seconds_text}s"
    if minutes:
        return f"{sign}{int(minutes)}m{seconds_text}s"
    return f"{sign}{seconds_text}s"


@dataclass(frozen=True)
class CacheTTL:
    """Time-to-live settings derived from the base tag TTL."""

    git_alias_tag_ttl: timedelta
    git_file_ttl: timedelta
    git_tag_ttl: timedelta
    query_ttl: timedelta

    @classmethod
    def from_base(cls, git_tag_ttl: timedelta) -> CacheTTL:
        return cls(
            git_alias_tag_ttl=git_tag_ttl / CacheTTLRatios.ALIAS_TAG_DIVISOR,
            git_file_ttl=git_tag_ttl * CacheTTLRatios.GIT_FILE_MULTIPLIER,
            git_tag_ttl=git_tag_ttl,
            query_ttl=git_tag_ttl / CacheTTLRatios.QUERY_DIVISOR,
        )

    @classmethod
    def parse(cls, text: str = Cache.DEFAULT_TTL) -> CacheTTL:
        """Parse a base TTL string and derive the policy.

        Raises:
            ConfigurationError: If the duration string is invalid
        """
        return cls.from_base(parse_duration(text))

    def without_query_cache(self) -> CacheTTL:
        """Copy with the GraphQL response cache disabled."""
        return replace(self, query_ttl=timedelta(0))

    def __str__(self) -> str:
        return (
            f"{{tag-alias={format_duration(self.git_alias_tag_ttl)}, "
            f"git={format_duration(self.git_file_ttl)}, "
            f"tag={format_duration(self.git_tag_ttl)}, "
            f"query={format_duration(self.query_ttl)}}}"
        )
