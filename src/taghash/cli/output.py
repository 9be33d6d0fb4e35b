"""Rendering of resolve results for the text, simple and json formats."""

from __future__ import annotations

import json

from taghash.services.cache_models import GitTag
from taghash.shared.constants import CLIDefaults, OutputFormat


def _dump(body: dict[str, str]) -> str:
    return json.dumps(body, indent=CLIDefaults.JSON_INDENT, sort_keys=True)


def format_tag(entry: GitTag, output_format: OutputFormat, *, show_base_tag: bool = False) -> str:
    """Render one tag found for a hash."""
    tag = entry.base_tag if show_base_tag else entry.tag
    if output_format is OutputFormat.JSON:
        return _dump({CLIDefaults.TAG_KEY: tag})
    return tag


def format_hashes(entry: GitTag, output_format: OutputFormat) -> str:
    """Render the hashes found for a tag.

    ``simple`` prints the tag hash then the commit hash, ``text`` labels
    them; a lightweight tag collapses to its single hash in both.
    """
    if output_format is OutputFormat.JSON:
        return _dump(
            {
                CLIDefaults.COMMIT_HASH_KEY: entry.commit_hash,
                CLIDefaults.TAG_HASH_KEY: entry.tag_hash,
            }
        )

    if entry.is_lightweight:
        return entry.commit_hash

    if output_format is OutputFormat.SIMPLE:
        return f"{entry.tag_hash}\n{entry.commit_hash}"

    return (
        f"{CLIDefaults.TAG_HASH_KEY}: {entry.tag_hash}\n"
        f"{CLIDefaults.COMMIT_HASH_KEY}: {entry.commit_hash}"
    )
