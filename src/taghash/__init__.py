"""taghash: resolve git tags to hashes and hashes to tags for GitHub repositories."""

__version__ = "0.1.0"
