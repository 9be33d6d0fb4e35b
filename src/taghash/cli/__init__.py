"""Command-line interface for taghash."""
