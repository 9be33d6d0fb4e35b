"""Local git introspection."""

from taghash.services.git.executor import GitDescribeExecutor, current_repository

__all__ = ["GitDescribeExecutor", "current_repository"]
