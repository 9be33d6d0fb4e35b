"""
taghash Constants Module

Centralized constants for the taghash application. All magic values
(TTL multipliers, table names, CLI defaults, GitHub endpoints) are
defined here so every module shares one source of truth.
"""

from .cache import Cache, CacheTTLRatios
from .cli import CLIDefaults, CLIHelp, OutputFormat
from .git import GitConfig, GitHubConfig, ResolverPhase
from .logging import LoggingDefaults

__all__ = [
    "CLIDefaults",
    "CLIHelp",
    "Cache",
    "CacheTTLRatios",
    "GitConfig",
    "GitHubConfig",
    "LoggingDefaults",
    "OutputFormat",
    "ResolverPhase",
]
