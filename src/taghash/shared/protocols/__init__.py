"""Protocol definitions for dependency inversion.

The resolver core depends on these protocols only, so the GitHub client
and the git executor can be swapped for fakes in tests.
"""

from __future__ import annotations

from .services import GitIntrospector, TagSource

__all__ = ["GitIntrospector", "TagSource"]
