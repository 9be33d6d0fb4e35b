"""Service protocols consumed by the resolver core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from taghash.shared.context import OperationContext
    from taghash.shared.models import Hash, Repository


class TagSource(Protocol):
    """Remote bulk tag listing.

    Example:
        >>> source: TagSource = GitHubGraphQLClient(session)
        >>> tags = source.fetch_all_tags(Repository("actions", "checkout"), ctx)
        >>> tags["v1.1.0"].tag_hash
        'ec3afacf7f605c9fc12c70bc1c9e1708ddb99eca'
    """

    def fetch_all_tags(
        self,
        repo: Repository,
        context: OperationContext,
    ) -> dict[str, Hash]:
        """Return every tag of the repository mapped to its hashes.

        The result is complete as of one call; any page failure raises
        TransportError and no partial mapping is returned.
        """


class GitIntrospector(Protocol):
    """Local git queries against a cached clone of the repository."""

    def rev_parse(self, repo: Repository, ref: str, context: OperationContext) -> str:
        """Resolve a ref to its own object hash (tag object for annotated tags)."""

    def rev_list_first(
        self, repo: Repository, ref: str, context: OperationContext
    ) -> str:
        """Resolve a ref to its peeled commit hash."""

    def describe(
        self,
        repo: Repository,
        rev: str,
        context: OperationContext,
        *,
        abbrev0: bool = False,
    ) -> str:
        """Find the nearest reachable tag (``git describe --tags``)."""
