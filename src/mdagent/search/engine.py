"""SearchEngine protocol — the interface to the indexed-search collaborator.

The tools only talk to this protocol, so the Spotlight adapter can be swapped
for a fake in tests or another index backend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mdagent.search.models import SearchResult


@runtime_checkable
class SearchEngine(Protocol):
    """Runs native queries and looks up file metadata."""

    async def execute(
        self,
        query: str,
        *,
        scopes: list[str] | None = None,
        limit: int = 100,
        sort_by: str | None = None,
        descending: bool = True,
    ) -> list[SearchResult]:
        """Return up to *limit* results for a native *query*.

        Raises:
            QueryError: If the engine rejects or fails to run the query.
        """
        ...

    async def count(self, query: str, *, scopes: list[str] | None = None) -> int:
        """Return the number of files matching *query*."""
        ...

    async def metadata(self, path: str) -> str:
        """Return a formatted attribute dump for *path*.

        Raises:
            MetadataError: If *path* is not indexed.
        """
        ...
