"""Text renderings of search results returned to the caller."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mdagent.search.models import SearchResult

FORMATS = ("compact", "full", "paths")
DEFAULT_FORMAT = "compact"


def format_results(results: Sequence[SearchResult], fmt: str = DEFAULT_FORMAT) -> str:
    """Render one line per result.

    ``paths`` prints bare paths, ``full`` every known field, and anything
    else (including ``compact``) the terse ``path|size|date`` form.
    """
    if fmt == "paths":
        return "\n".join(r.path for r in results)
    if fmt == "full":
        return "\n".join(r.full for r in results)
    return "\n".join(r.compact for r in results)
