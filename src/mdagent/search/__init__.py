"""Search layer — the indexed-search collaborator and result rendering."""

from mdagent.search.engine import SearchEngine
from mdagent.search.formatting import FORMATS, format_results
from mdagent.search.models import SearchResult
from mdagent.search.spotlight import SpotlightEngine

__all__ = [
    "FORMATS",
    "SearchEngine",
    "SearchResult",
    "SpotlightEngine",
    "format_results",
]
