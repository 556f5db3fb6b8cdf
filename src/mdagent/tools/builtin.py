"""The ``search``, ``count`` and ``meta`` tools."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mdagent.config import ServerConfig
from mdagent.query.shorthand import translate
from mdagent.query.sort import parse_sort_spec
from mdagent.search.formatting import format_results
from mdagent.tools.registry import Tool, ToolArguments, ToolDef, ToolRegistry

if TYPE_CHECKING:
    from mdagent.search.engine import SearchEngine

logger = logging.getLogger(__name__)

# Tool descriptions carry the whole usage doc to keep tools/list small.
SEARCH_DESCRIPTION = (
    "Spotlight search. Query: @name:*.swift @content:TODO @kind:folder "
    "@type:public.swift-source @mod:7 @size:>1M (or raw MDQuery). "
    "Returns path|size|date."
)

SEARCH_TOOL = ToolDef(
    name="search",
    description=SEARCH_DESCRIPTION,
    properties={
        "q": "string",
        "in": "string",
        "n": "integer",
        "sort": "string",
        "fmt": "string",
    },
    required=["q"],
)

COUNT_TOOL = ToolDef(
    name="count",
    description="Count matching files. Same query syntax as search.",
    properties={"q": "string", "in": "string"},
    required=["q"],
)

META_TOOL = ToolDef(
    name="meta",
    description="Get file metadata via Spotlight.",
    properties={"path": "string"},
    required=["path"],
)


def parse_scopes(value: str | None) -> list[str] | None:
    """Split a comma-separated scope list; ``None`` means search everywhere."""
    if value is None:
        return None
    scopes = [scope.strip() for scope in value.split(",") if scope.strip()]
    return scopes or None


class SpotlightTools:
    """Tool handlers backed by a :class:`~mdagent.search.engine.SearchEngine`."""

    def __init__(self, engine: SearchEngine, config: ServerConfig | None = None) -> None:
        self._engine = engine
        self._config = config or ServerConfig()

    async def search(self, args: ToolArguments) -> str:
        query = translate(args.require_string("q"))
        scopes = parse_scopes(args.string("in"))
        limit = args.integer("n")
        if limit is None:
            limit = self._config.default_limit
        sort = parse_sort_spec(args.string("sort"))
        fmt = args.string("fmt") or self._config.default_format

        logger.debug("search %r scopes=%s limit=%d sort=%s", query, scopes, limit, sort)
        results = await self._engine.execute(
            query,
            scopes=scopes,
            limit=limit,
            sort_by=sort.attribute if sort else None,
            descending=sort.descending if sort else True,
        )
        return format_results(results, fmt)

    async def count(self, args: ToolArguments) -> str:
        query = translate(args.require_string("q"))
        scopes = parse_scopes(args.string("in"))
        total = await self._engine.count(query, scopes=scopes)
        return str(total)

    async def meta(self, args: ToolArguments) -> str:
        return await self._engine.metadata(args.require_string("path"))

    def tools(self) -> list[Tool]:
        return [
            Tool(SEARCH_TOOL, self.search),
            Tool(COUNT_TOOL, self.count),
            Tool(META_TOOL, self.meta),
        ]


def build_registry(engine: SearchEngine, config: ServerConfig | None = None) -> ToolRegistry:
    """Create the registry of built-in tools, filtered by ``config.enabled_tools``."""
    config = config or ServerConfig()
    return ToolRegistry(SpotlightTools(engine, config).tools(), enabled=config.enabled_tools)
