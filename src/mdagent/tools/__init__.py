"""Tool layer — the registry and the built-in Spotlight tools."""

from mdagent.tools.builtin import SpotlightTools, build_registry
from mdagent.tools.registry import Tool, ToolArguments, ToolDef, ToolRegistry

__all__ = [
    "SpotlightTools",
    "Tool",
    "ToolArguments",
    "ToolDef",
    "ToolRegistry",
    "build_registry",
]
