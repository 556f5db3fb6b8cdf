"""ToolRegistry — the fixed set of tools the server exposes.

The registry is built once at startup, optionally narrowed to an enabled
subset, and is read-only afterwards. ``call`` checks that the tool exists
and that every required argument is present with its declared type before
the handler runs.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mdagent.errors import ConfigError, InvalidParamsError, ToolNotFoundError
from mdagent.protocol.json_value import JsonKind, JsonValue

# JSON Schema type name -> accepted value variant.
SCHEMA_TYPES: dict[str, tuple[JsonKind, ...]] = {
    "string": (JsonKind.STRING,),
    "integer": (JsonKind.INT,),
    "number": (JsonKind.INT, JsonKind.DOUBLE),
    "boolean": (JsonKind.BOOL,),
    "array": (JsonKind.ARRAY,),
    "object": (JsonKind.OBJECT,),
}


class ToolDef(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    properties: dict[str, str] = Field(
        default_factory=dict, description="Argument name -> JSON Schema type."
    )
    required: list[str] = Field(default_factory=list)

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {name: {"type": kind} for name, kind in self.properties.items()},
            "required": list(self.required),
        }

    def to_python(self) -> dict[str, Any]:
        """Return the wire shape (``inputSchema`` in camelCase)."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolArguments:
    """Soft, typed access to a ``tools/call`` arguments object.

    ``string``/``integer`` return ``None`` for absent or mistyped values so
    optional arguments fall back to defaults; ``require_*`` raise
    :class:`InvalidParamsError` instead.
    """

    def __init__(self, values: dict[str, JsonValue] | None = None) -> None:
        self._values = dict(values or {})

    def get(self, key: str) -> JsonValue | None:
        return self._values.get(key)

    def string(self, key: str) -> str | None:
        value = self._values.get(key)
        return value.as_string() if value is not None else None

    def integer(self, key: str) -> int | None:
        value = self._values.get(key)
        return value.as_int() if value is not None else None

    def require_string(self, key: str) -> str:
        value = self.string(key)
        if value is None:
            raise InvalidParamsError(f"Missing required argument '{key}'")
        return value

ToolHandler = Callable[[ToolArguments], Awaitable[str]]


class Tool:
    """A tool definition bound to the coroutine that implements it."""

    def __init__(self, definition: ToolDef, handler: ToolHandler) -> None:
        self.definition = definition
        self.handler = handler

    @property
    def name(self) -> str:
        return self.definition.name


class ToolRegistry:
    """Immutable name-to-tool map, filtered to the enabled subset.

    Usage::

        registry = ToolRegistry(tools, enabled=["search", "count"])
        registry.definitions()                      # for tools/list
        text = await registry.call("search", args)  # for tools/call
    """

    def __init__(self, tools: Iterable[Tool], enabled: Iterable[str] = ()) -> None:
        available = {tool.name: tool for tool in tools}
        wanted = list(dict.fromkeys(enabled))
        unknown = [name for name in wanted if name not in available]
        if unknown:
            msg = f"Unknown tool(s): {', '.join(unknown)}. Available: {', '.join(available)}"
            raise ConfigError(msg)
        self._tools = {
            name: tool for name, tool in available.items() if not wanted or name in wanted
        }

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDef]:
        return [tool.definition for tool in self._tools.values()]

    def get(self, name: str) -> Tool:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    async def call(self, name: str, arguments: dict[str, JsonValue] | None = None) -> str:
        """Validate *arguments* against the tool's schema and run it."""
        tool = self.get(name)
        args = ToolArguments(arguments)
        _check_required(tool.definition, args)
        return await tool.handler(args)


def _check_required(definition: ToolDef, args: ToolArguments) -> None:
    for key in definition.required:
        value = args.get(key)
        if value is None or value.is_null:
            raise InvalidParamsError(f"Missing required argument '{key}' for tool '{definition.name}'")
        declared = definition.properties.get(key)
        accepted = SCHEMA_TYPES.get(declared or "")
        if accepted is not None and value.kind not in accepted:
            raise InvalidParamsError(f"Argument '{key}' of tool '{definition.name}' must be a {declared}")
