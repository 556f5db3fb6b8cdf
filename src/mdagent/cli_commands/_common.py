"""Helpers shared by the commands that run tools directly."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING, Any

import click

from mdagent.cli_commands._output import print_error
from mdagent.errors import MdagentError
from mdagent.protocol.json_value import JsonValue
from mdagent.search.spotlight import SpotlightEngine
from mdagent.tools.builtin import build_registry

if TYPE_CHECKING:
    from mdagent.config import ServerConfig
    from mdagent.tools.registry import ToolRegistry


def build_engine(config: ServerConfig) -> SpotlightEngine:
    return SpotlightEngine(
        mdfind_path=config.mdfind_path,
        mdls_path=config.mdls_path,
        timeout=config.timeout,
    )


def build_tools(config: ServerConfig) -> ToolRegistry:
    """Build the registry for *config*, reporting bad tool names as usage errors."""
    try:
        return build_registry(build_engine(config), config)
    except MdagentError as exc:
        raise click.UsageError(str(exc)) from exc


def run_tool(config: ServerConfig, name: str, arguments: dict[str, Any]) -> None:
    """Run one tool (ignoring the enabled filter) and echo its text output."""
    registry = build_tools(config.model_copy(update={"enabled_tools": []}))
    args = {key: JsonValue.from_python(value) for key, value in arguments.items()}
    try:
        text = asyncio.run(registry.call(name, args))
    except MdagentError as exc:
        print_error(exc)
        sys.exit(1)
    if text:
        click.echo(text)
