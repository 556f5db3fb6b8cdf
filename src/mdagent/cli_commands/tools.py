"""``mdagent tools`` — list the tools the server exposes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mdagent.cli_commands._common import build_tools
from mdagent.cli_commands._output import print_tools_table
from mdagent.errors import ConfigError

if TYPE_CHECKING:
    from mdagent.config import ServerConfig


@click.command()
@click.option("--tools", "tool_names", default=None, help="Comma-separated subset to show.")
@click.pass_obj
def tools(config: ServerConfig, tool_names: str | None) -> None:
    """List the available tools and their arguments (* = required)."""
    if tool_names is not None:
        try:
            config = config.merged(enabled_tools=tool_names)
        except ConfigError as exc:
            raise click.UsageError(str(exc)) from exc
    print_tools_table(build_tools(config).definitions())
