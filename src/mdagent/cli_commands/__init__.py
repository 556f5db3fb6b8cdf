"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from mdagent.cli_commands.search import count, meta, search, translate
    from mdagent.cli_commands.serve import serve
    from mdagent.cli_commands.tools import tools

    cli.add_command(serve)
    cli.add_command(search)
    cli.add_command(count)
    cli.add_command(meta)
    cli.add_command(translate)
    cli.add_command(tools)
