"""``mdagent search``, ``count``, ``meta`` and ``translate`` — one-shot queries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from mdagent.cli_commands._common import run_tool
from mdagent.query.shorthand import translate as translate_query
from mdagent.search.formatting import FORMATS

if TYPE_CHECKING:
    from mdagent.config import ServerConfig


@click.command()
@click.argument("query")
@click.option("--in", "scopes", multiple=True, help="Directory to search in (repeatable).")
@click.option("-n", "--limit", type=int, default=None, help="Maximum number of results.")
@click.option("--sort", default=None, help="name, date, size, created or an attribute; '-' prefix for descending.")
@click.option("--fmt", type=click.Choice(FORMATS), default=None, help="Output format.")
@click.pass_obj
def search(
    config: ServerConfig,
    query: str,
    scopes: tuple[str, ...],
    limit: int | None,
    sort: str | None,
    fmt: str | None,
) -> None:
    """Search the Spotlight index.

    QUERY uses the shorthand syntax (@name:, @content:, @kind:, @type:,
    @tree:, @mod:, @created:, @size:) or a raw MDQuery starting with kMD.
    """
    arguments: dict[str, Any] = {"q": query}
    if scopes:
        arguments["in"] = ",".join(scopes)
    if limit is not None:
        arguments["n"] = limit
    if sort:
        arguments["sort"] = sort
    if fmt:
        arguments["fmt"] = fmt
    run_tool(config, "search", arguments)


@click.command()
@click.argument("query")
@click.option("--in", "scopes", multiple=True, help="Directory to search in (repeatable).")
@click.pass_obj
def count(config: ServerConfig, query: str, scopes: tuple[str, ...]) -> None:
    """Count files matching QUERY."""
    arguments: dict[str, Any] = {"q": query}
    if scopes:
        arguments["in"] = ",".join(scopes)
    run_tool(config, "count", arguments)


@click.command()
@click.argument("path")
@click.pass_obj
def meta(config: ServerConfig, path: str) -> None:
    """Show the Spotlight metadata of PATH."""
    run_tool(config, "meta", {"path": path})


@click.command()
@click.argument("query")
def translate(query: str) -> None:
    """Print the native query that QUERY translates to."""
    click.echo(translate_query(query))
