"""Shared CLI output helpers and logging setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from mdagent.tools.registry import ToolDef

console = Console()

# stdout belongs to the JSON-RPC stream while serving, so logs go here.
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Send ``mdagent`` log records to stderr through rich."""
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
    root = logging.getLogger("mdagent")
    root.handlers[:] = [handler]
    root.setLevel(level.upper())


def print_error(message: object) -> None:
    console.print(f"[red]Error:[/red] {escape(str(message))}")


def print_tools_table(definitions: list[ToolDef]) -> None:
    """Pretty-print tool definitions as a table."""
    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Arguments")
    table.add_column("Description")

    for definition in definitions:
        args = ", ".join(
            f"{name}*" if name in definition.required else name
            for name in definition.properties
        )
        table.add_row(definition.name, args, _truncate(definition.description))

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
