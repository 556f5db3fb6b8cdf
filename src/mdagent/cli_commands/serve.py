"""``mdagent serve`` — run the JSON-RPC tool server on stdio."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import click

from mdagent.cli_commands._common import build_tools
from mdagent.errors import ConfigError
from mdagent.protocol.dispatcher import MethodDispatcher
from mdagent.protocol.transport import StdioServer
from mdagent.utils.telemetry import configure_telemetry

if TYPE_CHECKING:
    from mdagent.config import ServerConfig

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--tools",
    "tool_names",
    default=None,
    help="Comma-separated tools to expose (default: all).",
)
@click.option("--trace", is_flag=True, help="Export OpenTelemetry spans to stderr.")
@click.option("--otlp-endpoint", default=None, help="Export OpenTelemetry spans via OTLP/gRPC.")
@click.pass_obj
def serve(
    config: ServerConfig,
    tool_names: str | None,
    trace: bool,
    otlp_endpoint: str | None,
) -> None:
    """Serve search tools over newline-delimited JSON-RPC on stdin/stdout."""
    try:
        config = config.merged(enabled_tools=tool_names)
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc

    if trace or otlp_endpoint:
        try:
            configure_telemetry(
                service_name=config.server_name,
                service_version=config.server_version,
                export_to_console=trace,
                otlp_endpoint=otlp_endpoint,
            )
        except ImportError as exc:
            raise click.ClickException(str(exc)) from exc

    registry = build_tools(config)
    logger.info("Exposing tools: %s", ", ".join(registry.names()))
    server = StdioServer(MethodDispatcher(registry, config))
    asyncio.run(server.serve())
