"""mdagent CLI entrypoint."""

from __future__ import annotations

from pathlib import Path

import click

from mdagent import __version__
from mdagent.cli_commands._output import configure_logging
from mdagent.config import ServerConfig, load_config
from mdagent.errors import ConfigError

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.version_option(version=__version__, prog_name="mdagent")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    envvar="MDAGENT_CONFIG",
    help="YAML config file.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log level (logs go to stderr).",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, log_level: str) -> None:
    """mdagent — Spotlight search for agents."""
    configure_logging(log_level)
    try:
        ctx.obj = load_config(config_path) if config_path else ServerConfig()
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc


# Register subcommands
from mdagent.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
