"""Server configuration — defaults, YAML loading and CLI overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from mdagent import __version__
from mdagent.errors import ConfigError


class ServerConfig(BaseModel):
    """Settings shared by the stdio server and the one-shot CLI commands."""

    server_name: str = Field(default="mdagent", description="Name reported by initialize.")
    server_version: str = Field(default=__version__, description="Version reported by initialize.")
    protocol_version: str = Field(default="2024-11-05", description="MCP protocol revision.")
    enabled_tools: list[str] = Field(
        default_factory=list, description="Tools to expose; empty means all."
    )
    default_limit: int = Field(default=100, ge=0, description="Result cap when 'n' is absent.")
    default_format: Literal["compact", "full", "paths"] = Field(
        default="compact", description="Output format when 'fmt' is absent."
    )
    mdfind_path: str = Field(default="mdfind", description="mdfind executable.")
    mdls_path: str = Field(default="mdls", description="mdls executable.")
    timeout: float | None = Field(
        default=None, gt=0, description="Seconds before a search subprocess is killed."
    )

    @field_validator("enabled_tools", mode="before")
    @classmethod
    def split_tool_names(cls, value: Any) -> Any:
        """Accept ``"search,count"`` as well as a list."""
        if isinstance(value, str):
            return [name.strip() for name in value.split(",") if name.strip()]
        return value

    def merged(self, **overrides: Any) -> ServerConfig:
        """Return a copy with every non-``None`` override applied and revalidated."""
        data = self.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        try:
            return ServerConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def load_config(path: Path) -> ServerConfig:
    """Read a YAML config file, interpolate env vars, and validate.

    Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
    using :func:`os.path.expandvars` before YAML parsing. An empty file
    yields the defaults.

    Raises:
        ConfigError: On unreadable files, YAML errors or invalid settings.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    expanded = os.path.expandvars(raw)

    try:
        data: Any = yaml.safe_load(expanded)
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")

    try:
        return ServerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
