"""Data models for search results."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

_SIZE_UNITS = ("K", "M", "G", "T")


class SearchResult(BaseModel):
    """One file returned by the search engine."""

    path: str = Field(..., description="Absolute path of the matching file.")
    name: str | None = Field(default=None, description="File system name.")
    kind: str | None = Field(default=None, description="Localized kind label, e.g. 'Folder'.")
    size: int | None = Field(default=None, description="Size in bytes.")
    modified: datetime | None = Field(default=None, description="Content modification date.")
    created: datetime | None = Field(default=None, description="File system creation date.")
    content_type: str | None = Field(default=None, description="Uniform type identifier.")
    attributes: dict[str, str] = Field(
        default_factory=dict, description="Extra raw attributes, e.g. a custom sort key."
    )

    @property
    def compact(self) -> str:
        """``path|size|date`` with absent fields left out."""
        parts = [self.path]
        if self.size is not None:
            parts.append(human_size(self.size))
        if self.modified is not None:
            parts.append(self.modified.strftime("%Y-%m-%d"))
        return "|".join(parts)

    @property
    def full(self) -> str:
        """Every known field, labelled and pipe-separated."""
        parts = [self.path]
        if self.kind is not None:
            parts.append(f"kind:{self.kind}")
        if self.size is not None:
            parts.append(f"size:{self.size}")
        if self.modified is not None:
            parts.append(f"mod:{iso8601(self.modified)}")
        if self.content_type is not None:
            parts.append(f"type:{self.content_type}")
        return " | ".join(parts)


def human_size(num_bytes: int) -> str:
    """Render a byte count as ``512B``, ``1.5K``, ``20M``..."""
    if num_bytes < 1024:
        return f"{num_bytes}B"
    value = float(num_bytes)
    for unit in _SIZE_UNITS:
        value /= 1024
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            break
    text = f"{value:.1f}".removesuffix(".0")
    return f"{text}{unit}"


def iso8601(moment: datetime) -> str:
    """UTC timestamp in the ``2024-05-01T12:00:00Z`` form."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
