"""Shared fixtures: a mocked search engine and the objects built on it."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from mdagent.protocol.dispatcher import MethodDispatcher
from mdagent.search.models import SearchResult
from mdagent.tools.builtin import build_registry
from mdagent.tools.registry import ToolRegistry

SAMPLE_RESULTS = [
    SearchResult(
        path="/Users/me/notes/todo.txt",
        name="todo.txt",
        kind="Plain Text Document",
        size=2048,
        modified=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        content_type="public.plain-text",
    ),
    SearchResult(path="/Users/me/src", kind="Folder"),
]


def make_engine(
    results: list[SearchResult] | None = None,
    total: int = 0,
    metadata: str = "kMDItemKind: Folder",
) -> MagicMock:
    engine = MagicMock()
    engine.execute = AsyncMock(return_value=SAMPLE_RESULTS if results is None else results)
    engine.count = AsyncMock(return_value=total)
    engine.metadata = AsyncMock(return_value=metadata)
    return engine


@pytest.fixture
def engine() -> MagicMock:
    return make_engine(total=42)


@pytest.fixture
def registry(engine: MagicMock) -> ToolRegistry:
    return build_registry(engine)


@pytest.fixture
def dispatcher(registry: ToolRegistry) -> MethodDispatcher:
    return MethodDispatcher(registry)
