"""SpotlightEngine — runs queries through the ``mdfind`` and ``mdls`` tools.

``mdfind`` finds the matching paths, ``mdls -raw`` fetches the attributes
needed for sorting and formatting in batches, and ``mdls`` alone produces
the metadata dump for a single path. Every call is a subprocess, awaited
without blocking the event loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
from datetime import datetime
from typing import Any

from mdagent.errors import EngineUnavailableError, MetadataError, QueryError
from mdagent.query.builder import (
    ATTR_CONTENT_TYPE,
    ATTR_CREATED,
    ATTR_KIND,
    ATTR_MODIFIED,
    ATTR_NAME,
    ATTR_SIZE,
)
from mdagent.search.models import SearchResult, iso8601

logger = logging.getLogger(__name__)

# Attribute fetched for every hit, mapped to its SearchResult field.
RESULT_FIELDS: dict[str, str] = {
    ATTR_NAME: "name",
    ATTR_KIND: "kind",
    ATTR_SIZE: "size",
    ATTR_MODIFIED: "modified",
    ATTR_CREATED: "created",
    ATTR_CONTENT_TYPE: "content_type",
}

MDLS_BATCH_SIZE = 200

_NULL_MARKER = "(null)"
_QUERY_FAILED = "Failed to create query"
_NOT_FOUND = "could not find"
_MDLS_DATE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} [+-]\d{4}")
_MDLS_LINE = re.compile(r"^(\w+)\s*=\s*(.*)$")


class SpotlightEngine:
    """Satisfies :class:`~mdagent.search.engine.SearchEngine` on macOS.

    Usage::

        engine = SpotlightEngine()
        results = await engine.execute('kMDItemFSName == "*.py"cd', limit=10)
    """

    def __init__(
        self,
        *,
        mdfind_path: str = "mdfind",
        mdls_path: str = "mdls",
        timeout: float | None = None,
    ) -> None:
        self._mdfind = mdfind_path
        self._mdls = mdls_path
        self._timeout = timeout

    async def execute(
        self,
        query: str,
        *,
        scopes: list[str] | None = None,
        limit: int = 100,
        sort_by: str | None = None,
        descending: bool = True,
    ) -> list[SearchResult]:
        """Find, describe, sort and truncate the results of *query*.

        Without *sort_by* only the first *limit* paths are described. A sorted
        search has to describe every hit before truncating, which costs one
        ``mdls`` run per :data:`MDLS_BATCH_SIZE` paths, so broad sorted
        queries are slower.
        """
        if limit <= 0:
            return []
        paths = await self._find(query, scopes)
        if sort_by is None:
            return await self._describe(paths[:limit])

        results = await self._describe(paths, extra=sort_by)
        return sort_results(results, sort_by, descending=descending)[:limit]

    async def count(self, query: str, *, scopes: list[str] | None = None) -> int:
        """Count matches with ``mdfind -count``."""
        stdout = await self._mdfind_output("-count", *_scope_args(scopes), query, query=query)
        try:
            return int(stdout.strip())
        except ValueError as exc:
            raise QueryError(query, f"unexpected count output {stdout.strip()!r}") from exc

    async def metadata(self, path: str) -> str:
        """Return ``name: value`` lines for every attribute ``mdls`` reports."""
        code, stdout, stderr = await self._run(self._mdls, path)
        if code != 0 or _NOT_FOUND in stderr:
            raise MetadataError(path, stderr.strip())
        attributes = parse_mdls(stdout)
        if not attributes:
            raise MetadataError(path, "not indexed")
        return format_metadata(attributes)

    # -- internals ----------------------------------------------------------

    async def _find(self, query: str, scopes: list[str] | None) -> list[str]:
        stdout = await self._mdfind_output("-0", *_scope_args(scopes), query, query=query)
        return [path for path in stdout.split("\0") if path]

    async def _mdfind_output(self, *args: str, query: str) -> str:
        code, stdout, stderr = await self._run(self._mdfind, *args)
        if code != 0 or _QUERY_FAILED in stderr:
            raise QueryError(query, stderr.strip())
        return stdout

    async def _describe(self, paths: list[str], extra: str | None = None) -> list[SearchResult]:
        names = list(RESULT_FIELDS)
        if extra is not None and extra not in RESULT_FIELDS:
            names.append(extra)

        results: list[SearchResult] = []
        for start in range(0, len(paths), MDLS_BATCH_SIZE):
            batch = paths[start : start + MDLS_BATCH_SIZE]
            name_args = [arg for name in names for arg in ("-name", name)]
            code, stdout, stderr = await self._run(
                self._mdls, "-raw", "-nullMarker", _NULL_MARKER, *name_args, *batch
            )
            values = stdout.split("\0")
            if code != 0 or len(values) < len(batch) * len(names):
                # A path vanished between find and describe; keep the bare path.
                logger.warning("mdls could not describe %d path(s): %s", len(batch), stderr.strip())
                results.extend(SearchResult(path=path) for path in batch)
                continue
            for index, path in enumerate(batch):
                row = values[index * len(names) : (index + 1) * len(names)]
                results.append(_to_result(path, dict(zip(names, row))))
        return results

    async def _run(self, *command: str) -> tuple[int, str, str]:
        logger.debug("Running %s", command[0])
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise EngineUnavailableError(f"Cannot run {command[0]}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except TimeoutError:
            await _reap(proc)
            raise EngineUnavailableError(f"{command[0]} timed out after {self._timeout}s") from None

        return (
            proc.returncode or 0,
            stdout.decode(errors="replace") if stdout else "",
            stderr.decode(errors="replace") if stderr else "",
        )


def sort_results(
    results: list[SearchResult], attribute: str, *, descending: bool = False
) -> list[SearchResult]:
    """Order *results* by *attribute*; results lacking it go last."""
    present = [r for r in results if _sort_value(r, attribute) is not None]
    missing = [r for r in results if _sort_value(r, attribute) is None]
    present.sort(key=lambda r: _sort_value(r, attribute), reverse=descending)
    return present + missing


def parse_mdls(text: str) -> dict[str, str | list[str]]:
    """Parse plain ``mdls`` output into attribute name → value(s)."""
    attributes: dict[str, str | list[str]] = {}
    current: str | None = None
    items: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if current is not None:
            if stripped == ")":
                attributes[current] = items
                current, items = None, []
            elif stripped:
                items.append(_unquote(stripped.rstrip(",")))
            continue
        match = _MDLS_LINE.match(stripped)
        if match is None:
            continue
        name, value = match.groups()
        if value == "(":
            current = name
        elif value != _NULL_MARKER:
            attributes[name] = _unquote(value)
    return attributes


def format_metadata(attributes: dict[str, str | list[str]]) -> str:
    lines = []
    for name in sorted(attributes):
        value = attributes[name]
        if isinstance(value, list):
            text = ", ".join(_format_scalar(v) for v in value)
        else:
            text = _format_scalar(value)
        lines.append(f"{name}: {text}")
    return "\n".join(lines)


async def _reap(proc: asyncio.subprocess.Process) -> None:
    """Kill *proc* and wait for it so it does not linger as a zombie."""
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
    await proc.wait()


def _scope_args(scopes: list[str] | None) -> list[str]:
    return [arg for scope in scopes or [] for arg in ("-onlyin", scope)]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _format_scalar(value: str) -> str:
    if _MDLS_DATE.fullmatch(value):
        return iso8601(_parse_date(value))
    return value


def _parse_date(value: str) -> datetime:
    return datetime.strptime(value, "%Y-%m-%d %H:%M:%S %z")


def _to_result(path: str, raw: dict[str, str]) -> SearchResult:
    fields: dict[str, Any] = {"path": path}
    attributes: dict[str, str] = {}
    for name, value in raw.items():
        if value == _NULL_MARKER:
            continue
        field = RESULT_FIELDS.get(name)
        if field is None:
            attributes[name] = value
        elif field == "size":
            fields[field] = int(value) if value.isdigit() else None
        elif field in ("modified", "created"):
            fields[field] = _parse_date(value) if _MDLS_DATE.fullmatch(value) else None
        else:
            fields[field] = value
    return SearchResult(**fields, attributes=attributes)


def _sort_value(result: SearchResult, attribute: str) -> Any:
    field = RESULT_FIELDS.get(attribute)
    if field is not None:
        value = getattr(result, field)
        if field == "name" and value is None:
            return result.path.rsplit("/", 1)[-1].lower()
        return value.lower() if isinstance(value, str) else value
    raw = result.attributes.get(attribute)
    if raw is None:
        return None
    # Numbers before text so mixed values still compare.
    try:
        return (0, float(raw), "")
    except ValueError:
        return (1, 0.0, raw.lower())
