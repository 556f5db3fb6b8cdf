"""Tests for SpotlightEngine with mocked mdfind/mdls subprocesses."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mdagent.errors import EngineUnavailableError, MetadataError, QueryError
from mdagent.search.engine import SearchEngine
from mdagent.search.models import SearchResult
from mdagent.search.spotlight import (
    SpotlightEngine,
    format_metadata,
    parse_mdls,
    sort_results,
)

QUERY = 'kMDItemFSName == "*.txt"cd'

MDLS_PLAIN = """\
kMDItemContentTypeTree = (
    "public.folder",
    "public.item"
)
kMDItemDisplayName     = "src"
kMDItemFSSize          = 96
kMDItemLastUsedDate    = (null)
kMDItemDateAdded       = 2024-05-01 12:00:00 +0000
"""


def _proc(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> MagicMock:
    proc = MagicMock()
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.returncode = returncode
    proc.wait = AsyncMock(return_value=returncode)
    return proc


def _raw_rows(*rows: list[str]) -> bytes:
    return "\0".join(value for row in rows for value in row).encode()


ROW_A = ["a.txt", "Plain Text", "100", "2024-05-01 12:00:00 +0000", "(null)", "public.plain-text"]
ROW_B = ["b.txt", "Plain Text", "300", "2024-04-01 12:00:00 +0000", "(null)", "public.plain-text"]


class TestProtocol:
    def test_satisfies_search_engine(self) -> None:
        assert isinstance(SpotlightEngine(), SearchEngine)


class TestExecute:
    async def test_finds_and_describes(self) -> None:
        find = _proc(b"/x/a.txt\0/x/b.txt\0")
        describe = _proc(_raw_rows(ROW_A, ROW_B))
        with patch("asyncio.create_subprocess_exec", side_effect=[find, describe]) as mock_exec:
            results = await SpotlightEngine().execute(QUERY, scopes=["/x"], limit=10)

        assert [r.path for r in results] == ["/x/a.txt", "/x/b.txt"]
        first = results[0]
        assert first.name == "a.txt"
        assert first.size == 100
        assert first.modified == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert first.created is None
        assert first.content_type == "public.plain-text"
        assert mock_exec.call_args_list[0].args == ("mdfind", "-0", "-onlyin", "/x", QUERY)
        mdls_args = mock_exec.call_args_list[1].args
        assert mdls_args[:4] == ("mdls", "-raw", "-nullMarker", "(null)")
        assert mdls_args[-2:] == ("/x/a.txt", "/x/b.txt")

    async def test_limit_applied_before_describe(self) -> None:
        find = _proc(b"/x/a.txt\0/x/b.txt\0")
        describe = _proc(_raw_rows(ROW_A))
        with patch("asyncio.create_subprocess_exec", side_effect=[find, describe]) as mock_exec:
            results = await SpotlightEngine().execute(QUERY, limit=1)
        assert [r.path for r in results] == ["/x/a.txt"]
        assert mock_exec.call_args_list[1].args[-1] == "/x/a.txt"

    async def test_sorted_descending_then_limited(self) -> None:
        find = _proc(b"/x/a.txt\0/x/b.txt\0")
        describe = _proc(_raw_rows(ROW_A, ROW_B))
        with patch("asyncio.create_subprocess_exec", side_effect=[find, describe]):
            results = await SpotlightEngine().execute(
                QUERY, limit=1, sort_by="kMDItemFSSize", descending=True
            )
        assert [r.path for r in results] == ["/x/b.txt"]

    async def test_sorted_search_describes_every_hit_in_batches(self) -> None:
        paths = [f"/x/f{i}.txt" for i in range(250)]
        find = _proc("\0".join(paths).encode())
        rows = [["f.txt", "Plain Text", str(i), "(null)", "(null)", "(null)"] for i in range(250)]
        first = _proc(_raw_rows(*rows[:200]))
        second = _proc(_raw_rows(*rows[200:]))
        with patch(
            "asyncio.create_subprocess_exec", side_effect=[find, first, second]
        ) as mock_exec:
            results = await SpotlightEngine().execute(
                QUERY, limit=1, sort_by="kMDItemFSSize", descending=True
            )

        assert [r.path for r in results] == ["/x/f249.txt"]
        assert mock_exec.call_count == 3
        assert mock_exec.call_args_list[1].args[-200:] == tuple(paths[:200])
        assert mock_exec.call_args_list[2].args[-50:] == tuple(paths[200:])

    async def test_raw_sort_attribute_is_fetched(self) -> None:
        find = _proc(b"/x/a.txt\0")
        describe = _proc(_raw_rows([*ROW_A, "Alpha"]))
        with patch("asyncio.create_subprocess_exec", side_effect=[find, describe]) as mock_exec:
            results = await SpotlightEngine().execute(QUERY, sort_by="kMDItemDisplayName")
        assert "kMDItemDisplayName" in mock_exec.call_args_list[1].args
        assert results[0].attributes == {"kMDItemDisplayName": "Alpha"}

    async def test_no_hits(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc(b"")) as mock_exec:
            assert await SpotlightEngine().execute(QUERY) == []
        mock_exec.assert_awaited_once()

    async def test_zero_limit_skips_search(self) -> None:
        with patch("asyncio.create_subprocess_exec") as mock_exec:
            assert await SpotlightEngine().execute(QUERY, limit=0) == []
        mock_exec.assert_not_called()

    async def test_describe_failure_keeps_paths(self) -> None:
        find = _proc(b"/x/gone.txt\0")
        describe = _proc(b"", b"could not find /x/gone.txt", returncode=1)
        with patch("asyncio.create_subprocess_exec", side_effect=[find, describe]):
            results = await SpotlightEngine().execute(QUERY)
        assert results == [SearchResult(path="/x/gone.txt")]

    async def test_bad_query(self) -> None:
        find = _proc(b"", b"Failed to create query for 'kMDItemFSName =='.")
        with patch("asyncio.create_subprocess_exec", return_value=find):
            with pytest.raises(QueryError, match="Failed to create query"):
                await SpotlightEngine().execute("kMDItemFSName ==")

    async def test_missing_binary(self) -> None:
        with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError("mdfind")):
            with pytest.raises(EngineUnavailableError, match="Cannot run mdfind"):
                await SpotlightEngine().execute(QUERY)

    async def test_timeout_kills_process(self) -> None:
        proc = _proc()
        proc.communicate = AsyncMock(side_effect=TimeoutError)
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            with pytest.raises(EngineUnavailableError, match="timed out"):
                await SpotlightEngine(timeout=0.5).execute(QUERY)
        proc.kill.assert_called_once()
        proc.wait.assert_awaited_once()

    async def test_timeout_after_process_exited(self) -> None:
        proc = _proc()
        proc.communicate = AsyncMock(side_effect=TimeoutError)
        proc.kill.side_effect = ProcessLookupError
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            with pytest.raises(EngineUnavailableError, match="timed out"):
                await SpotlightEngine(timeout=0.5).execute(QUERY)
        proc.wait.assert_awaited_once()

    async def test_custom_binaries(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc(b"")) as mock_exec:
            await SpotlightEngine(mdfind_path="/opt/mdfind").execute(QUERY)
        assert mock_exec.call_args.args[0] == "/opt/mdfind"


class TestCount:
    async def test_count(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc(b"12\n")) as mock_exec:
            assert await SpotlightEngine().count(QUERY, scopes=["/a", "/b"]) == 12
        assert mock_exec.call_args.args == (
            "mdfind", "-count", "-onlyin", "/a", "-onlyin", "/b", QUERY
        )

    async def test_garbage_output(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc(b"lots")):
            with pytest.raises(QueryError):
                await SpotlightEngine().count(QUERY)


class TestMetadata:
    async def test_formats_attributes(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc(MDLS_PLAIN.encode())):
            text = await SpotlightEngine().metadata("/x/src")
        assert text.splitlines() == [
            "kMDItemContentTypeTree: public.folder, public.item",
            "kMDItemDateAdded: 2024-05-01T12:00:00Z",
            "kMDItemDisplayName: src",
            "kMDItemFSSize: 96",
        ]

    async def test_not_found(self) -> None:
        proc = _proc(b"", b"/nope: could not find /nope.", returncode=1)
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            with pytest.raises(MetadataError, match="/nope"):
                await SpotlightEngine().metadata("/nope")

    async def test_not_indexed(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc(b"")):
            with pytest.raises(MetadataError, match="not indexed"):
                await SpotlightEngine().metadata("/tmp/x")


class TestParsing:
    def test_parse_mdls(self) -> None:
        attributes = parse_mdls(MDLS_PLAIN)
        assert attributes["kMDItemContentTypeTree"] == ["public.folder", "public.item"]
        assert attributes["kMDItemDisplayName"] == "src"
        assert "kMDItemLastUsedDate" not in attributes

    def test_format_metadata_sorted(self) -> None:
        assert format_metadata({"b": "2", "a": ["x", "y"]}) == "a: x, y\nb: 2"


class TestSortResults:
    def test_missing_values_last(self) -> None:
        results = [
            SearchResult(path="/a", size=5),
            SearchResult(path="/b"),
            SearchResult(path="/c", size=10),
        ]
        ordered = sort_results(results, "kMDItemFSSize", descending=False)
        assert [r.path for r in ordered] == ["/a", "/c", "/b"]
        ordered = sort_results(results, "kMDItemFSSize", descending=True)
        assert [r.path for r in ordered] == ["/c", "/a", "/b"]

    def test_name_falls_back_to_path(self) -> None:
        results = [SearchResult(path="/x/Beta"), SearchResult(path="/x/alpha")]
        ordered = sort_results(results, "kMDItemFSName")
        assert [r.path for r in ordered] == ["/x/alpha", "/x/Beta"]

    def test_raw_attribute_numbers_before_text(self) -> None:
        results = [
            SearchResult(path="/t", attributes={"kMDItemRating": "good"}),
            SearchResult(path="/n", attributes={"kMDItemRating": "3"}),
        ]
        ordered = sort_results(results, "kMDItemRating")
        assert [r.path for r in ordered] == ["/n", "/t"]
