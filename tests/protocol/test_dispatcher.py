"""Tests for MethodDispatcher routing."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from mdagent.config import ServerConfig
from mdagent.errors import QueryError
from mdagent.protocol.dispatcher import MethodDispatcher
from mdagent.protocol.models import JsonRpcRequest, JsonRpcResponse
from mdagent.tools.builtin import build_registry
from tests.conftest import make_engine


def _request(method: str, params: Any = None, request_id: Any = 1) -> JsonRpcRequest:
    return JsonRpcRequest(jsonrpc="2.0", id=request_id, method=method, params=params)


def _result(response: JsonRpcResponse) -> Any:
    assert response.error is None
    assert response.result is not None
    return response.result.to_python()


class TestRouting:
    async def test_initialize(self, dispatcher: MethodDispatcher) -> None:
        result = _result(await dispatcher.dispatch(_request("initialize")))
        assert result == {
            "protocolVersion": "2024-11-05",
            "serverInfo": {"name": "mdagent", "version": "1.0.0"},
            "capabilities": {"tools": {}},
        }

    async def test_initialize_uses_config(self) -> None:
        config = ServerConfig(server_name="custom", protocol_version="2025-01-01")
        dispatcher = MethodDispatcher(build_registry(make_engine(), config), config)
        result = _result(await dispatcher.dispatch(_request("initialize")))
        assert result["serverInfo"]["name"] == "custom"
        assert result["protocolVersion"] == "2025-01-01"

    @pytest.mark.parametrize("method", ["initialized", "notifications/initialized"])
    async def test_notifications_acknowledged(
        self, dispatcher: MethodDispatcher, method: str
    ) -> None:
        response = await dispatcher.dispatch(_request(method, request_id=None))
        assert _result(response) == {}
        assert response.id is None

    async def test_unknown_method(self, dispatcher: MethodDispatcher) -> None:
        response = await dispatcher.dispatch(_request("resources/list"))
        assert response.error is not None
        assert response.error.code == -32601
        assert "resources/list" in response.error.message

    async def test_method_match_is_case_sensitive(self, dispatcher: MethodDispatcher) -> None:
        response = await dispatcher.dispatch(_request("Initialize"))
        assert response.error is not None
        assert response.error.code == -32601

    @pytest.mark.parametrize("request_id", [1, "1", "abc", 0])
    async def test_id_echoed_with_same_variant(
        self, dispatcher: MethodDispatcher, request_id: Any
    ) -> None:
        response = await dispatcher.dispatch(_request("tools/list", request_id=request_id))
        assert response.id == request_id
        assert type(response.id) is type(request_id)

    def test_methods(self, dispatcher: MethodDispatcher) -> None:
        assert set(dispatcher.methods) == {
            "initialize",
            "initialized",
            "notifications/initialized",
            "tools/list",
            "tools/call",
        }


class TestToolsList:
    async def test_lists_all_tools(self, dispatcher: MethodDispatcher) -> None:
        result = _result(await dispatcher.dispatch(_request("tools/list")))
        assert [tool["name"] for tool in result["tools"]] == ["search", "count", "meta"]

    async def test_schema_shape(self, dispatcher: MethodDispatcher) -> None:
        result = _result(await dispatcher.dispatch(_request("tools/list")))
        search = result["tools"][0]
        assert search["inputSchema"]["type"] == "object"
        assert search["inputSchema"]["properties"]["n"] == {"type": "integer"}
        assert search["inputSchema"]["required"] == ["q"]

    async def test_filtered(self) -> None:
        config = ServerConfig(enabled_tools=["count"])
        dispatcher = MethodDispatcher(build_registry(make_engine(), config), config)
        result = _result(await dispatcher.dispatch(_request("tools/list")))
        assert [tool["name"] for tool in result["tools"]] == ["count"]


class TestToolsCall:
    async def test_wraps_text_in_content(self, dispatcher: MethodDispatcher) -> None:
        response = await dispatcher.dispatch(
            _request("tools/call", {"name": "count", "arguments": {"q": "@kind:folder"}})
        )
        assert _result(response) == {"content": [{"type": "text", "text": "42"}]}

    async def test_missing_arguments_defaults_to_empty(self, dispatcher: MethodDispatcher) -> None:
        response = await dispatcher.dispatch(_request("tools/call", {"name": "count"}))
        assert response.error is not None
        assert response.error.code == -32602
        assert "'q'" in response.error.message

    async def test_missing_tool_name(self, dispatcher: MethodDispatcher) -> None:
        response = await dispatcher.dispatch(_request("tools/call", {"arguments": {}}))
        assert response.error is not None
        assert response.error.code == -32602
        assert response.error.message == "Missing tool name"

    async def test_missing_params(self, dispatcher: MethodDispatcher) -> None:
        response = await dispatcher.dispatch(_request("tools/call"))
        assert response.error is not None
        assert response.error.code == -32602

    async def test_unknown_tool(self, dispatcher: MethodDispatcher) -> None:
        response = await dispatcher.dispatch(
            _request("tools/call", {"name": "delete", "arguments": {}})
        )
        assert response.error is not None
        assert response.error.code == -32601
        assert "Unknown tool: delete" in response.error.message

    async def test_disabled_tool_is_unknown(self) -> None:
        config = ServerConfig(enabled_tools=["search"])
        dispatcher = MethodDispatcher(build_registry(make_engine(), config), config)
        response = await dispatcher.dispatch(
            _request("tools/call", {"name": "meta", "arguments": {"path": "/tmp"}})
        )
        assert response.error is not None
        assert response.error.code == -32601

    async def test_search_error_is_internal(self) -> None:
        engine = make_engine()
        engine.execute = AsyncMock(side_effect=QueryError("kMDItemFSName ==", "syntax"))
        dispatcher = MethodDispatcher(build_registry(engine))
        response = await dispatcher.dispatch(
            _request("tools/call", {"name": "search", "arguments": {"q": "x"}})
        )
        assert response.error is not None
        assert response.error.code == -32603
        assert "syntax" in response.error.message
        assert response.id == 1

    async def test_unexpected_error_is_internal(self) -> None:
        engine = MagicMock()
        engine.metadata = AsyncMock(side_effect=RuntimeError("kaboom"))
        dispatcher = MethodDispatcher(build_registry(engine))
        response = await dispatcher.dispatch(
            _request("tools/call", {"name": "meta", "arguments": {"path": "/x"}})
        )
        assert response.error is not None
        assert response.error.code == -32603
        assert response.error.message == "kaboom"
