"""MethodDispatcher — routes JSON-RPC methods to their handlers.

Every request gets exactly one response. Handler failures are turned into
error responses here, so nothing a caller sends can stop the server.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mdagent.config import ServerConfig
from mdagent.errors import InvalidParamsError, MethodNotFoundError, ProtocolError, SearchError
from mdagent.protocol.models import JsonRpcError, JsonRpcRequest, JsonRpcResponse
from mdagent.utils.telemetry import (
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_METHOD,
    ATTR_RPC_REQUEST_ID,
    ATTR_TOOL_NAME,
    SPAN_RPC,
    SPAN_TOOL,
    get_tracer,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from mdagent.tools.registry import ToolRegistry

    Handler = Callable[[JsonRpcRequest], Awaitable[Any]]

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


class MethodDispatcher:
    """Maps method names to handlers and wraps results in responses.

    Usage::

        dispatcher = MethodDispatcher(registry, config)
        response = await dispatcher.dispatch(request)
    """

    def __init__(self, registry: ToolRegistry, config: ServerConfig | None = None) -> None:
        self._registry = registry
        self._config = config or ServerConfig()
        self._routes: dict[str, Handler] = {
            "initialize": self._initialize,
            "initialized": self._acknowledge,
            "notifications/initialized": self._acknowledge,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._routes)

    async def dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Run the handler for ``request.method`` and build the response."""
        with _tracer.start_as_current_span(SPAN_RPC) as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            if request.id is not None:
                span.set_attribute(ATTR_RPC_REQUEST_ID, str(request.id))
            logger.debug("Dispatching %s (id=%r)", request.method, request.id)

            try:
                handler = self._routes.get(request.method)
                if handler is None:
                    raise MethodNotFoundError(request.method)
                result = await handler(request)
            except ProtocolError as exc:
                logger.debug("Rejected %s: %s", request.method, exc)
                error = JsonRpcError.from_exception(exc)
            except SearchError as exc:
                logger.warning("Search failed for %s: %s", request.method, exc)
                error = JsonRpcError.from_exception(exc)
            except Exception as exc:
                logger.exception("Unexpected failure handling %s", request.method)
                error = JsonRpcError.from_exception(exc)
            else:
                return JsonRpcResponse.success(request.id, result)

            span.set_attribute(ATTR_RPC_ERROR_CODE, error.code)
            return JsonRpcResponse.failure(request.id, error)

    # -- handlers -----------------------------------------------------------

    async def _initialize(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {
            "protocolVersion": self._config.protocol_version,
            "serverInfo": {
                "name": self._config.server_name,
                "version": self._config.server_version,
            },
            "capabilities": {"tools": {}},
        }

    async def _acknowledge(self, request: JsonRpcRequest) -> dict[str, Any]:
        # Notifications still get an empty result to keep one line out per line in.
        return {}

    async def _tools_list(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {"tools": [definition.to_python() for definition in self._registry.definitions()]}

    async def _tools_call(self, request: JsonRpcRequest) -> dict[str, Any]:
        params = request.params.as_object() if request.params is not None else None
        name_value = params.get("name") if params is not None else None
        name = name_value.as_string() if name_value is not None else None
        if name is None:
            raise InvalidParamsError("Missing tool name")

        arguments_value = request.param("arguments")
        arguments = arguments_value.as_object() if arguments_value is not None else None

        with _tracer.start_as_current_span(SPAN_TOOL) as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            text = await self._registry.call(name, arguments or {})

        return {"content": [{"type": "text", "text": text}]}
