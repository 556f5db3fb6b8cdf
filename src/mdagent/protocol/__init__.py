"""Protocol layer — JSON values, JSON-RPC envelopes, dispatch and transport."""

from mdagent.protocol.dispatcher import MethodDispatcher
from mdagent.protocol.json_value import JsonKind, JsonValue
from mdagent.protocol.models import JsonRpcError, JsonRpcRequest, JsonRpcResponse, RequestId
from mdagent.protocol.transport import StdioServer

__all__ = [
    "JsonKind",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonValue",
    "MethodDispatcher",
    "RequestId",
    "StdioServer",
]
