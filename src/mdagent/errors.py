"""Shared error types for mdagent.

Protocol-layer errors carry the JSON-RPC error code they are reported
with, so the dispatcher can turn any of them into an error response at a
single seam.
"""

from __future__ import annotations

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class MdagentError(Exception):
    """Base error for all mdagent failures."""


class ConfigError(MdagentError):
    """A configuration file could not be read or failed validation."""


# ---------------------------------------------------------------------------
# Protocol layer
# ---------------------------------------------------------------------------


class ProtocolError(MdagentError):
    """Base error for JSON-RPC failures reported back to the caller."""

    code: int = INTERNAL_ERROR


class RequestDecodeError(ProtocolError):
    """An input line is not a decodable JSON-RPC request."""

    code = PARSE_ERROR


class MethodNotFoundError(ProtocolError):
    """The requested method is not routed by the dispatcher."""

    code = METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Method not found: {method}")


class ToolNotFoundError(ProtocolError):
    """Requested tool does not exist or is not enabled."""

    code = METHOD_NOT_FOUND

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Method not found: Unknown tool: {name}")


class InvalidParamsError(ProtocolError):
    """A tool name or required argument is missing or has the wrong shape."""

    code = INVALID_PARAMS


# ---------------------------------------------------------------------------
# Search collaborator
# ---------------------------------------------------------------------------


class SearchError(MdagentError):
    """Base error for failures raised by the search collaborator."""


class QueryError(SearchError):
    """The search engine rejected or failed to run a query."""

    def __init__(self, query: str, detail: str = "") -> None:
        self.query = query
        self.detail = detail
        super().__init__(f"Query failed: {query}" + (f": {detail}" if detail else ""))


class MetadataError(SearchError):
    """Metadata lookup failed, usually because the path is not indexed."""

    def __init__(self, path: str, detail: str = "") -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"No metadata for {path}" + (f": {detail}" if detail else ""))


class EngineUnavailableError(SearchError):
    """The search engine binary is missing or could not be started."""


class JsonDecodeError(MdagentError, ValueError):
    """Raw input is not valid JSON or holds a value JSON cannot represent."""
