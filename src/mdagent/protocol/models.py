"""JSON-RPC 2.0 envelopes for the stdio server.

Requests are decoded through :class:`~mdagent.protocol.json_value.JsonValue`
so ``params`` keeps its dynamic shape; responses are encoded back to one
compact line with the caller's request id echoed in the variant it arrived
in (``1`` stays an integer, ``"1"`` stays a string).
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)

from mdagent.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonDecodeError,
    ProtocolError,
    RequestDecodeError,
)
from mdagent.protocol.json_value import JsonValue

JSONRPC_VERSION = "2.0"

RequestId = Union[StrictInt, StrictStr]

# Written verbatim when a response cannot be encoded at all.
ENCODING_ERROR_LINE = (
    '{"jsonrpc":"2.0","id":null,"error":{"code":-32603,"message":"Encoding error"}}'
)


# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: StrictStr
    id: RequestId | None = None
    method: StrictStr
    params: JsonValue | None = None

    @classmethod
    def decode(cls, line: str | bytes) -> JsonRpcRequest:
        """Decode one transport line.

        Raises:
            RequestDecodeError: If the line is not JSON or not a request.
        """
        try:
            raw = JsonValue.decode(line)
        except JsonDecodeError as exc:
            raise RequestDecodeError(f"Parse error: {exc}") from exc
        if raw.as_object() is None:
            raise RequestDecodeError("Parse error: request must be a JSON object")
        try:
            return cls.model_validate(raw.to_python())
        except ValidationError as exc:
            raise RequestDecodeError(f"Parse error: {_first_error(exc)}") from exc

    def param(self, key: str) -> JsonValue | None:
        """Return a member of ``params``, or ``None`` if absent."""
        return self.params.get(key) if self.params is not None else None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    model_config = ConfigDict(frozen=True)

    code: int
    message: str
    data: JsonValue | None = None

    @classmethod
    def parse_error(cls, message: str) -> JsonRpcError:
        return cls(code=PARSE_ERROR, message=message)

    @classmethod
    def invalid_request(cls, message: str) -> JsonRpcError:
        return cls(code=INVALID_REQUEST, message=message)

    @classmethod
    def method_not_found(cls, method: str) -> JsonRpcError:
        return cls(code=METHOD_NOT_FOUND, message=f"Method not found: {method}")

    @classmethod
    def invalid_params(cls, message: str) -> JsonRpcError:
        return cls(code=INVALID_PARAMS, message=message)

    @classmethod
    def internal_error(cls, message: str) -> JsonRpcError:
        return cls(code=INTERNAL_ERROR, message=message)

    @classmethod
    def from_exception(cls, exc: Exception) -> JsonRpcError:
        """Map an exception to its error object (-32603 unless it says otherwise)."""
        code = exc.code if isinstance(exc, ProtocolError) else INTERNAL_ERROR
        return cls(code=code, message=str(exc) or type(exc).__name__)

    def to_python(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            data["data"] = self.data.to_python()
        return data


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message carrying either a result or an error."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId | None = None
    result: JsonValue | None = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def check_result_xor_error(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "A response carries exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, request_id: RequestId | None, result: Any) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: RequestId | None, error: JsonRpcError) -> JsonRpcResponse:
        return cls(id=request_id, error=error)

    def to_python(self) -> dict[str, Any]:
        """Return the wire shape; ``id`` is always present, ``null`` if unknown."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.to_python()
        else:
            data["result"] = self.result.to_python()  # type: ignore[union-attr]
        return data

    def encode(self) -> str:
        """Serialize to a single compact JSON line (without the newline)."""
        return JsonValue.from_python(self.to_python()).encode()


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    loc = ".".join(str(part) for part in first["loc"])
    return f"{loc}: {first['msg']}" if loc else str(first["msg"])
