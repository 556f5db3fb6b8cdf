"""Dynamic JSON values.

:class:`JsonValue` is a closed tagged union over the seven JSON shapes.
Decoding tries the variants in a fixed order (null, bool, int, double,
string, array, object) and keeps the first match, so an integral number
always lands in the ``int`` variant even when written as ``100.0``.

Accessors never raise on a shape mismatch; they return ``None`` and the
caller treats that as "not provided"::

    params = JsonValue.decode('{"name": "search", "arguments": {"n": 5}}')
    params.get("arguments").get("n").as_int()   # 5
    params.get("missing")                       # None
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from mdagent.errors import JsonDecodeError

_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


class JsonKind(str, Enum):
    """Variant tag of a :class:`JsonValue`, listed in decode trial order."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    DOUBLE = "double"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class JsonValue:
    """One JSON value and its variant tag.

    ``value`` holds the Python payload: ``None``, ``bool``, ``int``,
    ``float``, ``str``, a ``tuple`` of :class:`JsonValue` or a ``dict``
    mapping ``str`` to :class:`JsonValue`.
    """

    kind: JsonKind
    value: Any = None

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.from_python,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda value: value.to_python()
            ),
        )

    # -- decoding -----------------------------------------------------------

    @classmethod
    def decode(cls, data: str | bytes) -> JsonValue:
        """Parse JSON text into a :class:`JsonValue`.

        Raises:
            JsonDecodeError: If *data* is not valid UTF-8 JSON, or a string
                in it holds a lone surrogate.
        """
        try:
            text = data.decode("utf-8") if isinstance(data, bytes) else data
            raw = json.loads(text, parse_constant=_reject_constant)
        except ValueError as exc:
            raise JsonDecodeError(str(exc)) from exc
        return cls.from_python(raw)

    @classmethod
    def from_python(cls, raw: Any) -> JsonValue:
        """Wrap a plain Python value, picking the first matching variant.

        Raises:
            JsonDecodeError: If *raw* (or anything nested in it) has no
                JSON representation.
        """
        if isinstance(raw, JsonValue):
            return raw
        if raw is None:
            return cls(JsonKind.NULL)
        if isinstance(raw, bool):
            return cls(JsonKind.BOOL, raw)
        if isinstance(raw, int):
            return cls(JsonKind.INT, raw)
        if isinstance(raw, float):
            if not math.isfinite(raw):
                raise JsonDecodeError(f"Non-finite number: {raw}")
            if raw.is_integer() and _INT_MIN <= raw <= _INT_MAX:
                return cls(JsonKind.INT, int(raw))
            return cls(JsonKind.DOUBLE, raw)
        if isinstance(raw, str):
            return cls(JsonKind.STRING, _check_text(raw))
        if isinstance(raw, (list, tuple)):
            return cls(JsonKind.ARRAY, tuple(cls.from_python(item) for item in raw))
        if isinstance(raw, dict):
            obj: dict[str, JsonValue] = {}
            for key, item in raw.items():
                if not isinstance(key, str):
                    raise JsonDecodeError(f"Object key must be a string, got {key!r}")
                obj[_check_text(key)] = cls.from_python(item)
            return cls(JsonKind.OBJECT, obj)
        raise JsonDecodeError(f"Unknown JSON type: {type(raw).__name__}")

    # -- encoding -----------------------------------------------------------

    def to_python(self) -> Any:
        """Unwrap into plain ``dict``/``list``/scalar values."""
        if self.kind is JsonKind.ARRAY:
            return [item.to_python() for item in self.value]
        if self.kind is JsonKind.OBJECT:
            return {key: item.to_python() for key, item in self.value.items()}
        return self.value

    def encode(self) -> str:
        """Serialize to compact JSON text."""
        return json.dumps(self.to_python(), separators=(",", ":"), ensure_ascii=False)

    # -- accessors ----------------------------------------------------------

    @property
    def is_null(self) -> bool:
        return self.kind is JsonKind.NULL

    def as_string(self) -> str | None:
        return self.value if self.kind is JsonKind.STRING else None

    def as_int(self) -> int | None:
        return self.value if self.kind is JsonKind.INT else None

    def as_double(self) -> float | None:
        if self.kind is JsonKind.DOUBLE:
            return self.value  # type: ignore[no-any-return]
        if self.kind is JsonKind.INT:
            return float(self.value)
        return None

    def as_bool(self) -> bool | None:
        return self.value if self.kind is JsonKind.BOOL else None

    def as_array(self) -> list[JsonValue] | None:
        return list(self.value) if self.kind is JsonKind.ARRAY else None

    def as_object(self) -> dict[str, JsonValue] | None:
        return dict(self.value) if self.kind is JsonKind.OBJECT else None

    def get(self, key: str) -> JsonValue | None:
        """Return the member *key* of an object, or ``None``."""
        if self.kind is not JsonKind.OBJECT:
            return None
        return self.value.get(key)  # type: ignore[no-any-return]


def _reject_constant(name: str) -> Any:
    msg = f"Invalid JSON constant: {name}"
    raise ValueError(msg)


def _check_text(text: str) -> str:
    # "\ud800" escapes decode to lone surrogates, which no UTF-8 output can carry.
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise JsonDecodeError("String contains a lone surrogate") from exc
    return text
