"""JSON value encoding and decoding for generated reference types."""

import base64
import json
from typing import Any

from .shapes import Map, Named, Pointer, Shape, Slice


class SerializationError(RuntimeError):
    """Raised when serialization or deserialization fails."""


class MarshalError(SerializationError):
    """Raised when a value has no wire representation."""


class DecodeError(SerializationError):
    """Raised when a wire value does not match the declared shape."""


class RawMessage(bytes):
    """A pre-encoded JSON value written to the wire verbatim.

    Example:
        msg = RawMessage(b'{"a":123}')
        encode([msg])  # '[{"a":123}]'
    """


def is_empty(value: Any) -> bool:
    """Check if a value is the empty form for its shape.

    ``None``, ``False``, zero numbers and empty strings, bytes and
    containers are empty. Struct values never are.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (str, bytes, bytearray, list, tuple, dict)):
        return len(value) == 0
    return False


def _map_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    raise MarshalError(f"Unsupported map key type: {type(key).__name__}")


def encode(value: Any) -> str:
    """Encode a value as JSON text.

    Objects with a ``marshal()`` method (generated structs) encode
    themselves. Map entries are written sorted by key.
    """
    if value is None:
        return "null"
    if isinstance(value, RawMessage):
        return value.decode("utf-8") if value else "null"

    marshal = getattr(value, "marshal", None)
    if callable(marshal):
        data = marshal()
        return data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        try:
            return json.dumps(value, allow_nan=False)
        except ValueError as e:
            raise MarshalError(f"Unsupported value: {value!r}") from e
    if isinstance(value, (bytes, bytearray)):
        return json.dumps(base64.b64encode(value).decode("ascii"))
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(encode(item) for item in value) + "]"
    if isinstance(value, dict):
        items = sorted(((_map_key(k), v) for k, v in value.items()), key=lambda item: item[0])
        return "{" + ",".join(f"{json.dumps(k)}:{encode(v)}" for k, v in items) + "}"

    raise MarshalError(f"Unsupported type: {type(value).__name__}")


def expect_object(value: Any) -> dict[str, Any]:
    """Check that a decoded wire value is a JSON object."""
    if not isinstance(value, dict):
        raise DecodeError(f"Expected a JSON object, got {type(value).__name__}")
    return value


def decode_object(data: bytes | str) -> dict[str, Any]:
    """Decode a wire object into its name to value mapping.

    Malformed input raises ``json.JSONDecodeError``.
    """
    return expect_object(json.loads(data))


def _zero(cls: Any) -> Any:
    if cls is object:
        return None
    if isinstance(cls, type) and issubclass(cls, RawMessage):
        return cls(b"null")
    return cls()


def _decode_named(value: Any, cls: Any) -> Any:
    if value is None:
        return _zero(cls)
    if cls is object:
        return value
    if issubclass(cls, RawMessage):
        return cls(json.dumps(value, separators=(",", ":")).encode("utf-8"))

    from_wire = getattr(cls, "from_wire", None)
    if from_wire is not None:
        return from_wire(value)

    if issubclass(cls, bool):
        if isinstance(value, bool):
            return value
    elif issubclass(cls, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
    elif issubclass(cls, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return cls(value)
    elif issubclass(cls, str):
        if isinstance(value, str):
            return cls(value)
    elif isinstance(value, cls):
        return value

    raise DecodeError(f"Cannot decode {type(value).__name__} into {cls.__name__}")


def _decode_key(key: str, shape: Shape) -> Any:
    while isinstance(shape, Pointer):
        shape = shape.elem
    if isinstance(shape, Named):
        if issubclass(shape.type, str):
            return shape.type(key)
        if issubclass(shape.type, int) and not issubclass(shape.type, bool):
            try:
                return shape.type(key)
            except ValueError:
                raise DecodeError(f"Invalid integer map key: {key!r}") from None
    raise DecodeError(f"Unsupported map key shape: {shape}")


def decode(value: Any, shape: Shape) -> Any:
    """Decode an already-parsed JSON value into the given shape."""
    if isinstance(shape, Pointer):
        return None if value is None else decode(value, shape.elem)
    if isinstance(shape, Slice):
        if value is None:
            return []
        if not isinstance(value, list):
            raise DecodeError(f"Expected a JSON array, got {type(value).__name__}")
        return [decode(item, shape.elem) for item in value]
    if isinstance(shape, Map):
        if value is None:
            return {}
        return {
            _decode_key(k, shape.key): decode(v, shape.value)
            for k, v in expect_object(value).items()
        }
    return _decode_named(value, shape.type)
