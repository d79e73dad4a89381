"""Serialization codecs for writer payloads.

orjson for JSON values, msgpack for binary frames. Both are core
dependencies - no fallback to stdlib json.

Usage:
    >>> from querystream.io.streaming.codec import encode, get_codec
    >>> encode({"key": "value"})
    b'{"key":"value"}'
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import msgpack
import orjson

if TYPE_CHECKING:
    from querystream.foundation.errors import JsonValue


class MediaType(StrEnum):
    """Media types with a bundled writer."""
    JSON = "application/json"
    XML = "application/xml"
    MSGPACK = "application/msgpack"


@runtime_checkable
class Codec(Protocol):
    """Protocol for value codecs."""

    name: str
    content_type: str

    def encode(self, data: JsonValue) -> bytes: ...
    def decode(self, data: bytes) -> JsonValue: ...


_ORJSON_OPTS = orjson.OPT_NON_STR_KEYS | orjson.OPT_UTC_Z


class OrjsonCodec:
    """orjson codec: native datetime, uuid, dataclass and enum support."""

    __slots__ = ()
    name = "orjson"
    content_type = MediaType.JSON.value

    def encode(self, data: JsonValue) -> bytes:
        return orjson.dumps(data, option=_ORJSON_OPTS)

    def decode(self, data: bytes) -> JsonValue:
        return orjson.loads(data)


class MsgpackCodec:
    """MessagePack codec: binary, self-delimiting, so frames can be concatenated."""

    __slots__ = ()
    name = "msgpack"
    content_type = MediaType.MSGPACK.value

    def encode(self, data: JsonValue) -> bytes:
        return msgpack.packb(data, use_bin_type=True, strict_types=False)

    def decode(self, data: bytes) -> JsonValue:
        return msgpack.unpackb(data, raw=False, strict_map_key=False)


_orjson = OrjsonCodec()
_msgpack = MsgpackCodec()

_CODECS: dict[str, Codec] = {"orjson": _orjson, "msgpack": _msgpack}


def get_codec(name: str | None = None) -> Codec:
    """Get codec by name (default: orjson)."""
    return _CODECS.get(name or "orjson", _orjson)


def encode(data: JsonValue) -> bytes:
    """Encode to JSON bytes (orjson)."""
    return orjson.dumps(data, option=_ORJSON_OPTS)


def pack(data: JsonValue) -> bytes:
    """Encode to msgpack bytes."""
    return msgpack.packb(data, use_bin_type=True, strict_types=False)


def unpack_frames(data: bytes) -> list[JsonValue]:
    """Decode a concatenation of msgpack frames."""
    unpacker = msgpack.Unpacker(raw=False, strict_map_key=False)
    unpacker.feed(data)
    return list(unpacker)
