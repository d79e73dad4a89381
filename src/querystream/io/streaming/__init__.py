"""Incremental document writers for streaming query results.

Example:
    >>> import io
    >>> from querystream.io.streaming import get_writer
    >>> writer = get_writer(io.BytesIO(), "application/json")
"""

from .codec import Codec, MediaType, encode, get_codec, pack, unpack_frames
from .writer import (
    BaseStreamingWriter,
    JsonStreamingWriter,
    MsgpackFrameWriter,
    StructuredWriter,
    XmlStreamingWriter,
    get_writer,
)

__all__ = [
    # Writers
    "StructuredWriter",
    "BaseStreamingWriter",
    "JsonStreamingWriter",
    "XmlStreamingWriter",
    "MsgpackFrameWriter",
    "get_writer",
    # Codecs
    "Codec",
    "MediaType",
    "get_codec",
    "encode",
    "pack",
    "unpack_frames",
]
