"""Incremental structured writers.

A writer turns nested open/close calls into bytes on an output stream as
they happen; nothing is buffered beyond the current value. Callers are
responsible for well-nested calls.

Disconnects (BrokenPipeError, ConnectionResetError) surface as StreamAborted.
"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, BinaryIO, Protocol, runtime_checkable
from xml.sax.saxutils import XMLGenerator

from querystream.foundation.config import get_settings
from querystream.foundation.errors import StreamAborted, WriterClosed

from .codec import MediaType, get_codec

if TYPE_CHECKING:
    from collections.abc import Iterator

    from querystream.foundation.config import QueryStreamSettings
    from querystream.foundation.errors import JsonValue

_DISCONNECTS = (BrokenPipeError, ConnectionResetError)


@runtime_checkable
class StructuredWriter(Protocol):
    """Sink for one structured document. No call is legal after close()."""

    def open(self) -> None: ...
    def close(self) -> None: ...
    def write_field(self, name: str, value: JsonValue) -> None: ...
    def start_block(self, name: str) -> None: ...
    def end_block(self, name: str) -> None: ...
    def start_array(self, name: str) -> None: ...
    def write_element(self, value: JsonValue) -> None: ...
    def end_array(self) -> None: ...
    def release(self) -> None: ...


@contextmanager
def _disconnect_guard() -> Iterator[None]:
    try:
        yield
    except _DISCONNECTS as e:
        raise StreamAborted.from_os_error(e) from e


class BaseStreamingWriter(ABC):
    """Closed-state bookkeeping and output release shared by the bundled writers."""

    media_type: MediaType

    def __init__(self, output: BinaryIO, *, flush_each_element: bool = True, close_output: bool = True) -> None:
        self._out = output
        self._flush_each = flush_each_element
        self._close_output = close_output
        self._closed = False
        self._released = False

    @property
    def closed(self) -> bool:
        return self._closed or self._released

    def _check(self) -> None:
        if self._closed or self._released:
            raise WriterClosed(f"{type(self).__name__} is closed")

    def _write(self, data: bytes) -> None:
        with _disconnect_guard():
            self._out.write(data)

    def _flush(self) -> None:
        with _disconnect_guard():
            self._out.flush()

    def close(self) -> None:
        """Close the document and flush. The output itself stays open until release()."""
        self._check()
        self._end_document()
        self._closed = True
        self._flush()

    def release(self) -> None:
        """Flush and release the output stream. Idempotent."""
        if self._released:
            return
        self._released = True
        try:
            self._flush()
        finally:
            if self._close_output:
                with _disconnect_guard():
                    self._out.close()

    @abstractmethod
    def _end_document(self) -> None: ...


class JsonStreamingWriter(BaseStreamingWriter):
    """Writes a JSON object incrementally. The root element is implicit in JSON.

    Example:
        open, write_field("service", {...}), start_block("objects"),
        start_array("object"), write_element(...), end_array(),
        end_block("objects"), close()
        => {"service":{...},"objects":{"object":[...]}}
    """

    media_type = MediaType.JSON

    def __init__(self, output: BinaryIO, *, flush_each_element: bool = True, close_output: bool = True) -> None:
        super().__init__(output, flush_each_element=flush_each_element, close_output=close_output)
        self._codec = get_codec("orjson")
        # One flag per open container: has it received a member yet
        self._first: list[bool] = []

    def _sep(self) -> bytes:
        if not self._first:
            return b""
        if self._first[-1]:
            self._first[-1] = False
            return b""
        return b","

    def _key(self, name: str) -> bytes:
        return self._sep() + self._codec.encode(name) + b":"

    def open(self) -> None:
        self._check()
        self._write(b"{")
        self._first.append(True)

    def write_field(self, name: str, value: JsonValue) -> None:
        self._check()
        data = self._codec.encode(value)
        self._write(self._key(name) + data)

    def start_block(self, name: str) -> None:
        self._check()
        self._write(self._key(name) + b"{")
        self._first.append(True)

    def end_block(self, name: str) -> None:
        self._check()
        self._write(b"}")
        self._first.pop()

    def start_array(self, name: str) -> None:
        self._check()
        self._write(self._key(name) + b"[")
        self._first.append(True)

    def write_element(self, value: JsonValue) -> None:
        self._check()
        # Encoded before the separator so a rejected value leaves the container untouched
        data = self._codec.encode(value)
        self._write(self._sep() + data)
        if self._flush_each:
            self._flush()

    def end_array(self) -> None:
        self._check()
        self._write(b"]")
        self._first.pop()

    def _end_document(self) -> None:
        self._write(b"}")
        self._first.pop()


class XmlStreamingWriter(BaseStreamingWriter):
    """Writes an XML document incrementally under a named root element.

    Mappings become child elements, lists repeat their parent's element name,
    scalars become text. Array elements are wrapped in the array's name.
    """

    media_type = MediaType.XML

    def __init__(
        self,
        output: BinaryIO,
        root: str,
        *,
        encoding: str = "UTF-8",
        flush_each_element: bool = True,
        close_output: bool = True,
    ) -> None:
        text = io.TextIOWrapper(output, encoding=encoding, errors="xmlcharrefreplace", newline="\n",
                                write_through=True)
        super().__init__(text, flush_each_element=flush_each_element, close_output=close_output)  # type: ignore[arg-type]
        self._root = root
        self._gen = XMLGenerator(text, encoding=encoding, short_empty_elements=True)
        self._arrays: list[str] = []

    def release(self) -> None:
        if self._released:
            return
        try:
            super().release()
        finally:
            # Detached so collecting the text layer cannot close a caller-owned output
            if not self._close_output and not self._out.closed:
                self._out.detach()  # type: ignore[attr-defined]

    def open(self) -> None:
        self._check()
        with _disconnect_guard():
            self._gen.startDocument()
            self._gen.startElement(self._root, {})

    def write_field(self, name: str, value: JsonValue) -> None:
        self._check()
        with _disconnect_guard():
            self._value(name, value)

    def start_block(self, name: str) -> None:
        self._check()
        with _disconnect_guard():
            self._gen.startElement(name, {})

    def end_block(self, name: str) -> None:
        self._check()
        with _disconnect_guard():
            self._gen.endElement(name)

    def start_array(self, name: str) -> None:
        self._check()
        self._arrays.append(name)

    def write_element(self, value: JsonValue) -> None:
        self._check()
        with _disconnect_guard():
            self._value(self._arrays[-1], value)
        if self._flush_each:
            self._flush()

    def end_array(self) -> None:
        self._check()
        self._arrays.pop()

    def _end_document(self) -> None:
        with _disconnect_guard():
            self._gen.endElement(self._root)
            self._gen.endDocument()

    def _value(self, name: str, value: JsonValue) -> None:
        match value:
            case list() | tuple():
                for item in value:
                    self._value(name, item)
            case dict():
                self._gen.startElement(name, {})
                for k, v in value.items():
                    self._value(str(k), v)
                self._gen.endElement(name)
            case None:
                self._gen.startElement(name, {})
                self._gen.endElement(name)
            case bool():
                self._text(name, "true" if value else "false")
            case _:
                self._text(name, str(value))

    def _text(self, name: str, text: str) -> None:
        self._gen.startElement(name, {})
        self._gen.characters(text)
        self._gen.endElement(name)


class MsgpackFrameWriter(BaseStreamingWriter):
    """Writes one msgpack frame per call. Decode with codec.unpack_frames.

    Frames: ["open"], ["field", name, value], ["start", name], ["end", name],
    ["array", name], ["element", value], ["end_array"], ["close"].
    """

    media_type = MediaType.MSGPACK

    def __init__(self, output: BinaryIO, *, flush_each_element: bool = True, close_output: bool = True) -> None:
        super().__init__(output, flush_each_element=flush_each_element, close_output=close_output)
        self._codec = get_codec("msgpack")

    def _frame(self, *parts: JsonValue) -> None:
        self._check()
        self._write(self._codec.encode(list(parts)))

    def open(self) -> None: self._frame("open")
    def write_field(self, name: str, value: JsonValue) -> None: self._frame("field", name, value)
    def start_block(self, name: str) -> None: self._frame("start", name)
    def end_block(self, name: str) -> None: self._frame("end", name)
    def start_array(self, name: str) -> None: self._frame("array", name)
    def end_array(self) -> None: self._frame("end_array")

    def write_element(self, value: JsonValue) -> None:
        self._frame("element", value)
        if self._flush_each:
            self._flush()

    def _end_document(self) -> None:
        self._write(self._codec.encode(["close"]))


def get_writer(
    output: BinaryIO,
    media_type: str | None = None,
    *,
    settings: QueryStreamSettings | None = None,
    close_output: bool = True,
) -> BaseStreamingWriter:
    """Pick a writer for the negotiated media type (default from settings)."""
    settings = settings or get_settings()
    flush = settings.writer.flush_each_element
    match MediaType(media_type or settings.writer.media_type):
        case MediaType.JSON:
            return JsonStreamingWriter(output, flush_each_element=flush, close_output=close_output)
        case MediaType.XML:
            return XmlStreamingWriter(output, settings.envelope.root, encoding=settings.writer.xml_encoding,
                                      flush_each_element=flush, close_output=close_output)
        case MediaType.MSGPACK:
            return MsgpackFrameWriter(output, flush_each_element=flush, close_output=close_output)
