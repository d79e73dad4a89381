"""querystream - incremental streaming of query results into structured documents.

A query engine pushes an ordered mix of result objects, tag metadata and
status messages. querystream writes them out as one document while they
arrive: objects in order, each with the tag that followed it, messages
gathered into a trailer, and nothing buffered beyond a single object.

Quick Start:
    >>> import io
    >>> from querystream import Envelope, Message, ObjectRecord, TagRecord, ResultSession, get_writer
    >>>
    >>> out = io.BytesIO()
    >>> session = ResultSession(
    ...     get_writer(out, "application/json", close_output=False),
    ...     lambda obj, tag: {"key": obj, **({"tag": tag} if tag else {})},
    ...     Envelope(service="search"),
    ... )
    >>> session.run([ObjectRecord("AS1"), TagRecord("unref"), ObjectRecord("AS2"), Message.warning("slow")])
    Found(errors=(Message(severity=<Severity.WARNING: 'Warning'>, text='slow', ...),))

Registering engine types:
    >>> from querystream import classify
    >>> classify.register(RpslObject, ObjectRecord)
"""

from __future__ import annotations

__version__ = "0.1.0"

from .core import (
    Aborted,
    Envelope,
    ErrorLog,
    Faulted,
    Found,
    LookaheadEmitter,
    Message,
    MessageRecord,
    NotFound,
    ObjectMapper,
    ObjectRecord,
    PendingObject,
    Record,
    RecordSource,
    ResultSession,
    SessionOutcome,
    SessionState,
    Severity,
    TagRecord,
    classify,
    error_entity,
    status_for,
    stream_results,
)
from .foundation.config import QueryStreamSettings, clear_settings_cache, get_settings
from .foundation.errors import (
    ErrorCode,
    InvalidQuery,
    MappingError,
    QueryStreamError,
    SessionError,
    StreamAborted,
    WriterClosed,
)
from .io.streaming import (
    JsonStreamingWriter,
    MsgpackFrameWriter,
    StructuredWriter,
    XmlStreamingWriter,
    get_writer,
)
from .runtime.observability.logging import configure_logging, get_logger

__all__ = [
    # Records
    "Record", "ObjectRecord", "TagRecord", "MessageRecord", "Message", "Severity", "classify",
    # Core
    "LookaheadEmitter", "PendingObject", "ObjectMapper", "ErrorLog", "Envelope",
    "ResultSession", "RecordSource", "SessionState", "stream_results",
    # Outcomes
    "SessionOutcome", "Found", "NotFound", "Faulted", "Aborted", "status_for", "error_entity",
    # Writers
    "StructuredWriter", "JsonStreamingWriter", "XmlStreamingWriter", "MsgpackFrameWriter", "get_writer",
    # Errors
    "ErrorCode", "QueryStreamError", "StreamAborted", "WriterClosed", "SessionError", "MappingError", "InvalidQuery",
    # Config & logging
    "QueryStreamSettings", "get_settings", "clear_settings_cache", "configure_logging", "get_logger",
]
