"""Error handling for querystream.

- ErrorCode: classification of session failures
- QueryStreamError and subclasses: abort, writer misuse, session reuse, mapping faults, rejected queries
- ErrorTrace/ErrorContext: fault provenance attached to Faulted outcomes
"""

from .errors import (
    ErrorCode,
    InvalidQuery,
    MappingError,
    QueryStreamError,
    SessionError,
    StreamAborted,
    WriterClosed,
    classify_exception,
)
from .types import ErrorContext, ErrorTrace, JsonDict, JsonPrimitive, JsonValue, context, trace_from_exc

__all__ = [
    # Codes & exceptions
    "ErrorCode", "classify_exception",
    "QueryStreamError", "StreamAborted", "WriterClosed", "SessionError", "MappingError", "InvalidQuery",
    # Fault provenance
    "ErrorContext", "ErrorTrace", "context", "trace_from_exc",
    # JSON aliases
    "JsonDict", "JsonPrimitive", "JsonValue",
]
