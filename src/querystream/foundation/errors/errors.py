"""Error codes and exceptions for result streaming.

Operational messages from the query engine never raise; these exceptions
cover the conditions that end a session early (consumer abort, unrecoverable
fault) and misuse of a writer or session.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import Self


class ErrorCode(StrEnum):
    """Machine-readable classification of session failures."""
    NOT_FOUND = "NOT_FOUND"
    STREAM_ABORTED = "STREAM_ABORTED"
    MAPPING_FAILED = "MAPPING_FAILED"
    SOURCE_FAILED = "SOURCE_FAILED"
    INVALID_QUERY = "INVALID_QUERY"
    WRITER_CLOSED = "WRITER_CLOSED"
    UNKNOWN = "UNKNOWN"


# Ordered pattern -> code mapping, first hit wins
_PATTERN_CODES: dict[str, ErrorCode] = {
    "abort": ErrorCode.STREAM_ABORTED,
    "brokenpipe": ErrorCode.STREAM_ABORTED,
    "connectionreset": ErrorCode.STREAM_ABORTED,
    "mapping": ErrorCode.MAPPING_FAILED,
    "writerclosed": ErrorCode.WRITER_CLOSED,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES)


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.SOURCE_FAILED


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to error code. Package exceptions carry their own code."""
    if isinstance(exc, QueryStreamError):
        return exc.code
    return _classify_cached(type(exc).__name__)


class QueryStreamError(Exception):
    """Base for all querystream exceptions."""

    code: ErrorCode = ErrorCode.UNKNOWN


class StreamAborted(QueryStreamError):
    """The consumer went away. Expected termination, never reported as an error."""

    code = ErrorCode.STREAM_ABORTED

    @classmethod
    def from_os_error(cls, exc: OSError) -> Self:
        return cls(f"stream aborted by consumer: {exc}")


class WriterClosed(QueryStreamError):
    """A writer call arrived after close() or release()."""

    code = ErrorCode.WRITER_CLOSED


class SessionError(QueryStreamError):
    """A session was reused after reaching a terminal state."""

    code = ErrorCode.UNKNOWN


class InvalidQuery(QueryStreamError):
    """Raised by a record source that rejects its query. The message is shown to the caller."""

    code = ErrorCode.INVALID_QUERY


class MappingError(QueryStreamError):
    """The object mapper failed to render an object."""

    __slots__ = ("obj",)
    code = ErrorCode.MAPPING_FAILED

    def __init__(self, message: str, obj: object = None) -> None:
        super().__init__(message)
        self.obj = obj

    @classmethod
    def wrap(cls, exc: Exception, obj: object) -> Self:
        return cls(f"failed to map {type(obj).__name__}: {exc}", obj)
