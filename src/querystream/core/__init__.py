"""Streaming core: record classification, lookahead emission and session orchestration."""

from .emitter import LookaheadEmitter, ObjectMapper, PendingObject
from .envelope import Envelope, error_messages_entity, terms_link, write_trailer
from .errorlog import ErrorLog
from .outcome import Aborted, Faulted, Found, NotFound, SessionOutcome, error_entity, status_for
from .records import Message, MessageRecord, ObjectRecord, Record, Severity, TagRecord, classify
from .session import RecordSource, ResultSession, SessionState, stream_results

__all__ = [
    # Records
    "Record", "ObjectRecord", "TagRecord", "MessageRecord", "Message", "Severity", "classify",
    # Lookahead
    "LookaheadEmitter", "PendingObject", "ObjectMapper",
    # Envelope
    "Envelope", "write_trailer", "error_messages_entity", "terms_link",
    # Session
    "ResultSession", "RecordSource", "SessionState", "stream_results", "ErrorLog",
    # Outcomes
    "SessionOutcome", "Found", "NotFound", "Faulted", "Aborted", "status_for", "error_entity",
]
