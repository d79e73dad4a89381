"""One query-to-output session.

A session wires a record source to the lookahead emitter, decides between
found and not-found, closes the envelope exactly once and releases the
writer on every exit path:

    IDLE -> STREAMING -> FOUND | NOT_FOUND | ABORTED | FAULTED

Example:
    >>> session = ResultSession(get_writer(output), mapper, Envelope(service="search"))
    >>> match session.run(engine_records):
    ...     case NotFound(errors): respond_404(error_entity(NotFound(errors)))
    ...     case Faulted() as f: respond(status_for(f))
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Callable, Iterable
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from querystream.foundation.config import get_settings
from querystream.foundation.errors import SessionError, StreamAborted, classify_exception, trace_from_exc
from querystream.runtime.observability.logging import BoundLogger, get_logger

from .emitter import LookaheadEmitter, ObjectMapper
from .envelope import Envelope, write_trailer
from .errorlog import ErrorLog
from .outcome import Aborted, Faulted, Found, NotFound, SessionOutcome
from .records import MessageRecord, ObjectRecord, TagRecord, classify

if TYPE_CHECKING:
    from querystream.foundation.config import QueryStreamSettings
    from querystream.io.streaming import StructuredWriter


class RecordSource(Protocol):
    """Push-style producer: delivers records in order to handle, then returns or raises."""

    def __call__(self, context_id: int, handle: Callable[[object], None], /) -> None: ...


class SessionState(StrEnum):
    IDLE = "idle"
    STREAMING = "streaming"
    FOUND = "found"
    NOT_FOUND = "not_found"
    ABORTED = "aborted"
    FAULTED = "faulted"


class ResultSession:
    """Streams one query result into one writer. Sessions are single-use and share no state."""

    def __init__(
        self,
        writer: StructuredWriter,
        mapper: ObjectMapper,
        envelope: Envelope | None = None,
        *,
        context_id: int | None = None,
        settings: QueryStreamSettings | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self.context_id = context_id if context_id is not None else id(self)
        self._writer = writer
        self._names = (settings or get_settings()).envelope
        self._log = (logger or get_logger("querystream.session")).bind(context_id=self.context_id)
        self._emitter = LookaheadEmitter(writer, mapper, self._names, envelope, logger=self._log)
        self._errors = ErrorLog()
        self._state = SessionState.IDLE
        self._found_any = False
        self._trailer_started = False
        self.unrecognized = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def found_any(self) -> bool:
        return self._found_any

    @property
    def emitter(self) -> LookaheadEmitter:
        return self._emitter

    # ─── Record dispatch ───────────────────────────────────────────────

    def handle(self, raw: object) -> None:
        """Consume one raw record from the engine."""
        match classify(raw):
            case ObjectRecord(payload=obj):
                self._found_any = True
                self._emitter.on_object(obj)
            case TagRecord(payload=tag):
                self._emitter.on_tag(tag)
            case MessageRecord(message=message, unrecognized=unrecognized):
                self.unrecognized += unrecognized
                self._errors.add(message)
            case other:
                self.unrecognized += 1
                self._log.debug("classifier returned non-record", record_type=type(other).__name__)

    # ─── Entry points ──────────────────────────────────────────────────

    def run(self, source: RecordSource | Iterable[object]) -> SessionOutcome:
        """Run to completion over a push-style source or any iterable of raw records."""
        self._begin()
        try:
            if isinstance(source, Iterable):
                for raw in source:
                    self.handle(raw)
            else:
                source(self.context_id, self.handle)
            return self._finalize()
        except StreamAborted as e:
            return self._abort(e)
        except Exception as e:
            return self._fault(e)
        finally:
            self._release()

    async def arun(self, source: AsyncIterable[object]) -> SessionOutcome:
        """Run to completion over an async record stream."""
        self._begin()
        try:
            async for raw in source:
                self.handle(raw)
            return self._finalize()
        except StreamAborted as e:
            return self._abort(e)
        except Exception as e:
            return self._fault(e)
        finally:
            self._release()

    # ─── Terminal paths ────────────────────────────────────────────────

    def _begin(self) -> None:
        if self._state is not SessionState.IDLE:
            raise SessionError(f"session {self.context_id} already {self._state}")
        self._state = SessionState.STREAMING

    def _finalize(self) -> SessionOutcome:
        self._emitter.finish()
        if self.unrecognized:
            self._log.warning("unrecognized records", count=self.unrecognized)
        if not self._found_any:
            self._state = SessionState.NOT_FOUND
            errors = self._errors.drain()
            self._log.debug("no objects found", errors=len(errors))
            return NotFound(errors)
        errors = self._errors.drain()
        self._trailer_started = True
        write_trailer(self._writer, errors, self._names)
        self._state = SessionState.FOUND
        self._log.debug("session finished", written=self._emitter.written, errors=len(errors),
                        dropped_tags=self._emitter.dropped_tags)
        return Found(errors)

    def _abort(self, exc: StreamAborted) -> Aborted:
        self._state = SessionState.ABORTED
        self._log.debug("stream aborted", error=str(exc), written=self._emitter.written)
        return Aborted(self._emitter.written)

    def _fault(self, exc: Exception) -> Faulted:
        self._state = SessionState.FAULTED
        errors = self._errors.drain()
        code = classify_exception(exc)
        self._log.error("session faulted", error=str(exc), code=str(code), errors=len(errors))
        if self._emitter.opened and not self._trailer_started:
            self._trailer_started = True
            try:
                self._emitter.abandon()
                write_trailer(self._writer, errors, self._names)
            except StreamAborted as e:
                self._log.debug("stream aborted while closing after fault", error=str(e))
            except Exception:
                self._log.exception("envelope close failed after fault")
        return Faulted(exc, errors, trace_from_exc(exc, operation="stream_results", code=str(code),
                                                   context_id=self.context_id))

    def _release(self) -> None:
        try:
            self._writer.release()
        except StreamAborted as e:
            self._log.debug("stream aborted on release", error=str(e))


def stream_results(
    source: RecordSource | Iterable[object],
    writer: StructuredWriter,
    mapper: ObjectMapper,
    envelope: Envelope | None = None,
    **kwargs: object,
) -> SessionOutcome:
    """Run a fresh session. kwargs are passed to ResultSession."""
    return ResultSession(writer, mapper, envelope, **kwargs).run(source)  # type: ignore[arg-type]
