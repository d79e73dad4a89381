"""One-slot lookahead between the record stream and the writer.

The tag for object N only arrives after object N, so object N cannot be
written until object N+1 (or the end of the stream) shows up. The emitter
keeps exactly one object back, attaches any tag seen in the meantime, and
writes it once its tag can no longer change. Memory stays O(1) whatever the
result size.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from querystream.foundation.errors import JsonValue, MappingError, QueryStreamError
from querystream.runtime.observability.logging import BoundLogger, get_logger

from .envelope import Envelope

if TYPE_CHECKING:
    from querystream.foundation.config import EnvelopeSettings
    from querystream.io.streaming import StructuredWriter


class ObjectMapper(Protocol):
    """Renders a domain object, with its tag if one arrived, into a writable element.

    Must be deterministic and free of side effects.
    """

    def __call__(self, obj: object, tag: object | None, /) -> JsonValue: ...


@dataclass(slots=True)
class PendingObject:
    """The single object held back until its tag is settled."""
    obj: object
    tag: object | None = None


class LookaheadEmitter:
    """Drives the writer's array lifecycle and holds at most one pending object.

    Each container is marked open only once the writer accepted its start
    call, and closed only once it accepted the end call, so the fault path
    ends exactly what was started.
    """

    __slots__ = ("_writer", "_mapper", "_envelope", "_names", "_log", "_pending", "_opened", "_block_open",
                 "_array_open", "written", "dropped_tags")

    def __init__(
        self,
        writer: StructuredWriter,
        mapper: ObjectMapper,
        names: EnvelopeSettings,
        envelope: Envelope | None = None,
        *,
        logger: BoundLogger | None = None,
    ) -> None:
        self._writer = writer
        self._mapper = mapper
        self._envelope = envelope or Envelope()
        self._names = names
        self._log = logger or get_logger("querystream.emitter")
        self._pending: PendingObject | None = None
        self._opened = False
        self._block_open = False
        self._array_open = False
        self.written = 0
        self.dropped_tags = 0

    @property
    def opened(self) -> bool:
        """True once the writer's open() succeeded, even if the rest of the header failed."""
        return self._opened

    @property
    def pending(self) -> PendingObject | None:
        return self._pending

    def on_object(self, obj: object) -> None:
        if not self._opened:
            self._open()
        self._flush()
        self._pending = PendingObject(obj)

    def on_tag(self, tag: object) -> None:
        """Attach tag to the pending object, replacing any earlier tag."""
        if self._pending is None:
            self.dropped_tags += 1
            self._log.warning("tag dropped", reason="no pending object", tag_type=type(tag).__name__)
            return
        self._pending.tag = tag

    def finish(self) -> None:
        """Write the last object and close the array. No-op if the array is not open."""
        if not self._array_open:
            return
        self._flush()
        self._close_containers()

    def abandon(self) -> None:
        """Fault path: discard the pending object unwritten and end whatever containers are still open."""
        self._pending = None
        self._close_containers()

    # ─── Writer calls ──────────────────────────────────────────────────

    def _open(self) -> None:
        self._writer.open()
        self._opened = True
        for name, value in self._envelope.header_fields():
            self._writer.write_field(name, value)
        self._writer.start_block(self._names.objects_block)
        self._block_open = True
        self._writer.start_array(self._names.object_array)
        self._array_open = True

    def _flush(self) -> None:
        if (pending := self._pending) is None:
            return
        # Cleared first so a mapping fault cannot re-render the same object
        self._pending = None
        self._writer.write_element(self._render(pending))
        self.written += 1

    def _render(self, pending: PendingObject) -> JsonValue:
        try:
            return self._mapper(pending.obj, pending.tag)
        except QueryStreamError:
            raise
        except Exception as e:
            raise MappingError.wrap(e, pending.obj) from e

    def _close_containers(self) -> None:
        if self._array_open:
            self._writer.end_array()
            self._array_open = False
        if self._block_open:
            self._writer.end_block(self._names.objects_block)
            self._block_open = False
