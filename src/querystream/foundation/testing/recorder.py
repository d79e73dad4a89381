"""Recording writer for session tests.

Records every writer call for verification, can simulate a consumer
disconnect after N elements, and enforces the closed-writer contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from querystream.foundation.errors import JsonValue, StreamAborted, WriterClosed


@dataclass(slots=True, frozen=True)
class Call:
    """Record of a single writer call."""
    method: str
    args: tuple[JsonValue, ...] = ()


@dataclass
class RecordingWriter:
    """StructuredWriter double.

    Attributes:
        abort_after: raise StreamAborted on the element write after this many elements
        fail_on: method name whose next call raises RuntimeError
    """
    calls: list[Call] = field(default_factory=list)
    abort_after: int | None = None
    fail_on: str | None = None
    element_count: int = 0
    _closed: bool = False

    # ─── Inspection ────────────────────────────────────────────────────

    @property
    def methods(self) -> list[str]:
        return [c.method for c in self.calls]

    @property
    def elements(self) -> list[JsonValue]:
        return [c.args[0] for c in self.calls if c.method == "write_element"]

    def fields(self) -> dict[str, JsonValue]:
        return {c.args[0]: c.args[1] for c in self.calls if c.method == "write_field"}  # type: ignore[misc]

    def count(self, method: str) -> int:
        return sum(1 for c in self.calls if c.method == method)

    def assert_not_called(self, method: str) -> None:
        if n := self.count(method):
            raise AssertionError(f"{method} called {n} times")

    def assert_called_once(self, method: str) -> None:
        if (n := self.count(method)) != 1:
            raise AssertionError(f"{method} called {n} times, expected once")

    # ─── StructuredWriter ──────────────────────────────────────────────

    def _record(self, method: str, *args: JsonValue) -> None:
        if self._closed:
            raise WriterClosed(f"{method} after close")
        if self.fail_on == method:
            self.fail_on = None
            raise RuntimeError(f"simulated {method} failure")
        self.calls.append(Call(method, args))

    def open(self) -> None: self._record("open")
    def write_field(self, name: str, value: JsonValue) -> None: self._record("write_field", name, value)
    def start_block(self, name: str) -> None: self._record("start_block", name)
    def end_block(self, name: str) -> None: self._record("end_block", name)
    def start_array(self, name: str) -> None: self._record("start_array", name)
    def end_array(self) -> None: self._record("end_array")

    def write_element(self, value: JsonValue) -> None:
        if self.abort_after is not None and self.element_count >= self.abort_after:
            raise StreamAborted("consumer disconnected")
        self._record("write_element", value)
        self.element_count += 1

    def close(self) -> None:
        self._record("close")
        self._closed = True

    def release(self) -> None:
        # Recorded even after close; the session must call it exactly once
        self.calls.append(Call("release"))
