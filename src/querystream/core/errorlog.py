"""Ordered accumulation of operational messages for one session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .records import Message, Severity

if TYPE_CHECKING:
    from collections.abc import Iterator


class ErrorLog:
    """Append-only log of warning and error messages, drained once.

    drain() hands the accumulated messages over and empties the log, so a
    second drain yields nothing.
    """

    __slots__ = ("_messages",)

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def add(self, message: Message) -> bool:
        """Record message unless it is informational. Returns whether it was kept."""
        if message.severity is Severity.INFO:
            return False
        self._messages.append(message)
        return True

    def drain(self) -> tuple[Message, ...]:
        drained, self._messages = tuple(self._messages), []
        return drained

    def __len__(self) -> int:
        return len(self._messages)

    def __bool__(self) -> bool:
        return bool(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __repr__(self) -> str:
        return f"ErrorLog({len(self._messages)} messages)"
