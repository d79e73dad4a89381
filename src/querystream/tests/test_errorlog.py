"""Tests for ErrorLog accumulation and one-shot drain."""

from __future__ import annotations

from querystream.core import ErrorLog, Message


def test_info_messages_are_filtered() -> None:
    log = ErrorLog()
    assert log.add(Message.info("%s objects", 3)) is False
    assert len(log) == 0


def test_keeps_order_of_warnings_and_errors() -> None:
    log = ErrorLog()
    first, second, third = Message.error("one"), Message.warning("two"), Message.error("three")
    for m in (first, Message.info("skip"), second, third):
        log.add(m)
    assert list(log) == [first, second, third]


def test_drain_is_one_shot() -> None:
    log = ErrorLog()
    a, b = Message.error("a"), Message.warning("b")
    log.add(a)
    log.add(b)

    assert log.drain() == (a, b)
    assert log.drain() == ()
    assert not log


def test_accepts_messages_after_drain() -> None:
    log = ErrorLog()
    log.add(Message.error("a"))
    log.drain()
    c = Message.error("c")
    log.add(c)
    assert log.drain() == (c,)
