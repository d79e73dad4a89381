"""Tests for record types, message formatting and classification."""

from __future__ import annotations

from dataclasses import dataclass

from querystream.core import ErrorLog, Message, MessageRecord, ObjectRecord, Severity, TagRecord, classify


@dataclass
class RpslObject:
    key: str


@dataclass
class TagResponse:
    tags: tuple[str, ...]


classify.register(RpslObject, ObjectRecord)
classify.register(TagResponse, TagRecord)


# ─────────────────────────────────────────────────────────────────────────────
# Classification
# ─────────────────────────────────────────────────────────────────────────────


def test_records_pass_through_unchanged() -> None:
    obj, tag, msg = ObjectRecord("AS1"), TagRecord("unref"), MessageRecord(Message.error("boom"))
    assert classify(obj) is obj
    assert classify(tag) is tag
    assert classify(msg) is msg


def test_message_becomes_message_record() -> None:
    msg = Message.warning("slow query")
    assert classify(msg) == MessageRecord(msg)


def test_registered_domain_types() -> None:
    assert classify(RpslObject("AS1")) == ObjectRecord(RpslObject("AS1"))
    assert classify(TagResponse(("unref",))) == TagRecord(TagResponse(("unref",)))


def test_unknown_record_is_ignorable_info() -> None:
    record = classify(object())
    assert isinstance(record, MessageRecord)
    assert record.unrecognized
    assert record.severity is Severity.INFO
    assert "object" in record.message.formatted


def test_unknown_record_never_reaches_error_log() -> None:
    log = ErrorLog()
    record = classify(3.14)
    assert isinstance(record, MessageRecord)
    assert log.add(record.message) is False
    assert not log


# ─────────────────────────────────────────────────────────────────────────────
# Message
# ─────────────────────────────────────────────────────────────────────────────


def test_message_formatting() -> None:
    assert Message.error("%s is not valid", "AS-FOO").formatted == "AS-FOO is not valid"
    assert Message.info("plain").formatted == "plain"
    assert str(Message.warning("careful")) == "Warning: careful"


def test_message_formatting_tolerates_mismatched_args() -> None:
    assert Message.error("no placeholders", "x").formatted == "no placeholders x"


def test_message_factories_set_severity() -> None:
    assert Message.info("a").severity is Severity.INFO
    assert Message.warning("a").severity is Severity.WARNING
    assert Message.error("a", 1, 2).args == ("1", "2")
