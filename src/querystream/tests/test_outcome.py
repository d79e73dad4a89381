"""Tests for outcome -> transport mapping and error classification."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator

import pytest

from querystream.core import (
    Aborted,
    Faulted,
    Found,
    Message,
    NotFound,
    ObjectRecord,
    ResultSession,
    error_entity,
    status_for,
)
from querystream.foundation.config import EnvelopeSettings, QueryStreamSettings
from querystream.foundation.errors import (
    ErrorCode,
    InvalidQuery,
    MappingError,
    StreamAborted,
    WriterClosed,
    classify_exception,
    trace_from_exc,
)
from querystream.foundation.testing import RecordingWriter


@pytest.mark.parametrize(
    ("outcome", "status"),
    [
        (Found(), 200),
        (Found((Message.warning("w"),)), 200),
        (NotFound(), 404),
        (Faulted(InvalidQuery("bad flag")), 400),
        (Faulted(ValueError("bad flag")), 500),
        (Faulted(RuntimeError("engine down")), 500),
        (Faulted(MappingError("cannot render")), 500),
        (Aborted(), None),
    ],
)
def test_status_for(outcome: object, status: int | None) -> None:
    assert status_for(outcome) == status  # type: ignore[arg-type]


def test_not_found_entity_lists_errors_in_order() -> None:
    names = EnvelopeSettings()
    entity = error_entity(NotFound((Message.error("no entries found"), Message.warning("%s ignored", "-B"))), names)

    assert entity["errormessages"] == {"errormessage": [
        {"severity": "Error", "text": "no entries found"},
        {"severity": "Warning", "text": "%s ignored", "args": [{"value": "-B"}]},
    ]}
    assert entity["terms-and-conditions"]["href"] == names.terms_url


def test_invalid_query_fault_shows_its_message() -> None:
    entity = error_entity(Faulted(InvalidQuery("invalid flag -Z"), (Message.warning("w"),)), EnvelopeSettings())
    messages = entity["errormessages"]["errormessage"]
    assert [m["severity"] for m in messages] == ["Warning", "Error"]
    assert messages[-1]["args"] == [{"value": "invalid flag -Z"}]


def test_internal_fault_hides_details() -> None:
    entity = error_entity(Faulted(RuntimeError("db password rejected")), EnvelopeSettings())
    assert entity["errormessages"]["errormessage"] == [{"severity": "Error", "text": "Internal server error"}]


def test_source_value_error_is_internal_and_not_echoed() -> None:
    def records() -> Iterator[object]:
        yield ObjectRecord("A")
        raise ValueError("db password=hunter2 at 10.0.0.5")

    outcome = ResultSession(RecordingWriter(), lambda obj, tag: obj, settings=QueryStreamSettings()).run(records())

    assert isinstance(outcome, Faulted)
    assert outcome.code is ErrorCode.SOURCE_FAILED
    assert status_for(outcome) == 500
    body = repr(error_entity(outcome, EnvelopeSettings()))
    assert "hunter2" not in body
    assert "Internal server error" in body


@pytest.mark.parametrize(
    ("exc", "code"),
    [
        (BrokenPipeError(), ErrorCode.STREAM_ABORTED),
        (ConnectionResetError(), ErrorCode.STREAM_ABORTED),
        (StreamAborted("gone"), ErrorCode.STREAM_ABORTED),
        (WriterClosed("closed"), ErrorCode.WRITER_CLOSED),
        (MappingError("x"), ErrorCode.MAPPING_FAILED),
        (InvalidQuery("x"), ErrorCode.INVALID_QUERY),
        (ValueError("x"), ErrorCode.SOURCE_FAILED),
        (asyncio.InvalidStateError("x"), ErrorCode.SOURCE_FAILED),
        (KeyError("x"), ErrorCode.SOURCE_FAILED),
    ],
)
def test_classify_exception(exc: BaseException, code: ErrorCode) -> None:
    assert classify_exception(exc) is code


def test_trace_from_exc_records_operation() -> None:
    try:
        raise RuntimeError("engine down")
    except RuntimeError as e:
        trace = trace_from_exc(e, operation="stream_results", code="SOURCE_FAILED", context_id=7)

    assert trace.message == "engine down"
    assert trace.root_operation == "stream_results"
    assert trace.contexts[0].metadata == {"context_id": 7}
    assert "RuntimeError" in (trace.details or "")
    assert "[SOURCE_FAILED]" in trace.format()
