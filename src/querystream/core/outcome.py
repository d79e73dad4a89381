"""Session outcomes and their mapping onto a transport response.

    Found      objects were streamed; errors (if any) sit in the trailer
    NotFound   no object at all; nothing was written, errors are the whole body
    Faulted    unrecoverable source or mapping failure
    Aborted    the consumer disconnected; there is nobody left to answer
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from querystream.foundation.config import EnvelopeSettings, get_settings
from querystream.foundation.errors import ErrorCode, ErrorTrace, JsonDict, classify_exception

from .envelope import error_messages_entity, terms_link
from .records import Message


@dataclass(slots=True, frozen=True)
class Found:
    errors: tuple[Message, ...] = ()


@dataclass(slots=True, frozen=True)
class NotFound:
    errors: tuple[Message, ...] = ()


@dataclass(slots=True, frozen=True)
class Faulted:
    """Failure with the messages accumulated before it."""
    cause: BaseException
    errors: tuple[Message, ...] = ()
    trace: ErrorTrace | None = field(default=None, compare=False)

    @property
    def code(self) -> ErrorCode:
        return classify_exception(self.cause)


@dataclass(slots=True, frozen=True)
class Aborted:
    written: int = 0


SessionOutcome: TypeAlias = Found | NotFound | Faulted | Aborted


def status_for(outcome: SessionOutcome) -> int | None:
    """HTTP status for an outcome. None when the consumer is gone."""
    match outcome:
        case Found():
            return 200
        case NotFound():
            return 404
        case Faulted() if outcome.code is ErrorCode.INVALID_QUERY:
            return 400
        case Faulted():
            return 500
        case Aborted():
            return None


def error_entity(outcome: NotFound | Faulted, names: EnvelopeSettings | None = None) -> JsonDict:
    """Response body for a failed session: accumulated messages plus the terms link.

    A bad query's own message is shown to the caller; any other fault is
    reported as an internal error without details.
    """
    names = names or get_settings().envelope
    errors = list(outcome.errors)
    if isinstance(outcome, Faulted):
        if outcome.code is ErrorCode.INVALID_QUERY:
            errors.append(Message.error("%s", outcome.cause))
        else:
            errors.append(Message.error("Internal server error"))
    return {
        names.errors_field: error_messages_entity(errors, names),
        names.terms_field: terms_link(names),
    }
