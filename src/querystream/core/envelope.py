"""Document envelope: header content and the trailer written after the object array.

Layout written around the streamed elements (names configurable through
EnvelopeSettings):

    open
      service, parameters, extra header fields
      objects { object [ ...elements... ] }
      errormessages { errormessage [...] }     only when errors accumulated
      terms-and-conditions
    close
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from querystream.foundation.errors import JsonDict, JsonValue

if TYPE_CHECKING:
    from querystream.foundation.config import EnvelopeSettings
    from querystream.io.streaming import StructuredWriter

    from .records import Message


class Envelope(BaseModel):
    """Header content for one response. None fields are omitted."""

    model_config = ConfigDict(frozen=True)

    service: JsonValue | None = None
    parameters: JsonValue | None = None
    header: JsonDict = Field(default_factory=dict)

    def header_fields(self) -> Iterator[tuple[str, JsonValue]]:
        if self.service is not None:
            yield "service", self.service
        if self.parameters is not None:
            yield "parameters", self.parameters
        yield from self.header.items()


def message_entity(message: Message) -> JsonDict:
    entity: JsonDict = {"severity": str(message.severity), "text": message.text}
    if message.args:
        entity["args"] = [{"value": a} for a in message.args]
    return entity


def error_messages_entity(errors: Iterable[Message], names: EnvelopeSettings) -> JsonDict:
    """Block body listing messages, in order."""
    return {names.error_element: [message_entity(m) for m in errors]}


def terms_link(names: EnvelopeSettings) -> JsonDict:
    return {"type": "locator", "href": names.terms_url}


def write_trailer(writer: StructuredWriter, errors: tuple[Message, ...], names: EnvelopeSettings) -> None:
    """Write errors (if any) and closing metadata, then close the envelope."""
    if errors:
        writer.write_field(names.errors_field, error_messages_entity(errors, names))
    writer.write_field(names.terms_field, terms_link(names))
    writer.close()
