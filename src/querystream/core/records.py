"""Record types pushed by the query engine and their classification.

A query produces a single ordered stream of three record kinds:

    ObjectRecord   a result object
    TagRecord      out-of-band metadata for the most recent object
    MessageRecord  a status message (info, warning, error)

There is no key linking a tag to its object; association is positional.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from functools import singledispatch
from typing import Annotated, Generic, TypeAlias, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

O = TypeVar("O")
G = TypeVar("G")


class Severity(StrEnum):
    """Message severity. INFO never surfaces as an error."""
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


class Message(BaseModel):
    """A status message from the query engine.

    Attributes:
        severity: Info, Warning or Error
        text: Message template, %s placeholders filled from args
        args: Template arguments
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity = Severity.INFO
    text: Annotated[str, Field(min_length=1)]
    args: tuple[str, ...] = ()

    @computed_field
    @property
    def formatted(self) -> str:
        """Text with args substituted."""
        if not self.args:
            return self.text
        try:
            return self.text % self.args
        except (TypeError, ValueError):
            return f"{self.text} {' '.join(self.args)}"

    @classmethod
    def info(cls, text: str, *args: object) -> Message:
        return cls(severity=Severity.INFO, text=text, args=tuple(map(str, args)))

    @classmethod
    def warning(cls, text: str, *args: object) -> Message:
        return cls(severity=Severity.WARNING, text=text, args=tuple(map(str, args)))

    @classmethod
    def error(cls, text: str, *args: object) -> Message:
        return cls(severity=Severity.ERROR, text=text, args=tuple(map(str, args)))

    def __str__(self) -> str:
        return f"{self.severity}: {self.formatted}"


@dataclass(slots=True, frozen=True)
class ObjectRecord(Generic[O]):
    """A result object."""
    payload: O


@dataclass(slots=True, frozen=True)
class TagRecord(Generic[G]):
    """Tag metadata belonging to the most recently seen object."""
    payload: G


@dataclass(slots=True, frozen=True)
class MessageRecord:
    """A status message. unrecognized marks input the classifier had no rule for."""
    message: Message
    unrecognized: bool = False

    @property
    def severity(self) -> Severity:
        return self.message.severity


Record: TypeAlias = ObjectRecord[object] | TagRecord[object] | MessageRecord


# ─────────────────────────────────────────────────────────────────────────────
# Classification
# ─────────────────────────────────────────────────────────────────────────────


@singledispatch
def classify(raw: object) -> Record:
    """Route a raw engine record to its Record variant.

    Domain types are registered by the embedding application:

        >>> @classify.register
        ... def _(obj: RpslObject) -> Record:
        ...     return ObjectRecord(obj)

    Never raises: anything without a rule becomes an unrecognized INFO message.
    """
    return MessageRecord(Message.info("unrecognized record of type %s", type(raw).__name__), unrecognized=True)


@classify.register
def _(raw: ObjectRecord) -> Record:
    return raw


@classify.register
def _(raw: TagRecord) -> Record:
    return raw


@classify.register
def _(raw: MessageRecord) -> Record:
    return raw


@classify.register
def _(raw: Message) -> Record:
    return MessageRecord(raw)
