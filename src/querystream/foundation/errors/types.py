"""Type aliases and fault provenance for session failures.

Uses Pydantic models so a fault can be serialized into an error entity or a
log line without custom encoders.
"""

from __future__ import annotations

import traceback
from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer

# JSON type aliases - Any for recursive slots to avoid Pydantic resolution issues
JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list[Any], dict[str, Any]]
JsonDict = dict[str, Any]

_EMPTY_META: JsonDict = {}


class ErrorContext(BaseModel):
    """One operation in a fault's call chain."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="forbid")

    operation: Annotated[str, Field(min_length=1)]
    metadata: JsonDict = Field(default_factory=dict, repr=False)

    def __str__(self) -> str:
        meta = f" ({', '.join(f'{k}={v}' for k, v in self.metadata.items())})" if self.metadata else ""
        return f"{self.operation}{meta}"


_EMPTY_CONTEXTS: tuple[ErrorContext, ...] = ()


class ErrorTrace(BaseModel):
    """Immutable description of an unrecoverable session fault."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    message: Annotated[str, Field(min_length=1)]
    contexts: tuple[ErrorContext, ...] = _EMPTY_CONTEXTS
    error_code: str | None = None
    details: str | None = Field(default=None, repr=False)

    @field_serializer("contexts")
    def _serialize_contexts(self, v: tuple[ErrorContext, ...]) -> list[JsonDict]:
        return [ctx.model_dump() for ctx in v]

    @computed_field
    @property
    def root_operation(self) -> str | None:
        """First operation in the trace (origin)."""
        return self.contexts[0].operation if self.contexts else None

    def with_operation(self, operation: str, **metadata: JsonValue) -> ErrorTrace:
        """Return a new trace with one more context appended."""
        ctx = ErrorContext.model_construct(operation=operation, metadata=metadata or _EMPTY_META)
        return self.model_copy(update={"contexts": (*self.contexts, ctx)})

    def format(self, *, include_details: bool = False) -> str:
        parts = [self.message]
        if self.error_code:
            parts.append(f" [{self.error_code}]")
        if self.contexts:
            parts.append("\nContext trace:\n" + "\n".join(f"  - {ctx}" for ctx in self.contexts))
        if include_details and self.details:
            parts.append(f"\nDetails:\n{self.details}")
        return "".join(parts)

    __str__ = format


def context(operation: str, **metadata: JsonValue) -> ErrorContext:
    """Create ErrorContext concisely (bypasses validation)."""
    return ErrorContext.model_construct(operation=operation, metadata=metadata or _EMPTY_META)


def trace_from_exc(exc: BaseException, *, operation: str = "", code: str | None = None,
                   **metadata: JsonValue) -> ErrorTrace:
    """Create ErrorTrace from exception with optional operation context."""
    t = ErrorTrace.model_construct(
        message=str(exc) or type(exc).__name__,
        contexts=_EMPTY_CONTEXTS,
        error_code=code,
        details="".join(traceback.format_exception(exc)),
    )
    return t.with_operation(operation, **metadata) if operation else t
