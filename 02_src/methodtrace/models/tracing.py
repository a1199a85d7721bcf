"""Tracing data models."""

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from ..sinks import ITraceSink


class EventKind(str, Enum):
    """Kinds of emitted trace records."""

    CALL = "function_call"
    RETURN = "function_return"
    CLASS_INIT = "class_init"
    CLASS_DESTROY = "class_destroy"


@dataclass(frozen=True)
class ErrorDescriptor:
    """Structural capture of a raised exception."""

    name: str
    message: str
    stack: str | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorDescriptor":
        """Describe an exception without keeping a reference to it."""
        stack = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
        return cls(name=type(exc).__name__, message=str(exc), stack=stack)

    def as_dict(self) -> dict:
        data = {"name": self.name, "message": self.message}
        if self.stack:
            data["stack"] = self.stack
        return data


@dataclass
class TraceEvent:
    """A single call, return or lifecycle record.

    Holds live argument and return values; they are only turned into
    plain data when a sink serializes the event.
    """

    kind: EventKind
    file: str
    function: str | None = None
    class_name: str | None = None
    args: list | None = None
    kwargs: dict | None = None
    return_value: Any = None
    error: ErrorDescriptor | None = None
    duration_ms: float | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> dict:
        """Raw record in wire key order, values not yet serialized."""
        data: dict[str, Any] = {"event": self.kind.value, "file": self.file}
        if self.function is not None:
            data["function"] = self.function
        if self.class_name is not None:
            data["class"] = self.class_name
        data["timestamp"] = self.timestamp.isoformat()

        if self.args is not None:
            data["args"] = list(self.args)
        if self.kwargs:
            data["kwargs"] = dict(self.kwargs)

        if self.error is not None:
            data["error"] = self.error.as_dict()
        elif self.kind is EventKind.RETURN:
            data["returnValue"] = self.return_value

        if self.duration_ms is not None:
            data["durationMs"] = round(self.duration_ms, 3)
        return data


@dataclass(frozen=True)
class WrapContext:
    """Metadata fixed when a wrapper is installed."""

    function_name: str | None
    class_name: str | None
    file: str
    sink: "ITraceSink"
    clock: Callable[[], float]

    def event(self, kind: EventKind, **fields: Any) -> TraceEvent:
        """Build a TraceEvent carrying this context."""
        return TraceEvent(
            kind=kind,
            file=self.file,
            function=self.function_name,
            class_name=self.class_name,
            **fields,
        )
