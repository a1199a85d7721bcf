"""Data models for methodtrace."""

from .options import TraceOptions
from .tracing import ErrorDescriptor, EventKind, TraceEvent, WrapContext

__all__ = [
    # Events
    "EventKind",
    "TraceEvent",
    "ErrorDescriptor",
    # Installation
    "WrapContext",
    "TraceOptions",
]
