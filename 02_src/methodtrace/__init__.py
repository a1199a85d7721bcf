"""Method tracing: structured call/return events for traced classes."""

from .locator import UNKNOWN_LOCATION, FrameLocator, ISourceLocator
from .models import ErrorDescriptor, EventKind, TraceEvent, TraceOptions, WrapContext
from .serializer import CIRCULAR, MAX_DEPTH_MARKER, to_jsonable, to_record
from .sinks import ConsoleSink, HttpSink, ITraceSink, LoggingSink, MemorySink
from .tracer import Tracer, get_tracer, set_tracer, trace, trace_class, wrap_method

__all__ = [
    # Decorators
    "trace",
    "trace_class",
    "Tracer",
    "get_tracer",
    "set_tracer",
    "wrap_method",
    # Models
    "EventKind",
    "TraceEvent",
    "ErrorDescriptor",
    "WrapContext",
    "TraceOptions",
    # Serialization
    "CIRCULAR",
    "MAX_DEPTH_MARKER",
    "to_jsonable",
    "to_record",
    # Locations
    "ISourceLocator",
    "FrameLocator",
    "UNKNOWN_LOCATION",
    # Sinks
    "ITraceSink",
    "ConsoleSink",
    "LoggingSink",
    "HttpSink",
    "MemorySink",
]
