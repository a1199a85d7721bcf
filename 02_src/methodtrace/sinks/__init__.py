"""Event sink module."""

from .sinks import ConsoleSink, HttpSink, ITraceSink, LoggingSink, MemorySink

__all__ = ["ITraceSink", "ConsoleSink", "LoggingSink", "HttpSink", "MemorySink"]
