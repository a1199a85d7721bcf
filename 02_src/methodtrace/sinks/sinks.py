"""Event sinks: where serialized trace records go."""

import json
import logging
import sys
from typing import Protocol, TextIO

import httpx

from ..logging_config import get_logger
from ..models import TraceEvent
from ..serializer import to_record


class ITraceSink(Protocol):
    """Receives one trace event at a time, in emission order.

    Errors raised by emit() are not caught by the tracer and surface in the
    traced call itself.
    """

    def emit(self, event: TraceEvent) -> None:
        """Serialize and deliver a single event."""
        ...


class ConsoleSink:
    """Writes one JSON line per event."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    def emit(self, event: TraceEvent) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(json.dumps(to_record(event), ensure_ascii=False) + "\n")
        stream.flush()


class LoggingSink:
    """Forwards events to a logger, the record attached as `context`."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO):
        self._logger = logger or get_logger("methodtrace.events")
        self._level = level

    def emit(self, event: TraceEvent) -> None:
        record = to_record(event)
        target = ".".join(
            part for part in (record.get("class"), record.get("function")) if part
        )
        self._logger.log(
            self._level,
            "%s %s",
            record["event"],
            target or record["file"],
            extra={"context": record},
        )


class HttpSink:
    """Ships each record as a JSON POST to a collector endpoint."""

    def __init__(
        self,
        url: str,
        client: httpx.Client | None = None,
        timeout: float = 5.0,
    ):
        self._url = url
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def emit(self, event: TraceEvent) -> None:
        response = self._client.post(self._url, json=to_record(event))
        response.raise_for_status()

    def close(self) -> None:
        """Close the HTTP client if this sink created it."""
        if self._owns_client:
            self._client.close()


class MemorySink:
    """Keeps events in memory. Used by tests and interactive sessions."""

    def __init__(self):
        self.events: list[TraceEvent] = []
        self.records: list[dict] = []

    def emit(self, event: TraceEvent) -> None:
        self.events.append(event)
        # Serialized at emission time
        self.records.append(to_record(event))

    def clear(self) -> None:
        self.events.clear()
        self.records.clear()
