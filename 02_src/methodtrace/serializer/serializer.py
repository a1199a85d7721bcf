"""Conversion of arbitrary runtime values into JSON-safe data."""

import dataclasses
import math
from collections.abc import Mapping
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from pydantic import BaseModel

from ..models import ErrorDescriptor, TraceEvent

CIRCULAR = "[Circular]"
MAX_DEPTH_MARKER = "[MaxDepth]"

# Nesting levels kept per value; deeper composites become MAX_DEPTH_MARKER
MAX_DEPTH = 50


def to_jsonable(value: Any) -> Any:
    """Convert a value into plain dicts, lists and primitives.

    Exceptions become error descriptors. A composite seen earlier in the same
    call is replaced by CIRCULAR, one nested deeper than MAX_DEPTH levels by
    MAX_DEPTH_MARKER. Each call starts with an empty visited set.
    """
    # id -> object; holding the objects keeps their ids from being reused
    seen: dict[int, Any] = {}
    return _convert(value, seen, 0)


def to_record(event: TraceEvent) -> dict:
    """Serialize a TraceEvent into its emitted record."""
    return to_jsonable(event.as_dict())


def _convert(value: Any, seen: dict[int, Any], depth: int) -> Any:
    if isinstance(value, BaseException):
        return ErrorDescriptor.from_exception(value).as_dict()

    if isinstance(value, Enum):
        return _convert(value.value, seen, depth)
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        # JSON has no NaN or Infinity
        return value if math.isfinite(value) else None
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()

    members = _members(value)
    if members is None:
        return _safe_repr(value)

    if id(value) in seen:
        return CIRCULAR
    if depth >= MAX_DEPTH:
        return MAX_DEPTH_MARKER
    seen[id(value)] = value

    if isinstance(members, dict):
        return {_key(k): _convert(v, seen, depth + 1) for k, v in members.items()}
    return [_convert(item, seen, depth + 1) for item in members]


def _members(value: Any) -> dict | list | None:
    """Children of a composite value, or None for leaves."""
    if isinstance(value, Mapping):
        return dict(value.items())
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    if isinstance(value, BaseModel):
        return dict(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if callable(value) or isinstance(value, (type, bytes, bytearray)):
        return None
    attributes = getattr(value, "__dict__", None)
    if isinstance(attributes, dict):
        return dict(attributes)
    return None


def _key(key: Any) -> str:
    if isinstance(key, Enum):
        return str(key.value)
    if isinstance(key, str):
        return key
    return str(key)


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:
        return f"<unrepresentable {type(value).__name__}>"
