"""Value serializer module."""

from .serializer import CIRCULAR, MAX_DEPTH, MAX_DEPTH_MARKER, to_jsonable, to_record

__all__ = ["CIRCULAR", "MAX_DEPTH", "MAX_DEPTH_MARKER", "to_jsonable", "to_record"]
