"""Tracer module."""

from .tracer import Tracer, get_tracer, set_tracer, trace, trace_class
from .wrapper import wrap_method

__all__ = ["Tracer", "get_tracer", "set_tracer", "trace", "trace_class", "wrap_method"]
