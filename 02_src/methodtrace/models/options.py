"""Wrap-time options."""

from pydantic import BaseModel, ConfigDict


class TraceOptions(BaseModel):
    """Options accepted by trace() and trace_class()."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    function_name: str | None = None
    exclude_methods: frozenset[str] = frozenset()
    include_inherited: bool = False
