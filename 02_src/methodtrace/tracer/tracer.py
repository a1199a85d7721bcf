"""Installers: trace single methods or whole classes."""

import functools
import inspect
import time
from typing import Callable, Iterable, TypeVar

from ..logging_config import get_logger
from ..locator import FrameLocator, ISourceLocator
from ..models import EventKind, TraceOptions, WrapContext
from ..sinks import ConsoleSink, ITraceSink
from .wrapper import wrap_method

logger = get_logger(__name__)

C = TypeVar("C", bound=type)


class Tracer:
    """Installs tracing wrappers that report to one sink."""

    def __init__(
        self,
        sink: ITraceSink,
        locator: ISourceLocator | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._sink = sink
        self._locator = locator or FrameLocator()
        self._clock = clock

    @property
    def sink(self) -> ITraceSink:
        return self._sink

    def wrap(
        self,
        method: Callable,
        function_name: str | None,
        class_name: str | None,
        file: str,
    ) -> Callable:
        """Wrap one callable with a fresh WrapContext."""
        context = WrapContext(
            function_name=function_name,
            class_name=class_name,
            file=file,
            sink=self._sink,
            clock=self._clock,
        )
        return wrap_method(method, context)

    def trace(self, function_name: str | None = None) -> Callable[[Callable], Callable]:
        """Decorator tracing a single method or function.

        The source location is resolved here, once, at decoration time.
        """
        options = TraceOptions(function_name=function_name)
        file = self._locator.locate()

        def decorator(method: Callable) -> Callable:
            name = options.function_name or getattr(method, "__name__", repr(method))
            class_name = _declaring_class(method)
            logger.debug("Tracing %s from %s", name, file)
            return self.wrap(method, function_name=name, class_name=class_name, file=file)

        return decorator

    def trace_class(
        self,
        function_name: str | None = None,
        exclude_methods: Iterable[str] = (),
        include_inherited: bool = False,
    ) -> Callable[[C], C]:
        """Class decorator tracing construction and every eligible method.

        Eligible methods are the plain functions defined on the class, minus
        dunder methods and exclude_methods. They are collected once, when the
        decorator runs. function_name, if given, names the constructor in
        class_init events.

        Dunder methods such as __call__, __getitem__ or __enter__ are never
        traced by the scan. To trace one, decorate it with trace() inside the
        class body; the scan leaves it alone, so it is reported once.
        """
        options = TraceOptions(
            function_name=function_name,
            exclude_methods=exclude_methods,
            include_inherited=include_inherited,
        )
        file = self._locator.locate()

        def decorator(cls: C) -> C:
            methods = _eligible_methods(
                cls, options.exclude_methods, options.include_inherited
            )
            for name, method in methods.items():
                setattr(
                    cls,
                    name,
                    self.wrap(method, function_name=name, class_name=cls.__name__, file=file),
                )

            init_context = WrapContext(
                function_name=options.function_name,
                class_name=cls.__name__,
                file=file,
                sink=self._sink,
                clock=self._clock,
            )
            _decorate_constructor(cls, init_context)

            logger.debug(
                "Tracing class %s from %s: %s", cls.__name__, file, ", ".join(methods)
            )
            return cls

        return decorator


def _declaring_class(method: Callable) -> str | None:
    """Enclosing class name taken from __qualname__, None for plain functions."""
    parts = getattr(method, "__qualname__", "").split(".")
    if len(parts) < 2 or parts[-2] == "<locals>":
        return None
    return parts[-2]


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _eligible_methods(
    cls: type, excluded: frozenset[str], include_inherited: bool
) -> dict[str, Callable]:
    # The first class in the MRO defining a name owns it, whatever it is
    owners = cls.__mro__[:-1] if include_inherited else (cls,)
    claimed: set[str] = set()
    methods: dict[str, Callable] = {}

    for owner in owners:
        for name, attr in vars(owner).items():
            if name in claimed:
                continue
            claimed.add(name)
            if _is_dunder(name) or name in excluded:
                continue
            if inspect.isfunction(attr):
                methods[name] = attr

    return methods


def _decorate_constructor(cls: type, context: WrapContext) -> None:
    """Make __init__ emit class_init before the original constructor runs."""
    original_init = cls.__init__
    inherits_object_init = original_init is object.__init__

    @functools.wraps(original_init)
    def __init__(self, *args, **kwargs):
        context.sink.emit(
            context.event(EventKind.CLASS_INIT, args=list(args), kwargs=dict(kwargs))
        )
        if not inherits_object_init:
            original_init(self, *args, **kwargs)
        elif (args or kwargs) and cls.__new__ is object.__new__:
            # Same failure object.__new__ reports for a class without __init__
            raise TypeError(f"{cls.__name__}() takes no arguments")

    cls.__init__ = __init__


# Process-wide default, used when no tracer is passed explicitly
_default_tracer: Tracer | None = None


def get_tracer() -> Tracer:
    """Get the default tracer, writing JSON lines to stdout."""
    global _default_tracer
    if _default_tracer is None:
        _default_tracer = Tracer(ConsoleSink())
    return _default_tracer


def set_tracer(tracer: Tracer | None) -> None:
    """Replace the default tracer. None resets it to be rebuilt lazily."""
    global _default_tracer
    _default_tracer = tracer


def trace(
    function_name: str | None = None, *, tracer: Tracer | None = None
) -> Callable[[Callable], Callable]:
    """Trace one method: @trace() or @trace(function_name="alias")."""
    return (tracer or get_tracer()).trace(function_name)


def trace_class(
    function_name: str | None = None,
    exclude_methods: Iterable[str] = (),
    include_inherited: bool = False,
    *,
    tracer: Tracer | None = None,
) -> Callable[[C], C]:
    """Trace a class: @trace_class() or @trace_class(exclude_methods=["helper"])."""
    return (tracer or get_tracer()).trace_class(
        function_name=function_name,
        exclude_methods=exclude_methods,
        include_inherited=include_inherited,
    )
