"""Method wrapper factory."""

import asyncio
import functools
import inspect
from typing import Any, Awaitable, Callable

import wrapt

from ..models import ErrorDescriptor, EventKind, WrapContext


def wrap_method(method: Callable, context: WrapContext) -> Callable:
    """Wrap a callable so every invocation emits call and return events.

    The wrapper binds like the original (instance method, class method or
    plain function), receives the same arguments and hands back the same
    outcome in the same shape:

    * an exception is reported and re-raised as the same object;
    * an asyncio future or task is returned as is and reported once done;
    * a coroutine comes back as a coroutine that reports when it settles,
      then returns the value or re-raises the original error;
    * any other awaitable comes back behind a proxy that forwards its
      attributes and reports when it is awaited or entered with async with;
    * any other value is reported and returned.

    The call event is emitted before the original runs, so it always
    precedes the matching return event. Wrapping an already traced method
    reports every call twice; callers must not install tracing twice.
    """

    def tracing(wrapped, instance, args, kwargs):
        started = context.clock()
        context.sink.emit(
            context.event(EventKind.CALL, args=list(args), kwargs=dict(kwargs))
        )

        try:
            result = wrapped(*args, **kwargs)
        except BaseException as e:
            _emit_error(context, started, e)
            raise

        if asyncio.isfuture(result):
            result.add_done_callback(
                functools.partial(_on_future_done, context, started)
            )
            return result

        if inspect.iscoroutine(result):
            return _settle(result, context, started)

        if inspect.isawaitable(result):
            return _TracedAwaitable(result, context, started)

        _emit_return(context, started, result)
        return result

    return wrapt.FunctionWrapper(method, tracing)


async def _settle(awaitable: Awaitable, context: WrapContext, started: float) -> Any:
    """Await the original result and report how it settled."""
    try:
        value = await awaitable
    except BaseException as e:
        _emit_error(context, started, e)
        raise

    _emit_return(context, started, value)
    return value


class _TracedAwaitable(wrapt.ObjectProxy):
    """Proxy for an awaitable that is not a coroutine.

    Objects such as awaitable async context managers keep their type and
    attributes. The return event is emitted by whichever of await or
    async with settles the original.
    """

    def __init__(self, wrapped: Awaitable, context: WrapContext, started: float):
        super().__init__(wrapped)
        self._self_context = context
        self._self_started = started

    def __await__(self):
        return _settle(
            self.__wrapped__, self._self_context, self._self_started
        ).__await__()

    async def __aenter__(self):
        try:
            value = await self.__wrapped__.__aenter__()
        except BaseException as e:
            _emit_error(self._self_context, self._self_started, e)
            raise

        _emit_return(self._self_context, self._self_started, value)
        return value

    async def __aexit__(self, exc_type, exc, tb):
        return await self.__wrapped__.__aexit__(exc_type, exc, tb)


def _on_future_done(context: WrapContext, started: float, future: asyncio.Future) -> None:
    if future.cancelled():
        _emit_error(context, started, asyncio.CancelledError())
        return

    error = future.exception()
    if error is not None:
        _emit_error(context, started, error)
    else:
        _emit_return(context, started, future.result())


def _emit_return(context: WrapContext, started: float, value: Any) -> None:
    context.sink.emit(
        context.event(
            EventKind.RETURN,
            return_value=value,
            duration_ms=_elapsed_ms(context, started),
        )
    )


def _emit_error(context: WrapContext, started: float, error: BaseException) -> None:
    context.sink.emit(
        context.event(
            EventKind.RETURN,
            error=ErrorDescriptor.from_exception(error),
            duration_ms=_elapsed_ms(context, started),
        )
    )


def _elapsed_ms(context: WrapContext, started: float) -> float:
    return (context.clock() - started) * 1000
