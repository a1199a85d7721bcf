"""Tests for the method wrapper factory."""

import asyncio
import inspect

import pytest

from methodtrace.models import ErrorDescriptor, EventKind, WrapContext
from methodtrace.tracer import wrap_method


@pytest.fixture
def context(sink, fake_clock):
    """WrapContext reporting to the memory sink."""
    return WrapContext(
        function_name="op",
        class_name="Service",
        file="tests/test_wrapper.py",
        sink=sink,
        clock=fake_clock,
    )


class TestSyncCalls:
    """Tests for synchronous originals."""

    def test_call_then_return(self, context, sink):
        """Test that one call emits a call and a return event."""
        traced = wrap_method(lambda a, b: a + b, context)

        assert traced(2, 3) == 5

        assert [e.kind for e in sink.events] == [EventKind.CALL, EventKind.RETURN]
        assert sink.events[0].args == [2, 3]
        assert sink.events[1].return_value == 5
        assert sink.events[1].error is None

    def test_call_event_precedes_invocation(self, context, sink):
        """Test that the call event is emitted before the original runs."""
        seen_at_call = []
        traced = wrap_method(lambda: seen_at_call.append(len(sink.events)), context)

        traced()

        assert seen_at_call == [1]

    def test_keyword_arguments(self, context, sink):
        """Test that keyword arguments are reported separately."""
        traced = wrap_method(lambda a, scale=1: a * scale, context)

        assert traced(2, scale=10) == 20
        assert sink.events[0].args == [2]
        assert sink.events[0].kwargs == {"scale": 10}
        assert "kwargs" in sink.records[0]

    def test_context_fields_on_events(self, context, sink):
        """Test that events carry the fixed context."""
        wrap_method(lambda: None, context)()

        for record in sink.records:
            assert record["file"] == "tests/test_wrapper.py"
            assert record["function"] == "op"
            assert record["class"] == "Service"

    def test_duration(self, context, sink):
        """Test that the return event measures call to return."""
        wrap_method(lambda: None, context)()

        # Clock read at call start and at return emission
        assert sink.events[1].duration_ms == 250.0
        assert sink.events[0].duration_ms is None

    def test_metadata_preserved(self, context):
        """Test that name and docstring survive wrapping."""

        def compute(x):
            """Compute things."""
            return x

        traced = wrap_method(compute, context)

        assert traced.__name__ == "compute"
        assert traced.__doc__ == "Compute things."
        assert traced.__wrapped__ is compute


class TestSyncErrors:
    """Tests for originals that raise."""

    def test_same_exception_reraised(self, context, sink):
        """Test that the caller gets the very same exception object."""
        error = ValueError("bad input")

        def fail():
            raise error

        with pytest.raises(ValueError) as excinfo:
            wrap_method(fail, context)()

        assert excinfo.value is error

    def test_return_event_has_descriptor(self, context, sink):
        """Test that the failure is logged as a descriptor, not the live error."""

        def fail():
            raise KeyError("missing")

        with pytest.raises(KeyError):
            wrap_method(fail, context)()

        assert [e.kind for e in sink.events] == [EventKind.CALL, EventKind.RETURN]
        error = sink.events[1].error
        assert isinstance(error, ErrorDescriptor)
        assert error.name == "KeyError"
        assert error.message == "'missing'"
        assert "fail" in error.stack
        assert "returnValue" not in sink.records[1]
        assert sink.records[1]["error"]["name"] == "KeyError"

    def test_base_exceptions_reported(self, context, sink):
        """Test that non-Exception errors are reported and propagate."""

        def stop():
            raise KeyboardInterrupt()

        with pytest.raises(KeyboardInterrupt):
            wrap_method(stop, context)()

        assert sink.events[1].error.name == "KeyboardInterrupt"


class Request:
    """Awaitable async context manager, like an HTTP client's pending request."""

    def __init__(self, body):
        self.body = body
        self.closed = False

    def __await__(self):
        yield from asyncio.sleep(0).__await__()
        return self.body

    async def __aenter__(self):
        await asyncio.sleep(0)
        return self.body

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True
        return False

    def describe(self):
        return f"request for {self.body}"


class TestAsyncCalls:
    """Tests for originals returning awaitables."""

    @pytest.mark.asyncio
    async def test_coroutine_result(self, context, sink):
        """Test that a coroutine is reported when it settles."""

        async def fetch(x):
            await asyncio.sleep(0)
            return x * 2

        pending = wrap_method(fetch, context)(21)

        assert inspect.iscoroutine(pending)
        assert [e.kind for e in sink.events] == [EventKind.CALL]

        assert await pending == 42
        assert [e.kind for e in sink.events] == [EventKind.CALL, EventKind.RETURN]
        assert sink.events[1].return_value == 42

    @pytest.mark.asyncio
    async def test_coroutine_failure(self, context, sink):
        """Test that an async failure re-raises the original error."""
        error = ConnectionError("lost")

        async def fetch():
            await asyncio.sleep(0)
            raise error

        pending = wrap_method(fetch, context)()
        assert len(sink.events) == 1

        with pytest.raises(ConnectionError) as excinfo:
            await pending

        assert excinfo.value is error
        assert sink.events[1].error.name == "ConnectionError"
        assert sink.events[1].error.message == "lost"

    @pytest.mark.asyncio
    async def test_async_duration_includes_wait(self, sink):
        """Test that duration spans the asynchronous wait."""
        readings = iter([100.0, 100.5])
        context = WrapContext(
            function_name="op",
            class_name=None,
            file="f.py",
            sink=sink,
            clock=lambda: next(readings),
        )

        async def fetch():
            await asyncio.sleep(0)

        await wrap_method(fetch, context)()

        assert sink.events[1].duration_ms == 500.0

    @pytest.mark.asyncio
    async def test_future_returned_unchanged(self, context, sink):
        """Test that an asyncio future is handed back as the same object."""
        future = asyncio.get_running_loop().create_future()

        result = wrap_method(lambda: future, context)()

        assert result is future
        assert len(sink.events) == 1

        future.set_result("done")
        assert await result == "done"
        await asyncio.sleep(0)

        assert sink.events[1].kind is EventKind.RETURN
        assert sink.events[1].return_value == "done"

    @pytest.mark.asyncio
    async def test_future_failure(self, context, sink):
        """Test that a failed future is reported and still fails for the caller."""
        future = asyncio.get_running_loop().create_future()
        error = TimeoutError("slow")

        result = wrap_method(lambda: future, context)()
        future.set_exception(error)

        with pytest.raises(TimeoutError) as excinfo:
            await result
        await asyncio.sleep(0)

        assert excinfo.value is error
        assert sink.events[1].error.name == "TimeoutError"

    @pytest.mark.asyncio
    async def test_cancelled_future(self, context, sink):
        """Test that cancellation is reported as an error."""
        future = asyncio.get_running_loop().create_future()

        wrap_method(lambda: future, context)()
        future.cancel()
        await asyncio.sleep(0)

        assert sink.events[1].error.name == "CancelledError"

    @pytest.mark.asyncio
    async def test_task_result(self, context, sink):
        """Test that tasks are treated like futures."""

        async def work():
            return 7

        def start():
            return asyncio.ensure_future(work())

        task = wrap_method(start, context)()

        assert isinstance(task, asyncio.Task)
        assert await task == 7
        await asyncio.sleep(0)
        assert sink.events[1].return_value == 7

    @pytest.mark.asyncio
    async def test_overlapping_calls_pair_up(self, context, sink):
        """Test that concurrent calls each get one call and one return."""

        async def echo(value, delay):
            await asyncio.sleep(delay)
            return value

        traced = wrap_method(echo, context)
        results = await asyncio.gather(traced("slow", 0.02), traced("fast", 0))

        assert results == ["slow", "fast"]
        calls = [e for e in sink.events if e.kind is EventKind.CALL]
        returns = [e for e in sink.events if e.kind is EventKind.RETURN]
        assert sorted(e.args[0] for e in calls) == ["fast", "slow"]
        assert sorted(e.return_value for e in returns) == ["fast", "slow"]


class TestAwaitableObjects:
    """Tests for awaitables that are not coroutines."""

    @pytest.mark.asyncio
    async def test_async_with(self, context, sink):
        """Test that an awaitable context manager still works with async with."""
        request = Request("page")
        traced = wrap_method(lambda: request, context)

        async with traced() as body:
            assert body == "page"
            assert [e.kind for e in sink.events] == [EventKind.CALL, EventKind.RETURN]

        assert request.closed
        assert sink.events[1].return_value == "page"
        assert len(sink.events) == 2

    @pytest.mark.asyncio
    async def test_async_with_failure(self, context, sink):
        """Test that an error in the body still closes and is not reported twice."""
        request = Request("page")
        traced = wrap_method(lambda: request, context)

        with pytest.raises(RuntimeError, match="body failed"):
            async with traced():
                raise RuntimeError("body failed")

        assert request.closed
        assert [e.kind for e in sink.events] == [EventKind.CALL, EventKind.RETURN]
        assert sink.events[1].error is None

    @pytest.mark.asyncio
    async def test_await(self, context, sink):
        """Test that the same object can be awaited directly."""
        traced = wrap_method(lambda: Request("page"), context)

        pending = traced()
        assert len(sink.events) == 1

        assert await pending == "page"
        assert sink.events[1].kind is EventKind.RETURN
        assert sink.events[1].return_value == "page"

    @pytest.mark.asyncio
    async def test_enter_failure_reported(self, context, sink):
        """Test that a failing __aenter__ is reported and re-raised."""

        class Refused(Request):
            async def __aenter__(self):
                raise ConnectionRefusedError("refused")

        traced = wrap_method(lambda: Refused("page"), context)

        with pytest.raises(ConnectionRefusedError):
            async with traced():
                pass

        assert sink.events[1].error.name == "ConnectionRefusedError"

    def test_attributes_forwarded(self, context, sink):
        """Test that the result keeps its type and attributes before settling."""
        request = Request("page")

        result = wrap_method(lambda: request, context)()

        assert isinstance(result, Request)
        assert result.describe() == "request for page"
        assert result.body == "page"
        assert inspect.isawaitable(result)
        assert len(sink.events) == 1


class TestBinding:
    """Tests for wrapping methods on classes."""

    def test_receiver_not_in_args(self, context, sink):
        """Test that self is bound but not reported."""

        class Service:
            def __init__(self):
                self.factor = 3

            def scale(self, x):
                return x * self.factor

        Service.scale = wrap_method(Service.__dict__["scale"], context)

        assert Service().scale(2) == 6
        assert sink.events[0].args == [2]

    def test_call_through_class(self, context, sink):
        """Test calling the unbound method with an explicit instance."""

        class Service:
            def scale(self, x):
                return x * 2

        Service.scale = wrap_method(Service.__dict__["scale"], context)

        assert Service.scale(Service(), 4) == 8
        assert sink.events[0].args == [4]

    def test_sink_failure_propagates(self):
        """Test that sink errors surface in the traced call."""

        class BrokenSink:
            def emit(self, event):
                raise OSError("sink down")

        broken = WrapContext(
            function_name="op",
            class_name=None,
            file="f.py",
            sink=BrokenSink(),
            clock=lambda: 0.0,
        )
        called = []

        with pytest.raises(OSError, match="sink down"):
            wrap_method(lambda: called.append(True), broken)()

        assert called == []
