"""Demo entry point: trace a small class and print the events."""

import asyncio
from pathlib import Path

from methodtrace import ConsoleSink, FrameLocator, Tracer
from methodtrace.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

tracer = Tracer(
    ConsoleSink(),
    locator=FrameLocator(Path(__file__).resolve().parent.parent),
)


@tracer.trace_class(exclude_methods=["_check"])
class Calc:
    """Calculator with sync, failing and async methods."""

    def __init__(self, precision: int = 2):
        self.precision = precision

    def add(self, a, b):
        return round(a + b, self.precision)

    def divide(self, a, b):
        self._check(b)
        return round(a / b, self.precision)

    async def slow_square(self, x, delay: float = 0.1):
        await asyncio.sleep(delay)
        return x * x

    def _check(self, b):
        if b == 0:
            raise ZeroDivisionError("division by zero")


async def run_async(calc: Calc) -> None:
    """Overlapping async calls; their return events interleave."""
    results = await asyncio.gather(
        calc.slow_square(3, delay=0.2),
        calc.slow_square(4, delay=0.1),
    )
    logger.info("Async results: %s", results)


def main():
    """Run the demo."""
    setup_logging()

    calc = Calc()
    calc.add(2, 3)

    try:
        calc.divide(1, 0)
    except ZeroDivisionError:
        logger.info("divide(1, 0) failed as expected")

    asyncio.run(run_async(calc))


if __name__ == "__main__":
    main()
