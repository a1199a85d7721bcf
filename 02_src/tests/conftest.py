"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def repo_root():
    """Root that trace paths are reported against (02_src)."""
    return Path(__file__).resolve().parent.parent


@pytest.fixture
def sink():
    """Create in-memory sink for testing."""
    from methodtrace.sinks import MemorySink

    return MemorySink()


@pytest.fixture
def tracer(sink, repo_root):
    """Create Tracer reporting to the memory sink."""
    from methodtrace.locator import FrameLocator
    from methodtrace.tracer import Tracer

    return Tracer(sink, locator=FrameLocator(repo_root))


@pytest.fixture
def fake_clock():
    """Clock advancing a quarter second per reading."""
    readings = iter(i * 0.25 for i in range(1000))
    return lambda: next(readings)


@pytest.fixture(autouse=True)
def reset_default_tracer():
    """Keep the process-wide default tracer from leaking between tests."""
    from methodtrace.tracer import set_tracer

    set_tracer(None)
    yield
    set_tracer(None)
