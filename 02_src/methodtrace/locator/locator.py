"""Resolution of the source file where tracing is installed."""

import inspect
import os
from pathlib import Path
from typing import Protocol

from ..config import PathLike, resolve_repo_root
from ..logging_config import get_logger

logger = get_logger(__name__)

UNKNOWN_LOCATION = "unknown"

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class ISourceLocator(Protocol):
    """Finds the user source file that is installing a wrapper."""

    def locate(self) -> str:
        """Return a repo-relative path, or UNKNOWN_LOCATION. Never raises."""
        ...


class FrameLocator:
    """Locates the installation site by walking the live frame stack.

    Frames that belong to the methodtrace package are skipped, so the first
    remaining frame is the user code that called trace() or trace_class(),
    however many internal helpers sit in between.
    """

    def __init__(self, repo_root: PathLike | None = None):
        self._repo_root = resolve_repo_root(repo_root)

    @property
    def repo_root(self) -> Path:
        return self._repo_root

    def locate(self) -> str:
        """Return the caller's file relative to the repo root."""
        try:
            filename = _caller_filename()
        except Exception as e:
            logger.warning("Could not inspect call stack: %s", e)
            return UNKNOWN_LOCATION

        if filename is None:
            logger.warning("No user frame found, location is unknown")
            return UNKNOWN_LOCATION

        # Code compiled from strings: <string>, <stdin>, <frozen ...>
        if filename.startswith("<") and filename.endswith(">"):
            logger.debug("Pseudo file %s, location is unknown", filename)
            return UNKNOWN_LOCATION

        return self._relative(filename)

    def _relative(self, filename: str) -> str:
        # Resolved like the repo root, so symlinked paths still compare
        absolute = Path(filename).resolve()
        try:
            relative = os.path.relpath(absolute, self._repo_root)
        except ValueError:
            # Different drive than the repo root
            return absolute.as_posix()
        return Path(relative).as_posix()


def _caller_filename() -> str | None:
    frame = inspect.currentframe()
    try:
        while frame is not None and _is_internal(frame.f_code.co_filename):
            frame = frame.f_back
        return frame.f_code.co_filename if frame is not None else None
    finally:
        del frame


def _is_internal(filename: str) -> bool:
    if filename.startswith("<"):
        return False
    return os.path.abspath(filename).startswith(_PACKAGE_DIR + os.sep)
