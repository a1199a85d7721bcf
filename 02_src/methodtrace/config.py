"""Environment configuration and path helpers."""

import os
from pathlib import Path
from typing import Union

REPO_ROOT_ENV = "METHODTRACE_REPO_ROOT"
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


PathLike = Union[str, Path]


def resolve_repo_root(env_value: PathLike | None = None) -> Path:
    """Resolve the root that trace file paths are reported relative to.

    Falls back to METHODTRACE_REPO_ROOT, then to the current working directory.
    Relative values are anchored at the current working directory.
    """
    if env_value is None:
        env_value = os.getenv(REPO_ROOT_ENV)

    if not env_value:
        return Path.cwd().resolve()

    candidate = Path(env_value).expanduser()
    if not candidate.is_absolute():
        candidate = Path.cwd() / candidate
    return candidate.resolve()


def resolve_log_level(env_value: str | None = None) -> str:
    """Resolve the log level name, defaulting to LOG_LEVEL or INFO."""
    if not env_value:
        env_value = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)
    return env_value.upper()
