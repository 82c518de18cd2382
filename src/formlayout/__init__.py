"""Form-builder layout engine package."""

from formlayout.async_runner import resolve_awaitable, run_async
from formlayout.exceptions import (
    AsyncExecutionError,
    LayoutConsistencyError,
    LayoutError,
    PackageError,
    PersistenceError,
    SettingsError,
)
from formlayout.logging import configure_logging, get_logger
from formlayout.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("formlayout")

__all__ = [
    "AsyncExecutionError",
    "LayoutConsistencyError",
    "LayoutError",
    "PackageError",
    "PersistenceError",
    "Settings",
    "SettingsError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
    "resolve_awaitable",
    "run_async",
]
