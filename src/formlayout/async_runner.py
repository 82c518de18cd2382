"""Drive asynchronous persistence adapters from the synchronous layout engine."""

from __future__ import annotations

import asyncio
import inspect
import threading
from queue import Queue
from typing import TYPE_CHECKING, Any, cast

from formlayout.exceptions import AsyncExecutionError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Coroutine


async def _await[T](awaitable: Awaitable[T]) -> T:
    return await awaitable


def _run_in_background_thread[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine in a dedicated thread with its own event loop.

    Args:
        coro: The coroutine to run.

    Raises:
        AsyncExecutionError: If the coroutine raises an exception.

    Returns:
        The result of the coroutine.
    """
    output: Queue[T | BaseException] = Queue(maxsize=1)

    def _runner() -> None:
        try:
            output.put(asyncio.run(coro))
        except BaseException as exc:  # noqa: BLE001
            output.put(exc)

    thread = threading.Thread(target=_runner, daemon=True, name="formlayout-persistence")
    thread.start()
    thread.join()

    result = output.get()
    if isinstance(result, BaseException):
        raise AsyncExecutionError(result=result) from result
    return result


def run_async[T](awaitable: Awaitable[T]) -> T:
    """Run an awaitable to completion from sync code.

    Without a running loop the awaitable runs on a fresh loop in the current
    thread. Inside a running loop (e.g. the engine called from an async web
    handler) it runs on a private loop in a helper thread, because the
    caller's loop cannot be re-entered.

    Args:
        awaitable: Coroutine or other awaitable to run.

    Returns:
        The awaited result.
    """
    coro = awaitable if inspect.iscoroutine(awaitable) else _await(awaitable)
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    return _run_in_background_thread(coro)


def resolve_awaitable[T](value: T | Awaitable[T]) -> T:
    """Return `value` as-is, or its awaited result when it is awaitable.

    Args:
        value: Plain result of a sync adapter, or awaitable of an async one.

    Returns:
        The concrete result.
    """
    if inspect.isawaitable(value):
        return run_async(cast("Awaitable[T]", value))
    return value
