import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List

from .errors import TaskNotFoundError

logger = logging.getLogger(__name__)


class TaskRunner:
    """Named callables that can be listed and run by name.

    A task may be a plain function or a coroutine function; awaitables are
    driven to completion with ``asyncio.run``, so async tasks cannot be
    run from inside a running event loop.
    """

    def __init__(self):
        self._tasks: Dict[str, Callable[..., Any]] = {}

    def define(self, name: str, fn: Callable[..., Any]) -> Callable[..., Any]:
        if not isinstance(name, str) or not name:
            raise TypeError("task name must be a non-empty str")
        if not callable(fn):
            raise TypeError(f"task {name!r} must be callable")
        if name in self._tasks:
            logger.warning("Task %s redefined", name)
        self._tasks[name] = fn
        return fn

    def run(self, name: str, *args, **kwargs) -> Any:
        fn = self._tasks.get(name)
        if fn is None:
            raise TaskNotFoundError(name)
        logger.info("Running task %s", name)
        try:
            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                result = _drive(result)
        except Exception:
            logger.exception("Task %s failed", name)
            raise
        return result

    def list(self) -> List[str]:
        return list(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks


async def _await(awaitable):
    return await awaitable


def _drive(awaitable):
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        loop_running = False
    else:
        loop_running = True
    if not loop_running:
        return asyncio.run(_await(awaitable))
    # asyncio.run cannot nest; close it so it is not left pending
    if inspect.iscoroutine(awaitable):
        awaitable.close()
    raise RuntimeError(
        "cannot run an async task inside a running event loop; await the task function instead"
    )
