from __future__ import annotations

import logging
import types
import typing as t
from typing import Awaitable, Callable, Optional

import anyio
from anyio.abc import TaskGroup

from swrcache._core._spec import Refreshed, RefreshFailed, RefreshSkipped
from swrcache._exceptions import SchedulerNotRunning

if t.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

logger = logging.getLogger("swrcache.scheduler")


class AsyncBackgroundTasks:
    """
    Supervisor for detached background work.

    Work submitted with :meth:`submit` starts immediately and is never awaited
    by the submitter. Leaving the ``async with`` block waits until every
    submitted task has finished, which is how the surrounding environment
    keeps background refreshes alive after a response was delivered.

    Exceptions raised by a task are logged and swallowed here, so one failed
    refresh never cancels its siblings or reaches a caller. An exception raised
    inside the ``async with`` block itself is re-raised as is after the
    submitted work has finished.

    Example:
        ```python
        async with AsyncBackgroundTasks() as tasks:
            tasks.submit(refresh_entry, request)
            ...  # respond to the client
        # refresh_entry has completed here
        ```
    """

    def __init__(self) -> None:
        self._task_group: Optional[TaskGroup] = None
        self.pending = 0

    @property
    def running(self) -> bool:
        return self._task_group is not None

    async def __aenter__(self) -> "Self":
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group
        return self

    async def __aexit__(
        self,
        exc_type: t.Optional[t.Type[BaseException]] = None,
        exc_value: t.Optional[BaseException] = None,
        traceback: t.Optional[types.TracebackType] = None,
    ) -> t.Optional[bool]:
        assert self._task_group is not None
        if self.pending:
            logger.debug(f"Waiting for {self.pending} background task(s) to finish")
        try:
            if exc_value is not None and not isinstance(exc_value, Exception):
                return await self._task_group.__aexit__(exc_type, exc_value, traceback)
            # Ordinary errors raised inside the block propagate unchanged once
            # the submitted work has drained.
            await self._task_group.__aexit__(None, None, None)
            return None
        finally:
            self._task_group = None

    def submit(self, func: Callable[..., Awaitable[t.Any]], *args: t.Any) -> None:
        """
        Start ``func(*args)`` in the background without waiting for it.

        Raises:
            SchedulerNotRunning: If called outside of the ``async with`` block.
        """
        if self._task_group is None:
            raise SchedulerNotRunning()
        self.pending += 1
        self._task_group.start_soon(self._run, func, args, name=getattr(func, "__qualname__", None))

    async def _run(self, func: Callable[..., Awaitable[t.Any]], args: t.Tuple[t.Any, ...]) -> None:
        try:
            result = await func(*args)
        except Exception:
            logger.exception("Background task %s failed", getattr(func, "__qualname__", func))
        else:
            log_result(result)
        finally:
            self.pending -= 1


def log_result(result: t.Any) -> None:
    if isinstance(result, Refreshed):
        logger.debug(f"Refreshed cached response for {result.key.url}")
    elif isinstance(result, RefreshSkipped):
        logger.warning(
            "Origin answered %d while refreshing %s, keeping the stored response",
            result.status_code,
            result.key.url,
        )
    elif isinstance(result, RefreshFailed):
        logger.warning(
            "Refreshing %s failed, keeping the stored response",
            result.key.url,
            exc_info=result.error,
        )
