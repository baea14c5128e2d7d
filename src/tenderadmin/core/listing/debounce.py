"""Asyncio debouncer for search input."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Generic, TypeVar

from tenderadmin.core.logging import get_logger

logger = get_logger("listing.debounce")

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Delay a callback until input stops changing.

    Each ``call`` restarts the timer, so only the last value seen inside
    the window reaches the callback.
    """

    def __init__(self, delay_ms: int, callback: Callable[[T], Awaitable[Any] | Any]):
        self.delay = delay_ms / 1000
        self.callback = callback
        self._task: asyncio.Task | None = None
        self._value: T | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def call(self, value: T) -> None:
        """Schedule ``value``, replacing any pending one."""
        self.cancel()
        self._value = value
        self._task = asyncio.get_running_loop().create_task(self._run(value))

    async def _run(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        self._task = None
        await self._invoke(value)

    async def _invoke(self, value: T) -> None:
        result = self.callback(value)
        if inspect.isawaitable(result):
            await result

    async def flush(self) -> None:
        """Apply the pending value now."""
        if not self.pending:
            return
        value = self._value
        self.cancel()
        await self._invoke(value)  # type: ignore[arg-type]

    async def wait(self) -> None:
        """Wait for the pending callback to finish."""
        task = self._task
        if task is None:
            return
        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            raise task.exception()  # type: ignore[misc]

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
