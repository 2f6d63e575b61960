"""Scheduler — the two suspension points perch relies on.

Readiness gates poll through ``call_later``; render pipelines hand their
data fetch to ``spawn``. Both complete on the same event loop thread, so
lifecycle code never needs locks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Cooperative scheduling on a single thread."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def spawn(
        self,
        awaitable: Awaitable[T],
        on_done: Callable[[asyncio.Future[T]], None],
    ) -> asyncio.Future[T]: ...


class AsyncioScheduler:
    """Schedule on the running asyncio event loop.

    The loop is looked up lazily, so a runtime can be constructed outside
    a loop and used from inside one.
    """

    __slots__ = ("_loop",)

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def spawn(
        self,
        awaitable: Awaitable[Any],
        on_done: Callable[[asyncio.Future[Any]], None],
    ) -> asyncio.Future[Any]:
        future = asyncio.ensure_future(awaitable, loop=self.loop)
        future.add_done_callback(on_done)
        return future
