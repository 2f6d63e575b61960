"""Test utilities for perch applications.

``ManualScheduler`` replaces wall-clock polling with a virtual clock that
tests advance by hand. ``DeferredSource`` is a data source whose fetch
stays pending until the test resolves or fails it. ``settle()`` lets the
event loop run the callbacks a resolved fetch queues::

    runtime = Runtime(scheduler=ManualScheduler())
    source = DeferredSource(title="Hi")
    ...
    source.resolve(title="Loaded")
    await settle()
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(order=True, slots=True)
class _Timer:
    when: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """A scheduler whose timers fire only when the test advances the clock.

    ``spawn`` still runs on the real event loop, so tests that fetch data
    must be async.
    """

    __slots__ = ("_seq", "_timers", "now")

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: list[_Timer] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Timer:
        timer = _Timer(self.now + delay, next(self._seq), callback)
        heapq.heappush(self._timers, timer)
        return timer

    def spawn(
        self,
        awaitable: Awaitable[Any],
        on_done: Callable[[asyncio.Future[Any]], None],
    ) -> asyncio.Future[Any]:
        future = asyncio.ensure_future(awaitable)
        future.add_done_callback(on_done)
        return future

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire every timer that came due.

        Returns the number of callbacks run.
        """
        deadline = self.now + seconds
        fired = 0
        while self._timers and self._timers[0].when <= deadline:
            timer = heapq.heappop(self._timers)
            self.now = timer.when
            if timer.cancelled:
                continue
            timer.callback()
            fired += 1
        self.now = deadline
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for timer in self._timers if not timer.cancelled)


class DeferredSource:
    """A remote data source the test completes by hand.

    Resolving or failing before any fetch is pending queues the outcome
    for the next fetch.
    """

    def __init__(self, data: Mapping[str, Any] | None = None, **values: Any) -> None:
        self._data: dict[str, Any] = {**(data or {}), **values}
        self._waiters: list[asyncio.Future[None]] = []
        self._queued: list[BaseException | None] = []
        self.fetches: list[dict[str, Any]] = []

    def snapshot(self) -> dict[str, Any]:
        return dict(self._data)

    async def fetch(self, **params: Any) -> None:
        self.fetches.append(params)
        if self._queued:
            error = self._queued.pop(0)
            if error is not None:
                raise error
            return
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    def resolve(self, data: Mapping[str, Any] | None = None, **values: Any) -> None:
        """Complete every pending fetch with new data."""
        self._data.update(data or {})
        self._data.update(values)
        if not self._waiters:
            self._queued.append(None)
            return
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    def fail(self, error: BaseException) -> None:
        """Fail every pending fetch with *error*."""
        if not self._waiters:
            self._queued.append(error)
            return
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_exception(error)


async def settle(rounds: int = 5) -> None:
    """Yield to the event loop until queued callbacks have run."""
    for _ in range(rounds):
        await asyncio.sleep(0)
