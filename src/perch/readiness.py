"""ReadinessGate — a polling, one-shot barrier.

A gate holds an ordered list of tests. It evaluates them once when it is
built and then again on a fixed interval until every test passes in the
same pass. At that moment it stops polling, runs each queued callback
exactly once in the order it was pushed, and stays open for good:
callbacks pushed afterwards run immediately.

Tests are either zero-argument predicates or ``NamedCheck`` values that
resolve against a small table of parameterised checks::

    gate = ReadinessGate(
        [NamedCheck("attached", "m4"), lambda: source.fetched],
        render,
        scheduler=runtime.scheduler,
        checks=runtime.checks,
    )

There is no cancellation and no failure state. A gate whose tests never
pass keeps polling.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from perch.errors import ConfigurationError

if TYPE_CHECKING:
    from perch.document import Document
    from perch.scheduler import Scheduler, TimerHandle

logger = logging.getLogger("perch.readiness")

DEFAULT_INTERVAL = 1.0


@dataclass(frozen=True, slots=True, init=False)
class NamedCheck:
    """A parameterised test looked up by name in a check table."""

    name: str
    args: tuple[Any, ...] = ()

    def __init__(self, name: str, *args: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "args", args)


Test = Callable[[], bool] | NamedCheck
Callback = Callable[[], None]


def builtin_checks(document: Document) -> dict[str, Callable[..., bool]]:
    """Checks every runtime offers, bound to its visible document."""
    return {
        "attached": document.is_attached,
    }


class ReadinessGate:
    """One-shot barrier that fires queued callbacks once all tests hold."""

    __slots__ = ("_callbacks", "_checks", "_interval", "_scheduler", "_tests", "_timer", "polls", "ready")

    def __init__(
        self,
        tests: Sequence[Test],
        callback: Callback | None = None,
        *,
        scheduler: Scheduler,
        checks: Mapping[str, Callable[..., bool]] | None = None,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self._tests = list(tests)
        self._checks = checks or {}
        self._scheduler = scheduler
        self._interval = interval
        self._timer: TimerHandle | None = None
        self._callbacks: list[Callback] = []
        self.ready = False
        self.polls = 0

        # Unknown names fail here, never on a timer tick.
        for test in self._tests:
            if isinstance(test, NamedCheck) and test.name not in self._checks:
                msg = f"Readiness check {test.name!r} not found."
                raise ConfigurationError(msg)

        if callback is not None:
            self.push(callback)

        if not self._poll():
            self._schedule()

    def push(self, callbacks: Callback | Sequence[Callback]) -> None:
        """Queue one or more callbacks; run them now if the gate is open."""
        if callable(callbacks):
            callbacks = [callbacks]
        self._callbacks.extend(callbacks)
        if self.ready:
            self._execute()

    def _schedule(self) -> None:
        self._timer = self._scheduler.call_later(self._interval, self._tick)

    def _tick(self) -> None:
        self._timer = None
        if not self._poll():
            self._schedule()

    def _poll(self) -> bool:
        if self.ready:
            return True
        self.polls += 1
        if not self._test():
            return False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        logger.debug("Readiness gate open after %d poll(s)", self.polls)
        self._execute()
        return True

    def _test(self) -> bool:
        # No short-circuit: every test runs on every pass.
        passed = 0
        for test in self._tests:
            if isinstance(test, NamedCheck):
                passed += bool(self._checks[test.name](*test.args))
            else:
                passed += bool(test())
        return passed == len(self._tests)

    def _execute(self) -> None:
        self.ready = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
