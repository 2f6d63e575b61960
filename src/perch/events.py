"""Typed event channels and the lifecycle events they carry.

Each event kind gets its own ``Channel``. Subscribers are called
synchronously, in subscription order, on the thread that emits. There is
no queueing: perch runs single-threaded on one event loop, so an emit
completes before the emitting lifecycle step continues.

Events are frozen dataclasses (immutable, safe to hand to any number of
subscribers).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from perch.routing.manager import Transition

E = TypeVar("E")

Listener = Callable[[E], None]


@dataclass(frozen=True, slots=True)
class Ready:
    """A component's output was rendered and attached to its container."""

    component_id: str
    name: str


@dataclass(frozen=True, slots=True)
class Loaded:
    """A component and every one of its registered children are loaded."""

    component_id: str
    name: str


@dataclass(frozen=True, slots=True)
class RenderFailed:
    """A component's render pipeline ended without output."""

    component_id: str
    name: str
    error: BaseException


@dataclass(frozen=True, slots=True)
class Navigated:
    """The route manager finished switching to a new view state."""

    name: str
    args: tuple[str, ...]
    transition: Transition


class Channel(Generic[E]):
    """A synchronous broadcast channel for one event kind.

    Usage::

        ready: Channel[Ready] = Channel("ready")
        unsubscribe = ready.subscribe(lambda event: print(event.name))
        ready.emit(Ready("m1", "stream"))
        unsubscribe()
    """

    __slots__ = ("_listeners", "name")

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Listener[E]] = []

    def subscribe(self, listener: Listener[E]) -> Callable[[], None]:
        """Add *listener* and return a function that removes it again."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def once(self, listener: Listener[E]) -> Callable[[], None]:
        """Subscribe *listener* for the next emit only."""

        def _once(event: E) -> None:
            self.unsubscribe(_once)
            listener(event)

        return self.subscribe(_once)

    def unsubscribe(self, listener: Listener[E]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: E) -> None:
        # Snapshot: a listener may unsubscribe itself while being called.
        for listener in list(self._listeners):
            listener(event)

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)

    def __repr__(self) -> str:
        return f"Channel({self.name!r}, listeners={len(self._listeners)})"
