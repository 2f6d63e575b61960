"""RouteManager — the route table plus navigation reconciliation.

On every navigation the manager compares the target view state with the
one currently shown and picks one of five outcomes:

==========================  ==================================================
Transition                  Effect on the previously active view state
==========================  ==================================================
INITIAL                     nothing was active; the target is entered
SIBLING                     same containment parent: ``transition()``, the
                            target's ``before_enter``/``enter`` hooks, then
                            ``cleanup()`` of the previous view state's subtree
ANCESTOR                    the previous view state contains the target:
                            ``transition()`` only, the branch stays live
SAME_CONTEXT_DESCENDANT     the target contains the previous view state and
                            every positional argument is unchanged: same
                            as SIBLING
UNRELATED                   anything else: ``destroy()`` the previous view
                            state and every containment ancestor
==========================  ==================================================

After any of them the target becomes active, ``handle_enter`` runs on it
(and, through it, on its not-yet-active ancestors) and ``navigated`` is
emitted.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from perch.errors import NotRegistered, ReentrantNavigation
from perch.events import Channel, Navigated
from perch.routing.route import Route
from perch.routing.router import Router

if TYPE_CHECKING:
    from perch.runtime import Runtime
    from perch.viewstate import ViewState

logger = logging.getLogger("perch.routing")

V = TypeVar("V", bound="ViewState")


class Transition(Enum):
    """How a navigation relates the target to the previously active view state."""

    INITIAL = "initial"
    SIBLING = "sibling"
    ANCESTOR = "ancestor"
    SAME_CONTEXT_DESCENDANT = "same-context-descendant"
    UNRELATED = "unrelated"


# Outcomes that keep the previous branch mounted.
_PRESERVING = frozenset({Transition.SIBLING, Transition.ANCESTOR, Transition.SAME_CONTEXT_DESCENDANT})


class RouteManager:
    """Owns the view state singletons and the active navigation context."""

    def __init__(self, runtime: Runtime) -> None:
        self.runtime = runtime
        self.router = Router()
        self.view_states: dict[str, ViewState] = {}
        self.active_view_state: ViewState | None = None
        self.last_route_args: tuple[str, ...] = ()
        self.navigated: Channel[Navigated] = Channel("navigated")
        self._navigating = False

    # -- Registration --

    def _get_instance(self, view_state_cls: type[V]) -> V:
        view_state = self.view_states.get(view_state_cls.name)
        if view_state is None:
            view_state = view_state_cls(self.runtime)
            self.view_states[view_state_cls.name] = view_state
            if not self.runtime.document.is_attached(view_state.id):
                self.runtime.document.mount(view_state.id, content=view_state.placeholder)
        return view_state  # type: ignore[return-value]

    def register(self, view_state_cls: type[ViewState]) -> RouteManager:
        """Create the singleton for *view_state_cls* and route its path."""
        view_state = self._get_instance(view_state_cls)
        self.router.add(Route(view_state.full_path(), view_state, view_state.name))
        logger.debug("Registered view state %r at %r", view_state.name, view_state.full_path())
        return self

    def register_child(self, view_state_cls: type[ViewState], parent_cls: type[ViewState]) -> RouteManager:
        """Register *view_state_cls* contained in *parent_cls*."""
        child = self._get_instance(view_state_cls)
        parent = self._get_instance(parent_cls)
        child.core.set_parent(parent)
        child.logical_parent = parent
        return self.register(view_state_cls)

    def get(self, view_state: type[ViewState] | str) -> ViewState:
        """Look up a registered singleton by class or name."""
        name = view_state if isinstance(view_state, str) else view_state.name
        found = self.view_states.get(name)
        if found is None:
            raise NotRegistered("view state", name)
        return found

    # -- Navigation --

    def navigate(self, fragment: str) -> Transition:
        """Match *fragment* against the route table and navigate to it."""
        match = self.router.match(fragment)
        return self.handle_route(match.route.target, *match.args)

    def classify(self, target: ViewState, args: tuple[str, ...]) -> Transition:
        previous = self.active_view_state
        if previous is None:
            return Transition.INITIAL
        if target.is_sibling(previous):
            return Transition.SIBLING
        if previous.is_parent_of(target):
            return Transition.ANCESTOR
        if target.is_parent_of(previous) and _same_context(args, self.last_route_args):
            return Transition.SAME_CONTEXT_DESCENDANT
        return Transition.UNRELATED

    def handle_route(self, target: ViewState | type[ViewState] | str, *args: str) -> Transition:
        """Reconcile the active branch with *target* and enter it."""
        view_state = self.get(target) if isinstance(target, (str, type)) else target

        if self._navigating:
            msg = f"Navigation to {view_state.name!r} started while another navigation is running"
            raise ReentrantNavigation(msg)

        self._navigating = True
        try:
            transition = self._reconcile(view_state, args)
        finally:
            self._navigating = False

        logger.info("Navigated to %s %r (%s)", view_state.name, args, transition.value)
        self.navigated.emit(Navigated(view_state.name, args, transition))
        return transition

    def _reconcile(self, target: ViewState, args: tuple[str, ...]) -> Transition:
        previous = self.active_view_state
        transition = self.classify(target, args)

        if previous is None:
            target.handle_enter(*args)
            self.last_route_args = args
            self.active_view_state = target
            return transition

        if transition in _PRESERVING:
            previous.transition()
            if transition is not Transition.ANCESTOR:
                target.before_enter(*args)
                target.enter(*args)
                previous.cleanup()
        else:
            node: ViewState | None = previous
            while node is not None:
                node.destroy()
                node = node.parent  # type: ignore[assignment]

        self.last_route_args = args
        self.active_view_state = target
        target.handle_enter(*args)
        return transition


def _same_context(args: tuple[str, ...], last_args: tuple[str, ...]) -> bool:
    """Positional equality: every argument has an equal counterpart."""
    if len(args) > len(last_args):
        return False
    return all(arg == last for arg, last in zip(args, last_args))
