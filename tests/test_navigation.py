"""Tests for perch.routing.manager — navigation reconciliation.

Each test navigates between view states in a small tree and checks
which hooks ran on the previously active branch:

    Profile ── Photos, Friends
    Inbox   ── Thread
"""

from collections.abc import Iterator
from typing import ClassVar

import pytest

from perch.errors import NotRegistered, ReentrantNavigation, RouteNotFound
from perch.events import Navigated
from perch.lifecycle import Status
from perch.routing.manager import Transition
from perch.runtime import Runtime
from perch.testing import ManualScheduler
from perch.viewstate import ViewState


class Tracked(ViewState):
    """Appends every hook call to a journal shared by all view states."""

    journal: ClassVar[list[tuple[str, ...]]] = []

    def _log(self, hook: str, *args: str) -> None:
        Tracked.journal.append((self.name, hook, *args))

    def before_enter(self, *args: str) -> None:
        self._log("before_enter", *args)

    def enter(self, *args: str) -> None:
        self._log("enter", *args)

    def render(self) -> None:
        self._log("render")
        super().render()

    def transition(self) -> None:
        self._log("transition")

    def cleanup(self) -> None:
        self._log("cleanup")
        super().cleanup()

    def destroy(self) -> None:
        self._log("destroy")
        super().destroy()


class Profile(Tracked):
    name = "profile"
    path = "#profile/{user}"


class Photos(Tracked):
    name = "photos"
    path = "photos"


class Friends(Tracked):
    name = "friends"
    path = "friends"


class Inbox(Tracked):
    name = "inbox"
    path = "#inbox"


class Thread(Tracked):
    name = "thread"
    path = "{thread}"


@pytest.fixture(autouse=True)
def fresh_journal() -> Iterator[None]:
    Tracked.journal = []
    yield
    Tracked.journal = []


@pytest.fixture
def runtime() -> Runtime:
    runtime = Runtime(scheduler=ManualScheduler())
    routes = runtime.routes
    routes.register(Profile).register_child(Photos, Profile).register_child(Friends, Profile)
    routes.register(Inbox).register_child(Thread, Inbox)
    return runtime


def _calls(name: str) -> list[tuple[str, ...]]:
    return [entry[1:] for entry in Tracked.journal if entry[0] == name]


class TestInitial:
    def test_first_navigation_enters_branch(self, runtime: Runtime) -> None:
        routes = runtime.routes
        transition = routes.handle_route(Photos, "5")

        assert transition is Transition.INITIAL
        assert routes.active_view_state is routes.get(Photos)
        assert routes.last_route_args == ("5",)
        assert routes.get(Profile).active
        assert routes.get(Photos).active
        assert ("enter", "5") in _calls("profile")
        assert ("enter", "5") in _calls("photos")
        assert all(hook not in ("cleanup", "destroy", "transition") for _, hook, *_ in Tracked.journal)

    def test_accepts_class_name_or_instance(self, runtime: Runtime) -> None:
        routes = runtime.routes
        assert routes.handle_route("inbox") is Transition.INITIAL
        assert routes.handle_route(routes.get(Inbox)) is Transition.UNRELATED


class TestSibling:
    def test_previous_is_cleaned_up_and_target_entered(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.handle_route(Photos, "5")
        Tracked.journal.clear()

        transition = routes.handle_route(Friends, "5")

        assert transition is Transition.SIBLING
        assert _calls("photos") == [("transition",), ("cleanup",)]
        assert ("enter", "5") in _calls("friends")
        assert routes.active_view_state is routes.get(Friends)
        assert routes.get(Photos).active is False
        # The shared parent stays entered and mounted.
        assert _calls("profile") == []
        assert routes.get(Profile).active

    def test_hook_order(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.handle_route(Photos, "5")
        Tracked.journal.clear()

        routes.handle_route(Friends, "5")

        assert Tracked.journal[:4] == [
            ("photos", "transition"),
            ("friends", "before_enter", "5"),
            ("friends", "enter", "5"),
            ("photos", "cleanup"),
        ]


class TestAncestor:
    def test_drill_down_keeps_parent_rendered(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.navigate("inbox")

        transition = routes.navigate("inbox/42")

        assert transition is Transition.ANCESTOR
        assert Tracked.journal.count(("inbox", "render")) == 1
        assert Tracked.journal.count(("thread", "render")) == 1
        assert ("transition",) in _calls("inbox")
        assert ("cleanup",) not in _calls("inbox")
        assert ("destroy",) not in _calls("inbox")
        assert routes.get(Inbox).active
        assert routes.active_view_state is routes.get(Thread)

    def test_only_transition_runs_on_previous(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.handle_route(Profile, "ana")
        Tracked.journal.clear()

        routes.handle_route(Photos, "ana")

        assert _calls("profile") == [("transition",)]
        assert _calls("photos") == [("before_enter", "ana"), ("render",), ("enter", "ana")]

    def test_changed_args_still_preserve_parent(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.handle_route(Profile, "ana")
        Tracked.journal.clear()

        assert routes.handle_route(Photos, "bob") is Transition.ANCESTOR
        assert _calls("profile") == [("transition",)]


class TestSameContextDescendant:
    def test_back_to_parent_with_same_args(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.handle_route(Thread, "7")
        Tracked.journal.clear()

        transition = routes.handle_route(Inbox, "7")

        assert transition is Transition.SAME_CONTEXT_DESCENDANT
        # The parent is still entered, so handle_enter adds nothing.
        assert Tracked.journal == [
            ("thread", "transition"),
            ("inbox", "before_enter", "7"),
            ("inbox", "enter", "7"),
            ("thread", "cleanup"),
        ]
        assert routes.active_view_state is routes.get(Inbox)
        assert routes.get(Inbox).status is Status.LOADED
        assert routes.get(Thread).active is False

    def test_fewer_args_keep_context(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.handle_route(Thread, "7", "extra")
        assert routes.handle_route(Inbox, "7") is Transition.SAME_CONTEXT_DESCENDANT

    def test_changed_args_are_unrelated(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.handle_route(Thread, "7")
        Tracked.journal.clear()

        transition = routes.handle_route(Inbox, "8")

        assert transition is Transition.UNRELATED
        destroyed = [entry[0] for entry in Tracked.journal if entry[1] == "destroy"]
        assert destroyed == ["thread", "inbox"]
        assert ("render",) in _calls("inbox")
        assert routes.get(Inbox).core.last_args == ("8",)


class TestUnrelated:
    def test_destroys_previous_branch_before_entering(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.handle_route(Photos, "7")
        Tracked.journal.clear()

        transition = routes.handle_route(Thread, "x")

        assert transition is Transition.UNRELATED
        destroyed = [entry[0] for entry in Tracked.journal if entry[1] == "destroy"]
        assert destroyed == ["photos", "profile"]

        first_thread_hook = next(i for i, entry in enumerate(Tracked.journal) if entry[0] in ("thread", "inbox"))
        last_destroy = max(i for i, entry in enumerate(Tracked.journal) if entry[1] == "destroy")
        assert last_destroy < first_thread_hook
        assert ("enter", "x") in _calls("thread")

    def test_destroyed_containers_are_emptied_not_removed(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.handle_route(Photos, "7")
        routes.handle_route(Thread, "x")

        for view_state in (routes.get(Photos), routes.get(Profile)):
            assert runtime.document.is_attached(view_state.id)
            assert view_state.status is Status.UNRENDERED
            assert view_state.active is False

    def test_branch_can_be_entered_again(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.handle_route(Photos, "7")
        routes.handle_route(Thread, "x")
        assert routes.handle_route(Photos, "9") is Transition.UNRELATED
        assert routes.get(Photos).active
        assert routes.get(Profile).core.last_args == ("9",)


class TestNavigate:
    def test_fragment_args_are_passed(self, runtime: Runtime) -> None:
        routes = runtime.routes
        routes.navigate("profile/ana/photos")
        assert routes.active_view_state is routes.get(Photos)
        assert routes.last_route_args == ("ana",)

        assert routes.navigate("inbox/42") is Transition.UNRELATED
        assert routes.last_route_args == ("42",)

    def test_unknown_fragment(self, runtime: Runtime) -> None:
        with pytest.raises(RouteNotFound) as exc_info:
            runtime.routes.navigate("nowhere")
        assert exc_info.value.fragment == "nowhere"
        assert runtime.routes.active_view_state is None

    def test_navigated_event(self, runtime: Runtime) -> None:
        seen: list[Navigated] = []
        runtime.routes.navigated.subscribe(seen.append)

        runtime.routes.navigate("inbox")
        runtime.routes.navigate("inbox/3")

        assert seen == [
            Navigated("inbox", (), Transition.INITIAL),
            Navigated("thread", ("3",), Transition.ANCESTOR),
        ]


class TestRegistration:
    def test_get_unknown(self, runtime: Runtime) -> None:
        with pytest.raises(NotRegistered) as exc_info:
            runtime.routes.get("missing")
        assert str(exc_info.value) == "Can not find view state 'missing'"

    def test_singletons(self, runtime: Runtime) -> None:
        routes = runtime.routes
        assert routes.get(Profile) is routes.get("profile")
        routes.register(Profile)
        assert routes.get(Profile) is routes.view_states["profile"]

    def test_register_child_wires_parents(self, runtime: Runtime) -> None:
        routes = runtime.routes
        thread = routes.get(Thread)
        assert thread.parent is routes.get(Inbox)
        assert thread.logical_parent is routes.get(Inbox)


class TestReentrancy:
    def test_navigation_inside_hook_raises(self) -> None:
        class Redirect(ViewState):
            name = "redirect"
            path = "#redirect"

            def enter(self, *args: str) -> None:
                self.runtime.routes.navigate("landing")

        class Landing(ViewState):
            name = "landing"
            path = "#landing"

        runtime = Runtime(scheduler=ManualScheduler())
        runtime.routes.register(Redirect).register(Landing)

        with pytest.raises(ReentrantNavigation):
            runtime.routes.navigate("redirect")

        # The guard is released once the failed navigation unwinds.
        assert runtime.routes.navigate("landing") is Transition.INITIAL
