"""Tests for perch.events — typed channels and event dataclasses."""

import pytest

from perch.events import Channel, Loaded, Navigated, Ready, RenderFailed
from perch.routing.manager import Transition


class TestChannel:
    def test_emit_in_subscription_order(self) -> None:
        channel: Channel[Ready] = Channel("ready")
        seen: list[str] = []
        channel.subscribe(lambda e: seen.append(f"first:{e.component_id}"))
        channel.subscribe(lambda e: seen.append(f"second:{e.component_id}"))

        channel.emit(Ready("m1", "item"))
        assert seen == ["first:m1", "second:m1"]

    def test_unsubscribe_function(self) -> None:
        channel: Channel[Ready] = Channel("ready")
        seen: list[Ready] = []
        unsubscribe = channel.subscribe(seen.append)
        unsubscribe()
        channel.emit(Ready("m1", "item"))
        assert seen == []
        assert len(channel) == 0

    def test_unsubscribe_unknown_listener_is_noop(self) -> None:
        channel: Channel[Ready] = Channel("ready")
        channel.unsubscribe(lambda e: None)

    def test_once(self) -> None:
        channel: Channel[Loaded] = Channel("load")
        seen: list[Loaded] = []
        channel.once(seen.append)
        channel.emit(Loaded("m1", "a"))
        channel.emit(Loaded("m2", "b"))
        assert [e.component_id for e in seen] == ["m1"]

    def test_listener_may_unsubscribe_during_emit(self) -> None:
        channel: Channel[Ready] = Channel("ready")
        seen: list[str] = []

        def first(event: Ready) -> None:
            seen.append("first")
            channel.unsubscribe(first)

        channel.subscribe(first)
        channel.subscribe(lambda e: seen.append("second"))
        channel.emit(Ready("m1", "x"))
        channel.emit(Ready("m1", "x"))
        assert seen == ["first", "second", "second"]

    def test_clear(self) -> None:
        channel: Channel[Ready] = Channel("ready")
        channel.subscribe(lambda e: None)
        channel.clear()
        assert len(channel) == 0

    def test_repr(self) -> None:
        assert "ready" in repr(Channel("ready"))


class TestEvents:
    def test_frozen(self) -> None:
        event = Ready("m1", "item")
        with pytest.raises(AttributeError):
            event.name = "other"  # type: ignore[misc]

    def test_render_failed_carries_error(self) -> None:
        error = RuntimeError("boom")
        event = RenderFailed("m1", "item", error)
        assert event.error is error

    def test_navigated(self) -> None:
        event = Navigated("profile", ("5",), Transition.SIBLING)
        assert event.args == ("5",)
        assert event.transition is Transition.SIBLING
