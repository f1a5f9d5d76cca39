"""Tests for the listener registry."""

import logging

from journey_circle.events import AnimationFinished, ListenerRegistry, StateChanged


class TestListenerRegistry:
    def test_dispatch_by_type(self):
        registry = ListenerRegistry()
        seen = []
        registry.on(AnimationFinished, seen.append)

        registry.emit(AnimationFinished(3))
        registry.emit(StateChanged(None, None))

        assert seen == [AnimationFinished(3)]

    def test_unsubscribe(self):
        registry = ListenerRegistry()
        seen = []
        unsubscribe = registry.on(AnimationFinished, seen.append)

        unsubscribe()
        unsubscribe()
        registry.emit(AnimationFinished(1))

        assert seen == []
        assert registry.listener_count() == 0

    def test_failing_listener_is_logged(self, caplog):
        registry = ListenerRegistry()
        seen = []

        def broken(event):
            raise RuntimeError("listener bug")

        registry.on(AnimationFinished, broken)
        registry.on(AnimationFinished, seen.append)
        with caplog.at_level(logging.ERROR, logger="journey_circle.events"):
            registry.emit(AnimationFinished(1))

        assert seen == [AnimationFinished(1)]
        assert "Listener for AnimationFinished failed" in caplog.text

    def test_clear(self):
        registry = ListenerRegistry()
        registry.on(AnimationFinished, print)
        registry.on(StateChanged, print)

        assert registry.listener_count() == 2
        assert registry.listener_count(StateChanged) == 1
        registry.clear()
        assert registry.listener_count() == 0
