"""
Engine events and the listener registry.

Consumers subscribe to typed payloads instead of canvas/DOM callbacks:

    unsubscribe = engine.on(StateChanged, lambda event: print(event.current))
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateChanged:
    previous: Any
    current: Any


@dataclass(frozen=True)
class FrameRendered:
    progress: float
    report: Any


@dataclass(frozen=True)
class AnimationFinished:
    run_id: int


@dataclass(frozen=True)
class DataIssueFound:
    issue: Any


@dataclass(frozen=True)
class LoadFailed:
    """A refresh failed; call ``retry()`` to fetch again."""
    message: str
    error: Optional[BaseException]
    retry: Callable[[], Any]


class ListenerRegistry:
    """Per-event-type listener lists.  Listener errors are logged, not propagated."""

    def __init__(self):
        self._listeners = defaultdict(list)

    def on(self, event_type, listener):
        """Register *listener* for *event_type*; returns a function that unregisters it."""
        self._listeners[event_type].append(listener)

        def unsubscribe():
            listeners = self._listeners.get(event_type, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def emit(self, event):
        for listener in list(self._listeners.get(type(event), ())):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener for %s failed", type(event).__name__)

    def listener_count(self, event_type=None):
        if event_type is None:
            return sum(len(v) for v in self._listeners.values())
        return len(self._listeners.get(event_type, ()))

    def clear(self):
        self._listeners.clear()
