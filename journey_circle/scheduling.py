"""
Frame schedulers.

The animation controller never loops on its own: it asks a Scheduler for the
next frame and gets a handle it can cancel.  ManualScheduler is a
deterministic clock for tests and offline frame capture; AsyncioScheduler
drives frames from a running event loop.
"""

import asyncio
from typing import Any, Callable, Protocol, runtime_checkable

FrameCallback = Callable[[float], None]


@runtime_checkable
class Scheduler(Protocol):
    """Host frame scheduler.  Times are milliseconds on a monotonic clock."""

    def now(self) -> float:
        ...

    def schedule_frame(self, callback: FrameCallback) -> Any:
        ...

    def cancel_frame(self, handle: Any) -> None:
        ...


class ManualScheduler:
    """
    Scheduler driven by hand.

    Callbacks scheduled while a step runs are deferred to the next step, the
    way a display loop defers work requested inside a frame.
    """

    def __init__(self, start=0.0, frame_ms=16.0):
        self._now = float(start)
        self.frame_ms = frame_ms
        self._pending = {}
        self._next_handle = 0
        self.frames_run = 0

    def now(self):
        return self._now

    def schedule_frame(self, callback):
        self._next_handle += 1
        self._pending[self._next_handle] = callback
        return self._next_handle

    def cancel_frame(self, handle):
        self._pending.pop(handle, None)

    @property
    def pending_count(self):
        return len(self._pending)

    def advance(self, ms):
        """Move the clock forward without running anything."""
        self._now += ms

    def step(self, ms=None):
        """Advance one frame and run the callbacks that were due; returns how many ran."""
        self._now += self.frame_ms if ms is None else ms
        ran = 0
        for handle in list(self._pending):
            callback = self._pending.pop(handle, None)
            if callback is None:
                continue
            callback(self._now)
            ran += 1
        self.frames_run += ran
        return ran

    def run_until_idle(self, max_frames=10_000):
        """Step until nothing is pending; returns the number of frames stepped."""
        frames = 0
        while self._pending:
            if frames >= max_frames:
                raise RuntimeError(f"scheduler still busy after {max_frames} frames")
            self.step()
            frames += 1
        return frames


class AsyncioScheduler:
    """Schedule frames on an asyncio event loop at a fixed rate."""

    def __init__(self, loop=None, fps=60.0):
        self._loop = loop
        self.interval = 1.0 / fps

    def _get_loop(self):
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self):
        return self._get_loop().time() * 1000.0

    def schedule_frame(self, callback):
        loop = self._get_loop()
        return loop.call_later(self.interval, lambda: callback(self.now()))

    def cancel_frame(self, handle):
        handle.cancel()
