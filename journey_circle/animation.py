"""
Reveal animation: a two-state machine turning "new data" into a finite run of
eased progress values.

    IDLE --start()--> ANIMATING --t reaches 1 / cancel()--> IDLE

Every start() cancels the previous run first, so at most one frame callback
is ever pending.  A run ends after ``duration`` plus one scheduling quantum.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


def linear(t):
    return t


def ease_out_quad(t):
    return 1 - (1 - t) * (1 - t)


def ease_out_cubic(t):
    return 1 - (1 - t) ** 3


def ease_in_out_cubic(t):
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


EASINGS = {
    "linear": linear,
    "ease_out_quad": ease_out_quad,
    "ease_out_cubic": ease_out_cubic,
    "ease_in_out_cubic": ease_in_out_cubic,
}


def get_easing(name):
    try:
        return EASINGS[name]
    except KeyError:
        raise ValueError(
            f"Unknown easing {name!r}; choose one of {', '.join(sorted(EASINGS))}"
        ) from None


class AnimationState(Enum):
    IDLE = "idle"
    ANIMATING = "animating"


class AnimationController:
    """
    Drive a render callback with eased progress over wall-clock time.

    Args:
        scheduler: Scheduler supplying ``now``/``schedule_frame``/``cancel_frame``
        render: Called with the eased progress on every frame
        easing: Curve applied to linear time
        on_finish: Called with the run id when a run completes (not on cancel)
    """

    def __init__(self, scheduler, render, easing=ease_out_cubic, on_finish=None):
        self.scheduler = scheduler
        self.render = render
        self.easing = easing
        self.on_finish = on_finish
        self.state = AnimationState.IDLE
        self.progress = 0.0
        self.run_id = 0
        self._handle = None
        self._start = 0.0
        self._duration = 0.0

    @property
    def is_animating(self):
        return self.state is AnimationState.ANIMATING

    @property
    def has_pending_frame(self):
        return self._handle is not None

    def start(self, duration_ms):
        """Cancel any run in flight and begin a new one; returns its run id."""
        self.cancel()
        self.run_id += 1
        self._start = self.scheduler.now()
        self._duration = max(float(duration_ms), 0.0)
        self.progress = 0.0
        self.state = AnimationState.ANIMATING
        logger.debug("Animation run %d started (%.0f ms)", self.run_id, self._duration)
        run_id = self.run_id
        self._handle = self.scheduler.schedule_frame(lambda now: self._tick(run_id, now))
        return run_id

    def cancel(self):
        """Stop the current run.  Safe to call at any time."""
        if self._handle is not None:
            self.scheduler.cancel_frame(self._handle)
            self._handle = None
        if self.state is AnimationState.ANIMATING:
            logger.debug("Animation run %d cancelled at %.2f", self.run_id, self.progress)
        self.state = AnimationState.IDLE

    def _tick(self, run_id, now):
        if run_id != self.run_id or self.state is not AnimationState.ANIMATING:
            # Fired after cancel() by a scheduler that could not revoke it.
            return
        self._handle = None

        if self._duration <= 0:
            t = 1.0
        else:
            t = min(max((now - self._start) / self._duration, 0.0), 1.0)
        finished = t >= 1.0
        self.progress = 1.0 if finished else self.easing(t)

        try:
            self.render(self.progress)
        except Exception:
            self.state = AnimationState.IDLE
            raise

        if run_id != self.run_id or self.state is not AnimationState.ANIMATING:
            # The render callback cancelled this run or started a newer one.
            return
        if finished:
            self.state = AnimationState.IDLE
            logger.debug("Animation run %d finished", run_id)
            if self.on_finish is not None:
                self.on_finish(run_id)
        else:
            self._handle = self.scheduler.schedule_frame(lambda now: self._tick(run_id, now))
