"""Tests for the reveal animation state machine and easing curves."""

import math

import pytest

from journey_circle.animation import (
    EASINGS,
    AnimationController,
    AnimationState,
    ease_out_cubic,
    get_easing,
)
from journey_circle.scheduling import ManualScheduler


class UnrevokableScheduler(ManualScheduler):
    """A host loop that cannot take back a frame once requested."""

    def cancel_frame(self, handle):
        pass


def make_controller(scheduler, easing=ease_out_cubic):
    frames = []
    finished = []
    controller = AnimationController(scheduler, frames.append, easing=easing,
                                     on_finish=finished.append)
    return controller, frames, finished


class TestEasing:
    @pytest.mark.parametrize("name", sorted(EASINGS))
    def test_endpoints(self, name):
        curve = get_easing(name)
        assert curve(0.0) == pytest.approx(0.0)
        assert curve(1.0) == pytest.approx(1.0)

    def test_ease_out_cubic_is_monotonic(self):
        values = [ease_out_cubic(i / 100) for i in range(101)]
        assert values == sorted(values)
        assert ease_out_cubic(0.5) == pytest.approx(0.875)

    def test_unknown_easing(self):
        with pytest.raises(ValueError, match="Unknown easing"):
            get_easing("bounce")


class TestRun:
    def test_runs_to_completion(self, scheduler):
        controller, frames, finished = make_controller(scheduler)

        run_id = controller.start(600)
        assert controller.state is AnimationState.ANIMATING
        scheduler.run_until_idle()

        assert controller.state is AnimationState.IDLE
        assert frames[-1] == 1.0
        assert frames == sorted(frames)
        assert finished == [run_id]

    def test_terminates_within_duration_plus_one_frame(self, scheduler):
        controller, frames, _ = make_controller(scheduler)

        controller.start(600)
        stepped = scheduler.run_until_idle()

        assert stepped <= math.ceil(600 / scheduler.frame_ms) + 1
        assert len(frames) == stepped

    def test_zero_duration_renders_final_frame(self, scheduler):
        controller, frames, finished = make_controller(scheduler)

        controller.start(0)
        scheduler.run_until_idle()

        assert frames == [1.0]
        assert len(finished) == 1

    def test_at_most_one_pending_frame(self, scheduler):
        controller, _, _ = make_controller(scheduler)

        controller.start(600)
        assert scheduler.pending_count == 1
        scheduler.step()
        assert scheduler.pending_count == 1
        controller.start(600)
        controller.start(600)
        assert scheduler.pending_count == 1
        assert controller.has_pending_frame


class TestCancel:
    def test_cancel_is_idempotent(self, scheduler):
        controller, frames, finished = make_controller(scheduler)

        controller.cancel()
        controller.start(600)
        scheduler.step()
        controller.cancel()
        controller.cancel()

        assert controller.state is AnimationState.IDLE
        assert scheduler.pending_count == 0
        assert len(frames) == 1
        assert finished == []

    def test_only_the_last_run_finishes(self, scheduler):
        controller, _, finished = make_controller(scheduler)

        controller.start(600)
        scheduler.step()
        controller.start(600)
        scheduler.step()
        last = controller.start(600)
        scheduler.run_until_idle()

        assert finished == [last]

    def test_stale_frame_is_ignored(self):
        scheduler = UnrevokableScheduler()
        controller, frames, finished = make_controller(scheduler)

        controller.start(600)
        controller.cancel()
        scheduler.step()

        assert frames == []
        assert finished == []
        assert scheduler.pending_count == 0

    def test_render_that_cancels_stops_the_run(self, scheduler):
        calls = []

        def render(progress):
            calls.append(progress)
            controller.cancel()

        controller = AnimationController(scheduler, render)
        controller.start(600)
        scheduler.run_until_idle()

        assert len(calls) == 1
        assert controller.state is AnimationState.IDLE

    def test_render_error_returns_to_idle(self, scheduler):
        def render(progress):
            raise RuntimeError("boom")

        controller = AnimationController(scheduler, render)
        controller.start(600)

        with pytest.raises(RuntimeError, match="boom"):
            scheduler.step()
        assert controller.state is AnimationState.IDLE
        assert scheduler.pending_count == 0


class TestManualScheduler:
    def test_callbacks_scheduled_during_step_wait_for_next_step(self, scheduler):
        seen = []

        def first(now):
            seen.append(("first", now))
            scheduler.schedule_frame(lambda t: seen.append(("second", t)))

        scheduler.schedule_frame(first)
        assert scheduler.step() == 1
        assert seen == [("first", 16.0)]
        assert scheduler.step() == 1
        assert seen[-1] == ("second", 32.0)

    def test_run_until_idle_gives_up(self, scheduler):
        def forever(now):
            scheduler.schedule_frame(forever)

        scheduler.schedule_frame(forever)
        with pytest.raises(RuntimeError):
            scheduler.run_until_idle(max_frames=10)
