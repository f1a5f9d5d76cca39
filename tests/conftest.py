"""
Shared pytest fixtures for the journey circle test suite.

Engines and surfaces are small (200 logical px) and headless (Agg); every
animation is driven by a ManualScheduler so frame timing is deterministic.
"""

import asyncio

import pytest

from journey_circle.config import EngineOptions
from journey_circle.engine import DiagramEngine
from journey_circle.layout import resolve_layout
from journey_circle.pipeline import RenderPipeline
from journey_circle.scheduling import ManualScheduler
from journey_circle.surface import HostSurface, SurfaceManager

TEST_SIZE = 200


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def surface():
    manager = SurfaceManager()
    manager.attach(HostSurface.offscreen(), TEST_SIZE)
    yield manager
    manager.release()


@pytest.fixture
def pipeline():
    return RenderPipeline()


@pytest.fixture
def render_layout(surface, pipeline):
    """Render a snapshot at a given progress and return the FrameReport."""

    def render(snapshot, eased=1.0):
        return pipeline.render(surface, resolve_layout(snapshot), eased)

    return render


@pytest.fixture
def make_engine(scheduler):
    """Factory for attached engines sharing the test's scheduler."""
    engines = []

    def factory(source=None, dpr=1.0, **options):
        options.setdefault("logical_size", TEST_SIZE)
        engine = DiagramEngine(source=source, scheduler=scheduler)
        engine.attach(HostSurface.offscreen(dpr), EngineOptions(**options))
        engines.append(engine)
        return engine

    yield factory
    for engine in engines:
        engine.destroy()


@pytest.fixture
def engine(make_engine):
    return make_engine()


class GatedSource:
    """Graph source whose fetch blocks until ``release()``."""

    def __init__(self, snapshot):
        self.snapshot = snapshot
        self.gate = asyncio.Event()
        self.calls = 0

    def release(self):
        self.gate.set()

    async def fetch(self, circle_id):
        self.calls += 1
        await self.gate.wait()
        return self.snapshot


class FailingSource:
    """Graph source that raises *error* for the first *failures* fetches."""

    def __init__(self, error, snapshot=None, failures=1):
        self.error = error
        self.snapshot = snapshot
        self.failures = failures
        self.calls = 0

    async def fetch(self, circle_id):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.snapshot
