"""journey_circle: animated radial diagram of a problem/solution/offer graph.

Draws three concentric layers onto a matplotlib Figure: problems on the outer
ring, solutions on the middle ring, and the offer count in the center circle.
New data is revealed with an eased grow-in animation driven by an injectable
frame scheduler.

Usage:
    engine = DiagramEngine(scheduler=ManualScheduler())
    engine.attach(HostSurface.offscreen(device_pixel_ratio=2))
    engine.set_data(snapshot)

    python -m journey_circle --scenario partial     # one scenario
    python -m journey_circle --all                  # every scenario
    python -m journey_circle --list                 # list available

Requires: pip install numpy matplotlib Pillow httpx
"""

from .config import EngineOptions
from .engine import DiagramEngine, EngineState
from .errors import DiagramError, ExportError, FetchError, SurfaceUnavailable
from .events import (
    AnimationFinished,
    DataIssueFound,
    FrameRendered,
    LoadFailed,
    StateChanged,
)
from .layout import DataIssue, IssueKind, resolve_layout
from .model import GraphSnapshot, ProblemNode, SolutionNode
from .pipeline import FrameReport, RenderPipeline
from .routing import ConnectionRouter, ForeignKeyRouter, LineKind
from .scheduling import AsyncioScheduler, ManualScheduler, Scheduler
from .sources import RestGraphSource, StaticGraphSource
from .surface import HostSurface, SurfaceManager

__version__ = "0.1.0"

__all__ = [
    "AnimationFinished",
    "AsyncioScheduler",
    "ConnectionRouter",
    "DataIssue",
    "DataIssueFound",
    "DiagramEngine",
    "DiagramError",
    "EngineOptions",
    "EngineState",
    "ExportError",
    "FetchError",
    "ForeignKeyRouter",
    "FrameRendered",
    "FrameReport",
    "GraphSnapshot",
    "HostSurface",
    "IssueKind",
    "LineKind",
    "LoadFailed",
    "ManualScheduler",
    "ProblemNode",
    "RenderPipeline",
    "RestGraphSource",
    "Scheduler",
    "SolutionNode",
    "StateChanged",
    "StaticGraphSource",
    "SurfaceManager",
    "SurfaceUnavailable",
    "resolve_layout",
]
