"""
DiagramEngine: the public facade of the journey circle renderer.

States:

    UNINITIALIZED --set_data--> READY
    UNINITIALIZED --refresh--> LOADING --ok--> READY
                                       --fail--> ERROR --retry--> LOADING
    READY --refresh--> LOADING
    any --set_data--> READY

Every set_data/refresh supersedes whatever came before it: the running
animation is cancelled and a fetch that settles after a newer request is
discarded.  After destroy() every call is a no-op.
"""

import asyncio
import io
import logging
import os
from enum import Enum

from PIL import Image

from ._common import save
from .animation import AnimationController, get_easing
from .config import EngineOptions
from .errors import DiagramError, ExportError, FetchError
from .events import (
    AnimationFinished,
    DataIssueFound,
    FrameRendered,
    ListenerRegistry,
    LoadFailed,
    StateChanged,
)
from .layout import resolve_layout
from .model import GraphSnapshot, ProblemNode
from .pipeline import RenderPipeline
from .scheduling import AsyncioScheduler
from .surface import SurfaceManager

logger = logging.getLogger(__name__)

VECTOR_FORMATS = ("svg", "pdf", "eps", "ps")
PIL_FORMATS = {"jpg": "JPEG", "tif": "TIFF"}


class EngineState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class DiagramEngine:
    """
    Render a journey circle graph onto a host surface.

    Args:
        source: Graph source (object with ``async fetch(circle_id)`` or an
            async callable); None renders the empty state on refresh
        scheduler: Frame scheduler; AsyncioScheduler by default
        pipeline: RenderPipeline to draw with; built from the options'
            colors on attach when omitted
    """

    def __init__(self, source=None, scheduler=None, pipeline=None):
        self.source = source
        self.scheduler = scheduler or AsyncioScheduler()
        self.pipeline = pipeline
        self.options = EngineOptions()
        self.circle_id = None
        self.surface = None
        self.state = EngineState.UNINITIALIZED
        self.snapshot = None
        self.layout = None
        self.error = None
        self.last_report = None
        self._events = ListenerRegistry()
        self._animation = AnimationController(
            self.scheduler, self._render_frame, on_finish=self._animation_finished
        )
        self._request = 0
        self._destroyed = False

    # -----------------------------------------------------------------------
    # Introspection
    # -----------------------------------------------------------------------

    @property
    def destroyed(self):
        return self._destroyed

    @property
    def attached(self):
        return self.surface is not None and self.surface.attached

    @property
    def is_animating(self):
        return self._animation.is_animating

    @property
    def animation(self):
        return self._animation

    def on(self, event_type, listener):
        """Subscribe to an event type; returns an unsubscribe function."""
        if self._destroyed:
            return lambda: None
        return self._events.on(event_type, listener)

    # -----------------------------------------------------------------------
    # Public operations
    # -----------------------------------------------------------------------

    def attach(self, host, options=None):
        """
        Bind the engine to a host surface.

        Args:
            host: HostSurface (a matplotlib Figure plus device pixel ratio)
            options: EngineOptions or a mapping of option values

        Raises:
            SurfaceUnavailable: The host offers no usable drawing surface
            DiagramError: The engine is already attached
        """
        if self._destroyed:
            return
        if self.attached:
            raise DiagramError("engine is already attached to a surface")
        if isinstance(options, dict):
            options = EngineOptions.from_dict(options)
        self.options = options or EngineOptions()
        self.circle_id = self.options.circle_id
        if self.pipeline is None:
            self.pipeline = RenderPipeline(style=self.options.colors)
        self._animation.easing = get_easing(self.options.easing)

        surface = SurfaceManager(
            max_size=self.options.max_size,
            design_size=self.pipeline.design["size"],
            on_redraw=self._repaint,
        )
        surface.attach(host, self.options.logical_size)
        self.surface = surface

        if self.state is EngineState.READY:
            self._animation.start(self.options.duration_ms)
        else:
            self._repaint()

    def set_data(self, snapshot):
        """Replace the graph with *snapshot* and replay the reveal animation."""
        if self._destroyed:
            return
        if not isinstance(snapshot, GraphSnapshot):
            snapshot = GraphSnapshot.from_payload(snapshot)
        self._request += 1
        self._apply(snapshot)

    def update_problems(self, problems, primary_problem_id=None):
        """Swap in a new problem list, keeping the current solutions and offers."""
        if self._destroyed:
            return
        nodes = []
        for item in problems:
            if isinstance(item, ProblemNode):
                nodes.append(item)
            else:
                nodes.extend(GraphSnapshot.from_payload({"problems": [item]}).problems)
        base = self.snapshot or GraphSnapshot.empty()
        self.set_data(base.with_problems(nodes, primary_problem_id))

    async def refresh(self, circle_id=None):
        """
        Fetch the current circle from the graph source and animate it in.

        Shows the loading frame while the fetch is pending.  A failure moves
        the engine to ERROR and emits LoadFailed; nothing is raised.
        Cancelling the call puts back the state it replaced and re-raises.
        """
        if self._destroyed:
            return
        if circle_id is not None:
            self.circle_id = circle_id
        self._request += 1
        request = self._request
        self._animation.cancel()

        if self.source is None or self.circle_id is None or self.circle_id == "":
            logger.debug("No graph source or circle id; showing empty circle")
            self._apply(GraphSnapshot.empty())
            return

        previous, previous_error = self.state, self.error
        self.error = None
        self._set_state(EngineState.LOADING)
        if self.attached:
            self.last_report = self.pipeline.render_loading(self.surface)

        fetch = getattr(self.source, "fetch", self.source)
        try:
            result = await fetch(self.circle_id)
            if not isinstance(result, GraphSnapshot):
                if not isinstance(result, dict):
                    raise FetchError(f"graph source returned {type(result).__name__}")
                result = GraphSnapshot.from_payload(result)
        except asyncio.CancelledError:
            if self._is_current(request):
                logger.debug("Fetch for circle %s cancelled", self.circle_id)
                self.error = previous_error
                self._set_state(previous)
                if self.attached:
                    self._repaint()
            raise
        except Exception as e:
            if self._is_current(request):
                self._fail(e)
            return

        if not self._is_current(request):
            logger.debug("Discarding stale fetch for circle %s", self.circle_id)
            return
        self._apply(result)

    def retry(self):
        """Retry a failed load; returns the refresh coroutine."""
        return self.refresh()

    def resize(self, logical_width):
        """Resize to a ``logical_width`` square and repaint without re-animating."""
        if self._destroyed or not self.attached:
            return
        self.surface.resize(logical_width)

    def redraw(self):
        """Repaint the current state fully revealed, without fetching or animating."""
        if self._destroyed or not self.attached:
            return
        self._animation.cancel()
        self._repaint()

    def to_image(self, fmt="png"):
        """
        Encode the current frame.

        Raster formats are encoded from the pixel buffer with Pillow; svg,
        pdf, eps and ps come from matplotlib's vector backends.

        Returns:
            Encoded image bytes, or None after destroy()

        Raises:
            ExportError: Not READY, zero-sized surface, or unsupported format
        """
        if self._destroyed:
            return None
        if self.state is not EngineState.READY or not self.attached:
            raise ExportError(f"nothing to export while {self.state.value}")
        if not self.surface.drawable:
            raise ExportError("surface has zero size")

        fmt = (fmt or "").lower().lstrip(".")
        buf = io.BytesIO()
        if fmt in VECTOR_FORMATS:
            figure = self.surface.figure
            try:
                figure.savefig(buf, format=fmt, dpi=figure.dpi,
                               facecolor=figure.get_facecolor())
            except (ValueError, OSError) as e:
                raise ExportError(f"cannot export {fmt!r}: {e}") from e
            return buf.getvalue()

        image = Image.fromarray(self.surface.rgba_buffer())
        pil_format = PIL_FORMATS.get(fmt, fmt.upper())
        if pil_format in ("JPEG", "BMP"):
            image = image.convert("RGB")
        try:
            image.save(buf, format=pil_format)
        except (KeyError, ValueError, OSError) as e:
            raise ExportError(f"unsupported image format {fmt!r}") from e
        return buf.getvalue()

    def save_image(self, path, fmt=None):
        """Write the current frame to *path*; the format defaults to the file suffix."""
        if self._destroyed:
            return None
        if fmt is None:
            fmt = os.path.splitext(str(path))[1].lstrip(".") or "png"
        data = self.to_image(fmt)
        return save(data, path)

    def destroy(self):
        """Cancel any animation and release the surface.  Idempotent."""
        if self._destroyed:
            return
        self._request += 1
        self._animation.cancel()
        if self.surface is not None:
            self.surface.release()
        self.surface = None
        self._destroyed = True
        self._events.clear()
        logger.debug("Engine destroyed")

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _is_current(self, request):
        return request == self._request and not self._destroyed

    def _set_state(self, state):
        previous = self.state
        if previous is state:
            return
        self.state = state
        logger.debug("Engine state %s -> %s", previous.value, state.value)
        self._events.emit(StateChanged(previous, state))

    def _apply(self, snapshot):
        count = self.pipeline.design["segment_count"] if self.pipeline else 5
        self.snapshot = snapshot
        self.layout = resolve_layout(snapshot, count)
        self.error = None
        for issue in self.layout.issues:
            self._events.emit(DataIssueFound(issue))
        self._set_state(EngineState.READY)
        if self.attached:
            self._animation.start(self.options.duration_ms)

    def _fail(self, error):
        message = str(error) or "Failed to load circle data."
        if not isinstance(error, FetchError):
            error = FetchError(message)
        logger.warning("Journey circle refresh failed: %s", message, exc_info=error)
        self.error = message
        self._set_state(EngineState.ERROR)
        if self.attached:
            self.last_report = self.pipeline.render_error(self.surface, message)
        self._events.emit(LoadFailed(message, error, self.retry))

    def _render_frame(self, eased):
        report = self.pipeline.render(self.surface, self.layout, eased)
        self.last_report = report
        self._events.emit(FrameRendered(eased, report))

    def _animation_finished(self, run_id):
        self._events.emit(AnimationFinished(run_id))

    def _repaint(self):
        if self.state is EngineState.READY and self.layout is not None:
            progress = self._animation.progress if self._animation.is_animating else 1.0
            self._render_frame(progress)
        elif self.state is EngineState.LOADING:
            self.last_report = self.pipeline.render_loading(self.surface)
        elif self.state is EngineState.ERROR:
            self.last_report = self.pipeline.render_error(self.surface, self.error)
        else:
            self.surface.begin_frame()
            self.surface.present()
            self.last_report = None
