"""
Drawing surface ownership and device-pixel-ratio handling.

The host hands over a matplotlib Figure and its device pixel ratio.  The
manager sizes the figure so its raster buffer holds ``logical_size * dpr``
pixels per side (dpi = LOGICAL_DPI * dpr) and keeps one full-bleed axes whose
data space is the fixed design square, y down.  Everything else draws in
design coordinates and never touches pixel math.

Resize notifications are expected to arrive debounced (~150 ms) from the
host; the manager applies every call immediately.
"""

import logging
import math

import numpy as np
from matplotlib.backend_bases import FigureCanvasBase
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from ._common import DEFAULT_LOGICAL_SIZE, DESIGN, LOGICAL_DPI, setup_axes
from .errors import SurfaceUnavailable

logger = logging.getLogger(__name__)


class HostSurface:
    """A drawable region supplied by the host: a Figure plus its pixel ratio."""

    def __init__(self, figure=None, device_pixel_ratio=1.0):
        self.figure = figure
        self.device_pixel_ratio = device_pixel_ratio

    @classmethod
    def offscreen(cls, device_pixel_ratio=1.0):
        """Headless host backed by an Agg canvas."""
        figure = Figure()
        FigureCanvasAgg(figure)
        return cls(figure, device_pixel_ratio)


class SurfaceManager:
    def __init__(self, max_size=DEFAULT_LOGICAL_SIZE, design_size=DESIGN["size"], on_redraw=None):
        self.max_size = max_size
        self.design_size = design_size
        self.on_redraw = on_redraw
        self.figure = None
        self.canvas = None
        self.axes = None
        self.device_pixel_ratio = 1.0
        self.logical_size = 0.0

    @property
    def attached(self):
        return self.figure is not None

    def attach(self, host, logical_size=DEFAULT_LOGICAL_SIZE):
        """
        Bind to a host surface and size its buffer.

        Raises:
            SurfaceUnavailable: the host has no Figure, no raster canvas, or
                an unusable device pixel ratio
        """
        figure = getattr(host, "figure", None)
        if not isinstance(figure, Figure):
            raise SurfaceUnavailable("host surface does not provide a matplotlib Figure")

        dpr = getattr(host, "device_pixel_ratio", 1.0)
        try:
            dpr = float(dpr)
        except (TypeError, ValueError):
            raise SurfaceUnavailable(f"invalid device pixel ratio {dpr!r}") from None
        if not math.isfinite(dpr) or dpr <= 0:
            raise SurfaceUnavailable(f"invalid device pixel ratio {dpr!r}")

        canvas = figure.canvas
        if type(canvas) is FigureCanvasBase:
            canvas = FigureCanvasAgg(figure)
        if not hasattr(canvas, "buffer_rgba"):
            raise SurfaceUnavailable(
                f"{type(canvas).__name__} has no raster buffer; use an Agg-based canvas"
            )

        self.figure = figure
        self.canvas = canvas
        self.device_pixel_ratio = dpr
        figure.clear()
        self.axes = figure.add_axes((0, 0, 1, 1))
        setup_axes(self.axes, self.design_size)
        self._apply_size(logical_size)
        logger.debug("Surface attached: %s logical, dpr %.2f, buffer %s",
                     self.logical_size, dpr, self.buffer_size)

    def resize(self, new_logical_width):
        """Resize to a square of ``min(new_logical_width, max_size)`` and request a redraw."""
        if not self.attached:
            return
        self._apply_size(new_logical_width)
        if self.on_redraw is not None:
            self.on_redraw()

    def _apply_size(self, logical_size):
        size = float(logical_size)
        if not math.isfinite(size):
            size = 0.0
        size = min(max(size, 0.0), float(self.max_size))
        self.logical_size = size
        self.figure.set_dpi(LOGICAL_DPI * self.device_pixel_ratio)
        inches = size / LOGICAL_DPI
        self.figure.set_size_inches(inches, inches)

    @property
    def buffer_size(self):
        """Physical (width, height) of the raster buffer in pixels."""
        if not self.attached:
            return (0, 0)
        width, height = self.figure.bbox.size
        return (int(round(width)), int(round(height)))

    @property
    def drawable(self):
        return self.attached and min(self.buffer_size) >= 1

    @property
    def scale(self):
        """Logical units per design pixel."""
        return self.logical_size / self.design_size

    def points(self, design_px):
        """Convert a design-pixel length to matplotlib points at the current size."""
        return design_px * self.scale * 72.0 / LOGICAL_DPI

    def begin_frame(self):
        """Clear the axes for a full repaint and hand it to the caller."""
        self.axes.cla()
        setup_axes(self.axes, self.design_size)
        return self.axes

    def present(self):
        if self.drawable:
            self.canvas.draw_idle()

    def rgba_buffer(self):
        """Copy of the current frame as an (h, w, 4) uint8 array."""
        self.canvas.draw()
        return np.asarray(self.canvas.buffer_rgba()).copy()

    def release(self):
        if self.axes is not None:
            self.axes.remove()
        self.figure = None
        self.canvas = None
        self.axes = None
