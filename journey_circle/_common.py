"""Shared style, design geometry, and helpers for journey circle rendering."""

import os

import matplotlib.patheffects as pe
from matplotlib.colors import to_rgba

# ---------------------------------------------------------------------------
# Surface settings
# ---------------------------------------------------------------------------

# Logical units per inch.  A figure at dpi = LOGICAL_DPI * device_pixel_ratio
# holds logical_size * device_pixel_ratio physical pixels per side.
LOGICAL_DPI = 100
DEFAULT_LOGICAL_SIZE = 700
DEFAULT_DURATION_MS = 600

# ---------------------------------------------------------------------------
# Design geometry (design pixels in a 700 x 700 square)
# ---------------------------------------------------------------------------

DESIGN = {
    "size": 700,
    "outer_radius": 280,  # Problems ring, outer edge
    "middle_radius": 200,  # Solutions ring, outer edge
    "center_radius": 80,  # Offers circle
    "ring_width": 40,
    "node_radius": 20,  # Problem nodes
    "node_radius_small": 16,  # Solution nodes
    "primary_gap": 4,  # Halo offset around the primary node
    "segment_count": 5,
    "start_angle": -90.0,  # 12 o'clock
}

# ---------------------------------------------------------------------------
# Reveal policy: fixed thresholds on the eased progress value
# ---------------------------------------------------------------------------

REVEAL = {
    "dividers": 0.3,
    "nodes": 0.4,
    "connections": 0.5,
    "center_text": 0.5,
    "edges": 0.5,
    "labels": 0.7,
}

# ---------------------------------------------------------------------------
# Colors (dark canvas, ring colors from the journey circle design)
# ---------------------------------------------------------------------------

STYLE = {
    "bg": "#1a1a2e",  # Dark blue-gray canvas
    "problem": "#ff6b6b",  # Outer ring
    "problem_light": "#ff8a8a",
    "solution": "#42a5f5",  # Middle ring
    "solution_light": "#64b5f6",
    "offer": "#66bb6a",  # Center circle
    "offer_light": "#81c784",
    "divider": "#ffffff",
    "node_bg": "#ffffff",
    "node_text": "#333333",
    "primary": "#ffca28",  # Primary problem halo
    "connection": "#ffffff",
    "empty": "#e0e0e0",  # Ghost segments
    "empty_text": "#9e9e9e",
    "placeholder": "#94a3b8",  # Ghost ordinals
    "text": "#e0e0f0",
    "error": "#e53935",
}

# Font sizes in design pixels; converted to points by the surface.
FONTS = {
    "node": 14,
    "center_count": 28,
    "center_label": 13,
    "ring_label": 11,
    "empty": 14,
}

EMPTY_CAPTION = "Complete Steps 5–8 to populate\nyour Journey Circle."


def rgba(color, alpha=1.0):
    """Return *color* as an RGBA tuple with *alpha* clamped to [0, 1]."""
    return to_rgba(color, max(0.0, min(1.0, alpha)))


def ramp(eased, threshold, span):
    """Opacity that is 0 at *threshold* and reaches 1 after *span* more progress."""
    if eased <= threshold:
        return 0.0
    return min((eased - threshold) / span, 1.0)


def setup_axes(ax, size):
    """Reset *ax* to a bare y-down design space of ``size`` x ``size``."""
    ax.set_xlim(0, size)
    ax.set_ylim(size, 0)
    ax.set_aspect("equal", adjustable="box")
    ax.set_axis_off()


def text_stroke(width, color=None):
    """Outline effect keeping labels readable over ring colors."""
    return [pe.withStroke(linewidth=width, foreground=color or STYLE["bg"])]


def save(data, path):
    """Write encoded image *data* to *path*, creating parent directories."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    return path
