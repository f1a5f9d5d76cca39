"""
Angular segmentation and node placement for the concentric rings.

Angles are in degrees in screen space (y grows downward), so increasing
angles run clockwise on screen and -90 degrees is 12 o'clock.  Every function
here is pure.
"""

from dataclasses import dataclass

import numpy as np

from ._common import DESIGN

SEGMENT_COUNT = DESIGN["segment_count"]
START_ANGLE = DESIGN["start_angle"]


@dataclass(frozen=True)
class Segment:
    """Angular bounds of one ring segment, in degrees."""
    index: int
    start: float
    end: float

    @property
    def mid(self) -> float:
        return (self.start + self.end) / 2.0

    @property
    def sweep(self) -> float:
        return self.end - self.start


def segments_for(slot_count=SEGMENT_COUNT, start_angle=START_ANGLE):
    """Divide a full turn into *slot_count* equal segments starting at *start_angle*."""
    if slot_count < 1:
        raise ValueError(f"slot_count must be positive, got {slot_count}")
    bounds = np.linspace(start_angle, start_angle + 360.0, slot_count + 1)
    return [
        Segment(i, float(bounds[i]), float(bounds[i + 1]))
        for i in range(slot_count)
    ]


def resolve_slot(slot, fallback=0, slot_count=SEGMENT_COUNT):
    """
    Map a possibly missing or out-of-range slot onto a segment index.

    A missing slot falls back to *fallback* (usually the entity's list index);
    anything else wraps with ``slot mod slot_count``.
    """
    value = fallback if slot is None else slot
    return int(value) % slot_count


def point_at(angle, radius, center=(0.0, 0.0)):
    """Point at *angle* degrees and *radius* from *center*."""
    theta = np.deg2rad(angle)
    return (
        float(center[0] + radius * np.cos(theta)),
        float(center[1] + radius * np.sin(theta)),
    )


def segment_mid_angle(segment_index, slot_count=SEGMENT_COUNT, start_angle=START_ANGLE):
    sweep = 360.0 / slot_count
    return start_angle + sweep * (segment_index % slot_count) + sweep / 2.0


def segment_index_at(angle, slot_count=SEGMENT_COUNT, start_angle=START_ANGLE):
    """Index of the segment of a *slot_count* ring that contains *angle*."""
    sweep = 360.0 / slot_count
    offset = round((angle - start_angle) % 360.0, 9)
    return int(offset // sweep) % slot_count


def node_point_for(segment_index, ring_radius, ring_width, center=(0.0, 0.0),
                   slot_count=SEGMENT_COUNT, start_angle=START_ANGLE, progress=1.0):
    """
    Node position for a segment: its midpoint angle at the band's mid-radius.

    Args:
        segment_index: Segment index (wrapped into range)
        ring_radius: Outer radius of the ring band
        ring_width: Width of the band, measured inward
        center: Ring center
        slot_count: Segments in the ring
        start_angle: Angle of the first segment boundary
        progress: Reveal progress in [0, 1]; scales the radius

    Returns:
        (x, y) tuple
    """
    angle = segment_mid_angle(segment_index, slot_count, start_angle)
    return point_at(angle, (ring_radius - ring_width / 2.0) * progress, center)
