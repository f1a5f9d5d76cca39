"""
Connection routing between the problem ring, the solution ring and the center.

The router is a strategy handed to the render pipeline; ForeignKeyRouter is
the default and pairs solutions with problems through ``problem_id``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Tuple, runtime_checkable

from .geometry import point_at, segment_mid_angle


class LineKind(Enum):
    PROBLEM_TO_SOLUTION = "problem_to_solution"
    SOLUTION_TO_CENTER = "solution_to_center"
    UNADDRESSED = "unaddressed"


@dataclass(frozen=True)
class ConnectionLine:
    kind: LineKind
    problem_id: Any
    solution_id: Any
    angle: float
    start: Tuple[float, float]
    end: Tuple[float, float]
    opacity: float = 1.0


@dataclass(frozen=True)
class RingDimensions:
    """Ring radii in design pixels around a center point."""
    center: Tuple[float, float]
    outer_radius: float
    middle_radius: float
    center_radius: float
    ring_width: float

    @classmethod
    def from_design(cls, design):
        half = design["size"] / 2.0
        return cls(
            center=(half, half),
            outer_radius=design["outer_radius"],
            middle_radius=design["middle_radius"],
            center_radius=design["center_radius"],
            ring_width=design["ring_width"],
        )


@runtime_checkable
class ConnectionRouter(Protocol):
    """Strategy producing connection line geometry for a layout."""

    def route(self, layout, dimensions, progress=1.0):
        ...


class ForeignKeyRouter:
    """
    Route lines by foreign key.

    Matched solutions get two lines on their problem's angle: outer ring inner
    edge to middle ring outer edge, then middle ring inner edge to the center
    circle edge.  Problems without a solution get one faint line from their
    node point to the center.  Dangling solutions get nothing.
    """

    unaddressed_opacity = 0.2

    def __init__(self, slot_count=5, start_angle=-90.0):
        self.slot_count = slot_count
        self.start_angle = start_angle

    def route(self, layout, dimensions, progress=1.0):
        lines = []
        d = dimensions
        for placed in layout.problems:
            angle = segment_mid_angle(placed.segment, self.slot_count, self.start_angle)
            matched = layout.solutions_for(placed)
            for solution in matched:
                lines.append(ConnectionLine(
                    kind=LineKind.PROBLEM_TO_SOLUTION,
                    problem_id=placed.node.id,
                    solution_id=solution.node.id,
                    angle=angle,
                    start=point_at(angle, (d.outer_radius - d.ring_width) * progress, d.center),
                    end=point_at(angle, d.middle_radius * progress, d.center),
                ))
                lines.append(ConnectionLine(
                    kind=LineKind.SOLUTION_TO_CENTER,
                    problem_id=placed.node.id,
                    solution_id=solution.node.id,
                    angle=angle,
                    start=point_at(angle, (d.middle_radius - d.ring_width) * progress, d.center),
                    end=point_at(angle, d.center_radius * progress, d.center),
                ))
            if not matched:
                lines.append(ConnectionLine(
                    kind=LineKind.UNADDRESSED,
                    problem_id=placed.node.id,
                    solution_id=None,
                    angle=angle,
                    start=point_at(angle, (d.outer_radius - d.ring_width / 2.0) * progress, d.center),
                    end=d.center,
                    opacity=self.unaddressed_opacity,
                ))
        return lines
