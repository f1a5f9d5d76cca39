"""
Frame rendering for the journey circle.

One frame is a fixed sequence of passes, each a full repaint of its layer:

    clear -> background -> outer ring -> middle ring -> center circle
          -> connection lines -> nodes -> labels

Passes read only the layout, the eased progress and the axes; each draws at
its own zorder so matplotlib composites them in pass order.  Every artist gets
a gid ("outer-segment-2-solid", "primary-indicator", ...) and every pass adds
what it drew to a FrameReport.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from matplotlib.patches import Circle, Rectangle, Wedge
import matplotlib.patheffects as pe

from ._common import DESIGN, EMPTY_CAPTION, FONTS, REVEAL, STYLE, ramp, rgba, text_stroke
from .geometry import node_point_for, point_at, segments_for
from .routing import ConnectionLine, ForeignKeyRouter, LineKind, RingDimensions

Z_BACKGROUND = 0
Z_OUTER = 1
Z_MIDDLE = 2
Z_CENTER = 3
Z_LINES = 4
Z_NODES = 5
Z_LABELS = 6

LINE_ALPHA = {
    LineKind.PROBLEM_TO_SOLUTION: 0.5,
    LineKind.SOLUTION_TO_CENTER: 0.35,
    LineKind.UNADDRESSED: 0.35,
}


@dataclass(frozen=True)
class NodeMark:
    ring: str  # "outer" | "middle"
    ordinal: int
    entity_id: Any
    x: float
    y: float
    primary: bool = False


@dataclass
class FrameReport:
    """What one frame put on the surface."""
    progress: float
    mode: str = "diagram"  # "diagram" | "loading" | "error"
    drawn: bool = False
    outer_solid: Tuple[int, ...] = ()
    outer_ghost: Tuple[int, ...] = ()
    middle_solid: Tuple[int, ...] = ()
    middle_ghost: Tuple[int, ...] = ()
    lines: List[ConnectionLine] = field(default_factory=list)
    nodes: List[NodeMark] = field(default_factory=list)
    placeholders: List[NodeMark] = field(default_factory=list)
    center_text: Optional[str] = None
    center_filled: bool = False
    labels: List[str] = field(default_factory=list)
    caption_visible: bool = False
    primary_id: Any = None
    message: Optional[str] = None

    @property
    def matched_pairs(self):
        return sum(1 for line in self.lines if line.kind is LineKind.PROBLEM_TO_SOLUTION)

    @property
    def unaddressed_lines(self):
        return [line for line in self.lines if line.kind is LineKind.UNADDRESSED]


class RenderPipeline:
    """
    Draw frames onto a SurfaceManager.

    Args:
        style: Color overrides merged over STYLE
        design: Geometry overrides merged over DESIGN
        router: Connection routing strategy (ForeignKeyRouter by default)
    """

    def __init__(self, style=None, design=None, router=None):
        self.style = {**STYLE, **(style or {})}
        self.design = {**DESIGN, **(design or {})}
        self.dimensions = RingDimensions.from_design(self.design)
        self.router = router or ForeignKeyRouter(
            self.design["segment_count"], self.design["start_angle"]
        )
        self.passes = (
            self.draw_background,
            self.draw_outer_ring,
            self.draw_middle_ring,
            self.draw_center,
            self.draw_connections,
            self.draw_nodes,
            self.draw_labels,
        )

    # -----------------------------------------------------------------------
    # Frames
    # -----------------------------------------------------------------------

    def render(self, surface, layout, eased):
        """Repaint the whole diagram for *layout* at progress *eased*."""
        eased = min(max(float(eased), 0.0), 1.0)
        report = FrameReport(progress=eased, primary_id=layout.primary_id)
        if not surface.drawable:
            return report
        ax = surface.begin_frame()
        for draw in self.passes:
            draw(ax, surface, layout, eased, report)
        surface.present()
        report.drawn = True
        return report

    def render_loading(self, surface):
        report = FrameReport(progress=0.0, mode="loading")
        if not surface.drawable:
            return report
        ax = surface.begin_frame()
        self.draw_background(ax, surface, None, 0.0, report)
        cx, cy = self.dimensions.center
        ax.add_patch(Circle((cx, cy), 40, facecolor=rgba(self.style["empty"], 0.3),
                            edgecolor="none", zorder=Z_CENTER, gid="loading-disc"))
        ax.text(cx, cy, "Loading…", color=self.style["empty_text"],
                fontsize=surface.points(FONTS["empty"]), ha="center", va="center",
                zorder=Z_LABELS, gid="loading-text")
        surface.present()
        report.drawn = True
        return report

    def render_error(self, surface, message):
        report = FrameReport(progress=0.0, mode="error", message=message)
        if not surface.drawable:
            return report
        ax = surface.begin_frame()
        self.draw_background(ax, surface, None, 0.0, report)
        cx, cy = self.dimensions.center
        ax.text(cx, cy, f"⚠ {message}", color=self.style["error"],
                fontsize=surface.points(FONTS["empty"]), ha="center", va="center",
                zorder=Z_LABELS, gid="error-text")
        ax.text(cx, cy + 24, "Click refresh to retry.", color=self.style["empty_text"],
                fontsize=surface.points(FONTS["ring_label"]), ha="center", va="center",
                zorder=Z_LABELS, gid="error-retry")
        surface.present()
        report.drawn = True
        return report

    # -----------------------------------------------------------------------
    # Passes
    # -----------------------------------------------------------------------

    def draw_background(self, ax, surface, layout, eased, report):
        size = self.design["size"]
        surface.figure.patch.set_facecolor(self.style["bg"])
        ax.add_patch(Rectangle((0, 0), size, size, facecolor=self.style["bg"],
                               edgecolor="none", zorder=Z_BACKGROUND, gid="background"))

    def draw_outer_ring(self, ax, surface, layout, eased, report):
        count = self.design["segment_count"]
        solid, ghost = self._draw_ring(
            ax, surface, layout, eased, "outer", self.dimensions.outer_radius,
            count, layout.outer_occupied, self.style["problem"],
            self.style["problem_light"], Z_OUTER,
        )
        report.outer_solid, report.outer_ghost = solid, ghost

    def draw_middle_ring(self, ax, surface, layout, eased, report):
        solid, ghost = self._draw_ring(
            ax, surface, layout, eased, "middle", self.dimensions.middle_radius,
            layout.middle_segment_count, layout.middle_occupied,
            self.style["solution"], self.style["solution_light"], Z_MIDDLE,
        )
        report.middle_solid, report.middle_ghost = solid, ghost

    def _draw_ring(self, ax, surface, layout, eased, name, radius, count,
                   occupied, color, light, zorder):
        d = self.dimensions
        segments = segments_for(count, self.design["start_angle"])
        if layout.is_empty:
            occupied = frozenset()
        solid = tuple(s.index for s in segments if s.index in occupied)
        ghost = tuple(s.index for s in segments if s.index not in occupied)

        r = radius * eased
        width = d.ring_width * eased
        if r <= 0:
            return solid, ghost
        inner = max(r - width, 0.0)

        for seg in segments:
            if seg.index in occupied:
                fill, state = color, "solid"
            elif layout.is_empty:
                fill, state = rgba(self.style["empty"], 0.35), "ghost"
            else:
                fill, state = rgba(color, 0.25), "ghost"
            ax.add_patch(Wedge(d.center, r, seg.start, seg.end, width=r - inner,
                               facecolor=fill, edgecolor="none", zorder=zorder,
                               gid=f"{name}-segment-{seg.index}-{state}"))

        divider_alpha = ramp(eased, REVEAL["dividers"], 0.4)
        if divider_alpha > 0:
            for seg in segments:
                x0, y0 = point_at(seg.start, inner, d.center)
                x1, y1 = point_at(seg.start, r, d.center)
                ax.plot([x0, x1], [y0, y1], color=rgba(self.style["divider"], 0.8 * divider_alpha),
                        linewidth=surface.points(2), zorder=zorder + 0.1,
                        gid=f"{name}-divider-{seg.index}")

        if solid and eased > REVEAL["edges"]:
            edge = rgba(light, 0.4 * (eased - REVEAL["edges"]) / (1 - REVEAL["edges"]))
            for edge_radius in (r, inner):
                ax.add_patch(Circle(d.center, edge_radius, fill=False, edgecolor=edge,
                                    linewidth=surface.points(1), zorder=zorder + 0.2))
        return solid, ghost

    def draw_center(self, ax, surface, layout, eased, report):
        d = self.dimensions
        count = layout.offer_count
        filled = count > 0
        report.center_filled = filled
        r = d.center_radius * eased
        if r > 0:
            if filled:
                face, edge = self.style["offer"], rgba(self.style["offer"], 0.6)
            else:
                face, edge = rgba(self.style["empty"], 0.5), rgba(self.style["empty"], 0.3)
            ax.add_patch(Circle(d.center, r, facecolor=face, edgecolor=edge,
                                linewidth=surface.points(2), zorder=Z_CENTER,
                                gid="center-filled" if filled else "center-empty"))
            if filled:
                ax.add_patch(Circle(d.center, r * 0.6, facecolor=rgba(self.style["offer_light"], 0.5),
                                    edgecolor="none", zorder=Z_CENTER + 0.1))

        if eased <= REVEAL["center_text"]:
            return
        alpha = min((eased - REVEAL["center_text"]) * 2, 1.0)
        color = self.style["node_bg"] if filled else self.style["empty_text"]
        cx, cy = d.center
        ax.text(cx, cy - 8, str(count), color=rgba(color, alpha),
                fontsize=surface.points(FONTS["center_count"]), fontweight="bold",
                ha="center", va="center", zorder=Z_CENTER + 0.2, gid="center-count")
        ax.text(cx, cy + 16, "Offer" if count == 1 else "Offers",
                color=rgba(color, (0.85 if filled else 0.7) * alpha),
                fontsize=surface.points(FONTS["center_label"]),
                ha="center", va="center", zorder=Z_CENTER + 0.2, gid="center-label")
        report.center_text = str(count)

    def draw_connections(self, ax, surface, layout, eased, report):
        if layout.is_empty or eased <= REVEAL["connections"]:
            return
        reveal = ramp(eased, REVEAL["connections"], 0.4)
        lines = self.router.route(layout, self.dimensions, eased)
        for line in lines:
            unaddressed = line.kind is LineKind.UNADDRESSED
            alpha = LINE_ALPHA[line.kind] * line.opacity * reveal
            ax.plot(
                [line.start[0], line.end[0]], [line.start[1], line.end[1]],
                color=rgba(self.style["connection"], alpha),
                linewidth=surface.points(1 if unaddressed else 1.5),
                linestyle=(0, (2, 6)) if unaddressed else (0, (4, 4)),
                zorder=Z_LINES, gid=f"line-{line.kind.value}-{line.problem_id}",
            )
        report.lines = list(lines)

    def draw_nodes(self, ax, surface, layout, eased, report):
        if eased <= REVEAL["nodes"]:
            return
        alpha = ramp(eased, REVEAL["nodes"], 0.4)
        d = self.dimensions
        count = self.design["segment_count"]
        start = self.design["start_angle"]

        if layout.is_empty:
            for ring, radius in (("outer", d.outer_radius), ("middle", d.middle_radius)):
                for index in range(count):
                    x, y = node_point_for(index, radius, d.ring_width, d.center,
                                          count, start, eased)
                    ax.text(x, y, str(index + 1), color=rgba(self.style["placeholder"], alpha),
                            fontsize=surface.points(FONTS["node"]), fontweight="bold",
                            ha="center", va="center", zorder=Z_NODES,
                            gid=f"{ring}-placeholder-{index}")
                    report.placeholders.append(NodeMark(ring, index + 1, None, x, y))
            return

        for placed in layout.problems:
            x, y = node_point_for(placed.segment, d.outer_radius, d.ring_width, d.center,
                                  count, start, eased)
            node_r = self.design["node_radius"] * alpha
            if placed.is_primary:
                ax.add_patch(Circle((x, y), node_r + self.design["primary_gap"], fill=False,
                                    edgecolor=rgba(self.style["primary"], alpha),
                                    linewidth=surface.points(3), zorder=Z_NODES,
                                    gid="primary-indicator"))
            self._draw_node(ax, surface, x, y, node_r, placed.ordinal,
                            self.style["problem"], alpha, f"outer-node-{placed.node.id}")
            report.nodes.append(NodeMark("outer", placed.ordinal, placed.node.id, x, y,
                                         placed.is_primary))

        for placed in layout.solutions:
            x, y = node_point_for(placed.segment, d.middle_radius, d.ring_width, d.center,
                                  count, start, eased)
            node_r = self.design["node_radius_small"] * alpha
            self._draw_node(ax, surface, x, y, node_r, placed.ordinal,
                            self.style["solution"], alpha, f"middle-node-{placed.node.id}")
            report.nodes.append(NodeMark("middle", placed.ordinal, placed.node.id, x, y))

    def _draw_node(self, ax, surface, x, y, radius, ordinal, border, alpha, gid):
        ax.add_patch(Circle(
            (x, y), radius,
            facecolor=rgba(self.style["node_bg"], alpha),
            edgecolor=rgba(border, 0.6 * alpha),
            linewidth=surface.points(2),
            zorder=Z_NODES + 0.1,
            gid=gid,
            path_effects=[
                pe.SimplePatchShadow(offset=(0, -surface.points(2)), alpha=0.15 * alpha),
                pe.Normal(),
            ],
        ))
        ax.text(x, y, str(ordinal), color=rgba(self.style["node_text"], alpha),
                fontsize=surface.points(FONTS["node"]), fontweight="bold",
                ha="center", va="center", zorder=Z_NODES + 0.2)

    def draw_labels(self, ax, surface, layout, eased, report):
        alpha = ramp(eased, REVEAL["labels"], 1.0 - REVEAL["labels"])
        if alpha <= 0:
            return
        d = self.dimensions
        cx, cy = d.center
        total = self.design["segment_count"]
        font = surface.points(FONTS["ring_label"])

        problems = len(layout.problems)
        solutions = len(layout.solutions)
        entries = (
            (f"{problems}/{total} Problems", cy - d.outer_radius - 18,
             self.style["problem"] if problems else self.style["empty_text"], "label-problems"),
            (f"{solutions}/{total} Solutions", cy + d.outer_radius + 18,
             self.style["solution"] if solutions else self.style["empty_text"], "label-solutions"),
        )
        for text, y, color, gid in entries:
            ax.text(cx, y, text, color=rgba(color, alpha), fontsize=font, fontweight="bold",
                    ha="center", va="center", zorder=Z_LABELS, gid=gid,
                    path_effects=text_stroke(surface.points(3), self.style["bg"]))
            report.labels.append(text)

        if layout.is_empty:
            ax.text(cx, cy + d.center_radius + 40, EMPTY_CAPTION,
                    color=rgba(self.style["empty_text"], alpha),
                    fontsize=surface.points(FONTS["empty"]), ha="center", va="center",
                    linespacing=1.4, zorder=Z_LABELS, gid="empty-caption")
            report.caption_visible = True
