"""
Layout resolution: snapshot in, drawable placement out.

This is the one place where inconsistent graphs are reconciled.  Nothing is
raised for bad data; every policy that kicks in is recorded as a DataIssue so
callers can log or surface it.

Policies:
    - slots wrap with ``slot mod 5``; a missing slot uses the list index
    - duplicate slots share a segment (later entities draw on top)
    - the first problem flagged ``is_primary`` is the primary; the graph-level
      ``primary_problem_id`` is only used when no problem claims it
    - a matched solution sits on its problem's segment, whatever its own slot
    - a solution whose ``problem_id`` matches no problem is dropped
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from .geometry import SEGMENT_COUNT, resolve_slot, segment_index_at, segment_mid_angle
from .model import GraphSnapshot, ProblemNode, SolutionNode

logger = logging.getLogger(__name__)


class IssueKind(Enum):
    MISSING_SLOT = "missing_slot"
    SLOT_OUT_OF_RANGE = "slot_out_of_range"
    DUPLICATE_SLOT = "duplicate_slot"
    TOO_MANY_PROBLEMS = "too_many_problems"
    TOO_MANY_SOLUTIONS = "too_many_solutions"
    DANGLING_SOLUTION = "dangling_solution"
    SOLUTION_MISALIGNED = "solution_misaligned"
    MULTIPLE_PRIMARY = "multiple_primary"
    PRIMARY_MISMATCH = "primary_mismatch"


@dataclass(frozen=True)
class DataIssue:
    """A data-quality signal found while laying out a snapshot."""
    kind: IssueKind
    entity_id: Any
    detail: str


@dataclass(frozen=True)
class PlacedProblem:
    node: ProblemNode
    segment: int
    is_primary: bool = False

    @property
    def ordinal(self) -> int:
        return self.segment + 1


@dataclass(frozen=True)
class PlacedSolution:
    node: SolutionNode
    problem: PlacedProblem

    @property
    def segment(self) -> int:
        # Canonical angle comes from the problem, never the solution's own slot.
        return self.problem.segment

    @property
    def ordinal(self) -> int:
        return self.segment + 1


@dataclass(frozen=True)
class DiagramLayout:
    snapshot: GraphSnapshot
    problems: Tuple[PlacedProblem, ...]
    solutions: Tuple[PlacedSolution, ...]
    primary_id: Any
    issues: Tuple[DataIssue, ...]
    middle_segment_count: int = SEGMENT_COUNT
    segment_count: int = SEGMENT_COUNT

    @property
    def is_empty(self) -> bool:
        return not self.problems

    @property
    def offer_count(self) -> int:
        return self.snapshot.offer_count

    @property
    def outer_occupied(self) -> frozenset:
        return frozenset(p.segment for p in self.problems)

    @property
    def middle_occupied(self) -> frozenset:
        # The segment under each solution node, which sits at its problem's angle.
        return frozenset(
            segment_index_at(segment_mid_angle(s.segment, self.segment_count),
                             self.middle_segment_count)
            for s in self.solutions
        )

    @property
    def primary(self) -> Optional[PlacedProblem]:
        for placed in self.problems:
            if placed.is_primary:
                return placed
        return None

    def solutions_for(self, placed_problem):
        return [s for s in self.solutions if s.problem is placed_problem]


def resolve_layout(snapshot, slot_count=SEGMENT_COUNT):
    """
    Place every entity of *snapshot* on a ring segment.

    Args:
        snapshot: GraphSnapshot to lay out
        slot_count: Segments on the problem ring

    Returns:
        DiagramLayout
    """
    issues = []
    problems = snapshot.problems
    solutions = snapshot.solutions

    if len(problems) > slot_count:
        issues.append(DataIssue(
            IssueKind.TOO_MANY_PROBLEMS, None,
            f"{len(problems)} problems for {slot_count} segments",
        ))
    if len(solutions) > slot_count:
        issues.append(DataIssue(
            IssueKind.TOO_MANY_SOLUTIONS, None,
            f"{len(solutions)} solutions for {slot_count} segments",
        ))

    primary_index = _resolve_primary(snapshot, issues)

    placed_problems = []
    taken = {}
    for index, problem in enumerate(problems):
        segment = _place(problem, index, slot_count, issues)
        if segment in taken:
            issues.append(DataIssue(
                IssueKind.DUPLICATE_SLOT, problem.id,
                f"shares segment {segment} with problem {taken[segment]!r}",
            ))
        else:
            taken[segment] = problem.id
        placed_problems.append(PlacedProblem(problem, segment, index == primary_index))

    by_id = {}
    for placed in placed_problems:
        by_id.setdefault(placed.node.id, placed)

    placed_solutions = []
    for index, solution in enumerate(solutions):
        placed = by_id.get(solution.problem_id) if solution.problem_id is not None else None
        if placed is None:
            issues.append(DataIssue(
                IssueKind.DANGLING_SOLUTION, solution.id,
                f"problem_id {solution.problem_id!r} matches no problem",
            ))
            continue
        if solution.slot is not None and solution.slot % slot_count != placed.segment:
            issues.append(DataIssue(
                IssueKind.SOLUTION_MISALIGNED, solution.id,
                f"slot {solution.slot} drawn on problem segment {placed.segment}",
            ))
        placed_solutions.append(PlacedSolution(solution, placed))

    primary_id = problems[primary_index].id if primary_index is not None else None
    layout = DiagramLayout(
        snapshot=snapshot,
        problems=tuple(placed_problems),
        solutions=tuple(placed_solutions),
        primary_id=primary_id,
        issues=tuple(issues),
        middle_segment_count=max(len(solutions), len(problems), slot_count),
        segment_count=slot_count,
    )
    for issue in layout.issues:
        logger.warning("Journey circle data issue [%s] %r: %s",
                       issue.kind.value, issue.entity_id, issue.detail)
    return layout


def _place(problem, index, slot_count, issues):
    if problem.slot is None:
        issues.append(DataIssue(
            IssueKind.MISSING_SLOT, problem.id,
            f"no slot, using list position {index}",
        ))
    elif not 0 <= problem.slot < slot_count:
        issues.append(DataIssue(
            IssueKind.SLOT_OUT_OF_RANGE, problem.id,
            f"slot {problem.slot} wrapped to {problem.slot % slot_count}",
        ))
    return resolve_slot(problem.slot, index, slot_count)


def _resolve_primary(snapshot, issues):
    claimed = [i for i, p in enumerate(snapshot.problems) if p.is_primary]
    if len(claimed) > 1:
        issues.append(DataIssue(
            IssueKind.MULTIPLE_PRIMARY, snapshot.problems[claimed[0]].id,
            f"{len(claimed)} problems claim primary, first one wins",
        ))

    graph_level = snapshot.primary_problem_id
    if claimed:
        chosen = claimed[0]
        if graph_level is not None and snapshot.problems[chosen].id != graph_level:
            issues.append(DataIssue(
                IssueKind.PRIMARY_MISMATCH, snapshot.problems[chosen].id,
                f"primary_problem_id is {graph_level!r}",
            ))
        return chosen

    if graph_level is None:
        return None
    for i, problem in enumerate(snapshot.problems):
        if problem.id == graph_level:
            return i
    issues.append(DataIssue(
        IssueKind.PRIMARY_MISMATCH, graph_level,
        "primary_problem_id matches no problem",
    ))
    return None
