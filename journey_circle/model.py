"""
Graph snapshot model.

A snapshot is the immutable, whole-graph payload handed to the engine at one
instant.  Nothing here validates business rules: slots may be missing or out
of range, counts may exceed five, foreign keys may dangle.  Layout resolution
(layout.py) decides how such graphs are drawn.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class ProblemNode:
    """One problem on the outer ring."""
    id: Any
    title: str = ""
    slot: Optional[int] = None
    is_primary: bool = False


@dataclass(frozen=True)
class SolutionNode:
    """One solution on the middle ring, tied to a problem by ``problem_id``."""
    id: Any
    title: str = ""
    slot: Optional[int] = None
    problem_id: Any = None


@dataclass(frozen=True)
class GraphSnapshot:
    problems: Tuple[ProblemNode, ...] = field(default_factory=tuple)
    solutions: Tuple[SolutionNode, ...] = field(default_factory=tuple)
    offer_count: int = 0
    primary_problem_id: Any = None

    def __post_init__(self):
        # Accept lists from callers but store tuples so the snapshot stays frozen.
        object.__setattr__(self, "problems", tuple(self.problems))
        object.__setattr__(self, "solutions", tuple(self.solutions))

    @classmethod
    def empty(cls) -> "GraphSnapshot":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.problems

    def with_problems(self, problems, primary_problem_id=None) -> "GraphSnapshot":
        """Copy of this snapshot with the problem list replaced."""
        return GraphSnapshot(
            problems=tuple(problems),
            solutions=self.solutions,
            offer_count=self.offer_count,
            primary_problem_id=primary_problem_id,
        )

    @classmethod
    def from_payload(cls, payload) -> "GraphSnapshot":
        """
        Build a snapshot from a JSON-style mapping.

        Both key styles are accepted: ``offerCount``/``isPrimary``/``problemId``
        and the REST style ``position``/``is_primary``/``problem_id`` with an
        ``offers`` list.  Entries that are not mappings or carry no id are
        skipped.

        Args:
            payload: Mapping with ``problems``, ``solutions`` and offer data

        Returns:
            GraphSnapshot
        """
        payload = payload or {}
        problems = []
        for item in _as_list(payload.get("problems")):
            if not isinstance(item, dict) or item.get("id") is None:
                continue
            problems.append(ProblemNode(
                id=_as_id(item["id"]),
                title=str(item.get("title") or ""),
                slot=_as_slot(_first(item, "slot", "position")),
                is_primary=_as_bool(_first(item, "isPrimary", "is_primary")),
            ))

        solutions = []
        for item in _as_list(payload.get("solutions")):
            if not isinstance(item, dict) or item.get("id") is None:
                continue
            solutions.append(SolutionNode(
                id=_as_id(item["id"]),
                title=str(item.get("title") or ""),
                slot=_as_slot(_first(item, "slot", "position")),
                problem_id=_as_id(_first(item, "problemId", "problem_id")),
            ))

        count = _first(payload, "offerCount", "offer_count")
        if count is None:
            count = len(_as_list(payload.get("offers")))

        return cls(
            problems=tuple(problems),
            solutions=tuple(solutions),
            offer_count=_as_count(count),
            primary_problem_id=_as_id(_first(payload, "primaryProblemId", "primary_problem_id")),
        )


def _first(mapping, *keys):
    for key in keys:
        if mapping.get(key) is not None:
            return mapping[key]
    return None


def _as_list(value):
    return value if isinstance(value, (list, tuple)) else []


def _as_id(value):
    if value is None or value == "":
        return None
    return str(value)


def _as_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _as_slot(value):
    """Integer slot, or None when the value is not a whole number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_count(value):
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(count, 0)
