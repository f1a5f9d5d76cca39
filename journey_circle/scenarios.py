"""Reference graphs for the journey circle, used by the CLI and the test suite."""

from .model import GraphSnapshot, ProblemNode, SolutionNode

# ---------------------------------------------------------------------------
# Sample content
# ---------------------------------------------------------------------------

PROBLEM_TITLES = [
    "Leads go cold after the first call",
    "No visibility into campaign ROI",
    "Sales and marketing use different data",
    "Follow-up depends on memory",
    "Reports take a week to assemble",
]

SOLUTION_TITLES = [
    "Automated nurture sequences",
    "Attribution dashboard",
    "Shared CRM pipeline",
    "Task reminders from intent signals",
    "Scheduled report exports",
]


def _problems(slots, primary_slot=None):
    return [
        ProblemNode(
            id=f"p{slot}",
            title=PROBLEM_TITLES[slot % len(PROBLEM_TITLES)],
            slot=slot,
            is_primary=slot == primary_slot,
        )
        for slot in slots
    ]


def _solutions(slots):
    return [
        SolutionNode(
            id=f"s{slot}",
            title=SOLUTION_TITLES[slot % len(SOLUTION_TITLES)],
            slot=slot,
            problem_id=f"p{slot}",
        )
        for slot in slots
    ]


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


def scenario_full_problems():
    """Five problems out of slot order, nothing solved yet."""
    return GraphSnapshot(problems=_problems([0, 2, 4, 1, 3]))


def scenario_partial():
    """Three problems, two of them solved; the middle one is unaddressed."""
    return GraphSnapshot(
        problems=_problems([0, 1, 2], primary_slot=0),
        solutions=_solutions([0, 2]),
        offer_count=1,
    )


def scenario_empty():
    """Nothing saved yet: ghost rings, "0" offers and the helper caption."""
    return GraphSnapshot.empty()


def scenario_no_offers():
    """Every problem solved but no offers: full rings around an empty center."""
    return GraphSnapshot(
        problems=_problems(range(5)),
        solutions=_solutions(range(5)),
        offer_count=0,
    )


def scenario_complete():
    """The finished journey: full rings, a primary problem, and offers."""
    return GraphSnapshot(
        problems=_problems(range(5), primary_slot=2),
        solutions=_solutions(range(5)),
        offer_count=3,
        primary_problem_id="p2",
    )
