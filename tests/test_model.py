"""Tests for GraphSnapshot construction and payload parsing."""

from journey_circle.model import GraphSnapshot, ProblemNode, SolutionNode


class TestFromPayload:
    def test_camel_case_keys(self):
        snapshot = GraphSnapshot.from_payload({
            "problems": [{"id": 1, "title": "A", "slot": 0, "isPrimary": True}],
            "solutions": [{"id": 2, "title": "B", "slot": 0, "problemId": 1}],
            "offerCount": 4,
            "primaryProblemId": 1,
        })

        assert snapshot.problems == (ProblemNode("1", "A", 0, True),)
        assert snapshot.solutions == (SolutionNode("2", "B", 0, "1"),)
        assert snapshot.offer_count == 4
        assert snapshot.primary_problem_id == "1"

    def test_rest_keys(self):
        snapshot = GraphSnapshot.from_payload({
            "problems": [{"id": "9", "position": "2", "is_primary": "1"}],
            "solutions": [{"id": "8", "position": 2.0, "problem_id": "9"}],
            "offers": [{"id": 1}, {"id": 2}],
        })

        assert snapshot.problems[0].slot == 2
        assert snapshot.problems[0].is_primary
        assert snapshot.solutions[0].slot == 2
        assert snapshot.offer_count == 2

    def test_unusable_values(self):
        snapshot = GraphSnapshot.from_payload({
            "problems": [
                {"id": 1, "slot": "first"},
                {"id": 2, "slot": 1.5},
                {"title": "no id"},
                "not a mapping",
            ],
            "solutions": None,
            "offerCount": -3,
        })

        assert [p.slot for p in snapshot.problems] == [None, None]
        assert snapshot.solutions == ()
        assert snapshot.offer_count == 0

    def test_empty_payload(self):
        assert GraphSnapshot.from_payload({}) == GraphSnapshot.empty()
        assert GraphSnapshot.from_payload(None).is_empty


class TestSnapshot:
    def test_lists_become_tuples(self):
        snapshot = GraphSnapshot(problems=[ProblemNode("a")], solutions=[])

        assert isinstance(snapshot.problems, tuple)
        assert hash(snapshot.problems)

    def test_with_problems(self):
        base = GraphSnapshot(
            problems=[ProblemNode("a", slot=0)],
            solutions=[SolutionNode("s", slot=0, problem_id="a")],
            offer_count=2,
            primary_problem_id="a",
        )

        updated = base.with_problems([ProblemNode("b", slot=1)], primary_problem_id="b")

        assert [p.id for p in updated.problems] == ["b"]
        assert updated.solutions == base.solutions
        assert updated.offer_count == 2
        assert updated.primary_problem_id == "b"
        assert base.problems[0].id == "a"
