"""
Unit tests for Prioritizer.
"""

import pytest

from prep_engine.adaptive.prioritizer import Prioritizer, PrioritizerConfig
from prep_engine.core.models import (
    Difficulty,
    DueReview,
    KnowledgeGap,
    LearningPathPhase,
    Severity,
)


def gap(topic, severity=Severity.CRITICAL, difficulty=Difficulty.ADVANCED):
    return KnowledgeGap(
        topic=topic,
        severity=severity,
        error_count=3,
        common_difficulty=difficulty,
        recommendation="Review core concepts",
    )


def phase(number, name, *topics, difficulty=Difficulty.BEGINNER):
    return LearningPathPhase(
        phase_number=number,
        name=name,
        focus_topics=topics,
        difficulty=difficulty,
        estimated_time="2-3 days",
        goal="Build fundamental understanding",
    )


@pytest.fixture
def prioritizer():
    return Prioritizer()


class TestReviewQueue:
    def test_capped_at_five_preserving_order(self, prioritizer):
        """The review queue keeps the five most overdue in order."""
        due = [DueReview(f"q{i}", level=1, overdue_days=10 - i) for i in range(8)]

        recommendation = prioritizer.prioritize(due, [], [])

        assert [r.question_id for r in recommendation.review_queue] == [
            "q0", "q1", "q2", "q3", "q4"
        ]

    def test_short_due_list_passes_through(self, prioritizer):
        """Fewer than five due items are all queued."""
        due = [DueReview("q1", level=0, overdue_days=0)]
        assert prioritizer.prioritize(due, [], []).review_queue == tuple(due)

    def test_custom_limit(self):
        """The review cap is configurable."""
        prioritizer = Prioritizer(PrioritizerConfig(review_limit=2))
        due = [DueReview(f"q{i}", level=1, overdue_days=1) for i in range(4)]

        assert len(prioritizer.prioritize(due, [], []).review_queue) == 2


class TestCriteria:
    def test_phase_then_top_gaps(self, prioritizer):
        """The phase bundle excludes answered questions; gap bundles do not."""
        path = [phase(1, "Foundation Building", "dp", "trees")]
        gaps = [gap("dp"), gap("trees", Severity.HIGH, Difficulty.BEGINNER)]

        criteria = prioritizer.prioritize([], path, gaps).next_question_criteria

        assert len(criteria) == 3

        first = criteria[0]
        assert first.tags == ("dp", "trees")
        assert first.difficulty == Difficulty.BEGINNER
        assert first.exclude_already_answered is True
        assert first.count == 10
        assert first.reason == "Phase 1: Foundation Building"

        assert criteria[1].tags == ("dp",)
        assert criteria[1].difficulty == Difficulty.ADVANCED
        assert criteria[1].exclude_already_answered is False
        assert criteria[1].count == 5
        assert criteria[1].reason == "Address critical gap in dp"
        assert criteria[2].reason == "Address high gap in trees"

    def test_only_first_phase_is_used(self, prioritizer):
        """Only the current phase produces a bundle."""
        path = [phase(1, "Core Concepts", "a"), phase(2, "Advanced Mastery", "b")]

        criteria = prioritizer.prioritize([], path, []).next_question_criteria

        assert len(criteria) == 1
        assert criteria[0].tags == ("a",)

    def test_at_most_three_gaps(self, prioritizer):
        """Only the three most severe gaps produce bundles."""
        gaps = [gap(f"t{i}") for i in range(6)]

        criteria = prioritizer.prioritize([], [], gaps).next_question_criteria

        assert [c.tags for c in criteria] == [("t0",), ("t1",), ("t2",)]

    def test_nothing_to_recommend(self, prioritizer):
        """No due items, path or gaps give an empty recommendation."""
        recommendation = prioritizer.prioritize([], [], [])

        assert recommendation.review_queue == ()
        assert recommendation.next_question_criteria == ()

    def test_criteria_serialize_camel_case(self, prioritizer):
        """Criteria render with camelCase keys."""
        criteria = prioritizer.prioritize([], [], [gap("dp")]).next_question_criteria

        assert criteria[0].to_dict() == {
            "tags": ["dp"],
            "difficulty": "advanced",
            "excludeAlreadyAnswered": False,
            "count": 5,
            "reason": "Address critical gap in dp",
        }
