"""
Unit tests for MasteryEstimator.

Tests:
- Confidence-damped mastery formula
- Strength / weakness classification
- Bounds and damping monotonicity
- Diagnostic helpers (average time, accuracy, data sufficiency)
"""

import pytest

from prep_engine.study.mastery_estimator import (
    MasteryConfig,
    MasteryEstimator,
    average_time_ms,
    has_enough_data,
    overall_accuracy,
)


@pytest.fixture
def estimator():
    return MasteryEstimator()


class TestMasteryScore:
    """Tests for the damped mastery formula."""

    def test_full_confidence_uses_raw_accuracy(self, estimator):
        """12 attempts, 9 correct: 75% accuracy, confidence capped at 1."""
        assert estimator.calculate_mastery_score(correct=9, attempts=12) == 75

    def test_few_attempts_are_damped(self, estimator):
        """A single correct answer cannot saturate a topic."""
        assert estimator.calculate_mastery_score(correct=1, attempts=1) == 10

    def test_zero_attempts_scores_zero(self, estimator):
        """No attempts means no mastery rather than a division error."""
        assert estimator.calculate_mastery_score(correct=0, attempts=0) == 0

    def test_halves_round_up(self, estimator):
        """1/40 correct = 2.5% rounds to 3, matching the web client."""
        assert estimator.calculate_mastery_score(correct=1, attempts=40) == 3

    @pytest.mark.parametrize("attempts", range(1, 31))
    def test_mastery_bounds(self, estimator, attempts):
        """Scores stay within 0-100 for every correct count."""
        for correct in range(attempts + 1):
            score = estimator.calculate_mastery_score(correct, attempts)
            assert 0 <= score <= 100

    def test_damping_non_decreasing_until_full_confidence(self, estimator):
        """At fixed 100% accuracy, mastery grows with attempts, then plateaus."""
        scores = [estimator.calculate_mastery_score(n, n) for n in range(1, 16)]

        assert scores == sorted(scores)
        assert scores[9:] == [100] * 6

    def test_damping_at_fixed_partial_accuracy(self, estimator):
        """At 50% accuracy, mastery rises to 50 at 10 attempts and stays there."""
        scores = [estimator.calculate_mastery_score(n // 2, n) for n in range(2, 31, 2)]

        assert scores == sorted(scores)
        assert scores[-1] == 50
        assert estimator.calculate_mastery_score(5, 10) == 50

    def test_custom_confidence_attempts(self):
        """The confidence window is configurable."""
        estimator = MasteryEstimator(MasteryConfig(confidence_attempts=4))
        assert estimator.calculate_mastery_score(correct=2, attempts=2) == 50


class TestEstimate:
    """Tests for aggregation and classification."""

    def test_graphs_scenario_is_a_strength(self, estimator, make_question):
        """12 attempts with 9 correct scores 75 and counts as a strength."""
        answers = [make_question(f"q{i}", "graphs") for i in range(12)]
        correct_ids = {f"q{i}" for i in range(9)}

        report = estimator.estimate(answers, correct_ids)

        assert report.mastery == {"graphs": 75}
        assert report.strength_areas == ("graphs",)
        assert report.weakness_areas == ()

    def test_correctness_comes_from_correct_ids(self, estimator, make_question):
        """The caller's correct-id set is authoritative, not the answer flag."""
        answers = [make_question(f"q{i}", "arrays", correct=True) for i in range(10)]

        report = estimator.estimate(answers, set())

        assert report.mastery["arrays"] == 0

    def test_multi_tag_questions_count_for_each_tag(self, estimator, make_question):
        """A question with two tags counts once for each tag."""
        answers = [make_question(f"q{i}", "graphs", "bfs") for i in range(10)]
        report = estimator.estimate(answers, {f"q{i}" for i in range(8)})

        assert report.mastery == {"graphs": 80, "bfs": 80}
        assert report.topic_stats["bfs"].attempts == 10
        assert report.topic_stats["bfs"].correct == 8

    def test_topic_stats_keep_undamped_accuracy(self, estimator, make_question):
        """Topic stats report raw accuracy next to damped mastery."""
        answers = [make_question("q1", "heaps"), make_question("q2", "heaps")]

        report = estimator.estimate(answers, {"q1"})

        stats = report.topic_stats["heaps"]
        assert stats.accuracy == 50
        assert stats.mastery == 10

    def test_weakness_and_strength_thresholds(self, estimator, make_question):
        """70 is a strength, below 50 a weakness, between is neither."""
        answers = []
        # 70 exactly -> strength, 0 -> weakness, 50 -> neither
        for tag in ("strong", "weak", "middle"):
            answers.extend(make_question(f"{tag}{i}", tag) for i in range(10))
        correct_ids = {f"strong{i}" for i in range(7)} | {f"middle{i}" for i in range(5)}

        report = estimator.estimate(answers, correct_ids)

        assert report.strength_areas == ("strong",)
        assert report.weakness_areas == ("weak",)
        assert "middle" not in report.strength_areas + report.weakness_areas

    def test_topics_keep_first_encounter_order(self, estimator, make_question):
        """Topics are reported in the order they first appear."""
        answers = [
            make_question("a", "zeta"),
            make_question("b", "alpha"),
            make_question("c", "mid"),
        ]

        report = estimator.estimate(answers, set())

        assert list(report.mastery) == ["zeta", "alpha", "mid"]
        assert report.weakness_areas == ("zeta", "alpha", "mid")

    def test_empty_history(self, estimator):
        """No answers gives empty maps and lists."""
        report = estimator.estimate([], set())

        assert report.mastery == {}
        assert report.topic_stats == {}
        assert report.strength_areas == ()
        assert report.weakness_areas == ()

    def test_untagged_questions_are_ignored(self, estimator, make_question):
        """Questions without tags contribute to no topic."""
        report = estimator.estimate([make_question("q1")], {"q1"})
        assert report.mastery == {}


class TestDiagnostics:
    """Tests for diagnostic helpers."""

    def test_average_time(self):
        """Average time per question rounds half up."""
        assert average_time_ms({"a": 1000, "b": 2000, "c": 4000}) == 2333

    def test_average_time_empty(self):
        """An empty timing map averages to 0."""
        assert average_time_ms({}) == 0

    def test_overall_accuracy(self, make_question):
        """Overall accuracy is a rounded percentage."""
        answers = [make_question("a"), make_question("b"), make_question("c")]
        assert overall_accuracy(answers, {"a", "b"}) == 67

    def test_overall_accuracy_empty(self):
        """No answers gives 0% accuracy."""
        assert overall_accuracy([], set()) == 0

    def test_has_enough_data(self, make_question):
        """Five answers are needed by default; the minimum is adjustable."""
        answers = [make_question(str(i)) for i in range(4)]

        assert has_enough_data(answers) is False
        assert has_enough_data(answers + [make_question("4")]) is True
        assert has_enough_data(answers, minimum=4) is True
