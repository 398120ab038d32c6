"""
Unit tests for GapAnalyzer.

Focused on severity tiers, error patterns and recommendation lookup.
"""

import pytest

from prep_engine.adaptive.gap_analyzer import GapAnalyzer
from prep_engine.core.models import Difficulty, Severity
from prep_engine.study.mastery_estimator import MasteryConfig


@pytest.fixture
def analyzer():
    return GapAnalyzer()


class TestSeverity:
    @pytest.mark.parametrize(
        "mastery, expected",
        [
            (0, Severity.CRITICAL),
            (29, Severity.CRITICAL),
            (30, Severity.HIGH),
            (49, Severity.HIGH),
            (50, Severity.MEDIUM),
        ],
    )
    def test_tiers(self, analyzer, mastery, expected):
        """Mastery cutoffs map to critical, high and medium."""
        assert analyzer.classify_severity(mastery) == expected

    def test_default_weakness_threshold_never_yields_medium(self, analyzer):
        """Every weak topic (< 50) lands in critical or high."""
        severities = {analyzer.classify_severity(m) for m in range(0, 50)}
        assert severities == {Severity.CRITICAL, Severity.HIGH}

    def test_wider_weakness_threshold_admits_medium(self):
        """A weakness threshold above 50 opens the medium band."""
        analyzer = GapAnalyzer(MasteryConfig(weakness_threshold=70))

        gaps = analyzer.analyze(["sorting"], [], {"sorting": 60})

        assert gaps[0].severity == Severity.MEDIUM


class TestRecommendation:
    @pytest.mark.parametrize(
        "mastery, errors, expected",
        [
            (10, 0, "Start with fundamentals"),
            (19, 9, "Start with fundamentals"),
            (20, 0, "Review core concepts"),
            (39, 9, "Review core concepts"),
            (45, 6, "Practice more examples"),
            (45, 5, "Focus on advanced topics"),
            (45, 0, "Focus on advanced topics"),
        ],
    )
    def test_lookup(self, mastery, errors, expected):
        """Recommendation text follows mastery first, then error volume."""
        assert GapAnalyzer.recommend(mastery, errors) == expected


class TestCommonDifficulty:
    def test_most_frequent_wins(self):
        """The most frequent difficulty among errors is reported."""
        difficulties = [Difficulty.BEGINNER, Difficulty.ADVANCED, Difficulty.ADVANCED]
        assert GapAnalyzer.most_common_difficulty(difficulties) == Difficulty.ADVANCED

    def test_tie_goes_to_first_seen(self):
        """Equal counts resolve to the difficulty seen first."""
        difficulties = [
            Difficulty.ADVANCED,
            Difficulty.BEGINNER,
            Difficulty.BEGINNER,
            Difficulty.ADVANCED,
        ]
        assert GapAnalyzer.most_common_difficulty(difficulties) == Difficulty.ADVANCED

    def test_defaults_to_intermediate(self):
        """Topics without errors report intermediate."""
        assert GapAnalyzer.most_common_difficulty([]) == Difficulty.INTERMEDIATE


class TestAnalyze:
    def test_gap_fields(self, analyzer, make_question):
        """A gap carries severity, error count, difficulty and recommendation."""
        incorrect = [
            make_question("q1", "dp", difficulty=Difficulty.ADVANCED),
            make_question("q2", "dp", "graphs", difficulty=Difficulty.ADVANCED),
            make_question("q3", "graphs", difficulty=Difficulty.BEGINNER),
        ]

        gaps = analyzer.analyze(["dp"], incorrect, {"dp": 15, "graphs": 80})

        assert len(gaps) == 1
        gap = gaps[0]
        assert gap.topic == "dp"
        assert gap.severity == Severity.CRITICAL
        assert gap.error_count == 2
        assert gap.common_difficulty == Difficulty.ADVANCED
        assert gap.recommendation == "Start with fundamentals"
        assert gap.mastery == 15

    def test_only_weakness_areas_become_gaps(self, analyzer, make_question):
        """Errors on topics that are not weak produce no gap."""
        incorrect = [make_question("q1", "graphs")]

        gaps = analyzer.analyze([], incorrect, {"graphs": 10})

        assert gaps == []

    def test_weak_topic_without_errors(self, analyzer):
        """A weak topic with no recorded errors is still a gap."""
        gaps = analyzer.analyze(["trees"], [], {"trees": 35})

        assert gaps[0].error_count == 0
        assert gaps[0].common_difficulty == Difficulty.INTERMEDIATE
        assert gaps[0].severity == Severity.HIGH

    def test_sorted_by_severity_stable(self, analyzer):
        """Critical gaps come first; ties keep weakness order."""
        mastery = {"a": 45, "b": 10, "c": 40, "d": 5}

        gaps = analyzer.analyze(["a", "b", "c", "d"], [], mastery)

        assert [g.topic for g in gaps] == ["b", "d", "a", "c"]
        assert [g.severity for g in gaps] == [
            Severity.CRITICAL,
            Severity.CRITICAL,
            Severity.HIGH,
            Severity.HIGH,
        ]

    def test_missing_mastery_treated_as_zero(self, analyzer):
        """A weak topic absent from the mastery map is critical."""
        gaps = analyzer.analyze(["unknown"], [], {})
        assert gaps[0].severity == Severity.CRITICAL
