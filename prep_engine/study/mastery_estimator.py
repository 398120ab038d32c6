"""
Mastery Estimator for interview topics.

Derives a 0-100 mastery score per topic tag from raw answer history.

Formula:
    accuracy   = 100 × correct / attempts
    confidence = min(1, attempts / confidence_attempts)
    mastery    = round(accuracy × confidence)

Scores are damped for topics with few attempts, so a single lucky or
unlucky answer cannot saturate a topic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from loguru import logger

from prep_engine.core.clock import round_half_up
from prep_engine.core.models import AnsweredQuestion, TopicStats


@dataclass(frozen=True)
class MasteryConfig:
    """Thresholds for mastery classification and gap severity."""

    strength_threshold: int = 70
    weakness_threshold: int = 50
    critical_threshold: int = 30
    high_threshold: int = 50
    confidence_attempts: int = 10


@dataclass(frozen=True)
class MasteryReport:
    """Result of a mastery estimation pass."""

    mastery: dict[str, int] = field(default_factory=dict)
    topic_stats: dict[str, TopicStats] = field(default_factory=dict)
    strength_areas: tuple[str, ...] = ()
    weakness_areas: tuple[str, ...] = ()


class MasteryEstimator:
    """
    Calculates confidence-weighted mastery per topic.

    Evidence thresholds:
    - Strength: mastery >= 70
    - Weakness: mastery < 50
    - Full confidence after 10 attempts
    """

    def __init__(self, config: MasteryConfig | None = None):
        """
        Initialize estimator.

        Args:
            config: Custom thresholds (uses defaults if None)
        """
        self.config = config or MasteryConfig()

    def calculate_mastery_score(self, correct: int, attempts: int) -> int:
        """
        Calculate damped mastery score (0-100).

        Args:
            correct: Correct answers for the topic
            attempts: Total answers for the topic

        Returns:
            Mastery score 0-100 (0 when there are no attempts)
        """
        if attempts <= 0:
            return 0

        accuracy = (correct / attempts) * 100
        confidence_factor = min(1.0, attempts / self.config.confidence_attempts)
        score = round_half_up(accuracy * confidence_factor)

        return min(max(score, 0), 100)

    def estimate(
        self,
        answered_questions: Iterable[AnsweredQuestion],
        correct_ids: frozenset[str] | set[str],
    ) -> MasteryReport:
        """
        Aggregate answers per tag and classify topics.

        A question counts as correct iff its id is in correct_ids. Topic
        order in every output follows first appearance in the history.

        Args:
            answered_questions: User's answer history
            correct_ids: Ids of questions answered correctly

        Returns:
            MasteryReport with scores, raw stats, strengths and weaknesses
        """
        attempts: dict[str, int] = {}
        correct: dict[str, int] = {}

        for question in answered_questions:
            is_correct = question.question_id in correct_ids
            for tag in question.tags:
                attempts[tag] = attempts.get(tag, 0) + 1
                if is_correct:
                    correct[tag] = correct.get(tag, 0) + 1

        mastery: dict[str, int] = {}
        topic_stats: dict[str, TopicStats] = {}
        for tag, tag_attempts in attempts.items():
            tag_correct = correct.get(tag, 0)
            score = self.calculate_mastery_score(tag_correct, tag_attempts)
            mastery[tag] = score
            topic_stats[tag] = TopicStats(
                topic=tag,
                attempts=tag_attempts,
                correct=tag_correct,
                accuracy=round_half_up(tag_correct / tag_attempts * 100),
                mastery=score,
            )

        strength_areas = tuple(
            tag for tag, score in mastery.items() if score >= self.config.strength_threshold
        )
        weakness_areas = tuple(
            tag for tag, score in mastery.items() if score < self.config.weakness_threshold
        )

        logger.info(
            f"Analyzed {len(mastery)} topics: "
            f"{len(strength_areas)} strengths, {len(weakness_areas)} weaknesses"
        )
        logger.debug(f"Strengths: {', '.join(strength_areas) or 'none identified yet'}")
        logger.debug(f"Weaknesses: {', '.join(weakness_areas) or 'none identified yet'}")

        return MasteryReport(
            mastery=mastery,
            topic_stats=topic_stats,
            strength_areas=strength_areas,
            weakness_areas=weakness_areas,
        )


def average_time_ms(time_spent_by_question: Mapping[str, float]) -> int:
    """
    Mean time per question in milliseconds (diagnostic only).

    Never feeds into scheduling; reported in the run summary.
    """
    if not time_spent_by_question:
        return 0
    values = list(time_spent_by_question.values())
    return round_half_up(sum(values) / len(values))


def overall_accuracy(answered_questions: Iterable[AnsweredQuestion], correct_ids) -> int:
    """Percentage of answers that were correct (0 when empty)."""
    answered = list(answered_questions)
    if not answered:
        return 0
    hits = sum(1 for q in answered if q.question_id in correct_ids)
    return round_half_up(hits / len(answered) * 100)


def has_enough_data(answered_questions: Iterable[AnsweredQuestion], minimum: int = 5) -> bool:
    """
    Whether a UI should show a learning path yet.

    The pipeline itself imposes no minimum; this is caller policy.
    """
    return sum(1 for _ in answered_questions) >= minimum
