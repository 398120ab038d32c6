"""
Next-Practice Prioritizer.

Merges due reviews, the current learning phase and the top knowledge gaps
into a recommendation list. Order expresses intent, not a hard queue:

1. Due reviews (spaced repetition comes first)
2. Current phase topics, excluding questions already answered
3. Top gaps, re-practicing previously answered questions too

The output is selection criteria, not question ids; the question bank
resolves them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from loguru import logger

from prep_engine.core.models import DueReview, KnowledgeGap, LearningPathPhase, QuestionCriteria


@dataclass(frozen=True)
class PrioritizerConfig:
    """Caps for each recommendation source."""

    review_limit: int = 5
    phase_question_count: int = 10
    gap_question_count: int = 5
    top_gap_count: int = 3


@dataclass(frozen=True)
class Recommendation:
    """What to practice next."""

    review_queue: tuple[DueReview, ...] = ()
    next_question_criteria: tuple[QuestionCriteria, ...] = field(default_factory=tuple)


class Prioritizer:
    """Select what the user should practice next."""

    def __init__(self, config: PrioritizerConfig | None = None):
        self.config = config or PrioritizerConfig()

    def prioritize(
        self,
        due_for_review: Sequence[DueReview],
        recommended_path: Sequence[LearningPathPhase],
        knowledge_gaps: Sequence[KnowledgeGap],
    ) -> Recommendation:
        """
        Build the recommendation.

        Args:
            due_for_review: Due reviews, most overdue first
            recommended_path: Learning phases in order
            knowledge_gaps: Gaps sorted by severity

        Returns:
            Recommendation with a capped review queue and criteria bundles
        """
        review_queue = tuple(due_for_review[: self.config.review_limit])
        if review_queue:
            logger.debug(f"{len(review_queue)} questions due for review")

        criteria: list[QuestionCriteria] = []

        if recommended_path:
            current_phase = recommended_path[0]
            criteria.append(QuestionCriteria(
                tags=current_phase.focus_topics,
                difficulty=current_phase.difficulty,
                exclude_already_answered=True,
                count=self.config.phase_question_count,
                reason=f"Phase {current_phase.phase_number}: {current_phase.name}",
            ))

        for gap in knowledge_gaps[: self.config.top_gap_count]:
            criteria.append(QuestionCriteria(
                tags=(gap.topic,),
                difficulty=gap.common_difficulty,
                exclude_already_answered=False,  # Gap topics are re-practiced on purpose
                count=self.config.gap_question_count,
                reason=f"Address {gap.severity.value} gap in {gap.topic}",
            ))

        logger.info(f"Recommended {len(criteria)} question sets")

        return Recommendation(
            review_queue=review_queue,
            next_question_criteria=tuple(criteria),
        )
