"""
Learning Path Generator.

Turns ranked knowledge gaps and strong topics into an ordered sequence of
learning phases:

1. Foundation Building - critical gaps, beginner
2. Core Concepts       - high gaps, intermediate
3. Skill Refinement    - medium gaps, intermediate
4. Advanced Mastery    - strength areas, advanced

Empty phases are skipped and the remaining ones are numbered from 1.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from loguru import logger

from prep_engine.core.models import (
    Difficulty,
    GapPriority,
    KnowledgeGap,
    LearningPathPhase,
    Severity,
)

DIFFICULTY_WEIGHTS = {
    Difficulty.BEGINNER: 1,
    Difficulty.INTERMEDIATE: 2,
    Difficulty.ADVANCED: 3,
}
DEFAULT_DIFFICULTY_WEIGHT = 2


@dataclass(frozen=True)
class PhaseTemplate:
    """Fixed presentation of a phase."""

    name: str
    difficulty: Difficulty
    estimated_time: str
    goal: str


GAP_PHASES: tuple[tuple[Severity, PhaseTemplate], ...] = (
    (Severity.CRITICAL, PhaseTemplate(
        name="Foundation Building",
        difficulty=Difficulty.BEGINNER,
        estimated_time="2-3 days",
        goal="Build fundamental understanding",
    )),
    (Severity.HIGH, PhaseTemplate(
        name="Core Concepts",
        difficulty=Difficulty.INTERMEDIATE,
        estimated_time="1 week",
        goal="Master core concepts",
    )),
    (Severity.MEDIUM, PhaseTemplate(
        name="Skill Refinement",
        difficulty=Difficulty.INTERMEDIATE,
        estimated_time="1-2 weeks",
        goal="Refine understanding",
    )),
)

MASTERY_PHASE = PhaseTemplate(
    name="Advanced Mastery",
    difficulty=Difficulty.ADVANCED,
    estimated_time="2-4 weeks",
    goal="Achieve expert-level knowledge",
)


@dataclass(frozen=True)
class PathConfig:
    """Learning path options."""

    order_topics_by_weight: bool = False


def difficulty_weight(difficulty: Difficulty | str | None) -> int:
    """Weight of a difficulty (unknown difficulties count as intermediate)."""
    try:
        return DIFFICULTY_WEIGHTS[Difficulty(difficulty)]
    except ValueError:
        return DEFAULT_DIFFICULTY_WEIGHT


def weigh_gaps(gaps: Iterable[KnowledgeGap]) -> list[GapPriority]:
    """
    Score gaps by difficulty weight × severity multiplier.

    Highest weight first; equal weights keep their input order.
    """
    weighted = [
        GapPriority(gap=gap, weight=difficulty_weight(gap.common_difficulty) * gap.severity.multiplier)
        for gap in gaps
    ]
    weighted.sort(key=lambda item: item.weight, reverse=True)
    return weighted


class PathGenerator:
    """Build a phased learning path from gaps and strengths."""

    def __init__(self, config: PathConfig | None = None):
        self.config = config or PathConfig()

    def generate(
        self,
        knowledge_gaps: Sequence[KnowledgeGap],
        strength_areas: Sequence[str],
        channel_id: str | None = None,
    ) -> list[LearningPathPhase]:
        """
        Generate the recommended path.

        Args:
            knowledge_gaps: Gaps sorted by severity
            strength_areas: Topics at or above the strength threshold
            channel_id: Optional scope, logged only

        Returns:
            Phases in urgency order, numbered consecutively from 1
        """
        if channel_id:
            logger.debug(f"Focusing on channel: {channel_id}")

        weighted = weigh_gaps(knowledge_gaps)
        logger.debug(f"Weighted {len(weighted)} gaps by difficulty")

        ordered_gaps = (
            [item.gap for item in weighted]
            if self.config.order_topics_by_weight
            else list(knowledge_gaps)
        )

        path: list[LearningPathPhase] = []

        for severity, template in GAP_PHASES:
            topics = tuple(gap.topic for gap in ordered_gaps if gap.severity == severity)
            if topics:
                path.append(self._build_phase(len(path) + 1, template, topics))

        if strength_areas:
            path.append(self._build_phase(len(path) + 1, MASTERY_PHASE, tuple(strength_areas)))

        logger.info(f"Generated {len(path)}-phase learning path")
        for phase in path:
            logger.debug(
                f"  Phase {phase.phase_number}: {phase.name} ({len(phase.focus_topics)} topics)"
            )

        return path

    @staticmethod
    def _build_phase(
        number: int, template: PhaseTemplate, topics: tuple[str, ...]
    ) -> LearningPathPhase:
        return LearningPathPhase(
            phase_number=number,
            name=template.name,
            focus_topics=topics,
            difficulty=template.difficulty,
            estimated_time=template.estimated_time,
            goal=template.goal,
        )
