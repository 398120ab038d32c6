"""
Gap Analyzer.

Classifies under-mastered topics into severity tiers using mastery and
the user's recent error pattern.

Severity tiers:
- critical: mastery < 30
- high:     mastery < 50
- medium:   anything weaker than the weakness threshold but above "high"

With the default weakness threshold (50) every weak topic is below the
high cutoff, so no medium gap is produced. Raising the weakness threshold
(e.g. to 70) opens the 50-70 band as medium.
"""
from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping

from loguru import logger

from prep_engine.core.models import AnsweredQuestion, Difficulty, KnowledgeGap, Severity
from prep_engine.study.mastery_estimator import MasteryConfig

# Error count above which practice volume is the main recommendation
HEAVY_ERROR_COUNT = 5


class GapAnalyzer:
    """
    Detect knowledge gaps from weak topics and incorrect answers.

    Produces one gap per weak topic, sorted by severity (most urgent first).
    """

    def __init__(self, config: MasteryConfig | None = None):
        self.config = config or MasteryConfig()

    def classify_severity(self, mastery: int) -> Severity:
        """Map a mastery score to a severity tier."""
        if mastery < self.config.critical_threshold:
            return Severity.CRITICAL
        if mastery < self.config.high_threshold:
            return Severity.HIGH
        return Severity.MEDIUM

    @staticmethod
    def recommend(mastery: int, error_count: int) -> str:
        """
        Pick the study recommendation for a gap.

        Args:
            mastery: Topic mastery (0-100)
            error_count: Incorrect answers tagged with the topic

        Returns:
            Fixed recommendation text
        """
        if mastery < 20:
            return "Start with fundamentals"
        if mastery < 40:
            return "Review core concepts"
        if error_count > HEAVY_ERROR_COUNT:
            return "Practice more examples"
        return "Focus on advanced topics"

    @staticmethod
    def collect_error_patterns(
        incorrect_answers: Iterable[AnsweredQuestion],
    ) -> dict[str, list[Difficulty]]:
        """Difficulties of the incorrect answers per tag, in answer order."""
        patterns: dict[str, list[Difficulty]] = {}
        for question in incorrect_answers:
            for tag in question.tags:
                patterns.setdefault(tag, []).append(question.difficulty)
        return patterns

    @staticmethod
    def most_common_difficulty(difficulties: list[Difficulty]) -> Difficulty:
        """
        Most frequent difficulty; ties go to the first one seen.

        Defaults to intermediate when there are no errors.
        """
        if not difficulties:
            return Difficulty.INTERMEDIATE
        # most_common() is a stable sort, so insertion order breaks ties
        return Counter(difficulties).most_common(1)[0][0]

    def analyze(
        self,
        weakness_areas: Iterable[str],
        incorrect_answers: Iterable[AnsweredQuestion],
        mastery: Mapping[str, int],
    ) -> list[KnowledgeGap]:
        """
        Build the ranked gap list.

        Args:
            weakness_areas: Topics below the weakness threshold
            incorrect_answers: Answers the user got wrong
            mastery: Topic mastery map from the estimator

        Returns:
            KnowledgeGap list sorted critical -> high -> medium
        """
        patterns = self.collect_error_patterns(incorrect_answers)

        gaps = []
        for topic in weakness_areas:
            errors = patterns.get(topic, [])
            score = mastery.get(topic, 0)
            gaps.append(KnowledgeGap(
                topic=topic,
                severity=self.classify_severity(score),
                error_count=len(errors),
                common_difficulty=self.most_common_difficulty(errors),
                recommendation=self.recommend(score, len(errors)),
                mastery=score,
            ))

        gaps.sort(key=lambda gap: gap.severity.rank)

        logger.info(f"Found {len(gaps)} knowledge gaps")
        for gap in gaps[:3]:
            logger.debug(f"  {gap.topic}: {gap.severity.value} ({gap.recommendation})")

        return gaps
