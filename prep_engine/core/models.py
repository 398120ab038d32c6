"""
Core Domain Models.

Canonical records shared by every pipeline stage.

Design:
- Enums are str-valued so they serialize directly to JSON
- Input records (AnsweredQuestion, SRSRecord) are frozen; stages build new
  records instead of mutating the caller's snapshot
- Every result type renders itself with to_dict() using camelCase keys,
  the shape the web client consumes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Difficulty(str, Enum):
    """Question difficulty as tagged in the question bank."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Severity(str, Enum):
    """Knowledge gap severity tier, most urgent first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"

    @property
    def rank(self) -> int:
        """Sort rank (0 = most urgent)."""
        return {
            Severity.CRITICAL: 0,
            Severity.HIGH: 1,
            Severity.MEDIUM: 2,
        }[self]

    @property
    def multiplier(self) -> int:
        """Weight applied when scoring gap priority."""
        return {
            Severity.CRITICAL: 3,
            Severity.HIGH: 2,
            Severity.MEDIUM: 1,
        }[self]


class PipelineStatus(str, Enum):
    """Lifecycle of a pipeline run."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


# ============================================================================
# Input Records
# ============================================================================


@dataclass(frozen=True)
class AnsweredQuestion:
    """A single answer from the user's history."""

    question_id: str
    tags: tuple[str, ...] = ()
    correct: bool = False
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    time_spent_ms: float = 0


@dataclass(frozen=True)
class SRSRecord:
    """
    Spaced repetition state for one question.

    The only record that outlives a run: callers load it before the
    pipeline and persist the updated copy afterwards.
    """

    question_id: str
    level: int = 0
    ease_factor: float = 2.5
    interval_hours: int = 4
    next_review_at_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "questionId": self.question_id,
            "level": self.level,
            "easeFactor": self.ease_factor,
            "intervalHours": self.interval_hours,
            "nextReviewAtEpochMs": self.next_review_at_ms,
        }


# ============================================================================
# Stage Outputs
# ============================================================================


@dataclass(frozen=True)
class TopicStats:
    """Raw per-tag aggregation behind a mastery score."""

    topic: str
    attempts: int = 0
    correct: int = 0
    accuracy: int = 0  # Undamped, 0-100
    mastery: int = 0  # Confidence-weighted, 0-100

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "attempts": self.attempts,
            "correct": self.correct,
            "accuracy": self.accuracy,
            "mastery": self.mastery,
        }


@dataclass(frozen=True)
class KnowledgeGap:
    """An under-mastered topic with its error pattern."""

    topic: str
    severity: Severity
    error_count: int
    common_difficulty: Difficulty
    recommendation: str
    mastery: int = 0

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "severity": self.severity.value,
            "errorCount": self.error_count,
            "commonDifficulty": self.common_difficulty.value,
            "recommendation": self.recommendation,
            "mastery": self.mastery,
        }


@dataclass(frozen=True)
class GapPriority:
    """Knowledge gap paired with its weighted priority."""

    gap: KnowledgeGap
    weight: int


@dataclass(frozen=True)
class LearningPathPhase:
    """One block of the recommended learning path."""

    phase_number: int
    name: str
    focus_topics: tuple[str, ...]
    difficulty: Difficulty
    estimated_time: str
    goal: str

    def to_dict(self) -> dict:
        return {
            "phaseNumber": self.phase_number,
            "name": self.name,
            "focusTopics": list(self.focus_topics),
            "difficulty": self.difficulty.value,
            "estimatedTime": self.estimated_time,
            "goal": self.goal,
        }


@dataclass(frozen=True)
class DueReview:
    """A scheduled question whose review time has passed."""

    question_id: str
    level: int
    overdue_days: int

    def to_dict(self) -> dict:
        return {
            "questionId": self.question_id,
            "level": self.level,
            "overdueDays": self.overdue_days,
        }


@dataclass(frozen=True)
class QuestionCriteria:
    """
    Selection criteria for the question bank.

    The pipeline never resolves criteria into question ids; that is the
    question bank's job.
    """

    tags: tuple[str, ...]
    difficulty: Difficulty
    exclude_already_answered: bool
    count: int
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "tags": list(self.tags),
            "difficulty": self.difficulty.value,
            "excludeAlreadyAnswered": self.exclude_already_answered,
            "count": self.count,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ScheduleStats:
    """Counts over an SRS schedule at a point in time."""

    total: int = 0
    due: int = 0
    mastered: int = 0


@dataclass(frozen=True)
class PipelineSummary:
    """Compact health report of a completed run."""

    readiness_score: int = 0
    strength_count: int = 0
    weakness_count: int = 0
    gap_count: int = 0
    review_due: int = 0
    path_phases: int = 0
    # Diagnostics
    total_answers: int = 0
    overall_accuracy: int = 0
    topics_analyzed: int = 0
    avg_time_per_question_ms: int = 0
    scheduled_reviews: int = 0
    mastered_reviews: int = 0
    has_enough_data: bool = False

    def to_dict(self) -> dict:
        return {
            "readinessScore": self.readiness_score,
            "strengthCount": self.strength_count,
            "weaknessCount": self.weakness_count,
            "gapCount": self.gap_count,
            "reviewDue": self.review_due,
            "pathPhases": self.path_phases,
            "totalAnswers": self.total_answers,
            "overallAccuracy": self.overall_accuracy,
            "topicsAnalyzed": self.topics_analyzed,
            "avgTimePerQuestionMs": self.avg_time_per_question_ms,
            "scheduledReviews": self.scheduled_reviews,
            "masteredReviews": self.mastered_reviews,
            "hasEnoughData": self.has_enough_data,
        }


# ============================================================================
# Run Input
# ============================================================================


@dataclass(frozen=True)
class PipelineInput:
    """Everything a single run needs; a read-only snapshot."""

    user_id: str
    answered_questions: tuple[AnsweredQuestion, ...] = ()
    correct_ids: frozenset[str] = frozenset()
    incorrect_answers: tuple[AnsweredQuestion, ...] = ()
    time_spent_by_question: dict[str, float] = field(default_factory=dict)
    existing_srs_schedule: dict[str, SRSRecord] = field(default_factory=dict)
    channel_id: str | None = None
