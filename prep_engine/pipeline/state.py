"""
Pipeline state and stage contract.

A single PipelineState is threaded through every stage. Each stage is a
pure function (state) -> partial update, and declares the fields it owns;
merge_update() rejects writes outside that set, so no stage can overwrite
an earlier stage's finalized output.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable

from prep_engine.core.errors import StageComputationError
from prep_engine.core.models import (
    AnsweredQuestion,
    DueReview,
    KnowledgeGap,
    LearningPathPhase,
    PipelineInput,
    PipelineStatus,
    PipelineSummary,
    QuestionCriteria,
    ScheduleStats,
    SRSRecord,
    TopicStats,
)


@dataclass(frozen=True)
class PipelineState:
    """Accumulating record for one run."""

    # Input snapshot
    user_id: str
    channel_id: str | None = None
    answered_questions: tuple[AnsweredQuestion, ...] = ()
    correct_ids: frozenset[str] = frozenset()
    incorrect_answers: tuple[AnsweredQuestion, ...] = ()
    time_spent_by_question: dict[str, float] = field(default_factory=dict)
    existing_srs_schedule: dict[str, SRSRecord] = field(default_factory=dict)
    now_ms: int = 0

    # analyze
    mastery: dict[str, int] = field(default_factory=dict)
    topic_stats: dict[str, TopicStats] = field(default_factory=dict)
    strength_areas: tuple[str, ...] = ()
    weakness_areas: tuple[str, ...] = ()
    avg_time_per_question_ms: int = 0

    # gaps
    knowledge_gaps: tuple[KnowledgeGap, ...] = ()

    # path
    recommended_path: tuple[LearningPathPhase, ...] = ()

    # srs
    srs_schedule: dict[str, SRSRecord] = field(default_factory=dict)
    due_for_review: tuple[DueReview, ...] = ()
    schedule_stats: ScheduleStats = field(default_factory=ScheduleStats)

    # prioritize
    review_queue: tuple[DueReview, ...] = ()
    next_question_criteria: tuple[QuestionCriteria, ...] = ()

    # finalize
    summary: PipelineSummary | None = None
    status: PipelineStatus = PipelineStatus.PENDING
    error_message: str | None = None

    @classmethod
    def initial(cls, pipeline_input: PipelineInput, now_ms: int) -> PipelineState:
        """Fresh state for a run; the SRS schedule starts as the caller's copy."""
        return cls(
            user_id=pipeline_input.user_id,
            channel_id=pipeline_input.channel_id,
            answered_questions=tuple(pipeline_input.answered_questions),
            correct_ids=frozenset(pipeline_input.correct_ids),
            incorrect_answers=tuple(pipeline_input.incorrect_answers),
            time_spent_by_question=dict(pipeline_input.time_spent_by_question),
            existing_srs_schedule=dict(pipeline_input.existing_srs_schedule),
            now_ms=now_ms,
            srs_schedule=dict(pipeline_input.existing_srs_schedule),
        )


STATE_FIELDS = frozenset(f.name for f in fields(PipelineState))

StageFn = Callable[[PipelineState], dict[str, Any]]


@dataclass(frozen=True)
class Stage:
    """A named pipeline step and the state fields it may write."""

    name: str
    fn: StageFn
    outputs: frozenset[str]

    def __post_init__(self):
        unknown = self.outputs - STATE_FIELDS
        if unknown:
            raise ValueError(f"Stage '{self.name}' declares unknown fields: {sorted(unknown)}")


def merge_update(state: PipelineState, stage: Stage, update: dict[str, Any]) -> PipelineState:
    """
    Merge a stage's partial update into the state.

    Raises:
        StageComputationError: If the update is not a dict or writes a field
            the stage does not own
    """
    if not isinstance(update, dict):
        raise StageComputationError(
            stage.name, f"expected a dict update, got {type(update).__name__}"
        )

    foreign = set(update) - stage.outputs
    if foreign:
        raise StageComputationError(
            stage.name, f"wrote fields it does not own: {sorted(foreign)}"
        )

    return replace(state, **update)
