"""
Adaptive Learning Pipeline Runner.

Threads one PipelineState through a fixed, linear sequence of stages:

    analyze -> gaps -> path -> srs -> prioritize -> (finalize)

Each stage returns a partial update merged into the state before the next
one runs. Any failure ends the run: partial progress is discarded and the
caller receives a failed PipelineResult carrying the caller's own SRS
schedule, unchanged. Exceptions never cross run().

Example:
    runner = PipelineRunner(clock=fixed_clock(1_700_000_000_000))
    result = runner.run(pipeline_input)
    if result.success:
        store.save_schedule(user_id, result.updated_srs_schedule)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from loguru import logger

from prep_engine.adaptive.gap_analyzer import GapAnalyzer
from prep_engine.adaptive.path_generator import PathGenerator
from prep_engine.adaptive.prioritizer import Prioritizer
from prep_engine.config import Settings, get_settings
from prep_engine.core.clock import Clock, round_half_up, system_clock
from prep_engine.core.errors import InputValidationError, PipelineError, StageComputationError
from prep_engine.core.models import (
    AnsweredQuestion,
    Difficulty,
    DueReview,
    KnowledgeGap,
    LearningPathPhase,
    PipelineInput,
    PipelineStatus,
    PipelineSummary,
    QuestionCriteria,
    SRSRecord,
    TopicStats,
)
from prep_engine.delivery.scheduler import SRSConfig, SRSScheduler
from prep_engine.pipeline.schemas import parse_pipeline_input, parse_schedule
from prep_engine.pipeline.state import PipelineState, Stage, merge_update
from prep_engine.study.mastery_estimator import (
    MasteryEstimator,
    average_time_ms,
    has_enough_data,
    overall_accuracy,
)

# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class PipelineResult:
    """Output snapshot of one run."""

    status: PipelineStatus
    user_id: str = ""
    mastery: dict[str, int] = field(default_factory=dict)
    topic_stats: dict[str, TopicStats] = field(default_factory=dict)
    strength_areas: tuple[str, ...] = ()
    weakness_areas: tuple[str, ...] = ()
    knowledge_gaps: tuple[KnowledgeGap, ...] = ()
    recommended_path: tuple[LearningPathPhase, ...] = ()
    updated_srs_schedule: dict[str, SRSRecord] = field(default_factory=dict)
    due_for_review: tuple[DueReview, ...] = ()
    review_queue: tuple[DueReview, ...] = ()
    next_question_criteria: tuple[QuestionCriteria, ...] = ()
    summary: PipelineSummary = field(default_factory=PipelineSummary)
    error: str | None = None
    error_type: str | None = None
    failed_stage: str | None = None

    @property
    def success(self) -> bool:
        return self.status == PipelineStatus.COMPLETED

    @classmethod
    def from_state(cls, state: PipelineState) -> PipelineResult:
        return cls(
            status=PipelineStatus.COMPLETED,
            user_id=state.user_id,
            mastery=dict(state.mastery),
            topic_stats=dict(state.topic_stats),
            strength_areas=state.strength_areas,
            weakness_areas=state.weakness_areas,
            knowledge_gaps=state.knowledge_gaps,
            recommended_path=state.recommended_path,
            updated_srs_schedule=dict(state.srs_schedule),
            due_for_review=state.due_for_review,
            review_queue=state.review_queue,
            next_question_criteria=state.next_question_criteria,
            summary=state.summary or PipelineSummary(),
        )

    @classmethod
    def failure(
        cls,
        user_id: str,
        existing_srs_schedule: Mapping[str, SRSRecord],
        error: PipelineError,
    ) -> PipelineResult:
        return cls(
            status=PipelineStatus.FAILED,
            user_id=user_id if isinstance(user_id, str) else "",
            updated_srs_schedule=(
                dict(existing_srs_schedule) if isinstance(existing_srs_schedule, Mapping) else {}
            ),
            error=str(error),
            error_type=type(error).__name__,
            failed_stage=getattr(error, "stage", None),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the client's camelCase JSON shape."""
        data: dict[str, Any] = {
            "status": self.status.value,
            "success": self.success,
            "userId": self.user_id,
            "mastery": dict(self.mastery),
            "topicStats": {tag: stats.to_dict() for tag, stats in self.topic_stats.items()},
            "strengthAreas": list(self.strength_areas),
            "weaknessAreas": list(self.weakness_areas),
            "knowledgeGaps": [gap.to_dict() for gap in self.knowledge_gaps],
            "recommendedPath": [phase.to_dict() for phase in self.recommended_path],
            "updatedSrsSchedule": {
                question_id: record.to_dict()
                for question_id, record in self.updated_srs_schedule.items()
            },
            "dueForReview": [item.to_dict() for item in self.due_for_review],
            "reviewQueue": [item.to_dict() for item in self.review_queue],
            "nextQuestionCriteria": [c.to_dict() for c in self.next_question_criteria],
            "summary": self.summary.to_dict(),
        }
        if self.error is not None:
            data["error"] = self.error
            data["errorType"] = self.error_type
            data["failedStage"] = self.failed_stage
        return data


# =============================================================================
# Input Validation
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_question(source: str, index: int, question: Any, errors: list[str]) -> None:
    if not isinstance(question, AnsweredQuestion):
        errors.append(f"{source}.{index}: expected AnsweredQuestion, got {type(question).__name__}")
        return
    if not isinstance(question.question_id, str) or not question.question_id:
        errors.append(f"{source}.{index}.question_id: must be a non-empty string")
    if not isinstance(question.tags, (tuple, list)):
        errors.append(f"{source}.{index}.tags: must be a sequence of strings")
    if not isinstance(question.difficulty, Difficulty):
        errors.append(f"{source}.{index}.difficulty: unknown value {question.difficulty!r}")


def _check_record(question_id: str, record: Any, config: SRSConfig, errors: list[str]) -> None:
    prefix = f"existing_srs_schedule.{question_id}"
    if not isinstance(record, SRSRecord):
        errors.append(f"{prefix}: expected SRSRecord, got {type(record).__name__}")
        return

    if not isinstance(record.level, int) or isinstance(record.level, bool):
        errors.append(f"{prefix}.level: must be an integer, got {record.level!r}")
    elif not 0 <= record.level <= config.max_level:
        errors.append(f"{prefix}.level: {record.level} outside 0..{config.max_level}")

    if not _is_number(record.ease_factor):
        errors.append(f"{prefix}.ease_factor: must be a number, got {record.ease_factor!r}")
    elif not config.minimum_ease <= record.ease_factor <= config.maximum_ease:
        errors.append(
            f"{prefix}.ease_factor: {record.ease_factor} "
            f"outside {config.minimum_ease}..{config.maximum_ease}"
        )

    if not _is_number(record.interval_hours) or record.interval_hours <= 0:
        errors.append(f"{prefix}.interval_hours: must be positive")
    if not _is_number(record.next_review_at_ms):
        errors.append(f"{prefix}.next_review_at_ms: must be epoch milliseconds")


def validate_input(pipeline_input: PipelineInput, scheduler: SRSScheduler) -> None:
    """
    Fail fast on malformed input before any stage runs.

    Checks container types as well as values, so a hand-built
    PipelineInput with missing collections is rejected here instead of
    failing inside a stage.

    Raises:
        InputValidationError: With one message per problem found
    """
    errors: list[str] = []

    if not isinstance(pipeline_input, PipelineInput):
        raise InputValidationError(
            f"Invalid pipeline input: expected PipelineInput, got {type(pipeline_input).__name__}",
            errors=["<root>: expected PipelineInput"],
        )

    if not isinstance(pipeline_input.user_id, str) or not pipeline_input.user_id.strip():
        errors.append("user_id: must be a non-empty string")

    if pipeline_input.channel_id is not None and not isinstance(pipeline_input.channel_id, str):
        errors.append("channel_id: must be a string or None")

    for source in ("answered_questions", "incorrect_answers"):
        questions = getattr(pipeline_input, source)
        if not isinstance(questions, (tuple, list)):
            errors.append(f"{source}: must be a sequence, got {type(questions).__name__}")
            continue
        for index, question in enumerate(questions):
            _check_question(source, index, question, errors)

    if not isinstance(pipeline_input.correct_ids, (set, frozenset, tuple, list)):
        errors.append(
            f"correct_ids: must be a collection, got {type(pipeline_input.correct_ids).__name__}"
        )

    time_spent = pipeline_input.time_spent_by_question
    if not isinstance(time_spent, Mapping):
        errors.append(f"time_spent_by_question: must be a mapping, got {type(time_spent).__name__}")
    else:
        for question_id, spent in time_spent.items():
            if not _is_number(spent) or spent < 0:
                errors.append(f"time_spent_by_question.{question_id}: must be a non-negative number")

    schedule = pipeline_input.existing_srs_schedule
    if not isinstance(schedule, Mapping):
        errors.append(f"existing_srs_schedule: must be a mapping, got {type(schedule).__name__}")
    else:
        for question_id, record in schedule.items():
            _check_record(question_id, record, scheduler.config, errors)

    if errors:
        raise InputValidationError(f"Invalid pipeline input: {'; '.join(errors)}", errors=errors)


# =============================================================================
# Stages
# =============================================================================


def build_default_stages(settings: Settings) -> tuple[Stage, ...]:
    """
    Wire the five analysis stages from settings.

    Component instances are created once here; the stage functions only
    read the state they are given.
    """
    estimator = MasteryEstimator(settings.get_mastery_config())
    analyzer = GapAnalyzer(settings.get_mastery_config())
    path_generator = PathGenerator(settings.get_path_config())
    scheduler = SRSScheduler(settings.get_srs_config())
    prioritizer = Prioritizer(settings.get_prioritizer_config())

    def analyze_performance(state: PipelineState) -> dict[str, Any]:
        avg_time = average_time_ms(state.time_spent_by_question)
        logger.debug(f"Avg time per question: {avg_time}ms")
        report = estimator.estimate(state.answered_questions, state.correct_ids)
        return {
            "mastery": report.mastery,
            "topic_stats": report.topic_stats,
            "strength_areas": report.strength_areas,
            "weakness_areas": report.weakness_areas,
            "avg_time_per_question_ms": avg_time,
        }

    def identify_gaps(state: PipelineState) -> dict[str, Any]:
        gaps = analyzer.analyze(state.weakness_areas, state.incorrect_answers, state.mastery)
        return {"knowledge_gaps": tuple(gaps)}

    def generate_path(state: PipelineState) -> dict[str, Any]:
        path = path_generator.generate(
            state.knowledge_gaps, state.strength_areas, channel_id=state.channel_id
        )
        return {"recommended_path": tuple(path)}

    def calculate_srs(state: PipelineState) -> dict[str, Any]:
        schedule = scheduler.update_schedule(
            state.existing_srs_schedule,
            state.answered_questions,
            state.correct_ids,
            state.now_ms,
        )
        return {
            "srs_schedule": schedule,
            "due_for_review": tuple(scheduler.due_reviews(schedule, state.now_ms)),
            "schedule_stats": scheduler.schedule_stats(schedule, state.now_ms),
        }

    def prioritize(state: PipelineState) -> dict[str, Any]:
        recommendation = prioritizer.prioritize(
            state.due_for_review, state.recommended_path, state.knowledge_gaps
        )
        return {
            "review_queue": recommendation.review_queue,
            "next_question_criteria": recommendation.next_question_criteria,
        }

    return (
        Stage(
            "analyze",
            analyze_performance,
            frozenset({
                "mastery",
                "topic_stats",
                "strength_areas",
                "weakness_areas",
                "avg_time_per_question_ms",
            }),
        ),
        Stage("gaps", identify_gaps, frozenset({"knowledge_gaps"})),
        Stage("path", generate_path, frozenset({"recommended_path"})),
        Stage(
            "srs",
            calculate_srs,
            frozenset({"srs_schedule", "due_for_review", "schedule_stats"}),
        ),
        Stage("prioritize", prioritize, frozenset({"review_queue", "next_question_criteria"})),
    )


def summarize(state: PipelineState, min_answers_for_analysis: int = 5) -> PipelineSummary:
    """
    Readiness score (mean mastery) plus counts for the dashboard.

    Args:
        state: State after the prioritize stage
        min_answers_for_analysis: Answers a UI should collect before
            presenting the learning path (reported as has_enough_data)
    """
    values = list(state.mastery.values())
    readiness = round_half_up(sum(values) / len(values)) if values else 0

    return PipelineSummary(
        readiness_score=readiness,
        strength_count=len(state.strength_areas),
        weakness_count=len(state.weakness_areas),
        gap_count=len(state.knowledge_gaps),
        review_due=len(state.review_queue),
        path_phases=len(state.recommended_path),
        total_answers=len(state.answered_questions),
        overall_accuracy=overall_accuracy(state.answered_questions, state.correct_ids),
        topics_analyzed=len(state.mastery),
        avg_time_per_question_ms=state.avg_time_per_question_ms,
        scheduled_reviews=state.schedule_stats.total,
        mastered_reviews=state.schedule_stats.mastered,
        has_enough_data=has_enough_data(state.answered_questions, min_answers_for_analysis),
    )


# =============================================================================
# Runner
# =============================================================================


class PipelineRunner:
    """
    Runs the adaptive learning pipeline.

    Stateless between runs: every run builds its own PipelineState, so one
    runner may serve many users (and threads) at once.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Clock | None = None,
        stages: Sequence[Stage] | None = None,
    ):
        """
        Initialize runner.

        Args:
            settings: Thresholds and caps (cached settings if None)
            clock: Source of "now" in epoch ms (wall clock if None)
            stages: Stage sequence override (default analysis stages if None)
        """
        self.settings = settings or get_settings()
        self.clock = clock or system_clock
        self.stages = tuple(stages) if stages is not None else build_default_stages(self.settings)
        self._scheduler = SRSScheduler(self.settings.get_srs_config())

    def run(self, pipeline_input: PipelineInput) -> PipelineResult:
        """
        Execute one all-or-nothing run.

        Args:
            pipeline_input: The user's answer snapshot and prior schedule

        Returns:
            PipelineResult; status is failed (with error details) if input
            validation or any stage fails
        """
        user_id = getattr(pipeline_input, "user_id", "")
        existing = getattr(pipeline_input, "existing_srs_schedule", None)

        try:
            state = self._prepare(pipeline_input)
        except InputValidationError as e:
            logger.error(f"Rejected pipeline input: {e}")
            return PipelineResult.failure(user_id, existing, e)

        try:
            for stage in self.stages:
                state = self._run_stage(stage, state)
            state = self._finalize(state)
        except StageComputationError as e:
            logger.error(f"Pipeline failed at stage '{e.stage}': {e}")
            return PipelineResult.failure(user_id, existing, e)

        logger.info(
            f"Pipeline completed: readiness={state.summary.readiness_score}%, "
            f"{state.summary.gap_count} gaps, {state.summary.path_phases} phases, "
            f"{state.summary.review_due} reviews due"
        )
        return PipelineResult.from_state(state)

    def run_payload(self, payload: Mapping[str, Any]) -> PipelineResult:
        """
        Validate a JSON-shaped payload and run it.

        Invalid payloads produce a failed result rather than an exception.
        The failed result still carries the payload's existing schedule
        when that part of the payload is valid on its own; otherwise its
        updated_srs_schedule is empty.
        """
        try:
            pipeline_input = parse_pipeline_input(payload)
        except InputValidationError as e:
            logger.error(f"Rejected pipeline payload: {e}")
            if not isinstance(payload, Mapping):
                return PipelineResult.failure("", {}, e)
            user_id = payload.get("userId") or payload.get("user_id") or ""
            return PipelineResult.failure(str(user_id), salvage_schedule(payload), e)
        return self.run(pipeline_input)

    def _prepare(self, pipeline_input: PipelineInput) -> PipelineState:
        """Validate the input and build the initial state; every failure is an input error."""
        validate_input(pipeline_input, self._scheduler)

        logger.info(
            f"Adaptive learning run for user={pipeline_input.user_id} "
            f"channel={pipeline_input.channel_id or 'all'} "
            f"answers={len(pipeline_input.answered_questions)}"
        )

        try:
            return PipelineState.initial(pipeline_input, now_ms=self.clock())
        except Exception as e:
            raise InputValidationError(
                f"Invalid pipeline input: {type(e).__name__}: {e}",
                errors=[f"<root>: {e}"],
            ) from e

    def _run_stage(self, stage: Stage, state: PipelineState) -> PipelineState:
        logger.debug(f"[{stage.name.upper()}] running")
        try:
            update = stage.fn(state)
        except Exception as e:
            raise StageComputationError(stage.name, f"{type(e).__name__}: {e}") from e
        return merge_update(state, stage, update)

    def _finalize(self, state: PipelineState) -> PipelineState:
        try:
            summary = summarize(state, self.settings.min_answers_for_analysis)
        except Exception as e:
            raise StageComputationError("finalize", f"{type(e).__name__}: {e}") from e
        return merge_update(
            state,
            Stage("finalize", lambda s: {}, frozenset({"summary", "status"})),
            {"summary": summary, "status": PipelineStatus.COMPLETED},
        )


def salvage_schedule(payload: Mapping[str, Any]) -> dict[str, SRSRecord]:
    """
    Parse only the existing schedule out of a payload that failed validation.

    Returns an empty map when the schedule itself is missing or malformed.
    """
    raw = payload.get("existingSrsSchedule", payload.get("existing_srs_schedule"))
    if not isinstance(raw, Mapping):
        return {}
    try:
        return parse_schedule(raw)
    except InputValidationError as e:
        logger.warning(f"Existing schedule is also invalid, returning none: {e}")
        return {}


def run_pipeline(
    pipeline_input: PipelineInput | Mapping[str, Any],
    clock: Clock | None = None,
    settings: Settings | None = None,
) -> PipelineResult:
    """Convenience entry point: run once with a fresh runner."""
    runner = PipelineRunner(settings=settings, clock=clock)
    if isinstance(pipeline_input, PipelineInput):
        return runner.run(pipeline_input)
    return runner.run_payload(pipeline_input)
