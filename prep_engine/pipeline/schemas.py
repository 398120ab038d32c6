"""
JSON boundary models for the scheduling pipeline.

Validates payloads from the web client (camelCase) or Python callers
(snake_case) and converts them into domain records.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    TypeAdapter,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from prep_engine.core.errors import InputValidationError
from prep_engine.core.models import AnsweredQuestion, Difficulty, PipelineInput, SRSRecord


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class AnsweredQuestionSchema(_CamelModel):
    """One answered question."""

    question_id: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    correct: bool = False
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    time_spent_ms: NonNegativeFloat = 0

    def to_domain(self) -> AnsweredQuestion:
        return AnsweredQuestion(
            question_id=self.question_id,
            tags=tuple(self.tags),
            correct=self.correct,
            difficulty=self.difficulty,
            time_spent_ms=self.time_spent_ms,
        )


class SRSRecordSchema(_CamelModel):
    """Persisted spaced repetition record."""

    question_id: str | None = None
    level: int = Field(default=0, ge=0)
    ease_factor: float = 2.5
    interval_hours: int = Field(default=4, gt=0)
    next_review_at_ms: int = Field(
        default=0,
        validation_alias=AliasChoices("nextReviewAtEpochMs", "nextReviewAtMs", "next_review_at_ms"),
    )

    def to_domain(self, question_id: str) -> SRSRecord:
        return SRSRecord(
            question_id=self.question_id or question_id,
            level=self.level,
            ease_factor=self.ease_factor,
            interval_hours=self.interval_hours,
            next_review_at_ms=self.next_review_at_ms,
        )


class PipelineInputSchema(_CamelModel):
    """Full run input; only channelId is optional."""

    user_id: str = Field(min_length=1)
    channel_id: str | None = None
    answered_questions: list[AnsweredQuestionSchema]
    correct_ids: list[str]
    incorrect_answers: list[AnsweredQuestionSchema]
    time_spent_by_question: dict[str, NonNegativeFloat]
    existing_srs_schedule: dict[str, SRSRecordSchema]

    def to_domain(self) -> PipelineInput:
        return PipelineInput(
            user_id=self.user_id,
            channel_id=self.channel_id or None,
            answered_questions=tuple(q.to_domain() for q in self.answered_questions),
            correct_ids=frozenset(self.correct_ids),
            incorrect_answers=tuple(q.to_domain() for q in self.incorrect_answers),
            time_spent_by_question=dict(self.time_spent_by_question),
            existing_srs_schedule={
                question_id: record.to_domain(question_id)
                for question_id, record in self.existing_srs_schedule.items()
            },
        )


_SCHEDULE_ADAPTER = TypeAdapter(dict[str, SRSRecordSchema])


def _format_errors(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
        for error in exc.errors()
    ]


def parse_pipeline_input(payload: Mapping[str, Any]) -> PipelineInput:
    """
    Validate a JSON-shaped payload and build the run input.

    Raises:
        InputValidationError: If required fields are missing or malformed
    """
    try:
        return PipelineInputSchema.model_validate(payload).to_domain()
    except ValidationError as exc:
        errors = _format_errors(exc)
        raise InputValidationError(
            f"Invalid pipeline input: {'; '.join(errors)}", errors=errors
        ) from exc


def parse_schedule(payload: Mapping[str, Any]) -> dict[str, SRSRecord]:
    """
    Validate a persisted schedule (records keyed by question id).

    Raises:
        InputValidationError: If any record is malformed
    """
    try:
        records = _SCHEDULE_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        errors = _format_errors(exc)
        raise InputValidationError(
            f"Invalid SRS schedule: {'; '.join(errors)}", errors=errors
        ) from exc
    return {question_id: record.to_domain(question_id) for question_id, record in records.items()}
