"""
Core Module - Shared domain models and interfaces.

Components:
- models: Canonical records passed between pipeline stages
- errors: Pipeline error taxonomy
- clock: Injectable clock and client-compatible rounding
"""

from prep_engine.core.clock import Clock, fixed_clock, round_half_up, system_clock
from prep_engine.core.errors import InputValidationError, PipelineError, StageComputationError
from prep_engine.core.models import (
    AnsweredQuestion,
    Difficulty,
    DueReview,
    GapPriority,
    KnowledgeGap,
    LearningPathPhase,
    PipelineInput,
    PipelineStatus,
    PipelineSummary,
    QuestionCriteria,
    ScheduleStats,
    Severity,
    SRSRecord,
    TopicStats,
)

__all__ = [
    # Models
    "AnsweredQuestion",
    "Difficulty",
    "DueReview",
    "GapPriority",
    "KnowledgeGap",
    "LearningPathPhase",
    "PipelineInput",
    "PipelineStatus",
    "PipelineSummary",
    "QuestionCriteria",
    "ScheduleStats",
    "Severity",
    "SRSRecord",
    "TopicStats",
    # Errors
    "PipelineError",
    "InputValidationError",
    "StageComputationError",
    # Clock
    "Clock",
    "system_clock",
    "fixed_clock",
    "round_half_up",
]
