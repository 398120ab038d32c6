"""
Configuration settings for the prep-engine scheduling pipeline.

Uses Pydantic Settings for environment variable management with .env file support.
Component thresholds are exposed as immutable config objects built from these
settings, so every pipeline run works from a frozen snapshot.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from prep_engine.adaptive.path_generator import PathConfig
from prep_engine.adaptive.prioritizer import PrioritizerConfig
from prep_engine.delivery.scheduler import SRSConfig
from prep_engine.study.mastery_estimator import MasteryConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Mastery Estimation
    # ========================================
    mastery_strength_threshold: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Mastery at or above this marks a topic as a strength",
    )
    mastery_weakness_threshold: int = Field(
        default=50,
        ge=0,
        le=100,
        description="Mastery below this marks a topic as a weakness (gap candidate)",
    )
    mastery_critical_threshold: int = Field(
        default=30,
        ge=0,
        le=100,
        description="Gap mastery below this is rated critical",
    )
    mastery_high_threshold: int = Field(
        default=50,
        ge=0,
        le=100,
        description="Gap mastery below this (and not critical) is rated high; above is medium",
    )
    mastery_confidence_attempts: int = Field(
        default=10,
        ge=1,
        description="Attempts needed before a topic's accuracy is trusted in full",
    )

    # ========================================
    # Spaced Repetition
    # ========================================
    srs_intervals_hours: list[int] = Field(
        default=[4, 24, 72, 168, 336, 720, 2160, 4320],
        description="Base review interval per level, in hours (last level = mastered)",
    )
    srs_initial_ease: float = Field(
        default=2.5,
        description="Ease factor for a question answered for the first time (SM-2 default)",
    )
    srs_min_ease: float = Field(default=1.3, description="Lower ease factor bound")
    srs_max_ease: float = Field(default=3.0, description="Upper ease factor bound")
    srs_ease_bonus: float = Field(default=0.1, description="Ease gained on a correct answer")
    srs_ease_penalty: float = Field(default=0.2, description="Ease lost on an incorrect answer")
    srs_lapse_levels: int = Field(
        default=2,
        ge=1,
        description="Levels dropped on an incorrect answer",
    )

    # ========================================
    # Learning Path & Prioritization
    # ========================================
    path_order_topics_by_weight: bool = Field(
        default=False,
        description="Order topics inside each gap phase by weighted priority",
    )
    review_queue_size: int = Field(default=5, ge=0, description="Due reviews surfaced per run")
    phase_question_count: int = Field(
        default=10,
        ge=1,
        description="Questions requested for the current learning phase",
    )
    gap_question_count: int = Field(
        default=5,
        ge=1,
        description="Questions requested per targeted knowledge gap",
    )
    top_gap_count: int = Field(default=3, ge=0, description="Knowledge gaps targeted per run")

    # ========================================
    # Caller Policy
    # ========================================
    min_answers_for_analysis: int = Field(
        default=5,
        ge=0,
        description="Answers a UI should collect before showing a learning path",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum log level for the CLI sink",
    )

    @field_validator("srs_intervals_hours")
    @classmethod
    def _intervals_positive(cls, value: list[int]) -> list[int]:
        if not value or any(hours <= 0 for hours in value):
            raise ValueError("srs_intervals_hours must be a non-empty list of positive hours")
        return value

    @model_validator(mode="after")
    def _bounds_ordered(self) -> Settings:
        if not self.srs_min_ease <= self.srs_initial_ease <= self.srs_max_ease:
            raise ValueError(
                "srs ease factors must satisfy srs_min_ease <= srs_initial_ease <= srs_max_ease "
                f"(got {self.srs_min_ease}, {self.srs_initial_ease}, {self.srs_max_ease})"
            )
        if self.mastery_critical_threshold > self.mastery_high_threshold:
            raise ValueError("mastery_critical_threshold must not exceed mastery_high_threshold")
        return self

    def get_mastery_config(self) -> MasteryConfig:
        """Get mastery/gap thresholds as an immutable config."""
        return MasteryConfig(
            strength_threshold=self.mastery_strength_threshold,
            weakness_threshold=self.mastery_weakness_threshold,
            critical_threshold=self.mastery_critical_threshold,
            high_threshold=self.mastery_high_threshold,
            confidence_attempts=self.mastery_confidence_attempts,
        )

    def get_srs_config(self) -> SRSConfig:
        """Get spaced repetition constants as an immutable config."""
        return SRSConfig(
            intervals_hours=tuple(self.srs_intervals_hours),
            initial_ease=self.srs_initial_ease,
            minimum_ease=self.srs_min_ease,
            maximum_ease=self.srs_max_ease,
            ease_bonus=self.srs_ease_bonus,
            ease_penalty=self.srs_ease_penalty,
            lapse_levels=self.srs_lapse_levels,
        )

    def get_path_config(self) -> PathConfig:
        """Get learning path options as an immutable config."""
        return PathConfig(order_topics_by_weight=self.path_order_topics_by_weight)

    def get_prioritizer_config(self) -> PrioritizerConfig:
        """Get prioritizer caps as an immutable config."""
        return PrioritizerConfig(
            review_limit=self.review_queue_size,
            phase_question_count=self.phase_question_count,
            gap_question_count=self.gap_question_count,
            top_gap_count=self.top_gap_count,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
