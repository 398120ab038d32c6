"""
Leveled Spaced Repetition Scheduler.

Implements:
- A level ladder (0-7) with a fixed base interval per level
- An SM-2 style ease factor that stretches or shrinks each interval
- Due-set computation ordered by neglect (most overdue first)

Level ladder (base interval):
0 - 4 hours
1 - 1 day
2 - 3 days
3 - 1 week
4 - 2 weeks
5 - 1 month
6 - 3 months
7 - 6 months (mastered, terminal)

A correct answer climbs one level; an incorrect answer drops two, so
forgetting costs more than remembering earns.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, Mapping

from loguru import logger

from prep_engine.core.clock import MS_PER_DAY, MS_PER_HOUR, round_half_up
from prep_engine.core.models import AnsweredQuestion, DueReview, ScheduleStats, SRSRecord

# =============================================================================
# Configuration
# =============================================================================

SRS_INTERVALS_HOURS = (4, 24, 72, 168, 336, 720, 2160, 4320)


@dataclass(frozen=True)
class SRSConfig:
    """Constants for the leveled SRS algorithm."""

    intervals_hours: tuple[int, ...] = SRS_INTERVALS_HOURS
    initial_ease: float = 2.5
    minimum_ease: float = 1.3
    maximum_ease: float = 3.0
    ease_bonus: float = 0.1
    ease_penalty: float = 0.2
    lapse_levels: int = 2

    @property
    def max_level(self) -> int:
        """Terminal (mastered) level."""
        return len(self.intervals_hours) - 1


# =============================================================================
# Scheduler
# =============================================================================


class SRSScheduler:
    """
    Per-question spaced repetition state machine.

    Each question carries:
    - Level: Position on the interval ladder (0 = new/relearning)
    - Ease Factor: Multiplier on the base interval (2.5 default, 1.3-3.0)
    - Interval: Hours until the next review
    - Next Review: Epoch ms at which the question becomes due
    """

    def __init__(self, config: SRSConfig | None = None):
        """
        Initialize scheduler.

        Args:
            config: Custom configuration (uses defaults if None)
        """
        self.config = config or SRSConfig()

    def new_record(self, question_id: str, now_ms: int) -> SRSRecord:
        """Default state for a question answered for the first time."""
        return SRSRecord(
            question_id=question_id,
            level=0,
            ease_factor=self.config.initial_ease,
            interval_hours=self.config.intervals_hours[0],
            next_review_at_ms=now_ms,
        )

    def transition(self, record: SRSRecord, is_correct: bool, now_ms: int) -> SRSRecord:
        """
        Apply one answer to a record.

        Args:
            record: Current state (left untouched)
            is_correct: Whether the latest answer was correct
            now_ms: Current time in epoch ms

        Returns:
            New SRSRecord with level, ease, interval and next review updated
        """
        if is_correct:
            level = min(self.config.max_level, record.level + 1)
            ease = min(self.config.maximum_ease, record.ease_factor + self.config.ease_bonus)
        else:
            level = max(0, record.level - self.config.lapse_levels)
            ease = max(self.config.minimum_ease, record.ease_factor - self.config.ease_penalty)

        # Keep ease on its 0.1 grid (2.5 - 0.2 must be 2.3, not 2.2999999999999998)
        ease = round(ease, 2)

        interval_hours = self.interval_for(level, ease)

        return replace(
            record,
            level=level,
            ease_factor=ease,
            interval_hours=interval_hours,
            next_review_at_ms=now_ms + interval_hours * MS_PER_HOUR,
        )

    def interval_for(self, level: int, ease_factor: float) -> int:
        """Hours until next review: base interval for the level × ease."""
        return max(1, round_half_up(self.config.intervals_hours[level] * ease_factor))

    def update_schedule(
        self,
        existing: Mapping[str, SRSRecord],
        answered_questions: Iterable[AnsweredQuestion],
        correct_ids: frozenset[str] | set[str],
        now_ms: int,
    ) -> dict[str, SRSRecord]:
        """
        Fold a batch of answers into a copy of the schedule.

        Questions answered more than once in the batch transition once per
        answer, in order. Records are never removed.

        Args:
            existing: Persisted schedule keyed by question id (not modified)
            answered_questions: Answers to apply
            correct_ids: Ids of questions answered correctly
            now_ms: Current time in epoch ms

        Returns:
            New schedule map
        """
        schedule = dict(existing)

        for question in answered_questions:
            question_id = question.question_id
            current = schedule.get(question_id) or self.new_record(question_id, now_ms)
            schedule[question_id] = self.transition(
                current, question_id in correct_ids, now_ms
            )

        logger.info(f"Updated SRS for {len(schedule)} questions")
        return schedule

    @staticmethod
    def overdue_days(record: SRSRecord, now_ms: int) -> int:
        """Whole days past the review time (0 when due within the last day)."""
        return math.floor((now_ms - record.next_review_at_ms) / MS_PER_DAY)

    def due_reviews(self, schedule: Mapping[str, SRSRecord], now_ms: int) -> list[DueReview]:
        """
        Questions whose review time has passed.

        Sorted by overdue days, most neglected first; equal days keep
        schedule order.
        """
        due = [
            DueReview(
                question_id=question_id,
                level=record.level,
                overdue_days=self.overdue_days(record, now_ms),
            )
            for question_id, record in schedule.items()
            if record.next_review_at_ms <= now_ms
        ]
        due.sort(key=lambda item: item.overdue_days, reverse=True)

        logger.info(f"{len(due)} questions due for review")
        return due

    def schedule_stats(self, schedule: Mapping[str, SRSRecord], now_ms: int) -> ScheduleStats:
        """Total, due and mastered counts for a schedule."""
        return ScheduleStats(
            total=len(schedule),
            due=sum(1 for r in schedule.values() if r.next_review_at_ms <= now_ms),
            mastered=sum(1 for r in schedule.values() if r.level >= self.config.max_level),
        )
