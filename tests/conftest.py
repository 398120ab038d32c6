"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from prep_engine.config import Settings  # noqa: E402
from prep_engine.core.clock import MS_PER_DAY, MS_PER_HOUR  # noqa: E402
from prep_engine.core.models import AnsweredQuestion, Difficulty, PipelineInput, SRSRecord  # noqa: E402

# 2024-01-01T00:00:00Z
NOW_MS = 1_704_067_200_000


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def make_question(
    question_id: str,
    *tags: str,
    correct: bool = False,
    difficulty: Difficulty = Difficulty.INTERMEDIATE,
    time_spent_ms: int = 0,
) -> AnsweredQuestion:
    """Build an AnsweredQuestion with terse syntax."""
    return AnsweredQuestion(
        question_id=question_id,
        tags=tuple(tags),
        correct=correct,
        difficulty=difficulty,
        time_spent_ms=time_spent_ms,
    )


def make_input(
    answers: list[AnsweredQuestion],
    existing: dict[str, SRSRecord] | None = None,
    user_id: str = "user-1",
    channel_id: str | None = None,
) -> PipelineInput:
    """Build a PipelineInput, splitting correct/incorrect from each answer's flag."""
    return PipelineInput(
        user_id=user_id,
        channel_id=channel_id,
        answered_questions=tuple(answers),
        correct_ids=frozenset(q.question_id for q in answers if q.correct),
        incorrect_answers=tuple(q for q in answers if not q.correct),
        time_spent_by_question={q.question_id: q.time_spent_ms for q in answers},
        existing_srs_schedule=dict(existing or {}),
    )


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now_ms():
    """Fixed 'now' for deterministic scheduling."""
    return NOW_MS


@pytest.fixture(name="make_question")
def make_question_fixture():
    """Factory for AnsweredQuestion records."""
    return make_question


@pytest.fixture(name="make_input")
def make_input_fixture():
    """Factory for PipelineInput snapshots."""
    return make_input


@pytest.fixture
def settings():
    """Default settings, isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def sample_input():
    """
    A mixed history across three topics.

    graphs:  12 answers, 9 correct  -> mastery 75 (strength)
    dp:      10 answers, 2 correct  -> mastery 20 (critical gap)
    trees:   10 answers, 4 correct  -> mastery 40 (high gap)
    """
    answers = []
    for i in range(12):
        answers.append(make_question(f"g{i}", "graphs", correct=i < 9, time_spent_ms=30_000))
    for i in range(10):
        answers.append(make_question(
            f"d{i}",
            "dp",
            correct=i < 2,
            difficulty=Difficulty.ADVANCED if i % 2 else Difficulty.INTERMEDIATE,
            time_spent_ms=60_000,
        ))
    for i in range(10):
        answers.append(make_question(
            f"t{i}", "trees", correct=i < 4, difficulty=Difficulty.BEGINNER, time_spent_ms=45_000
        ))

    existing = {
        "old-1": SRSRecord(
            question_id="old-1",
            level=3,
            ease_factor=2.5,
            interval_hours=420,
            next_review_at_ms=NOW_MS - 3 * MS_PER_DAY,
        ),
        "old-2": SRSRecord(
            question_id="old-2",
            level=1,
            ease_factor=2.2,
            interval_hours=53,
            next_review_at_ms=NOW_MS - 10 * MS_PER_HOUR,
        ),
        "future-1": SRSRecord(
            question_id="future-1",
            level=5,
            ease_factor=2.8,
            interval_hours=2016,
            next_review_at_ms=NOW_MS + 5 * MS_PER_DAY,
        ),
    }
    return make_input(answers, existing=existing, channel_id="algorithms")
