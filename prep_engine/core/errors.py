"""
Pipeline error taxonomy.

Every failure is terminal for the run. The runner converts these into a
failed PipelineResult; they never escape the public run() boundary.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for scheduling pipeline failures."""

    pass


class InputValidationError(PipelineError):
    """Raised when the run input is malformed or missing required fields."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class StageComputationError(PipelineError):
    """Raised when a stage throws or breaks the state-merge contract."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"Stage '{stage}' failed: {message}")
        self.stage = stage
