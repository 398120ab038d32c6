"""
Study Module.

Provides mastery estimation from answer history:
- Confidence-weighted topic mastery
- Strength / weakness classification
- Diagnostic answer statistics
"""

from prep_engine.study.mastery_estimator import (
    MasteryConfig,
    MasteryEstimator,
    MasteryReport,
    average_time_ms,
    has_enough_data,
    overall_accuracy,
)

__all__ = [
    "MasteryConfig",
    "MasteryEstimator",
    "MasteryReport",
    "average_time_ms",
    "has_enough_data",
    "overall_accuracy",
]
