"""
Adaptive Learning Engine.

Components:
- GapAnalyzer: Ranks under-mastered topics by severity
- PathGenerator: Orders gaps and strengths into learning phases
- Prioritizer: Chooses what to practice next
"""
from prep_engine.adaptive.gap_analyzer import GapAnalyzer
from prep_engine.adaptive.path_generator import (
    DIFFICULTY_WEIGHTS,
    PathConfig,
    PathGenerator,
    difficulty_weight,
    weigh_gaps,
)
from prep_engine.adaptive.prioritizer import Prioritizer, PrioritizerConfig, Recommendation

__all__ = [
    "GapAnalyzer",
    "PathGenerator",
    "PathConfig",
    "Prioritizer",
    "PrioritizerConfig",
    "Recommendation",
    "DIFFICULTY_WEIGHTS",
    "difficulty_weight",
    "weigh_gaps",
]
