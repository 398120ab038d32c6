"""
Pipeline Orchestrator.

Runs the analysis stages in fixed order over a single accumulating state.
"""

from prep_engine.pipeline.runner import (
    PipelineResult,
    PipelineRunner,
    build_default_stages,
    run_pipeline,
    salvage_schedule,
    summarize,
    validate_input,
)
from prep_engine.pipeline.schemas import parse_pipeline_input, parse_schedule
from prep_engine.pipeline.state import PipelineState, Stage, merge_update

__all__ = [
    "PipelineResult",
    "PipelineRunner",
    "PipelineState",
    "Stage",
    "build_default_stages",
    "merge_update",
    "parse_pipeline_input",
    "parse_schedule",
    "run_pipeline",
    "salvage_schedule",
    "summarize",
    "validate_input",
]
