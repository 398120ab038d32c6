"""
prep-engine: adaptive learning scheduling for interview preparation.

Turns a user's answer history into topic mastery, ranked knowledge gaps,
a phased learning path, a spaced repetition schedule and a "what to
practice next" list, in one synchronous, side-effect-free run.
"""

from prep_engine.pipeline.runner import PipelineResult, PipelineRunner, run_pipeline

__version__ = "1.0.0"

__all__ = [
    "PipelineResult",
    "PipelineRunner",
    "run_pipeline",
    "__version__",
]
