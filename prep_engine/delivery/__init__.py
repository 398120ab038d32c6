"""
Delivery: spaced repetition scheduling.
"""

from prep_engine.delivery.scheduler import SRS_INTERVALS_HOURS, SRSConfig, SRSScheduler

__all__ = ["SRSConfig", "SRSScheduler", "SRS_INTERVALS_HOURS"]
