"""
Sensor polling module.

Provides the query predictor and the scheduler that drives polling.
"""
from .predictor import MIN_RESOLUTION, QueryPredictor
from .scheduler import PollingScheduler, PollStats

__all__ = [
    "MIN_RESOLUTION",
    "QueryPredictor",
    "PollingScheduler",
    "PollStats",
]
