"""Services built on top of the repositories."""

from .duplication_service import WorkoutDuplicationService
from .session import SessionState, WorkoutSession
from .statistics_service import StatisticsService, TimeRange, calculate_trend

__all__ = [
    "WorkoutDuplicationService",
    "SessionState",
    "WorkoutSession",
    "StatisticsService",
    "TimeRange",
    "calculate_trend",
]
