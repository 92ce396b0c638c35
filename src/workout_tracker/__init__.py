"""Workout tracker core: exercises, workouts, templates and statistics."""

__version__ = "0.1.0"

from .clock import Clock, FixedClock, SystemClock
from .config import Settings, UserPreferences, get_settings
from .db import (
    ExerciseRepository,
    SQLiteWorkoutStore,
    TemplateRepository,
    WorkoutRepository,
    WorkoutStore,
)
from .exceptions import (
    ErrorCode,
    MalformedDataError,
    NotFoundError,
    ReferentialError,
    SessionStateError,
    StorageError,
    ValidationError,
    WorkoutTrackerError,
)
from .services import (
    StatisticsService,
    TimeRange,
    WorkoutDuplicationService,
    WorkoutSession,
)

__all__ = [
    "__version__",
    "Clock",
    "FixedClock",
    "SystemClock",
    "Settings",
    "UserPreferences",
    "get_settings",
    "ExerciseRepository",
    "SQLiteWorkoutStore",
    "TemplateRepository",
    "WorkoutRepository",
    "WorkoutStore",
    "ErrorCode",
    "MalformedDataError",
    "NotFoundError",
    "ReferentialError",
    "SessionStateError",
    "StorageError",
    "ValidationError",
    "WorkoutTrackerError",
    "StatisticsService",
    "TimeRange",
    "WorkoutDuplicationService",
    "WorkoutSession",
]
