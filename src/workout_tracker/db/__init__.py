"""Persistence layer for the workout tracker."""

from .base import WorkoutStore
from .repositories import (
    ExerciseRepository,
    Repository,
    TemplateRepository,
    WorkoutRepository,
)
from .sqlite_store import SQLiteWorkoutStore

__all__ = [
    "WorkoutStore",
    "SQLiteWorkoutStore",
    "Repository",
    "ExerciseRepository",
    "TemplateRepository",
    "WorkoutRepository",
]
