"""Repository implementations for the workout tracker entities.

Each repository wraps a ``WorkoutStore`` and adds validation, timestamps
and change events for one entity type.
"""

from .base import Repository
from .exercise_repository import ExerciseRepository
from .template_repository import TemplateRepository
from .workout_repository import WorkoutRepository

__all__ = [
    "Repository",
    "ExerciseRepository",
    "TemplateRepository",
    "WorkoutRepository",
]
