"""Data models for the workout tracker."""

from .enums import ExerciseCategory, MuscleGroup, WeightUnit
from .entities import (
    DEFAULT_REST_TIME,
    Exercise,
    SetConfiguration,
    TemplateExercise,
    Workout,
    WorkoutExercise,
    WorkoutSet,
    WorkoutTemplate,
    decode_set_configurations,
    encode_set_configurations,
)
from .events import Change, ChangeEvent, ChangeKind
from .statistics import (
    ExercisePerformance,
    ExerciseProgress,
    ExerciseSession,
    ExerciseStatistics,
    ExerciseTrend,
    FrequentExercise,
    SetRecord,
    WorkoutStatistics,
)

__all__ = [
    # Enums
    "ExerciseCategory",
    "MuscleGroup",
    "WeightUnit",
    # Entities
    "DEFAULT_REST_TIME",
    "Exercise",
    "SetConfiguration",
    "TemplateExercise",
    "Workout",
    "WorkoutExercise",
    "WorkoutSet",
    "WorkoutTemplate",
    "decode_set_configurations",
    "encode_set_configurations",
    # Events
    "Change",
    "ChangeEvent",
    "ChangeKind",
    # Statistics
    "ExercisePerformance",
    "ExerciseProgress",
    "ExerciseSession",
    "ExerciseStatistics",
    "ExerciseTrend",
    "FrequentExercise",
    "SetRecord",
    "WorkoutStatistics",
]
