"""Statistics result models.

These are read-only aggregates produced by the statistics engine. They carry
exercise identifiers rather than entity references so they serialize cleanly.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import ExerciseCategory, WeightUnit


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


class _StatsModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class WorkoutStatistics(_StatsModel):
    """Totals over a set of workouts. Counts every set, completed or not."""

    total_workouts: int = Field(default=0, description="Number of workouts")
    total_volume: float = Field(default=0.0, description="Sum of workout volumes in kg")
    total_sets: int = Field(default=0, description="Sum of workout set counts")
    total_duration: int = Field(default=0, description="Sum of durations in seconds")
    average_duration: float = Field(default=0.0, description="Mean duration in seconds")


class ExerciseStatistics(_StatsModel):
    """Lifetime totals for one exercise over completed sets only."""

    exercise_id: str
    exercise_name: str
    total_sets: int = 0
    total_reps: int = 0
    total_volume: float = 0.0
    max_weight: float = Field(default=0.0, description="Heaviest completed set in kg")


class ExercisePerformance(_StatsModel):
    """Completed-set summary of one exercise within one dated workout."""

    workout_id: str
    date: datetime
    total_sets: int
    average_reps: float
    max_weight: float = Field(..., description="Heaviest completed set in kg")


class ExerciseTrend(_StatsModel):
    """Period-over-period change in how often an exercise was performed."""

    percentage_change: int = Field(..., description="Rounded percent change vs previous period")
    is_positive: bool
    current_count: int
    previous_count: int


class FrequentExercise(_StatsModel):
    """An exercise ranked by how often it appears in a time range."""

    exercise_id: str
    exercise_name: str
    category: ExerciseCategory
    times_performed: int
    last_performed: Optional[datetime] = None
    trend: Optional[ExerciseTrend] = None


class SetRecord(_StatsModel):
    """A completed set as shown in exercise progress, in the display unit."""

    set_number: int
    weight: float
    reps: int
    is_personal_record: bool = False

    @property
    def volume(self) -> float:
        return self.weight * self.reps


class ExerciseSession(_StatsModel):
    """One recent session of an exercise with its qualifying sets."""

    workout_id: str
    workout_name: str
    date: datetime
    sets: List[SetRecord] = Field(default_factory=list)

    @property
    def max_weight(self) -> float:
        return max((s.weight for s in self.sets), default=0.0)

    @property
    def total_volume(self) -> float:
        return sum(s.volume for s in self.sets)

    @property
    def has_personal_record(self) -> bool:
        return any(s.is_personal_record for s in self.sets)


class ExerciseProgress(_StatsModel):
    """Recent sessions of an exercise with personal records flagged."""

    exercise_id: str
    exercise_name: str
    weight_unit: WeightUnit = WeightUnit.KILOGRAMS
    all_time_max_weight: float = Field(default=0.0, description="All-time max completed weight in kg")
    sessions: List[ExerciseSession] = Field(default_factory=list)

    @property
    def latest_max_weight(self) -> float:
        return self.sessions[0].max_weight if self.sessions else 0.0

    @property
    def previous_max_weight(self) -> Optional[float]:
        if len(self.sessions) < 2:
            return None
        return self.sessions[1].max_weight

    @property
    def latest_total_volume(self) -> float:
        return self.sessions[0].total_volume if self.sessions else 0.0

    @property
    def previous_total_volume(self) -> Optional[float]:
        if len(self.sessions) < 2:
            return None
        return self.sessions[1].total_volume
