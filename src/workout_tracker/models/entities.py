"""Workout data model: exercises, workouts, sets and templates.

All weights on these entities are kilograms. Conversion to the user's display
unit happens in ``workout_tracker.utils.units`` at the input/output boundary.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from ..exceptions import MalformedDataError, ValidationError
from .enums import ExerciseCategory, MuscleGroup

logger = logging.getLogger(__name__)

DEFAULT_REST_TIME = 90


def new_id() -> str:
    """Generate a new entity identifier."""
    return str(uuid.uuid4())


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Exercise:
    """A named movement definition."""
    name: str
    category: ExerciseCategory = ExerciseCategory.OTHER
    muscle_groups: List[MuscleGroup] = field(default_factory=list)
    notes: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not isinstance(self.category, ExerciseCategory):
            self.category = ExerciseCategory.parse(self.category)
        # Ordered, without duplicates
        groups: List[MuscleGroup] = []
        for group in self.muscle_groups:
            try:
                group = MuscleGroup(group)
            except ValueError as e:
                raise ValidationError(
                    f"Invalid muscle group: {group!r}",
                    field="muscle_groups",
                    reason="unknown_value",
                ) from e
            if group not in groups:
                groups.append(group)
        self.muscle_groups = groups

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "muscle_groups": [g.value for g in self.muscle_groups],
            "notes": self.notes,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }


@dataclass
class WorkoutSet:
    """One set of an exercise within a workout."""
    set_number: int
    weight: float = 0.0  # kilograms
    reps: int = 0
    rest_time: int = DEFAULT_REST_TIME  # seconds
    completed: bool = False
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def volume(self) -> float:
        return self.weight * self.reps

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "set_number": self.set_number,
            "weight": self.weight,
            "reps": self.reps,
            "rest_time": self.rest_time,
            "completed": self.completed,
            "created_at": _isoformat(self.created_at),
        }


@dataclass
class WorkoutExercise:
    """An exercise performed within a workout, owning its sets."""
    exercise: Exercise
    order: int = 0
    sets: List[WorkoutSet] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @property
    def ordered_sets(self) -> List[WorkoutSet]:
        """Sets ordered by set number, regardless of insertion order."""
        return sorted(self.sets, key=lambda s: s.set_number)

    @property
    def completed_sets(self) -> List[WorkoutSet]:
        return [s for s in self.ordered_sets if s.completed]

    @property
    def completed_sets_count(self) -> int:
        return len(self.completed_sets)

    @property
    def total_volume(self) -> float:
        """Volume over every set, completed or not."""
        return sum(s.volume for s in self.sets)

    def next_set_number(self) -> int:
        return max((s.set_number for s in self.sets), default=0) + 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "exercise": self.exercise.to_dict(),
            "order": self.order,
            "sets": [s.to_dict() for s in self.ordered_sets],
        }


@dataclass
class Workout:
    """
    A single training session.

    Derived totals (sets, volume) count every set; completion state only
    affects ``completed_sets``, ``progress`` and ``is_completed``.
    """
    name: str
    date: Optional[datetime] = None
    notes: Optional[str] = None
    duration: int = 0  # seconds
    workout_exercises: List[WorkoutExercise] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def ordered_exercises(self) -> List[WorkoutExercise]:
        """Workout exercises ordered by their explicit order index."""
        return sorted(self.workout_exercises, key=lambda we: we.order)

    @property
    def total_sets(self) -> int:
        return sum(len(we.sets) for we in self.workout_exercises)

    @property
    def completed_sets(self) -> int:
        return sum(we.completed_sets_count for we in self.workout_exercises)

    @property
    def progress(self) -> float:
        total = self.total_sets
        if total == 0:
            return 0.0
        return self.completed_sets / total

    @property
    def is_completed(self) -> bool:
        total = self.total_sets
        return total > 0 and self.completed_sets == total

    @property
    def total_volume(self) -> float:
        return sum(we.total_volume for we in self.workout_exercises)

    @property
    def formatted_duration(self) -> str:
        """Duration as H:MM:SS, or M:SS under an hour."""
        hours, remainder = divmod(self.duration, 3600)
        minutes, seconds = divmod(remainder, 60)
        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    def next_exercise_order(self) -> int:
        return max((we.order for we in self.workout_exercises), default=-1) + 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "date": _isoformat(self.date),
            "notes": self.notes,
            "duration": self.duration,
            "workout_exercises": [we.to_dict() for we in self.ordered_exercises],
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
            "total_sets": self.total_sets,
            "completed_sets": self.completed_sets,
            "total_volume": self.total_volume,
        }


# =============================================================================
# Templates
# =============================================================================

@dataclass
class SetConfiguration:
    """Target configuration for one set in a template.

    Serialized as ``{"setNumber", "weight", "reps", "restTime"}``; that key
    layout is shared with templates already stored on disk.
    """
    set_number: int
    weight: float = 0.0  # kilograms
    reps: int = 0
    rest_time: int = DEFAULT_REST_TIME

    def to_dict(self) -> dict:
        return {
            "setNumber": self.set_number,
            "weight": self.weight,
            "reps": self.reps,
            "restTime": self.rest_time,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SetConfiguration":
        """Strict decoding; raises MalformedDataError on a missing or bad field."""
        if not isinstance(data, dict):
            raise MalformedDataError(f"Set configuration must be an object, got {type(data).__name__}")
        try:
            return cls(
                set_number=_require_int(data, "setNumber"),
                weight=_require_number(data, "weight"),
                reps=_require_int(data, "reps"),
                rest_time=_require_int(data, "restTime"),
            )
        except (KeyError, TypeError) as e:
            raise MalformedDataError(f"Invalid set configuration: {e}", raw_value=repr(data)) from e

    @classmethod
    def from_dict_with_defaults(cls, data: Any, position: int) -> "SetConfiguration":
        """Lenient decoding: any missing or unusable field gets its default.

        Defaults are weight 0, reps 0, rest time 90 and, for the set number,
        the 1-based position of the entry in its list.
        """
        if not isinstance(data, dict):
            logger.warning(f"Set configuration #{position} is not an object; using defaults")
            return cls(set_number=position)
        try:
            return cls.from_dict(data)
        except MalformedDataError:
            return cls._fill_defaults(data, position)

    @classmethod
    def _fill_defaults(cls, data: dict, position: int) -> "SetConfiguration":
        values = {}
        for key, attr, reader, default in (
            ("setNumber", "set_number", _require_int, position),
            ("weight", "weight", _require_number, 0.0),
            ("reps", "reps", _require_int, 0),
            ("restTime", "rest_time", _require_int, DEFAULT_REST_TIME),
        ):
            try:
                values[attr] = reader(data, key)
            except (KeyError, TypeError):
                logger.warning(
                    f"Set configuration #{position} has missing or invalid '{key}'; "
                    f"defaulting to {default}"
                )
                values[attr] = default
        return cls(**values)


def _require_int(data: dict, key: str) -> int:
    value = data[key]
    if isinstance(value, bool):
        raise TypeError(f"'{key}' must be an integer")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise TypeError(f"'{key}' must be an integer")
    return value


def _require_number(data: dict, key: str) -> float:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"'{key}' must be a number")
    return float(value)


def encode_set_configurations(configurations: List[SetConfiguration]) -> str:
    """Serialize set configurations to their stored JSON form."""
    return json.dumps([c.to_dict() for c in configurations])


def decode_set_configurations(raw: Optional[str]) -> List[SetConfiguration]:
    """Deserialize stored set configurations, filling defaults per entry.

    An empty or unreadable payload yields an empty list rather than an error.
    """
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Unreadable set configuration payload: {e}")
        return []
    if not isinstance(data, list):
        logger.warning("Set configuration payload is not a list; ignoring it")
        return []
    return [
        SetConfiguration.from_dict_with_defaults(entry, position)
        for position, entry in enumerate(data, start=1)
    ]


@dataclass
class TemplateExercise:
    """An exercise in a template together with its target sets."""
    exercise: Exercise
    order: int = 0
    set_configurations: List[SetConfiguration] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @property
    def sets_configuration(self) -> str:
        """Stored JSON form of the set configurations."""
        return encode_set_configurations(self.set_configurations)


@dataclass
class WorkoutTemplate:
    """A reusable workout blueprint, independent of date and completion."""
    name: str
    notes: Optional[str] = None
    template_exercises: List[TemplateExercise] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def ordered_exercises(self) -> List[TemplateExercise]:
        return sorted(self.template_exercises, key=lambda te: te.order)

    @property
    def total_sets(self) -> int:
        return sum(len(te.set_configurations) for te in self.template_exercises)
