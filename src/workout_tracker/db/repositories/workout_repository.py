"""Repository for workouts and the exercises and sets inside them.

Workouts are persisted as aggregates: every edit to a workout exercise or set
writes the owning workout back through the store in one transaction.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Union

from ...exceptions import NotFoundError, ValidationError, WorkoutNotFoundError
from ...models.entities import Exercise, Workout, WorkoutExercise, WorkoutSet
from ...models.enums import WeightUnit
from ...models.events import Change, ChangeKind
from ...utils.units import to_storage
from ...utils.validation import (
    require,
    require_workout_name,
    validate_reps,
    validate_rest_time,
    validate_weight,
)
from .base import Repository

logger = logging.getLogger(__name__)


def start_of_day(day: Union[date, datetime]) -> datetime:
    """Midnight at the start of ``day``."""
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day, time.min)


def _newest_first(workout: Workout):
    # Dated workouts sort before undated ones when reversed
    return (workout.date is not None, workout.date or datetime.min)


def _find(items, item_id: str):
    for item in items:
        if item.id == item_id:
            return item
    return None


class WorkoutRepository(Repository[Workout]):
    """Create, list and edit workouts, including their exercises and sets."""

    entity_type = Workout
    not_found_error = WorkoutNotFoundError

    def create(
        self,
        name: str,
        date: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> Change:
        """
        Create and persist a new, empty workout.

        Args:
            name: Workout name, non-empty and at most 50 characters
            date: When the workout takes place; defaults to now
            notes: Optional free-form notes

        Returns:
            Change carrying the new Workout

        Raises:
            ValidationError: If the name is invalid
        """
        name = require_workout_name(name)
        now = self.clock.now()
        workout = Workout(
            name=name,
            date=date or now,
            notes=notes,
            duration=0,
            created_at=now,
            updated_at=now,
        )
        self.store.insert(workout)
        logger.info(f"Created workout '{workout.name}' ({workout.id})")
        return self._change(ChangeKind.CREATED, workout)

    def fetch_all(self) -> List[Workout]:
        """All workouts, newest first; undated workouts last."""
        return self.store.query(Workout, sort_key=_newest_first, descending=True)

    def fetch_in_range(self, start: datetime, end: datetime) -> List[Workout]:
        """Dated workouts with ``start <= date < end``, oldest first."""
        return self.store.query(
            Workout,
            predicate=lambda w: w.date is not None and start <= w.date < end,
            sort_key=lambda w: w.date,
        )

    def fetch_for_day(self, day: Union[date, datetime]) -> List[Workout]:
        """Workouts on the calendar day containing ``day``, oldest first."""
        start = start_of_day(day)
        return self.fetch_in_range(start, start + timedelta(days=1))

    def fetch_today(self) -> List[Workout]:
        return self.fetch_for_day(self.clock.now())

    def workouts_by_day(self, start: datetime, end: datetime) -> Dict[date, List[Workout]]:
        """Group workouts in ``[start, end)`` by calendar day."""
        grouped: Dict[date, List[Workout]] = {}
        for workout in self.fetch_in_range(start, end):
            grouped.setdefault(workout.date.date(), []).append(workout)
        return grouped

    def update(self, workout: Workout) -> Change:
        """Persist edits to a workout and refresh its ``updated_at``.

        If the write fails, ``name`` and ``updated_at`` are left as they were.
        """
        with self._unchanged_on_failure(workout):
            workout.name = require_workout_name(workout.name)
            if workout.duration < 0:
                raise ValidationError(
                    "Invalid duration: out_of_range",
                    field="duration",
                    reason="out_of_range",
                )
            workout.updated_at = self.clock.now()
            self.store.update(workout)
        logger.debug(f"Updated workout {workout.id}")
        return self._change(ChangeKind.UPDATED, workout)

    def delete(self, workout: Workout) -> Change:
        """Delete a workout together with its exercises and sets."""
        if not self.store.delete(workout):
            raise WorkoutNotFoundError(workout.id)
        logger.info(f"Deleted workout '{workout.name}' ({workout.id})")
        return self._change(ChangeKind.DELETED, workout)

    def start(self, workout: Workout) -> Change:
        """Mark a workout as starting now."""
        with self._unchanged_on_failure(workout):
            workout.date = self.clock.now()
            change = self.update(workout)
        logger.info(f"Starting workout '{workout.name}' ({workout.id})")
        return change

    def end(self, workout: Workout, duration: int) -> Change:
        """
        Finish a workout and record how long it took.

        Args:
            workout: The workout being finished
            duration: Elapsed time in whole seconds
        """
        with self._unchanged_on_failure(workout):
            workout.duration = int(duration)
            change = self.update(workout)
        logger.info(
            f"Finished workout '{workout.name}' after {workout.formatted_duration} "
            f"({workout.completed_sets}/{workout.total_sets} sets)"
        )
        return change

    # ------------------------------------------------------------------
    # Exercises and sets within a workout
    #
    # Each edit is applied to the caller's workout and then written back.
    # A failed write restores the workout graph to its previous state.
    # ------------------------------------------------------------------

    def _owned_exercise(self, workout: Workout, workout_exercise: WorkoutExercise) -> WorkoutExercise:
        owned = _find(workout.workout_exercises, workout_exercise.id)
        if owned is None:
            raise NotFoundError("Workout Exercise", workout_exercise.id)
        return owned

    def _owner_of(self, workout: Workout, workout_set: WorkoutSet) -> WorkoutExercise:
        for workout_exercise in workout.workout_exercises:
            if _find(workout_exercise.sets, workout_set.id) is not None:
                return workout_exercise
        raise NotFoundError("Workout Set", workout_set.id)

    def add_exercise(self, workout: Workout, exercise: Exercise) -> Change:
        """Append an exercise to a workout after the existing ones."""
        workout_exercise = WorkoutExercise(
            exercise=exercise,
            order=workout.next_exercise_order(),
        )
        with self._unchanged_on_failure(workout):
            workout.workout_exercises.append(workout_exercise)
            self.update(workout)
        logger.debug(f"Added exercise '{exercise.name}' to workout {workout.id}")
        return self._change(ChangeKind.CREATED, workout_exercise)

    def remove_exercise(self, workout: Workout, workout_exercise: WorkoutExercise) -> Change:
        """Remove an exercise (and its sets), keeping order indices contiguous."""
        owned = self._owned_exercise(workout, workout_exercise)
        with self._unchanged_on_failure(workout, *workout.workout_exercises):
            workout.workout_exercises = [
                we for we in workout.workout_exercises if we.id != owned.id
            ]
            for index, remaining in enumerate(workout.ordered_exercises):
                remaining.order = index
            self.update(workout)
        return self._change(ChangeKind.DELETED, owned)

    def add_set(self, workout: Workout, workout_exercise: WorkoutExercise) -> Change:
        """Append an empty set using the default rest time."""
        owned = self._owned_exercise(workout, workout_exercise)
        workout_set = WorkoutSet(
            set_number=owned.next_set_number(),
            rest_time=self.preferences.default_rest_time,
            created_at=self.clock.now(),
        )
        with self._unchanged_on_failure(workout, owned):
            owned.sets.append(workout_set)
            self.update(workout)
        return self._change(ChangeKind.CREATED, workout_set)

    def update_set(
        self,
        workout: Workout,
        workout_set: WorkoutSet,
        weight: Optional[float] = None,
        reps: Optional[int] = None,
        completed: Optional[bool] = None,
        rest_time: Optional[int] = None,
        unit: Optional[WeightUnit] = None,
    ) -> Change:
        """
        Edit a set. Omitted fields are left unchanged.

        Args:
            workout: The workout owning the set
            workout_set: The set to edit
            weight: New weight in ``unit`` (the user's unit by default)
            reps: New repetition count
            completed: New completion flag
            rest_time: New rest time in seconds
            unit: Unit ``weight`` is expressed in

        Raises:
            ValidationError: If a value is out of range; nothing is changed
        """
        owner = self._owner_of(workout, workout_set)
        owned = _find(owner.sets, workout_set.id)

        if weight is not None:
            require(validate_weight(weight), weight)
            weight = to_storage(weight, unit or self.preferences.weight_unit)
        if reps is not None:
            require(validate_reps(reps), reps)
        if rest_time is not None:
            require(validate_rest_time(rest_time), rest_time)

        with self._unchanged_on_failure(workout, owned):
            if weight is not None:
                owned.weight = weight
            if reps is not None:
                owned.reps = reps
            if rest_time is not None:
                owned.rest_time = rest_time
            if completed is not None:
                owned.completed = completed
            self.update(workout)
        return self._change(ChangeKind.UPDATED, owned)

    def remove_set(self, workout: Workout, workout_set: WorkoutSet) -> Change:
        """Remove a set and renumber the remaining ones from 1."""
        owner = self._owner_of(workout, workout_set)
        removed = _find(owner.sets, workout_set.id)
        with self._unchanged_on_failure(workout, owner, *owner.sets):
            owner.sets = [s for s in owner.ordered_sets if s.id != removed.id]
            for number, remaining in enumerate(owner.sets, start=1):
                remaining.set_number = number
            self.update(workout)
        return self._change(ChangeKind.DELETED, removed)
