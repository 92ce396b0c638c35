"""Workout duplication and template instantiation.

Every operation builds the full new aggregate in memory and writes it in a
single store transaction, so a failure leaves nothing behind.
"""

import logging
from datetime import datetime
from typing import Optional

from ..clock import Clock, SystemClock
from ..db.base import WorkoutStore
from ..models.entities import (
    SetConfiguration,
    TemplateExercise,
    Workout,
    WorkoutExercise,
    WorkoutSet,
    WorkoutTemplate,
)
from ..models.events import Change, ChangeEvent, ChangeKind
from ..utils.validation import NAME_MAX_LENGTH, require_template_name, require_workout_name

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (Copy)"


def copy_name(name: str) -> str:
    """Name for a duplicated workout, kept within the name length limit."""
    base = name.strip()[:NAME_MAX_LENGTH - len(COPY_SUFFIX)].rstrip()
    return f"{base}{COPY_SUFFIX}"


class WorkoutDuplicationService:
    """Copies workouts and converts between workouts and templates."""

    def __init__(self, store: WorkoutStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or SystemClock()

    def _created(self, entity) -> Change:
        event = ChangeEvent(
            kind=ChangeKind.CREATED,
            entity_type=type(entity).__name__,
            entity_id=entity.id,
            occurred_at=self.clock.now(),
        )
        return Change(entity, event)

    def duplicate_workout(
        self,
        source: Workout,
        to_date: datetime,
        new_name: Optional[str] = None,
    ) -> Change:
        """
        Copy a workout to a new date with every set marked not completed.

        Args:
            source: Workout to copy
            to_date: Date of the new workout
            new_name: Name of the copy; defaults to "<source name> (Copy)"

        Returns:
            Change carrying the new Workout

        Raises:
            ValidationError: If ``new_name`` is invalid
            StorageError: If the copy cannot be written; nothing is persisted
        """
        name = require_workout_name(new_name) if new_name is not None else copy_name(source.name)
        now = self.clock.now()

        workout = Workout(
            name=name,
            date=to_date,
            notes=source.notes,
            duration=0,
            created_at=now,
            updated_at=now,
        )
        for workout_exercise in source.ordered_exercises:
            workout.workout_exercises.append(WorkoutExercise(
                exercise=workout_exercise.exercise,
                order=workout_exercise.order,
                sets=[
                    WorkoutSet(
                        set_number=s.set_number,
                        weight=s.weight,
                        reps=s.reps,
                        rest_time=s.rest_time,
                        completed=False,
                        created_at=now,
                    )
                    for s in workout_exercise.ordered_sets
                ],
            ))

        with self.store.transaction():
            self.store.insert(workout)

        logger.info(
            f"Duplicated workout {source.id} as '{workout.name}' ({workout.id}) "
            f"for {to_date.date().isoformat()}"
        )
        return self._created(workout)

    def create_template(self, from_workout: Workout, template_name: str) -> Change:
        """
        Capture a workout's structure as a reusable template.

        Every set becomes a set configuration, completed or not.
        """
        name = require_template_name(template_name)
        now = self.clock.now()

        template = WorkoutTemplate(
            name=name,
            notes=from_workout.notes,
            created_at=now,
            updated_at=now,
        )
        for order, workout_exercise in enumerate(from_workout.ordered_exercises):
            template.template_exercises.append(TemplateExercise(
                exercise=workout_exercise.exercise,
                order=order,
                set_configurations=[
                    SetConfiguration(
                        set_number=s.set_number,
                        weight=s.weight,
                        reps=s.reps,
                        rest_time=s.rest_time,
                    )
                    for s in workout_exercise.ordered_sets
                ],
            ))

        with self.store.transaction():
            self.store.insert(template)

        logger.info(
            f"Created template '{template.name}' ({template.id}) from workout {from_workout.id}"
        )
        return self._created(template)

    def create_workout(
        self,
        from_template: WorkoutTemplate,
        date: datetime,
        name: Optional[str] = None,
    ) -> Change:
        """
        Materialize a template into a new workout on ``date``.

        Set configurations that were unreadable when the template was loaded
        have already been replaced by defaults, so one bad entry never
        aborts the whole workout.
        """
        name = require_workout_name(name if name is not None else from_template.name)
        now = self.clock.now()

        workout = Workout(
            name=name,
            date=date,
            notes=from_template.notes,
            duration=0,
            created_at=now,
            updated_at=now,
        )
        for template_exercise in from_template.ordered_exercises:
            workout_exercise = WorkoutExercise(
                exercise=template_exercise.exercise,
                order=template_exercise.order,
            )
            used_numbers = set()
            for configuration in template_exercise.set_configurations:
                set_number = configuration.set_number
                if set_number in used_numbers:
                    set_number = max(used_numbers) + 1
                    logger.warning(
                        f"Duplicate set number {configuration.set_number} in template "
                        f"{from_template.id}; renumbered to {set_number}"
                    )
                used_numbers.add(set_number)
                workout_exercise.sets.append(WorkoutSet(
                    set_number=set_number,
                    weight=configuration.weight,
                    reps=configuration.reps,
                    rest_time=configuration.rest_time,
                    completed=False,
                    created_at=now,
                ))
            workout.workout_exercises.append(workout_exercise)

        with self.store.transaction():
            self.store.insert(workout)

        logger.info(
            f"Created workout '{workout.name}' ({workout.id}) from template {from_template.id}"
        )
        return self._created(workout)
