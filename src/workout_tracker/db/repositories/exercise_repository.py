"""Repository for the exercise library."""

import logging
from typing import Iterable, List, Optional, Union

from ...exceptions import ExerciseNotFoundError, ReferentialError
from ...models.entities import Exercise
from ...models.enums import ExerciseCategory, MuscleGroup
from ...models.events import Change, ChangeKind
from ...utils.validation import require_exercise_name
from .base import Repository

logger = logging.getLogger(__name__)


SAMPLE_EXERCISES = [
    ("Bench Press", ExerciseCategory.CHEST, [MuscleGroup.PECTORAL_MAJOR, MuscleGroup.TRICEPS_BRACHII]),
    ("Squat", ExerciseCategory.LEGS, [MuscleGroup.QUADRICEPS, MuscleGroup.GLUTES]),
    ("Deadlift", ExerciseCategory.BACK, [MuscleGroup.ERECTOR_SPINAE, MuscleGroup.HAMSTRINGS]),
    ("Pull-up", ExerciseCategory.BACK, [MuscleGroup.LATISSIMUS_DORSI, MuscleGroup.BICEPS_BRACHII]),
]


def _by_name(exercise: Exercise) -> str:
    return exercise.name.lower()


class ExerciseRepository(Repository[Exercise]):
    """Create, list, search and delete exercise definitions."""

    entity_type = Exercise
    not_found_error = ExerciseNotFoundError

    def create(
        self,
        name: str,
        category: Union[ExerciseCategory, str] = ExerciseCategory.OTHER,
        muscle_groups: Optional[Iterable[Union[MuscleGroup, str]]] = None,
        notes: Optional[str] = None,
    ) -> Change:
        """
        Create and persist a new exercise.

        Args:
            name: Exercise name, 2 to 50 characters after trimming
            category: Exercise category
            muscle_groups: Worked muscle groups, duplicates dropped
            notes: Optional free-form notes

        Returns:
            Change carrying the new Exercise

        Raises:
            ValidationError: If the name is invalid
        """
        name = require_exercise_name(name)
        now = self.clock.now()
        exercise = Exercise(
            name=name,
            category=ExerciseCategory.parse(category),
            muscle_groups=list(muscle_groups or []),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        self.store.insert(exercise)
        logger.info(f"Created exercise '{exercise.name}' ({exercise.id})")
        return self._change(ChangeKind.CREATED, exercise)

    def fetch_all(self) -> List[Exercise]:
        """All exercises sorted by name, case-insensitive."""
        return self.store.query(Exercise, sort_key=_by_name)

    def get_by_category(self, category: Union[ExerciseCategory, str]) -> List[Exercise]:
        category = ExerciseCategory.parse(category)
        return self.store.query(
            Exercise,
            predicate=lambda e: e.category == category,
            sort_key=_by_name,
        )

    def search(self, query: Optional[str]) -> List[Exercise]:
        """
        Case-insensitive substring search over name, category and notes.

        An empty query returns every exercise.
        """
        needle = (query or "").strip().lower()
        if not needle:
            return self.fetch_all()

        def matches(exercise: Exercise) -> bool:
            return (
                needle in exercise.name.lower()
                or needle in exercise.category.value.lower()
                or (exercise.notes is not None and needle in exercise.notes.lower())
            )

        return self.store.query(Exercise, predicate=matches, sort_key=_by_name)

    def update(self, exercise: Exercise) -> Change:
        """Persist edits to an exercise and refresh its ``updated_at``."""
        with self._unchanged_on_failure(exercise):
            exercise.name = require_exercise_name(exercise.name)
            exercise.updated_at = self.clock.now()
            self.store.update(exercise)
        logger.info(f"Updated exercise '{exercise.name}' ({exercise.id})")
        return self._change(ChangeKind.UPDATED, exercise)

    def is_referenced(self, exercise: Exercise) -> bool:
        """Whether any workout or template still uses this exercise."""
        return self.store.count_references(exercise) > 0

    def delete(self, exercise: Exercise, cascade: bool = False) -> Change:
        """
        Delete an exercise.

        Args:
            exercise: The exercise to delete
            cascade: Also remove every workout entry (with its sets) and
                template entry using the exercise

        Raises:
            ReferentialError: If the exercise is in use and cascade is False
            ExerciseNotFoundError: If the exercise is not stored
        """
        with self.store.transaction():
            references = self.store.count_references(exercise)
            if references and not cascade:
                raise ReferentialError(
                    f"Exercise '{exercise.name}' is used by {references} workout or template entries",
                    resource_id=exercise.id,
                    reference_count=references,
                )
            if references:
                removed = self.store.delete_references(exercise)
                logger.info(f"Removed {removed} entries referencing exercise {exercise.id}")
            if not self.store.delete(exercise):
                raise ExerciseNotFoundError(exercise.id)

        logger.info(f"Deleted exercise '{exercise.name}' ({exercise.id})")
        return self._change(ChangeKind.DELETED, exercise)

    def seed_sample_exercises(self) -> List[Change]:
        """Insert the sample exercise library if no exercises exist yet."""
        if self.count() > 0:
            logger.debug("Exercise library not empty; skipping sample data")
            return []
        with self.store.transaction():
            changes = [
                self.create(name, category, groups)
                for name, category, groups in SAMPLE_EXERCISES
            ]
        logger.info(f"Seeded {len(changes)} sample exercises")
        return changes
