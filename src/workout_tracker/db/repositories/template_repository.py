"""Repository for workout templates."""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from ...exceptions import TemplateNotFoundError
from ...models.entities import Exercise, SetConfiguration, TemplateExercise, WorkoutTemplate
from ...models.events import Change, ChangeKind
from ...utils.validation import (
    require,
    require_template_name,
    validate_reps,
    validate_rest_time,
    validate_weight,
)
from .base import Repository

logger = logging.getLogger(__name__)

TemplateEntry = Tuple[Exercise, Sequence[SetConfiguration]]


def _validate_configurations(configurations: Iterable[SetConfiguration]) -> None:
    for configuration in configurations:
        require(validate_weight(configuration.weight), configuration.weight)
        require(validate_reps(configuration.reps), configuration.reps)
        require(validate_rest_time(configuration.rest_time), configuration.rest_time)


def build_template_exercises(entries: Iterable[TemplateEntry]) -> List[TemplateExercise]:
    """Turn ``(exercise, configurations)`` pairs into ordered template exercises."""
    template_exercises = []
    for order, (exercise, configurations) in enumerate(entries):
        configurations = list(configurations)
        _validate_configurations(configurations)
        template_exercises.append(TemplateExercise(
            exercise=exercise,
            order=order,
            set_configurations=configurations,
        ))
    return template_exercises


class TemplateRepository(Repository[WorkoutTemplate]):
    """Create, list, edit and delete workout templates."""

    entity_type = WorkoutTemplate
    not_found_error = TemplateNotFoundError

    def create(
        self,
        name: str,
        notes: Optional[str] = None,
        exercises: Optional[Iterable[TemplateEntry]] = None,
    ) -> Change:
        """
        Create and persist a template.

        Args:
            name: Template name, non-empty and at most 50 characters
            notes: Optional notes copied into workouts made from the template
            exercises: ``(exercise, set configurations)`` pairs in order

        Returns:
            Change carrying the new WorkoutTemplate
        """
        name = require_template_name(name)
        now = self.clock.now()
        template = WorkoutTemplate(
            name=name,
            notes=notes,
            template_exercises=build_template_exercises(exercises or []),
            created_at=now,
            updated_at=now,
        )
        self.store.insert(template)
        logger.info(
            f"Created template '{template.name}' ({template.id}) "
            f"with {len(template.template_exercises)} exercises"
        )
        return self._change(ChangeKind.CREATED, template)

    def fetch_all(self) -> List[WorkoutTemplate]:
        """All templates sorted by name, case-insensitive."""
        return self.store.query(WorkoutTemplate, sort_key=lambda t: t.name.lower())

    def update(self, template: WorkoutTemplate) -> Change:
        """Persist edits to a template and refresh its ``updated_at``."""
        with self._unchanged_on_failure(template):
            template.name = require_template_name(template.name)
            for template_exercise in template.template_exercises:
                _validate_configurations(template_exercise.set_configurations)
            template.updated_at = self.clock.now()
            self.store.update(template)
        logger.info(f"Updated template '{template.name}' ({template.id})")
        return self._change(ChangeKind.UPDATED, template)

    def replace_exercises(
        self, template: WorkoutTemplate, exercises: Iterable[TemplateEntry]
    ) -> Change:
        """Replace a template's exercises and set configurations."""
        with self._unchanged_on_failure(template):
            template.template_exercises = build_template_exercises(exercises)
            return self.update(template)

    def delete(self, template: WorkoutTemplate) -> Change:
        """Delete a template and its template exercises."""
        if not self.store.delete(template):
            raise TemplateNotFoundError(template.id)
        logger.info(f"Deleted template '{template.name}' ({template.id})")
        return self._change(ChangeKind.DELETED, template)
