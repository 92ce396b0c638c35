"""Tests for TemplateRepository."""

import pytest

from workout_tracker.exceptions import TemplateNotFoundError, ValidationError
from workout_tracker.models import ChangeKind, SetConfiguration


@pytest.fixture
def push_template(template_repo, bench):
    return template_repo.create(
        "Push",
        notes="Chest focus",
        exercises=[(bench, [
            SetConfiguration(set_number=1, weight=60, reps=10),
            SetConfiguration(set_number=2, weight=70, reps=8, rest_time=120),
        ])],
    ).entity


class TestTemplateRepository:
    def test_create_and_get(self, template_repo, push_template, bench):
        loaded = template_repo.get(push_template.id)
        assert loaded.name == "Push"
        assert loaded.notes == "Chest focus"
        assert loaded.total_sets == 2
        assert loaded.template_exercises[0].exercise.id == bench.id
        assert loaded.template_exercises[0].set_configurations[1].rest_time == 120

    def test_invalid_name(self, template_repo):
        with pytest.raises(ValidationError):
            template_repo.create("")

    def test_invalid_configuration_rejected(self, template_repo, bench):
        with pytest.raises(ValidationError):
            template_repo.create("Bad", exercises=[(bench, [SetConfiguration(set_number=1, weight=-5)])])
        assert template_repo.fetch_all() == []

    def test_fetch_all_sorted_by_name(self, template_repo):
        template_repo.create("pull")
        template_repo.create("Legs")
        assert [t.name for t in template_repo.fetch_all()] == ["Legs", "pull"]

    def test_replace_exercises(self, template_repo, push_template, squat, clock):
        clock.advance(days=1)
        change = template_repo.replace_exercises(
            push_template, [(squat, [SetConfiguration(set_number=1, weight=100, reps=5)])]
        )
        assert change.event.kind == ChangeKind.UPDATED

        loaded = template_repo.get(push_template.id)
        assert [te.exercise.name for te in loaded.ordered_exercises] == ["Squat"]
        assert loaded.updated_at == clock.now()

    def test_delete(self, template_repo, push_template):
        template_repo.delete(push_template)
        assert template_repo.get(push_template.id) is None
        with pytest.raises(TemplateNotFoundError):
            template_repo.delete(push_template)
