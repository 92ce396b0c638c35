"""Tests for WorkoutRepository."""

from datetime import date, datetime, timedelta

import pytest

from workout_tracker.config import UserPreferences
from workout_tracker.db.repositories import WorkoutRepository
from workout_tracker.exceptions import (
    NotFoundError,
    StorageError,
    ValidationError,
    WorkoutNotFoundError,
)
from workout_tracker.models import ChangeKind, Exercise, WeightUnit, Workout


class TestCreate:
    def test_defaults(self, workout_repo, clock):
        change = workout_repo.create(" Push Day ")
        workout = change.entity
        assert workout.name == "Push Day"
        assert workout.date == clock.now()
        assert workout.duration == 0
        assert change.event.kind == ChangeKind.CREATED
        assert workout_repo.get(workout.id).name == "Push Day"

    def test_invalid_name(self, workout_repo):
        with pytest.raises(ValidationError):
            workout_repo.create("   ")
        with pytest.raises(ValidationError):
            workout_repo.create("x" * 51)


class TestFetching:
    """Tests for ordering and day/range queries."""

    def test_fetch_all_newest_first_undated_last(self, workout_repo, store):
        store.insert(Workout(name="Undated"))
        workout_repo.create("Old", date=datetime(2025, 6, 1, 9, 0))
        workout_repo.create("New", date=datetime(2025, 6, 10, 9, 0))

        assert [w.name for w in workout_repo.fetch_all()] == ["New", "Old", "Undated"]

    def test_fetch_for_day_is_half_open(self, workout_repo):
        workout_repo.create("Midnight", date=datetime(2025, 6, 14, 0, 0))
        workout_repo.create("Evening", date=datetime(2025, 6, 14, 23, 59))
        workout_repo.create("Next day", date=datetime(2025, 6, 15, 0, 0))
        workout_repo.create("Morning", date=datetime(2025, 6, 14, 7, 0))

        names = [w.name for w in workout_repo.fetch_for_day(date(2025, 6, 14))]
        assert names == ["Midnight", "Morning", "Evening"]

    def test_fetch_today(self, workout_repo, clock):
        workout_repo.create("Today", date=clock.now() - timedelta(hours=2))
        workout_repo.create("Yesterday", date=clock.now() - timedelta(days=1))
        assert [w.name for w in workout_repo.fetch_today()] == ["Today"]

    def test_workouts_by_day(self, workout_repo):
        workout_repo.create("A", date=datetime(2025, 6, 2, 8, 0))
        workout_repo.create("B", date=datetime(2025, 6, 2, 18, 0))
        workout_repo.create("C", date=datetime(2025, 6, 5, 8, 0))

        grouped = workout_repo.workouts_by_day(datetime(2025, 6, 1), datetime(2025, 7, 1))
        assert {day: [w.name for w in ws] for day, ws in grouped.items()} == {
            date(2025, 6, 2): ["A", "B"],
            date(2025, 6, 5): ["C"],
        }


class TestLifecycle:
    def test_start_and_end(self, workout_repo, clock):
        workout = workout_repo.create("Push", date=datetime(2025, 6, 1)).entity
        clock.advance(minutes=5)
        workout_repo.start(workout)
        assert workout_repo.get(workout.id).date == clock.now()

        clock.advance(minutes=45)
        change = workout_repo.end(workout, 2700)
        loaded = workout_repo.get(workout.id)
        assert loaded.duration == 2700
        assert loaded.updated_at == clock.now()
        assert change.event.kind == ChangeKind.UPDATED

    def test_negative_duration_rejected(self, workout_repo):
        workout = workout_repo.create("Push").entity
        with pytest.raises(ValidationError):
            workout_repo.end(workout, -1)

    def test_delete(self, workout_repo, leg_day):
        workout_repo.delete(leg_day)
        assert workout_repo.get(leg_day.id) is None
        with pytest.raises(WorkoutNotFoundError):
            workout_repo.delete(leg_day)

    def test_get_or_raise(self, workout_repo):
        with pytest.raises(WorkoutNotFoundError):
            workout_repo.get_or_raise("missing")


class TestExercisesAndSets:
    """Tests for editing the contents of a workout."""

    def test_add_exercise_and_sets(self, workout_repo, squat, bench):
        workout = workout_repo.create("Full Body").entity
        first = workout_repo.add_exercise(workout, squat).entity
        second = workout_repo.add_exercise(workout, bench).entity
        assert (first.order, second.order) == (0, 1)

        workout_repo.add_set(workout, first)
        new_set = workout_repo.add_set(workout, first).entity
        assert new_set.set_number == 2
        assert new_set.rest_time == 90

        loaded = workout_repo.get(workout.id)
        assert [we.exercise.name for we in loaded.ordered_exercises] == ["Squat", "Bench Press"]
        assert loaded.total_sets == 2

    def test_add_set_uses_preferred_rest_time(self, store, clock, squat):
        repo = WorkoutRepository(store, clock, UserPreferences(default_rest_time=150))
        workout = repo.create("Legs").entity
        workout_exercise = repo.add_exercise(workout, squat).entity
        assert repo.add_set(workout, workout_exercise).entity.rest_time == 150

    def test_update_set_converts_display_unit(self, store, clock, squat):
        repo = WorkoutRepository(store, clock, UserPreferences(weight_unit=WeightUnit.POUNDS))
        workout = repo.create("Legs").entity
        workout_exercise = repo.add_exercise(workout, squat).entity
        workout_set = repo.add_set(workout, workout_exercise).entity

        repo.update_set(workout, workout_set, weight=220.462, reps=5, completed=True)

        stored = repo.get(workout.id).workout_exercises[0].sets[0]
        assert stored.weight == pytest.approx(100.0)
        assert stored.reps == 5
        assert stored.completed is True

    def test_update_set_validates_before_changing(self, workout_repo, leg_day):
        workout_set = leg_day.workout_exercises[0].sets[0]
        with pytest.raises(ValidationError):
            workout_repo.update_set(leg_day, workout_set, weight=50, reps=1001)
        assert workout_set.weight == 100.0
        assert workout_set.reps == 5

    def test_remove_set_renumbers(self, workout_repo, leg_day):
        squat_entry = leg_day.workout_exercises[0]
        workout_repo.remove_set(leg_day, squat_entry.sets[0])

        loaded = workout_repo.get(leg_day.id).workout_exercises[0]
        assert [(s.set_number, s.weight) for s in loaded.ordered_sets] == [(1, 100.0), (2, 110.0)]

    def test_remove_exercise_compacts_order(self, workout_repo, leg_day, bench):
        workout_repo.add_exercise(leg_day, bench)
        workout_repo.remove_exercise(leg_day, leg_day.workout_exercises[0])

        loaded = workout_repo.get(leg_day.id)
        assert [(we.order, we.exercise.name) for we in loaded.ordered_exercises] == [
            (0, "Lunge"),
            (1, "Bench Press"),
        ]

    def test_foreign_set_is_rejected(self, workout_repo, leg_day, make_workout, squat):
        other = make_workout("Other", datetime(2025, 6, 1), [(squat, [(50.0, 5, True)])])
        with pytest.raises(NotFoundError):
            workout_repo.remove_set(leg_day, other.workout_exercises[0].sets[0])


class TestFailedWrites:
    """A write that fails leaves the caller's workout as it was."""

    def test_add_exercise_failure_keeps_workout_usable(self, workout_repo, squat):
        workout = workout_repo.create("Legs").entity
        with pytest.raises(StorageError):
            workout_repo.add_exercise(workout, Exercise(name="Never stored"))
        assert workout.workout_exercises == []

        workout_repo.add_exercise(workout, squat)
        loaded = workout_repo.get(workout.id)
        assert [we.exercise.name for we in loaded.ordered_exercises] == ["Squat"]

    def test_add_set_failure_restores_sets(self, workout_repo, store, leg_day):
        store.delete(leg_day)
        with pytest.raises(WorkoutNotFoundError):
            workout_repo.add_set(leg_day, leg_day.workout_exercises[1])
        assert len(leg_day.workout_exercises[1].sets) == 1

    def test_update_set_failure_restores_values(self, workout_repo, store, leg_day):
        workout_set = leg_day.workout_exercises[0].sets[2]
        store.delete(leg_day)
        with pytest.raises(WorkoutNotFoundError):
            workout_repo.update_set(leg_day, workout_set, weight=120, reps=2, completed=True)
        assert (workout_set.weight, workout_set.reps, workout_set.completed) == (110.0, 3, False)

    def test_remove_set_failure_restores_numbering(self, workout_repo, store, leg_day):
        squat_entry = leg_day.workout_exercises[0]
        store.delete(leg_day)
        with pytest.raises(WorkoutNotFoundError):
            workout_repo.remove_set(leg_day, squat_entry.sets[0])
        assert [(s.set_number, s.weight) for s in squat_entry.ordered_sets] == [
            (1, 100.0),
            (2, 100.0),
            (3, 110.0),
        ]

    def test_remove_exercise_failure_restores_order(self, workout_repo, store, leg_day):
        store.delete(leg_day)
        with pytest.raises(WorkoutNotFoundError):
            workout_repo.remove_exercise(leg_day, leg_day.workout_exercises[0])
        assert [(we.order, we.exercise.name) for we in leg_day.ordered_exercises] == [
            (0, "Squat"),
            (1, "Lunge"),
        ]

    def test_start_and_end_failures_restore_fields(self, workout_repo, store, clock, leg_day):
        original_date = leg_day.date
        original_updated_at = leg_day.updated_at
        store.delete(leg_day)
        clock.advance(minutes=5)

        with pytest.raises(WorkoutNotFoundError):
            workout_repo.start(leg_day)
        with pytest.raises(WorkoutNotFoundError):
            workout_repo.end(leg_day, 60)

        assert leg_day.date == original_date
        assert leg_day.duration == 3600
        assert leg_day.updated_at == original_updated_at
