"""Tests for the SQLite workout store."""

import threading
from datetime import datetime

import pytest

from workout_tracker.db.sqlite_store import SQLiteWorkoutStore
from workout_tracker.exceptions import StorageError, WorkoutNotFoundError
from workout_tracker.models import (
    Exercise,
    SetConfiguration,
    TemplateExercise,
    Workout,
    WorkoutExercise,
    WorkoutSet,
    WorkoutTemplate,
)


class TestStoreInit:
    """Tests for schema creation."""

    @pytest.mark.parametrize("table", [
        "exercises",
        "workouts",
        "workout_exercises",
        "workout_sets",
        "workout_templates",
        "template_exercises",
    ])
    def test_creates_tables(self, store, table):
        with store._get_connection() as conn:
            row = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,)
            ).fetchone()
        assert row is not None

    def test_reopening_keeps_data(self, temp_db_path):
        SQLiteWorkoutStore(temp_db_path).insert(Exercise(name="Squat"))
        reopened = SQLiteWorkoutStore(temp_db_path)
        assert [e.name for e in reopened.query(Exercise)] == ["Squat"]


class TestAggregates:
    """Tests for writing and reading workout and template graphs."""

    def test_workout_round_trip(self, store, leg_day):
        loaded = store.get(Workout, leg_day.id)

        assert loaded.name == "Leg Day"
        assert loaded.date == leg_day.date
        assert loaded.duration == 3600
        assert loaded.total_sets == 4
        assert loaded.completed_sets == 3
        assert loaded.total_volume == 1530
        assert [we.exercise.name for we in loaded.ordered_exercises] == ["Squat", "Lunge"]

    def test_update_replaces_children(self, store, leg_day):
        leg_day.workout_exercises = leg_day.workout_exercises[:1]
        leg_day.workout_exercises[0].sets[2].completed = True
        store.update(leg_day)

        loaded = store.get(Workout, leg_day.id)
        assert loaded.total_sets == 3
        assert loaded.is_completed
        with store._get_connection() as conn:
            count = conn.execute("SELECT COUNT(*) AS cnt FROM workout_sets").fetchone()["cnt"]
        assert count == 3

    def test_update_missing_workout_raises(self, store):
        with pytest.raises(WorkoutNotFoundError):
            store.update(Workout(name="Ghost"))

    def test_delete_cascades(self, store, leg_day):
        assert store.delete(leg_day) is True
        assert store.get(Workout, leg_day.id) is None
        with store._get_connection() as conn:
            assert conn.execute("SELECT COUNT(*) AS cnt FROM workout_exercises").fetchone()["cnt"] == 0
            assert conn.execute("SELECT COUNT(*) AS cnt FROM workout_sets").fetchone()["cnt"] == 0
        assert store.delete(leg_day) is False

    def test_template_round_trip(self, store, squat):
        template = WorkoutTemplate(name="Legs", template_exercises=[
            TemplateExercise(exercise=squat, order=0, set_configurations=[
                SetConfiguration(set_number=1, weight=100, reps=5, rest_time=120),
            ]),
        ])
        store.insert(template)

        loaded = store.get(WorkoutTemplate, template.id)
        assert loaded.template_exercises[0].exercise.id == squat.id
        assert loaded.template_exercises[0].set_configurations == [
            SetConfiguration(set_number=1, weight=100.0, reps=5, rest_time=120),
        ]

    def test_corrupt_configuration_is_read_leniently(self, store, squat):
        template = WorkoutTemplate(name="Legs", template_exercises=[
            TemplateExercise(exercise=squat, order=0),
        ])
        store.insert(template)
        with store._get_connection() as conn:
            conn.execute("UPDATE template_exercises SET sets_configuration = ?", ("{oops",))

        loaded = store.get(WorkoutTemplate, template.id)
        assert loaded.template_exercises[0].set_configurations == []


class TestQuery:
    def test_predicate_sort_and_limit(self, store):
        for name in ["Squat", "bench press", "Deadlift"]:
            store.insert(Exercise(name=name))

        names = [e.name for e in store.query(Exercise, sort_key=lambda e: e.name.lower())]
        assert names == ["bench press", "Deadlift", "Squat"]

        limited = store.query(Exercise, sort_key=lambda e: e.name.lower(), descending=True, limit=2)
        assert [e.name for e in limited] == ["Squat", "Deadlift"]

        filtered = store.query(Exercise, predicate=lambda e: "l" in e.name.lower())
        assert {e.name for e in filtered} == {"Deadlift"}

    def test_unsupported_type_raises(self, store):
        with pytest.raises(TypeError):
            store.query(dict)


class TestTransactions:
    """Tests for atomic writes."""

    def test_foreign_key_failure_rolls_back(self, store):
        unsaved = Exercise(name="Not stored")
        workout = Workout(name="Broken", date=datetime(2025, 6, 1), workout_exercises=[
            WorkoutExercise(exercise=unsaved, sets=[WorkoutSet(set_number=1)]),
        ])

        with pytest.raises(StorageError):
            store.insert(workout)
        assert store.get(Workout, workout.id) is None

    def test_transaction_groups_writes(self, store):
        first = Exercise(name="Squat")
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.insert(first)
                store.insert(Exercise(name="Lunge"))
                raise RuntimeError("abort")
        assert store.query(Exercise) == []

    def test_nested_transactions_join_outer(self, store):
        with store.transaction():
            store.insert(Exercise(name="Squat"))
            with store.transaction():
                store.insert(Exercise(name="Lunge"))
        assert len(store.query(Exercise)) == 2

    def test_concurrent_writers_do_not_lose_updates(self, store):
        workout = Workout(name="Counter", date=datetime(2025, 6, 1))
        store.insert(workout)
        errors = []

        def bump(times):
            try:
                for _ in range(times):
                    with store.transaction():
                        current = store.get(Workout, workout.id)
                        current.duration += 1
                        store.update(current)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=bump, args=(10,)) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert store.get(Workout, workout.id).duration == 40

    def test_references(self, store, leg_day, squat):
        assert store.count_references(squat) == 1
        assert store.delete_references(squat) == 1
        assert store.count_references(squat) == 0
        assert store.get(Workout, leg_day.id).total_sets == 1

    def test_get_stats(self, store, leg_day):
        stats = store.get_stats()
        assert stats["workouts"] == 1
        assert stats["workout_sets"] == 4
        assert stats["earliest_workout"] == leg_day.date.isoformat()
