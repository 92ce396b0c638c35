"""Tests for the command-line interface."""

import json
from datetime import datetime

import pytest

from workout_tracker.cli import main
from workout_tracker.config import get_settings
from workout_tracker.db.repositories import ExerciseRepository, WorkoutRepository
from workout_tracker.db.sqlite_store import SQLiteWorkoutStore
from workout_tracker.models import Workout


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def run(temp_db_path, *args):
    return main(["--db", temp_db_path, *args])


class TestCli:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "workout-tracker" in capsys.readouterr().out

    def test_seed_and_list(self, temp_db_path, capsys):
        assert run(temp_db_path, "seed") == 0
        assert "Added 4 sample exercises" in capsys.readouterr().out

        assert run(temp_db_path, "exercises", "--search", "squat") == 0
        out = capsys.readouterr().out
        assert "Squat" in out
        assert "Bench Press" not in out

    def test_workouts_json(self, temp_db_path, capsys):
        store = SQLiteWorkoutStore(temp_db_path)
        squat = ExerciseRepository(store).create("Squat").entity
        workouts = WorkoutRepository(store)
        workout = workouts.create("Legs", date=datetime(2025, 6, 1)).entity
        workout_exercise = workouts.add_exercise(workout, squat).entity
        workouts.add_set(workout, workout_exercise)

        assert run(temp_db_path, "workouts", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert [w["name"] for w in data] == ["Legs"]
        assert data[0]["total_sets"] == 1
        assert data[0]["workout_exercises"][0]["exercise"]["name"] == "Squat"

    def test_stats(self, temp_db_path, capsys):
        assert run(temp_db_path, "stats", "--range", "all") == 0
        assert "Workouts" in capsys.readouterr().out

    def test_history_unknown_exercise(self, temp_db_path, capsys):
        assert run(temp_db_path, "history", "Nope") == 1
        assert "Error" in capsys.readouterr().out

    def test_duplicate(self, temp_db_path, capsys):
        store = SQLiteWorkoutStore(temp_db_path)
        squat = ExerciseRepository(store).create("Squat").entity
        workouts = WorkoutRepository(store)
        workout = workouts.create("Legs", date=datetime(2025, 6, 1)).entity
        workouts.add_exercise(workout, squat)

        assert run(temp_db_path, "duplicate", workout.id, "--date", "2025-06-08") == 0
        copies = [w for w in store.query(Workout) if w.name == "Legs (Copy)"]
        assert len(copies) == 1
        assert copies[0].date == datetime(2025, 6, 8)

    def test_duplicate_bad_date(self, temp_db_path):
        store = SQLiteWorkoutStore(temp_db_path)
        workout = WorkoutRepository(store).create("Legs").entity
        assert run(temp_db_path, "duplicate", workout.id, "--date", "June 8") == 1

    def test_duplicate_missing_workout(self, temp_db_path):
        assert run(temp_db_path, "duplicate", "missing") == 1
