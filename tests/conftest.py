"""Shared fixtures: a temporary SQLite store, a fixed clock and sample data."""

import os
import tempfile
from datetime import datetime

import pytest

from workout_tracker.clock import FixedClock
from workout_tracker.config import UserPreferences
from workout_tracker.db.repositories import (
    ExerciseRepository,
    TemplateRepository,
    WorkoutRepository,
)
from workout_tracker.db.sqlite_store import SQLiteWorkoutStore
from workout_tracker.models import (
    ExerciseCategory,
    MuscleGroup,
    Workout,
    WorkoutExercise,
    WorkoutSet,
)
from workout_tracker.services.duplication_service import WorkoutDuplicationService
from workout_tracker.services.statistics_service import StatisticsService

NOW = datetime(2025, 6, 15, 10, 0, 0)


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield db_path
    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def preferences():
    return UserPreferences()


@pytest.fixture
def store(temp_db_path):
    return SQLiteWorkoutStore(temp_db_path)


@pytest.fixture
def exercise_repo(store, clock, preferences):
    return ExerciseRepository(store, clock, preferences)


@pytest.fixture
def workout_repo(store, clock, preferences):
    return WorkoutRepository(store, clock, preferences)


@pytest.fixture
def template_repo(store, clock, preferences):
    return TemplateRepository(store, clock, preferences)


@pytest.fixture
def stats_service(store, clock, preferences):
    return StatisticsService(store, clock, preferences)


@pytest.fixture
def duplication_service(store, clock):
    return WorkoutDuplicationService(store, clock)


@pytest.fixture
def squat(exercise_repo):
    return exercise_repo.create(
        "Squat", ExerciseCategory.LEGS, [MuscleGroup.QUADRICEPS, MuscleGroup.GLUTES]
    ).entity


@pytest.fixture
def lunge(exercise_repo):
    return exercise_repo.create("Lunge", ExerciseCategory.LEGS, [MuscleGroup.QUADRICEPS]).entity


@pytest.fixture
def bench(exercise_repo):
    return exercise_repo.create(
        "Bench Press",
        ExerciseCategory.CHEST,
        [MuscleGroup.PECTORAL_MAJOR, MuscleGroup.TRICEPS_BRACHII],
    ).entity


@pytest.fixture
def make_workout(store):
    """Factory inserting a workout built from (exercise, [(kg, reps, completed)]) pairs."""

    def _make(name, date, entries, duration=0, notes=None):
        workout = Workout(name=name, date=date, duration=duration, notes=notes)
        for order, (exercise, sets) in enumerate(entries):
            workout.workout_exercises.append(WorkoutExercise(
                exercise=exercise,
                order=order,
                sets=[
                    WorkoutSet(set_number=number, weight=weight, reps=reps, completed=completed)
                    for number, (weight, reps, completed) in enumerate(sets, start=1)
                ],
            ))
        store.insert(workout)
        return workout

    return _make


@pytest.fixture
def leg_day(make_workout, squat, lunge):
    """Squat 100x5, 100x5 (done), 110x3 (not done); Lunge 20x10 (done)."""
    return make_workout(
        "Leg Day",
        datetime(2025, 6, 14, 18, 0),
        [
            (squat, [(100.0, 5, True), (100.0, 5, True), (110.0, 3, False)]),
            (lunge, [(20.0, 10, True)]),
        ],
        duration=3600,
        notes="Heavy",
    )
