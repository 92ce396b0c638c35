"""Statistics over logged workouts.

Workout-level totals count every set. Exercise-level statistics, history,
frequency and progress only look at completed sets.
"""

import calendar
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..clock import Clock, SystemClock
from ..config import UserPreferences
from ..db.base import WorkoutStore
from ..models.entities import Exercise, Workout, WorkoutExercise
from ..models.statistics import (
    ExercisePerformance,
    ExerciseProgress,
    ExerciseSession,
    ExerciseStatistics,
    ExerciseTrend,
    FrequentExercise,
    SetRecord,
    WorkoutStatistics,
)
from ..utils.units import from_storage

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10
DEFAULT_FREQUENT_LIMIT = 5
DEFAULT_PROGRESS_SESSIONS = 3


def shift_months(value: datetime, months: int) -> datetime:
    """Move ``value`` by whole calendar months, clamping the day of month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


class TimeRange(str, Enum):
    """Preset look-back windows for the statistics screen."""
    WEEK = "Week"
    MONTH = "Month"
    THREE_MONTHS = "3 Months"
    YEAR = "Year"
    ALL = "All Time"

    def date_range(self, now: datetime) -> Tuple[datetime, datetime]:
        """Return ``(start, now)`` for this window."""
        if self is TimeRange.WEEK:
            return now - timedelta(days=7), now
        months = {
            TimeRange.MONTH: 1,
            TimeRange.THREE_MONTHS: 3,
            TimeRange.YEAR: 12,
            TimeRange.ALL: 120,
        }[self]
        return shift_months(now, -months), now


def calculate_trend(current: int, previous: int) -> Optional[ExerciseTrend]:
    """Compare occurrence counts between two periods.

    Returns None when the previous period has no occurrences.
    """
    if previous == 0:
        return None
    change_pct = (current - previous) / previous * 100
    return ExerciseTrend(
        percentage_change=int(round(change_pct)),
        is_positive=current >= previous,
        current_count=current,
        previous_count=previous,
    )


class StatisticsService:
    """Read-only aggregate queries over the workout store."""

    def __init__(
        self,
        store: WorkoutStore,
        clock: Optional[Clock] = None,
        preferences: Optional[UserPreferences] = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.preferences = preferences or UserPreferences()

    def _entries_for(self, exercise: Exercise) -> List[Tuple[Workout, WorkoutExercise]]:
        """Every (workout, workout exercise) pair that uses ``exercise``."""
        return [
            (workout, workout_exercise)
            for workout in self.store.query(Workout)
            for workout_exercise in workout.ordered_exercises
            if workout_exercise.exercise.id == exercise.id
        ]

    def _recent_entries(
        self, exercise: Exercise, limit: int
    ) -> List[Tuple[Workout, WorkoutExercise]]:
        dated = [(w, we) for w, we in self._entries_for(exercise) if w.date is not None]
        dated.sort(key=lambda entry: entry[0].date, reverse=True)
        return dated[:max(limit, 0)]

    def _workouts_between(self, start: datetime, end: datetime) -> List[Workout]:
        return self.store.query(
            Workout,
            predicate=lambda w: w.date is not None and start <= w.date <= end,
        )

    def get_workout_stats(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> WorkoutStatistics:
        """
        Totals over workouts dated within ``[start, end]``.

        Both bounds are inclusive. Unless both are given, every workout is
        counted, including undated ones.
        """
        if start is not None and end is not None:
            workouts = self._workouts_between(start, end)
        else:
            workouts = self.store.query(Workout)

        total_workouts = len(workouts)
        total_duration = sum(w.duration for w in workouts)
        return WorkoutStatistics(
            total_workouts=total_workouts,
            total_volume=sum(w.total_volume for w in workouts),
            total_sets=sum(w.total_sets for w in workouts),
            total_duration=total_duration,
            average_duration=total_duration / total_workouts if total_workouts else 0.0,
        )

    def get_exercise_stats(self, exercise: Exercise) -> ExerciseStatistics:
        """Lifetime completed-set totals for one exercise."""
        total_sets = 0
        total_reps = 0
        total_volume = 0.0
        max_weight = 0.0

        for _, workout_exercise in self._entries_for(exercise):
            for workout_set in workout_exercise.completed_sets:
                total_sets += 1
                total_reps += workout_set.reps
                total_volume += workout_set.volume
                max_weight = max(max_weight, workout_set.weight)

        return ExerciseStatistics(
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            total_sets=total_sets,
            total_reps=total_reps,
            total_volume=total_volume,
            max_weight=max_weight,
        )

    def get_exercise_history(
        self, exercise: Exercise, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> List[ExercisePerformance]:
        """
        Per-workout performance for an exercise, newest first.

        The ``limit`` most recent dated entries are taken first; entries
        without completed sets are then dropped, so fewer than ``limit``
        results may come back.
        """
        history = []
        for workout, workout_exercise in self._recent_entries(exercise, limit):
            completed = workout_exercise.completed_sets
            if not completed:
                continue
            history.append(ExercisePerformance(
                workout_id=workout.id,
                date=workout.date,
                total_sets=len(completed),
                average_reps=sum(s.reps for s in completed) / len(completed),
                max_weight=max(s.weight for s in completed),
            ))
        return history

    def _occurrences(self, start: datetime, end: datetime) -> Dict[str, List[Tuple[Workout, WorkoutExercise]]]:
        grouped: Dict[str, List[Tuple[Workout, WorkoutExercise]]] = {}
        for workout in self._workouts_between(start, end):
            for workout_exercise in workout.workout_exercises:
                grouped.setdefault(workout_exercise.exercise.id, []).append((workout, workout_exercise))
        return grouped

    def get_frequent_exercises(
        self,
        start: datetime,
        end: datetime,
        limit: int = DEFAULT_FREQUENT_LIMIT,
    ) -> List[FrequentExercise]:
        """
        Exercises ranked by how often they appear in ``[start, end]``.

        Each result carries a trend against the immediately preceding
        window of the same length.
        """
        current = self._occurrences(start, end)

        # Previous window ends just before ``start`` so nothing is counted twice
        span = end - start
        previous_counts: Dict[str, int] = {}
        for workout in self.store.query(
            Workout,
            predicate=lambda w: w.date is not None and start - span <= w.date < start,
        ):
            for workout_exercise in workout.workout_exercises:
                exercise_id = workout_exercise.exercise.id
                previous_counts[exercise_id] = previous_counts.get(exercise_id, 0) + 1

        ranked = []
        for exercise_id, entries in current.items():
            exercise = entries[0][1].exercise
            times_performed = len(entries)
            ranked.append(FrequentExercise(
                exercise_id=exercise_id,
                exercise_name=exercise.name,
                category=exercise.category,
                times_performed=times_performed,
                last_performed=max(workout.date for workout, _ in entries),
                trend=calculate_trend(times_performed, previous_counts.get(exercise_id, 0)),
            ))

        ranked.sort(key=lambda f: (-f.times_performed, -f.last_performed.timestamp(), f.exercise_name.lower()))
        return ranked[:max(limit, 0)]

    def get_frequent_exercises_for(self, time_range: TimeRange) -> List[FrequentExercise]:
        start, end = time_range.date_range(self.clock.now())
        return self.get_frequent_exercises(start, end)

    def get_workout_stats_for(self, time_range: TimeRange) -> WorkoutStatistics:
        start, end = time_range.date_range(self.clock.now())
        return self.get_workout_stats(start, end)

    def get_exercise_progress(
        self,
        exercise: Exercise,
        sessions: int = DEFAULT_PROGRESS_SESSIONS,
    ) -> ExerciseProgress:
        """
        Recent sessions of an exercise with personal records flagged.

        A set is flagged as a personal record only when it belongs to the most
        recent session and its weight is at least the heaviest completed set
        ever logged for the exercise. Weights in the result are in the user's
        display unit; the comparison is done in kilograms.
        """
        unit = self.preferences.weight_unit
        entries = self._recent_entries(exercise, sessions)

        all_time_max = max(
            (
                s.weight
                for _, workout_exercise in self._entries_for(exercise)
                for s in workout_exercise.completed_sets
            ),
            default=0.0,
        )

        results = []
        for index, (workout, workout_exercise) in enumerate(entries):
            records = [
                SetRecord(
                    set_number=s.set_number,
                    weight=from_storage(s.weight, unit),
                    reps=s.reps,
                    is_personal_record=index == 0 and s.weight >= all_time_max,
                )
                for s in workout_exercise.completed_sets
                if s.weight > 0 and s.reps > 0
            ]
            if not records:
                continue
            results.append(ExerciseSession(
                workout_id=workout.id,
                workout_name=workout.name,
                date=workout.date,
                sets=records,
            ))

        logger.debug(
            f"Progress for '{exercise.name}': {len(results)} sessions, "
            f"all-time max {all_time_max} kg"
        )
        return ExerciseProgress(
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            weight_unit=unit,
            all_time_max_weight=all_time_max,
            sessions=results,
        )
