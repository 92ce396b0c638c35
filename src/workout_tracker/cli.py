"""Command-line interface for the workout tracker.

Usage:
    workout-tracker seed
    workout-tracker exercises --search press
    workout-tracker workouts
    workout-tracker stats --range month
    workout-tracker history "Bench Press" --limit 5
    workout-tracker duplicate <workout-id> --date 2025-06-14
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .clock import SystemClock
from .config import Settings, UserPreferences, configure_logging, get_settings
from .db.repositories import ExerciseRepository, WorkoutRepository
from .db.sqlite_store import SQLiteWorkoutStore
from .exceptions import ExerciseNotFoundError, ValidationError, WorkoutTrackerError
from .services.duplication_service import WorkoutDuplicationService
from .services.statistics_service import StatisticsService, TimeRange
from .utils.units import format_weight, from_storage

logger = logging.getLogger(__name__)

console = Console()

RANGE_CHOICES = {
    "week": TimeRange.WEEK,
    "month": TimeRange.MONTH,
    "3months": TimeRange.THREE_MONTHS,
    "year": TimeRange.YEAR,
    "all": TimeRange.ALL,
}


class AppContext:
    """Store, repositories and services wired from settings."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.preferences = UserPreferences.from_settings(settings)
        self.clock = SystemClock()
        self.store = SQLiteWorkoutStore(settings.db_path)
        self.exercises = ExerciseRepository(self.store, self.clock, self.preferences)
        self.workouts = WorkoutRepository(self.store, self.clock, self.preferences)
        self.statistics = StatisticsService(self.store, self.clock, self.preferences)
        self.duplication = WorkoutDuplicationService(self.store, self.clock)

    def display_weight(self, weight_kg: float) -> str:
        unit = self.preferences.weight_unit
        return format_weight(from_storage(weight_kg, unit), unit)


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m {secs:02d}s"


def parse_date(value: str) -> datetime:
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(
            f"Invalid date '{value}', expected YYYY-MM-DD",
            field="date",
            reason="not_a_date",
        ) from e


def cmd_seed(args, ctx: AppContext):
    """Insert the sample exercise library."""
    changes = ctx.exercises.seed_sample_exercises()
    if changes:
        console.print(f"[green]Added {len(changes)} sample exercises[/green]")
    else:
        console.print("Exercise library already has exercises; nothing to do")


def cmd_exercises(args, ctx: AppContext):
    """List or search exercises."""
    exercises = ctx.exercises.search(args.search)
    if args.json:
        console.print_json(data=[e.to_dict() for e in exercises])
        return
    if not exercises:
        console.print("[yellow]No exercises found[/yellow]")
        return

    table = Table(title="Exercises", box=box.ROUNDED)
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Muscle Groups")
    table.add_column("ID", style="dim")
    for exercise in exercises:
        table.add_row(
            exercise.name,
            exercise.category.value,
            ", ".join(g.value for g in exercise.muscle_groups),
            exercise.id,
        )
    console.print(table)


def cmd_workouts(args, ctx: AppContext):
    """List workouts, newest first."""
    workouts = ctx.workouts.fetch_all()
    if args.json:
        console.print_json(data=[w.to_dict() for w in workouts])
        return
    if not workouts:
        console.print("[yellow]No workouts logged yet[/yellow]")
        return

    table = Table(title="Workouts", box=box.ROUNDED)
    table.add_column("Date")
    table.add_column("Name", style="cyan")
    table.add_column("Sets", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("ID", style="dim")
    for workout in workouts:
        table.add_row(
            workout.date.strftime("%Y-%m-%d") if workout.date else "-",
            workout.name,
            f"{workout.completed_sets}/{workout.total_sets}",
            ctx.display_weight(workout.total_volume),
            workout.formatted_duration,
            workout.id,
        )
    console.print(table)


def cmd_stats(args, ctx: AppContext):
    """Show workout totals and most frequent exercises for a time range."""
    time_range = RANGE_CHOICES[args.range]
    stats = ctx.statistics.get_workout_stats_for(time_range)
    frequent = ctx.statistics.get_frequent_exercises_for(time_range)

    summary = "\n".join([
        f"Workouts:         {stats.total_workouts}",
        f"Total sets:       {stats.total_sets}",
        f"Total volume:     {ctx.display_weight(stats.total_volume)}",
        f"Total duration:   {format_duration(stats.total_duration)}",
        f"Average duration: {format_duration(stats.average_duration)}",
    ])
    console.print(Panel(summary, title=f"Statistics ({time_range.value})", box=box.ROUNDED))

    if not frequent:
        return
    table = Table(title="Most Frequent Exercises", box=box.ROUNDED)
    table.add_column("Exercise", style="cyan")
    table.add_column("Times", justify="right")
    table.add_column("Last Performed")
    table.add_column("Trend", justify="right")
    for item in frequent:
        if item.trend is None:
            trend = "-"
        else:
            color = "green" if item.trend.is_positive else "red"
            trend = f"[{color}]{item.trend.percentage_change:+d}%[/{color}]"
        table.add_row(
            item.exercise_name,
            str(item.times_performed),
            item.last_performed.strftime("%Y-%m-%d") if item.last_performed else "-",
            trend,
        )
    console.print(table)


def cmd_history(args, ctx: AppContext):
    """Show recent performance for one exercise."""
    matches = [e for e in ctx.exercises.fetch_all() if e.name.lower() == args.exercise.strip().lower()]
    if not matches:
        raise ExerciseNotFoundError(args.exercise)
    exercise = matches[0]

    history = ctx.statistics.get_exercise_history(exercise, limit=args.limit)
    if not history:
        console.print(f"[yellow]No completed sets logged for {exercise.name}[/yellow]")
        return

    table = Table(title=f"{exercise.name} History", box=box.ROUNDED)
    table.add_column("Date")
    table.add_column("Sets", justify="right")
    table.add_column("Avg Reps", justify="right")
    table.add_column("Max Weight", justify="right")
    for entry in history:
        table.add_row(
            entry.date.strftime("%Y-%m-%d"),
            str(entry.total_sets),
            f"{entry.average_reps:.1f}",
            ctx.display_weight(entry.max_weight),
        )
    console.print(table)


def cmd_duplicate(args, ctx: AppContext):
    """Copy a workout to a new date."""
    source = ctx.workouts.get_or_raise(args.workout_id)
    to_date = parse_date(args.date) if args.date else ctx.clock.now()
    change = ctx.duplication.duplicate_workout(source, to_date, new_name=args.name)
    workout = change.entity
    console.print(
        f"[green]Created '{workout.name}' on {to_date.strftime('%Y-%m-%d')}[/green] ({workout.id})"
    )


def cmd_info(args, ctx: AppContext):
    """Show database statistics."""
    stats = ctx.store.get_stats()
    table = Table(title="Database", box=box.ROUNDED)
    table.add_column("Item", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in stats.items():
        table.add_row(key.replace("_", " ").title(), str(value if value is not None else "-"))
    console.print(table)


COMMANDS = {
    "seed": cmd_seed,
    "exercises": cmd_exercises,
    "workouts": cmd_workouts,
    "stats": cmd_stats,
    "history": cmd_history,
    "duplicate": cmd_duplicate,
    "info": cmd_info,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workout-tracker",
        description="Log workouts and review training statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  workout-tracker seed
  workout-tracker exercises --search press
  workout-tracker workouts --json
  workout-tracker stats --range 3months
  workout-tracker history "Bench Press" --limit 5
  workout-tracker duplicate <workout-id> --date 2025-06-14 --name "Push Day"
        """,
    )
    parser.add_argument("--db", type=Path, help="SQLite database path (overrides settings)")
    parser.add_argument("--log-level", help="Logging level (overrides settings)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("seed", help="Add the sample exercise library")

    exercises_p = subparsers.add_parser("exercises", help="List or search exercises")
    exercises_p.add_argument("--search", "-s", help="Case-insensitive search text")
    exercises_p.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    workouts_p = subparsers.add_parser("workouts", help="List workouts")
    workouts_p.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    stats_p = subparsers.add_parser("stats", help="Show statistics for a time range")
    stats_p.add_argument(
        "--range", "-r", choices=list(RANGE_CHOICES), default="month",
        help="Time range to summarize",
    )

    history_p = subparsers.add_parser("history", help="Show an exercise's recent history")
    history_p.add_argument("exercise", help="Exercise name")
    history_p.add_argument("--limit", "-n", type=int, default=10, help="Workouts to look back")

    duplicate_p = subparsers.add_parser("duplicate", help="Copy a workout to a new date")
    duplicate_p.add_argument("workout_id", help="ID of the workout to copy")
    duplicate_p.add_argument("--date", help="Date of the copy (YYYY-MM-DD), default today")
    duplicate_p.add_argument("--name", help="Name of the copy")

    subparsers.add_parser("info", help="Show database statistics")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    if args.db is not None:
        settings = settings.model_copy(update={"db_path": args.db})
    configure_logging(args.log_level or settings.log_level)

    try:
        ctx = AppContext(settings)
        COMMANDS[args.command](args, ctx)
    except WorkoutTrackerError as e:
        logger.debug(f"Command '{args.command}' failed: {e!r}")
        console.print(f"[red]Error:[/red] {e.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
