"""SQLite-backed workout store.

Persists exercises, workouts (with their exercises and sets) and templates
(with their exercises and set configurations) in a single SQLite file.
"""

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Type, Union

from ..exceptions import (
    ExerciseNotFoundError,
    StorageError,
    TemplateNotFoundError,
    WorkoutNotFoundError,
)
from ..models.entities import (
    Exercise,
    TemplateExercise,
    Workout,
    WorkoutExercise,
    WorkoutSet,
    WorkoutTemplate,
    decode_set_configurations,
)
from ..models.enums import ExerciseCategory, MuscleGroup
from .base import Entity, T, WorkoutStore

logger = logging.getLogger(__name__)


SCHEMA = """
    -- Exercise library
    CREATE TABLE IF NOT EXISTS exercises (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        category TEXT NOT NULL DEFAULT 'Other',
        muscle_groups_json TEXT NOT NULL DEFAULT '[]',
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );

    -- Workout sessions
    CREATE TABLE IF NOT EXISTS workouts (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        date TEXT,
        notes TEXT,
        duration INTEGER NOT NULL DEFAULT 0 CHECK (duration >= 0),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );

    -- Exercises performed in a workout
    CREATE TABLE IF NOT EXISTS workout_exercises (
        id TEXT PRIMARY KEY,
        workout_id TEXT NOT NULL REFERENCES workouts(id) ON DELETE CASCADE,
        exercise_id TEXT NOT NULL REFERENCES exercises(id),
        sort_order INTEGER NOT NULL DEFAULT 0
    );

    -- Sets of a workout exercise
    CREATE TABLE IF NOT EXISTS workout_sets (
        id TEXT PRIMARY KEY,
        workout_exercise_id TEXT NOT NULL
            REFERENCES workout_exercises(id) ON DELETE CASCADE,
        set_number INTEGER NOT NULL,
        weight REAL NOT NULL DEFAULT 0,
        reps INTEGER NOT NULL DEFAULT 0,
        rest_time INTEGER NOT NULL DEFAULT 90,
        completed INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        UNIQUE (workout_exercise_id, set_number)
    );

    -- Reusable templates
    CREATE TABLE IF NOT EXISTS workout_templates (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );

    -- Template exercises; sets_configuration is a JSON array of
    -- {setNumber, weight, reps, restTime}
    CREATE TABLE IF NOT EXISTS template_exercises (
        id TEXT PRIMARY KEY,
        template_id TEXT NOT NULL
            REFERENCES workout_templates(id) ON DELETE CASCADE,
        exercise_id TEXT NOT NULL REFERENCES exercises(id),
        sort_order INTEGER NOT NULL DEFAULT 0,
        sets_configuration TEXT
    );

    -- Indexes for common queries
    CREATE INDEX IF NOT EXISTS idx_workouts_date ON workouts(date);
    CREATE INDEX IF NOT EXISTS idx_workout_exercises_workout ON workout_exercises(workout_id);
    CREATE INDEX IF NOT EXISTS idx_workout_exercises_exercise ON workout_exercises(exercise_id);
    CREATE INDEX IF NOT EXISTS idx_workout_sets_parent ON workout_sets(workout_exercise_id);
    CREATE INDEX IF NOT EXISTS idx_template_exercises_template ON template_exercises(template_id);
    CREATE INDEX IF NOT EXISTS idx_template_exercises_exercise ON template_exercises(exercise_id);
"""

_TABLES = {
    Exercise: "exercises",
    Workout: "workouts",
    WorkoutTemplate: "workout_templates",
}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class SQLiteWorkoutStore(WorkoutStore):
    """SQLite implementation of the workout store."""

    def __init__(self, db_path: Union[str, Path] = "workout_tracker.db"):
        """
        Initialize the store and create tables if needed.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self._write_lock = threading.RLock()
        self._local = threading.local()
        self._init_db()

    # ------------------------------------------------------------------
    # Connections and transactions
    # ------------------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=30.0)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            logger.error(f"Could not open database {self.db_path}: {e}")
            raise StorageError(f"Could not open database: {e}", operation="connect") from e
        return conn

    def _init_db(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager.

        Inside ``transaction()`` this yields the transaction's connection and
        leaves commit/rollback to it.
        """
        active = getattr(self._local, "conn", None)
        if active is not None:
            try:
                yield active
            except sqlite3.Error as e:
                raise StorageError(f"Database operation failed: {e}") from e
            return

        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database operation failed: {e}")
            raise StorageError(f"Database operation failed: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def transaction(self):
        """Run the enclosed writes as one atomic, serialized unit."""
        if getattr(self._local, "conn", None) is not None:
            yield
            return

        with self._write_lock:
            conn = self._connect()
            self._local.conn = conn
            try:
                yield
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"Transaction rolled back: {e}")
                raise StorageError(f"Transaction failed: {e}", operation="commit") from e
            except Exception as e:
                conn.rollback()
                logger.warning(f"Transaction rolled back: {e}")
                raise
            finally:
                self._local.conn = None
                conn.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, entity: Entity) -> Entity:
        with self.transaction(), self._get_connection() as conn:
            if isinstance(entity, Exercise):
                self._insert_exercise(conn, entity)
            elif isinstance(entity, Workout):
                self._insert_workout(conn, entity)
            elif isinstance(entity, WorkoutTemplate):
                self._insert_template(conn, entity)
            else:
                raise TypeError(f"Unsupported entity type: {type(entity).__name__}")
        logger.debug(f"Inserted {type(entity).__name__} {entity.id}")
        return entity

    def update(self, entity: Entity) -> Entity:
        with self.transaction(), self._get_connection() as conn:
            if isinstance(entity, Exercise):
                cursor = conn.execute("""
                    UPDATE exercises
                    SET name = ?, category = ?, muscle_groups_json = ?, notes = ?,
                        created_at = ?, updated_at = ?
                    WHERE id = ?
                """, (
                    entity.name,
                    entity.category.value,
                    json.dumps([g.value for g in entity.muscle_groups]),
                    entity.notes,
                    _iso(entity.created_at),
                    _iso(entity.updated_at),
                    entity.id,
                ))
                if cursor.rowcount == 0:
                    raise ExerciseNotFoundError(entity.id)

            elif isinstance(entity, Workout):
                cursor = conn.execute("""
                    UPDATE workouts
                    SET name = ?, date = ?, notes = ?, duration = ?,
                        created_at = ?, updated_at = ?
                    WHERE id = ?
                """, (
                    entity.name,
                    _iso(entity.date),
                    entity.notes,
                    entity.duration,
                    _iso(entity.created_at),
                    _iso(entity.updated_at),
                    entity.id,
                ))
                if cursor.rowcount == 0:
                    raise WorkoutNotFoundError(entity.id)
                # Replace the child graph; sets go with their parents
                conn.execute("DELETE FROM workout_exercises WHERE workout_id = ?", (entity.id,))
                self._insert_workout_children(conn, entity)

            elif isinstance(entity, WorkoutTemplate):
                cursor = conn.execute("""
                    UPDATE workout_templates
                    SET name = ?, notes = ?, created_at = ?, updated_at = ?
                    WHERE id = ?
                """, (
                    entity.name,
                    entity.notes,
                    _iso(entity.created_at),
                    _iso(entity.updated_at),
                    entity.id,
                ))
                if cursor.rowcount == 0:
                    raise TemplateNotFoundError(entity.id)
                conn.execute("DELETE FROM template_exercises WHERE template_id = ?", (entity.id,))
                self._insert_template_children(conn, entity)

            else:
                raise TypeError(f"Unsupported entity type: {type(entity).__name__}")
        logger.debug(f"Updated {type(entity).__name__} {entity.id}")
        return entity

    def delete(self, entity: Entity) -> bool:
        table = _TABLES.get(type(entity))
        if table is None:
            raise TypeError(f"Unsupported entity type: {type(entity).__name__}")
        with self.transaction(), self._get_connection() as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (entity.id,))
            deleted = cursor.rowcount > 0
        if deleted:
            logger.debug(f"Deleted {type(entity).__name__} {entity.id}")
        return deleted

    def count_references(self, exercise: Exercise) -> int:
        with self._get_connection() as conn:
            workout_refs = conn.execute(
                "SELECT COUNT(*) AS cnt FROM workout_exercises WHERE exercise_id = ?",
                (exercise.id,),
            ).fetchone()["cnt"]
            template_refs = conn.execute(
                "SELECT COUNT(*) AS cnt FROM template_exercises WHERE exercise_id = ?",
                (exercise.id,),
            ).fetchone()["cnt"]
        return workout_refs + template_refs

    def delete_references(self, exercise: Exercise) -> int:
        with self.transaction(), self._get_connection() as conn:
            removed = conn.execute(
                "DELETE FROM workout_exercises WHERE exercise_id = ?", (exercise.id,)
            ).rowcount
            removed += conn.execute(
                "DELETE FROM template_exercises WHERE exercise_id = ?", (exercise.id,)
            ).rowcount
        return removed

    def _insert_exercise(self, conn: sqlite3.Connection, exercise: Exercise) -> None:
        conn.execute("""
            INSERT INTO exercises
            (id, name, category, muscle_groups_json, notes, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            exercise.id,
            exercise.name,
            exercise.category.value,
            json.dumps([g.value for g in exercise.muscle_groups]),
            exercise.notes,
            _iso(exercise.created_at),
            _iso(exercise.updated_at),
        ))

    def _insert_workout(self, conn: sqlite3.Connection, workout: Workout) -> None:
        conn.execute("""
            INSERT INTO workouts
            (id, name, date, notes, duration, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            workout.id,
            workout.name,
            _iso(workout.date),
            workout.notes,
            workout.duration,
            _iso(workout.created_at),
            _iso(workout.updated_at),
        ))
        self._insert_workout_children(conn, workout)

    def _insert_workout_children(self, conn: sqlite3.Connection, workout: Workout) -> None:
        for workout_exercise in workout.workout_exercises:
            conn.execute("""
                INSERT INTO workout_exercises (id, workout_id, exercise_id, sort_order)
                VALUES (?, ?, ?, ?)
            """, (
                workout_exercise.id,
                workout.id,
                workout_exercise.exercise.id,
                workout_exercise.order,
            ))
            conn.executemany("""
                INSERT INTO workout_sets
                (id, workout_exercise_id, set_number, weight, reps, rest_time,
                 completed, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, [
                (
                    s.id,
                    workout_exercise.id,
                    s.set_number,
                    s.weight,
                    s.reps,
                    s.rest_time,
                    1 if s.completed else 0,
                    _iso(s.created_at),
                )
                for s in workout_exercise.sets
            ])

    def _insert_template(self, conn: sqlite3.Connection, template: WorkoutTemplate) -> None:
        conn.execute("""
            INSERT INTO workout_templates (id, name, notes, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
        """, (
            template.id,
            template.name,
            template.notes,
            _iso(template.created_at),
            _iso(template.updated_at),
        ))
        self._insert_template_children(conn, template)

    def _insert_template_children(self, conn: sqlite3.Connection, template: WorkoutTemplate) -> None:
        conn.executemany("""
            INSERT INTO template_exercises
            (id, template_id, exercise_id, sort_order, sets_configuration)
            VALUES (?, ?, ?, ?, ?)
        """, [
            (te.id, template.id, te.exercise.id, te.order, te.sets_configuration)
            for te in template.template_exercises
        ])

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, entity_type: Type[T], entity_id: str) -> Optional[T]:
        results = self._load(entity_type, "WHERE id = ?", (entity_id,))
        return results[0] if results else None

    def query(
        self,
        entity_type: Type[T],
        predicate: Optional[Callable[[T], bool]] = None,
        sort_key: Optional[Callable[[T], Any]] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[T]:
        entities = self._load(entity_type)
        if predicate is not None:
            entities = [e for e in entities if predicate(e)]
        if sort_key is not None:
            entities.sort(key=sort_key, reverse=descending)
        if limit is not None:
            entities = entities[:max(limit, 0)]
        return entities

    def _load(self, entity_type: Type[T], where: str = "", params: tuple = ()) -> List[T]:
        with self._get_connection() as conn:
            if entity_type is Exercise:
                rows = conn.execute(f"SELECT * FROM exercises {where}", params).fetchall()
                return [self._row_to_exercise(row) for row in rows]
            if entity_type is Workout:
                return self._load_workouts(conn, where, params)
            if entity_type is WorkoutTemplate:
                return self._load_templates(conn, where, params)
        raise TypeError(f"Unsupported entity type: {entity_type.__name__}")

    def _row_to_exercise(self, row: sqlite3.Row) -> Exercise:
        return Exercise(
            id=row["id"],
            name=row["name"],
            category=ExerciseCategory.parse(row["category"]),
            muscle_groups=[MuscleGroup(g) for g in json.loads(row["muscle_groups_json"] or "[]")],
            notes=row["notes"],
            created_at=_parse(row["created_at"]),
            updated_at=_parse(row["updated_at"]),
        )

    def _exercises_by_id(self, rows: List[sqlite3.Row]) -> Dict[str, Exercise]:
        exercises: Dict[str, Exercise] = {}
        for row in rows:
            if row["id"] not in exercises:
                exercises[row["id"]] = self._row_to_exercise(row)
        return exercises

    def _load_workouts(self, conn: sqlite3.Connection, where: str, params: tuple) -> List[Workout]:
        rows = conn.execute(f"SELECT * FROM workouts {where}", params).fetchall()
        if not rows:
            return []

        exercise_rows = conn.execute(f"""
            SELECT we.id AS we_id, we.workout_id, we.sort_order, e.*
            FROM workout_exercises we
            JOIN exercises e ON e.id = we.exercise_id
            WHERE we.workout_id IN (SELECT id FROM workouts {where})
        """, params).fetchall()
        set_rows = conn.execute(f"""
            SELECT s.*
            FROM workout_sets s
            JOIN workout_exercises we ON we.id = s.workout_exercise_id
            WHERE we.workout_id IN (SELECT id FROM workouts {where})
        """, params).fetchall()

        sets_by_parent: Dict[str, List[WorkoutSet]] = {}
        for row in set_rows:
            sets_by_parent.setdefault(row["workout_exercise_id"], []).append(WorkoutSet(
                id=row["id"],
                set_number=row["set_number"],
                weight=row["weight"],
                reps=row["reps"],
                rest_time=row["rest_time"],
                completed=bool(row["completed"]),
                created_at=_parse(row["created_at"]),
            ))

        exercises = self._exercises_by_id(exercise_rows)
        children: Dict[str, List[WorkoutExercise]] = {}
        for row in exercise_rows:
            children.setdefault(row["workout_id"], []).append(WorkoutExercise(
                id=row["we_id"],
                exercise=exercises[row["id"]],
                order=row["sort_order"],
                sets=sorted(sets_by_parent.get(row["we_id"], []), key=lambda s: s.set_number),
            ))

        return [
            Workout(
                id=row["id"],
                name=row["name"],
                date=_parse(row["date"]),
                notes=row["notes"],
                duration=row["duration"],
                workout_exercises=sorted(children.get(row["id"], []), key=lambda we: we.order),
                created_at=_parse(row["created_at"]),
                updated_at=_parse(row["updated_at"]),
            )
            for row in rows
        ]

    def _load_templates(
        self, conn: sqlite3.Connection, where: str, params: tuple
    ) -> List[WorkoutTemplate]:
        rows = conn.execute(f"SELECT * FROM workout_templates {where}", params).fetchall()
        if not rows:
            return []

        exercise_rows = conn.execute(f"""
            SELECT te.id AS te_id, te.template_id, te.sort_order, te.sets_configuration, e.*
            FROM template_exercises te
            JOIN exercises e ON e.id = te.exercise_id
            WHERE te.template_id IN (SELECT id FROM workout_templates {where})
        """, params).fetchall()

        exercises = self._exercises_by_id(exercise_rows)
        children: Dict[str, List[TemplateExercise]] = {}
        for row in exercise_rows:
            children.setdefault(row["template_id"], []).append(TemplateExercise(
                id=row["te_id"],
                exercise=exercises[row["id"]],
                order=row["sort_order"],
                set_configurations=decode_set_configurations(row["sets_configuration"]),
            ))

        return [
            WorkoutTemplate(
                id=row["id"],
                name=row["name"],
                notes=row["notes"],
                template_exercises=sorted(children.get(row["id"], []), key=lambda te: te.order),
                created_at=_parse(row["created_at"]),
                updated_at=_parse(row["updated_at"]),
            )
            for row in rows
        ]

    def get_stats(self) -> dict:
        """Get database statistics."""
        with self._get_connection() as conn:
            counts = {
                table: conn.execute(f"SELECT COUNT(*) AS cnt FROM {table}").fetchone()["cnt"]
                for table in (
                    "exercises",
                    "workouts",
                    "workout_exercises",
                    "workout_sets",
                    "workout_templates",
                    "template_exercises",
                )
            }
            date_range = conn.execute("""
                SELECT MIN(date) AS min_date, MAX(date) AS max_date
                FROM workouts
                WHERE date IS NOT NULL
            """).fetchone()

        return {
            **counts,
            "earliest_workout": date_range["min_date"],
            "latest_workout": date_range["max_date"],
            "db_path": str(self.db_path),
        }
