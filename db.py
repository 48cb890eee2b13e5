import sqlite3
import csv
import io
import datetime
import json
from contextlib import contextmanager
from typing import List, Tuple, Optional, Iterable

from config import YamlConfig
from settings_schema import SettingsSchema, validate_settings
from catalog_store import DEFAULT_EXERCISES


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "workouts": (
            """CREATE TABLE workouts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    date TEXT NOT NULL,
                    title TEXT NOT NULL DEFAULT 'Workout'
                );""",
            ["id", "date", "title"],
        ),
        "exercises": (
            """CREATE TABLE exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    muscle_group TEXT,
                    FOREIGN KEY(workout_id) REFERENCES workouts(id)
                );""",
            ["id", "workout_id", "name", "muscle_group"],
        ),
        "sets": (
            """CREATE TABLE sets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    exercise_id INTEGER NOT NULL,
                    weight_kg REAL NOT NULL DEFAULT 0,
                    reps INTEGER NOT NULL DEFAULT 8,
                    position INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id)
                );""",
            ["id", "exercise_id", "weight_kg", "reps", "position"],
        ),
        "exercise_catalog": (
            """CREATE TABLE exercise_catalog (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    category TEXT
                );""",
            ["id", "name", "category"],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._init_settings()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(
                f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
            )
        conn.execute(f"DROP TABLE {table}_old;")

    def _init_settings(self) -> None:
        defaults = SettingsSchema().model_dump()
        with self._connection() as conn:
            for key, value in defaults.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, str(value)),
                )


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


def _normalize_date(value: str | datetime.date | None) -> str:
    """Return an ISO datetime string accurate to the minute."""
    if value is None:
        value = datetime.datetime.now()
    if isinstance(value, str):
        value = datetime.datetime.fromisoformat(value)
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime.combine(value, datetime.time())
    return value.replace(second=0, microsecond=0).isoformat(timespec="minutes")


class WorkoutRepository(BaseRepository):
    """Repository for workout table operations."""

    DEFAULT_TITLE = "Workout"

    def create(
        self, date: str | datetime.date | None = None, title: str | None = None
    ) -> int:
        title = (title or "").strip() or self.DEFAULT_TITLE
        return self.execute(
            "INSERT INTO workouts (date, title) VALUES (?, ?);",
            (_normalize_date(date), title),
        )

    def create_full(
        self,
        date: str | datetime.date | None,
        title: str | None,
        exercises: Iterable[dict],
    ) -> int:
        """Insert a workout together with its exercises and sets.

        ``exercises`` holds dicts with ``name``, optional ``muscle_group`` and
        ``sets`` as ``(weight_kg, reps)`` pairs.
        """
        entries = list(exercises)
        for entry in entries:
            for weight, reps in entry.get("sets", []):
                SetRepository.validate(weight, reps)
        title = (title or "").strip() or self.DEFAULT_TITLE
        with self._connection() as conn:
            cur = conn.execute(
                "INSERT INTO workouts (date, title) VALUES (?, ?);",
                (_normalize_date(date), title),
            )
            workout_id = cur.lastrowid
            for entry in entries:
                name = (entry.get("name") or "").strip() or ExerciseRepository.DEFAULT_NAME
                cur = conn.execute(
                    "INSERT INTO exercises (workout_id, name, muscle_group) VALUES (?, ?, ?);",
                    (workout_id, name, entry.get("muscle_group")),
                )
                exercise_id = cur.lastrowid
                for position, (weight, reps) in enumerate(entry.get("sets", []), 1):
                    conn.execute(
                        "INSERT INTO sets (exercise_id, weight_kg, reps, position) VALUES (?, ?, ?, ?);",
                        (exercise_id, float(weight), int(reps), position),
                    )
        return workout_id

    def fetch_all_workouts(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        descending: bool = True,
    ) -> List[Tuple[int, str, str]]:
        """Return ``(id, date, title)`` rows ordered by date.

        ``end_date`` is inclusive for the whole day.
        """
        query = "SELECT id, date, title FROM workouts"
        params: list[str] = []
        where_clauses: list[str] = []
        if start_date:
            where_clauses.append("date >= ?")
            params.append(start_date)
        if end_date:
            where_clauses.append("substr(date, 1, 10) <= ?")
            params.append(end_date[:10])
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        order = "DESC" if descending else "ASC"
        query += f" ORDER BY date {order}, id {order};"
        return self.fetch_all(query, tuple(params))

    def fetch_for_day(self, day: datetime.date | str) -> List[Tuple[int, str, str]]:
        day_str = day.isoformat() if isinstance(day, datetime.date) else str(day)[:10]
        return self.fetch_all(
            "SELECT id, date, title FROM workouts WHERE substr(date, 1, 10) = ? ORDER BY date DESC, id DESC;",
            (day_str,),
        )

    def fetch_detail(self, workout_id: int) -> Tuple[int, str, str]:
        rows = self.fetch_all(
            "SELECT id, date, title FROM workouts WHERE id = ?;",
            (workout_id,),
        )
        if not rows:
            raise ValueError("workout not found")
        return rows[0]

    def set_title(self, workout_id: int, title: str) -> None:
        self.fetch_detail(workout_id)
        self.execute(
            "UPDATE workouts SET title = ? WHERE id = ?;",
            ((title or "").strip() or self.DEFAULT_TITLE, workout_id),
        )

    def set_date(self, workout_id: int, date: str | datetime.date) -> None:
        self.fetch_detail(workout_id)
        self.execute(
            "UPDATE workouts SET date = ? WHERE id = ?;",
            (_normalize_date(date), workout_id),
        )

    def search(self, query: str) -> List[Tuple[int, str, str]]:
        """Return workouts whose title matches the query."""
        like = f"%{query.lower()}%"
        return self.fetch_all(
            "SELECT id, date, title FROM workouts WHERE lower(title) LIKE ? ORDER BY date DESC;",
            (like,),
        )

    def delete(self, workout_id: int) -> None:
        self.fetch_detail(workout_id)
        with self._connection() as conn:
            conn.execute(
                "DELETE FROM sets WHERE exercise_id IN (SELECT id FROM exercises WHERE workout_id = ?);",
                (workout_id,),
            )
            conn.execute("DELETE FROM exercises WHERE workout_id = ?;", (workout_id,))
            conn.execute("DELETE FROM workouts WHERE id = ?;", (workout_id,))

    def delete_all(self) -> None:
        self._delete_all("sets")
        self._delete_all("exercises")
        self._delete_all("workouts")


class ExerciseRepository(BaseRepository):
    """Repository for exercise table operations."""

    DEFAULT_NAME = "Exercise"

    def add(
        self,
        workout_id: int,
        name: str,
        muscle_group: Optional[str] = None,
    ) -> int:
        name = (name or "").strip()
        if not name:
            raise ValueError("exercise name required")
        rows = self.fetch_all("SELECT id FROM workouts WHERE id = ?;", (workout_id,))
        if not rows:
            raise ValueError("workout not found")
        return self.execute(
            "INSERT INTO exercises (workout_id, name, muscle_group) VALUES (?, ?, ?);",
            (workout_id, name, muscle_group),
        )

    def remove(self, exercise_id: int) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM sets WHERE exercise_id = ?;", (exercise_id,))
            conn.execute("DELETE FROM exercises WHERE id = ?;", (exercise_id,))

    def fetch_for_workout(
        self, workout_id: int
    ) -> List[Tuple[int, str, Optional[str]]]:
        return self.fetch_all(
            "SELECT id, name, muscle_group FROM exercises WHERE workout_id = ? ORDER BY id;",
            (workout_id,),
        )

    def fetch_detail(self, exercise_id: int) -> Tuple[int, str, Optional[str]]:
        rows = self.fetch_all(
            "SELECT workout_id, name, muscle_group FROM exercises WHERE id = ?;",
            (exercise_id,),
        )
        if not rows:
            raise ValueError("exercise not found")
        return rows[0]

    def update_name(self, exercise_id: int, name: str) -> None:
        name = (name or "").strip()
        if not name:
            raise ValueError("exercise name required")
        self.fetch_detail(exercise_id)
        self.execute(
            "UPDATE exercises SET name = ? WHERE id = ?;",
            (name, exercise_id),
        )


class SetRepository(BaseRepository):
    """Repository for sets table operations."""

    MIN_REPS = 1
    MAX_REPS = 50
    DEFAULT_REPS = 8

    @classmethod
    def validate(cls, weight_kg: float, reps: int) -> None:
        if reps < cls.MIN_REPS or reps > cls.MAX_REPS:
            raise ValueError(f"reps must be between {cls.MIN_REPS} and {cls.MAX_REPS}")
        if weight_kg < 0:
            raise ValueError("weight must be non-negative")

    def add(self, exercise_id: int, weight_kg: float = 0.0, reps: int = DEFAULT_REPS) -> int:
        self.validate(weight_kg, reps)
        rows = self.fetch_all("SELECT id FROM exercises WHERE id = ?;", (exercise_id,))
        if not rows:
            raise ValueError("exercise not found")
        rows = self.fetch_all(
            "SELECT COALESCE(MAX(position), 0) + 1 FROM sets WHERE exercise_id = ?;",
            (exercise_id,),
        )
        position = int(rows[0][0]) if rows else 1
        return self.execute(
            "INSERT INTO sets (exercise_id, weight_kg, reps, position) VALUES (?, ?, ?, ?);",
            (exercise_id, float(weight_kg), int(reps), position),
        )

    def update(self, set_id: int, weight_kg: float, reps: int) -> None:
        self.validate(weight_kg, reps)
        self.fetch_detail(set_id)
        self.execute(
            "UPDATE sets SET weight_kg = ?, reps = ? WHERE id = ?;",
            (float(weight_kg), int(reps), set_id),
        )

    def remove(self, set_id: int) -> None:
        self.execute("DELETE FROM sets WHERE id = ?;", (set_id,))

    def fetch_detail(self, set_id: int) -> dict:
        rows = self.fetch_all(
            "SELECT id, exercise_id, weight_kg, reps, position FROM sets WHERE id = ?;",
            (set_id,),
        )
        if not rows:
            raise ValueError("set not found")
        sid, exercise_id, weight, reps, position = rows[0]
        return {
            "id": sid,
            "exercise_id": exercise_id,
            "weight_kg": weight,
            "reps": reps,
            "position": position,
        }

    def fetch_for_exercise(self, exercise_id: int) -> List[Tuple[int, float, int]]:
        return self.fetch_all(
            "SELECT id, weight_kg, reps FROM sets WHERE exercise_id = ? ORDER BY position, id;",
            (exercise_id,),
        )

    def fetch_for_workout(self, workout_id: int) -> List[Tuple[str, float, int]]:
        return self.fetch_all(
            "SELECT e.name, s.weight_kg, s.reps FROM sets s "
            "JOIN exercises e ON s.exercise_id = e.id "
            "WHERE e.workout_id = ? ORDER BY e.id, s.position, s.id;",
            (workout_id,),
        )

    def workout_summary(self, workout_id: int) -> dict:
        rows = self.fetch_all(
            "SELECT COUNT(DISTINCT e.id), COUNT(s.id), COALESCE(SUM(s.weight_kg * s.reps), 0) "
            "FROM exercises e LEFT JOIN sets s ON s.exercise_id = e.id "
            "WHERE e.workout_id = ?;",
            (workout_id,),
        )
        exercises, sets, volume = rows[0] if rows else (0, 0, 0.0)
        return {
            "exercises": int(exercises),
            "sets": int(sets),
            "volume": round(float(volume), 2),
        }

    def export_workout_csv(self, workout_id: int) -> str:
        rows = self.fetch_for_workout(workout_id)
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(["Exercise", "Weight (kg)", "Reps"])
        for name, weight, reps in rows:
            writer.writerow([name, weight, reps])
        return output.getvalue()

    def export_workout_json(self, workout_id: int) -> str:
        rows = self.fetch_for_workout(workout_id)
        data = [
            {"exercise": name, "weight_kg": weight, "reps": reps}
            for name, weight, reps in rows
        ]
        return json.dumps(data)


class ExerciseCatalogRepository(BaseRepository):
    """Exercise names stored alongside the workout log."""

    def seed_if_needed(self) -> None:
        rows = super().fetch_all("SELECT id FROM exercise_catalog LIMIT 1;")
        if rows:
            return
        with self._connection() as conn:
            for name, category in DEFAULT_EXERCISES:
                conn.execute(
                    "INSERT OR IGNORE INTO exercise_catalog (name, category) VALUES (?, ?);",
                    (name, category),
                )

    def fetch_all(self, category: Optional[str] = None) -> List[Tuple[str, Optional[str]]]:
        if category:
            return super().fetch_all(
                "SELECT name, category FROM exercise_catalog WHERE category = ? ORDER BY name;",
                (category,),
            )
        return super().fetch_all(
            "SELECT name, category FROM exercise_catalog ORDER BY name;"
        )


class SettingsRepository(BaseRepository):
    """Repository for general application settings synchronized with YAML."""

    def __init__(
        self, db_path: str = "workout.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = super().fetch_all("SELECT key, value FROM settings ORDER BY key;")
        result: dict[str, int | str] = {}
        for k, v in rows:
            try:
                result[k] = int(v)
            except ValueError:
                result[k] = v
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, str(value)),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = super().fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(float(self.get_text(key, str(default))))
        except ValueError:
            return default

    def set_text(self, key: str, value: str) -> None:
        data = self._raw_all_settings()
        data[key] = value
        if key in SettingsSchema.model_fields:
            validate_settings(
                {k: v for k, v in data.items() if k in SettingsSchema.model_fields}
            )
        self.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, str(value)),
        )
        self._sync_to_yaml()

    def set_int(self, key: str, value: int) -> None:
        self.set_text(key, str(value))

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()
