import logging
import os
import sqlite3
from typing import List, Optional, Tuple

from config import app_support_dir

log = logging.getLogger("fitlog.catalog")

ALL_CATEGORIES = "All"

CATEGORIES = [
    ALL_CATEGORIES,
    "Chest",
    "Back",
    "Legs",
    "Shoulders",
    "Arms",
    "Core",
    "Cardio",
    "Full Body",
    "Other",
]

DEFAULT_EXERCISES: List[Tuple[str, str]] = [
    ("Bench Press", "Chest"),
    ("Incline Dumbbell Press", "Chest"),
    ("Push-Up", "Chest"),
    ("Overhead Press", "Shoulders"),
    ("Lateral Raise", "Shoulders"),
    ("Pull-Up", "Back"),
    ("Lat Pulldown", "Back"),
    ("Barbell Row", "Back"),
    ("Deadlift", "Back"),
    ("Squat", "Legs"),
    ("Leg Press", "Legs"),
    ("Romanian Deadlift", "Legs"),
    ("Biceps Curl", "Arms"),
    ("Triceps Pushdown", "Arms"),
    ("Plank", "Core"),
]


def _category_filter(category: Optional[str]) -> Optional[str]:
    cat = (category or "").strip()
    return None if not cat or cat == ALL_CATEGORIES else cat


class ExerciseCatalogStore:
    """Searchable exercise name catalog kept in its own SQLite file.

    Every storage error is logged and turned into an empty result, so
    callers can use the store before or after a failed :meth:`open`.
    """

    DB_FILE_NAME = "exercises.sqlite"
    SEARCH_LIMIT = 200

    _CREATE_SQL = """CREATE TABLE IF NOT EXISTS exercises (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            category TEXT
        );"""

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path or os.path.join(app_support_dir(), self.DB_FILE_NAME)
        self._conn: Optional[sqlite3.Connection] = None
        self.is_ready = False

    def open(self) -> None:
        if self.is_ready:
            return
        try:
            directory = os.path.dirname(os.path.abspath(self.db_path))
            os.makedirs(directory, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path)
        except (OSError, sqlite3.Error) as e:
            log.error("Catalog open failed (%s): %s", self.db_path, e)
            self._conn = None
            return
        try:
            with self._conn:
                self._conn.execute(self._CREATE_SQL)
        except sqlite3.Error as e:
            log.error("Catalog create table failed: %s", e)
            self._conn.close()
            self._conn = None
            return
        if self._count_exercises() == 0:
            self._seed_defaults()
        self.is_ready = True

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
        self._conn = None
        self.is_ready = False

    def search(
        self, query: str = "", category: Optional[str] = None
    ) -> List[Tuple[str, Optional[str]]]:
        """Return ``(name, category)`` pairs whose name contains ``query``."""
        if self._conn is None:
            return []
        trimmed = (query or "").strip()
        like = f"%{trimmed}%" if trimmed else "%"
        cat = _category_filter(category)
        sql = "SELECT name, category FROM exercises WHERE name LIKE ? COLLATE NOCASE"
        params: list[str | int] = [like]
        if cat is not None:
            sql += " AND category = ?"
            params.append(cat)
        sql += " ORDER BY name LIMIT ?;"
        params.append(self.SEARCH_LIMIT)
        try:
            rows = self._conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            log.error("Catalog search failed: %s", e)
            return []
        return [(name, cat) for name, cat in rows]

    def insert_custom(self, name: str, category: Optional[str] = None) -> None:
        if self._conn is None:
            return
        trimmed = (name or "").strip()
        if not trimmed:
            return
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT OR IGNORE INTO exercises (name, category) VALUES (?, ?);",
                    (trimmed, _category_filter(category)),
                )
        except sqlite3.Error as e:
            log.error("Catalog insert failed for %r: %s", trimmed, e)

    def _count_exercises(self) -> int:
        if self._conn is None:
            return 0
        try:
            row = self._conn.execute("SELECT COUNT(*) FROM exercises;").fetchone()
        except sqlite3.Error as e:
            log.error("Catalog count failed: %s", e)
            return 0
        return int(row[0]) if row else 0

    def _seed_defaults(self) -> None:
        for name, category in DEFAULT_EXERCISES:
            self.insert_custom(name, category)
        log.info("Seeded exercise catalog with %d entries", len(DEFAULT_EXERCISES))
