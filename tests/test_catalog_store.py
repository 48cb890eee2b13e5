import os
import sqlite3
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from catalog_store import DEFAULT_EXERCISES, ExerciseCatalogStore


def _rows(path) -> list:
    conn = sqlite3.connect(str(path))
    try:
        return conn.execute("SELECT name, category FROM exercises ORDER BY id").fetchall()
    finally:
        conn.close()


class TestExerciseCatalogStore:
    def _store(self, tmp_path) -> ExerciseCatalogStore:
        store = ExerciseCatalogStore(str(tmp_path / "exercises.sqlite"))
        store.open()
        return store

    def test_open_seeds_once(self, tmp_path):
        store = self._store(tmp_path)
        store.open()
        assert store.is_ready
        assert len(_rows(tmp_path / "exercises.sqlite")) == 15
        store.close()

        again = self._store(tmp_path)
        assert len(_rows(tmp_path / "exercises.sqlite")) == 15
        assert again._count_exercises() == len(DEFAULT_EXERCISES)
        again.close()

    def test_open_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "exercises.sqlite"
        store = ExerciseCatalogStore(str(path))
        store.open()
        assert store.is_ready
        assert path.exists()
        store.close()

    def test_default_path_uses_data_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FITLOG_DATA_DIR", str(tmp_path))
        store = ExerciseCatalogStore()
        assert store.db_path == os.path.join(str(tmp_path), "exercises.sqlite")

    def test_search_examples(self, tmp_path):
        store = self._store(tmp_path)
        assert store.search("bench", "All") == [("Bench Press", "Chest")]
        assert [n for n, _ in store.search("", "Legs")] == [
            "Leg Press",
            "Romanian Deadlift",
            "Squat",
        ]
        assert store.search("xyz123", "All") == []

    def test_search_is_case_insensitive_and_trimmed(self, tmp_path):
        store = self._store(tmp_path)
        assert store.search("  BENCH ") == [("Bench Press", "Chest")]
        assert len(store.search("")) == 15
        assert len(store.search("", "   ")) == 15
        names = [n for n, _ in store.search("")]
        assert names == sorted(names)

    def test_insert_custom_case_sensitive_uniqueness(self, tmp_path):
        store = self._store(tmp_path)
        path = tmp_path / "exercises.sqlite"
        store.insert_custom("Squat", "Legs")
        store.insert_custom("squat", "Legs")
        names = [n for n, _ in _rows(path)]
        assert "Squat" in names and "squat" in names
        assert len(names) == 16

        store.insert_custom("Squat", "Arms")
        rows = _rows(path)
        assert len(rows) == 16
        assert ("Squat", "Legs") in rows

    def test_insert_custom_trims_and_skips_empty(self, tmp_path):
        store = self._store(tmp_path)
        store.insert_custom("  Hip Thrust  ", "Legs")
        store.insert_custom("   ", "Legs")
        store.insert_custom("Farmer Walk", None)
        store.insert_custom("Burpee", "All")
        assert store.search("hip") == [("Hip Thrust", "Legs")]
        assert store.search("farmer") == [("Farmer Walk", None)]
        assert store.search("burpee") == [("Burpee", None)]
        assert len(_rows(tmp_path / "exercises.sqlite")) == 18

    def test_search_limit(self, tmp_path):
        store = self._store(tmp_path)
        for i in range(250):
            store.insert_custom(f"Drill {i:03d}", "Other")
        assert len(store.search("")) == ExerciseCatalogStore.SEARCH_LIMIT
        assert len(store.search("drill", "Other")) == 200

    def test_not_ready_store_returns_empty(self, tmp_path):
        store = ExerciseCatalogStore(str(tmp_path / "exercises.sqlite"))
        assert store.search("bench") == []
        store.insert_custom("Bench Press", "Chest")
        assert not store.is_ready
        assert not (tmp_path / "exercises.sqlite").exists()

    def test_open_failure_is_logged(self, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = ExerciseCatalogStore(str(blocker / "exercises.sqlite"))
        with caplog.at_level("ERROR", logger="fitlog.catalog"):
            store.open()
        assert not store.is_ready
        assert store.search("") == []
        assert "open failed" in caplog.text

    def test_create_table_failure_closes_connection(self, tmp_path, caplog):
        path = tmp_path / "exercises.sqlite"
        path.write_bytes(b"this is not a sqlite database file " * 64)
        store = ExerciseCatalogStore(str(path))
        with caplog.at_level("ERROR", logger="fitlog.catalog"):
            store.open()
        assert "create table failed" in caplog.text
        assert not store.is_ready
        assert store._conn is None
        assert store.search("bench") == []

        path.unlink()
        store.open()
        assert store.is_ready
        assert store.search("bench") == [("Bench Press", "Chest")]
        store.close()

    def test_query_failure_degrades_to_empty(self, tmp_path, caplog):
        store = self._store(tmp_path)
        conn = sqlite3.connect(str(tmp_path / "exercises.sqlite"))
        conn.execute("DROP TABLE exercises")
        conn.commit()
        conn.close()
        with caplog.at_level("ERROR", logger="fitlog.catalog"):
            assert store.search("bench") == []
            store.insert_custom("Bench Press", "Chest")
        assert "search failed" in caplog.text
        assert "insert failed" in caplog.text
