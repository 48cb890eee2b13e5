import datetime
import os
import sqlite3
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import ExerciseRepository, SetRepository, WorkoutRepository


@pytest.fixture
def repos(tmp_path):
    db_path = str(tmp_path / "workout.db")
    return (
        db_path,
        WorkoutRepository(db_path),
        ExerciseRepository(db_path),
        SetRepository(db_path),
    )


class TestWorkoutRepository:
    def test_create_defaults(self, repos):
        _db, workouts, _ex, _sets = repos
        wid = workouts.create(datetime.datetime(2024, 5, 1, 18, 30, 45), "  ")
        assert workouts.fetch_detail(wid) == (wid, "2024-05-01T18:30", "Workout")

    def test_set_title_trims_and_defaults(self, repos):
        _db, workouts, _ex, _sets = repos
        wid = workouts.create("2024-05-01", "Push")
        workouts.set_title(wid, "  Pull ")
        assert workouts.fetch_detail(wid)[2] == "Pull"
        workouts.set_title(wid, "   ")
        assert workouts.fetch_detail(wid)[2] == "Workout"

    def test_create_full(self, repos):
        _db, workouts, exercises, sets = repos
        wid = workouts.create_full(
            datetime.date(2024, 5, 1),
            "Push",
            [
                {"name": "Bench Press", "muscle_group": "Chest", "sets": [(60, 8), (65, 6)]},
                {"name": " ", "sets": []},
            ],
        )
        rows = exercises.fetch_for_workout(wid)
        assert [r[1] for r in rows] == ["Bench Press", "Exercise"]
        assert [(w, r) for _id, w, r in sets.fetch_for_exercise(rows[0][0])] == [
            (60.0, 8),
            (65.0, 6),
        ]
        assert sets.workout_summary(wid) == {"exercises": 2, "sets": 2, "volume": 870.0}

    def test_create_full_rejects_invalid_set(self, repos):
        _db, workouts, _ex, _sets = repos
        with pytest.raises(ValueError):
            workouts.create_full(None, None, [{"name": "Squat", "sets": [(100, 0)]}])
        assert workouts.fetch_all_workouts() == []

    def test_date_range_and_day(self, repos):
        _db, workouts, _ex, _sets = repos
        a = workouts.create("2024-05-01T06:00", "A")
        b = workouts.create("2024-05-01T19:00", "B")
        c = workouts.create("2024-05-31T23:59", "C")
        workouts.create("2024-06-01T00:00", "D")
        rows = workouts.fetch_all_workouts("2024-05-01", "2024-05-31", descending=False)
        assert [r[0] for r in rows] == [a, b, c]
        assert [r[0] for r in workouts.fetch_for_day(datetime.date(2024, 5, 1))] == [b, a]
        assert workouts.fetch_for_day("2024-05-02") == []

    def test_delete_cascades(self, repos):
        db_path, workouts, exercises, sets = repos
        wid = workouts.create("2024-05-01")
        ex_id = exercises.add(wid, "Squat")
        sets.add(ex_id, 100, 5)
        other = workouts.create("2024-05-02")
        other_ex = exercises.add(other, "Deadlift")
        sets.add(other_ex, 140, 3)
        workouts.delete(wid)
        conn = sqlite3.connect(db_path)
        assert conn.execute("SELECT COUNT(*) FROM exercises").fetchone()[0] == 1
        assert conn.execute("SELECT COUNT(*) FROM sets").fetchone()[0] == 1
        conn.close()
        with pytest.raises(ValueError):
            workouts.delete(wid)

    def test_delete_all(self, repos):
        _db, workouts, exercises, sets = repos
        wid = workouts.create()
        sets.add(exercises.add(wid, "Plank"), 0, 1)
        workouts.delete_all()
        assert workouts.fetch_all_workouts() == []
        assert sets.fetch_for_workout(wid) == []

    def test_set_positions_and_validation(self, repos):
        _db, workouts, exercises, sets = repos
        ex_id = exercises.add(workouts.create(), "Squat")
        first = sets.add(ex_id, 100, 5)
        second = sets.add(ex_id, 105, 3)
        assert sets.fetch_detail(first)["position"] == 1
        assert sets.fetch_detail(second)["position"] == 2
        with pytest.raises(ValueError):
            sets.add(ex_id, 100, 51)
        with pytest.raises(ValueError):
            sets.update(first, -5, 5)
        with pytest.raises(ValueError):
            sets.update(999, 10, 5)

    def test_exercise_rules(self, repos):
        _db, workouts, exercises, _sets = repos
        wid = workouts.create()
        with pytest.raises(ValueError):
            exercises.add(wid, "   ")
        with pytest.raises(ValueError):
            exercises.add(wid + 1, "Squat")
        ex_id = exercises.add(wid, "  Squat ")
        assert exercises.fetch_detail(ex_id) == (wid, "Squat", None)
        with pytest.raises(ValueError):
            exercises.update_name(ex_id, "")
