import datetime
import json
import os
import sys
import unittest
from unittest import mock

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import CalendarSystem
from cli import (
    export_workouts,
    backup_db,
    restore_db,
    demo_data,
    render_month,
    reset_db,
    main,
)
from db import WorkoutRepository


class CLIToolsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_cli.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.workouts = WorkoutRepository(self.db_path)

    def tearDown(self) -> None:
        for path in [self.db_path, "backup.db", "exports"]:
            if os.path.exists(path):
                if os.path.isdir(path):
                    for f in os.listdir(path):
                        os.remove(os.path.join(path, f))
                    os.rmdir(path)
                else:
                    os.remove(path)

    def test_export_backup_restore(self) -> None:
        os.makedirs("exports", exist_ok=True)
        wid = self.workouts.create_full(
            "2024-05-01T18:00",
            "Push",
            [{"name": "Bench Press", "sets": [(60.0, 8)]}],
        )
        export_workouts(self.db_path, "csv", "exports")
        export_workouts(self.db_path, "json", "exports")
        with open(f"exports/workout_{wid}.csv", encoding="utf-8") as f:
            lines = f.read().splitlines()
        self.assertEqual(lines[0], "Exercise,Weight (kg),Reps")
        self.assertEqual(lines[1], "Bench Press,60.0,8")
        with open(f"exports/workout_{wid}.json", encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data, [{"exercise": "Bench Press", "weight_kg": 60.0, "reps": 8}])

        backup_db(self.db_path, "backup.db")
        self.assertTrue(os.path.exists("backup.db"))
        os.remove(self.db_path)
        restore_db("backup.db", self.db_path)
        self.assertEqual(len(WorkoutRepository(self.db_path).fetch_all_workouts()), 1)

    def test_demo_data(self) -> None:
        demo_data(self.db_path)
        demo_data(self.db_path)
        workouts = WorkoutRepository(self.db_path).fetch_all_workouts()
        self.assertEqual(len(workouts), 1)
        self.assertEqual(workouts[0][2], "Push")

    def test_reset_db(self) -> None:
        demo_data(self.db_path)
        reset_db(self.db_path)
        self.assertEqual(WorkoutRepository(self.db_path).fetch_all_workouts(), [])

    def test_reset_requires_confirmation(self) -> None:
        demo_data(self.db_path)
        with mock.patch.object(sys, "argv", ["cli.py", "reset", "--db", self.db_path]):
            with mock.patch("sys.stderr"):
                with self.assertRaises(SystemExit):
                    main()
        self.assertEqual(len(WorkoutRepository(self.db_path).fetch_all_workouts()), 1)
        with mock.patch.object(sys, "argv", ["cli.py", "reset", "--db", self.db_path, "--yes"]):
            main()
        self.assertEqual(WorkoutRepository(self.db_path).fetch_all_workouts(), [])

    def test_render_month(self) -> None:
        text = render_month(
            datetime.date(2024, 5, 15),
            2,
            CalendarSystem("en"),
            {datetime.date(2024, 5, 1)},
        )
        lines = text.splitlines()
        self.assertEqual(lines[0], "May 2024")
        self.assertEqual(lines[1].split(), ["M", "T", "W", "T", "F", "S", "S"])
        self.assertEqual(len(lines), 2 + 5)
        self.assertEqual(lines[2].split(), [".", ".", "1*", "2", "3", "4", "5"])
        self.assertEqual(lines[-1].split(), ["27", "28", "29", "30", "31", ".", "."])

    def test_render_month_sunday_first(self) -> None:
        lines = render_month(datetime.date(2015, 2, 1), 1).splitlines()
        self.assertEqual(len(lines), 2 + 4)
        self.assertEqual(lines[2].split()[0], "1")


if __name__ == "__main__":
    unittest.main()
