import os
import sys
import unittest

from fastapi.testclient import TestClient

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from client import FitnessClient
from rest_api import FitnessAPI


class ClientTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_client.db"
        self.yaml_path = "test_client.yaml"
        self.catalog_path = "test_client_catalog.sqlite"
        self._cleanup()
        self.api = FitnessAPI(
            db_path=self.db_path,
            yaml_path=self.yaml_path,
            catalog_path=self.catalog_path,
        )
        self.client = FitnessClient(base_url="", session=TestClient(self.api.app))

    def tearDown(self) -> None:
        self.api.catalog.close()
        self._cleanup()

    def _cleanup(self) -> None:
        for path in [self.db_path, self.yaml_path, self.catalog_path]:
            if os.path.exists(path):
                os.remove(path)

    def test_create_workout(self) -> None:
        wid = self.client.create_workout("2020-01-01", "Legs")
        self.assertIsInstance(wid, int)
        ex_id = self.client.add_exercise(wid, "Squat", "Legs")
        self.client.add_set(ex_id, 100.0, 5)
        workouts = self.client.list_workouts()
        self.assertEqual(workouts, [{"id": wid, "date": "2020-01-01T00:00", "title": "Legs"}])

    def test_month(self) -> None:
        self.client.create_workout("2020-01-15T10:00")
        data = self.client.month("2020-01-10", 1)
        marked = [d["date"] for d in data["days"] if d["workout_count"]]
        self.assertEqual(marked, ["2020-01-15"])

    def test_search_catalog(self) -> None:
        data = self.client.search_catalog("press", "Chest")
        self.assertEqual(
            [e["name"] for e in data], ["Bench Press", "Incline Dumbbell Press"]
        )


if __name__ == "__main__":
    unittest.main()
