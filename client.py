import requests
from typing import Optional


class FitnessClient:
    """Simple REST client for the workout API."""

    def __init__(self, base_url: str = "http://localhost:8000", session=None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _get(self, path: str, **params):
        resp = self.session.get(f"{self.base_url}{path}", params=params)
        resp.raise_for_status()
        return resp.json()

    def _post(self, path: str, **params):
        resp = self.session.post(f"{self.base_url}{path}", params=params)
        resp.raise_for_status()
        return resp.json()

    def create_workout(self, date: Optional[str] = None, title: Optional[str] = None) -> int:
        params = {k: v for k, v in {"date": date, "title": title}.items() if v is not None}
        return self._post("/workouts", **params)["id"]

    def list_workouts(self, **params: str):
        return self._get("/workouts", **params)

    def add_exercise(self, workout_id: int, name: str, muscle_group: Optional[str] = None) -> int:
        params = {"name": name}
        if muscle_group:
            params["muscle_group"] = muscle_group
        return self._post(f"/workouts/{workout_id}/exercises", **params)["id"]

    def add_set(self, exercise_id: int, weight_kg: float, reps: int) -> int:
        return self._post(
            f"/exercises/{exercise_id}/sets", weight_kg=weight_kg, reps=reps
        )["id"]

    def month(self, anchor: Optional[str] = None, first_weekday: Optional[int] = None) -> dict:
        params = {}
        if anchor:
            params["anchor"] = anchor
        if first_weekday:
            params["first_weekday"] = first_weekday
        return self._get("/calendar/month", **params)

    def search_catalog(self, query: str = "", category: Optional[str] = None) -> list:
        params = {"query": query}
        if category:
            params["category"] = category
        return self._get("/catalog/search", **params)
