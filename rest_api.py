import datetime
import logging
import os
from typing import Optional

from fastapi import FastAPI, HTTPException

from algorithms import CalendarSystem, MonthGridBuilder, group_by_day, is_in_month
from catalog_store import CATEGORIES, ExerciseCatalogStore
from config import APP_VERSION
from db import (
    WorkoutRepository,
    ExerciseRepository,
    SetRepository,
    ExerciseCatalogRepository,
    SettingsRepository,
)

log = logging.getLogger("fitlog.api")


def _parse_day(value: str) -> datetime.date:
    try:
        return datetime.datetime.fromisoformat(value).date()
    except ValueError:
        raise HTTPException(status_code=400, detail="date must be in YYYY-MM-DD format")


class FitnessAPI:
    """Provides REST endpoints for workout logging."""

    def __init__(
        self,
        db_path: str = "workout.db",
        yaml_path: str = "settings.yaml",
        catalog_path: Optional[str] = None,
        catalog: Optional[ExerciseCatalogStore] = None,
    ) -> None:
        self.db_path = db_path
        self.settings = SettingsRepository(db_path, yaml_path)
        self.workouts = WorkoutRepository(db_path)
        self.exercises = ExerciseRepository(db_path)
        self.sets = SetRepository(db_path)
        self.exercise_catalog = ExerciseCatalogRepository(db_path)
        self.exercise_catalog.seed_if_needed()
        self.catalog = catalog or ExerciseCatalogStore(catalog_path)
        self.catalog.open()
        self.app = FastAPI(
            title="Fitness Logger API",
            description="REST API for workout logging",
            version=APP_VERSION,
        )
        self._setup_routes()

    def calendar_system(self) -> CalendarSystem:
        return CalendarSystem(self.settings.get_text("language", "en"))

    def workout_detail(self, workout_id: int) -> dict:
        wid, date, title = self.workouts.fetch_detail(workout_id)
        exercises = []
        for ex_id, name, muscle_group in self.exercises.fetch_for_workout(wid):
            exercises.append(
                {
                    "id": ex_id,
                    "name": name,
                    "muscle_group": muscle_group,
                    "sets": [
                        {"id": sid, "weight_kg": weight, "reps": reps}
                        for sid, weight, reps in self.sets.fetch_for_exercise(ex_id)
                    ],
                }
            )
        return {"id": wid, "date": date, "title": title, "exercises": exercises}

    def month_view(self, anchor: datetime.date, first_weekday: int) -> dict:
        cal = self.calendar_system()
        days = MonthGridBuilder.build(anchor, first_weekday, cal)
        counts: dict[datetime.date, int] = {}
        if days:
            rows = self.workouts.fetch_all_workouts(
                days[0].isoformat(), days[-1].isoformat()
            )
            counts = {
                day: len(items)
                for day, items in group_by_day(rows, lambda r: r[1]).items()
            }
        return {
            "anchor": anchor.isoformat(),
            "first_weekday": first_weekday,
            "weekday_symbols": MonthGridBuilder.weekday_symbols(first_weekday, cal),
            "days": [
                {
                    "date": day.isoformat(),
                    "day": day.day,
                    "in_month": is_in_month(day, anchor),
                    "workout_count": counts.get(day, 0),
                }
                for day in days
            ],
        }

    def _setup_routes(self) -> None:
        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API, database and catalog status.",
        )
        def health():
            try:
                self.workouts.fetch_all("SELECT 1;")
                db_status = "ok"
            except Exception as e:
                log.error("Health check failed: %s", e)
                db_status = "error"
            return {
                "status": "ok" if db_status == "ok" else "degraded",
                "database": db_status,
                "catalog_ready": self.catalog.is_ready,
                "version": APP_VERSION,
            }

        @self.app.post(
            "/workouts",
            summary="Create workout",
            description="Create a new workout session.",
        )
        def create_workout(date: str = None, title: str = None):
            try:
                workout_id = self.workouts.create(date, title)
            except ValueError:
                raise HTTPException(
                    status_code=400,
                    detail="date must be an ISO date or datetime",
                )
            return {"id": workout_id}

        @self.app.get(
            "/workouts",
            summary="List workouts",
            description="Retrieve logged workouts, newest first.",
        )
        def list_workouts(
            start_date: str = None,
            end_date: str = None,
            descending: bool = True,
        ):
            rows = self.workouts.fetch_all_workouts(start_date, end_date, descending)
            return [{"id": wid, "date": date, "title": title} for wid, date, title in rows]

        @self.app.get("/workouts/search")
        def search_workouts(query: str):
            rows = self.workouts.search(query)
            return [{"id": wid, "date": date, "title": title} for wid, date, title in rows]

        @self.app.get("/workouts/{workout_id}")
        def get_workout(workout_id: int):
            try:
                return self.workout_detail(workout_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @self.app.get("/workouts/{workout_id}/summary")
        def workout_summary(workout_id: int):
            try:
                self.workouts.fetch_detail(workout_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return self.sets.workout_summary(workout_id)

        @self.app.put("/workouts/{workout_id}/title")
        def update_title(workout_id: int, title: str):
            try:
                self.workouts.set_title(workout_id, title)
                return {"status": "updated"}
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @self.app.put("/workouts/{workout_id}/date")
        def update_date(workout_id: int, date: str):
            try:
                self.workouts.fetch_detail(workout_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            try:
                self.workouts.set_date(workout_id, date)
                return {"status": "updated"}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.delete("/workouts/{workout_id}")
        def delete_workout(workout_id: int):
            try:
                self.workouts.delete(workout_id)
                return {"status": "deleted"}
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @self.app.post("/workouts/{workout_id}/exercises")
        def add_exercise(workout_id: int, name: str, muscle_group: str | None = None):
            try:
                ex_id = self.exercises.add(workout_id, name, muscle_group)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": ex_id}

        @self.app.get("/workouts/{workout_id}/exercises")
        def list_exercises(workout_id: int):
            return [
                {"id": ex_id, "name": name, "muscle_group": group}
                for ex_id, name, group in self.exercises.fetch_for_workout(workout_id)
            ]

        @self.app.put("/exercises/{exercise_id}/name")
        def update_exercise_name(exercise_id: int, name: str):
            try:
                self.exercises.update_name(exercise_id, name)
                return {"status": "updated"}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.delete("/exercises/{exercise_id}")
        def delete_exercise(exercise_id: int):
            self.exercises.remove(exercise_id)
            return {"status": "deleted"}

        @self.app.post("/exercises/{exercise_id}/sets")
        def add_set(
            exercise_id: int,
            weight_kg: float = 0.0,
            reps: int = SetRepository.DEFAULT_REPS,
        ):
            try:
                set_id = self.sets.add(exercise_id, weight_kg, reps)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": set_id}

        @self.app.get("/exercises/{exercise_id}/sets")
        def list_sets(exercise_id: int):
            return [
                {"id": sid, "weight_kg": weight, "reps": reps}
                for sid, weight, reps in self.sets.fetch_for_exercise(exercise_id)
            ]

        @self.app.put("/sets/{set_id}")
        def update_set(set_id: int, weight_kg: float, reps: int):
            try:
                self.sets.update(set_id, weight_kg, reps)
                return {"status": "updated"}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.delete("/sets/{set_id}")
        def delete_set(set_id: int):
            self.sets.remove(set_id)
            return {"status": "deleted"}

        @self.app.get(
            "/calendar/month",
            summary="Month grid",
            description="Day cells for the month containing the anchor date.",
        )
        def calendar_month(anchor: str = None, first_weekday: int | None = None):
            day = _parse_day(anchor) if anchor else datetime.date.today()
            if first_weekday is None:
                first_weekday = self.settings.get_int("first_weekday", 2)
            if not 1 <= first_weekday <= 7:
                raise HTTPException(
                    status_code=400, detail="first_weekday must be between 1 and 7"
                )
            return self.month_view(day, first_weekday)

        @self.app.get("/calendar/day/{day}")
        def calendar_day(day: str):
            rows = self.workouts.fetch_for_day(_parse_day(day))
            return [{"id": wid, "date": date, "title": title} for wid, date, title in rows]

        @self.app.get("/catalog/search")
        def catalog_search(query: str = "", category: str | None = None):
            return [
                {"name": name, "category": cat}
                for name, cat in self.catalog.search(query, category)
            ]

        @self.app.post("/catalog")
        def catalog_add(name: str, category: str | None = None):
            if not name.strip():
                raise HTTPException(status_code=400, detail="name required")
            self.catalog.insert_custom(name, category)
            return {"name": name.strip()}

        @self.app.get("/catalog/categories")
        def catalog_categories():
            return CATEGORIES

        @self.app.get("/exercise_catalog")
        def list_exercise_catalog(category: str | None = None):
            return [
                {"name": name, "category": cat}
                for name, cat in self.exercise_catalog.fetch_all(category)
            ]

        @self.app.get("/settings")
        def get_settings():
            return self.settings.all_settings()

        @self.app.post("/settings/general")
        def update_settings(
            first_weekday: int | None = None,
            weight_unit: str | None = None,
            language: str | None = None,
        ):
            try:
                if first_weekday is not None:
                    self.settings.set_int("first_weekday", first_weekday)
                if weight_unit is not None:
                    self.settings.set_text("weight_unit", weight_unit)
                if language is not None:
                    self.settings.set_text("language", language)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"status": "updated"}


api = FitnessAPI(
    db_path=os.environ.get("DB_PATH", "workout.db"),
    yaml_path=os.environ.get("YAML_PATH", "settings.yaml"),
)
app = api.app

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(app)
