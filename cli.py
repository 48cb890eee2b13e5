import argparse
import datetime
import logging
import shutil
from typing import Optional

from algorithms import CalendarSystem, MonthGridBuilder, WeightConverter, is_in_month
from catalog_store import ExerciseCatalogStore
from db import WorkoutRepository, SetRepository, SettingsRepository


def export_workouts(db_path: str, fmt: str, output_dir: str = ".") -> None:
    workouts = WorkoutRepository(db_path)
    sets = SetRepository(db_path)
    for wid, *_ in workouts.fetch_all_workouts():
        if fmt == "csv":
            data = sets.export_workout_csv(wid)
            out_path = f"{output_dir}/workout_{wid}.csv"
        else:
            data = sets.export_workout_json(wid)
            out_path = f"{output_dir}/workout_{wid}.json"
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(data)


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def demo_data(db_path: str) -> None:
    """Populate the database with a demo workout if empty."""
    workouts = WorkoutRepository(db_path)
    if workouts.fetch_all_workouts():
        print("Database already contains workouts")
        return
    workouts.create_full(
        datetime.datetime.now(),
        "Push",
        [
            {"name": "Bench Press", "muscle_group": "Chest", "sets": [(60.0, 8), (65.0, 6)]},
            {"name": "Overhead Press", "muscle_group": "Shoulders", "sets": [(40.0, 8)]},
        ],
    )
    print("Demo data inserted")


def reset_db(db_path: str) -> None:
    """Delete every workout with its exercises and sets."""
    WorkoutRepository(db_path).delete_all()
    print("All workouts deleted")


def render_month(
    anchor: datetime.date,
    first_weekday: int,
    calendar_system: Optional[CalendarSystem] = None,
    marked: Optional[set] = None,
) -> str:
    """Return a text month grid; days in ``marked`` get an asterisk."""
    cal = calendar_system or CalendarSystem()
    marked = marked or set()
    days = MonthGridBuilder.build(anchor, first_weekday, cal)
    lines = [anchor.strftime("%B %Y")]
    lines.append(" ".join(f"{s:>3}" for s in MonthGridBuilder.weekday_symbols(first_weekday, cal)))
    for start in range(0, len(days), 7):
        cells = []
        for day in days[start:start + 7]:
            text = str(day.day) if is_in_month(day, anchor) else "."
            if day in marked:
                text += "*"
            cells.append(f"{text:>3}")
        lines.append(" ".join(cells))
    return "\n".join(lines)


def print_calendar(db_path: str, yaml_path: str, anchor: datetime.date, first_weekday: Optional[int]) -> None:
    settings = SettingsRepository(db_path, yaml_path)
    if first_weekday is None:
        first_weekday = settings.get_int("first_weekday", 2)
    cal = CalendarSystem(settings.get_text("language", "en"))
    workouts = WorkoutRepository(db_path)
    marked = {
        datetime.datetime.fromisoformat(date).date()
        for _wid, date, _title in workouts.fetch_all_workouts()
    }
    print(render_month(anchor, first_weekday, cal, marked))


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    parser = argparse.ArgumentParser(description="Utility commands")
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--db", default="workout.db")
    exp.add_argument("--fmt", choices=["csv", "json"], default="csv")
    exp.add_argument("--out", default=".")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default="workout.db")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default="workout.db")

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default="workout.db")

    rst_all = sub.add_parser("reset", help="delete all workouts")
    rst_all.add_argument("--db", default="workout.db")
    rst_all.add_argument("--yes", action="store_true", help="skip the confirmation")

    cal = sub.add_parser("calendar")
    cal.add_argument("--db", default="workout.db")
    cal.add_argument("--yaml", default="settings.yaml")
    cal.add_argument("--month", help="YYYY-MM, defaults to the current month")
    cal.add_argument("--first-weekday", type=int, choices=range(1, 8))

    search = sub.add_parser("catalog-search")
    search.add_argument("query", nargs="?", default="")
    search.add_argument("--category", default="All")
    search.add_argument("--catalog")

    add = sub.add_parser("catalog-add")
    add.add_argument("name")
    add.add_argument("--category")
    add.add_argument("--catalog")

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lb"], required=True)

    args = parser.parse_args()

    if args.cmd == "export":
        export_workouts(args.db, args.fmt, args.out)
    elif args.cmd == "backup":
        backup_db(args.db, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, args.db)
    elif args.cmd == "demo":
        demo_data(args.db)
    elif args.cmd == "reset":
        if not args.yes:
            parser.error("reset deletes every workout, pass --yes to confirm")
        reset_db(args.db)
    elif args.cmd == "calendar":
        if args.month:
            anchor = datetime.date.fromisoformat(f"{args.month}-01")
        else:
            anchor = datetime.date.today()
        print_calendar(args.db, args.yaml, anchor, args.first_weekday)
    elif args.cmd == "catalog-search":
        store = ExerciseCatalogStore(args.catalog)
        store.open()
        for name, category in store.search(args.query, args.category):
            print(f"{name}\t{category or ''}")
    elif args.cmd == "catalog-add":
        store = ExerciseCatalogStore(args.catalog)
        store.open()
        store.insert_custom(args.name, args.category)
    elif args.cmd == "convert":
        if args.unit == "kg":
            print(f"{args.weight} kg = {WeightConverter.kg_to_lb(args.weight)} lb")
        else:
            print(f"{args.weight} lb = {WeightConverter.lb_to_kg(args.weight)} kg")


if __name__ == "__main__":
    main()
