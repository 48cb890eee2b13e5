import datetime
import logging
import os
from typing import Optional

import pandas as pd
import streamlit as st

from algorithms import (
    CalendarSystem,
    MonthGridBuilder,
    WeightConverter,
    group_by_day,
    is_in_month,
    shift_month,
)
from catalog_store import CATEGORIES, ExerciseCatalogStore
from db import (
    WorkoutRepository,
    ExerciseRepository,
    SetRepository,
    SettingsRepository,
)
from localization import translator

_ = translator.gettext

log = logging.getLogger("fitlog.ui")


class FitnessApp:
    """Streamlit application for workout logging."""

    # widget key prefixes of the calendar and workout list editors
    EDITOR_PREFIXES = ("cal", "list")

    def __init__(
        self,
        db_path: str = "workout.db",
        yaml_path: str = "settings.yaml",
        catalog_path: Optional[str] = None,
    ) -> None:
        self.settings_repo = SettingsRepository(db_path, yaml_path)
        self.first_weekday = self.settings_repo.get_int("first_weekday", 2)
        self.weight_unit = self.settings_repo.get_text("weight_unit", "kg")
        self.language = self.settings_repo.get_text("language", "en")
        translator.set_language(self.language)
        self.calendar_system = CalendarSystem(self.language)
        self.workouts = WorkoutRepository(db_path)
        self.exercises = ExerciseRepository(db_path)
        self.sets = SetRepository(db_path)
        self.catalog = ExerciseCatalogStore(catalog_path)
        self.catalog.open()
        self._configure_page()
        self._init_state()

    def _configure_page(self) -> None:
        if st.session_state.get("layout_set"):
            return
        st.set_page_config(page_title="Fitness Logger", layout="centered")
        st.session_state.layout_set = True

    def _init_state(self) -> None:
        today = datetime.date.today()
        for key, default in {
            "month_anchor": today,
            "selected_day": today,
            "selected_workout": None,
            "draft_exercises": [],
        }.items():
            if key not in st.session_state:
                st.session_state[key] = default

    # Calendar

    def _calendar_tab(self) -> None:
        self._month_header()
        self._calendar_grid()
        st.divider()
        self._day_workouts()

    def _month_header(self) -> None:
        anchor: datetime.date = st.session_state.month_anchor
        cols = st.columns([1, 4, 1])
        with cols[0]:
            if st.button("◀", key="prev_month"):
                st.session_state.month_anchor = shift_month(anchor, -1)
                st.rerun()
        with cols[1]:
            st.subheader(anchor.strftime("%B %Y"))
        with cols[2]:
            if st.button("▶", key="next_month"):
                st.session_state.month_anchor = shift_month(anchor, 1)
                st.rerun()

    def _calendar_grid(self) -> None:
        anchor: datetime.date = st.session_state.month_anchor
        selected: datetime.date = st.session_state.selected_day
        days = MonthGridBuilder.build(anchor, self.first_weekday, self.calendar_system)
        if not days:
            st.info("Calendar unavailable for this month")
            return
        rows = self.workouts.fetch_all_workouts(days[0].isoformat(), days[-1].isoformat())
        by_day = group_by_day(rows, lambda r: r[1])
        header = st.columns(7)
        for col, symbol in zip(
            header, MonthGridBuilder.weekday_symbols(self.first_weekday, self.calendar_system)
        ):
            col.caption(symbol)
        for start in range(0, len(days), 7):
            cols = st.columns(7)
            for col, day in zip(cols, days[start:start + 7]):
                in_month = is_in_month(day, anchor)
                label = str(day.day)
                if by_day.get(day):
                    label += " •"
                with col:
                    if st.button(
                        label,
                        key=f"day_{day.isoformat()}",
                        disabled=not in_month,
                        type="primary" if day == selected else "secondary",
                        width="stretch",
                    ):
                        st.session_state.selected_day = day
                        st.rerun()

    def _day_workouts(self) -> None:
        day: datetime.date = st.session_state.selected_day
        st.markdown(f"**{day.strftime('%A, %d %B %Y')}**")
        if st.button(_("Start workout"), key="start_workout", type="primary"):
            wid = self.workouts.create(day, _("Workout"))
            st.session_state.selected_workout = wid
            st.rerun()
        rows = self.workouts.fetch_for_day(day)
        if not rows:
            st.caption(_("No workouts."))
            return
        for wid, date, title in rows:
            cols = st.columns([4, 1, 1])
            time_str = datetime.datetime.fromisoformat(date).strftime("%H:%M")
            cols[0].markdown(f"**{title or _('Workout')}**  \n{time_str}")
            if cols[1].button("Open", key=f"open_{wid}"):
                st.session_state.selected_workout = wid
                st.rerun()
            if cols[2].button(_("Delete"), key=f"cal_del_{wid}"):
                self.workouts.delete(wid)
                if st.session_state.selected_workout == wid:
                    st.session_state.selected_workout = None
                st.rerun()
        if st.session_state.selected_workout is not None:
            with st.expander(_("Workout"), expanded=True):
                self._workout_detail(st.session_state.selected_workout, prefix="cal")

    # Workouts

    def _workouts_tab(self) -> None:
        with st.expander("New Workout", expanded=False):
            self._new_workout_form()
        rows = self.workouts.fetch_all_workouts()
        if not rows:
            st.info(_("No workouts."))
            return
        records = []
        for wid, date, title in rows:
            summary = self.sets.workout_summary(wid)
            records.append(
                {
                    "id": wid,
                    "date": pd.to_datetime(date),
                    "title": title,
                    "exercises": summary["exercises"],
                    "sets": summary["sets"],
                    "volume": summary["volume"],
                }
            )
        df = pd.DataFrame(records).set_index("id")
        st.dataframe(df, width="stretch")
        options = [wid for wid, *_rest in rows]
        current = st.session_state.selected_workout
        index = options.index(current) if current in options else 0
        wid = st.selectbox(
            "Workout",
            options,
            index=index,
            format_func=lambda i: next(f"{d[:16]} {t}" for w, d, t in rows if w == i),
            key="workout_select",
        )
        if st.button(_("Delete"), key="delete_workout"):
            self.workouts.delete(wid)
            st.session_state.selected_workout = None
            st.rerun()
        self._workout_detail(wid, prefix="list")

    def _new_workout_form(self) -> None:
        title = st.text_input(_("Title"), placeholder="Push", key="new_title")
        date = st.date_input(_("Date"), datetime.date.today(), key="new_date")
        time = st.time_input("Time", datetime.time(hour=datetime.datetime.now().hour), key="new_time")
        drafts: list = st.session_state.draft_exercises
        for idx, draft in enumerate(drafts):
            st.markdown(f"**{draft['name'] or 'Choose exercise…'}**")
            picked = self._exercise_picker(f"draft_{idx}")
            if picked:
                draft["name"] = picked
                st.rerun()
            edited = st.data_editor(
                pd.DataFrame(draft["sets"], columns=["weight_kg", "reps"]),
                num_rows="dynamic",
                key=f"draft_sets_{idx}",
            )
            draft["sets"] = [
                (float(w), int(r))
                for w, r in edited.dropna().itertuples(index=False)
            ]
        if st.button(_("Add exercise"), key="draft_add_exercise"):
            drafts.append({"name": "", "sets": [(0.0, SetRepository.DEFAULT_REPS)]})
            st.rerun()
        disabled = not title.strip() or not drafts
        if st.button(_("Save"), key="draft_save", disabled=disabled):
            try:
                wid = self.workouts.create_full(
                    datetime.datetime.combine(date, time), title, drafts
                )
            except ValueError as e:
                st.error(str(e))
                return
            st.session_state.draft_exercises = []
            st.session_state.selected_workout = wid
            st.success("Workout saved")
            st.rerun()

    def _workout_detail(self, workout_id: int, prefix: str) -> None:
        try:
            wid, date, title = self.workouts.fetch_detail(workout_id)
        except ValueError as e:
            st.warning(str(e))
            st.session_state.selected_workout = None
            return
        when = datetime.datetime.fromisoformat(date)
        st.text_input(
            _("Title"),
            title,
            key=f"{prefix}_title_{wid}",
            on_change=self._update_title,
            args=(prefix, wid),
        )
        st.date_input(
            _("Date"),
            when.date(),
            key=f"{prefix}_date_{wid}",
            on_change=self._update_date,
            args=(prefix, wid),
        )
        st.time_input(
            "Time",
            when.time(),
            key=f"{prefix}_time_{wid}",
            on_change=self._update_date,
            args=(prefix, wid),
        )
        with st.expander(_("Add exercise")):
            picked = self._exercise_picker(f"{prefix}_add_{wid}")
            if picked:
                try:
                    self.exercises.add(wid, picked)
                except ValueError as e:
                    st.error(str(e))
                else:
                    st.rerun()
        for ex_id, name, _group in self.exercises.fetch_for_workout(wid):
            self._exercise_section(ex_id, name, prefix)

    def _exercise_section(self, exercise_id: int, name: str, prefix: str) -> None:
        st.markdown(f"#### {name or _('Exercise')}")
        with st.expander(_("Change")):
            picked = self._exercise_picker(f"{prefix}_change_{exercise_id}")
            if picked:
                self.exercises.update_name(exercise_id, picked)
                st.rerun()
        for set_id, weight, reps in self.sets.fetch_for_exercise(exercise_id):
            cols = st.columns([2, 2, 1])
            shown = weight if self.weight_unit == "kg" else WeightConverter.kg_to_lb(weight)
            cols[0].number_input(
                self.weight_unit,
                min_value=0.0,
                value=float(shown),
                step=0.5,
                key=f"{prefix}_w_{set_id}",
                on_change=self._update_set,
                args=(prefix, set_id),
            )
            cols[1].number_input(
                _("Reps"),
                min_value=SetRepository.MIN_REPS,
                max_value=SetRepository.MAX_REPS,
                value=int(reps),
                key=f"{prefix}_r_{set_id}",
                on_change=self._update_set,
                args=(prefix, set_id),
            )
            if cols[2].button("✕", key=f"{prefix}_del_set_{set_id}"):
                self.sets.remove(set_id)
                st.rerun()
        cols = st.columns(2)
        if cols[0].button(_("Add set"), key=f"{prefix}_add_set_{exercise_id}"):
            self.sets.add(exercise_id)
            st.rerun()
        if cols[1].button(_("Delete"), key=f"{prefix}_del_ex_{exercise_id}"):
            self.exercises.remove(exercise_id)
            st.rerun()

    def _reset_mirrors(self, prefix: str, *names: str) -> None:
        """Drop widget state of other editors showing the same row."""
        for other in self.EDITOR_PREFIXES:
            if other == prefix:
                continue
            for name in names:
                st.session_state.pop(f"{other}_{name}", None)

    def _update_title(self, prefix: str, workout_id: int) -> None:
        val = st.session_state.get(f"{prefix}_title_{workout_id}", "")
        self.workouts.set_title(workout_id, val)
        self._reset_mirrors(prefix, f"title_{workout_id}")
        if val != val.strip() or not val:
            # stored title differs from the typed one
            st.session_state.pop(f"{prefix}_title_{workout_id}", None)

    def _update_date(self, prefix: str, workout_id: int) -> None:
        day = st.session_state.get(f"{prefix}_date_{workout_id}")
        time = st.session_state.get(f"{prefix}_time_{workout_id}")
        if day is None or time is None:
            return
        self.workouts.set_date(workout_id, datetime.datetime.combine(day, time))
        self._reset_mirrors(prefix, f"date_{workout_id}", f"time_{workout_id}")

    def _update_set(self, prefix: str, set_id: int) -> None:
        weight = st.session_state.get(f"{prefix}_w_{set_id}")
        reps = st.session_state.get(f"{prefix}_r_{set_id}")
        try:
            self.sets.update(
                set_id, WeightConverter.to_kg(weight, self.weight_unit), int(reps)
            )
        except ValueError as e:
            st.error(str(e))
            return
        self._reset_mirrors(prefix, f"w_{set_id}", f"r_{set_id}")

    def _exercise_picker(self, key: str) -> Optional[str]:
        """Render the exercise picker and return the picked name."""
        query = st.text_input(_("Search exercises"), key=f"{key}_query")
        category = st.selectbox(_("Muscle group"), CATEGORIES, key=f"{key}_category")
        results = self.catalog.search(query, category)
        names = [name for name, _cat in results]
        choice = st.selectbox(
            _("Choose exercise"),
            [""] + names,
            format_func=lambda n: n or "—",
            key=f"{key}_choice",
        )
        if choice and st.button("Pick", key=f"{key}_pick"):
            return choice
        custom = st.text_input("Type your own", key=f"{key}_custom")
        if st.button(_("Use custom name"), key=f"{key}_use_custom", disabled=not custom.strip()):
            self.catalog.insert_custom(custom, category)
            return custom.strip()
        return None

    # Settings

    def _settings_tab(self) -> None:
        weekday_names = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
        first = st.selectbox(
            "First day of week",
            list(range(1, 8)),
            index=self.first_weekday - 1,
            format_func=lambda i: weekday_names[i - 1],
            key="settings_first_weekday",
        )
        unit = st.selectbox(
            "Weight unit", ["kg", "lb"], index=["kg", "lb"].index(self.weight_unit), key="settings_unit"
        )
        lang = st.selectbox(
            _("Language"), ["en", "sl"], index=["en", "sl"].index(self.language), key="settings_language"
        )
        if st.button(_("Save"), key="settings_save"):
            try:
                self.settings_repo.set_int("first_weekday", first)
                self.settings_repo.set_text("weight_unit", unit)
                self.settings_repo.set_text("language", lang)
            except ValueError as e:
                st.error(str(e))
                return
            st.success("Settings saved")
            st.rerun()

    def run(self) -> None:
        st.title("Workout Logger")
        if not self.catalog.is_ready:
            st.caption("Exercise catalog unavailable")
        calendar_tab, workouts_tab, settings_tab = st.tabs(
            [_("Calendar"), _("Workouts"), _("Settings")]
        )
        with calendar_tab:
            self._calendar_tab()
        with workouts_tab:
            self._workouts_tab()
        with settings_tab:
            self._settings_tab()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    db_path = os.environ.get("DB_PATH", "workout.db")
    yaml_path = os.environ.get("YAML_PATH", "settings.yaml")
    catalog_path = os.environ.get("CATALOG_PATH")
    FitnessApp(db_path=db_path, yaml_path=yaml_path, catalog_path=catalog_path).run()
