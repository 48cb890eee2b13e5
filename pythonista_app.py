import os
import sys


def grid_rows(cells: list) -> list[list]:
    """Split month grid cells into week rows of seven."""
    return [cells[i:i + 7] for i in range(0, len(cells), 7)]


class EnvironmentDetector:
    @staticmethod
    def is_pythonista() -> bool:
        """Return True when Pythonista's ``ui`` module can be used."""
        try:
            import ui  # type: ignore
        except ImportError:
            return False
        return hasattr(ui, "View")


class RestClient:
    """Minimal REST client using urllib for Pythonista."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    def _request(self, method: str, path: str, params: dict | None = None):
        import json
        from urllib import request, parse

        url = f"{self.base_url}{path}"
        data = None
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        if params:
            url = f"{url}?{parse.urlencode(params)}"
        if method.upper() in ("POST", "PUT"):
            # endpoint arguments travel in the query string
            data = b""
        req = request.Request(url, data=data, method=method.upper(), headers=headers)
        with request.urlopen(req) as resp:
            body = resp.read().decode()
        try:
            return json.loads(body)
        except ValueError:
            return {"text": body}

    def get(self, path: str, params: dict | None = None):
        return self._request("GET", path, params)

    def post(self, path: str, params: dict | None = None):
        return self._request("POST", path, params)

    def delete(self, path: str, params: dict | None = None):
        return self._request("DELETE", path, params)


class PythonistaApp:
    """Pythonista GUI with calendar and workout list tabs."""

    ROW_HEIGHT = 40

    def __init__(self, api_url: str = "http://localhost:8000") -> None:
        import ui

        self.client = RestClient(api_url)
        self.month: dict = {}
        self.view = ui.View(name="Fitness Logger")
        self.view.background_color = "white"
        self.tabs = ui.SegmentedControl(items=["Calendar", "Workouts"])
        self.tabs.frame = (0, 0, self.view.width, 32)
        self.tabs.flex = "W"
        self.tabs.action = self._tab_changed
        self.view.add_subview(self.tabs)
        self.content = ui.View(frame=(0, 32, self.view.width, self.view.height - 32))
        self.content.flex = "WH"
        self.view.add_subview(self.content)
        self._tab_changed(self.tabs)

    def _tab_changed(self, sender) -> None:  # noqa: D401
        """Handle tab switch."""
        for sub in list(self.content.subviews):
            sub.remove_from_superview()
        if sender.selected_index == 1:
            self._workouts_tab()
        else:
            self._calendar_tab()

    def _calendar_tab(self, anchor: str | None = None) -> None:
        import ui

        params = {"anchor": anchor} if anchor else None
        self.month = self.client.get("/calendar/month", params)
        view = ui.View(frame=self.content.bounds, flex="WH")
        width = self.content.width / 7
        header = ui.Label(text=self.month.get("anchor", "")[:7], frame=(0, 0, self.content.width, 24))
        header.alignment = ui.ALIGN_CENTER
        view.add_subview(header)
        for col, symbol in enumerate(self.month.get("weekday_symbols", [])):
            lbl = ui.Label(text=symbol, frame=(col * width, 24, width, 20))
            lbl.alignment = ui.ALIGN_CENTER
            view.add_subview(lbl)
        for row, week in enumerate(grid_rows(self.month.get("days", []))):
            for col, cell in enumerate(week):
                title = str(cell["day"]) + (" •" if cell["workout_count"] else "")
                btn = ui.Button(title=title)
                btn.frame = (col * width, 48 + row * self.ROW_HEIGHT, width, self.ROW_HEIGHT)
                btn.enabled = cell["in_month"]
                btn.name = cell["date"]
                btn.action = self._day_tapped
                view.add_subview(btn)
        self.content.add_subview(view)

    def _day_tapped(self, sender) -> None:
        import ui

        rows = self.client.get(f"/calendar/day/{sender.name}")
        if not rows:
            choice = ui.alert(sender.name, "No workouts.", "Start workout")
            if choice == 1:
                self.client.post("/workouts", {"date": sender.name, "title": "Workout"})
                self._tab_changed(self.tabs)
            return
        text = "\n".join(f"{w['date'][11:16]} {w['title']}" for w in rows)
        ui.alert(sender.name, text, "OK", hide_cancel_button=True)

    def _workouts_tab(self) -> None:
        import ui

        rows = self.client.get("/workouts")
        table = ui.TableView(frame=self.content.bounds, flex="WH")
        table.data_source = ui.ListDataSource(
            [f"{w['date'][:16].replace('T', ' ')}  {w['title']}" for w in rows]
        )
        self.content.add_subview(table)

    def run(self) -> None:
        import ui

        self.view.present(style="fullscreen")
        ui.run()


if __name__ == "__main__":
    if not EnvironmentDetector.is_pythonista():
        sys.exit("The mobile client needs Pythonista; use streamlit_app.py on the desktop")
    PythonistaApp(os.environ.get("FITLOG_API_URL", "http://localhost:8000")).run()
