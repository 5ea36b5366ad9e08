"""Textual TUI Browser für den Semesterplan.

Startet mit: python main.py browse <plan_id>
Navigation: j/k oder ↑↓, Enter=Auswahl, n=Neue Pertemuan, q=Beenden, ?=Hilfe
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from planner.session import ADD_ENTRY, EditorCommands

if TYPE_CHECKING:
    from config.schema import AppConfig
    from models.plan import CurriculumPlan

# (Schlüssel, Anzeigename) der Ansichten in der linken Liste
VIEWS: list[tuple[str, str]] = [
    ("co", "Curriculum Overview"),
    ("blocks", "Minggu di-block"),
    ("entries", "Pertemuan"),
    ("calendar", "Kalender"),
]


def draft_message(plan: "CurriculumPlan", config: Optional["AppConfig"] = None) -> str:
    """Text der Formular-Vorbelegung für eine neue Pertemuan."""
    from planner.entries import new_entry_template
    from export.helpers import format_date_range
    from models.entry import DateRange

    if config is None:
        draft = new_entry_template(plan)
    else:
        pc = config.planner
        draft = new_entry_template(
            plan,
            default_jp=pc.default_meeting_jp,
            max_steps=pc.suggest_max_steps,
            span_days=pc.entry_span_days,
        )
    dates = "—"
    if draft.start is not None and draft.end is not None:
        dates = format_date_range(DateRange(start=draft.start, end=draft.end))
    return f"P{draft.meeting_number} | {draft.jp} JP | Tanggal: {dates}"


class PlanBrowserApp:
    """Textual TUI App für einen Semesterplan.

    Lazy-importiert textual um Startzeit zu minimieren. commands wird von
    allen Ansichten geteilt: die Tastenbelegung 'n' stellt eine Anfrage
    ein, die Entry-Ansicht holt sie beim Anzeigen ab.
    """

    def __init__(
        self,
        plan: "CurriculumPlan",
        config: Optional["AppConfig"] = None,
        commands: Optional[EditorCommands] = None,
    ) -> None:
        self.plan = plan
        self.config = config
        self.commands = commands if commands is not None else EditorCommands()

    def run(self) -> None:
        """Startet die TUI Anwendung."""
        try:
            from textual.app import App, ComposeResult
            from textual.widgets import (
                Header, Footer, ListView, ListItem, DataTable, Label,
            )
            from textual.containers import Horizontal
            from textual.binding import Binding
        except ImportError:
            raise ImportError(
                "textual nicht installiert. Bitte: pip install textual>=0.60"
            )

        plan = self.plan
        config = self.config
        commands = self.commands
        label_max = config.export.label_max_chars if config is not None else 12

        class _App(App):
            CSS = """
            ListView { width: 28; border: solid $primary; }
            DataTable { border: solid $secondary; }
            """
            BINDINGS = [
                Binding("q", "quit", "Beenden"),
                Binding("escape", "quit", "Beenden"),
                Binding("n", "request_add_entry", "Neue Pertemuan"),
                Binding("?", "show_help", "Hilfe"),
            ]

            def compose(self) -> ComposeResult:
                yield Header()
                with Horizontal():
                    yield ListView(
                        *[ListItem(Label(title)) for _, title in VIEWS],
                        id="view_list",
                    )
                    yield DataTable(id="plan_table")
                yield Footer()

            def on_mount(self) -> None:
                self.title = f"CO {plan.class_name} – {plan.semester.label} {plan.year}"
                self._show_view("co")

            def on_list_view_selected(self, event: ListView.Selected) -> None:
                idx = event.list_view.index
                if idx is not None and 0 <= idx < len(VIEWS):
                    self._show_view(VIEWS[idx][0])

            def _show_view(self, key: str) -> None:
                from export.tui_renderer import (
                    render_block_rows, render_calendar_rows,
                    render_entry_rows, render_plan_rows,
                )

                table = self.query_one("#plan_table", DataTable)
                table.clear(columns=True)

                if key == "co":
                    header, rows = render_plan_rows(plan)
                elif key == "blocks":
                    header = ["ID", "Bulan", "Minggu", "Jenis", "Keterangan"]
                    rows = render_block_rows(plan)
                elif key == "entries":
                    header = ["ID", "No", "Chapter/Bab", "Date", "TOPIC", "TIME", "Minggu"]
                    rows = render_entry_rows(plan)
                    if commands.take(ADD_ENTRY):
                        self.notify(draft_message(plan, config), title="Tambah Pertemuan")
                else:
                    header = ["Bulan", "M1", "M2", "M3", "M4", "M5"]
                    rows = render_calendar_rows(plan, label_max)

                table.add_columns(*header)
                for row in rows:
                    table.add_row(*row)

            def action_request_add_entry(self) -> None:
                commands.request_add_entry()
                self.query_one("#view_list", ListView).index = 2
                self._show_view("entries")

            def action_show_help(self) -> None:
                self.notify(
                    "j/k: Navigation | Enter: Auswählen | n: Neue Pertemuan | q: Beenden",
                    title="Hilfe",
                )

        _App().run()
