"""Kurikulum-Planer (Curriculum Overview) - Haupt-CLI.

Verwendung:
  python main.py setup                          Ersteinrichtung
  python main.py config show|edit               Konfiguration
  python main.py plan create <Klasse>           Neuen Semesterplan anlegen
  python main.py plan list                      Pläne auflisten
  python main.py block add <plan> ...           Woche sperren
  python main.py entry add <plan> ...           Pertemuan anlegen
  python main.py entry plot <plan> <entry> P S  Woche belegen/freigeben
  python main.py show <plan>                    CO-Raster anzeigen
  python main.py calendar <plan>                Kalenderansicht
  python main.py browse <plan>                  TUI-Browser
  python main.py validate <plan>                Plan prüfen
  python main.py export <plan>                  Excel + PDF exportieren
  python main.py generate                       Demo-Plan erzeugen
  python main.py migrate <datei.json>           Altes Format importieren
"""

import functools
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()
logger = logging.getLogger(__name__)

DATE_FORMATS = ["%Y-%m-%d", "%d.%m.%Y"]


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def _setup_logging(config) -> None:
    """Logging gemäß config.logging (Konsole über rich, optional Datei)."""
    from rich.logging import RichHandler

    handlers: list[logging.Handler] = [
        RichHandler(console=Console(stderr=True), show_path=False)
    ]
    if config.logging.file:
        Path(config.logging.file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.logging.file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handlers.append(file_handler)
    logging.basicConfig(
        level=config.logging.level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


def _load_config():
    """Lädt die Konfiguration (Defaults, wenn keine Datei existiert)."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        config = mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    _setup_logging(config)
    return mgr, config


def _repository(config):
    from data.repository import PlanRepository
    return PlanRepository(Path(config.storage.data_dir))


def _session(plan_id: str):
    from planner.session import EditorSession
    _, config = _load_config()
    return EditorSession(_repository(config), plan_id, config.planner), config


def _handle_errors(func):
    """Fachliche Fehler rot ausgeben und mit Exit-Code 1 beenden."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from pydantic import ValidationError as PydanticValidationError
        from rich.markup import escape
        from data.repository import PlanNotFound
        from planner.errors import PlannerError
        try:
            return func(*args, **kwargs)
        except (PlannerError, PlanNotFound) as e:
            logger.debug(f"{func.__name__}: {e!r}")
            console.print(f"[red]✗ {e}[/red]")
            sys.exit(1)
        except PydanticValidationError as e:
            # Eingaben außerhalb der Modellgrenzen (z.B. JP > 6)
            logger.debug(f"{func.__name__}: {e!r}")
            for err in e.errors():
                field = ".".join(str(part) for part in err["loc"])
                message = escape(f"{e.title}.{field}: {err['msg']}")
                console.print(f"[red]✗ {message}[/red]")
            sys.exit(1)
    return wrapper


def _parse_pair(text: str, name: str) -> tuple[int, int]:
    """ "3:2" → (3, 2)."""
    try:
        a, b = text.split(":")
        return int(a), int(b)
    except ValueError:
        raise click.BadParameter(f"'{text}' – erwartet Format A:B", param_hint=name) from None


def _as_date(value) -> Optional[date]:
    return value.date() if value is not None else None


def _print_plan_header(plan) -> None:
    console.print(Panel(
        plan.summary(),
        title=f"CO {plan.class_name} [dim]({plan.id})[/dim]",
        border_style="cyan",
    ))


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """Ersteinrichtung: Konfiguration anlegen und interaktiv anpassen."""
    from config.defaults import default_app_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]python main.py config edit[/bold] zum Bearbeiten."
        )
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    mgr.edit_interactive(default_app_config())
    console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
    console.print("Legen Sie jetzt mit [bold]python main.py plan create[/bold] einen Plan an.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder bearbeiten."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config()
    mgr.show(config)


@cmd_config.command("edit")
def config_edit():
    """Bearbeitet die Konfiguration interaktiv."""
    mgr, config = _load_config()
    mgr.edit_interactive(config)


# ─── PLAN ─────────────────────────────────────────────────────────────────────

@click.group("plan")
def cmd_plan():
    """Semesterpläne anlegen, auflisten, löschen."""


@cmd_plan.command("create")
@click.argument("class_name")
@click.option("--semester", "half", type=click.IntRange(1, 2), default=1,
              help="1 = Ganjil (Juli–Desember), 2 = Genap (Januari–Juni).")
@click.option("--year", default=lambda: str(date.today().year), help="Schuljahr.")
@_handle_errors
def plan_create(class_name: str, half: int, year: str):
    """Legt einen leeren Semesterplan an."""
    _, config = _load_config()
    plan = _repository(config).create(class_name, half, year)
    console.print(f"[green]✓[/green] Plan angelegt: [bold]{plan.id}[/bold]")
    _print_plan_header(plan)


@cmd_plan.command("list")
@click.option("--query", "-q", default="", help="Filter nach Klasse oder Jahr.")
def plan_list(query: str):
    """Listet alle Pläne (Jahr absteigend, dann Semester)."""
    _, config = _load_config()
    plans = _repository(config).list_plans(query)
    if not plans:
        console.print("[dim]Keine Pläne vorhanden.[/dim]")
        return

    table = Table(title="Curriculum Overview", box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Kelas")
    table.add_column("Semester")
    table.add_column("Tahun")
    table.add_column("Blok", justify="right")
    table.add_column("Pertemuan", justify="right")
    table.add_column("JP", justify="right")
    for p in plans:
        table.add_row(
            p.id, p.class_name, p.semester.label, p.year,
            str(len(p.blocked_weeks)), str(len(p.entries)), str(p.planned_jp),
        )
    console.print(table)


@cmd_plan.command("show")
@click.argument("plan_id")
@_handle_errors
def plan_show(plan_id: str):
    """Zeigt die Kennzahlen eines Plans."""
    _, config = _load_config()
    _print_plan_header(_repository(config).load(plan_id))


@cmd_plan.command("delete")
@click.argument("plan_id")
@click.option("--yes", is_flag=True, default=False, help="Ohne Rückfrage löschen.")
def plan_delete(plan_id: str, yes: bool):
    """Löscht einen Plan."""
    _, config = _load_config()
    if not yes and not click.confirm(f"Plan {plan_id} wirklich löschen?", default=False):
        return
    if _repository(config).delete(plan_id):
        console.print(f"[green]✓[/green] Plan {plan_id} gelöscht.")
    else:
        console.print(f"[yellow]Plan {plan_id} nicht gefunden.[/yellow]")


# ─── BLOCK ────────────────────────────────────────────────────────────────────

@click.group("block")
def cmd_block():
    """Gesperrte Wochen verwalten (Libur, Ujian, Kegiatan …)."""


@cmd_block.command("add")
@click.argument("plan_id")
@click.option("--period", "-p", type=click.IntRange(1, 6), required=True,
              help="Monat innerhalb des Halbjahres (1–6).")
@click.option("--week", "-w", type=click.IntRange(1, 5), required=True,
              help="Woche innerhalb des Monats.")
@click.option("--type", "block_type", default="holiday",
              type=click.Choice(["holiday", "religious", "exam", "activity", "preparation"]))
@click.option("--label", "-l", required=True, help='z.B. "Idul Fitri".')
@_handle_errors
def block_add(plan_id: str, period: int, week: int, block_type: str, label: str):
    """Sperrt eine Woche."""
    session, _ = _session(plan_id)
    plan = session.add_block(period, week, block_type, label)
    console.print(
        f"[green]✓[/green] {plan.months[period - 1]} Minggu {week} gesperrt: {label.strip()}"
    )


@cmd_block.command("remove")
@click.argument("plan_id")
@click.argument("block_id")
@_handle_errors
def block_remove(plan_id: str, block_id: str):
    """Gibt eine gesperrte Woche wieder frei."""
    session, _ = _session(plan_id)
    session.remove_block(block_id)
    console.print(f"[green]✓[/green] Block {block_id} entfernt.")


@cmd_block.command("list")
@click.argument("plan_id")
@_handle_errors
def block_list(plan_id: str):
    """Listet die gesperrten Wochen."""
    from export.tui_renderer import render_block_rows

    _, config = _load_config()
    plan = _repository(config).load(plan_id)
    rows = render_block_rows(plan)
    if not rows:
        console.print("[dim]Belum ada minggu yang di-block.[/dim]")
        return
    table = Table(title=f"Minggu di-block ({len(rows)})", box=box.ROUNDED)
    for header in ("ID", "Bulan", "Minggu", "Jenis", "Keterangan"):
        table.add_column(header)
    for row in rows:
        table.add_row(*row)
    console.print(table)


# ─── ENTRY ────────────────────────────────────────────────────────────────────

@click.group("entry")
def cmd_entry():
    """Pertemuan (Entries) anlegen, bearbeiten und plotten."""


@cmd_entry.command("add")
@click.argument("plan_id")
@click.option("--chapter", "-c", required=True, help="Chapter/Bab.")
@click.option("--topic", "-t", default="", help="Thema.")
@click.option("--meeting", "-m", "meetings", multiple=True,
              help="Meeting NR:JP, mehrfach möglich (Standard: Vorschlag).")
@click.option("--start", type=click.DateTime(DATE_FORMATS), default=None)
@click.option("--end", type=click.DateTime(DATE_FORMATS), default=None)
@click.option("--plot", "plots", multiple=True, help="Woche PERIODE:WOCHE, mehrfach möglich.")
@_handle_errors
def entry_add(plan_id: str, chapter: str, topic: str, meetings: tuple,
              start, end, plots: tuple):
    """Legt eine Pertemuan an (Nummer und Datum werden vorgeschlagen)."""
    from models.entry import DateRange, MeetingDetail
    from planner.allocator import toggle_plot
    from planner.entries import build_entry

    session, _ = _session(plan_id)
    draft = session.draft()

    if meetings:
        details = [MeetingDetail(number=n, jp=jp)
                   for n, jp in (_parse_pair(m, "--meeting") for m in meetings)]
    else:
        details = [MeetingDetail(number=draft.meeting_number, jp=draft.jp)]

    start, end = _as_date(start) or draft.start, _as_date(end) or draft.end
    if start is not None and end is None:
        end = start
    date_range = DateRange(start=start, end=end) if start and end else None

    entry = build_entry(chapter=chapter, topic=topic, meeting_details=details,
                        date_range=date_range)
    for text in plots:
        period, slot = _parse_pair(text, "--plot")
        toggled = toggle_plot(entry, period, slot, session.plan)
        if toggled is entry:
            console.print(f"[yellow]Woche {period}:{slot} nicht verfügbar – übersprungen.[/yellow]")
        entry = toggled

    plan = session.save_entry(entry)
    saved = plan.entry_by_id(entry.id)
    console.print(
        f"[green]✓[/green] {saved.meeting_no} angelegt ({saved.duration} JP) "
        f"[dim]{saved.id}[/dim]"
    )


@cmd_entry.command("edit")
@click.argument("plan_id")
@click.argument("entry_id")
@click.option("--chapter", "-c", default=None)
@click.option("--topic", "-t", default=None)
@click.option("--start", type=click.DateTime(DATE_FORMATS), default=None)
@click.option("--end", type=click.DateTime(DATE_FORMATS), default=None)
@_handle_errors
def entry_edit(plan_id: str, entry_id: str, chapter, topic, start, end):
    """Ändert Chapter, Thema oder Datum einer Pertemuan."""
    from models.entry import DateRange
    from planner.entries import build_entry
    from planner.errors import EntryNotFound

    session, _ = _session(plan_id)
    entry = session.plan.entry_by_id(entry_id)
    if entry is None:
        raise EntryNotFound(entry_id)

    date_range = entry.date_range
    if start is not None or end is not None:
        new_start = _as_date(start) or (date_range.start if date_range else None)
        new_end = _as_date(end) or (date_range.end if date_range else new_start)
        date_range = DateRange(start=new_start, end=new_end) if new_start else None

    updated = build_entry(
        chapter=chapter if chapter is not None else entry.chapter,
        topic=topic if topic is not None else entry.topic,
        meeting_details=entry.meeting_details,
        date_range=date_range,
        plot_weeks=entry.plot_weeks,
        entry_id=entry.id,
    )
    session.save_entry(updated)
    console.print(f"[green]✓[/green] {updated.meeting_no} gespeichert.")


@cmd_entry.command("remove")
@click.argument("plan_id")
@click.argument("entry_id")
@_handle_errors
def entry_remove(plan_id: str, entry_id: str):
    """Löscht eine Pertemuan."""
    session, _ = _session(plan_id)
    session.delete_entry(entry_id)
    console.print(f"[green]✓[/green] Entry {entry_id} gelöscht.")


@cmd_entry.command("plot")
@click.argument("plan_id")
@click.argument("entry_id")
@click.argument("period", type=click.IntRange(1, 6))
@click.argument("week", type=click.IntRange(1, 5))
@_handle_errors
def entry_plot(plan_id: str, entry_id: str, period: int, week: int):
    """Belegt eine Woche für die Pertemuan oder gibt sie frei."""
    session, _ = _session(plan_id)
    before = session.plan.entry_by_id(entry_id)
    after = session.toggle(entry_id, period, week)
    if after is before:
        console.print(f"[yellow]Woche {period}:{week} ist gesperrt, belegt oder ungültig.[/yellow]")
        return
    weeks = ", ".join(f"{p.period}:{p.slot}={p.jp}JP" for p in after.plot_weeks) or "—"
    console.print(f"[green]✓[/green] {after.meeting_no}: {weeks}")


@cmd_entry.command("meeting-add")
@click.argument("plan_id")
@click.argument("entry_id")
@click.option("--jp", type=click.IntRange(1, 6), default=None, help="JP des neuen Meetings.")
@_handle_errors
def entry_meeting_add(plan_id: str, entry_id: str, jp: Optional[int]):
    """Hängt ein weiteres Meeting an (Nummer = höchste + 1)."""
    from planner.errors import EntryNotFound
    from planner.meetings import add_meeting_detail

    session, config = _session(plan_id)
    entry = session.plan.entry_by_id(entry_id)
    if entry is None:
        raise EntryNotFound(entry_id)
    updated = add_meeting_detail(entry, jp or config.planner.default_meeting_jp)
    plan = session.save_entry(updated)
    saved = plan.entry_by_id(entry_id)
    console.print(f"[green]✓[/green] {saved.meeting_no} ({saved.duration} JP)")


@cmd_entry.command("meeting-remove")
@click.argument("plan_id")
@click.argument("entry_id")
@click.argument("detail_id")
@_handle_errors
def entry_meeting_remove(plan_id: str, entry_id: str, detail_id: str):
    """Entfernt ein Meeting (das letzte bleibt immer erhalten)."""
    from planner.errors import EntryNotFound
    from planner.meetings import remove_meeting_detail

    session, _ = _session(plan_id)
    entry = session.plan.entry_by_id(entry_id)
    if entry is None:
        raise EntryNotFound(entry_id)
    updated = remove_meeting_detail(entry, detail_id)
    if updated is entry:
        console.print("[yellow]Nichts entfernt (letztes Meeting oder unbekannte ID).[/yellow]")
        return
    session.save_entry(updated)
    console.print(f"[green]✓[/green] {updated.meeting_no} ({updated.duration} JP)")


@cmd_entry.command("suggest")
@click.argument("plan_id")
@_handle_errors
def entry_suggest(plan_id: str):
    """Zeigt die Vorbelegung für die nächste Pertemuan."""
    from export.helpers import format_date_range
    from models.entry import DateRange

    session, _ = _session(plan_id)
    draft = session.draft()
    dates = "—"
    if draft.start is not None and draft.end is not None:
        dates = format_date_range(DateRange(start=draft.start, end=draft.end))
    table = Table(title="Tambah Pertemuan", box=box.ROUNDED, show_header=False)
    table.add_column("Feld", style="bold")
    table.add_column("Vorschlag")
    table.add_row("Meeting", f"P{draft.meeting_number}")
    table.add_row("JP", str(draft.jp))
    table.add_row("Tanggal", dates)
    table.add_row("Chapter", ", ".join(draft.chapters) or "—")
    console.print(table)


# ─── ANZEIGE ──────────────────────────────────────────────────────────────────

@click.command("show")
@click.argument("plan_id")
@_handle_errors
def cmd_show(plan_id: str):
    """Zeigt das CO-Raster im Terminal an."""
    from export.tui_renderer import render_plan_rows

    _, config = _load_config()
    plan = _repository(config).load(plan_id)
    header, rows = render_plan_rows(plan)

    table = Table(
        title=f"CO {plan.class_name} – {plan.semester.label} {plan.year}",
        box=box.SIMPLE_HEAD,
        show_lines=False,
    )
    for i, name in enumerate(header):
        table.add_column(name, justify="left" if i < 5 else "center", no_wrap=i >= 5)
    for row in rows:
        table.add_row(*row)
    console.print(table)
    console.print(
        f"[dim]ME: {plan.available_weeks}/{plan.total_weeks} Wochen | "
        f"{plan.planned_jp} JP geplant[/dim]"
    )


@click.command("calendar")
@click.argument("plan_id")
@_handle_errors
def cmd_calendar(plan_id: str):
    """Kalenderansicht: pro Monat die Wochen mit Block oder Pertemuan."""
    from export.tui_renderer import render_calendar_rows

    _, config = _load_config()
    plan = _repository(config).load(plan_id)
    table = Table(title=f"Kalender {plan.semester.label} {plan.year}", box=box.ROUNDED,
                  show_lines=True)
    table.add_column("Bulan", style="bold")
    for w in range(1, 6):
        table.add_column(f"M{w}", justify="center")
    for row in render_calendar_rows(plan, config.export.label_max_chars):
        table.add_row(*row)
    console.print(table)


@click.command("browse")
@click.argument("plan_id")
@_handle_errors
def cmd_browse(plan_id: str):
    """Öffnet den Plan im TUI-Browser."""
    from export.tui_browser import PlanBrowserApp

    _, config = _load_config()
    plan = _repository(config).load(plan_id)
    PlanBrowserApp(plan, config).run()


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.argument("plan_id")
@_handle_errors
def cmd_validate(plan_id: str):
    """Prüft einen gespeicherten Plan auf Konsistenz."""
    from analysis.plan_validator import PlanValidator

    _, config = _load_config()
    plan = _repository(config).load(plan_id)
    report = PlanValidator().validate(plan)
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@click.argument("plan_id")
@click.option("--format", "fmt", type=click.Choice(["excel", "pdf", "all"]), default="all")
@click.option("--output-dir", "-o", default=None, help="Zielverzeichnis (Standard: Config).")
@_handle_errors
def cmd_export(plan_id: str, fmt: str, output_dir: Optional[str]):
    """Exportiert den Plan als Excel und/oder PDF."""
    from export import ExcelExporter, PdfExporter
    from export.helpers import export_filename

    _, config = _load_config()
    plan = _repository(config).load(plan_id)
    out = Path(output_dir or config.export.output_dir)

    if fmt in ("excel", "all"):
        path = out / export_filename(plan, "xlsx")
        ExcelExporter(plan, config).export(path)
        console.print(f"[green]✓[/green] Excel: {path}")
    if fmt in ("pdf", "all"):
        path = out / export_filename(plan, "pdf")
        PdfExporter(plan, config).export(path)
        console.print(f"[green]✓[/green] PDF:   {path}")


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--class", "class_name", default="VII A", help="Klassenname.")
@click.option("--semester", "half", type=click.IntRange(1, 2), default=1)
@click.option("--year", default=lambda: str(date.today().year))
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@_handle_errors
def cmd_generate(class_name: str, half: int, year: str, seed: int):
    """Erzeugt einen Demo-Plan mit Sperrwochen und Pertemuan."""
    from data.sample_data import SamplePlanGenerator

    _, config = _load_config()
    gen = SamplePlanGenerator(class_name, half, year, seed=seed)
    plan = gen.generate()
    _repository(config).add(plan)
    gen.print_summary(plan)
    console.print(f"[green]✓[/green] Demo-Plan gespeichert: [bold]{plan.id}[/bold]")


# ─── MIGRATE ──────────────────────────────────────────────────────────────────

@click.command("migrate")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@_handle_errors
def cmd_migrate(datei: Path):
    """Importiert ein Dokument im alten Format (camelCase, Monat/Woche)."""
    from data.legacy_import import import_legacy_plan

    _, config = _load_config()
    try:
        plan, report = import_legacy_plan(datei)
    except ValueError as e:
        console.print(f"[red]Import fehlgeschlagen: {e}[/red]")
        sys.exit(1)
    _repository(config).add(plan)
    report.print_rich()
    console.print(f"[green]✓[/green] Plan gespeichert: [bold]{plan.id}[/bold]")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
def cli():
    """Kurikulum-Planer: Curriculum Overview pro Klasse und Semester.

    Starten Sie mit: python main.py plan create "VII A"
    """


def main():
    """Einstiegspunkt. Startet die Ersteinrichtung beim ersten Aufruf ohne Argumente."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Kurikulum-Planer![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Die Ersteinrichtung wird jetzt gestartet...",
            border_style="cyan",
        ))
        sys.argv.append("setup")

    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_plan)
cli.add_command(cmd_block)
cli.add_command(cmd_entry)
cli.add_command(cmd_show)
cli.add_command(cmd_calendar)
cli.add_command(cmd_browse)
cli.add_command(cmd_validate)
cli.add_command(cmd_export)
cli.add_command(cmd_generate)
cli.add_command(cmd_migrate)


if __name__ == "__main__":
    main()
