"""Import von Plänen im alten Dokumentformat (camelCase, Monat/Woche).

Altes Format (ein Dokument pro Curriculum Overview):

    {"className": "VII A", "semester": 2, "year": "2025",
     "blockedWeeks": [{"id": "...", "month": 3, "week": 2, "type": "religious",
                       "label": "Idul Fitri", "color": "#FFD700"}],
     "entries": [{"meetingNo": "P1/P2", "chapter": "Bab 1", "topic": "...",
                  "dateRange": "2025-01-06~2025-01-10", "duration": 4,
                  "plotWeeks": [{"month": 1, "week": 2, "jp": 4}],
                  "meetingDetails": [{"id": "...", "number": 1, "jp": 2}]}]}

month entspricht der Periode (1–6 innerhalb des Halbjahres), week dem Slot.
Fehlen meetingDetails, werden die Nummern aus meetingNo gelesen und die
alte duration darauf verteilt. Die JP pro Woche werden immer neu verteilt.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

from config.defaults import DEFAULT_MEETING_JP, MAX_MEETING_JP, MIN_MEETING_JP
from models.blocked_week import BlockType, BlockedWeek
from models.entry import DateRange, MeetingDetail, PlotWeek
from models.plan import CurriculumPlan
from planner.allocator import check_placement
from planner.blocks import is_blocked
from planner.calendar_grid import is_in_grid
from planner.entries import add_entry, build_entry
from planner.errors import PlacementConflict, ValidationError
from planner.meetings import parse_meeting_numbers

logger = logging.getLogger(__name__)

_DATE_SEPARATORS = (" - ", "~")


class MigrationReport(BaseModel):
    """Bericht über den Import eines alten Dokuments."""
    warnings: list[str] = []
    blocks_imported: int = 0
    blocks_skipped: int = 0
    entries_imported: int = 0
    entries_skipped: int = 0
    plots_skipped: int = 0

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def print_rich(self) -> None:
        from rich.console import Console
        from rich.panel import Panel
        console = Console()
        lines = [f"[green]Blöcke: {self.blocks_imported}[/green]  "
                 f"[green]Entries: {self.entries_imported}[/green]  "
                 f"[yellow]Übersprungen: {self.blocks_skipped} Blöcke, "
                 f"{self.entries_skipped} Entries, {self.plots_skipped} Plots[/yellow]"]
        if self.warnings:
            lines.append("\n[yellow]Warnungen:[/yellow]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        console.print(Panel("\n".join(lines), title="Import (altes Format)", border_style="cyan"))


# ─── Einzelne Felder ─────────────────────────────────────────────────────────

def parse_legacy_date_range(value: Any) -> Optional[DateRange]:
    """"2025-01-06~2025-01-10" oder "2025-01-06 - 2025-01-10" → DateRange.

    Leere oder unlesbare Werte ergeben None.
    """
    if not value:
        return None
    if isinstance(value, dict):
        start, end = value.get("start"), value.get("end")
    else:
        text = str(value)
        sep = next((s for s in _DATE_SEPARATORS if s in text), None)
        if sep is None:
            return None
        start, _, end = text.partition(sep)
    try:
        return DateRange(
            start=date.fromisoformat(str(start).strip()),
            end=date.fromisoformat(str(end).strip()),
        )
    except ValueError:
        return None


def split_duration(numbers: list[int], duration: int) -> list[MeetingDetail]:
    """Verteilt die alte Gesamt-duration auf die Meeting-Nummern.

    Gleiche Aufteilung wie bei den Wochen (Rest an die ersten Meetings),
    jede JP-Angabe auf MIN_MEETING_JP..MAX_MEETING_JP begrenzt.
    """
    base, remainder = divmod(max(duration, 0), len(numbers))
    details = []
    for i, number in enumerate(sorted(numbers)):
        jp = base + (1 if i < remainder else 0)
        details.append(MeetingDetail(
            number=number,
            jp=min(max(jp, MIN_MEETING_JP), MAX_MEETING_JP),
        ))
    return details


def _clamp_jp(value: Any) -> int:
    try:
        jp = int(value)
    except (TypeError, ValueError):
        jp = DEFAULT_MEETING_JP
    return min(max(jp, MIN_MEETING_JP), MAX_MEETING_JP)


def _block_color(raw: dict, block_type: BlockType) -> str:
    color = str(raw.get("color") or "").lstrip("#").upper()
    if len(color) == 6 and all(c in "0123456789ABCDEF" for c in color):
        return color
    return block_type.color


# ─── Importer ────────────────────────────────────────────────────────────────

class LegacyPlanImporter:
    """Wandelt ein altes Dokument in einen CurriculumPlan um."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.report = MigrationReport()

    def _read(self) -> dict:
        if not self.path.exists():
            raise FileNotFoundError(f"Datei nicht gefunden: {self.path}")
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                raw = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"JSON-Fehler in {self.path}: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError(f"{self.path}: Dokument muss ein JSON-Objekt sein")
        return raw

    def import_plan(self) -> CurriculumPlan:
        return self.convert(self._read())

    def convert(self, raw: dict) -> CurriculumPlan:
        """Konvertiert das geparste Dokument (ohne Dateizugriff)."""
        half = raw.get("semester", 1)
        if half not in (1, 2):
            self.report.warn(f"Unbekanntes Semester {half!r} – verwende 1")
            half = 1

        data = dict(
            class_name=str(raw.get("className", "")).strip(),
            semester_half=half,
            year=str(raw.get("year", "")).strip(),
        )
        if raw.get("id"):
            data["id"] = str(raw["id"])
        plan = CurriculumPlan(**data)

        for raw_block in raw.get("blockedWeeks") or []:
            plan = self._import_block(plan, raw_block)
        for raw_entry in raw.get("entries") or []:
            plan = self._import_entry(plan, raw_entry)

        logger.info(
            f"Import {self.path.name}: {self.report.blocks_imported} Blöcke, "
            f"{self.report.entries_imported} Entries"
        )
        return plan

    def _import_block(self, plan: CurriculumPlan, raw: dict) -> CurriculumPlan:
        period, slot = raw.get("month"), raw.get("week")
        label = str(raw.get("label") or "").strip()
        try:
            block_type = BlockType(raw.get("type"))
        except ValueError:
            self.report.warn(f"Block ({period}, {slot}): unbekannter Typ {raw.get('type')!r}")
            self.report.blocks_skipped += 1
            return plan
        if not isinstance(period, int) or not isinstance(slot, int) \
                or not is_in_grid(plan.semester_half, period, slot):
            self.report.warn(f"Block ({period}, {slot}) '{label}' liegt außerhalb des Rasters")
            self.report.blocks_skipped += 1
            return plan
        if is_blocked(plan, period, slot):
            self.report.warn(f"Block ({period}, {slot}) '{label}' doppelt – übersprungen")
            self.report.blocks_skipped += 1
            return plan

        data = dict(
            period=period,
            slot=slot,
            type=block_type,
            label=label or block_type.display_label,
            color=_block_color(raw, block_type),
        )
        if raw.get("id"):
            data["id"] = str(raw["id"])
        self.report.blocks_imported += 1
        return plan.model_copy(update={"blocked_weeks": [*plan.blocked_weeks, BlockedWeek(**data)]})

    def _meeting_details(self, raw: dict, plan: CurriculumPlan) -> list[MeetingDetail]:
        if raw.get("meetingDetails"):
            details = []
            for d in raw["meetingDetails"]:
                data = dict(number=int(d["number"]), jp=_clamp_jp(d.get("jp")))
                if d.get("id"):
                    data["id"] = str(d["id"])
                details.append(MeetingDetail(**data))
            return details

        numbers = sorted(set(n for n in parse_meeting_numbers(str(raw.get("meetingNo", ""))) if n >= 1))
        if not numbers:
            numbers = [plan.meeting_counter + 1]
            self.report.warn(
                f"Entry '{raw.get('chapter', '')}': keine Meeting-Nummer – vergebe P{numbers[0]}"
            )
        try:
            duration = int(raw.get("duration") or DEFAULT_MEETING_JP)
        except (TypeError, ValueError):
            duration = DEFAULT_MEETING_JP
        return split_duration(numbers, duration)

    def _import_entry(self, plan: CurriculumPlan, raw: dict) -> CurriculumPlan:
        details = self._meeting_details(raw, plan)
        date_range = parse_legacy_date_range(raw.get("dateRange"))
        if raw.get("dateRange") and date_range is None:
            self.report.warn(f"Entry '{raw.get('chapter', '')}': Datum {raw['dateRange']!r} unlesbar")

        try:
            entry = build_entry(
                chapter=str(raw.get("chapter") or ""),
                topic=str(raw.get("topic") or ""),
                meeting_details=details,
                date_range=date_range,
                entry_id=str(raw["id"]) if raw.get("id") else None,
            )
        except ValidationError as e:
            self.report.warn(f"Entry {raw.get('meetingNo', '?')} übersprungen: {e}")
            self.report.entries_skipped += 1
            return plan

        cells: list[PlotWeek] = []
        for p in raw.get("plotWeeks") or []:
            period, slot = p.get("month"), p.get("week")
            if not isinstance(period, int) or not isinstance(slot, int):
                self.report.plots_skipped += 1
                continue
            try:
                check_placement(entry, period, slot, plan)
            except PlacementConflict as e:
                self.report.warn(f"{entry.meeting_no}: {e}")
                self.report.plots_skipped += 1
                continue
            if any(c.cell == (period, slot) for c in cells):
                continue
            cells.append(PlotWeek(period=period, slot=slot))

        entry = build_entry(
            chapter=entry.chapter,
            topic=entry.topic,
            meeting_details=entry.meeting_details,
            date_range=entry.date_range,
            plot_weeks=cells,
            entry_id=entry.id,
        )
        before = entry.meeting_numbers
        plan = add_entry(plan, entry)
        after = plan.entries[-1].meeting_numbers
        if before != after:
            self.report.warn(
                f"Meeting-Nummern {before} bereits vergeben – neu vergeben als {after}"
            )
        self.report.entries_imported += 1
        return plan


def import_legacy_plan(path: Path) -> tuple[CurriculumPlan, MigrationReport]:
    """Liest ein altes Dokument und gibt Plan und Bericht zurück."""
    importer = LegacyPlanImporter(path)
    plan = importer.import_plan()
    return plan, importer.report
