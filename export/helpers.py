"""Gemeinsame Hilfsfunktionen und Tabellen-Layout für Terminal, PDF und Excel.

build_plan_layout ist die einzige Stelle, an der das CO-Raster aufgebaut wird:
Spalten, Monatsköpfe, zusammengefasste Blockbereiche und JP-Zellen. Die
Exporter lesen das Layout nur noch aus.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from models.blocked_week import BlockedWeek
from models.entry import DateRange, Entry
from models.plan import CurriculumPlan
from planner.blocks import block_at
from planner.calendar_grid import periods_for, slot_count
from planner.meetings import sorted_entries
from planner.merge import merge_all

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "header":    "4472C4",
    "subheader": "D9E1F2",
    "jp":        "4F46E5",
    "free":      "F5F5F5",
    "zebra":     "FAFAFA",
    "text_dark": "1E293B",
}

# Spalten links vom Wochenraster
FIXED_COLUMNS: list[str] = ["No", "Chapter/Bab", "Date", "TOPIC", "TIME"]


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Wandelt RRGGBB-String in (r, g, b)-Tupel um."""
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def format_date_range(date_range: Optional[DateRange]) -> str:
    """DateRange → "06.01.25 - 10.01.25" (leer ohne Datum)."""
    if date_range is None:
        return ""
    fmt = "%d.%m.%y"
    return f"{date_range.start.strftime(fmt)} - {date_range.end.strftime(fmt)}"


def truncate(text: str, max_chars: int) -> str:
    """Kürzt Text auf max_chars Zeichen (mit … am Ende)."""
    if len(text) <= max_chars:
        return text
    return text[: max(max_chars - 1, 1)] + "…"


def export_filename(plan: CurriculumPlan, suffix: str) -> str:
    """CO_<Klasse>_<Ganjil|Genap>_<Jahr>.<suffix> (Leerzeichen → _)."""
    parts = ["CO", plan.class_name or "Kelas", plan.semester.file_tag, plan.year]
    stem = "_".join(p.replace(" ", "_").replace("/", "-") for p in parts)
    return f"{stem}.{suffix}"


# ─── Layout ──────────────────────────────────────────────────────────────────

@dataclass
class PeriodHeader:
    """Monatskopf über den Wochen-Spalten einer Periode."""
    period: int
    name: str
    first_column: int       # Index in PlanLayout.columns
    span: int               # Anzahl Wochen-Spalten


@dataclass
class WeekColumn:
    period: int
    slot: int


@dataclass
class BlockSpan:
    """Zusammengefasster Blockbereich: Spalten first_column.. über alle Zeilen."""
    block: BlockedWeek
    first_column: int
    span: int

    @property
    def columns(self) -> list[int]:
        return list(range(self.first_column, self.first_column + self.span))


@dataclass
class EntryRow:
    entry: Entry
    meeting_no: str
    chapter: str
    date_text: str
    topic: str
    time_text: str
    jp_by_column: dict[int, int] = field(default_factory=dict)

    @property
    def fixed_cells(self) -> list[str]:
        return [self.meeting_no, self.chapter, self.date_text, self.topic, self.time_text]


@dataclass
class PlanLayout:
    plan: CurriculumPlan
    periods: list[PeriodHeader]
    columns: list[WeekColumn]
    block_spans: list[BlockSpan]
    rows: list[EntryRow]

    @property
    def body_rows(self) -> int:
        """Zeilen im Tabellenkörper (mindestens eine, auch ohne Entries)."""
        return max(1, len(self.rows))

    def span_starting_at(self, column: int) -> Optional[BlockSpan]:
        for span in self.block_spans:
            if span.first_column == column:
                return span
        return None

    def span_covering(self, column: int) -> Optional[BlockSpan]:
        for span in self.block_spans:
            if span.first_column <= column < span.first_column + span.span:
                return span
        return None


def build_plan_layout(plan: CurriculumPlan) -> PlanLayout:
    """Baut das CO-Raster einmal für alle Ausgabeformate."""
    periods: list[PeriodHeader] = []
    columns: list[WeekColumn] = []
    index_of: dict[tuple[int, int], int] = {}

    for period, name in enumerate(periods_for(plan.semester_half), start=1):
        count = slot_count(name)
        periods.append(PeriodHeader(period, name, len(columns), count))
        for slot in range(1, count + 1):
            index_of[(period, slot)] = len(columns)
            columns.append(WeekColumn(period, slot))

    block_spans = [
        BlockSpan(seg.block, index_of[(period, seg.start_slot)], seg.span)
        for period, segments in merge_all(plan).items()
        for seg in segments
        if seg.block is not None
    ]

    rows = []
    for entry in sorted_entries(plan):
        rows.append(EntryRow(
            entry=entry,
            meeting_no=entry.meeting_no,
            chapter=entry.chapter,
            date_text=format_date_range(entry.date_range),
            topic=entry.topic,
            time_text=f"{entry.duration} JP",
            jp_by_column={
                index_of[p.cell]: p.jp for p in entry.plot_weeks if p.cell in index_of
            },
        ))

    return PlanLayout(plan, periods, columns, block_spans, rows)


# ─── Kalenderansicht ─────────────────────────────────────────────────────────

@dataclass
class CalendarCell:
    slot: int
    kind: str               # "block" | "entry" | "free"
    text: str = ""
    color: Optional[str] = None


@dataclass
class CalendarRow:
    period: int
    name: str
    cells: list[CalendarCell]


def build_calendar(plan: CurriculumPlan, label_max_chars: int = 12) -> list[CalendarRow]:
    """Pro Periode eine Zeile: Blocklabel, belegende Meetings mit JP oder frei."""
    owners: dict[tuple[int, int], list[Entry]] = {}
    for e in plan.entries:
        for p in e.plot_weeks:
            owners.setdefault(p.cell, []).append(e)

    rows = []
    for period, name in enumerate(periods_for(plan.semester_half), start=1):
        cells = []
        for slot in range(1, slot_count(name) + 1):
            block = block_at(plan, period, slot)
            if block is not None:
                cells.append(CalendarCell(
                    slot, "block", truncate(block.label, label_max_chars), block.color
                ))
                continue
            entries = owners.get((period, slot), [])
            if entries:
                jp = sum(e.jp_at(period, slot) or 0 for e in entries)
                numbers = ", ".join(e.meeting_no for e in entries)
                cells.append(CalendarCell(slot, "entry", f"{numbers} ({jp} JP)", COLORS["jp"]))
            else:
                cells.append(CalendarCell(slot, "free"))
        rows.append(CalendarRow(period, name, cells))
    return rows
