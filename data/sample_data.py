"""Demo-Daten-Generator für den Kurikulum-Planer.

Erzeugt einen vollständigen Semesterplan mit typischen Sperrwochen
(Libur, Ujian, Kegiatan) und Pertemuan, die nacheinander auf freie Wochen
geplottet werden. Mit festem Seed reproduzierbar.
"""

import logging
import random
import re
from datetime import date, timedelta
from typing import Optional

from config.defaults import SEMESTER_FIRST_MONTH
from models.blocked_week import BlockType
from models.entry import DateRange, MeetingDetail
from models.plan import CurriculumPlan
from planner.allocator import is_occupied, toggle_plot
from planner.blocks import add_block, is_blocked
from planner.calendar_grid import grid_cells
from planner.entries import add_entry, build_entry
from planner.meetings import next_meeting_number

logger = logging.getLogger(__name__)

# ─── Sperrwochen pro Halbjahr (Periode, Slot, Typ, Label) ─────────────────────

_BLOCKS: dict[int, list[tuple[int, int, BlockType, str]]] = {
    1: [
        (1, 1, BlockType.PREPARATION, "MPLS"),
        (1, 2, BlockType.PREPARATION, "MPLS"),
        (2, 3, BlockType.HOLIDAY, "HUT RI"),
        (3, 4, BlockType.EXAM, "ATS"),
        (4, 5, BlockType.ACTIVITY, "Class Meeting"),
        (6, 1, BlockType.EXAM, "PAS"),
        (6, 2, BlockType.EXAM, "PAS"),
        (6, 4, BlockType.HOLIDAY, "Libur Semester"),
    ],
    2: [
        (1, 1, BlockType.PREPARATION, "Review"),
        (3, 2, BlockType.RELIGIOUS, "Idul Fitri"),
        (3, 3, BlockType.RELIGIOUS, "Idul Fitri"),
        (3, 4, BlockType.EXAM, "ATS"),
        (4, 5, BlockType.ACTIVITY, "Study Tour"),
        (6, 1, BlockType.EXAM, "PAT"),
        (6, 2, BlockType.EXAM, "PAT"),
        (6, 4, BlockType.HOLIDAY, "Libur Kenaikan"),
    ],
}

# ─── Kapitel (Bab) mit Themen ────────────────────────────────────────────────

_CHAPTERS: list[tuple[str, list[str]]] = [
    ("Bab 1 Bilangan", ["Bilangan bulat", "Bilangan pecahan", "Operasi hitung"]),
    ("Bab 2 Aljabar", ["Bentuk aljabar", "Persamaan linear", "Pertidaksamaan"]),
    ("Bab 3 Fungsi", ["Relasi", "Fungsi linear", "Grafik fungsi"]),
    ("Bab 4 Geometri", ["Garis dan sudut", "Segitiga", "Segi empat"]),
    ("Bab 5 Statistika", ["Penyajian data", "Ukuran pemusatan"]),
]


def school_year_for(half: int, year: str) -> int:
    """Kalenderjahr des Halbjahres aus "2025" oder "2025/2026"."""
    years = [int(y) for y in re.findall(r"\d{4}", year)]
    if not years:
        return date.today().year
    return years[0] if half == 1 else years[-1]


def date_for_cell(half: int, calendar_year: int, period: int, slot: int) -> date:
    """Erster Tag der Wochen-Slot-Spanne (Tag 1, 8, 15, 22, 29)."""
    month = SEMESTER_FIRST_MONTH[half] + period - 1
    return date(calendar_year, month, (slot - 1) * 7 + 1)


class SamplePlanGenerator:
    """Generiert einen Demo-Plan für eine Klasse."""

    def __init__(
        self,
        class_name: str = "VII A",
        half: int = 1,
        year: str = "2025",
        seed: Optional[int] = None,
    ) -> None:
        self.class_name = class_name
        self.half = half
        self.year = year
        self.rng = random.Random(seed)

    # ─── Blöcke ───────────────────────────────────────────────────────────────

    def _add_blocks(self, plan: CurriculumPlan) -> CurriculumPlan:
        for period, slot, block_type, label in _BLOCKS[self.half]:
            plan = add_block(plan, period, slot, block_type, label)
        return plan

    # ─── Entries ──────────────────────────────────────────────────────────────

    def _free_cells(self, plan: CurriculumPlan) -> list[tuple[int, int]]:
        return [
            (p, s) for p, s in grid_cells(self.half)
            if not is_blocked(plan, p, s) and not is_occupied(plan, p, s)
        ]

    def _add_entries(self, plan: CurriculumPlan) -> CurriculumPlan:
        calendar_year = school_year_for(self.half, self.year)
        for chapter, topics in _CHAPTERS:
            for topic in topics:
                free = self._free_cells(plan)
                if not free:
                    logger.info("Demo-Plan: keine freien Wochen mehr")
                    return plan
                weeks = free[: self.rng.choice([1, 1, 2])]
                first = next_meeting_number(plan)
                count = self.rng.choice([1, 1, 2])
                details = [
                    MeetingDetail(number=first + i, jp=self.rng.choice([2, 2, 3]))
                    for i in range(count)
                ]
                start = date_for_cell(self.half, calendar_year, *weeks[0])
                end = date_for_cell(self.half, calendar_year, *weeks[-1])
                entry = build_entry(
                    chapter=chapter,
                    topic=topic,
                    meeting_details=details,
                    date_range=DateRange(start=start, end=end + timedelta(days=4)),
                )
                for period, slot in weeks:
                    entry = toggle_plot(entry, period, slot, plan)
                plan = add_entry(plan, entry)
        return plan

    # ─── Vollständiger Plan ───────────────────────────────────────────────────

    def generate(self) -> CurriculumPlan:
        """Erzeugt den vollständigen Plan (noch nicht gespeichert)."""
        plan = CurriculumPlan(
            class_name=self.class_name,
            semester_half=self.half,
            year=self.year,
        )
        plan = self._add_blocks(plan)
        plan = self._add_entries(plan)
        logger.info(
            f"Demo-Plan erzeugt: {len(plan.blocked_weeks)} Blöcke, "
            f"{len(plan.entries)} Entries"
        )
        return plan

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, plan: CurriculumPlan) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht des erzeugten Plans aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugter Demo-Plan", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        table.add_row("Klasse", plan.class_name, f"{plan.semester.label} {plan.year}")
        table.add_row("Gesperrte Wochen", str(len(plan.blocked_weeks)), "")
        table.add_row("Effektive Wochen (ME)", str(plan.available_weeks),
                      f"von {plan.total_weeks}")
        table.add_row("Pertemuan", str(len(plan.entries)),
                      f"{plan.planned_jp} JP geplant")
        console.print(table)
