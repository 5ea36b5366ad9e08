"""Gemeinsamer Renderer für die Terminal-Anzeige des Semesterplans.

Wird von cmd_show / cmd_calendar (Rich) und cmd_browse (Textual) verwendet.
Alle Funktionen liefern nur Zeilen aus Strings; das Raster kommt aus
export.helpers.build_plan_layout.
"""

from typing import TYPE_CHECKING

from export.helpers import FIXED_COLUMNS, build_calendar, build_plan_layout, format_date_range

if TYPE_CHECKING:
    from models.plan import CurriculumPlan
    from export.helpers import PlanLayout

# Markierung für Zellen innerhalb eines zusammengefassten Blockbereichs
COVERED = "·"


def render_grid_header(layout: "PlanLayout") -> list[str]:
    """Spaltenköpfe: feste Spalten + "Jul 1", "Jul 2", …"""
    names = {h.period: h.name for h in layout.periods}
    return FIXED_COLUMNS + [f"{names[c.period][:3]} {c.slot}" for c in layout.columns]


def render_grid_rows(layout: "PlanLayout") -> list[list[str]]:
    """Gibt Tabellenzeilen für das CO-Raster zurück.

    Ein Blockbereich zeigt sein Label in der ersten Spalte des Bereichs
    auf der ersten Zeile, alle anderen Zellen des Bereichs zeigen '·'.
    """
    rows: list[list[str]] = []
    for offset in range(layout.body_rows):
        row = layout.rows[offset] if offset < len(layout.rows) else None
        cells = row.fixed_cells if row is not None else ["—"] + [""] * (len(FIXED_COLUMNS) - 1)
        cells = list(cells)
        for i in range(len(layout.columns)):
            span = layout.span_covering(i)
            if span is not None:
                first = offset == 0 and span.first_column == i
                cells.append(span.block.label if first else COVERED)
                continue
            jp = row.jp_by_column.get(i) if row is not None else None
            cells.append(str(jp) if jp is not None else "")
        rows.append(cells)
    return rows


def render_plan_rows(plan: "CurriculumPlan") -> tuple[list[str], list[list[str]]]:
    """Kopf und Zeilen des CO-Rasters in einem Schritt."""
    layout = build_plan_layout(plan)
    return render_grid_header(layout), render_grid_rows(layout)


def render_calendar_rows(plan: "CurriculumPlan", label_max_chars: int = 12) -> list[list[str]]:
    """Kalenderansicht: [Monat, W1, …, W5]; Monate mit 4 Wochen enden mit ''."""
    rows = []
    for cal in build_calendar(plan, label_max_chars):
        cells = [cal.name]
        for cell in cal.cells:
            if cell.kind == "free":
                cells.append("—")
            else:
                cells.append(cell.text)
        cells += [""] * (6 - len(cells))
        rows.append(cells)
    return rows


def render_block_rows(plan: "CurriculumPlan") -> list[list[str]]:
    """[ID, Monat, Woche, Typ, Label] sortiert nach Zelle."""
    from planner.blocks import blocks_sorted

    months = plan.months
    return [
        [b.id, months[b.period - 1], str(b.slot), b.type.display_label, b.label]
        for b in blocks_sorted(plan)
    ]


def render_entry_rows(plan: "CurriculumPlan") -> list[list[str]]:
    """[ID, No, Chapter, Date, Topic, JP, Wochen] in Meeting-Reihenfolge."""
    from planner.meetings import sorted_entries

    months = plan.months
    rows = []
    for e in sorted_entries(plan):
        weeks = ", ".join(
            f"{months[p.period - 1][:3]}/{p.slot}={p.jp}" for p in e.plot_weeks
        )
        rows.append([
            e.id, e.meeting_no, e.chapter, format_date_range(e.date_range),
            e.topic, f"{e.duration} JP", weeks or "—",
        ])
    return rows
