"""Platzierung: Entries in Rasterzellen plotten und JP-Budget verteilen.

Invarianten nach jeder Aktion:
- sum(plot_weeks.jp) == entry.duration (sofern mindestens eine Zelle geplottet)
- keine Zelle gehört zwei Entries
- keine geplottete Zelle ist gesperrt
"""

import logging
from typing import Optional

from models.entry import Entry, PlotWeek
from models.plan import CurriculumPlan
from planner.blocks import block_at
from planner.calendar_grid import is_in_grid
from planner.errors import PlacementConflict

logger = logging.getLogger(__name__)


def redistribute(plot_weeks: list[PlotWeek], duration: int) -> list[PlotWeek]:
    """Verteilt duration gleichmäßig auf die Zellen (Einfügereihenfolge).

    Jede Zelle erhält floor(duration / n), die ersten duration % n Zellen
    je eine JP mehr. Wird bei jeder Änderung komplett neu berechnet.
    """
    n = len(plot_weeks)
    if n == 0:
        return []
    base, remainder = divmod(duration, n)
    return [
        PlotWeek(period=p.period, slot=p.slot, jp=base + (1 if i < remainder else 0))
        for i, p in enumerate(plot_weeks)
    ]


def occupant_of(
    plan: CurriculumPlan, period: int, slot: int, exclude_id: Optional[str] = None
) -> Optional[Entry]:
    """Gibt das Entry zurück, das die Zelle belegt (exclude_id wird übersprungen)."""
    for e in plan.entries:
        if e.id == exclude_id:
            continue
        if (period, slot) in e.plotted_cells:
            return e
    return None


def is_occupied(
    plan: CurriculumPlan, period: int, slot: int, exclude_id: Optional[str] = None
) -> bool:
    return occupant_of(plan, period, slot, exclude_id) is not None


def occupied_cells(plan: CurriculumPlan) -> dict[tuple[int, int], Entry]:
    """{(Periode, Slot): Entry} für alle geplotteten Zellen."""
    cells: dict[tuple[int, int], Entry] = {}
    for e in plan.entries:
        for p in e.plot_weeks:
            cells.setdefault(p.cell, e)
    return cells


def check_placement(
    entry: Entry, period: int, slot: int, plan: CurriculumPlan
) -> None:
    """Prüft ob das Entry die Zelle belegen darf.

    Raises:
        PlacementConflict: außerhalb des Rasters, gesperrt oder fremd belegt.
    """
    if not is_in_grid(plan.semester_half, period, slot):
        raise PlacementConflict(period, slot, "außerhalb des Rasters")
    block = block_at(plan, period, slot)
    if block is not None:
        raise PlacementConflict(period, slot, f"gesperrt ({block.label})")
    owner = occupant_of(plan, period, slot, exclude_id=entry.id)
    if owner is not None:
        raise PlacementConflict(period, slot, f"belegt durch {owner.meeting_no}")


def toggle_plot(
    entry: Entry, period: int, slot: int, plan: CurriculumPlan
) -> Entry:
    """Schaltet die Belegung einer Zelle für ein Entry um.

    Gesperrte oder fremd belegte Zellen werden stillschweigend ignoriert
    (das Entry wird unverändert zurückgegeben). Danach wird das JP-Budget
    vollständig neu verteilt.
    """
    try:
        check_placement(entry, period, slot, plan)
    except PlacementConflict as e:
        logger.debug(f"toggle_plot ignoriert: {e}")
        return entry

    if (period, slot) in entry.plotted_cells:
        cells = [p for p in entry.plot_weeks if p.cell != (period, slot)]
    else:
        cells = [*entry.plot_weeks, PlotWeek(period=period, slot=slot)]

    return entry.model_copy(
        update={"plot_weeks": redistribute(cells, entry.duration)}
    )
