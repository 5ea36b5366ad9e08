"""Datumsvorschlag für ein neues Entry.

Startet eine Woche nach dem Startdatum des Entries mit der höchsten
Meeting-Nummer und springt wochenweise weiter, solange die Woche außerhalb
des Rasters liegt, gesperrt oder bereits belegt ist. Rein beratend.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from config.defaults import DEFAULT_ENTRY_SPAN_DAYS, DEFAULT_SUGGEST_MAX_STEPS
from models.entry import Entry
from models.plan import CurriculumPlan
from planner.allocator import is_occupied
from planner.blocks import is_blocked
from planner.calendar_grid import cell_for_date, is_in_grid

logger = logging.getLogger(__name__)

WEEK = timedelta(days=7)


@dataclass(frozen=True)
class SuggestedDates:
    """Ergebnis des Vorschlags. start/end sind None wenn nichts vorgeschlagen wird."""

    start: Optional[date] = None
    end: Optional[date] = None
    steps: int = 0           # zusätzliche Wochensprünge nach dem ersten Kandidaten
    is_valid: bool = False   # False: Schranke erschöpft oder kein Vorschlag

    @property
    def is_empty(self) -> bool:
        return self.start is None


def _latest_entry(plan: CurriculumPlan) -> Optional[Entry]:
    """Entry mit der höchsten Meeting-Nummer."""
    if not plan.entries:
        return None
    return max(plan.entries, key=lambda e: max(e.meeting_numbers, default=0))


def is_free_week(plan: CurriculumPlan, d: date) -> bool:
    """True wenn die Woche von d im Raster liegt, frei und unbelegt ist."""
    period, slot = cell_for_date(d, plan.semester_half)
    if not is_in_grid(plan.semester_half, period, slot):
        return False
    if is_blocked(plan, period, slot):
        return False
    return not is_occupied(plan, period, slot)


def suggest_next_dates(
    plan: CurriculumPlan,
    max_steps: int = DEFAULT_SUGGEST_MAX_STEPS,
    span_days: int = DEFAULT_ENTRY_SPAN_DAYS,
) -> SuggestedDates:
    """Schlägt Start- und Enddatum für das nächste Entry vor."""
    latest = _latest_entry(plan)
    if latest is None or latest.date_range is None:
        return SuggestedDates()

    candidate = latest.date_range.start + WEEK
    steps = 0
    while not is_free_week(plan, candidate) and steps < max_steps:
        candidate += WEEK
        steps += 1

    valid = is_free_week(plan, candidate)
    if not valid:
        logger.info(
            f"Datumsvorschlag: nach {steps} Sprüngen keine freie Woche – "
            f"liefere {candidate.isoformat()}"
        )
    return SuggestedDates(
        start=candidate,
        end=candidate + timedelta(days=span_days),
        steps=steps,
        is_valid=valid,
    )
