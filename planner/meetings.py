"""Meeting-Nummerierung: Vorschlag der nächsten Nummer und Meeting-Liste eines Entries."""

import re

from config.defaults import DEFAULT_MEETING_JP
from models.entry import (
    Entry,
    MeetingDetail,
    compose_duration,
    compose_meeting_no,
)
from models.plan import CurriculumPlan
from planner.allocator import redistribute

__all__ = [
    "compose_meeting_no",
    "compose_duration",
    "parse_meeting_numbers",
    "next_meeting_number",
    "add_meeting_detail",
    "remove_meeting_detail",
    "sort_key",
    "sorted_entries",
]

_NUMBER_RE = re.compile(r"\d+")


def parse_meeting_numbers(text: str) -> list[int]:
    """Alle Ganzzahlen aus einem String, z.B. "P10/P11" → [10, 11]."""
    return [int(n) for n in _NUMBER_RE.findall(text or "")]


def next_meeting_number(plan: CurriculumPlan) -> int:
    """Vorschlag für die nächste Meeting-Nummer (max + 1, leerer Plan → 1).

    Nur ein Vorschlag fürs Formular; reserviert wird erst beim Speichern
    (siehe entries.add_entry).
    """
    numbers = [d.number for e in plan.entries for d in e.meeting_details]
    return max(numbers, default=0) + 1


def add_meeting_detail(entry: Entry, jp: int = DEFAULT_MEETING_JP) -> Entry:
    """Hängt ein Meeting mit Nummer max + 1 an und verteilt die JP neu."""
    number = max((d.number for d in entry.meeting_details), default=0) + 1
    details = [*entry.meeting_details, MeetingDetail(number=number, jp=jp)]
    return entry.model_copy(update={
        "meeting_details": details,
        "plot_weeks": redistribute(entry.plot_weeks, compose_duration(details)),
    })


def remove_meeting_detail(entry: Entry, detail_id: str) -> Entry:
    """Entfernt ein Meeting. Das letzte Meeting bleibt immer erhalten."""
    if len(entry.meeting_details) <= 1:
        return entry
    details = [d for d in entry.meeting_details if d.id != detail_id]
    if len(details) == len(entry.meeting_details):
        return entry
    return entry.model_copy(update={
        "meeting_details": details,
        "plot_weeks": redistribute(entry.plot_weeks, compose_duration(details)),
    })


def sort_key(entry: Entry) -> tuple[int, str]:
    """Natürliche Sortierung nach kleinster Meeting-Nummer (P2 vor P10)."""
    numbers = entry.meeting_numbers
    return (numbers[0] if numbers else 0, entry.meeting_no)


def sorted_entries(plan: CurriculumPlan) -> list[Entry]:
    return sorted(plan.entries, key=sort_key)
