"""Lebenszyklus von Entries: anlegen, ändern, löschen, Formular-Vorbelegung."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from config.defaults import (
    DEFAULT_ENTRY_SPAN_DAYS,
    DEFAULT_MEETING_JP,
    DEFAULT_SUGGEST_MAX_STEPS,
)
from models.entry import DateRange, Entry, MeetingDetail, PlotWeek, compose_duration
from models.plan import CurriculumPlan
from planner.allocator import redistribute
from planner.date_suggester import suggest_next_dates
from planner.errors import EntryNotFound, ValidationError
from planner.meetings import next_meeting_number

logger = logging.getLogger(__name__)


def build_entry(
    chapter: str,
    meeting_details: list[MeetingDetail],
    topic: str = "",
    date_range: Optional[DateRange] = None,
    plot_weeks: Optional[list[PlotWeek]] = None,
    entry_id: Optional[str] = None,
) -> Entry:
    """Validiert die Formulareingaben und baut ein Entry.

    Raises:
        ValidationError: Chapter leer, keine Meetings, Ende vor Start.
    """
    chapter = (chapter or "").strip()
    if not chapter:
        raise ValidationError("Chapter harus diisi – Chapter darf nicht leer sein.")
    if not meeting_details:
        raise ValidationError("Mindestens ein Meeting erforderlich.")
    if date_range is not None and date_range.end < date_range.start:
        raise ValidationError(
            f"Enddatum {date_range.end} liegt vor Startdatum {date_range.start}."
        )

    data = dict(
        chapter=chapter,
        topic=(topic or "").strip(),
        date_range=date_range,
        meeting_details=list(meeting_details),
        plot_weeks=redistribute(list(plot_weeks or []), compose_duration(meeting_details)),
    )
    if entry_id:
        data["id"] = entry_id
    return Entry(**data)


def _reserve_numbers(plan: CurriculumPlan, entry: Entry) -> tuple[Entry, int]:
    """Vergibt bereits benutzte Meeting-Nummern neu aus dem Zähler des Plans.

    Gibt das (ggf. umnummerierte) Entry und den neuen Zählerstand zurück.
    """
    used = {
        d.number for e in plan.entries if e.id != entry.id for d in e.meeting_details
    }
    counter = max([plan.meeting_counter, *used, 0])
    details: list[MeetingDetail] = []
    for d in sorted(entry.meeting_details, key=lambda d: d.number):
        if d.number in used:
            counter += 1
            logger.warning(
                f"Meeting-Nummer P{d.number} bereits vergeben – neu vergeben als P{counter}"
            )
            d = d.model_copy(update={"number": counter})
        used.add(d.number)
        details.append(d)
    counter = max([counter, *(d.number for d in details)])
    return entry.model_copy(update={"meeting_details": details}), counter


def add_entry(plan: CurriculumPlan, entry: Entry) -> CurriculumPlan:
    """Fügt ein neues Entry hinzu; Meeting-Nummern werden beim Speichern reserviert."""
    entry, counter = _reserve_numbers(plan, entry)
    logger.info(f"Entry hinzugefügt: {entry.meeting_no} '{entry.chapter}'")
    return plan.model_copy(update={
        "entries": [*plan.entries, entry],
        "meeting_counter": counter,
    })


def update_entry(plan: CurriculumPlan, entry: Entry) -> CurriculumPlan:
    """Ersetzt ein bestehendes Entry (gleiche ID).

    Meeting-Nummern anderer Entries werden wie bei add_entry neu vergeben.

    Raises:
        EntryNotFound: keine Entry mit dieser ID.
    """
    if plan.entry_by_id(entry.id) is None:
        raise EntryNotFound(entry.id)
    entry, counter = _reserve_numbers(plan, entry)
    entries = [entry if e.id == entry.id else e for e in plan.entries]
    return plan.model_copy(update={"entries": entries, "meeting_counter": counter})


def delete_entry(plan: CurriculumPlan, entry_id: str) -> CurriculumPlan:
    """Löscht ein Entry per ID. Unbekannte IDs werden ignoriert."""
    remaining = [e for e in plan.entries if e.id != entry_id]
    return plan.model_copy(update={"entries": remaining})


def chapter_suggestions(plan: CurriculumPlan, text: str = "") -> list[str]:
    """Bisher verwendete Chapter (sortiert), gefiltert nach Teilstring.

    Passt text exakt auf ein Chapter, werden alle Chapter geliefert.
    """
    chapters = sorted({e.chapter for e in plan.entries if e.chapter})
    if text in chapters:
        return chapters
    needle = text.lower()
    return [c for c in chapters if needle in c.lower()]


@dataclass
class EntryDraft:
    """Vorbelegung des Formulars "Pertemuan hinzufügen"."""

    meeting_number: int
    jp: int
    start: Optional[date] = None
    end: Optional[date] = None
    chapters: list[str] = field(default_factory=list)


def new_entry_template(
    plan: CurriculumPlan,
    default_jp: int = DEFAULT_MEETING_JP,
    max_steps: int = DEFAULT_SUGGEST_MAX_STEPS,
    span_days: int = DEFAULT_ENTRY_SPAN_DAYS,
) -> EntryDraft:
    suggestion = suggest_next_dates(plan, max_steps=max_steps, span_days=span_days)
    return EntryDraft(
        meeting_number=next_meeting_number(plan),
        jp=default_jp,
        start=suggestion.start,
        end=suggestion.end,
        chapters=chapter_suggestions(plan),
    )
