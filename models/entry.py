"""Datenmodell für Pertemuan-Entries, Meetings und geplottete Wochen (Pydantic v2)."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from config.defaults import MAX_MEETING_JP, MAX_SLOTS, MIN_MEETING_JP
from models.ids import new_id


class MeetingDetail(BaseModel):
    """Ein einzelnes physisches Meeting mit laufender Nummer und JP-Umfang."""

    id: str = Field(default_factory=new_id)
    number: int = Field(ge=1)                              # P<number>
    jp: int = Field(ge=MIN_MEETING_JP, le=MAX_MEETING_JP)  # Unterrichtsstunden


class PlotWeek(BaseModel):
    """Anteil des JP-Budgets eines Entries in einer Rasterzelle."""

    period: int = Field(ge=1, le=6)
    slot: int = Field(ge=1, le=MAX_SLOTS)
    jp: int = Field(0, ge=0)

    @property
    def cell(self) -> tuple[int, int]:
        return (self.period, self.slot)


class DateRange(BaseModel):
    """Geplanter Zeitraum eines Entries (optional, nur beratend)."""

    start: date
    end: date


def compose_meeting_no(details: list[MeetingDetail]) -> str:
    """Sortiert nach Nummer und verbindet zu "P10/P11"."""
    return "/".join(f"P{d.number}" for d in sorted(details, key=lambda d: d.number))


def compose_duration(details: list[MeetingDetail]) -> int:
    """Summe der JP aller Meetings."""
    return sum(d.jp for d in details)


class Entry(BaseModel):
    """Eine Unterrichtseinheit aus einem oder mehreren Meetings.

    meeting_no und duration werden aus meeting_details abgeleitet und beim
    Laden ignoriert – meeting_details ist die einzige Quelle.
    """

    id: str = Field(default_factory=new_id)
    chapter: str
    topic: str = ""
    date_range: Optional[DateRange] = None
    plot_weeks: list[PlotWeek] = []
    meeting_details: list[MeetingDetail]

    @computed_field
    @property
    def meeting_no(self) -> str:
        return compose_meeting_no(self.meeting_details)

    @computed_field
    @property
    def duration(self) -> int:
        return compose_duration(self.meeting_details)

    @property
    def meeting_numbers(self) -> list[int]:
        return sorted(d.number for d in self.meeting_details)

    @property
    def plotted_cells(self) -> set[tuple[int, int]]:
        return {p.cell for p in self.plot_weeks}

    def jp_at(self, period: int, slot: int) -> Optional[int]:
        """JP in einer Zelle oder None, wenn das Entry dort nicht geplottet ist."""
        for p in self.plot_weeks:
            if p.period == period and p.slot == slot:
                return p.jp
        return None
