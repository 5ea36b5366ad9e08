"""CurriculumPlan: Semesterplan einer Klasse als ein Aggregat (Pydantic v2).

Enthält Semester-Metadaten, gesperrte Wochen und Entries. Das Dokument wird
komplett geladen; Änderungen ersetzen immer ein ganzes Feld (blocked_weeks
oder entries).
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

from models.blocked_week import BlockedWeek
from models.entry import Entry
from models.ids import new_id
from models.semester import Semester


class CurriculumPlan(BaseModel):
    """Curriculum Overview (CO) einer Klasse für ein Halbjahr."""

    id: str = Field(default_factory=new_id)
    class_name: str = ""
    semester_half: Literal[1, 2]
    year: str
    blocked_weeks: list[BlockedWeek] = []
    entries: list[Entry] = []
    # Höchste jemals vergebene Meeting-Nummer (wird beim Speichern erhöht)
    meeting_counter: int = Field(0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Abgeleitete Werte ───

    @property
    def semester(self) -> Semester:
        return Semester(half=self.semester_half, year=self.year)

    @property
    def months(self) -> list[str]:
        return self.semester.months

    def entry_by_id(self, entry_id: str) -> Optional[Entry]:
        return next((e for e in self.entries if e.id == entry_id), None)

    @property
    def total_weeks(self) -> int:
        """Anzahl Wochen-Slots im Raster (Summe über alle 6 Perioden)."""
        from planner.calendar_grid import grid_cells
        return len(grid_cells(self.semester_half))

    @property
    def available_weeks(self) -> int:
        """Effektive Wochen ("ME"): Raster-Slots abzüglich gesperrter Zellen."""
        from planner.calendar_grid import is_in_grid
        blocked = {
            b.cell for b in self.blocked_weeks
            if is_in_grid(self.semester_half, b.period, b.slot)
        }
        return self.total_weeks - len(blocked)

    @property
    def planned_jp(self) -> int:
        return sum(e.duration for e in self.entries)

    @property
    def plotted_week_count(self) -> int:
        return len({p.cell for e in self.entries for p in e.plot_weeks})

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Plan."""
        lines = [
            f"Klasse: {self.class_name}" if self.class_name else "",
            f"{self.semester.label} – {self.year}",
            f"Wochen im Raster: {self.total_weeks}",
            f"Gesperrt: {len(self.blocked_weeks)}",
            f"Effektive Wochen (ME): {self.available_weeks}",
            f"Pertemuan: {len(self.entries)}",
            f"Geplante JP: {self.planned_jp}",
            f"Belegte Wochen: {self.plotted_week_count}",
        ]
        return "\n".join(l for l in lines if l)

    # ─── JSON ───

    def save_json(self, path: Path) -> None:
        """Speichert den Plan als JSON (updated_at wird gesetzt)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "created_at": self.created_at or now,
            "updated_at": now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "CurriculumPlan":
        """Lädt einen Plan aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Plan-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
