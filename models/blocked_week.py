"""Datenmodell für gesperrte Wochen (Libur, Ujian, Kegiatan, Pydantic v2)."""

from enum import Enum

from pydantic import BaseModel, Field

from config.defaults import BLOCK_TYPE_METADATA, FALLBACK_BLOCK_COLOR, MAX_SLOTS
from models.ids import new_id


class BlockType(str, Enum):
    HOLIDAY = "holiday"
    RELIGIOUS = "religious"
    EXAM = "exam"
    ACTIVITY = "activity"
    PREPARATION = "preparation"

    @property
    def display_label(self) -> str:
        return BLOCK_TYPE_METADATA[self.value]["label"]

    @property
    def color(self) -> str:
        return BLOCK_TYPE_METADATA.get(self.value, {}).get("color", FALLBACK_BLOCK_COLOR)


class BlockedWeek(BaseModel):
    """Eine für Unterricht gesperrte Zelle (Periode, Slot) im Semesterraster.

    Wird nie verändert: Änderungen = entfernen + neu anlegen.
    """

    id: str = Field(default_factory=new_id)
    period: int = Field(ge=1, le=6)          # Monat innerhalb des Halbjahres
    slot: int = Field(ge=1, le=MAX_SLOTS)    # Woche innerhalb des Monats
    type: BlockType
    label: str                               # "Idul Fitri 1446 H"
    color: str = FALLBACK_BLOCK_COLOR        # RRGGBB ohne #

    @property
    def cell(self) -> tuple[int, int]:
        return (self.period, self.slot)

    def same_run_as(self, other: "BlockedWeek") -> bool:
        """True wenn beide Blöcke optisch zu einem Bereich verschmelzen."""
        return self.type == other.type and self.label == other.label
