"""Datenmodell für ein Semester (Halbjahr + Schuljahr, Pydantic v2)."""

from typing import Literal

from pydantic import BaseModel

from config.defaults import SEMESTER_FILE_TAGS, SEMESTER_LABELS, SEMESTER_MONTHS


class Semester(BaseModel):
    """Halbjahr eines Schuljahres.

    half=1 → Semester Ganjil (Juli–Dezember), half=2 → Semester Genap
    (Januar–Juni). Bestimmt die Reihenfolge der 6 Perioden (Monate).
    """

    half: Literal[1, 2]
    year: str            # "2025" oder "2025/2026" – nur Anzeige

    @property
    def months(self) -> list[str]:
        return list(SEMESTER_MONTHS[self.half])

    @property
    def label(self) -> str:
        """z.B. "Semester 2 (Genap)"."""
        return SEMESTER_LABELS[self.half]

    @property
    def file_tag(self) -> str:
        return SEMESTER_FILE_TAGS[self.half]
