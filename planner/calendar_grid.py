"""Semesterraster: Perioden (Monate) und Wochen-Slots pro Periode.

Reine Tabellen-Nachschlagefunktionen, kein echter Kalender: ein Monat hat
4 Slots, nur die Monate aus LONG_MONTHS haben 5.
"""

from datetime import date

from config.defaults import (
    LONG_MONTHS,
    PERIODS_PER_HALF,
    SEMESTER_FIRST_MONTH,
    SEMESTER_MONTHS,
    WEEKS_LONG,
    WEEKS_SHORT,
)


def periods_for(half: int) -> list[str]:
    """Die 6 Monatsnamen eines Halbjahres in Reihenfolge."""
    return list(SEMESTER_MONTHS[half])


def slot_count(period_name: str) -> int:
    """Anzahl Wochen-Slots eines Monats (5 für lange Monate, sonst 4)."""
    return WEEKS_LONG if period_name in LONG_MONTHS else WEEKS_SHORT


def slot_count_for(half: int, period: int) -> int:
    """Slot-Anzahl für Periode 1..6 des Halbjahres; 0 außerhalb des Rasters."""
    if not 1 <= period <= PERIODS_PER_HALF:
        return 0
    return slot_count(SEMESTER_MONTHS[half][period - 1])


def is_in_grid(half: int, period: int, slot: int) -> bool:
    return 1 <= slot <= slot_count_for(half, period)


def grid_cells(half: int) -> list[tuple[int, int]]:
    """Alle Zellen (Periode, Slot) des Halbjahres in Spaltenreihenfolge."""
    return [
        (period, slot)
        for period in range(1, PERIODS_PER_HALF + 1)
        for slot in range(1, slot_count_for(half, period) + 1)
    ]


def cell_for_date(d: date, half: int) -> tuple[int, int]:
    """Bildet ein Datum auf (Periode, Slot) ab.

    Periode = Position des Kalendermonats im Halbjahr (Monate außerhalb
    des Halbjahres liefern Werte < 1 oder > 6), Slot = (Tag - 1) // 7 + 1.
    Das Jahr wird nicht geprüft.
    """
    period = d.month - SEMESTER_FIRST_MONTH[half] + 1
    slot = (d.day - 1) // 7 + 1
    return period, slot
