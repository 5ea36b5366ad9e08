"""Zusammenfassen benachbarter gleicher Blöcke zu Anzeigebereichen.

Einzige Quelle der Merge-Logik für Terminal-Tabelle, PDF und Excel.
"""

from dataclasses import dataclass
from typing import Optional

from config.defaults import PERIODS_PER_HALF
from models.blocked_week import BlockedWeek
from models.plan import CurriculumPlan
from planner.blocks import block_at
from planner.calendar_grid import slot_count_for


@dataclass(frozen=True)
class MergeSegment:
    """Ein Anzeigebereich innerhalb einer Periode.

    block ist None für freie Slots (span dann immer 1).
    """

    start_slot: int
    span: int
    block: Optional[BlockedWeek] = None

    @property
    def slots(self) -> list[int]:
        return list(range(self.start_slot, self.start_slot + self.span))

    @property
    def is_blocked(self) -> bool:
        return self.block is not None


def merge_runs(plan: CurriculumPlan, period: int) -> list[MergeSegment]:
    """Segmente einer Periode von links nach rechts.

    Zwei benachbarte gesperrte Slots verschmelzen genau dann, wenn Typ und
    Label identisch sind. Die Segmente decken jeden Slot genau einmal ab.
    """
    segments: list[MergeSegment] = []
    for slot in range(1, slot_count_for(plan.semester_half, period) + 1):
        block = block_at(plan, period, slot)
        if segments and block is not None:
            last = segments[-1]
            if last.block is not None and last.block.same_run_as(block):
                segments[-1] = MergeSegment(last.start_slot, last.span + 1, last.block)
                continue
        segments.append(MergeSegment(slot, 1, block))
    return segments


def merge_all(plan: CurriculumPlan) -> dict[int, list[MergeSegment]]:
    """{Periode: Segmente} für alle 6 Perioden."""
    return {period: merge_runs(plan, period) for period in range(1, PERIODS_PER_HALF + 1)}
