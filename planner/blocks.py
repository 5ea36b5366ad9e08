"""Block-Registry: gesperrte Wochen (höchstens ein Block pro Zelle)."""

import logging
from typing import Optional, Union

from models.blocked_week import BlockType, BlockedWeek
from models.plan import CurriculumPlan
from planner.calendar_grid import is_in_grid
from planner.errors import DuplicateBlock, ValidationError

logger = logging.getLogger(__name__)


def block_at(plan: CurriculumPlan, period: int, slot: int) -> Optional[BlockedWeek]:
    """Gibt den Block der Zelle zurück oder None."""
    for b in plan.blocked_weeks:
        if b.period == period and b.slot == slot:
            return b
    return None


def is_blocked(plan: CurriculumPlan, period: int, slot: int) -> bool:
    return block_at(plan, period, slot) is not None


def blocks_sorted(plan: CurriculumPlan) -> list[BlockedWeek]:
    """Blöcke nach (Periode, Slot) sortiert – für Listen und Exporte."""
    return sorted(plan.blocked_weeks, key=lambda b: (b.period, b.slot))


def add_block(
    plan: CurriculumPlan,
    period: int,
    slot: int,
    type: Union[BlockType, str],
    label: str,
) -> CurriculumPlan:
    """Sperrt eine Zelle und gibt einen neuen Plan zurück.

    Raises:
        ValidationError: Label leer, Zelle außerhalb des Rasters oder
            Zelle bereits durch ein Entry belegt.
        DuplicateBlock: Zelle bereits gesperrt.
    """
    label = (label or "").strip()
    if not label:
        raise ValidationError("Label harus diisi – Label darf nicht leer sein.")
    try:
        block_type = BlockType(type)
    except ValueError as e:
        raise ValidationError(f"Unbekannter Blocktyp: {type}") from e
    if not is_in_grid(plan.semester_half, period, slot):
        raise ValidationError(
            f"Zelle ({period}, {slot}) liegt außerhalb des Semesterrasters."
        )
    if is_blocked(plan, period, slot):
        raise DuplicateBlock(period, slot)
    for e in plan.entries:
        if (period, slot) in e.plotted_cells:
            raise ValidationError(
                f"Zelle ({period}, {slot}) ist von {e.meeting_no} belegt – "
                f"zuerst den Plot entfernen."
            )

    block = BlockedWeek(
        period=period,
        slot=slot,
        type=block_type,
        label=label,
        color=block_type.color,
    )
    logger.info(f"Block hinzugefügt: ({period}, {slot}) {block_type.value} '{label}'")
    return plan.model_copy(update={"blocked_weeks": [*plan.blocked_weeks, block]})


def remove_block(plan: CurriculumPlan, block_id: str) -> CurriculumPlan:
    """Entfernt einen Block per ID. Unbekannte IDs werden ignoriert."""
    remaining = [b for b in plan.blocked_weeks if b.id != block_id]
    if len(remaining) == len(plan.blocked_weeks):
        logger.debug(f"remove_block: Block '{block_id}' nicht vorhanden")
    return plan.model_copy(update={"blocked_weeks": remaining})
