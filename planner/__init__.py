"""Planer-Kern: Semesterraster, Blöcke, Meetings, Platzierung, Vorschläge, Merge."""

from .errors import (
    PlannerError,
    ValidationError,
    DuplicateBlock,
    PlacementConflict,
    EntryNotFound,
)
from .calendar_grid import periods_for, slot_count, slot_count_for, grid_cells, cell_for_date
from .blocks import add_block, remove_block, is_blocked, block_at
from .meetings import (
    compose_meeting_no,
    compose_duration,
    next_meeting_number,
    add_meeting_detail,
    remove_meeting_detail,
)
from .allocator import toggle_plot, redistribute
from .date_suggester import suggest_next_dates, SuggestedDates
from .merge import merge_runs, MergeSegment

__all__ = [
    "PlannerError",
    "ValidationError",
    "DuplicateBlock",
    "PlacementConflict",
    "EntryNotFound",
    "periods_for",
    "slot_count",
    "slot_count_for",
    "grid_cells",
    "cell_for_date",
    "add_block",
    "remove_block",
    "is_blocked",
    "block_at",
    "compose_meeting_no",
    "compose_duration",
    "next_meeting_number",
    "add_meeting_detail",
    "remove_meeting_detail",
    "toggle_plot",
    "redistribute",
    "suggest_next_dates",
    "SuggestedDates",
    "merge_runs",
    "MergeSegment",
]
