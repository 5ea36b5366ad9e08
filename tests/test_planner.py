"""Tests für den Planer-Kern: Raster, Blöcke, Meetings, Platzierung, Vorschläge, Merge."""

from datetime import date, timedelta

import pytest

from models.blocked_week import BlockType
from models.entry import DateRange, Entry, MeetingDetail, PlotWeek
from models.plan import CurriculumPlan
from planner.allocator import occupied_cells, redistribute, toggle_plot
from planner.blocks import add_block, block_at, blocks_sorted, is_blocked, remove_block
from planner.calendar_grid import (
    cell_for_date, grid_cells, is_in_grid, periods_for, slot_count, slot_count_for,
)
from planner.date_suggester import suggest_next_dates
from planner.errors import DuplicateBlock, ValidationError
from planner.meetings import (
    add_meeting_detail,
    compose_duration,
    compose_meeting_no,
    next_meeting_number,
    parse_meeting_numbers,
    remove_meeting_detail,
    sorted_entries,
)
from planner.merge import merge_all, merge_runs


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def _make_plan(half: int = 2, **kwargs) -> CurriculumPlan:
    return CurriculumPlan(class_name="VII A", semester_half=half, year="2025", **kwargs)


def _make_entry(
    numbers: list[int],
    jp: int = 2,
    start: date | None = None,
    cells: list[tuple[int, int]] | None = None,
    chapter: str = "Bab 1",
) -> Entry:
    details = [MeetingDetail(number=n, jp=jp) for n in numbers]
    plots = [PlotWeek(period=p, slot=s) for p, s in (cells or [])]
    return Entry(
        chapter=chapter,
        meeting_details=details,
        date_range=DateRange(start=start, end=start + timedelta(days=4)) if start else None,
        plot_weeks=redistribute(plots, compose_duration(details)),
    )


# ─── Kalenderraster ───────────────────────────────────────────────────────────

class TestCalendarGrid:
    def test_periods_in_order(self):
        assert periods_for(1) == ["Juli", "Agustus", "September", "Oktober", "November", "Desember"]
        assert periods_for(2)[0] == "Januari"
        assert periods_for(2)[-1] == "Juni"

    def test_long_months_have_five_slots(self):
        assert slot_count("Juli") == 5
        assert slot_count("Oktober") == 5
        assert slot_count("April") == 5
        assert slot_count("Agustus") == 4
        assert slot_count("Januari") == 4

    def test_total_cells_per_half(self):
        assert len(grid_cells(1)) == 26
        assert len(grid_cells(2)) == 25

    def test_slot_count_for_outside_periods(self):
        assert slot_count_for(2, 4) == 5
        assert slot_count_for(1, 0) == 0
        assert slot_count_for(1, 7) == 0

    def test_is_in_grid(self):
        assert is_in_grid(1, 1, 5)          # Juli hat 5 Wochen
        assert not is_in_grid(1, 2, 5)      # Agustus nur 4
        assert not is_in_grid(2, 1, 0)

    def test_grid_cells_column_order(self):
        cells = grid_cells(2)
        assert cells[:5] == [(1, 1), (1, 2), (1, 3), (1, 4), (2, 1)]

    def test_cell_for_date(self):
        assert cell_for_date(date(2025, 1, 6), 2) == (1, 1)
        assert cell_for_date(date(2025, 1, 27), 2) == (1, 4)
        assert cell_for_date(date(2025, 7, 29), 1) == (1, 5)
        assert cell_for_date(date(2025, 4, 8), 2) == (4, 2)

    def test_cell_for_date_outside_half(self):
        period, _ = cell_for_date(date(2025, 3, 15), 1)
        assert period < 1
        period, _ = cell_for_date(date(2025, 7, 1), 2)
        assert period > 6


# ─── Block-Registry ───────────────────────────────────────────────────────────

class TestBlocks:
    def test_add_block_returns_new_plan(self):
        plan = _make_plan()
        updated = add_block(plan, 3, 2, "religious", "  Idul Fitri  ")
        assert plan.blocked_weeks == []
        block = block_at(updated, 3, 2)
        assert block is not None
        assert block.label == "Idul Fitri"
        assert block.type == BlockType.RELIGIOUS
        assert block.color == "FFD700"

    def test_empty_label_rejected(self):
        with pytest.raises(ValidationError):
            add_block(_make_plan(), 1, 1, "holiday", "   ")

    def test_duplicate_block_rejected(self):
        plan = add_block(_make_plan(), 1, 1, "holiday", "Tahun Baru")
        with pytest.raises(DuplicateBlock) as exc:
            add_block(plan, 1, 1, "exam", "Ujian")
        assert (exc.value.period, exc.value.slot) == (1, 1)

    def test_cell_outside_grid_rejected(self):
        with pytest.raises(ValidationError):
            add_block(_make_plan(half=2), 1, 5, "holiday", "Libur")   # Januari: 4 Wochen

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            add_block(_make_plan(), 1, 1, "party", "Pesta")

    def test_plotted_cell_rejected(self):
        plan = _make_plan(entries=[_make_entry([1], cells=[(2, 1)])])
        with pytest.raises(ValidationError):
            add_block(plan, 2, 1, "exam", "ATS")

    def test_remove_block(self):
        plan = add_block(_make_plan(), 1, 1, "holiday", "Libur")
        block_id = plan.blocked_weeks[0].id
        plan = remove_block(plan, block_id)
        assert not is_blocked(plan, 1, 1)

    def test_remove_unknown_block_is_noop(self):
        plan = add_block(_make_plan(), 1, 1, "holiday", "Libur")
        assert remove_block(plan, "gibt-es-nicht").blocked_weeks == plan.blocked_weeks

    def test_blocks_sorted(self):
        plan = _make_plan()
        plan = add_block(plan, 4, 1, "exam", "B")
        plan = add_block(plan, 1, 3, "exam", "A")
        assert [b.label for b in blocks_sorted(plan)] == ["A", "B"]


# ─── Meeting-Nummerierung ─────────────────────────────────────────────────────

class TestMeetings:
    def test_compose_meeting_no_sorted(self):
        details = [MeetingDetail(number=11, jp=2), MeetingDetail(number=10, jp=3)]
        assert compose_meeting_no(details) == "P10/P11"
        assert compose_duration(details) == 5

    def test_meeting_no_parses_back(self):
        details = [MeetingDetail(number=n, jp=2) for n in (7, 3, 12)]
        assert sorted(parse_meeting_numbers(compose_meeting_no(details))) == [3, 7, 12]

    def test_next_meeting_number_empty_plan(self):
        assert next_meeting_number(_make_plan()) == 1

    def test_next_meeting_number_after_existing(self):
        plan = _make_plan(entries=[_make_entry([3, 4])])
        assert next_meeting_number(plan) == 5

    def test_add_meeting_detail(self):
        entry = _make_entry([3, 4])
        updated = add_meeting_detail(entry)
        assert updated.meeting_numbers == [3, 4, 5]
        assert updated.meeting_details[-1].jp == 2
        assert updated.meeting_no == "P3/P4/P5"
        assert updated.duration == 6

    def test_add_meeting_detail_redistributes(self):
        entry = _make_entry([1], jp=2, cells=[(1, 1), (1, 2)])
        updated = add_meeting_detail(entry, jp=3)
        assert [p.jp for p in updated.plot_weeks] == [3, 2]

    def test_remove_keeps_last_meeting(self):
        entry = _make_entry([1])
        assert remove_meeting_detail(entry, entry.meeting_details[0].id) is entry

    def test_remove_meeting_detail(self):
        entry = _make_entry([1, 2], jp=2, cells=[(1, 1)])
        updated = remove_meeting_detail(entry, entry.meeting_details[1].id)
        assert updated.meeting_no == "P1"
        assert updated.plot_weeks[0].jp == 2

    def test_sorted_entries_natural_order(self):
        plan = _make_plan(entries=[_make_entry([10]), _make_entry([2]), _make_entry([1])])
        assert [e.meeting_no for e in sorted_entries(plan)] == ["P1", "P2", "P10"]


# ─── Platzierung ──────────────────────────────────────────────────────────────

class TestAllocator:
    def test_redistribute_remainder_first(self):
        cells = [PlotWeek(period=1, slot=s) for s in (1, 2, 3)]
        assert [p.jp for p in redistribute(cells, 5)] == [2, 2, 1]

    def test_toggle_three_cells(self):
        plan = _make_plan(half=1)
        entry = Entry(
            chapter="Bab 1",
            meeting_details=[MeetingDetail(number=1, jp=3), MeetingDetail(number=2, jp=2)],
        )
        for slot in (1, 2, 3):
            entry = toggle_plot(entry, 1, slot, plan)
        assert [(p.slot, p.jp) for p in entry.plot_weeks] == [(1, 2), (2, 2), (3, 1)]
        assert sum(p.jp for p in entry.plot_weeks) == entry.duration

    def test_toggle_off_redistributes(self):
        plan = _make_plan(half=1)
        entry = _make_entry([1], jp=5, cells=[(1, 1), (1, 2), (1, 3)])
        entry = toggle_plot(entry, 1, 1, plan)
        assert [(p.slot, p.jp) for p in entry.plot_weeks] == [(2, 3), (3, 2)]

    def test_toggle_last_cell_off(self):
        plan = _make_plan()
        entry = toggle_plot(_make_entry([1], cells=[(2, 2)]), 2, 2, plan)
        assert entry.plot_weeks == []

    def test_blocked_cell_is_noop(self):
        plan = add_block(_make_plan(), 1, 2, "holiday", "Libur")
        entry = _make_entry([1], cells=[(1, 1)])
        assert toggle_plot(entry, 1, 2, plan) is entry

    def test_cell_of_other_entry_is_noop(self):
        other = _make_entry([1], cells=[(1, 3)])
        plan = _make_plan(entries=[other])
        entry = _make_entry([2])
        assert toggle_plot(entry, 1, 3, plan) is entry

    def test_outside_grid_is_noop(self):
        entry = _make_entry([1])
        assert toggle_plot(entry, 2, 5, _make_plan(half=1)) is entry

    def test_own_cell_can_be_toggled_off(self):
        entry = _make_entry([1], cells=[(1, 3)])
        plan = _make_plan(entries=[entry])
        assert toggle_plot(entry, 1, 3, plan).plot_weeks == []

    def test_occupied_cells(self):
        a = _make_entry([1], cells=[(1, 1), (1, 2)])
        b = _make_entry([2], cells=[(2, 1)])
        cells = occupied_cells(_make_plan(entries=[a, b]))
        assert cells[(1, 2)].id == a.id
        assert cells[(2, 1)].id == b.id


# ─── Datumsvorschlag ──────────────────────────────────────────────────────────

class TestDateSuggester:
    def test_empty_plan(self):
        result = suggest_next_dates(_make_plan())
        assert result.is_empty
        assert not result.is_valid

    def test_latest_entry_without_date(self):
        plan = _make_plan(entries=[
            _make_entry([1], start=date(2025, 1, 6)),
            _make_entry([2]),
        ])
        assert suggest_next_dates(plan).is_empty

    def test_next_week_when_free(self):
        plan = _make_plan(entries=[_make_entry([1], start=date(2025, 1, 6), cells=[(1, 1)])])
        result = suggest_next_dates(plan)
        assert result.start == date(2025, 1, 13)
        assert result.end == date(2025, 1, 17)
        assert result.steps == 0
        assert result.is_valid

    def test_skips_blocked_then_occupied_week(self):
        latest = _make_entry([5], start=date(2025, 1, 6), cells=[(1, 1)])
        occupant = _make_entry([1], cells=[(1, 3)])
        plan = add_block(_make_plan(entries=[occupant, latest]), 1, 2, "holiday", "Libur")
        result = suggest_next_dates(plan)
        assert result.start == date(2025, 1, 27)
        assert result.end == date(2025, 1, 31)
        assert result.steps == 2
        assert result.is_valid

    def test_bound_exhausted_returns_last_candidate(self):
        start = date(2025, 6, 2)
        plan = _make_plan(entries=[_make_entry([1], start=start, cells=[(6, 1)])])
        for slot in (2, 3, 4):
            plan = add_block(plan, 6, slot, "exam", "PAT")
        result = suggest_next_dates(plan, max_steps=12)
        assert result.start == start + timedelta(days=7 * 13)
        assert result.steps == 12
        assert not result.is_valid

    def test_span_days(self):
        plan = _make_plan(entries=[_make_entry([1], start=date(2025, 1, 6))])
        result = suggest_next_dates(plan, span_days=0)
        assert result.end == result.start


# ─── Merge ────────────────────────────────────────────────────────────────────

class TestMergeRuns:
    def test_idul_fitri_scenario(self):
        plan = _make_plan(half=2)
        plan = add_block(plan, 1, 2, "holiday", "Idul Fitri")
        plan = add_block(plan, 1, 3, "holiday", "Idul Fitri")
        segments = merge_runs(plan, 1)
        assert [(s.start_slot, s.span) for s in segments] == [(1, 1), (2, 2), (4, 1)]
        assert segments[1].block.label == "Idul Fitri"
        assert not segments[0].is_blocked

    def test_different_labels_do_not_merge(self):
        plan = _make_plan()
        plan = add_block(plan, 1, 1, "exam", "ATS")
        plan = add_block(plan, 1, 2, "exam", "PAS")
        assert [s.span for s in merge_runs(plan, 1)] == [1, 1, 1, 1]

    def test_different_types_do_not_merge(self):
        plan = _make_plan()
        plan = add_block(plan, 1, 1, "exam", "Libur")
        plan = add_block(plan, 1, 2, "holiday", "Libur")
        assert [s.span for s in merge_runs(plan, 1)] == [1, 1, 1, 1]

    def test_non_adjacent_runs_stay_separate(self):
        plan = _make_plan()
        plan = add_block(plan, 2, 1, "exam", "PTS")
        plan = add_block(plan, 2, 3, "exam", "PTS")
        assert [(s.start_slot, s.span) for s in merge_runs(plan, 2)] == [(1, 1), (2, 1), (3, 1), (4, 1)]

    def test_segments_cover_every_slot_once(self):
        plan = _make_plan(half=2)
        plan = add_block(plan, 4, 2, "religious", "Lebaran")
        plan = add_block(plan, 4, 3, "religious", "Lebaran")
        plan = add_block(plan, 4, 4, "religious", "Lebaran")
        for period, segments in merge_all(plan).items():
            slots = [slot for seg in segments for slot in seg.slots]
            assert slots == list(range(1, slot_count_for(2, period) + 1))

    def test_merge_all_covers_every_period(self):
        assert sorted(merge_all(_make_plan(half=1))) == list(range(1, len(periods_for(1)) + 1))
