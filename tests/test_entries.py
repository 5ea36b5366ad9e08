"""Tests für Entry-Lebenszyklus, Bearbeitungssitzung und Plan-Ablage."""

import json
from datetime import date
from pathlib import Path

import pytest

from config.schema import PlannerConfig
from data.repository import PlanNotFound, PlanRepository
from models.entry import DateRange, MeetingDetail, PlotWeek
from models.plan import CurriculumPlan
from planner.entries import (
    add_entry,
    build_entry,
    chapter_suggestions,
    delete_entry,
    new_entry_template,
    update_entry,
)
from planner.errors import DuplicateBlock, EntryNotFound, ValidationError
from planner.meetings import add_meeting_detail
from planner.session import ADD_ENTRY, EditorCommands, EditorSession


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def _make_plan(half: int = 2) -> CurriculumPlan:
    return CurriculumPlan(class_name="VIII B", semester_half=half, year="2025")


def _meetings(*numbers: int, jp: int = 2) -> list[MeetingDetail]:
    return [MeetingDetail(number=n, jp=jp) for n in numbers]


@pytest.fixture
def repo(tmp_path: Path) -> PlanRepository:
    return PlanRepository(tmp_path / "plans")


# ─── build_entry ──────────────────────────────────────────────────────────────

class TestBuildEntry:
    def test_strips_text(self):
        entry = build_entry("  Bab 1 Bilangan ", _meetings(1), topic=" Bilangan bulat ")
        assert entry.chapter == "Bab 1 Bilangan"
        assert entry.topic == "Bilangan bulat"

    def test_empty_chapter_rejected(self):
        with pytest.raises(ValidationError):
            build_entry("   ", _meetings(1))

    def test_no_meetings_rejected(self):
        with pytest.raises(ValidationError):
            build_entry("Bab 1", [])

    def test_end_before_start_rejected(self):
        dr = DateRange(start=date(2025, 1, 10), end=date(2025, 1, 6))
        with pytest.raises(ValidationError):
            build_entry("Bab 1", _meetings(1), date_range=dr)

    def test_plot_weeks_redistributed(self):
        plots = [PlotWeek(period=1, slot=1, jp=9), PlotWeek(period=1, slot=2, jp=9)]
        entry = build_entry("Bab 1", _meetings(1, 2, jp=3), plot_weeks=plots)
        assert [p.jp for p in entry.plot_weeks] == [3, 3]

    def test_keeps_given_id(self):
        assert build_entry("Bab 1", _meetings(1), entry_id="abc").id == "abc"


# ─── add / update / delete ───────────────────────────────────────────────────

class TestEntryLifecycle:
    def test_add_entry_sets_counter(self):
        plan = add_entry(_make_plan(), build_entry("Bab 1", _meetings(1, 2)))
        assert len(plan.entries) == 1
        assert plan.meeting_counter == 2

    def test_add_entry_reassigns_used_numbers(self):
        plan = add_entry(_make_plan(), build_entry("Bab 1", _meetings(1, 2)))
        plan = add_entry(plan, build_entry("Bab 2", _meetings(2)))
        assert plan.entries[1].meeting_no == "P3"
        assert plan.meeting_counter == 3

    def test_add_entry_keeps_free_numbers(self):
        plan = add_entry(_make_plan(), build_entry("Bab 1", _meetings(1)))
        plan = add_entry(plan, build_entry("Bab 2", _meetings(7)))
        assert plan.entries[1].meeting_no == "P7"
        assert plan.meeting_counter == 7

    def test_reassigned_number_above_counter(self):
        plan = add_entry(_make_plan(), build_entry("Bab 1", _meetings(1, 2, 3)))
        plan = delete_entry(plan, plan.entries[0].id)
        plan = add_entry(plan, build_entry("Bab 1", _meetings(1)))
        plan = add_entry(plan, build_entry("Bab 2", _meetings(1)))
        assert plan.entries[1].meeting_no == "P4"

    def test_update_entry(self):
        plan = add_entry(_make_plan(), build_entry("Bab 1", _meetings(1)))
        changed = plan.entries[0].model_copy(update={"topic": "Neu"})
        plan = update_entry(plan, changed)
        assert plan.entries[0].topic == "Neu"

    def test_update_unknown_entry(self):
        with pytest.raises(EntryNotFound):
            update_entry(_make_plan(), build_entry("Bab 1", _meetings(1)))

    def test_delete_unknown_is_noop(self):
        plan = add_entry(_make_plan(), build_entry("Bab 1", _meetings(1)))
        assert len(delete_entry(plan, "nope").entries) == 1

    def test_chapter_suggestions(self):
        plan = _make_plan()
        for chapter in ("Bab 2 Aljabar", "Bab 1 Bilangan", "Bab 2 Aljabar"):
            plan = add_entry(plan, build_entry(chapter, _meetings(len(plan.entries) + 1)))
        assert chapter_suggestions(plan) == ["Bab 1 Bilangan", "Bab 2 Aljabar"]
        assert chapter_suggestions(plan, "alja") == ["Bab 2 Aljabar"]
        assert chapter_suggestions(plan, "Bab 2 Aljabar") == ["Bab 1 Bilangan", "Bab 2 Aljabar"]

    def test_update_entry_keeps_own_numbers(self):
        plan = add_entry(_make_plan(), build_entry("Bab 1", _meetings(1, 2)))
        plan = update_entry(plan, plan.entries[0].model_copy(update={"topic": "Neu"}))
        assert plan.entries[0].meeting_no == "P1/P2"
        assert plan.meeting_counter == 2

    def test_added_meeting_does_not_reuse_other_number(self):
        plan = add_entry(_make_plan(), build_entry("Bab 1", _meetings(1)))
        plan = add_entry(plan, build_entry("Bab 2", _meetings(2)))
        plan = update_entry(plan, add_meeting_detail(plan.entries[0]))
        numbers = [n for e in plan.entries for n in e.meeting_numbers]
        assert sorted(numbers) == [1, 2, 3]
        assert plan.entries[0].meeting_no == "P1/P3"
        assert plan.meeting_counter == 3

    def test_new_entry_template(self):
        dr = DateRange(start=date(2025, 1, 6), end=date(2025, 1, 10))
        plan = add_entry(_make_plan(), build_entry("Bab 1", _meetings(1, 2), date_range=dr))
        draft = new_entry_template(plan, default_jp=3)
        assert draft.meeting_number == 3
        assert draft.jp == 3
        assert draft.start == date(2025, 1, 13)
        assert draft.end == date(2025, 1, 17)
        assert draft.chapters == ["Bab 1"]

    def test_new_entry_template_empty_plan(self):
        draft = new_entry_template(_make_plan())
        assert draft.meeting_number == 1
        assert draft.start is None


# ─── Repository ───────────────────────────────────────────────────────────────

class TestPlanRepository:
    def test_create_and_load(self, repo: PlanRepository):
        plan = repo.create(" IX C ", 1, "2025")
        loaded = repo.load(plan.id)
        assert loaded.class_name == "IX C"
        assert loaded.semester_half == 1
        assert loaded.created_at is not None

    def test_create_requires_class_name(self, repo: PlanRepository):
        with pytest.raises(ValidationError):
            repo.create("  ", 1, "2025")

    def test_load_unknown(self, repo: PlanRepository):
        with pytest.raises(PlanNotFound):
            repo.load("unbekannt")

    def test_list_sorted_year_then_semester(self, repo: PlanRepository):
        repo.create("A", 1, "2024")
        repo.create("B", 1, "2025")
        repo.create("C", 2, "2025")
        assert [p.class_name for p in repo.list_plans()] == ["C", "B", "A"]

    def test_list_query(self, repo: PlanRepository):
        repo.create("VII A", 1, "2024")
        repo.create("VIII A", 1, "2025")
        assert [p.class_name for p in repo.list_plans("viii")] == ["VIII A"]
        assert [p.class_name for p in repo.list_plans("2024")] == ["VII A"]

    def test_list_empty_dir(self, repo: PlanRepository):
        assert repo.list_plans() == []

    def test_save_fields_replaces_whole_field(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        entry = build_entry("Bab 1", _meetings(1))
        repo.save_fields(plan.id, entries=[entry], meeting_counter=1)
        saved = repo.save_fields(plan.id, entries=[])
        assert saved.entries == []
        assert saved.meeting_counter == 1
        assert saved.updated_at >= saved.created_at

    def test_save_fields_rejects_unknown_field(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        with pytest.raises(ValueError):
            repo.save_fields(plan.id, semester_half=1)

    def test_document_contains_derived_fields(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        repo.save_fields(plan.id, entries=[build_entry("Bab 1", _meetings(4, 5))])
        raw = json.loads((repo.data_dir / f"{plan.id}.json").read_text(encoding="utf-8"))
        assert raw["entries"][0]["meeting_no"] == "P4/P5"
        assert raw["entries"][0]["duration"] == 4
        assert repo.load(plan.id).entries[0].meeting_no == "P4/P5"

    def test_delete(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        assert repo.delete(plan.id) is True
        assert repo.delete(plan.id) is False
        assert not repo.exists(plan.id)


# ─── Bearbeitungssitzung ──────────────────────────────────────────────────────

class TestEditorSession:
    def test_add_block_persists(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        session = EditorSession(repo, plan.id)
        session.add_block(3, 2, "religious", "Idul Fitri")
        assert len(repo.load(plan.id).blocked_weeks) == 1

    def test_failed_add_block_changes_nothing(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        session = EditorSession(repo, plan.id)
        session.add_block(3, 2, "religious", "Idul Fitri")
        with pytest.raises(DuplicateBlock):
            session.add_block(3, 2, "exam", "ATS")
        assert len(repo.load(plan.id).blocked_weeks) == 1
        assert len(session.plan.blocked_weeks) == 1

    def test_remove_block_persists(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        session = EditorSession(repo, plan.id)
        session.add_block(1, 1, "holiday", "Tahun Baru")
        session.remove_block(session.plan.blocked_weeks[0].id)
        assert repo.load(plan.id).blocked_weeks == []

    def test_save_and_toggle_entry(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        session = EditorSession(repo, plan.id)
        entry = build_entry("Bab 1", _meetings(1, 2))
        session.save_entry(entry)
        session.toggle(entry.id, 1, 1)
        session.toggle(entry.id, 1, 2)
        stored = repo.load(plan.id).entry_by_id(entry.id)
        assert [(p.cell, p.jp) for p in stored.plot_weeks] == [((1, 1), 2), ((1, 2), 2)]
        assert repo.load(plan.id).meeting_counter == 2

    def test_toggle_on_block_is_ignored(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        session = EditorSession(repo, plan.id)
        session.add_block(1, 1, "holiday", "Tahun Baru")
        entry = build_entry("Bab 1", _meetings(1))
        session.save_entry(entry)
        stored = session.plan.entry_by_id(entry.id)
        assert session.toggle(entry.id, 1, 1) is stored
        assert repo.load(plan.id).entry_by_id(entry.id).plot_weeks == []

    def test_toggle_unknown_entry(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        with pytest.raises(EntryNotFound):
            EditorSession(repo, plan.id).toggle("nope", 1, 1)

    def test_meeting_add_persists_unique_number(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        session = EditorSession(repo, plan.id)
        first = build_entry("Bab 1", _meetings(1))
        session.save_entry(first)
        session.save_entry(build_entry("Bab 2", _meetings(2)))
        session.save_entry(add_meeting_detail(session.plan.entry_by_id(first.id)))
        stored = repo.load(plan.id)
        assert stored.entry_by_id(first.id).meeting_no == "P1/P3"
        assert stored.meeting_counter == 3

    def test_delete_entry_persists(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        session = EditorSession(repo, plan.id)
        entry = build_entry("Bab 1", _meetings(1))
        session.save_entry(entry)
        session.delete_entry(entry.id)
        assert repo.load(plan.id).entries == []

    def test_draft_uses_planner_config(self, repo: PlanRepository):
        plan = repo.create("VII A", 2, "2025")
        config = PlannerConfig(default_meeting_jp=4, suggest_max_steps=3, entry_span_days=2)
        draft = EditorSession(repo, plan.id, config).draft()
        assert draft.jp == 4
        assert draft.meeting_number == 1

    def test_unknown_plan(self, repo: PlanRepository):
        with pytest.raises(PlanNotFound):
            EditorSession(repo, "nope")


class TestEditorCommands:
    def test_request_and_take(self):
        commands = EditorCommands()
        assert commands.take(ADD_ENTRY) is False
        commands.request_add_entry()
        assert len(commands) == 1
        assert commands.take(ADD_ENTRY) is True
        assert commands.take(ADD_ENTRY) is False
        assert len(commands) == 0
