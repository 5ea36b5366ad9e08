"""Tests für Layout, Terminal-Renderer, Excel- und PDF-Export."""

from datetime import date
from pathlib import Path

import pytest

from config.schema import AppConfig
from export.excel_export import ExcelExporter
from export.helpers import (
    build_calendar,
    build_plan_layout,
    export_filename,
    format_date_range,
    hex_to_rgb,
    truncate,
)
from export.pdf_export import PdfExporter, _pdf_safe
from export.tui_browser import draft_message
from export.tui_renderer import (
    COVERED,
    render_block_rows,
    render_calendar_rows,
    render_plan_rows,
)
from models.entry import DateRange, MeetingDetail
from models.plan import CurriculumPlan
from planner.allocator import toggle_plot
from planner.blocks import add_block
from planner.entries import add_entry, build_entry


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def _make_plan(entries: int = 2) -> CurriculumPlan:
    """Genap-Plan mit Idul Fitri in Maret 2–3 und bis zu zwei Entries."""
    plan = CurriculumPlan(class_name="VII A", semester_half=2, year="2025")
    plan = add_block(plan, 3, 2, "religious", "Idul Fitri")
    plan = add_block(plan, 3, 3, "religious", "Idul Fitri")
    plotted = [
        (1, (1, 1), date(2025, 1, 6)),
        (2, (1, 2), date(2025, 1, 13)),
    ]
    for number, cell, start in plotted[:entries]:
        entry = build_entry(
            f"Bab {number}",
            [MeetingDetail(number=number, jp=2)],
            topic=f"Thema {number}",
            date_range=DateRange(start=start, end=start.replace(day=start.day + 4)),
        )
        entry = toggle_plot(entry, *cell, plan)
        plan = add_entry(plan, entry)
    return plan


# ─── Helfer ───────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_format_date_range(self):
        dr = DateRange(start=date(2025, 1, 6), end=date(2025, 1, 10))
        assert format_date_range(dr) == "06.01.25 - 10.01.25"
        assert format_date_range(None) == ""

    def test_export_filename(self):
        assert export_filename(_make_plan(0), "xlsx") == "CO_VII_A_Genap_2025.xlsx"

    def test_truncate(self):
        assert truncate("Idul Fitri", 12) == "Idul Fitri"
        assert truncate("Libur Semester Ganjil", 6) == "Libur…"

    def test_hex_to_rgb(self):
        assert hex_to_rgb("4F46E5") == (79, 70, 229)

    def test_pdf_safe(self):
        assert _pdf_safe("P1 — Bab…") == "P1  -  Bab..."


# ─── Layout ──────────────────────────────────────────────────────────────────

class TestPlanLayout:
    def test_columns_per_half(self):
        assert len(build_plan_layout(_make_plan(0)).columns) == 25
        plan = CurriculumPlan(class_name="X", semester_half=1, year="2025")
        layout = build_plan_layout(plan)
        assert len(layout.columns) == 26
        assert [(h.name, h.span) for h in layout.periods][:2] == [("Juli", 5), ("Agustus", 4)]

    def test_block_span_merged(self):
        layout = build_plan_layout(_make_plan())
        assert len(layout.block_spans) == 1
        span = layout.block_spans[0]
        assert (span.first_column, span.span) == (9, 2)
        assert layout.span_covering(10) is span
        assert layout.span_starting_at(10) is None

    def test_rows_and_jp_columns(self):
        layout = build_plan_layout(_make_plan())
        assert [r.meeting_no for r in layout.rows] == ["P1", "P2"]
        assert layout.rows[0].jp_by_column == {0: 2}
        assert layout.rows[1].fixed_cells == ["P2", "Bab 2", "13.01.25 - 17.01.25", "Thema 2", "2 JP"]

    def test_body_rows_at_least_one(self):
        assert build_plan_layout(_make_plan(0)).body_rows == 1


# ─── Terminal-Renderer ───────────────────────────────────────────────────────

class TestRenderer:
    def test_header(self):
        header, _ = render_plan_rows(_make_plan())
        assert header[:5] == ["No", "Chapter/Bab", "Date", "TOPIC", "TIME"]
        assert header[5] == "Jan 1"
        assert len(header) == 30

    def test_block_label_once(self):
        _, rows = render_plan_rows(_make_plan())
        assert rows[0][5 + 9] == "Idul Fitri"
        assert rows[0][5 + 10] == COVERED
        assert rows[1][5 + 9] == COVERED
        assert rows[0][5] == "2"
        assert rows[1][6] == "2"

    def test_empty_plan_has_placeholder_row(self):
        _, rows = render_plan_rows(_make_plan(0))
        assert len(rows) == 1
        assert rows[0][5 + 9] == "Idul Fitri"

    def test_calendar_rows(self):
        rows = render_calendar_rows(_make_plan())
        assert rows[0] == ["Januari", "P1 (2 JP)", "P2 (2 JP)", "—", "—", ""]
        assert rows[2][2:4] == ["Idul Fitri", "Idul Fitri"]
        assert len(rows[3]) == 6 and rows[3][5] == "—"

    def test_calendar_cells(self):
        cells = build_calendar(_make_plan(), label_max_chars=5)[2].cells
        assert cells[1].kind == "block"
        assert cells[1].text == "Idul…"
        assert cells[1].color == "FFD700"

    def test_block_rows(self):
        rows = render_block_rows(_make_plan(0))
        assert [r[1:] for r in rows] == [
            ["Maret", "2", "Hari Raya", "Idul Fitri"],
            ["Maret", "3", "Hari Raya", "Idul Fitri"],
        ]

    def test_draft_message(self):
        assert draft_message(_make_plan(0)) == "P1 | 2 JP | Tanggal: —"
        assert draft_message(_make_plan()) == "P3 | 2 JP | Tanggal: 20.01.25 - 24.01.25"


# ─── Excel ───────────────────────────────────────────────────────────────────

class TestExcelExport:
    @pytest.fixture
    def workbook(self, tmp_path: Path):
        from openpyxl import load_workbook
        path = tmp_path / "co.xlsx"
        ExcelExporter(_make_plan(), AppConfig(school_name="SMP Negeri 1")).export(path)
        return load_workbook(path)

    def test_sheets(self, workbook):
        assert workbook.sheetnames == ["CO", "Blok", "Ringkasan"]

    def test_merged_ranges(self, workbook):
        merged = {str(r) for r in workbook["CO"].merged_cells.ranges}
        assert "A4:A5" in merged
        assert "F4:I4" in merged       # Januari
        assert "O6:P7" in merged       # Idul Fitri über beide Entry-Zeilen

    def test_cells(self, workbook):
        ws = workbook["CO"]
        assert ws["A6"].value == "P1"
        assert ws["F6"].value == 2
        assert ws["F6"].fill.start_color.rgb.endswith("4F46E5")
        assert ws["O6"].value == "Idul Fitri"
        assert ws["F5"].value == 1
        assert "SMP Negeri 1" in ws["A1"].value

    def test_blok_sheet(self, workbook):
        ws = workbook["Blok"]
        assert ws["A2"].value == "Maret"
        assert ws["D3"].value == "Idul Fitri"

    def test_empty_plan(self, tmp_path: Path):
        from openpyxl import load_workbook
        path = tmp_path / "leer.xlsx"
        ExcelExporter(_make_plan(0)).export(path)
        merged = {str(r) for r in load_workbook(path)["CO"].merged_cells.ranges}
        assert "O6:P6" in merged


# ─── PDF ─────────────────────────────────────────────────────────────────────

class TestPdfExport:
    def test_export_writes_pdf(self, tmp_path: Path):
        path = tmp_path / "co.pdf"
        PdfExporter(_make_plan()).export(path)
        assert path.read_bytes().startswith(b"%PDF")

    def test_long_plan_paginates(self, tmp_path: Path):
        plan = _make_plan(0)
        for number in range(1, 41):
            plan = add_entry(plan, build_entry("Bab 1", [MeetingDetail(number=number, jp=2)]))
        exporter = PdfExporter(plan)
        assert exporter.layout.body_rows > exporter.rows_per_page
        path = tmp_path / "lang.pdf"
        exporter.export(path)
        assert path.stat().st_size > 0
