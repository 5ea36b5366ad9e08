"""Excel-Export für den Semesterplan (openpyxl)."""

from pathlib import Path
from typing import Optional

from config.schema import AppConfig
from models.plan import CurriculumPlan
from planner.blocks import blocks_sorted

from export.helpers import (
    COLORS, FIXED_COLUMNS, PlanLayout, build_plan_layout, today_str,
)


class ExcelExporter:
    """Exportiert einen CurriculumPlan in eine Excel-Datei (CO, Blok, Ringkasan)."""

    # Spaltenbreiten (Excel-Einheiten)
    FIXED_WIDTHS = [10, 22, 20, 30, 8]
    COL_WEEK_W = 5

    # Zeilenhöhen (Punkte)
    ROW_HEADER_H = 20
    ROW_BODY_H = 30

    # Erste Zeilen des Rasters
    HEADER_ROW = 4          # Monatsköpfe
    WEEK_ROW = 5            # Wochennummern
    BODY_ROW = 6            # erste Entry-Zeile

    def __init__(self, plan: CurriculumPlan, config: Optional[AppConfig] = None):
        self.plan = plan
        self.config = config or AppConfig()
        self.layout: PlanLayout = build_plan_layout(plan)

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit allen Sheets."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_co(wb)
        self._sheet_blok(wb)
        self._sheet_ringkasan(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _week_col(self, column_index: int) -> int:
        """Excel-Spalte (1-basiert) einer Wochen-Spalte des Layouts."""
        return len(FIXED_COLUMNS) + 1 + column_index

    def _write_table_header(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            c = ws.cell(row=row, column=col, value=text)
            c.fill = fill
            c.font = Font(bold=True, color="FFFFFF")
            c.alignment = self._center_align(wrap=False)
            c.border = border

    # ─── Sheet: CO ────────────────────────────────────────────────────────────

    def _sheet_co(self, wb) -> None:
        """Das CO-Raster: Kopf, Monats-/Wochenköpfe, Entries, Blockbereiche."""
        from openpyxl.styles import Alignment, Font
        from openpyxl.utils import get_column_letter

        ws = wb.create_sheet(title="CO", index=0)
        layout = self.layout
        plan = self.plan
        border = self._thin_border()
        last_col = self._week_col(len(layout.columns) - 1)

        # ── Titel ──────────────────────────────────────────────────────────
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=last_col)
        c = ws.cell(row=1, column=1, value=f"CURRICULUM OVERVIEW – {self.config.school_name}")
        c.font = Font(bold=True, size=14)
        c.alignment = self._center_align(wrap=False)
        info = f"Kelas: {plan.class_name}   {plan.semester.label}   Tahun: {plan.year}"
        if self.config.export.teacher_name:
            info += f"   Guru: {self.config.export.teacher_name}"
        ws.cell(row=2, column=1, value=info).font = Font(size=10)

        # ── Kopfzeilen ─────────────────────────────────────────────────────
        header_fill = self._fill(COLORS["header"])
        sub_fill = self._fill(COLORS["subheader"])
        for col, text in enumerate(FIXED_COLUMNS, 1):
            ws.merge_cells(
                start_row=self.HEADER_ROW, start_column=col,
                end_row=self.WEEK_ROW, end_column=col,
            )
            c = ws.cell(row=self.HEADER_ROW, column=col, value=text)
            c.fill = header_fill
            c.font = Font(bold=True, color="FFFFFF")
            c.alignment = self._center_align()
            c.border = border

        for header in layout.periods:
            start = self._week_col(header.first_column)
            end = start + header.span - 1
            ws.merge_cells(
                start_row=self.HEADER_ROW, start_column=start,
                end_row=self.HEADER_ROW, end_column=end,
            )
            c = ws.cell(row=self.HEADER_ROW, column=start, value=header.name)
            c.fill = header_fill
            c.font = Font(bold=True, color="FFFFFF")
            c.alignment = self._center_align(wrap=False)
            c.border = border

        for i, column in enumerate(layout.columns):
            c = ws.cell(row=self.WEEK_ROW, column=self._week_col(i), value=column.slot)
            c.fill = sub_fill
            c.font = Font(bold=True, size=9)
            c.alignment = self._center_align(wrap=False)
            c.border = border
        ws.row_dimensions[self.HEADER_ROW].height = self.ROW_HEADER_H

        # ── Entries ────────────────────────────────────────────────────────
        jp_fill = self._fill(COLORS["jp"])
        for offset in range(layout.body_rows):
            excel_row = self.BODY_ROW + offset
            row = layout.rows[offset] if offset < len(layout.rows) else None
            values = row.fixed_cells if row is not None else [""] * len(FIXED_COLUMNS)
            for col, value in enumerate(values, 1):
                c = ws.cell(row=excel_row, column=col, value=value)
                c.alignment = self._center_align()
                c.border = border
                c.font = Font(size=9)

            for i in range(len(layout.columns)):
                if layout.span_covering(i) is not None:
                    continue
                c = ws.cell(row=excel_row, column=self._week_col(i))
                c.border = border
                jp = row.jp_by_column.get(i) if row is not None else None
                if jp is not None:
                    c.value = jp
                    c.fill = jp_fill
                    c.font = Font(bold=True, color="FFFFFF", size=9)
                    c.alignment = self._center_align(wrap=False)
            ws.row_dimensions[excel_row].height = self.ROW_BODY_H

        # ── Blockbereiche (über alle Entry-Zeilen) ─────────────────────────
        last_body_row = self.BODY_ROW + layout.body_rows - 1
        for span in layout.block_spans:
            start = self._week_col(span.first_column)
            c = ws.cell(row=self.BODY_ROW, column=start, value=span.block.label)
            c.fill = self._fill(span.block.color)
            c.font = Font(bold=True, color="FFFFFF", size=8)
            c.alignment = Alignment(
                wrap_text=True, horizontal="center", vertical="center", text_rotation=90,
            )
            c.border = border
            ws.merge_cells(
                start_row=self.BODY_ROW, start_column=start,
                end_row=last_body_row, end_column=start + span.span - 1,
            )

        # ── Spaltenbreiten ─────────────────────────────────────────────────
        for col, width in enumerate(self.FIXED_WIDTHS, 1):
            ws.column_dimensions[get_column_letter(col)].width = width
        for i in range(len(layout.columns)):
            ws.column_dimensions[get_column_letter(self._week_col(i))].width = self.COL_WEEK_W
        ws.freeze_panes = ws.cell(row=self.BODY_ROW, column=len(FIXED_COLUMNS) + 1)

    # ─── Sheet: Blok ──────────────────────────────────────────────────────────

    def _sheet_blok(self, wb) -> None:
        """Liste der gesperrten Wochen mit Typ-Farbe."""
        ws = wb.create_sheet(title="Blok")
        border = self._thin_border()
        self._write_table_header(ws, 1, ["Bulan", "Minggu", "Jenis", "Keterangan"])
        months = self.plan.months
        for row, block in enumerate(blocks_sorted(self.plan), 2):
            ws.cell(row=row, column=1, value=months[block.period - 1]).border = border
            ws.cell(row=row, column=2, value=block.slot).border = border
            c = ws.cell(row=row, column=3, value=block.type.display_label)
            c.fill = self._fill(block.color)
            c.border = border
            ws.cell(row=row, column=4, value=block.label).border = border
        for letter, width in zip("ABCD", (14, 8, 20, 30)):
            ws.column_dimensions[letter].width = width

    # ─── Sheet: Ringkasan ─────────────────────────────────────────────────────

    def _sheet_ringkasan(self, wb) -> None:
        """Kennzahlen des Plans."""
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Ringkasan")
        border = self._thin_border()
        plan = self.plan

        ws.cell(row=1, column=1, value="Ringkasan").font = Font(bold=True, size=13)
        ws.cell(row=2, column=1, value=f"Erstellt: {today_str()}")
        self._write_table_header(ws, 4, ["Kennzahl", "Wert"])
        stats = [
            ("Kelas", plan.class_name),
            ("Semester", plan.semester.label),
            ("Tahun", plan.year),
            ("Minggu (Raster)", plan.total_weeks),
            ("Minggu di-block", len(plan.blocked_weeks)),
            ("Minggu efektif (ME)", plan.available_weeks),
            ("Pertemuan (Entries)", len(plan.entries)),
            ("Total JP", plan.planned_jp),
            ("Minggu terisi", plan.plotted_week_count),
        ]
        for row, (name, value) in enumerate(stats, 5):
            ws.cell(row=row, column=1, value=name).border = border
            ws.cell(row=row, column=2, value=value).border = border
        ws.column_dimensions["A"].width = 24
        ws.column_dimensions["B"].width = 24
