"""PDF-Export für den Semesterplan (fpdf2)."""

from pathlib import Path
from typing import Optional

from config.schema import AppConfig
from models.plan import CurriculumPlan

from export.helpers import (
    COLORS, FIXED_COLUMNS, PlanLayout, build_plan_layout, hex_to_rgb, today_str,
)


def _pdf_safe(text: str) -> str:
    """Ersetzt nicht-latin-1-fähige Zeichen für fpdf2-Built-in-Fonts."""
    return (
        text
        .replace("—", " - ")   # em dash
        .replace("–", "-")      # en dash
        .replace("…", "...")    # Auslassungspunkte
        .replace("·", ".")      # Mittelpunkt
    )


# ─── A4-Querformat-Dimensionen ────────────────────────────────────────────────
# Landscape A4: 297 × 210 mm
# Nutzbare Breite (Margin 10 links+rechts): 277 mm
# Feste Spalten: 14 + 34 + 26 + 40 + 12 = 126 mm, Rest für die Wochen

_FIXED_W = [14, 34, 26, 40, 12]
_TABLE_W = 277
_TABLE_TOP = 22.0
_PAGE_BOTTOM = 192.0
_ROW_HEADER_H = 7     # mm
_ROW_BODY_H = 9       # mm
_FONT_HEADER = 7      # pt
_FONT_CONTENT = 6     # pt
_LINE_H = 3.0         # mm pro Zeile bei 6pt


class _PlanPdf:
    """Interner Wrapper um fpdf.FPDF für CO-Seiten."""

    def __init__(self, school_name: str):
        from fpdf import FPDF

        class _Pdf(FPDF):
            def __init__(inner, sn):
                super().__init__(orientation="L", unit="mm", format="A4")
                inner._school_name = sn
                inner._entity_title = ""
                inner.alias_nb_pages()
                inner.set_auto_page_break(auto=False)
                inner.set_margins(left=10, top=22, right=10)

            def header(inner):
                inner.set_font("Helvetica", "B", 11)
                inner.set_xy(10, 8)
                inner.cell(130, 7, _pdf_safe(inner._school_name), border=0, align="L")
                inner.cell(0,   7, _pdf_safe(inner._entity_title), border=0, align="R")
                inner.ln(0)
                inner.set_draw_color(150, 150, 150)
                inner.line(10, 18, inner.w - 10, 18)

            def footer(inner):
                inner.set_y(-14)
                inner.set_font("Helvetica", "I", 7)
                inner.cell(
                    0, 8,
                    f"{today_str()}  |  Halaman {inner.page_no()}/{{nb}}",
                    border=0, align="C",
                )

        self._pdf = _Pdf(school_name)

    def set_entity(self, title: str) -> None:
        self._pdf._entity_title = title

    def add_page(self) -> None:
        self._pdf.add_page()

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._pdf.output(str(path))

    # ─── Zellen-Zeichnung ─────────────────────────────────────────────────────

    def draw_cell(
        self,
        x: float, y: float,
        w: float, h: float,
        text: str = "",
        bg_hex: Optional[str] = None,
        bold: bool = False,
        font_size: int = _FONT_CONTENT,
        text_color: tuple[int, int, int] = (0, 0, 0),
        align: str = "C",
    ) -> None:
        """Zeichnet eine Zelle mit Hintergrund, Rand und zentriertem Text."""
        pdf = self._pdf

        if bg_hex:
            r, g, b = hex_to_rgb(bg_hex)
            pdf.set_fill_color(r, g, b)
            pdf.rect(x, y, w, h, style="F")

        pdf.set_draw_color(180, 180, 180)
        pdf.rect(x, y, w, h, style="D")

        if text:
            style = "B" if bold else ""
            pdf.set_font("Helvetica", style, font_size)
            pdf.set_text_color(*text_color)

            # so viele Zeichen wie in die Breite passen, max. 2 Zeilen
            max_chars = max(int(w / (font_size * 0.22)), 1)
            lines = [ln for ln in _pdf_safe(text).split("\n") if ln][:2]
            total_text_h = len(lines) * _LINE_H
            y_text = y + max(0.5, (h - total_text_h) / 2)

            for line in lines:
                pdf.set_xy(x, y_text)
                pdf.cell(w, _LINE_H, line[:max_chars], border=0, align=align)
                y_text += _LINE_H

            pdf.set_text_color(0, 0, 0)

    def draw_block(
        self, x: float, y: float, w: float, h: float, label: str, bg_hex: str
    ) -> None:
        """Ein zusammengefasster Blockbereich: ein Rechteck, Label senkrecht."""
        pdf = self._pdf
        r, g, b = hex_to_rgb(bg_hex)
        pdf.set_fill_color(r, g, b)
        pdf.set_draw_color(180, 180, 180)
        pdf.rect(x, y, w, h, style="DF")

        pdf.set_font("Helvetica", "B", _FONT_CONTENT)
        pdf.set_text_color(255, 255, 255)
        text = _pdf_safe(label)
        max_chars = max(int(h / (_FONT_CONTENT * 0.22)), 1)
        cx, cy = x + w / 2, y + h / 2
        with pdf.rotation(90, x=cx, y=cy):
            pdf.set_xy(cx - h / 2, cy - _LINE_H / 2)
            pdf.cell(h, _LINE_H, text[:max_chars], border=0, align="C")
        pdf.set_text_color(0, 0, 0)


class PdfExporter:
    """Exportiert einen CurriculumPlan als druckbares CO (A4 quer)."""

    def __init__(self, plan: CurriculumPlan, config: Optional[AppConfig] = None):
        self.plan = plan
        self.config = config or AppConfig()
        self.layout: PlanLayout = build_plan_layout(plan)
        self._week_w = (_TABLE_W - sum(_FIXED_W)) / len(self.layout.columns)
        self._table_x = 10.0   # linker Rand

    @property
    def rows_per_page(self) -> int:
        body_top = _TABLE_TOP + 2 * _ROW_HEADER_H
        return int((_PAGE_BOTTOM - body_top) // _ROW_BODY_H)

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erzeugt die PDF; lange Pläne werden auf mehrere Seiten verteilt."""
        plan = self.plan
        pdf = _PlanPdf(self.config.school_name)
        entity = f"CO {plan.class_name} | {plan.semester.label} | {plan.year}"
        if self.config.export.teacher_name:
            entity += f" | {self.config.export.teacher_name}"
        pdf.set_entity(entity)

        per_page = self.rows_per_page
        for first in range(0, self.layout.body_rows, per_page):
            count = min(per_page, self.layout.body_rows - first)
            pdf.add_page()
            self._draw_page(pdf, first, count)
        pdf.save(output_path)

    # ─── Tabellenzeichnung ────────────────────────────────────────────────────

    def _week_x(self, column: int) -> float:
        return self._table_x + sum(_FIXED_W) + column * self._week_w

    def _draw_page(self, pdf: _PlanPdf, first_row: int, row_count: int) -> None:
        """Kopfzeilen, Entry-Zeilen first_row.. und die Blockbereiche."""
        layout = self.layout
        x = self._table_x
        y = _TABLE_TOP
        white = (255, 255, 255)

        # Feste Spalten über beide Kopfzeilen
        cx = x
        for label, w in zip(FIXED_COLUMNS, _FIXED_W):
            pdf.draw_cell(cx, y, w, 2 * _ROW_HEADER_H, label, bg_hex=COLORS["header"],
                          bold=True, font_size=_FONT_HEADER, text_color=white)
            cx += w

        for header in layout.periods:
            pdf.draw_cell(self._week_x(header.first_column), y,
                          header.span * self._week_w, _ROW_HEADER_H, header.name,
                          bg_hex=COLORS["header"], bold=True,
                          font_size=_FONT_HEADER, text_color=white)
        for i, column in enumerate(layout.columns):
            pdf.draw_cell(self._week_x(i), y + _ROW_HEADER_H, self._week_w,
                          _ROW_HEADER_H, str(column.slot), bg_hex=COLORS["subheader"],
                          bold=True, font_size=_FONT_HEADER)

        body_y = y + 2 * _ROW_HEADER_H
        for offset in range(row_count):
            index = first_row + offset
            row = layout.rows[index] if index < len(layout.rows) else None
            ry = body_y + offset * _ROW_BODY_H
            cx = x
            values = row.fixed_cells if row is not None else [""] * len(FIXED_COLUMNS)
            for value, w in zip(values, _FIXED_W):
                pdf.draw_cell(cx, ry, w, _ROW_BODY_H, value)
                cx += w
            for i in range(len(layout.columns)):
                if layout.span_covering(i) is not None:
                    continue
                jp = row.jp_by_column.get(i) if row is not None else None
                if jp is None:
                    pdf.draw_cell(self._week_x(i), ry, self._week_w, _ROW_BODY_H)
                else:
                    pdf.draw_cell(self._week_x(i), ry, self._week_w, _ROW_BODY_H,
                                  str(jp), bg_hex=COLORS["jp"], bold=True,
                                  text_color=white)

        for span in layout.block_spans:
            pdf.draw_block(
                self._week_x(span.first_column), body_y,
                span.span * self._week_w, row_count * _ROW_BODY_H,
                span.block.label, span.block.color,
            )
