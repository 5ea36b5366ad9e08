"""Validierung gespeicherter Semesterpläne.

Prüft ein geladenes Dokument auf Verletzungen der Planer-Invarianten,
unabhängig davon, wie es entstanden ist (Import, Handbearbeitung, alte
Version). Nützlich nach migrate oder vor dem Export.
"""

from collections import defaultdict
from typing import Literal

from pydantic import BaseModel

from models.plan import CurriculumPlan
from planner.calendar_grid import cell_for_date, is_in_grid


class ValidationViolation(BaseModel):
    """Eine einzelne Verletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "plot_on_block"
    description: str
    entity: str          # Block-ID, Meeting-Nr. oder Zelle


class ValidationReport(BaseModel):
    """Ergebnis der Plan-Validierung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    @property
    def errors(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def constraints(self) -> set[str]:
        return {v.constraint for v in self.violations}

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}"]
        console.print(Panel("\n".join(lines), title="Plan-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=24)
        table.add_column("Objekt", width=14)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class PlanValidator:
    """Prüft einen CurriculumPlan auf Invarianten-Verletzungen."""

    def validate(self, plan: CurriculumPlan) -> ValidationReport:
        """Führt alle Checks durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []

        violations.extend(self._check_blocks(plan))
        violations.extend(self._check_plots(plan))
        violations.extend(self._check_jp_sums(plan))
        violations.extend(self._check_required_fields(plan))
        violations.extend(self._check_meeting_numbers(plan))
        violations.extend(self._check_dates(plan))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_blocks(self, plan: CurriculumPlan) -> list[ValidationViolation]:
        """Höchstens ein Block pro Zelle, nur Zellen des Rasters."""
        violations: list[ValidationViolation] = []
        seen: dict[tuple[int, int], str] = {}
        for b in plan.blocked_weeks:
            if not is_in_grid(plan.semester_half, b.period, b.slot):
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="block_outside_grid",
                    entity=b.id,
                    description=f"Block '{b.label}' in ({b.period}, {b.slot}) außerhalb des Rasters",
                ))
            if b.cell in seen:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="duplicate_block",
                    entity=b.id,
                    description=(
                        f"Zelle ({b.period}, {b.slot}) doppelt gesperrt "
                        f"('{seen[b.cell]}' und '{b.label}')"
                    ),
                ))
            else:
                seen[b.cell] = b.label
        return violations

    def _check_plots(self, plan: CurriculumPlan) -> list[ValidationViolation]:
        """Keine Plots außerhalb des Rasters, auf Blöcken oder doppelt belegt."""
        violations: list[ValidationViolation] = []
        blocked = {b.cell for b in plan.blocked_weeks}
        owners: dict[tuple[int, int], list[str]] = defaultdict(list)

        for e in plan.entries:
            for p in e.plot_weeks:
                owners[p.cell].append(e.meeting_no)
                if not is_in_grid(plan.semester_half, p.period, p.slot):
                    violations.append(ValidationViolation(
                        severity="error",
                        constraint="plot_outside_grid",
                        entity=e.meeting_no,
                        description=f"Plot ({p.period}, {p.slot}) außerhalb des Rasters",
                    ))
                if p.cell in blocked:
                    violations.append(ValidationViolation(
                        severity="error",
                        constraint="plot_on_block",
                        entity=e.meeting_no,
                        description=f"Plot ({p.period}, {p.slot}) liegt auf einer gesperrten Woche",
                    ))

        for (period, slot), numbers in owners.items():
            if len(numbers) > 1:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="shared_plot",
                    entity=f"({period}, {slot})",
                    description=f"Zelle von mehreren Entries belegt: {', '.join(numbers)}",
                ))
        return violations

    def _check_jp_sums(self, plan: CurriculumPlan) -> list[ValidationViolation]:
        """sum(plot_weeks.jp) == duration, gleichmäßig verteilt."""
        violations: list[ValidationViolation] = []
        for e in plan.entries:
            if not e.plot_weeks:
                continue
            jps = [p.jp for p in e.plot_weeks]
            if sum(jps) != e.duration:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="jp_sum_mismatch",
                    entity=e.meeting_no,
                    description=f"Summe der Wochen-JP {sum(jps)} ≠ Dauer {e.duration} JP",
                ))
            elif max(jps) - min(jps) > 1:
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="jp_uneven",
                    entity=e.meeting_no,
                    description=f"JP ungleichmäßig verteilt: {jps}",
                ))
        return violations

    def _check_required_fields(self, plan: CurriculumPlan) -> list[ValidationViolation]:
        violations: list[ValidationViolation] = []
        for e in plan.entries:
            if not e.chapter.strip():
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="empty_chapter",
                    entity=e.id,
                    description="Chapter ist leer",
                ))
            if not e.meeting_details:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="no_meetings",
                    entity=e.id,
                    description="Entry ohne Meeting",
                ))
        for b in plan.blocked_weeks:
            if not b.label.strip():
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="empty_block_label",
                    entity=b.id,
                    description=f"Block ({b.period}, {b.slot}) ohne Label",
                ))
        return violations

    def _check_meeting_numbers(self, plan: CurriculumPlan) -> list[ValidationViolation]:
        """Meeting-Nummern sollen planweit eindeutig sein."""
        violations: list[ValidationViolation] = []
        users: dict[int, list[str]] = defaultdict(list)
        for e in plan.entries:
            for d in e.meeting_details:
                users[d.number].append(e.id)
        for number, entry_ids in sorted(users.items()):
            if len(entry_ids) > 1:
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="duplicate_meeting_number",
                    entity=f"P{number}",
                    description=f"P{number} mehrfach vergeben ({len(entry_ids)}×)",
                ))
        return violations

    def _check_dates(self, plan: CurriculumPlan) -> list[ValidationViolation]:
        """Startdaten außerhalb des Halbjahres, Ende vor Start."""
        violations: list[ValidationViolation] = []
        for e in plan.entries:
            if e.date_range is None:
                continue
            if e.date_range.end < e.date_range.start:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="date_range_reversed",
                    entity=e.meeting_no,
                    description=f"Ende {e.date_range.end} vor Start {e.date_range.start}",
                ))
            period, slot = cell_for_date(e.date_range.start, plan.semester_half)
            if not is_in_grid(plan.semester_half, period, slot):
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="date_outside_semester",
                    entity=e.meeting_no,
                    description=(
                        f"Start {e.date_range.start} liegt nicht in "
                        f"{plan.semester.label}"
                    ),
                ))
        return violations
