"""Bearbeitungssitzung: hält das geladene Aggregat und schreibt Änderungen zurück.

Jede Aktion erzeugt einen neuen Plan und übergibt das geänderte Feld
(blocked_weeks oder entries) vollständig an das Repository. Kein Locking:
der letzte Schreibvorgang gewinnt (ein Plan gehört genau einer Lehrkraft).
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from models.entry import Entry
from models.plan import CurriculumPlan
from planner import blocks, entries
from planner.allocator import toggle_plot
from planner.errors import EntryNotFound

if TYPE_CHECKING:
    from config.schema import PlannerConfig
    from data.repository import PlanRepository

logger = logging.getLogger(__name__)


# ─── Kommandos zwischen Ansichten ─────────────────────────────────────────────

ADD_ENTRY = "add_entry"


@dataclass
class EditorCommands:
    """Explizite Warteschlange für Anfragen zwischen zwei Ansichten.

    Beispiel: die Kalenderansicht fordert das "Pertemuan hinzufügen"-Formular
    der Entry-Ansicht an; die Entry-Ansicht holt die Anfrage ab.
    """

    _queue: deque = field(default_factory=deque)

    def request_add_entry(self) -> None:
        self._queue.append(ADD_ENTRY)

    def take(self, kind: str) -> bool:
        """Entfernt eine Anfrage dieses Typs; True wenn eine vorhanden war."""
        try:
            self._queue.remove(kind)
        except ValueError:
            return False
        return True

    def __len__(self) -> int:
        return len(self._queue)


# ─── Sitzung ──────────────────────────────────────────────────────────────────

class EditorSession:
    """Bearbeitet einen Plan und speichert jede Änderung feldweise."""

    def __init__(
        self,
        repository: "PlanRepository",
        plan_id: str,
        planner_config: Optional["PlannerConfig"] = None,
    ) -> None:
        self.repository = repository
        self.plan: CurriculumPlan = repository.load(plan_id)
        self.planner_config = planner_config
        self.commands = EditorCommands()

    # ─── Blöcke ───

    def add_block(self, period: int, slot: int, type: str, label: str) -> CurriculumPlan:
        plan = blocks.add_block(self.plan, period, slot, type, label)
        return self._commit_blocks(plan)

    def remove_block(self, block_id: str) -> CurriculumPlan:
        plan = blocks.remove_block(self.plan, block_id)
        return self._commit_blocks(plan)

    # ─── Entries ───

    def save_entry(self, entry: Entry) -> CurriculumPlan:
        """Legt ein neues Entry an oder ersetzt ein bestehendes."""
        if self.plan.entry_by_id(entry.id) is None:
            plan = entries.add_entry(self.plan, entry)
        else:
            plan = entries.update_entry(self.plan, entry)
        return self._commit_entries(plan)

    def delete_entry(self, entry_id: str) -> CurriculumPlan:
        plan = entries.delete_entry(self.plan, entry_id)
        return self._commit_entries(plan)

    def toggle(self, entry_id: str, period: int, slot: int) -> Entry:
        """Schaltet eine Zelle für ein gespeichertes Entry um und speichert."""
        entry = self.plan.entry_by_id(entry_id)
        if entry is None:
            raise EntryNotFound(entry_id)
        updated = toggle_plot(entry, period, slot, self.plan)
        if updated is not entry:
            self._commit_entries(entries.update_entry(self.plan, updated))
        return updated

    def draft(self) -> entries.EntryDraft:
        """Formular-Vorbelegung für ein neues Entry."""
        pc = self.planner_config
        if pc is None:
            return entries.new_entry_template(self.plan)
        return entries.new_entry_template(
            self.plan,
            default_jp=pc.default_meeting_jp,
            max_steps=pc.suggest_max_steps,
            span_days=pc.entry_span_days,
        )

    # ─── Speichern ───

    def _commit_blocks(self, plan: CurriculumPlan) -> CurriculumPlan:
        self.repository.save_fields(plan.id, blocked_weeks=plan.blocked_weeks)
        self.plan = plan
        return plan

    def _commit_entries(self, plan: CurriculumPlan) -> CurriculumPlan:
        self.repository.save_fields(
            plan.id, entries=plan.entries, meeting_counter=plan.meeting_counter
        )
        self.plan = plan
        return plan
