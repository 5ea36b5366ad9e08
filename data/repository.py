"""PlanRepository – Ablage der Semesterpläne als JSON-Dokumente.

Ein Dokument pro Plan (<data_dir>/<plan_id>.json). Gelesen wird immer das
ganze Dokument, geschrieben werden ganze Felder (kein Patchen einzelner
Elemente, keine Versionierung: der letzte Schreibvorgang gewinnt).
"""

import logging
from pathlib import Path
from typing import Any

from models.plan import CurriculumPlan
from planner.errors import ValidationError

logger = logging.getLogger(__name__)

# Felder, die save_fields überschreiben darf
WRITABLE_FIELDS = frozenset({
    "class_name", "blocked_weeks", "entries", "meeting_counter",
})


class PlanNotFound(Exception):
    """Kein Plan-Dokument mit dieser ID vorhanden."""

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Plan '{plan_id}' nicht gefunden.")


class PlanRepository:
    """Verwaltet Plan-Dokumente in einem Verzeichnis."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def _path(self, plan_id: str) -> Path:
        return self.data_dir / f"{plan_id}.json"

    def exists(self, plan_id: str) -> bool:
        return self._path(plan_id).exists()

    # ─── Lesen ───

    def load(self, plan_id: str) -> CurriculumPlan:
        """Lädt das komplette Dokument."""
        path = self._path(plan_id)
        if not path.exists():
            raise PlanNotFound(plan_id)
        return CurriculumPlan.load_json(path)

    def list_plans(self, query: str = "") -> list[CurriculumPlan]:
        """Alle Pläne, sortiert nach Jahr absteigend, dann Semester absteigend.

        query filtert nach Klassenname (ohne Groß-/Kleinschreibung) oder Jahr.
        """
        if not self.data_dir.exists():
            return []
        plans = [CurriculumPlan.load_json(p) for p in sorted(self.data_dir.glob("*.json"))]
        if query:
            needle = query.lower()
            plans = [
                p for p in plans
                if needle in p.class_name.lower() or query in p.year
            ]
        plans.sort(key=lambda p: (p.year, p.semester_half), reverse=True)
        return plans

    # ─── Schreiben ───

    def create(self, class_name: str, half: int, year: str) -> CurriculumPlan:
        """Legt einen leeren Plan an und speichert ihn.

        Raises:
            ValidationError: Klassenname leer.
        """
        class_name = (class_name or "").strip()
        if not class_name:
            raise ValidationError("Nama kelas harus diisi – Klassenname darf nicht leer sein.")
        plan = CurriculumPlan(
            class_name=class_name,
            semester_half=half,
            year=year.strip(),
        )
        self.add(plan)
        return self.load(plan.id)

    def add(self, plan: CurriculumPlan) -> None:
        """Speichert einen kompletten Plan (z.B. nach Import)."""
        plan.save_json(self._path(plan.id))
        logger.info(f"Plan gespeichert: {plan.id} ({plan.class_name}, {plan.year})")

    def save_fields(self, plan_id: str, **fields: Any) -> CurriculumPlan:
        """Ersetzt die übergebenen Felder vollständig und speichert.

        Raises:
            PlanNotFound: unbekannte ID.
            ValueError: nicht beschreibbares Feld.
        """
        unknown = set(fields) - WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"Felder nicht beschreibbar: {sorted(unknown)}")
        current = self.load(plan_id)
        updated = CurriculumPlan.model_validate({
            **current.model_dump(),
            **{k: _dump(v) for k, v in fields.items()},
        })
        updated.save_json(self._path(plan_id))
        logger.info(f"Plan {plan_id}: Felder {sorted(fields)} überschrieben")
        return self.load(plan_id)

    def delete(self, plan_id: str) -> bool:
        """Löscht einen Plan. Gibt True zurück wenn ein Dokument entfernt wurde."""
        path = self._path(plan_id)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"Plan gelöscht: {plan_id}")
        return True


def _dump(value: Any) -> Any:
    """Pydantic-Modelle (auch in Listen) zu Dicts für die Neuvalidierung."""
    if isinstance(value, list):
        return [_dump(v) for v in value]
    if hasattr(value, "model_dump"):
        return value.model_dump()
    return value
