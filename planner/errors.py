"""Fehlerklassen des Planers.

ValidationError und DuplicateBlock werden dem Nutzer angezeigt und
verhindern das Speichern. PlacementConflict wird von toggle_plot intern
abgefangen (Klick auf gesperrte/belegte Zelle ist kein Ausnahmefall).
Keiner dieser Fehler verändert den Plan.
"""


class PlannerError(Exception):
    """Basisklasse aller fachlichen Fehler des Planers."""


class ValidationError(PlannerError):
    """Pflichtfeld fehlt oder Eingabe ist ungültig (Label, Chapter, Meetings)."""


class DuplicateBlock(PlannerError):
    """Die Zelle (Periode, Slot) ist bereits gesperrt."""

    def __init__(self, period: int, slot: int):
        self.period = period
        self.slot = slot
        super().__init__(f"Woche {slot} in Periode {period} ist bereits gesperrt.")


class PlacementConflict(PlannerError):
    """Zelle ist gesperrt, von einem anderen Entry belegt oder außerhalb des Rasters."""

    def __init__(self, period: int, slot: int, reason: str):
        self.period = period
        self.slot = slot
        self.reason = reason
        super().__init__(f"Zelle ({period}, {slot}) nicht verfügbar: {reason}")


class EntryNotFound(PlannerError):
    """Kein Entry mit dieser ID im Plan."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry '{entry_id}' nicht gefunden.")
