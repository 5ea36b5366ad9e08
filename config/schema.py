from pydantic import BaseModel, Field, field_validator
from typing import Optional


# ─── SPEICHERUNG ───

class StorageConfig(BaseModel):
    """Ablageort der Semesterpläne (ein JSON-Dokument pro Plan)."""
    # Verzeichnis, in dem die Plan-Dokumente liegen
    data_dir: str = Field("data/plans",
        description="Verzeichnis für Plan-Dokumente (JSON)")


# ─── PLANER ───

class PlannerConfig(BaseModel):
    """Voreinstellungen für Eingabeformulare und Datumsvorschläge."""
    # JP einer neu angelegten Pertemuan (Meeting)
    default_meeting_jp: int = Field(2, ge=1, le=6,
        description="JP für neue Meetings")
    # Maximale Anzahl Wochensprünge beim Datumsvorschlag
    suggest_max_steps: int = Field(12, ge=1, le=26,
        description="Max. Wochensprünge beim Datumsvorschlag")
    # Länge eines vorgeschlagenen Zeitraums in Tagen (Mo → Fr = 4)
    entry_span_days: int = Field(4, ge=0, le=6,
        description="Tage zwischen vorgeschlagenem Start- und Enddatum")


# ─── EXPORT ───

class ExportConfig(BaseModel):
    """Einstellungen für PDF-, Excel- und Terminal-Ausgabe."""
    # Ausgabeverzeichnis für Exporte
    output_dir: str = Field("output",
        description="Ausgabeverzeichnis für PDF/Excel")
    # Maximale Länge eines Blocklabels in der Kalenderansicht
    label_max_chars: int = Field(12, ge=3, le=40,
        description="Max. Zeichen für Blocklabels in der Kalenderansicht")
    # Name der Lehrkraft (Kopfzeile im Druck)
    teacher_name: str = Field("",
        description="Name der Lehrkraft (Druck-Kopfzeile)")


# ─── LOGGING ───

class LoggingConfig(BaseModel):
    """Logging-Einstellungen der CLI."""
    # Log-Level (DEBUG, INFO, WARNING, ERROR)
    level: str = Field("WARNING",
        description="Log-Level")
    # Optionale Log-Datei zusätzlich zur Konsole
    file: Optional[str] = Field(None,
        description="Optionale Log-Datei")

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unbekanntes Log-Level: {v}")
        return v


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration des Kurikulum-Planers."""
    # Name der Schule (Kopfzeile in Exporten)
    school_name: str = Field("Sekolah Contoh",
        description="Name der Schule")
    # Ablage der Plan-Dokumente
    storage: StorageConfig = Field(default_factory=StorageConfig)
    # Formular-Voreinstellungen
    planner: PlannerConfig = Field(default_factory=PlannerConfig)
    # Export-Einstellungen
    export: ExportConfig = Field(default_factory=ExportConfig)
    # Logging
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
