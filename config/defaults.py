"""Feste Tabellen des Semesterrasters und Default-Konfiguration.

Das Raster ist kein echter Kalender: jeder Monat hat 4 Wochen,
nur die in LONG_MONTHS genannten Monate haben 5.
"""

from config.schema import (
    AppConfig,
    ExportConfig,
    LoggingConfig,
    PlannerConfig,
    StorageConfig,
)


# ─── MONATSTABELLE ───

# Semester 1 (Ganjil) läuft Juli–Dezember, Semester 2 (Genap) Januar–Juni.
SEMESTER_MONTHS: dict[int, list[str]] = {
    1: ["Juli", "Agustus", "September", "Oktober", "November", "Desember"],
    2: ["Januari", "Februari", "Maret", "April", "Mei", "Juni"],
}

# Kalendermonat (1–12) des ersten Monats eines Halbjahres
SEMESTER_FIRST_MONTH: dict[int, int] = {1: 7, 2: 1}

# Monate mit 5 Wochen-Slots, alle anderen haben 4
LONG_MONTHS: frozenset[str] = frozenset({"Juli", "Oktober", "April"})

WEEKS_LONG = 5
WEEKS_SHORT = 4
MAX_SLOTS = WEEKS_LONG
PERIODS_PER_HALF = 6

SEMESTER_LABELS: dict[int, str] = {
    1: "Semester 1 (Ganjil)",
    2: "Semester 2 (Genap)",
}

SEMESTER_FILE_TAGS: dict[int, str] = {1: "Ganjil", 2: "Genap"}


# ─── BLOCKTYPEN ───

# Farbe als RRGGBB (ohne #), Label wie in der Legende angezeigt
BLOCK_TYPE_METADATA: dict[str, dict] = {
    "holiday":     {"label": "Libur Nasional",   "color": "FFA500"},
    "religious":   {"label": "Hari Raya",        "color": "FFD700"},
    "exam":        {"label": "Ujian/Test",       "color": "22C55E"},
    "activity":    {"label": "Kegiatan Sekolah", "color": "3B82F6"},
    "preparation": {"label": "Persiapan/Review", "color": "8B5CF6"},
}

FALLBACK_BLOCK_COLOR = "888888"


# ─── MEETINGS ───

DEFAULT_MEETING_JP = 2
MIN_MEETING_JP = 1
MAX_MEETING_JP = 6

DEFAULT_SUGGEST_MAX_STEPS = 12
DEFAULT_ENTRY_SPAN_DAYS = 4


def default_app_config() -> AppConfig:
    """Standard-Konfiguration (wird verwendet, wenn keine YAML-Datei existiert)."""
    return AppConfig(
        school_name="Sekolah Contoh",
        storage=StorageConfig(data_dir="data/plans"),
        planner=PlannerConfig(
            default_meeting_jp=DEFAULT_MEETING_JP,
            suggest_max_steps=DEFAULT_SUGGEST_MAX_STEPS,
            entry_span_days=DEFAULT_ENTRY_SPAN_DAYS,
        ),
        export=ExportConfig(output_dir="output", label_max_chars=12),
        logging=LoggingConfig(level="WARNING"),
    )
