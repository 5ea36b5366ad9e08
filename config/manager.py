"""Konfigurationsmanager: Laden, Speichern, Validieren und interaktives Bearbeiten.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table
from rich import box
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_app_config
from config.schema import (
    AppConfig,
    ExportConfig,
    LoggingConfig,
    PlannerConfig,
    StorageConfig,
)

logger = logging.getLogger(__name__)

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Kurikulum-Planer - Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "storage": (
        "Speicherung",
        "Ein JSON-Dokument pro Semesterplan.",
    ),
    "planner": (
        "Planer",
        "Voreinstellungen für neue Pertemuan und Datumsvorschläge.",
    ),
    "export": (
        "Export",
        None,
    ),
    "logging": (
        "Logging",
        "level: DEBUG | INFO | WARNING | ERROR",
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "app_config.yaml"

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else self.DEFAULT_CONFIG

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.path.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic.

        Fehlt die Datei, wird die Default-Konfiguration zurückgegeben.
        """
        target = Path(path) if path is not None else self.path
        if not target.exists():
            logger.debug(f"Keine Konfiguration unter {target} – verwende Defaults")
            return default_app_config()
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return AppConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    # ─── Speichern ───

    def save(self, config: AppConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit Abschnitts-Kommentaren."""
        target = Path(path) if path is not None else self.path
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        logger.info(f"Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: AppConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "planner" in cm:
            planner_map = CommentedMap(cm["planner"])
            planner_map.yaml_add_eol_comment(
                "Wochensprünge", "suggest_max_steps"
            )
            cm["planner"] = planner_map

        return cm

    # ─── Anzeige ───

    def show(self, config: AppConfig) -> None:
        """Zeigt die Konfiguration als rich-Tabelle an."""
        console.print(Panel(
            f"[bold]{config.school_name}[/bold]",
            title="Konfiguration",
            border_style="cyan",
        ))
        table = Table(box=box.ROUNDED)
        table.add_column("Bereich", style="bold")
        table.add_column("Parameter")
        table.add_column("Wert")
        for section in ("storage", "planner", "export", "logging"):
            for k, v in getattr(config, section).model_dump().items():
                table.add_row(section, k, str(v))
        console.print(table)

    # ─── Interaktives Bearbeiten ───

    def edit_interactive(self, config: AppConfig) -> AppConfig:
        """Interaktives Bearbeitungsmenü für die Konfiguration."""
        while True:
            console.print()
            console.print(Panel(
                "[bold]Konfiguration bearbeiten[/bold]",
                border_style="cyan",
            ))
            console.print("  [bold]1.[/bold] Schule")
            console.print("  [bold]2.[/bold] Speicherort")
            console.print("  [bold]3.[/bold] Planer-Voreinstellungen")
            console.print("  [bold]4.[/bold] Export")
            console.print("  [bold]5.[/bold] Logging")
            console.print("  [bold]0.[/bold] Speichern & Zurück")

            choice = Prompt.ask("\nAuswahl", default="0")

            if choice == "1":
                name = Prompt.ask("Name der Schule", default=config.school_name)
                config = config.model_copy(update={"school_name": name})
            elif choice == "2":
                config = config.model_copy(
                    update={"storage": self._edit_storage(config.storage)}
                )
            elif choice == "3":
                config = config.model_copy(
                    update={"planner": self._edit_planner(config.planner)}
                )
            elif choice == "4":
                config = config.model_copy(
                    update={"export": self._edit_export(config.export)}
                )
            elif choice == "5":
                config = config.model_copy(
                    update={"logging": self._edit_logging(config.logging)}
                )
            elif choice == "0":
                self.save(config)
                console.print(f"[green]✓[/green] Konfiguration gespeichert: {self.path}")
                break
            else:
                console.print("[yellow]Ungültige Auswahl.[/yellow]")

        return config

    def _edit_storage(self, sc: StorageConfig) -> StorageConfig:
        data_dir = Prompt.ask("Verzeichnis für Plan-Dokumente", default=sc.data_dir)
        return StorageConfig(data_dir=data_dir)

    def _edit_planner(self, pc: PlannerConfig) -> PlannerConfig:
        """Planer-Voreinstellungen interaktiv anpassen."""
        jp = IntPrompt.ask("JP für neue Meetings (1–6)", default=pc.default_meeting_jp)
        steps = IntPrompt.ask("Max. Wochensprünge beim Vorschlag",
                              default=pc.suggest_max_steps)
        span = IntPrompt.ask("Tage zwischen Start und Ende", default=pc.entry_span_days)
        return PlannerConfig(
            default_meeting_jp=jp,
            suggest_max_steps=steps,
            entry_span_days=span,
        )

    def _edit_export(self, ec: ExportConfig) -> ExportConfig:
        out = Prompt.ask("Ausgabeverzeichnis", default=ec.output_dir)
        teacher = Prompt.ask("Name der Lehrkraft", default=ec.teacher_name)
        chars = IntPrompt.ask("Max. Zeichen für Blocklabels", default=ec.label_max_chars)
        return ExportConfig(output_dir=out, teacher_name=teacher, label_max_chars=chars)

    def _edit_logging(self, lc: LoggingConfig) -> LoggingConfig:
        level = Prompt.ask(
            "Log-Level",
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            default=lc.level,
        )
        log_file = Prompt.ask("Log-Datei (leer = keine)", default=lc.file or "")
        return LoggingConfig(level=level, file=log_file or None)
