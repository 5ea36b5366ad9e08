"""Erzeugung eindeutiger Bezeichner für Blöcke, Entries und Meetings."""

import uuid


def new_id() -> str:
    """Gibt eine kurze, zufällige Hex-ID zurück (12 Zeichen)."""
    return uuid.uuid4().hex[:12]
