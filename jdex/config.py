"""
jdex/config.py
Handles saving and loading settings.
Journal limits are fixed in jdex.logic.persistence, not here.
"""
import json
from pathlib import Path
from PyQt6.QtCore import QByteArray

from jdex.utils import log

DATA_DIR = Path.home() / "JDex"


class Config:
    def __init__(self, config_file=None):
        self.config_file = Path(config_file) if config_file else Path("config.json")
        self.theme = "auto"
        self.database_path = str(DATA_DIR / "jdex.sqlite")
        self.history_path = str(DATA_DIR / "history.json")
        self.status_seconds = 4          # how long the undo indicator stays visible

        # Window state storage
        self.window_geometry = None

        self.load()

    def _defaults(self) -> dict:
        return {
            "theme": self.theme,
            "database_path": self.database_path,
            "history_path": self.history_path,
            "status_seconds": self.status_seconds,
        }

    def load(self):
        data = self._defaults()

        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    data.update(loaded)
                    self._apply(data)
            except (OSError, ValueError) as e:
                log.error(f"Error loading config: {e}")

        return data

    def _apply(self, data: dict):
        self.theme = data.get("theme", self.theme)
        self.database_path = data.get("database_path", self.database_path)
        self.history_path = data.get("history_path", self.history_path)
        try:
            self.status_seconds = max(1, int(data.get("status_seconds", self.status_seconds)))
        except (TypeError, ValueError):
            log.warning(f"Ignoring invalid status_seconds: {data.get('status_seconds')!r}")
        if "geometry" in data:
            self.window_geometry = QByteArray.fromHex(data["geometry"].encode())

    def save(self, updates: dict):
        try:
            current = self.load()
            current.update(updates)
            self._apply(current)

            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(current, f, indent=4)
        except (OSError, TypeError, ValueError) as e:
            log.error(f"Error saving config: {e}")
