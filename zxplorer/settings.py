"""Editor preferences stored in SQLite."""

import json
import logging
import sqlite3
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional, Any

from zxplorer.graph import VertexType, EdgeType

logger = logging.getLogger(__name__)


def get_data_dir() -> Path:
    """Get the application data directory."""
    data_dir = Path.home() / ".local" / "share" / "zxplorer"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_db_path() -> Path:
    """Get the settings database path."""
    return get_data_dir() / "zxplorer.db"


@dataclass
class EditorSettings:
    """Canvas and editing preferences."""
    scale: float = 80.0
    grid_size: float = 0.5
    snap_to_grid: bool = True
    show_grid: bool = True
    min_zoom: float = 0.2
    max_zoom: float = 5.0
    zoom_step: float = 1.2
    proximity_radius: float = 0.3
    pan_step: float = 50.0
    history_limit: int = 50
    default_vertex_type: int = int(VertexType.Z)
    default_edge_type: int = int(EdgeType.SIMPLE)
    load_example: bool = True

    @classmethod
    def load(cls, store: "SettingsStore") -> "EditorSettings":
        """Read every field from the store, keeping defaults for missing or bad values."""
        settings = cls()
        for f in fields(cls):
            default = getattr(settings, f.name)
            value = store.get_setting(f.name, default)
            if not isinstance(value, type(default)) and not (
                    isinstance(default, float) and isinstance(value, int)
                    and not isinstance(value, bool)):
                logger.warning(f"Ignoring setting {f.name}={value!r}")
                continue
            setattr(settings, f.name, type(default)(value))
        return settings

    def save(self, store: "SettingsStore"):
        for key, value in asdict(self).items():
            store.set_setting(key, value)


class SettingsStore:
    """Key/value settings with JSON-encoded values."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or get_db_path()
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_db(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)
        self.conn.commit()

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get an application setting."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
        row = cursor.fetchone()

        if not row:
            return default

        try:
            # Older databases may hand back numbers from a NUMERIC column
            return json.loads(str(row["value"]))
        except (json.JSONDecodeError, TypeError):
            return default

    def set_setting(self, key: str, value: Any):
        """Set an application setting."""
        cursor = self.conn.cursor()
        cursor.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
            (key, json.dumps(value))
        )
        self.conn.commit()

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None
