"""
Repository Pattern - key/value preference storage.

Topic and card persistence sit on top of a small string key/value store,
so the storage backend (JSON file, SQLite, memory) can be switched without
touching the game logic.
"""

import json
import logging
import os
import sqlite3
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from pathlib import Path
from threading import Lock
from typing import Dict, Generator, List, Optional

from ..config import Config

logger = logging.getLogger(__name__)


class StorageBackend(Enum):
    """Available storage backends."""
    JSON = "json"
    SQLITE = "sqlite"
    MEMORY = "memory"


class PreferenceStore(ABC):
    """
    Abstract base class for key/value preference stores.

    Values are strings (callers encode JSON themselves). Implementations
    raise ``OSError`` or ``sqlite3.Error`` when the medium fails.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; absent keys are ignored."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """All stored keys, sorted."""
        pass

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


class InMemoryPreferenceStore(PreferenceStore):
    """Process-local store, used for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._values)


class JSONPreferenceStore(PreferenceStore):
    """
    JSON-file preference store.

    The whole file is one JSON object of string values. Writes are atomic
    (temp file + rename) and guarded by a thread lock.
    """

    def __init__(self, file_path: Optional[str] = None):
        """
        Initialize JSON store.

        Args:
            file_path: Path to the JSON file (defaults to data/preferences.json)
        """
        self.file_path = Path(file_path or Config.PREFERENCES_FILE)
        self._lock = Lock()
        self._values: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        """Load values from file; an unreadable file reads as empty."""
        if not self.file_path.exists():
            return {}
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read preferences file %s: %s", self.file_path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file %s: not a JSON object", self.file_path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save_internal(self, values: Dict[str, str]) -> None:
        """Write ``values`` to disk, then adopt them (caller must hold lock)."""
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.file_path.with_name(f"{self.file_path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(values, f, indent=2, ensure_ascii=False)
            os.replace(temp_file, self.file_path)
            self._values = values
        finally:
            if temp_file.exists():
                temp_file.unlink()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._save_internal({**self._values, key: value})

    def remove(self, key: str) -> None:
        with self._lock:
            if key not in self._values:
                return
            values = dict(self._values)
            del values[key]
            self._save_internal(values)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._values)

    def reload(self) -> None:
        """Re-read the file, dropping in-memory state."""
        with self._lock:
            self._values = self._load()


class SQLitePreferenceStore(PreferenceStore):
    """
    SQLite-based preference store.

    Keeps one ``preferences`` table keyed by name, plus a ``schema_version``
    table for future migrations.
    """

    # Schema version for migrations
    SCHEMA_VERSION = 1

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file (defaults to data/preferences.db)
        """
        self.db_path = Path(db_path or Config.PREFERENCES_DB)
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection with context manager."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT
                )
            """)

            cursor.execute("INSERT OR IGNORE INTO schema_version (version, applied_at) VALUES (?, ?)",
                          (self.SCHEMA_VERSION, datetime.now().isoformat()))

            conn.commit()

    def get(self, key: str) -> Optional[str]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM preferences WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row['value'] if row else None

    def set(self, key: str, value: str) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO preferences (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, datetime.now().isoformat())
            )
            conn.commit()

    def remove(self, key: str) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM preferences WHERE key = ?", (key,))
            conn.commit()

    def keys(self) -> List[str]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT key FROM preferences ORDER BY key")
            return [row['key'] for row in cursor.fetchall()]

    def schema_version(self) -> int:
        """Highest applied schema version."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT MAX(version) FROM schema_version")
            return cursor.fetchone()[0] or 0


def create_preference_store(
    backend: StorageBackend = StorageBackend.JSON,
    path: Optional[str] = None
) -> PreferenceStore:
    """
    Create a preference store for the given backend.

    Args:
        backend: Storage backend (JSON, SQLITE or MEMORY)
        path: File or database path (uses the configured default if None)

    Returns:
        Preference store instance
    """
    if backend == StorageBackend.SQLITE:
        return SQLitePreferenceStore(path)
    if backend == StorageBackend.MEMORY:
        return InMemoryPreferenceStore()
    return JSONPreferenceStore(path)
