"""
Settings Manager - user settings for the bingo app.

Settings live in a JSON file under the data directory. Environment
variables (and the project ``.env``) win over the file, so a deployment
can pin the AI provider or storage backend without touching it.
"""

import copy
import json
import logging
import os
import uuid
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .languages import TopicLanguage
from .settings import Config

load_dotenv(Config.BASE_DIR / ".env")

logger = logging.getLogger(__name__)

_TRUE_STRINGS = ("true", "1", "yes", "on")


class SettingsManager:
    """
    Process-wide bingo settings.

    Usage:
        settings = SettingsManager()
        language = settings.language
        settings.set("AI_PROVIDER", "groq")

    API keys are not settings; they live in a credential store.
    """

    _instance: Optional["SettingsManager"] = None
    _lock: Lock = Lock()

    DEFAULTS: Dict[str, Any] = {
        "BINGO_LANGUAGE": Config.DEFAULT_LANGUAGE,
        "AI_PROVIDER": "openai",
        "AI_MODEL": "",
        "AI_BASE_URL": "",
        "AI_TIMEOUT": Config.AI_TIMEOUT,
        "AI_MAX_TOKENS": Config.AI_MAX_TOKENS,
        "STORAGE_BACKEND": "json",
        "PREFERENCES_FILE": Config.PREFERENCES_FILE,
        "PREFERENCES_DB": Config.PREFERENCES_DB,
        "CREDENTIALS_FILE": Config.CREDENTIALS_FILE,
        "RESTORE_LAST_CARD": True,
    }

    def __new__(cls, settings_file: Optional[str] = None) -> "SettingsManager":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._ready = False
        return cls._instance

    def __init__(self, settings_file: Optional[str] = None) -> None:
        """
        Open the settings file (only the first construction does anything).

        Args:
            settings_file: JSON file to use; defaults to data/settings.json
        """
        if self._ready:
            return
        self._path = Path(settings_file or Config.SETTINGS_FILE)
        self._values: Dict[str, Any] = {}
        self._io_lock = Lock()
        self.reload()
        self._ready = True

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the shared instance so the next construction starts fresh."""
        with cls._lock:
            cls._instance = None

    @property
    def settings_file(self) -> Path:
        return self._path

    @property
    def language(self) -> TopicLanguage:
        return TopicLanguage.from_name(self._values.get("BINGO_LANGUAGE"))

    # Loading / saving

    def reload(self) -> None:
        """Re-read the settings file and environment, then write the merged result back."""
        values = copy.deepcopy(self.DEFAULTS)
        values.update(self._read_file())
        for key, default in self.DEFAULTS.items():
            raw = os.environ.get(key)
            if raw is not None:
                values[key] = self._coerce(raw, default)
        self._values = values
        self._write_file()

    def _read_file(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not load settings file %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a JSON object", self._path)
            return {}
        return data

    def _write_file(self) -> None:
        temp_file = self._path.with_name(f"{self._path.name}.{uuid.uuid4().hex[:8]}.tmp")
        with self._io_lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with open(temp_file, "w", encoding="utf-8") as f:
                    json.dump(self._values, f, indent=2, ensure_ascii=False)
                os.replace(temp_file, self._path)
            except OSError as e:
                logger.warning("Could not save settings file %s: %s", self._path, e)
            finally:
                if temp_file.exists():
                    temp_file.unlink()

    @staticmethod
    def _coerce(raw: str, default: Any) -> Any:
        """Convert an environment string to the type of its default."""
        if isinstance(default, bool):
            return raw.strip().lower() in _TRUE_STRINGS
        if isinstance(default, (int, float)):
            try:
                return type(default)(raw)
            except ValueError:
                logger.warning("Ignoring non-numeric environment value %r", raw)
                return default
        return raw

    # Access

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a setting.

        Args:
            key: Setting name, e.g. "AI_PROVIDER"
            default: Returned when the key is unknown

        Returns:
            The value (lists and dicts are copied)
        """
        return copy.deepcopy(self._values.get(key, default))

    def set(self, key: str, value: Any, persist: bool = True) -> None:
        """Change a setting and, unless ``persist`` is False, save the file."""
        self._values[key] = value
        if persist:
            self._write_file()

    def get_all(self) -> Dict[str, Any]:
        return copy.deepcopy(self._values)

    def reset(self, key: Optional[str] = None) -> None:
        """Restore one key (or every key when ``key`` is None) to its default."""
        if key is None:
            self._values = copy.deepcopy(self.DEFAULTS)
        elif key in self.DEFAULTS:
            self._values[key] = copy.deepcopy(self.DEFAULTS[key])
        self._write_file()
