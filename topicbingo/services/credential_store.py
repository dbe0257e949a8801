"""
Credential stores for the AI provider API key.

The shortening service receives a store as an injected capability, so
the key source can be a private settings file, the environment, or an
in-memory fake in tests.
"""

import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Optional

from dotenv import load_dotenv

from ..config import Config
from .errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """Abstract secret store with a single secret slot."""

    @abstractmethod
    def _write(self, secret: str) -> None:
        pass

    @abstractmethod
    def _read(self) -> Optional[str]:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget the stored secret."""
        pass

    def save(self, secret: str) -> bool:
        """
        Store a secret.

        Args:
            secret: The secret; surrounding whitespace is removed

        Returns:
            True if saved, False for a blank secret (nothing is changed)

        Raises:
            StoreUnavailableError: If the backend cannot be written
        """
        trimmed = (secret or "").strip()
        if not trimmed:
            return False
        self._write(trimmed)
        return True

    def current_secret(self) -> Optional[str]:
        """
        Return the stored secret, or None when nothing usable is saved.

        Raises:
            StoreUnavailableError: If the backend cannot be read
        """
        secret = self._read()
        if secret is None:
            return None
        secret = secret.strip()
        return secret or None

    @property
    def has_saved_secret(self) -> bool:
        try:
            return self.current_secret() is not None
        except StoreUnavailableError:
            return False


class InMemoryCredentialStore(CredentialStore):
    """Keeps the secret in process memory only."""

    def __init__(self, secret: Optional[str] = None):
        self._secret = secret

    def _write(self, secret: str) -> None:
        self._secret = secret

    def _read(self) -> Optional[str]:
        return self._secret

    def clear(self) -> None:
        self._secret = None


class EnvCredentialStore(CredentialStore):
    """
    Reads the key from an environment variable (``.env`` aware).

    ``save`` only affects the running process; nothing is written to disk.
    """

    def __init__(self, variable: str = Config.API_KEY_ENV, env_file: Optional[str] = None):
        self.variable = variable
        load_dotenv(env_file or Config.BASE_DIR / ".env")

    def _write(self, secret: str) -> None:
        os.environ[self.variable] = secret

    def _read(self) -> Optional[str]:
        return os.environ.get(self.variable)

    def clear(self) -> None:
        os.environ.pop(self.variable, None)


class SettingsCredentialStore(CredentialStore):
    """
    Stores the key in a private JSON file next to the app settings.

    The file is written atomically and restricted to the current user.
    """

    FIELD = "api_key"

    def __init__(self, file_path: Optional[str] = None, service: str = "openai"):
        """
        Initialize the file-backed store.

        Args:
            file_path: Credentials file (defaults to data/credentials.json)
            service: Name of the slot inside the file
        """
        self.file_path = Path(file_path or Config.CREDENTIALS_FILE)
        self.service = service
        self._lock = Lock()

    def _load(self) -> dict:
        if not self.file_path.exists():
            return {}
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unreadable credentials file %s: %s", self.file_path, e)
            return {}
        except OSError as e:
            raise StoreUnavailableError(f"Could not read credentials: {e}") from e
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict) -> None:
        temp_file = self.file_path.with_name(f"{self.file_path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.chmod(temp_file, 0o600)
            os.replace(temp_file, self.file_path)
        except OSError as e:
            raise StoreUnavailableError(f"Could not save credentials: {e}") from e
        finally:
            if temp_file.exists():
                temp_file.unlink()

    def _write(self, secret: str) -> None:
        with self._lock:
            data = self._load()
            entry = data.get(self.service)
            if not isinstance(entry, dict):
                entry = {}
            entry[self.FIELD] = secret
            data[self.service] = entry
            self._dump(data)

    def _read(self) -> Optional[str]:
        with self._lock:
            entry = self._load().get(self.service)
        if isinstance(entry, dict) and isinstance(entry.get(self.FIELD), str):
            return entry[self.FIELD]
        return None

    def clear(self) -> None:
        with self._lock:
            data = self._load()
            if self.service in data:
                del data[self.service]
                self._dump(data)
