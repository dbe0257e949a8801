"""Global settings and configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


@dataclass
class Config:
    """Application-wide configuration."""

    # Bingo card geometry
    GRID_SIZE: int = 5
    WIN_STREAK: int = 4

    # Default language for the shortening prompt (english, german, swedish)
    DEFAULT_LANGUAGE: str = os.environ.get("BINGO_LANGUAGE", "english")

    # AI provider for topic shortening
    # Store the key in environment variable or .env file: OPENAI_API_KEY
    # NEVER hardcode secret keys in source code!
    AI_PROVIDER: str = os.environ.get("AI_PROVIDER", "openai")
    AI_MODEL: str = os.environ.get("AI_MODEL", "")
    AI_BASE_URL: str = os.environ.get("AI_BASE_URL", "")
    AI_TIMEOUT: int = 60
    AI_MAX_TOKENS: int = 1000
    API_KEY_ENV: str = "OPENAI_API_KEY"

    # Persistence keys (one schema version each)
    TOPICS_KEY: str = "bingo.topics.v1"
    CARD_KEY: str = "bingo.card.v1"

    # Storage backend: json or sqlite
    STORAGE_BACKEND: str = os.environ.get("STORAGE_BACKEND", "json")

    # Cross-platform paths using pathlib
    # BASE_DIR is the project root (parent of topicbingo/)
    BASE_DIR: Path = Path(__file__).parent.parent.parent.resolve()

    DATA_DIR: str = str(BASE_DIR / "data")
    PREFERENCES_FILE: str = str(BASE_DIR / "data" / "preferences.json")
    PREFERENCES_DB: str = str(BASE_DIR / "data" / "preferences.db")
    SETTINGS_FILE: str = str(BASE_DIR / "data" / "settings.json")
    CREDENTIALS_FILE: str = str(BASE_DIR / "data" / "credentials.json")
