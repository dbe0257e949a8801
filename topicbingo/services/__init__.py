"""Services layer for business logic separation."""

from .errors import (
    BingoError,
    MissingCredentialError,
    MalformedResponseError,
    UnsupportedError,
    StoreUnavailableError,
    ConversionInProgressError,
)
from .repository import (
    StorageBackend,
    PreferenceStore,
    InMemoryPreferenceStore,
    JSONPreferenceStore,
    SQLitePreferenceStore,
    create_preference_store,
)
from .persistence import TopicPersistence, CardPersistence
from .topic_store import TopicStore
from .normalizer import normalize_short_labels, apply_short_labels
from .credential_store import (
    CredentialStore,
    InMemoryCredentialStore,
    EnvCredentialStore,
    SettingsCredentialStore,
)
from .ai_service import AIService, AIProvider, AIConfig, create_ai_service
from .shortening_service import ShorteningService

__all__ = [
    "BingoError",
    "MissingCredentialError",
    "MalformedResponseError",
    "UnsupportedError",
    "StoreUnavailableError",
    "ConversionInProgressError",
    "StorageBackend",
    "PreferenceStore",
    "InMemoryPreferenceStore",
    "JSONPreferenceStore",
    "SQLitePreferenceStore",
    "create_preference_store",
    "TopicPersistence",
    "CardPersistence",
    "TopicStore",
    "normalize_short_labels",
    "apply_short_labels",
    "CredentialStore",
    "InMemoryCredentialStore",
    "EnvCredentialStore",
    "SettingsCredentialStore",
    "AIService",
    "AIProvider",
    "AIConfig",
    "create_ai_service",
    "ShorteningService",
]
