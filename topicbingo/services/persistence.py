"""
Topic and card persistence on top of a preference store.

Each payload lives under a single versioned key. Decode failures read as
"no data" and save failures are logged and dropped, so a broken store
never takes the game down.
"""

import json
import logging
import sqlite3
from typing import List, Optional

from ..config import Config
from ..models import CardState, Topic
from .repository import InMemoryPreferenceStore, PreferenceStore

logger = logging.getLogger(__name__)


class TopicPersistence:
    """Persists the topic list between sessions."""

    def __init__(self, store: Optional[PreferenceStore] = None, key: str = Config.TOPICS_KEY):
        self.store = store if store is not None else InMemoryPreferenceStore()
        self.key = key

    def load_topics(self) -> List[Topic]:
        """
        Load the saved topic list.

        Returns:
            Saved topics, or an empty list when nothing (usable) is stored
        """
        try:
            raw = self.store.get(self.key)
        except (OSError, sqlite3.Error) as e:
            logger.warning("TopicPersistence failed to read topics: %s", e)
            return []
        if raw is None:
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("topic payload is not a list")
            return [Topic.from_dict(item) for item in data]
        except ValueError as e:
            logger.warning("TopicPersistence failed to decode topics: %s", e)
            return []

    def save_topics(self, topics: List[Topic]) -> None:
        """Save the topic list; an empty list removes the stored entry."""
        try:
            if not topics:
                self.store.remove(self.key)
            else:
                payload = json.dumps([topic.to_dict() for topic in topics], ensure_ascii=False)
                self.store.set(self.key, payload)
        except (OSError, sqlite3.Error, TypeError, ValueError) as e:
            logger.warning("TopicPersistence failed to save topics: %s", e)


class CardPersistence:
    """Persists the current card so tile selections survive restarts."""

    def __init__(self, store: Optional[PreferenceStore] = None, key: str = Config.CARD_KEY):
        self.store = store if store is not None else InMemoryPreferenceStore()
        self.key = key

    def load_card(self) -> Optional[CardState]:
        """Load the saved card state, or None if absent or undecodable."""
        try:
            raw = self.store.get(self.key)
        except (OSError, sqlite3.Error) as e:
            logger.warning("CardPersistence failed to read card: %s", e)
            return None
        if raw is None:
            return None

        try:
            return CardState.from_dict(json.loads(raw))
        except ValueError as e:
            logger.warning("CardPersistence failed to decode card: %s", e)
            return None

    def save_card(self, state: Optional[CardState]) -> None:
        """Save the card state; None removes the stored entry."""
        try:
            if state is None:
                self.store.remove(self.key)
            else:
                self.store.set(self.key, json.dumps(state.to_dict(), ensure_ascii=False))
        except (OSError, sqlite3.Error, TypeError, ValueError) as e:
            logger.warning("CardPersistence failed to save card: %s", e)
