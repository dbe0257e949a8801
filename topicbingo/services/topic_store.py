"""
Topic Store - CRUD operations for the bingo topic pool.

Separates topic management from any UI layer:
- Parses raw multi-line input into topics
- Writes every change through to persistence
- Notifies observers after each change
"""

import logging
import random
from typing import Callable, Iterable, List, Optional

from ..models import Topic
from ..utils.parsing import TextParser
from .persistence import TopicPersistence

logger = logging.getLogger(__name__)


class TopicStore:
    """
    Owns the ordered collection of topics.

    Usage:
        store = TopicStore(persistence=TopicPersistence(JSONPreferenceStore()))
        store.add_topics("Sing a song\\n- Dance\\n")
        pool = store.sample(25)

    Reads return copies; mutate only through the store's methods.
    """

    def __init__(
        self,
        topics: Optional[Iterable[Topic]] = None,
        persistence: Optional[TopicPersistence] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize topic store.

        Args:
            topics: Initial topics. When given they are saved right away;
                    otherwise the store loads from persistence.
            persistence: Write-through persistence (None keeps topics in memory only)
            rng: Random source for sampling
        """
        self._persistence = persistence
        self._rng = rng or random.Random()
        self._change_callbacks: List[Callable[[], None]] = []

        initial = [topic.copy() for topic in topics] if topics else []
        if initial:
            self._topics: List[Topic] = initial
            self._save()
        elif persistence is not None:
            self._topics = persistence.load_topics()
        else:
            self._topics = []

    @property
    def topics(self) -> List[Topic]:
        """Snapshot of all topics in insertion order."""
        return [topic.copy() for topic in self._topics]

    @property
    def count(self) -> int:
        return len(self._topics)

    @property
    def is_empty(self) -> bool:
        return not self._topics

    def get(self, topic_id: str) -> Optional[Topic]:
        """Copy of the topic with ``topic_id``, or None."""
        index = self._index_of(topic_id)
        return self._topics[index].copy() if index is not None else None

    def on_change(self, callback: Callable[[], None]) -> None:
        """
        Register a callback for topic changes.

        Args:
            callback: Function to call after every mutation
        """
        self._change_callbacks.append(callback)

    def _notify_change(self) -> None:
        """Notify all registered callbacks of a topic change."""
        for callback in self._change_callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Topic change callback failed")

    def _save(self) -> None:
        if self._persistence is not None:
            self._persistence.save_topics(self._topics)

    def _commit(self) -> None:
        self._save()
        self._notify_change()

    def _index_of(self, topic_id: str) -> Optional[int]:
        for index, topic in enumerate(self._topics):
            if topic.id == topic_id:
                return index
        return None

    def add_topics(self, raw_text: str) -> List[Topic]:
        """
        Add one topic per line of ``raw_text``.

        Lines are trimmed, a leading "- " bullet is removed, and blank
        lines are skipped. Nothing is saved when no line survives.

        Args:
            raw_text: Multi-line user input

        Returns:
            Copies of the newly added topics
        """
        new_topics = [Topic(text=line) for line in TextParser.parse_topic_lines(raw_text)]
        if not new_topics:
            return []

        self._topics.extend(new_topics)
        self._commit()
        logger.debug("Added %d topics", len(new_topics))
        return [topic.copy() for topic in new_topics]

    def remove_topic(self, topic_id: str) -> bool:
        """
        Remove a topic by id.

        Returns:
            True if a topic was removed
        """
        index = self._index_of(topic_id)
        if index is None:
            return False
        del self._topics[index]
        self._commit()
        return True

    def clear_topics(self) -> None:
        """Remove every topic."""
        self._topics = []
        self._commit()

    def replace_topics(self, new_topics: Iterable[Topic]) -> None:
        """
        Replace the whole pool at once (used after a shortening batch).

        Args:
            new_topics: Replacement topics; they are copied, not aliased
        """
        self._topics = [topic.copy() for topic in new_topics]
        self._commit()

    def update_short_text(self, topic_id: str, short_text: Optional[str]) -> bool:
        """
        Overwrite a topic's short text.

        Args:
            topic_id: Topic to update
            short_text: New short text (trimmed), or None to clear it

        Returns:
            True if the topic was found
        """
        index = self._index_of(topic_id)
        if index is None:
            return False
        self._topics[index] = self._topics[index].copy(short_text=short_text)
        self._commit()
        return True

    def sample(self, count: int) -> List[Topic]:
        """
        Pick ``count`` topics uniformly at random without replacement.

        The pool is shuffled before slicing; a pool smaller than ``count``
        is returned whole (in shuffled order).
        """
        pool = self.topics
        self._rng.shuffle(pool)
        return pool[:max(count, 0)]
