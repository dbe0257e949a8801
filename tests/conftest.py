import random
from typing import List

import pytest

from topicbingo.config import SettingsManager
from topicbingo.models import Topic
from topicbingo.services import (
    CardPersistence,
    InMemoryPreferenceStore,
    TopicPersistence,
)


def make_topics(count: int) -> List[Topic]:
    return [Topic(text=f"Topic {i}") for i in range(1, count + 1)]


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def preferences() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()


@pytest.fixture
def topic_persistence(preferences) -> TopicPersistence:
    return TopicPersistence(preferences)


@pytest.fixture
def card_persistence(preferences) -> CardPersistence:
    return CardPersistence(preferences)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Isolated SettingsManager writing into tmp_path."""
    for key in SettingsManager.DEFAULTS:
        monkeypatch.delenv(key, raising=False)
    SettingsManager.reset_instance()
    manager = SettingsManager(str(tmp_path / "settings.json"))
    yield manager
    SettingsManager.reset_instance()
