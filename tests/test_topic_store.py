"""Tests for topic parsing, CRUD and sampling in the topic store."""

import pytest

from topicbingo.models import Topic
from topicbingo.services import InMemoryPreferenceStore, TopicPersistence, TopicStore

from .conftest import make_topics


class RecordingPersistence(TopicPersistence):
    def __init__(self):
        super().__init__(InMemoryPreferenceStore())
        self.saves = []

    def save_topics(self, topics):
        self.saves.append([t.text for t in topics])
        super().save_topics(topics)


@pytest.fixture
def persistence():
    return RecordingPersistence()


@pytest.fixture
def store(persistence, rng):
    return TopicStore(persistence=persistence, rng=rng)


def texts(store):
    return [topic.text for topic in store.topics]


class TestAddTopics:
    def test_blank_lines_are_skipped(self, store):
        store.add_topics("Topic 1\nTopic 2\n\nTopic 3\n")
        assert texts(store) == ["Topic 1", "Topic 2", "Topic 3"]

    def test_bullet_marker_requires_space(self, store):
        store.add_topics("- Walk\n-NoSpace")
        assert texts(store) == ["Walk", "-NoSpace"]

    def test_lines_are_trimmed(self, store):
        store.add_topics("   Sing a song  \r\n\t-   Dance badly  \r\n   ")
        assert texts(store) == ["Sing a song", "Dance badly"]

    def test_new_topics_get_fresh_ids_and_no_short_text(self, store):
        added = store.add_topics("Same\nSame")
        assert len({topic.id for topic in added}) == 2
        assert all(topic.short_text is None for topic in added)

    def test_appends_after_existing(self, store):
        store.add_topics("A\nB")
        store.add_topics("C")
        assert texts(store) == ["A", "B", "C"]

    def test_nothing_to_add_does_not_persist(self, store, persistence):
        calls = []
        store.on_change(lambda: calls.append(1))

        assert store.add_topics("\n   \n\t\n") == []

        assert persistence.saves == []
        assert calls == []
        assert store.is_empty


class TestMutations:
    def test_remove_topic(self, store):
        first, second = store.add_topics("First\nSecond")
        assert store.remove_topic(first.id) is True
        assert texts(store) == ["Second"]

    def test_remove_unknown_id_is_noop(self, store, persistence):
        store.add_topics("Only")
        saves = len(persistence.saves)

        assert store.remove_topic("missing") is False
        assert len(persistence.saves) == saves

    def test_clear_topics(self, store, persistence):
        store.add_topics("A\nB")
        store.clear_topics()
        assert store.is_empty
        assert persistence.saves[-1] == []

    def test_update_short_text_trims(self, store):
        (topic,) = store.add_topics("Read a really long book")
        assert store.update_short_text(topic.id, "  Read book ")
        assert store.get(topic.id).short_text == "Read book"
        assert store.get(topic.id).display_text == "Read book"

    def test_update_short_text_to_none(self, store):
        (topic,) = store.add_topics("Go for a walk")
        store.update_short_text(topic.id, "Walk")
        store.update_short_text(topic.id, None)
        assert store.get(topic.id).short_text is None

    def test_update_short_text_unknown_id(self, store):
        assert store.update_short_text("nope", "x") is False

    def test_replace_topics(self, store):
        store.add_topics("Topic 1\nTopic 2\nTopic 3")
        replacement = [t.copy(short_text=f"T{i}") for i, t in enumerate(store.topics, 1)]

        store.replace_topics(replacement)

        assert [t.short_text for t in store.topics] == ["T1", "T2", "T3"]

    def test_replace_with_own_topics_is_noop(self, store):
        store.add_topics("A\nB\nC")
        before = [t.to_dict() for t in store.topics]

        store.replace_topics(store.topics)

        assert [t.to_dict() for t in store.topics] == before

    def test_every_mutation_persists_and_notifies(self, store, persistence):
        calls = []
        store.on_change(lambda: calls.append(1))

        a, b = store.add_topics("A\nB")
        store.update_short_text(a.id, "a")
        store.remove_topic(b.id)
        store.replace_topics(store.topics)
        store.clear_topics()

        assert len(persistence.saves) == 5
        assert len(calls) == 5

    def test_reads_do_not_persist(self, store, persistence):
        store.add_topics("A\nB")
        saves = len(persistence.saves)

        store.topics
        store.sample(1)
        store.get("x")

        assert len(persistence.saves) == saves

    def test_snapshots_are_detached(self, store):
        store.add_topics("A")
        snapshot = store.topics
        snapshot[0].short_text = "changed"
        assert store.topics[0].short_text is None


class TestSampling:
    def test_sample_without_replacement(self, rng):
        store = TopicStore(topics=make_topics(30), rng=rng)
        picked = store.sample(25)
        assert len(picked) == 25
        assert len({t.id for t in picked}) == 25

    def test_sample_small_pool_returns_everything(self, rng):
        pool = make_topics(5)
        store = TopicStore(topics=pool, rng=rng)
        picked = store.sample(25)
        assert sorted(t.id for t in picked) == sorted(t.id for t in pool)

    def test_sample_is_shuffled(self):
        store = TopicStore(topics=make_topics(30))
        orders = {tuple(t.text for t in store.sample(30)) for _ in range(20)}
        assert len(orders) > 1


class TestLoading:
    def test_loads_from_persistence(self, topic_persistence):
        topic_persistence.save_topics([Topic(text="Saved", short_text="S")])

        store = TopicStore(persistence=topic_persistence)

        assert [(t.text, t.short_text) for t in store.topics] == [("Saved", "S")]

    def test_initial_topics_are_saved(self, topic_persistence):
        TopicStore(topics=make_topics(2), persistence=topic_persistence)
        assert [t.text for t in topic_persistence.load_topics()] == ["Topic 1", "Topic 2"]
