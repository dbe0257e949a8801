"""Tests for short label normalization."""

import pytest

from topicbingo.models import Topic
from topicbingo.services import MalformedResponseError, apply_short_labels, normalize_short_labels


def test_capitalizes_and_disambiguates():
    assert normalize_short_labels(["run", "Run", "walk"], 3) == ["Run", "Run 2", "Walk"]


def test_trims_labels():
    assert normalize_short_labels(["  read book \n"], 1) == ["Read book"]


def test_capitalizes_first_alphanumeric_only():
    labels = normalize_short_labels(["\"quiet time\"", "3 cups", "...", "éclair run"], 4)
    assert labels == ["\"Quiet time\"", "3 cups", "...", "Éclair run"]


def test_matching_is_case_sensitive():
    assert normalize_short_labels(["Walk", "WALK"], 2) == ["Walk", "WALK"]


def test_suffix_skips_taken_labels():
    labels = normalize_short_labels(["Run 2", "run", "run"], 3)
    assert labels == ["Run 2", "Run", "Run 3"]


def test_suffix_exhaustion_fails():
    with pytest.raises(MalformedResponseError):
        normalize_short_labels(["Run"] * 100, 100)


def test_ninety_nine_duplicates_fit():
    labels = normalize_short_labels(["Run"] * 99, 99)
    assert labels[-1] == "Run 99"


def test_count_mismatch_fails():
    with pytest.raises(MalformedResponseError):
        normalize_short_labels(["One", "Two"], 3)


def test_empty_label_fails():
    with pytest.raises(MalformedResponseError):
        normalize_short_labels(["One", "   "], 2)


def test_apply_short_labels_keeps_order_and_originals():
    topics = [Topic(text="Go for a run"), Topic(text="Run a marathon"), Topic(text="Take a walk")]

    shortened = apply_short_labels(topics, ["run", "Run", "walk"])

    assert [t.short_text for t in shortened] == ["Run", "Run 2", "Walk"]
    assert [t.id for t in shortened] == [t.id for t in topics]
    assert all(t.short_text is None for t in topics)


def test_apply_short_labels_mismatch_leaves_topics_alone():
    topics = [Topic(text="A"), Topic(text="B")]
    with pytest.raises(MalformedResponseError):
        apply_short_labels(topics, ["only one"])
    assert all(t.short_text is None for t in topics)


def test_labels_are_compared_after_nfc_normalization():
    decomposed, composed = "cafe\u0301", "caf\u00e9"

    assert normalize_short_labels([decomposed, composed], 2) == ["Caf\u00e9", "Caf\u00e9 2"]
