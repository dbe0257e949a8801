"""
Tests for the bingo card engine.

Covers generation from large, small and empty pools, 4-in-a-row win
detection across rows, columns and diagonals, and reset/persistence.
"""

import random

import pytest

from topicbingo.card import BingoCard, CardStatus, expand_pool, has_streak
from topicbingo.models import CardState, Tile, Topic
from topicbingo.services import CardPersistence, InMemoryPreferenceStore

from .conftest import make_topics


@pytest.fixture
def card(rng) -> BingoCard:
    card = BingoCard(rng=rng)
    card.generate_card(make_topics(25))
    return card


def snapshot(card: BingoCard):
    return card.to_state().to_dict()


class TestGeneration:
    def test_full_pool_yields_5x5_from_pool(self, rng):
        pool = make_topics(40)
        card = BingoCard(rng=rng)

        assert card.generate_card(pool) is True

        tiles = card.tiles
        assert len(tiles) == 5
        assert all(len(row) == 5 for row in tiles)
        pool_ids = {topic.id for topic in pool}
        chosen = [tile.topic.id for row in tiles for tile in row]
        assert set(chosen) <= pool_ids
        assert len(set(chosen)) == 25
        assert card.state == CardStatus.READY

    @pytest.mark.parametrize("size", [1, 2, 7, 12, 24])
    def test_small_pool_fills_every_cell(self, rng, size):
        pool = make_topics(size)
        card = BingoCard(rng=rng)

        assert card.generate_card(pool)

        texts = [tile.topic.text for row in card.tiles for tile in row]
        assert len(texts) == 25
        assert set(texts) == {topic.text for topic in pool}

    def test_generation_resets_checks_and_win(self, card):
        for col in range(4):
            card.toggle_tile(0, col)
        assert card.has_won

        card.generate_card(make_topics(30))

        assert card.has_won is False
        assert not any(tile.is_checked for row in card.tiles for tile in row)

    def test_empty_pool_is_a_noop(self, rng):
        card = BingoCard(rng=rng)

        assert card.generate_card([]) is False
        assert card.state == CardStatus.EMPTY
        assert card.tiles == []

    def test_empty_pool_keeps_existing_card(self, card):
        before = snapshot(card)
        assert card.generate_card([]) is False
        assert snapshot(card) == before

    def test_tiles_do_not_alias_pool_topics(self, rng):
        pool = make_topics(25)
        card = BingoCard(rng=rng)
        card.generate_card(pool)

        pool[0].short_text = "Changed"

        assert all(tile.topic.short_text is None for row in card.tiles for tile in row)

    def test_same_seed_same_card(self):
        pool = make_topics(30)
        first = BingoCard(rng=random.Random(7))
        second = BingoCard(rng=random.Random(7))
        first.generate_card(pool)
        second.generate_card(pool)

        assert [t.topic.id for r in first.tiles for t in r] == [t.topic.id for r in second.tiles for t in r]


class TestWinDetection:
    def test_four_in_a_row(self, card):
        for col in range(4):
            card.toggle_tile(0, col)
        assert card.has_won is True

    def test_non_contiguous_row_does_not_win(self, card):
        for col in (0, 1, 3, 4):
            card.toggle_tile(0, col)
        assert card.has_won is False

    def test_three_is_not_enough(self, card):
        for col in (1, 2, 3):
            card.toggle_tile(2, col)
        assert card.has_won is False

    def test_column_win(self, card):
        for row in range(1, 5):
            card.toggle_tile(row, 3)
        assert card.has_won is True

    def test_main_diagonal_win(self, card):
        for i in range(4):
            card.toggle_tile(i, i)
        assert card.has_won is True

    def test_anti_diagonal_win(self, card):
        for row, col in ((0, 4), (1, 3), (2, 2), (3, 1)):
            card.toggle_tile(row, col)
        assert card.has_won is True

    def test_untoggling_clears_win(self, card):
        for col in range(4):
            card.toggle_tile(0, col)
        card.toggle_tile(0, 2)
        assert card.has_won is False

    def test_scattered_checks_never_win(self, card):
        for row, col in ((0, 0), (1, 2), (2, 4), (3, 1), (4, 3), (0, 2), (2, 0)):
            card.toggle_tile(row, col)
        assert card.has_won is False

    @pytest.mark.parametrize("row,col", [(5, 0), (-1, 2), (0, 5), (2, -1), (99, 99)])
    def test_out_of_range_toggle_is_ignored(self, card, row, col):
        before = snapshot(card)
        card.toggle_tile(row, col)
        assert snapshot(card) == before

    def test_toggle_on_empty_card_is_ignored(self, rng):
        card = BingoCard(rng=rng)
        card.toggle_tile(0, 0)
        assert card.state == CardStatus.EMPTY

    def test_tile_at(self, card, rng):
        card.toggle_tile(1, 3)

        tile = card.tile_at(1, 3)
        assert tile.is_checked
        assert tile.id == card.tiles[1][3].id
        assert card.tile_at(5, 0) is None
        assert BingoCard(rng=rng).tile_at(0, 0) is None

        tile.is_checked = False
        assert card.tile_at(1, 3).is_checked


class TestReset:
    def test_reset_unchecks_everything(self, card):
        for col in range(5):
            card.toggle_tile(1, col)
        topics_before = [t.topic.id for r in card.tiles for t in r]

        card.reset_card()

        assert card.has_won is False
        assert not any(tile.is_checked for row in card.tiles for tile in row)
        assert [t.topic.id for r in card.tiles for t in r] == topics_before

    def test_reset_is_idempotent(self, card):
        card.toggle_tile(0, 0)
        card.reset_card()
        once = snapshot(card)
        card.reset_card()
        assert snapshot(card) == once

    def test_reset_on_empty_card(self, rng):
        card = BingoCard(rng=rng)
        card.reset_card()
        assert card.state == CardStatus.EMPTY


class TestPersistenceAndObservers:
    def test_card_survives_restart(self, rng):
        prefs = InMemoryPreferenceStore()
        card = BingoCard(persistence=CardPersistence(prefs), rng=rng)
        card.generate_card(make_topics(25))
        for col in range(4):
            card.toggle_tile(3, col)

        restored = BingoCard(persistence=CardPersistence(prefs))

        assert snapshot(restored) == snapshot(card)
        assert restored.has_won is True

    def test_restore_recomputes_win_flag(self, card):
        state = card.to_state()
        state.has_won = True

        assert card.restore(state)
        assert card.has_won is False

    def test_restore_rejects_wrong_shape(self, card):
        before = snapshot(card)
        bad = CardState(tiles=[[Tile(topic=Topic(text="x"))] * 4] * 5)

        assert card.restore(bad) is False
        assert snapshot(card) == before

    def test_clear_removes_saved_card(self, rng):
        prefs = InMemoryPreferenceStore()
        card = BingoCard(persistence=CardPersistence(prefs), rng=rng)
        card.generate_card(make_topics(3))
        card.clear()

        assert card.is_empty
        assert BingoCard(persistence=CardPersistence(prefs)).is_empty

    def test_change_callbacks(self, rng):
        events = []
        card = BingoCard(rng=rng)
        card.on_change(lambda: events.append(card.has_won))

        card.generate_card(make_topics(25))
        card.toggle_tile(0, 0)
        card.toggle_tile(9, 9)

        assert events == [False, False]

    def test_failing_callback_does_not_break_card(self, rng):
        card = BingoCard(rng=rng)

        def boom():
            raise RuntimeError("observer failed")

        card.on_change(boom)
        assert card.generate_card(make_topics(25))
        assert card.state == CardStatus.READY


class TestHelpers:
    def test_has_streak(self):
        assert has_streak([True, True, True, True, False])
        assert has_streak([False, True, True, True, True])
        assert has_streak([True] * 5)
        assert not has_streak([True, False, True, True, True])
        assert not has_streak([])

    def test_expand_pool(self):
        pool = make_topics(3)
        expanded = expand_pool(pool)
        assert len(expanded) == 25
        assert [t.text for t in expanded[:6]] == ["Topic 1", "Topic 2", "Topic 3"] * 2
        assert expand_pool([]) == []
        assert len(expand_pool(make_topics(30))) == 30
