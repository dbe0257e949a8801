"""
Bingo card engine.

Builds a 5x5 grid from a topic pool, toggles tiles and keeps the win flag
in sync: a card is won as soon as any row, column or diagonal holds four
consecutive checked tiles.
"""

import logging
import math
import random
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence

from ..config import Config
from ..models import CardState, Tile, Topic
from ..services.persistence import CardPersistence

logger = logging.getLogger(__name__)

GRID_SIZE = Config.GRID_SIZE
TILE_COUNT = GRID_SIZE * GRID_SIZE
WIN_STREAK = Config.WIN_STREAK


class CardStatus(Enum):
    """Lifecycle state of a card."""
    EMPTY = "empty"
    READY = "ready"


def has_streak(cells: Iterable[bool], length: int = WIN_STREAK) -> bool:
    """True if ``cells`` contains ``length`` consecutive True values."""
    run = 0
    for checked in cells:
        if checked:
            run += 1
            if run >= length:
                return True
        else:
            run = 0
    return False


def winning_lines(checked: Sequence[Sequence[bool]]) -> List[List[bool]]:
    """All rows, columns and both diagonals of a square checked-matrix."""
    size = len(checked)
    lines = [list(row) for row in checked]
    lines.extend([checked[row][col] for row in range(size)] for col in range(size))
    lines.append([checked[i][i] for i in range(size)])
    lines.append([checked[i][size - 1 - i] for i in range(size)])
    return lines


def expand_pool(topics: Sequence[Topic], size: int = TILE_COUNT) -> List[Topic]:
    """
    Repeat a short pool end-to-end until it covers ``size`` tiles.

    Pools already large enough are returned unchanged (as a list).
    """
    pool = list(topics)
    if not pool or len(pool) >= size:
        return pool
    repeats = math.ceil(size / len(pool))
    return (pool * repeats)[:size]


class BingoCard:
    """
    A 5x5 bingo card with derived win state.

    Tiles hold copies of the topics they were generated from, so later
    edits in the topic store never reach an existing card.
    """

    def __init__(
        self,
        persistence: Optional[CardPersistence] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize an empty card.

        Args:
            persistence: Where to save card state; the saved card is restored on start
            rng: Random source for shuffling
        """
        self._tiles: List[List[Tile]] = []
        self._has_won = False
        self._persistence = persistence
        self._rng = rng or random.Random()
        self._change_callbacks: List[Callable[[], None]] = []

        if persistence is not None:
            saved = persistence.load_card()
            if saved is not None and not self._apply_state(saved):
                logger.warning("Discarding saved card: expected a %dx%d grid", GRID_SIZE, GRID_SIZE)

    # ==================== State access ====================

    @property
    def tiles(self) -> List[List[Tile]]:
        """Deep snapshot of the tile matrix."""
        return [[tile.copy() for tile in row] for row in self._tiles]

    @property
    def has_won(self) -> bool:
        return self._has_won

    @property
    def state(self) -> CardStatus:
        return CardStatus.READY if self._tiles else CardStatus.EMPTY

    @property
    def is_empty(self) -> bool:
        return not self._tiles

    def tile_at(self, row: int, col: int) -> Optional[Tile]:
        if not self._in_range(row, col):
            return None
        return self._tiles[row][col].copy()

    def to_state(self) -> CardState:
        return CardState(tiles=self.tiles, has_won=self._has_won)

    def on_change(self, callback: Callable[[], None]) -> None:
        """Register a callback invoked after every card change."""
        self._change_callbacks.append(callback)

    # ==================== Operations ====================

    def generate_card(self, topics: Sequence[Topic]) -> bool:
        """
        Generate a fresh card from a topic pool.

        Pools with fewer than 25 topics are repeated to fill the grid.
        An empty pool leaves the card untouched.

        Args:
            topics: Topic pool snapshot

        Returns:
            True if a card was generated
        """
        pool = expand_pool(topics)
        if not pool:
            logger.warning("Cannot generate a bingo card without topics")
            return False

        self._rng.shuffle(pool)
        selected = pool[:TILE_COUNT]
        self._tiles = [
            [Tile(topic=selected[row * GRID_SIZE + col].copy()) for col in range(GRID_SIZE)]
            for row in range(GRID_SIZE)
        ]
        self._has_won = False
        self._commit()
        return True

    def toggle_tile(self, row: int, col: int) -> None:
        """Flip one tile and re-evaluate the win. Out-of-range calls are ignored."""
        if not self._in_range(row, col):
            return
        tile = self._tiles[row][col]
        tile.is_checked = not tile.is_checked
        self._has_won = self._check_for_win()
        self._commit()

    def reset_card(self) -> None:
        """Uncheck every tile, keeping the topics."""
        if not self._tiles:
            return
        for row in self._tiles:
            for tile in row:
                tile.is_checked = False
        self._has_won = False
        self._commit()

    def clear(self) -> None:
        """Drop the card entirely, back to the empty state."""
        self._tiles = []
        self._has_won = False
        if self._persistence is not None:
            self._persistence.save_card(None)
        self._notify_change()

    def restore(self, state: CardState) -> bool:
        """
        Load a previously saved card.

        The win flag is recomputed from the tiles rather than trusted.

        Returns:
            False (card unchanged) if ``state`` is not a full grid
        """
        if not self._apply_state(state):
            return False
        self._commit()
        return True

    # ==================== Internals ====================

    def _apply_state(self, state: CardState) -> bool:
        tiles = state.tiles
        if len(tiles) != GRID_SIZE or any(len(row) != GRID_SIZE for row in tiles):
            return False
        self._tiles = [[tile.copy() for tile in row] for row in tiles]
        self._has_won = self._check_for_win()
        return True

    def _in_range(self, row: int, col: int) -> bool:
        return bool(self._tiles) and 0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE

    def _check_for_win(self) -> bool:
        checked = [[tile.is_checked for tile in row] for row in self._tiles]
        return any(has_streak(line) for line in winning_lines(checked))

    def _commit(self) -> None:
        if self._persistence is not None:
            self._persistence.save_card(self.to_state())
        self._notify_change()

    def _notify_change(self) -> None:
        for callback in self._change_callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Card change callback failed")
