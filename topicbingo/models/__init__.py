"""Data models for Topic Bingo."""

from .topic import Topic, new_id
from .card import Tile, CardState

__all__ = ['Topic', 'Tile', 'CardState', 'new_id']
