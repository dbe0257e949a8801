"""Bingo card module."""

from .engine import BingoCard, CardStatus, expand_pool, has_streak

__all__ = ['BingoCard', 'CardStatus', 'expand_pool', 'has_streak']
