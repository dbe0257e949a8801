"""Topic Bingo - bingo cards built from your own activity prompts."""

__version__ = "1.0.0"
__author__ = "Topic Bingo Team"

from .card import BingoCard, CardStatus
from .config import Config, LANG_CONFIG, TopicLanguage
from .models import CardState, Tile, Topic
from .services import ShorteningService, TopicStore

__all__ = [
    'BingoCard',
    'CardStatus',
    'Config',
    'LANG_CONFIG',
    'TopicLanguage',
    'CardState',
    'Tile',
    'Topic',
    'ShorteningService',
    'TopicStore',
]
