"""Configuration module for Topic Bingo."""

from .settings import Config
from .languages import LANG_CONFIG, TopicLanguage
from .config_manager import SettingsManager

__all__ = [
    'Config',
    'LANG_CONFIG',
    'TopicLanguage',
    'SettingsManager',
]
