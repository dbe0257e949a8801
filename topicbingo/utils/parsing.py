"""Text parsing utilities for consistent text processing across the application."""

import unicodedata
from typing import List, Optional


class TextParser:
    """
    Centralized text parsing utilities.

    Single source of truth for how raw topic input is split, sanitized
    and normalized before it reaches the topic store or a bingo tile.
    """

    # Bullet marker users paste in front of list items
    BULLET_MARKER = "- "

    @classmethod
    def normalize_unicode(cls, text: str) -> str:
        """
        Normalize text to NFC form for consistent Unicode handling.

        Prevents issues with characters like é being represented as
        either a single codepoint (NFC) or base + combining accent (NFD).

        Args:
            text: Input text

        Returns:
            NFC-normalized text
        """
        if not text:
            return ""
        return unicodedata.normalize('NFC', str(text))

    @classmethod
    def split_lines(cls, text: str) -> List[str]:
        """Split text on every newline boundary (\\n, \\r\\n, \\r, U+2028, ...)."""
        if not text:
            return []
        return str(text).splitlines()

    @classmethod
    def sanitize_topic_line(cls, line: str) -> str:
        """
        Clean a single line of raw topic input.

        Strips surrounding whitespace, then removes a leading "- " bullet
        marker and strips again. A dash without a following space is kept.

        Args:
            line: One raw input line

        Returns:
            Sanitized text, empty if nothing usable remains
        """
        trimmed = cls.normalize_unicode(line).strip()
        if not trimmed:
            return ""
        if trimmed.startswith(cls.BULLET_MARKER):
            return trimmed[len(cls.BULLET_MARKER):].strip()
        return trimmed

    @classmethod
    def parse_topic_lines(cls, text: str) -> List[str]:
        """
        Turn multi-line user input into a list of topic texts.

        Args:
            text: Raw text, one topic per line

        Returns:
            Sanitized, non-empty topic texts in input order
        """
        sanitized = (cls.sanitize_topic_line(line) for line in cls.split_lines(text))
        return [line for line in sanitized if line]

    @classmethod
    def capitalize_first_alnum(cls, text: str) -> str:
        """
        Uppercase the first letter or digit of ``text``.

        Everything else, including leading punctuation, is left unchanged.
        Text without any letter or digit is returned as-is.
        """
        for index, char in enumerate(text):
            if char.isalnum():
                return text[:index] + char.upper() + text[index + 1:]
        return text

    @classmethod
    def trim_optional(cls, text: Optional[str]) -> Optional[str]:
        """Strip whitespace from an optional string, keeping None as None."""
        if text is None:
            return None
        return cls.normalize_unicode(text).strip()
