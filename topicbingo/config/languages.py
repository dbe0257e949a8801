"""Language-specific configurations for topic shortening."""

from enum import Enum
from typing import List


LANG_CONFIG = {
    "english": {
        "display_name": "English",
        "schema_description": "Short bingo topics in English",
        "instructions": (
            "You generate concise English bingo tile labels. Respond with a JSON object "
            'that matches the schema {{"topics": ["..."]}} and contains exactly {count} '
            "unique entries. Each entry must be a 2-3 word English phrase that preserves "
            "the meaning of the matching long topic, keeps the same order, and avoids "
            "punctuation."
        ),
        "topics_heading": "Long topics (keep order and meaning):",
    },
    "german": {
        "display_name": "Deutsch",
        "schema_description": "Short bingo topics in Deutsch",
        "instructions": (
            "Du erzeugst kurze deutsche Bingo-Begriffe. Gib ein JSON-Objekt im Schema "
            '{{"topics": ["..."]}} mit genau {count} eindeutigen Einträgen zurück. Jeder '
            "Eintrag muss eine deutsche Phrase aus 2-3 Wörtern sein, die die Bedeutung des "
            "ursprünglichen Themas beibehält, die Reihenfolge respektiert und keine "
            "Satzzeichen enthält."
        ),
        "topics_heading": "Long topics (keep order and meaning):",
    },
    "swedish": {
        "display_name": "Svenska",
        "schema_description": "Short bingo topics in Svenska",
        "instructions": (
            "Du tar fram korta svenska bingofraser. Svara med ett JSON-objekt enligt schemat "
            '{{"topics": ["..."]}} som innehåller exakt {count} unika fraser. Varje fras ska '
            "bestå av 2-3 svenska ord, behålla innebörden av sitt ursprungliga ämne, följa "
            "samma ordning och sakna skiljetecken."
        ),
        "topics_heading": "Long topics (keep order and meaning):",
    },
}


class TopicLanguage(Enum):
    """Languages the shortening prompt can be written in."""
    ENGLISH = "english"
    GERMAN = "german"
    SWEDISH = "swedish"

    @property
    def display_name(self) -> str:
        return LANG_CONFIG[self.value]["display_name"]

    @property
    def schema_description(self) -> str:
        return LANG_CONFIG[self.value]["schema_description"]

    def instructions(self, expected_count: int) -> str:
        """Return the system instructions asking for ``expected_count`` labels."""
        return LANG_CONFIG[self.value]["instructions"].format(count=expected_count)

    def prompt(self, topic_texts: List[str]) -> str:
        """
        Build the user prompt for a batch of long topic texts.

        Args:
            topic_texts: Long topic texts, in card order

        Returns:
            Prompt with the instructions followed by a dashed topic list
        """
        topics_block = "\n".join(f"- {text}" for text in topic_texts)
        heading = LANG_CONFIG[self.value]["topics_heading"]
        return f"{self.instructions(len(topic_texts))}\n\n{heading}\n{topics_block}"

    @classmethod
    def from_name(cls, name: str) -> "TopicLanguage":
        """
        Resolve a language from its value, enum name or display name.

        Unknown names fall back to English.
        """
        key = (name or "").strip().lower()
        for language in cls:
            if key in (language.value, language.name.lower(), language.display_name.lower()):
                return language
        return cls.ENGLISH
