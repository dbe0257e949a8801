"""Topic data model."""

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from ..utils.parsing import TextParser


def new_id() -> str:
    """Fresh opaque identifier for topics and tiles."""
    return str(uuid.uuid4()).upper()


@dataclass
class Topic:
    """A single activity prompt that can appear on a bingo tile."""

    text: str
    short_text: Optional[str] = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.text = TextParser.normalize_unicode(self.text).strip()
        if not self.text:
            raise ValueError("Topic text must not be empty")
        self.short_text = TextParser.trim_optional(self.short_text)

    @property
    def display_text(self) -> str:
        """Short text when one is set, the full text otherwise."""
        return self.short_text if self.short_text else self.text

    def copy(self, **changes: Any) -> "Topic":
        """Return an independent copy, optionally with fields changed."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "text": self.text}
        if self.short_text is not None:
            data["shortText"] = self.short_text
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Topic":
        """
        Build a topic from its persisted form.

        Args:
            data: Mapping with "text", optional "id" and "shortText"

        Returns:
            Decoded topic

        Raises:
            ValueError: If the record has no usable text
        """
        if not isinstance(data, dict):
            raise ValueError(f"Topic record must be an object, got {type(data).__name__}")
        text = data.get("text")
        if not isinstance(text, str):
            raise ValueError("Topic record is missing 'text'")
        short_text = data.get("shortText")
        if short_text is not None and not isinstance(short_text, str):
            raise ValueError("Topic 'shortText' must be a string")
        topic_id = data.get("id") or new_id()
        return cls(text=text, short_text=short_text, id=str(topic_id))
