"""Bingo card data models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .topic import Topic, new_id


@dataclass
class Tile:
    """One cell of the bingo grid."""

    topic: Topic
    is_checked: bool = False
    id: str = field(default_factory=new_id)

    def copy(self) -> "Tile":
        return Tile(topic=self.topic.copy(), is_checked=self.is_checked, id=self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "topic": self.topic.to_dict(), "isChecked": self.is_checked}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tile":
        if not isinstance(data, dict):
            raise ValueError(f"Tile record must be an object, got {type(data).__name__}")
        is_checked = data.get("isChecked", False)
        if not isinstance(is_checked, bool):
            raise ValueError("Tile 'isChecked' must be a boolean")
        return cls(
            topic=Topic.from_dict(data.get("topic")),
            is_checked=is_checked,
            id=str(data.get("id") or new_id()),
        )


@dataclass
class CardState:
    """Snapshot of a card: the tile matrix plus its win flag."""

    tiles: List[List[Tile]] = field(default_factory=list)
    has_won: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tiles": [[tile.to_dict() for tile in row] for row in self.tiles],
            "hasWon": self.has_won,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CardState":
        """
        Decode a persisted card.

        Raises:
            ValueError: If the structure is not a list of tile rows
        """
        if not isinstance(data, dict):
            raise ValueError("Card state must be an object")
        rows = data.get("tiles")
        if not isinstance(rows, list) or not all(isinstance(row, list) for row in rows):
            raise ValueError("Card state 'tiles' must be a list of rows")
        tiles = [[Tile.from_dict(item) for item in row] for row in rows]
        return cls(tiles=tiles, has_won=bool(data.get("hasWon", False)))
