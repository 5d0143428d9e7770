"""Player catalog model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rostercap.core.enums import Position


@dataclass(frozen=True)
class Player:
    """
    A player as seen by the transfer engine.

    Only the fields the budget and position rules need: the catalog owns
    everything else (stats, fixtures, price history).
    """

    id: str
    position: Position
    current_price: float
    name: str = ""
    nfl_team: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def to_dict(self) -> dict:
        return {
            "player_id": self.id,
            "name": self.name,
            "position": self.position.value,
            "current_price": self.current_price,
            "nfl_team": self.nfl_team,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Player:
        return cls(
            id=str(data["player_id"]),
            position=Position.parse(data["position"]),
            current_price=float(data["current_price"]),
            name=data.get("name", ""),
            nfl_team=data.get("nfl_team"),
        )

    def __repr__(self) -> str:
        return f"{self.display_name} ({self.position.value}) ${self.current_price:.1f}M"
