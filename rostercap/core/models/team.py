"""Team ledger and roster entry models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from rostercap.core.enums import Position, RosterSlot


def round_money(value: float) -> float:
    """Round a budget amount to cents of a unit so float drift never trips a check."""
    # + 0.0 folds -0.0 into 0.0
    return round(float(value), 2) + 0.0


@dataclass(frozen=True)
class Team:
    """
    A fantasy team and its budget ledger for one season.

    remaining_budget is always cap - current_spent; the ledger only moves
    through the transfer executor (and weekly free-transfer replenishment).
    """

    id: str
    season: int
    current_spent: float = 0.0
    remaining_budget: float = 100.0
    free_transfers_remaining: int = 0
    name: str = ""
    owner: str = ""
    created_at: Optional[datetime] = None

    def ledger_dict(self) -> dict:
        return {
            "team_id": self.id,
            "season": self.season,
            "current_spent": self.current_spent,
            "remaining_budget": self.remaining_budget,
            "free_transfers_remaining": self.free_transfers_remaining,
        }

    def to_dict(self) -> dict:
        data = self.ledger_dict()
        data.update(
            {
                "name": self.name,
                "owner": self.owner,
                "created_at": self.created_at.isoformat() if self.created_at else None,
            }
        )
        return data


@dataclass(frozen=True)
class RosterEntry:
    """One player on one team's roster for a given week and season."""

    team_id: str
    player_id: str
    week: int
    season: int
    position_slot: RosterSlot = RosterSlot.BENCH

    # Joined from the catalog when the snapshot is read
    position: Optional[Position] = None
    current_price: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "player_id": self.player_id,
            "week": self.week,
            "season": self.season,
            "position_slot": self.position_slot.value,
            "position": self.position.value if self.position else None,
            "current_price": self.current_price,
        }
