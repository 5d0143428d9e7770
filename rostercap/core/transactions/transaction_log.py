"""
Transfer audit records.

Every player bought or sold is appended as an immutable record carrying
the price at the moment of the transfer. Records are never edited or
deleted; the ledger can always be explained from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class TransferType(Enum):
    """Direction of a single player transfer."""

    BUY = "buy"
    SELL = "sell"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TransferRecord:
    """One player moving in or out of a team's roster."""

    team_id: str
    player_id: str
    transfer_type: TransferType
    price: float
    week: int
    season: int
    transferred_at: datetime = field(default_factory=_utc_now)
    transfer_id: Optional[int] = None  # Assigned by the store

    # Joined from the catalog for history views
    player_name: Optional[str] = None
    player_position: Optional[str] = None

    @property
    def signed_amount(self) -> float:
        """Budget effect: purchases spend, sales free money."""
        return self.price if self.transfer_type == TransferType.BUY else -self.price

    def to_dict(self) -> dict:
        return {
            "transfer_id": self.transfer_id,
            "team_id": self.team_id,
            "player_id": self.player_id,
            "player_name": self.player_name,
            "player_position": self.player_position,
            "transfer_type": self.transfer_type.value,
            "price": self.price,
            "week": self.week,
            "season": self.season,
            "transferred_at": self.transferred_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> TransferRecord:
        transferred_at = data.get("transferred_at")
        if isinstance(transferred_at, str):
            transferred_at = datetime.fromisoformat(transferred_at)
        return cls(
            transfer_id=data.get("transfer_id"),
            team_id=str(data["team_id"]),
            player_id=str(data["player_id"]),
            transfer_type=TransferType(data["transfer_type"]),
            price=float(data["price"]),
            week=int(data["week"]),
            season=int(data["season"]),
            transferred_at=transferred_at or _utc_now(),
            player_name=data.get("player_name"),
            player_position=data.get("player_position"),
        )

