"""Per-season roster rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from rostercap.core.enums import Position


DEFAULT_SALARY_CAP = 100.0
DEFAULT_FLOOR_PRICE = 4.5
DEFAULT_ROSTER_SIZE = 15
DEFAULT_FREE_TRANSFERS_PER_WEEK = 1
DEFAULT_POINT_COST_PER_TRANSFER = 6

# 10 of the 15 roster spots are spoken for by these minimums
DEFAULT_POSITION_MINIMUMS: dict[Position, int] = {
    Position.QB: 1,
    Position.RB: 3,
    Position.WR: 3,
    Position.TE: 1,
    Position.K: 1,
    Position.DEF: 1,
}


@dataclass(frozen=True)
class RosterConstraints:
    """
    Roster and budget policy for one season.

    Amounts are in millions of budget units. position_maximums is empty
    unless a league configures caps per position.
    """

    season: int = 0
    salary_cap: float = DEFAULT_SALARY_CAP
    roster_size: int = DEFAULT_ROSTER_SIZE
    position_minimums: Mapping[Position, int] = field(
        default_factory=lambda: dict(DEFAULT_POSITION_MINIMUMS)
    )
    position_maximums: Mapping[Position, int] = field(default_factory=dict)
    free_transfers_per_week: int = DEFAULT_FREE_TRANSFERS_PER_WEEK
    point_cost_per_transfer: int = DEFAULT_POINT_COST_PER_TRANSFER
    floor_price: float = DEFAULT_FLOOR_PRICE

    def minimum_for(self, position: Position) -> int:
        return int(self.position_minimums.get(position, 0))

    def maximum_for(self, position: Position) -> int | None:
        value = self.position_maximums.get(position)
        return int(value) if value is not None else None

    def unmet_positions(
        self,
        counts: Mapping[Position, int],
        include_minimums: bool = True,
    ) -> list[str]:
        """
        Position names whose minimum is not met (or maximum exceeded).

        Returned in Position declaration order so messages are stable.
        Pass include_minimums=False for a roster still being built.
        """
        unmet = []
        for position in Position:
            count = counts.get(position, 0)
            maximum = self.maximum_for(position)
            if include_minimums and count < self.minimum_for(position):
                unmet.append(position.value)
            elif maximum is not None and count > maximum:
                unmet.append(position.value)
        return unmet

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if self.salary_cap <= 0:
            errors.append("salary_cap must be positive")
        if self.floor_price <= 0:
            errors.append("floor_price must be positive")
        if sum(self.position_minimums.values()) > self.roster_size:
            errors.append("position minimums exceed roster size")
        if self.floor_price * self.roster_size > self.salary_cap:
            errors.append("salary_cap cannot cover a full roster at floor price")
        if self.free_transfers_per_week < 0 or self.point_cost_per_transfer < 0:
            errors.append("transfer allotment and point cost must be non-negative")
        return errors

    def to_dict(self) -> dict:
        return {
            "season": self.season,
            "salary_cap": self.salary_cap,
            "roster_size": self.roster_size,
            "position_minimums": {p.value: n for p, n in self.position_minimums.items()},
            "position_maximums": {p.value: n for p, n in self.position_maximums.items()},
            "free_transfers_per_week": self.free_transfers_per_week,
            "point_cost_per_transfer": self.point_cost_per_transfer,
            "floor_price": self.floor_price,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RosterConstraints:
        defaults = cls()
        minimums = data.get("position_minimums")
        maximums = data.get("position_maximums")
        return cls(
            season=int(data.get("season", 0)),
            salary_cap=float(data.get("salary_cap", defaults.salary_cap)),
            roster_size=int(data.get("roster_size", defaults.roster_size)),
            position_minimums=(
                {Position.parse(p): int(n) for p, n in minimums.items()}
                if minimums is not None
                else dict(DEFAULT_POSITION_MINIMUMS)
            ),
            position_maximums=(
                {Position.parse(p): int(n) for p, n in maximums.items()}
                if maximums
                else {}
            ),
            free_transfers_per_week=int(
                data.get("free_transfers_per_week", defaults.free_transfers_per_week)
            ),
            point_cost_per_transfer=int(
                data.get("point_cost_per_transfer", defaults.point_cost_per_transfer)
            ),
            floor_price=float(data.get("floor_price", defaults.floor_price)),
        )

    @classmethod
    def defaults_for(cls, season: int) -> RosterConstraints:
        return cls(season=season)
