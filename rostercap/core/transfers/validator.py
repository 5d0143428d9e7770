"""Roster Validator: total cost and position counts of a candidate player set."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from rostercap.core.enums import Position
from rostercap.core.models import Player, RosterConstraints, round_money
from rostercap.core.transfers.errors import InvalidTransfer, PlayerNotFound
from rostercap.core.transfers.store import TransferStore


@dataclass(frozen=True)
class ValidationReport:
    """Result of checking a flat list of player ids against season policy."""

    season: int
    is_valid: bool
    total_cost: float
    remaining_budget: float
    player_count: int
    position_counts: dict[str, int] = field(default_factory=dict)
    missing_positions: list[str] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "season": self.season,
            "is_valid": self.is_valid,
            "total_cost": self.total_cost,
            "remaining_budget": self.remaining_budget,
            "player_count": self.player_count,
            "positions": dict(self.position_counts),
            "missing_positions": list(self.missing_positions),
            "message": self.message,
        }


def validate_player_set(
    players: Sequence[Player],
    constraints: RosterConstraints,
    final: bool = True,
) -> ValidationReport:
    """
    Validate already-resolved players.

    A final roster must also have exactly roster_size players; a partial
    one is only checked for budget and maximums.
    """
    total_cost = round_money(sum(p.current_price for p in players))
    remaining = round_money(constraints.salary_cap - total_cost)
    counts = Counter(p.position for p in players)
    missing = constraints.unmet_positions(counts, include_minimums=final)

    problems = []
    if total_cost > constraints.salary_cap:
        problems.append(
            f"Roster costs ${total_cost:.1f}M, over the ${constraints.salary_cap:.1f}M cap"
        )
    if missing:
        problems.append(f"Position requirements not met: {', '.join(missing)}")
    if final and len(players) != constraints.roster_size:
        problems.append(
            f"Roster must have exactly {constraints.roster_size} players, has {len(players)}"
        )

    return ValidationReport(
        season=constraints.season,
        is_valid=not problems,
        total_cost=total_cost,
        remaining_budget=remaining,
        player_count=len(players),
        position_counts={p.value: counts.get(p, 0) for p in Position},
        missing_positions=missing,
        message="; ".join(problems) if problems else "Roster is valid",
    )


def validate_roster(
    store: TransferStore,
    player_ids: Iterable[str],
    season: int,
    final: bool = True,
) -> ValidationReport:
    """
    Look up player_ids and validate them as a roster for season.

    Raises:
        PlayerNotFound: an id has no catalog entry
        InvalidTransfer: an id is listed twice
    """
    ids = [str(pid) for pid in player_ids]
    dupes = sorted(pid for pid, n in Counter(ids).items() if n > 1)
    if dupes:
        raise InvalidTransfer(
            f"Duplicate player in roster: {', '.join(dupes)}", {"duplicates": dupes}
        )

    catalog = store.get_players(ids)
    for pid in ids:
        if pid not in catalog:
            raise PlayerNotFound(pid)

    constraints = store.get_roster_constraints(season)
    return validate_player_set([catalog[pid] for pid in ids], constraints, final=final)
