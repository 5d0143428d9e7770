"""
Transfer Impact Calculator.

Pure, read-only computation of what a proposed set of sales and purchases
would do to a team: money freed and needed, the resulting ledger, whether
it is affordable, whether the resulting roster is position-legal, and what
it costs in free transfers and points.

Safe to call repeatedly for a live preview. The executor calls the same
function inside its write transaction so preview and commit agree.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Sequence

from rostercap.core.enums import Position
from rostercap.core.models import Period, Player, RosterConstraints, RosterEntry, Team, round_money
from rostercap.core.transfers.errors import InvalidTransfer, PlayerNotFound, TeamNotFound
from rostercap.core.transfers.store import TransferStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImpactReport:
    """Everything a preview shows before the user confirms a transfer."""

    team_id: str
    week: int
    season: int
    period: Period

    # Budget
    current_spent: float
    money_freed: float
    money_needed: float
    new_total_spent: float
    remaining_budget: float
    is_affordable: bool

    # Positions
    position_valid: bool
    missing_positions: list[str] = field(default_factory=list)
    position_counts: dict[str, int] = field(default_factory=dict)
    roster_count: int = 0
    exceeds_roster_size: bool = False
    players_not_on_roster: list[str] = field(default_factory=list)

    # Transfer economics
    free_transfers_available: int = 0
    transfers_count: int = 0
    free_transfers_after: int = 0
    point_cost: int = 0

    # Prices used, so the executor records exactly what was validated
    sale_prices: dict[str, float] = field(default_factory=dict)
    purchase_prices: dict[str, float] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return (
            self.is_affordable
            and self.position_valid
            and not self.exceeds_roster_size
            and not self.players_not_on_roster
        )

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "week": self.week,
            "season": self.season,
            "period": self.period.to_setting(),
            "current_spent": self.current_spent,
            "money_freed": self.money_freed,
            "money_needed": self.money_needed,
            "new_total_spent": self.new_total_spent,
            "remaining_budget": self.remaining_budget,
            "is_affordable": self.is_affordable,
            "position_valid": self.position_valid,
            "missing_positions": list(self.missing_positions),
            "position_counts": dict(self.position_counts),
            "roster_count": self.roster_count,
            "exceeds_roster_size": self.exceeds_roster_size,
            "players_not_on_roster": list(self.players_not_on_roster),
            "free_transfers_available": self.free_transfers_available,
            "transfers_count": self.transfers_count,
            "free_transfers_after": self.free_transfers_after,
            "point_cost": self.point_cost,
        }


def normalize_transfer_request(
    players_out: Iterable[str],
    players_in: Iterable[str],
) -> tuple[list[str], list[str]]:
    """
    Canonicalize the id lists of a transfer request.

    Raises InvalidTransfer for an id listed twice or both sold and bought.
    """
    out_ids = [str(pid) for pid in players_out or []]
    in_ids = [str(pid) for pid in players_in or []]

    for label, ids in (("playersOut", out_ids), ("playersIn", in_ids)):
        dupes = sorted(pid for pid, n in Counter(ids).items() if n > 1)
        if dupes:
            raise InvalidTransfer(
                f"Duplicate player in {label}: {', '.join(dupes)}",
                {"duplicates": dupes},
            )

    overlap = sorted(set(out_ids) & set(in_ids))
    if overlap:
        raise InvalidTransfer(
            f"Player cannot be sold and bought in one transfer: {', '.join(overlap)}",
            {"players": overlap},
        )
    return out_ids, in_ids


def count_transfers(players_out: Sequence[str], players_in: Sequence[str]) -> int:
    """A swap pairs one sale with one purchase; unpaired moves count singly."""
    return max(len(players_out), len(players_in))


def calculate_point_cost(
    transfers_count: int,
    free_transfers_available: int,
    period: Period,
    constraints: RosterConstraints,
) -> int:
    """Points deducted for transfers beyond the free allotment."""
    if period.transfers_are_free:
        return 0
    extra = max(0, transfers_count - max(0, free_transfers_available))
    return extra * constraints.point_cost_per_transfer


def free_transfers_after(
    transfers_count: int,
    free_transfers_available: int,
    period: Period,
) -> int:
    """Free transfers left once this transfer commits (floored at zero)."""
    if period.transfers_are_free:
        return free_transfers_available
    return max(0, free_transfers_available - transfers_count)


def effective_week_roster(
    store: TransferStore,
    team_id: str,
    week: int,
    season: int,
) -> list[RosterEntry]:
    """
    Roster the transfer applies to.

    When the target week has no roster yet, execute will seed it from the
    prior week, so that is the roster a preview must reason about too.
    """
    entries = store.get_roster_snapshot(team_id, week, season)
    if entries or week <= 1:
        return entries
    previous = store.get_roster_snapshot(team_id, week - 1, season)
    return [replace(entry, week=week) for entry in previous]


def _resolve_prices(store: TransferStore, player_ids: Sequence[str]) -> dict[str, Player]:
    players = store.get_players(player_ids)
    for pid in player_ids:
        if pid not in players:
            raise PlayerNotFound(pid)
    return players


def _position_counts(
    store: TransferStore,
    roster: Sequence[RosterEntry],
    players_out: Sequence[str],
    incoming: dict[str, Player],
) -> tuple[Counter, int]:
    """Count positions on current - playersOut + playersIn."""
    outgoing = set(players_out)
    remaining = [entry for entry in roster if entry.player_id not in outgoing]
    counts: Counter = Counter()

    unknown = [entry.player_id for entry in remaining if entry.position is None]
    looked_up = store.get_players(unknown) if unknown else {}
    rostered = set()
    for entry in remaining:
        rostered.add(entry.player_id)
        position = entry.position
        if position is None and entry.player_id in looked_up:
            position = looked_up[entry.player_id].position
        if position is not None:
            counts[position] += 1

    # Buying an already-rostered player leaves the roster unchanged
    for pid, player in incoming.items():
        if pid not in rostered:
            rostered.add(pid)
            counts[player.position] += 1

    return counts, len(rostered)


def calculate_transfer_impact(
    store: TransferStore,
    team_id: str,
    week: int,
    season: int,
    players_out: Iterable[str] = (),
    players_in: Iterable[str] = (),
    period: Optional[Period] = None,
) -> ImpactReport:
    """
    Compute the impact of selling players_out and buying players_in.

    Args:
        store: Storage collaborator (read-only use)
        team_id: Team making the transfer
        week: Target roster week (>= 1)
        season: Season year; must be the team's season
        players_out: Player ids to sell
        players_in: Player ids to buy
        period: Current period; fetched from the store when omitted

    Returns:
        ImpactReport

    Raises:
        TeamNotFound, PlayerNotFound, InvalidTransfer
    """
    if int(week) < 1:
        raise InvalidTransfer(f"week must be >= 1, got {week}", {"week": week})
    out_ids, in_ids = normalize_transfer_request(players_out, players_in)

    team: Optional[Team] = store.get_team(team_id)
    if team is None:
        raise TeamNotFound(team_id)
    # The ledger belongs to one season; rosters of another season are not its to change
    if int(season) != team.season:
        raise InvalidTransfer(
            f"Team {team_id} plays season {team.season}, not {season}",
            {"team_id": team_id, "team_season": team.season, "season": int(season)},
        )

    constraints = store.get_roster_constraints(season)
    if period is None:
        period = store.get_current_period()

    sold = _resolve_prices(store, out_ids)
    bought = _resolve_prices(store, in_ids)
    sale_prices = {pid: sold[pid].current_price for pid in out_ids}
    purchase_prices = {pid: bought[pid].current_price for pid in in_ids}

    roster = effective_week_roster(store, team_id, week, season)
    on_roster = {entry.player_id for entry in roster}
    not_on_roster = [pid for pid in out_ids if pid not in on_roster]

    money_freed = round_money(sum(sale_prices.values()))
    money_needed = round_money(sum(purchase_prices.values()))
    new_total_spent = round_money(team.current_spent - money_freed + money_needed)
    remaining_budget = round_money(constraints.salary_cap - new_total_spent)

    counts, roster_count = _position_counts(
        store, roster, out_ids, {pid: bought[pid] for pid in in_ids}
    )
    # Minimums only bind once the roster is meant to be complete
    roster_complete = roster_count >= constraints.roster_size
    missing = constraints.unmet_positions(counts, include_minimums=roster_complete)

    transfers = count_transfers(out_ids, in_ids)
    free_available = team.free_transfers_remaining

    report = ImpactReport(
        team_id=team.id,
        week=int(week),
        season=int(season),
        period=period,
        current_spent=round_money(team.current_spent),
        money_freed=money_freed,
        money_needed=money_needed,
        new_total_spent=new_total_spent,
        remaining_budget=remaining_budget,
        is_affordable=remaining_budget >= 0,
        position_valid=not missing,
        missing_positions=missing,
        position_counts={p.value: counts.get(p, 0) for p in Position},
        roster_count=roster_count,
        exceeds_roster_size=roster_count > constraints.roster_size,
        players_not_on_roster=not_on_roster,
        free_transfers_available=free_available,
        transfers_count=transfers,
        free_transfers_after=free_transfers_after(transfers, free_available, period),
        point_cost=calculate_point_cost(transfers, free_available, period, constraints),
        sale_prices=sale_prices,
        purchase_prices=purchase_prices,
    )
    logger.debug(
        "Impact for team %s week %s: freed=%.2f needed=%.2f remaining=%.2f valid=%s",
        team.id, week, money_freed, money_needed, remaining_budget, report.is_valid,
    )
    return report
