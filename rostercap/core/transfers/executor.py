"""
Transfer Executor.

Applies a swap of players to a team's weekly roster and budget ledger as
one unit. Validation happens before any mutation; a rejected transfer
leaves roster, ledger and audit log exactly as they were.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from rostercap.core.enums import RosterSlot
from rostercap.core.models import Team
from rostercap.core.transactions import TransferRecord, TransferType
from rostercap.core.transfers.errors import (
    ConcurrentTransferConflict,
    PlayerNotOnRoster,
    PositionConstraintViolated,
    RosterFull,
    TeamNotFound,
    TransferError,
    Unaffordable,
)
from rostercap.core.transfers.impact import ImpactReport, calculate_transfer_impact
from rostercap.core.transfers.locks import team_transfer_lock
from rostercap.core.transfers.store import TransferStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferResult:
    """Committed outcome of an executed transfer."""

    ledger: Team
    records: list[TransferRecord] = field(default_factory=list)
    transfers_count: int = 0
    point_cost: int = 0
    impact: Optional[ImpactReport] = None
    seeded_roster: int = 0  # Entries copied forward from the prior week

    def to_dict(self) -> dict:
        return {
            "ledger": self.ledger.ledger_dict(),
            "transfers": [record.to_dict() for record in self.records],
            "transfers_count": self.transfers_count,
            "point_cost": self.point_cost,
            "seeded_roster": self.seeded_roster,
        }


class TransferExecutor:
    """
    Commits transfers against a TransferStore.

    Each call holds the team's transfer lock and a single store
    transaction; the impact report is re-derived inside that transaction
    so the checks see the committed ledger, not a client's copy.
    """

    def __init__(self, store: TransferStore, lock_timeout_s: Optional[float] = None):
        self.store = store
        self.lock_timeout_s = lock_timeout_s

    def ensure_week_roster_exists(self, team_id: str, week: int, season: int) -> int:
        """
        Seed week's roster from week - 1 if it has no entries yet.

        Week 1 starts empty. Idempotent: returns the number of entries copied,
        0 when the roster already exists.
        """
        if week <= 1:
            return 0
        if self.store.get_roster_snapshot(team_id, week, season):
            return 0
        copied = self.store.copy_roster_forward(team_id, week - 1, week, season)
        if copied:
            logger.info(
                "Seeded week %s roster for team %s from week %s (%s players)",
                week, team_id, week - 1, copied,
            )
        return copied

    def execute(
        self,
        team_id: str,
        week: int,
        season: int,
        players_out: Iterable[str] = (),
        players_in: Iterable[str] = (),
    ) -> TransferResult:
        """
        Sell players_out and buy players_in for team_id's week roster.

        Raises:
            TeamNotFound, InvalidTransfer, PlayerNotFound: malformed request
            PlayerNotOnRoster: a sold player is not on the week's roster
            Unaffordable: remaining budget would go negative
            PositionConstraintViolated: resulting roster breaks position rules
            RosterFull: resulting roster exceeds the roster size
            ConcurrentTransferConflict: the ledger changed mid-transaction
            TimeoutError: the team's transfer lock was not acquired in time
        """
        players_out = list(players_out or [])
        players_in = list(players_in or [])

        # Lock on the stored id so equivalent spellings share one lock
        team = self.store.get_team(team_id)
        if team is None:
            raise TeamNotFound(team_id)
        team_id = team.id

        with team_transfer_lock(team_id, timeout_s=self.lock_timeout_s):
            try:
                with self.store.transaction():
                    result = self._execute_locked(team_id, week, season, players_out, players_in)
            except TransferError as exc:
                logger.warning("Transfer rejected for team %s week %s: %s", team_id, week, exc)
                raise

        logger.info(
            "Transfer committed for team %s week %s: out=%s in=%s spend=%.2f remaining=%.2f "
            "free_left=%s point_cost=%s",
            team_id, week, players_out, players_in,
            result.ledger.current_spent, result.ledger.remaining_budget,
            result.ledger.free_transfers_remaining, result.point_cost,
        )
        return result

    def _execute_locked(
        self,
        team_id: str,
        week: int,
        season: int,
        players_out: list[str],
        players_in: list[str],
    ) -> TransferResult:
        store = self.store
        # Period and constraints are re-read inside the transaction
        impact = calculate_transfer_impact(store, team_id, week, season, players_out, players_in)
        constraints = store.get_roster_constraints(season)

        if impact.players_not_on_roster:
            raise PlayerNotOnRoster(impact.players_not_on_roster[0], impact.week)
        if not impact.is_affordable:
            raise Unaffordable(
                f"Transfer would exceed budget. Remaining: ${impact.remaining_budget:.2f}M",
                {
                    "remaining_budget": impact.remaining_budget,
                    "money_needed": impact.money_needed,
                    "money_freed": impact.money_freed,
                },
            )
        if not impact.position_valid:
            raise PositionConstraintViolated(
                impact.missing_positions, {"position_counts": impact.position_counts}
            )
        if impact.exceeds_roster_size:
            raise RosterFull(
                f"Roster would have {impact.roster_count} players, "
                f"limit is {constraints.roster_size}",
                {"roster_count": impact.roster_count, "roster_size": constraints.roster_size},
            )

        seeded = self.ensure_week_roster_exists(team_id, impact.week, impact.season)

        records: list[TransferRecord] = []
        for player_id in players_out:
            if not store.remove_roster_entry(team_id, player_id, impact.week, impact.season):
                raise PlayerNotOnRoster(player_id, impact.week)
            records.append(
                store.record_transfer(
                    team_id, player_id, TransferType.SELL,
                    impact.sale_prices[player_id], impact.week, impact.season,
                )
            )

        for player_id in players_in:
            # Already rostered: roster unchanged, purchase still recorded
            store.add_roster_entry(
                team_id, player_id, impact.week, impact.season, position_slot=RosterSlot.BENCH
            )
            records.append(
                store.record_transfer(
                    team_id, player_id, TransferType.BUY,
                    impact.purchase_prices[player_id], impact.week, impact.season,
                )
            )

        if not store.update_ledger(
            team_id,
            spend=impact.new_total_spent,
            remaining_budget=impact.remaining_budget,
            free_transfers_remaining=impact.free_transfers_after,
            expected_spend=impact.current_spent,
        ):
            raise ConcurrentTransferConflict(
                f"Budget for team {team_id} changed during the transfer; retry",
                {"team_id": team_id, "expected_spend": impact.current_spent},
            )

        ledger = store.get_team(team_id)
        return TransferResult(
            ledger=ledger,
            records=records,
            transfers_count=impact.transfers_count,
            point_cost=impact.point_cost,
            impact=impact,
            seeded_roster=seeded,
        )
