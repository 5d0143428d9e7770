"""
Storage contract consumed by the transfer engine.

Catalog prices, rosters, the ledger and the current period are owned by
collaborators; the engine only talks to them through this protocol.
rostercap.storage.repo.LeagueRepo is the SQLite implementation.
"""

from contextlib import AbstractContextManager
from typing import Any, Iterable, Optional, Protocol

from rostercap.core.enums import RosterSlot
from rostercap.core.models import Period, Player, RosterConstraints, RosterEntry, Team
from rostercap.core.transactions import TransferRecord, TransferType


class TransferStore(Protocol):
    """Read/write operations the engine needs from persistent storage."""

    # --- Catalog ---------------------------------------------------------

    def get_player(self, player_id: str) -> Optional[Player]:
        ...

    def get_players(self, player_ids: Iterable[str]) -> dict[str, Player]:
        ...

    def get_player_price(self, player_id: str) -> Optional[float]:
        ...

    # --- Teams and rosters -------------------------------------------------

    def get_team(self, team_id: str) -> Optional[Team]:
        ...

    def get_roster_snapshot(self, team_id: str, week: int, season: int) -> list[RosterEntry]:
        ...

    def copy_roster_forward(self, team_id: str, from_week: int, to_week: int, season: int) -> int:
        ...

    def add_roster_entry(
        self,
        team_id: str,
        player_id: str,
        week: int,
        season: int,
        position_slot: RosterSlot = RosterSlot.BENCH,
    ) -> bool:
        ...

    def remove_roster_entry(self, team_id: str, player_id: str, week: int, season: int) -> bool:
        ...

    # --- Rules and period ----------------------------------------------------

    def get_roster_constraints(self, season: int) -> RosterConstraints:
        ...

    def get_current_period(self) -> Period:
        ...

    # --- Ledger and audit ---------------------------------------------------

    def record_transfer(
        self,
        team_id: str,
        player_id: str,
        transfer_type: TransferType,
        price: float,
        week: int,
        season: int,
    ) -> TransferRecord:
        ...

    def update_ledger(
        self,
        team_id: str,
        spend: float,
        remaining_budget: float,
        free_transfers_remaining: int,
        expected_spend: Optional[float] = None,
    ) -> bool:
        ...

    def transaction(self) -> AbstractContextManager[Any]:
        ...
