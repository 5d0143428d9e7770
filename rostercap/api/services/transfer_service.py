"""
Service layer for the transfer API.

Opens one LeagueRepo per call and runs the transfer engine against it.
Engine errors (TransferError subclasses) propagate; the routers map them
to HTTP responses.
"""

from __future__ import annotations

import contextlib
import logging
import random
from typing import Iterable, Iterator, Optional

from rostercap.config import RosterCapConfig, get_config
from rostercap.core.ai import AutoDraftAllocator, AutoDraftResult
from rostercap.core.models import Period, Team
from rostercap.core.transactions import TransferRecord
from rostercap.core.transfers import (
    ImpactReport,
    TeamNotFound,
    TransferExecutor,
    TransferResult,
    ValidationReport,
    calculate_transfer_impact,
    effective_week_roster,
    validate_roster,
)
from rostercap.storage import LeagueRepo

logger = logging.getLogger(__name__)


class TransferService:
    """Entry point for every transfer, team and period operation."""

    def __init__(self, config: Optional[RosterCapConfig] = None):
        self.config = config or get_config()

    @contextlib.contextmanager
    def repo(self) -> Iterator[LeagueRepo]:
        with LeagueRepo(self.config.db_path, busy_timeout_s=self.config.busy_timeout_s) as repo:
            yield repo

    def init_db(self) -> None:
        with self.repo() as repo:
            repo.init_db(default_season=self.config.default_season)

    # --- resolution helpers ------------------------------------------------

    def _season(self, repo: LeagueRepo, season: Optional[int]) -> int:
        if season is not None:
            return int(season)
        return repo.get_current_season(self.config.default_season)

    def _team_season(self, repo: LeagueRepo, team_id: str, season: Optional[int]) -> int:
        """Explicit season, else the season the team plays in."""
        if season is not None:
            return int(season)
        return self._require_team(repo, team_id).season

    def _week(self, repo: LeagueRepo, week: Optional[int]) -> int:
        """Explicit week, else the current week (Week 1 before the season starts)."""
        if week is not None:
            return int(week)
        period = repo.get_current_period()
        return period.week if period.is_week else 1

    @staticmethod
    def _require_team(repo: LeagueRepo, team_id: str) -> Team:
        team = repo.get_team(team_id)
        if team is None:
            raise TeamNotFound(team_id)
        return team

    # --- transfers ---------------------------------------------------------

    def preview_transfer(
        self,
        team_id: str,
        players_out: Iterable[str] = (),
        players_in: Iterable[str] = (),
        week: Optional[int] = None,
        season: Optional[int] = None,
    ) -> ImpactReport:
        """Read-only impact of a proposed transfer."""
        with self.repo() as repo:
            return calculate_transfer_impact(
                repo,
                team_id,
                self._week(repo, week),
                self._team_season(repo, team_id, season),
                players_out,
                players_in,
            )

    def execute_transfer(
        self,
        team_id: str,
        players_out: Iterable[str] = (),
        players_in: Iterable[str] = (),
        week: Optional[int] = None,
        season: Optional[int] = None,
    ) -> TransferResult:
        """Validate and commit a transfer."""
        with self.repo() as repo:
            executor = TransferExecutor(repo, lock_timeout_s=self.config.lock_timeout_s)
            return executor.execute(
                team_id,
                self._week(repo, week),
                self._team_season(repo, team_id, season),
                players_out,
                players_in,
            )

    def validate_roster(
        self,
        player_ids: Iterable[str],
        season: Optional[int] = None,
        final: bool = True,
    ) -> ValidationReport:
        with self.repo() as repo:
            return validate_roster(repo, player_ids, self._season(repo, season), final=final)

    def auto_draft_for_team(
        self,
        team_id: str,
        players_out: Iterable[str] = (),
        players_in: Iterable[str] = (),
        week: Optional[int] = None,
        season: Optional[int] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> AutoDraftResult:
        """
        Propose players to complete a team's roster.

        The staged transfer (players_out / players_in) is applied to both
        the roster and the budget before the allocator runs. Nothing is
        committed; feed the selection back through preview and execute.
        """
        with self.repo() as repo:
            week = self._week(repo, week)
            season = self._team_season(repo, team_id, season)
            impact = calculate_transfer_impact(repo, team_id, week, season, players_out, players_in)

            outgoing = set(impact.sale_prices)
            roster_ids = [
                entry.player_id
                for entry in effective_week_roster(repo, team_id, week, season)
                if entry.player_id not in outgoing
            ]
            for player_id in impact.purchase_prices:
                if player_id not in roster_ids:
                    roster_ids.append(player_id)
            catalog = repo.get_players(roster_ids)
            effective_roster = [catalog[pid] for pid in roster_ids if pid in catalog]

            # A staged sale cannot be bought back in the same transfer
            available = [p for p in repo.list_players() if p.id not in outgoing]
            allocator = AutoDraftAllocator(
                repo.get_roster_constraints(season), rng=rng, seed=seed
            )
            result = allocator.allocate(effective_roster, available, impact.remaining_budget)

        logger.info(
            "Auto-draft for team %s week %s: %s, %s players, spent %.2f",
            team_id, week, result.status.value, len(result.selections), result.spent,
        )
        return result

    # --- teams -------------------------------------------------------------

    def create_team(self, name: str, owner: str, season: Optional[int] = None) -> Team:
        with self.repo() as repo:
            return repo.create_team(name, owner, self._season(repo, season))

    def get_team(self, team_id: str) -> Team:
        with self.repo() as repo:
            return self._require_team(repo, team_id)

    def get_roster(
        self,
        team_id: str,
        week: Optional[int] = None,
        season: Optional[int] = None,
    ) -> dict:
        """Stored roster for a week with catalog details."""
        with self.repo() as repo:
            team = self._require_team(repo, team_id)
            week = self._week(repo, week)
            season = season if season is not None else team.season
            entries = repo.get_roster_snapshot(team_id, week, season)
            catalog = repo.get_players(e.player_id for e in entries)

        players = []
        for entry in entries:
            data = entry.to_dict()
            player = catalog.get(entry.player_id)
            data["name"] = player.name if player else ""
            data["nfl_team"] = player.nfl_team if player else None
            players.append(data)
        return {
            "team_id": team.id,
            "week": week,
            "season": season,
            "count": len(players),
            "total_value": round(sum(p["current_price"] or 0.0 for p in players), 2),
            "players": players,
        }

    def transfer_history(
        self,
        season: Optional[int] = None,
        team_id: Optional[str] = None,
        week: Optional[int] = None,
        limit: int = 50,
    ) -> list[TransferRecord]:
        with self.repo() as repo:
            if team_id is not None:
                self._require_team(repo, team_id)
            return repo.transfer_history(
                self._season(repo, season), team_id=team_id, week=week, limit=limit
            )

    # --- period ------------------------------------------------------------

    def get_current_period(self) -> Period:
        with self.repo() as repo:
            return repo.get_current_period()

    def set_current_period(self, value: Period | str | int, season: Optional[int] = None) -> dict:
        """Parse and store the current period. Raises ValueError for unknown values."""
        period = Period.parse(value)
        with self.repo() as repo:
            return repo.set_current_period(period, self._season(repo, season))
