"""Tests for the roster validator."""

import pytest

from rostercap.core.enums import Position
from rostercap.core.models import Player, RosterConstraints
from rostercap.core.transfers import (
    InvalidTransfer,
    PlayerNotFound,
    validate_player_set,
    validate_roster,
)

SEASON = 2024


class TestValidatePlayerSet:
    """Tests for validate_player_set on resolved players."""

    def test_valid_full_roster(self, catalog, starting_roster_ids, constraints):
        players = [p for p in catalog if p.id in starting_roster_ids]
        report = validate_player_set(players, constraints)

        assert report.is_valid
        assert report.total_cost == 94.5
        assert report.remaining_budget == 5.5
        assert report.player_count == 15
        assert report.position_counts == {"QB": 2, "RB": 3, "WR": 4, "TE": 2, "K": 2, "DEF": 2}
        assert report.message == "Roster is valid"

    def test_over_cap(self, constraints):
        players = [
            Player(id=f"p{i}", position=Position.QB, current_price=20.0) for i in range(6)
        ]
        report = validate_player_set(players, constraints, final=False)

        assert not report.is_valid
        assert report.total_cost == 120.0
        assert report.remaining_budget == -20.0
        assert "over the" in report.message

    def test_partial_roster_not_final(self, catalog, constraints):
        players = [p for p in catalog if p.id in {"qb1", "rb1"}]
        report = validate_player_set(players, constraints, final=False)

        assert report.is_valid
        assert report.missing_positions == []

    def test_partial_roster_final(self, catalog, constraints):
        players = [p for p in catalog if p.id in {"qb1", "rb1"}]
        report = validate_player_set(players, constraints, final=True)

        assert not report.is_valid
        assert report.missing_positions == ["RB", "WR", "TE", "K", "DEF"]
        assert "exactly 15 players" in report.message

    def test_maximums(self, catalog):
        rules = RosterConstraints(season=SEASON, position_maximums={Position.QB: 1})
        players = [p for p in catalog if p.position == Position.QB]
        report = validate_player_set(players, rules, final=False)

        assert not report.is_valid
        assert report.missing_positions == ["QB"]


class TestValidateRoster:
    """Tests for validate_roster against the store."""

    def test_looks_up_prices(self, repo, starting_roster_ids):
        report = validate_roster(repo, starting_roster_ids, SEASON)
        assert report.is_valid
        assert report.season == SEASON

    def test_unknown_player(self, repo):
        with pytest.raises(PlayerNotFound):
            validate_roster(repo, ["qb1", "nobody"], SEASON)

    def test_duplicate_player(self, repo):
        with pytest.raises(InvalidTransfer):
            validate_roster(repo, ["qb1", "qb1"], SEASON)

    def test_season_rules_apply(self, repo, starting_roster_ids):
        repo.set_roster_constraints(RosterConstraints(season=2025, salary_cap=90.0))
        report = validate_roster(repo, starting_roster_ids, 2025)

        assert not report.is_valid
        assert report.remaining_budget == -4.5
