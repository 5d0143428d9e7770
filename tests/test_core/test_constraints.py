"""Tests for RosterConstraints."""

from collections import Counter

from rostercap.core.enums import Position
from rostercap.core.models import RosterConstraints


def _counts(**kwargs) -> Counter:
    return Counter({Position(k.upper()): v for k, v in kwargs.items()})


class TestDefaults:
    """Default season rules."""

    def test_defaults(self):
        rules = RosterConstraints.defaults_for(2024)
        assert rules.season == 2024
        assert rules.salary_cap == 100.0
        assert rules.roster_size == 15
        assert rules.floor_price == 4.5
        assert rules.free_transfers_per_week == 1
        assert rules.point_cost_per_transfer == 6
        assert rules.minimum_for(Position.RB) == 3
        assert rules.maximum_for(Position.RB) is None

    def test_defaults_are_valid(self):
        assert RosterConstraints().validate() == []


class TestUnmetPositions:
    """Tests for unmet_positions."""

    def test_all_met(self):
        counts = _counts(qb=1, rb=3, wr=3, te=1, k=1, **{"def": 1})
        assert RosterConstraints().unmet_positions(counts) == []

    def test_missing_in_declaration_order(self):
        """Unmet positions come back in QB, RB, WR, TE, K, DEF order."""
        counts = _counts(qb=1, rb=2, wr=3, te=1)
        assert RosterConstraints().unmet_positions(counts) == ["RB", "K", "DEF"]

    def test_minimums_skipped_for_partial_roster(self):
        assert RosterConstraints().unmet_positions(Counter(), include_minimums=False) == []

    def test_maximum_exceeded(self):
        """Maximums are flagged even when minimums are skipped."""
        rules = RosterConstraints(position_maximums={Position.QB: 2})
        counts = _counts(qb=3)
        assert rules.unmet_positions(counts, include_minimums=False) == ["QB"]


class TestValidateAndSerialize:
    """Tests for validate, to_dict and from_dict."""

    def test_minimums_exceed_roster_size(self):
        rules = RosterConstraints(roster_size=5)
        assert "position minimums exceed roster size" in rules.validate()

    def test_cap_cannot_cover_floor(self):
        rules = RosterConstraints(salary_cap=50.0)
        assert any("floor price" in e for e in rules.validate())

    def test_dict_round_trip(self):
        rules = RosterConstraints(
            season=2025,
            position_maximums={Position.QB: 3},
            point_cost_per_transfer=4,
        )
        assert RosterConstraints.from_dict(rules.to_dict()) == rules

    def test_from_dict_fills_defaults(self):
        rules = RosterConstraints.from_dict({"season": 2024, "roster_size": 16})
        assert rules.roster_size == 16
        assert rules.salary_cap == 100.0
        assert rules.minimum_for(Position.WR) == 3
