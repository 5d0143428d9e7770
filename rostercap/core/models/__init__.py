"""Core roster and ledger models."""

from rostercap.core.models.constraints import (
    DEFAULT_FLOOR_PRICE,
    DEFAULT_POSITION_MINIMUMS,
    DEFAULT_SALARY_CAP,
    RosterConstraints,
)
from rostercap.core.models.period import Period, PeriodKind
from rostercap.core.models.player import Player
from rostercap.core.models.team import RosterEntry, Team, round_money

__all__ = [
    "DEFAULT_FLOOR_PRICE",
    "DEFAULT_POSITION_MINIMUMS",
    "DEFAULT_SALARY_CAP",
    "Period",
    "PeriodKind",
    "Player",
    "RosterConstraints",
    "RosterEntry",
    "Team",
    "round_money",
]
