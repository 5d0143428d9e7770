"""SQLite storage for teams, rosters, the player catalog and the transfer log."""

from rostercap.storage.repo import LeagueRepo
from rostercap.storage.schema import CURRENT_SEASON_KEY, CURRENT_WEEK_KEY, apply_schema

__all__ = ["CURRENT_SEASON_KEY", "CURRENT_WEEK_KEY", "LeagueRepo", "apply_schema"]
