"""Pydantic schemas for teams and season settings."""

from typing import Optional, Union

from pydantic import BaseModel, Field


class CreateTeamRequest(BaseModel):
    """Request to create a team."""
    name: str = Field(..., min_length=1, description="Team name")
    owner: str = Field(..., min_length=1, description="Owner identity (one team per season)")
    season: Optional[int] = Field(None, description="Season (defaults to current season)")


class TeamResponse(BaseModel):
    """Team with its budget ledger."""
    team_id: str
    name: str
    owner: str
    season: int
    current_spent: float
    remaining_budget: float
    free_transfers_remaining: int
    created_at: Optional[str] = None


class RosterPlayerResponse(BaseModel):
    """A rostered player for one week."""
    player_id: str
    name: str
    position: Optional[str] = None
    position_slot: str
    current_price: Optional[float] = None
    nfl_team: Optional[str] = None


class RosterResponse(BaseModel):
    team_id: str
    week: int
    season: int
    count: int
    total_value: float
    players: list[RosterPlayerResponse]


class PeriodResponse(BaseModel):
    """Current season period."""
    period: str = Field(..., description="Setup, Preseason or the week number")
    display_name: str
    week: Optional[int] = None
    transfers_are_free: bool


class SetPeriodRequest(BaseModel):
    """Admin request to change the current period."""
    value: Union[int, str] = Field(..., description="Setup, Preseason or a week number")
    season: Optional[int] = Field(None, description="Season whose rosters advance")


class PeriodChangeResponse(BaseModel):
    previous: str
    current: str
    season: int
    rosters_copied: int
    teams_replenished: int
