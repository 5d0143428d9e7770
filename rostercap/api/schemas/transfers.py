"""Pydantic schemas for the transfers API."""

from typing import Optional

from pydantic import BaseModel, Field


# === Request Schemas ===

class TransferRequest(BaseModel):
    """A proposed set of sales and purchases for one team."""
    team_id: str = Field(..., description="Team making the transfer")
    week: Optional[int] = Field(None, ge=1, description="Target week (defaults to current week)")
    season: Optional[int] = Field(None, description="Season (defaults to the team's season)")
    players_out: list[str] = Field(default_factory=list, description="Player IDs to sell")
    players_in: list[str] = Field(default_factory=list, description="Player IDs to buy")


class ValidateRosterRequest(BaseModel):
    """A candidate roster to check against season rules."""
    player_ids: list[str] = Field(..., description="Every player on the proposed roster")
    season: Optional[int] = Field(None, description="Season (defaults to current season)")
    final: bool = Field(True, description="Require a complete roster")


class AutoDraftRequest(BaseModel):
    """Staged transfer to apply before auto-drafting."""
    week: Optional[int] = Field(None, ge=1, description="Target week (defaults to current week)")
    season: Optional[int] = Field(None, description="Season (defaults to the team's season)")
    players_out: list[str] = Field(default_factory=list, description="Staged sales")
    players_in: list[str] = Field(default_factory=list, description="Staged purchases")
    seed: Optional[int] = Field(None, description="Pin the random pick order")


# === Response Schemas ===

class ImpactResponse(BaseModel):
    """Preview of a transfer's budget, position and point-cost impact."""
    team_id: str
    week: int
    season: int
    period: str
    current_spent: float
    money_freed: float
    money_needed: float
    new_total_spent: float
    remaining_budget: float
    is_affordable: bool
    position_valid: bool
    missing_positions: list[str]
    position_counts: dict[str, int]
    roster_count: int
    exceeds_roster_size: bool
    players_not_on_roster: list[str]
    free_transfers_available: int
    transfers_count: int
    free_transfers_after: int
    point_cost: int


class LedgerResponse(BaseModel):
    """A team's budget ledger."""
    team_id: str
    season: int
    current_spent: float
    remaining_budget: float
    free_transfers_remaining: int


class TransferRecordResponse(BaseModel):
    """One player bought or sold."""
    transfer_id: Optional[int] = None
    team_id: str
    player_id: str
    player_name: Optional[str] = None
    player_position: Optional[str] = None
    transfer_type: str
    price: float
    week: int
    season: int
    transferred_at: str


class ExecuteResponse(BaseModel):
    """Committed transfer."""
    ledger: LedgerResponse
    transfers: list[TransferRecordResponse]
    transfers_count: int
    point_cost: int
    seeded_roster: int = Field(0, description="Entries copied from the prior week")


class ValidationResponse(BaseModel):
    """Roster validation result."""
    season: int
    is_valid: bool
    total_cost: float
    remaining_budget: float
    player_count: int
    positions: dict[str, int]
    missing_positions: list[str]
    message: str


class TransferHistoryResponse(BaseModel):
    """Transfers, newest first."""
    count: int
    transfers: list[TransferRecordResponse]


class DraftPickResponse(BaseModel):
    player_id: str
    name: str
    position: str
    current_price: float
    nfl_team: Optional[str] = None


class AutoDraftResponse(BaseModel):
    """Proposed buy-list from the auto-draft allocator."""
    status: str = Field(..., description="filled, partial, none or roster_full")
    player_ids: list[str]
    selections: list[DraftPickResponse]
    spent: float
    remaining_budget: float
    fully_filled: bool
    spots_remaining: int
    under_filled_positions: list[str]
    message: str
