"""
API Router for transfers.

Provides endpoints for:
- Previewing a transfer (read-only)
- Executing a transfer
- Validating a candidate roster
- Season-wide transfer history
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from rostercap.api.routers.deps import get_service, transfer_errors
from rostercap.api.schemas.transfers import (
    ExecuteResponse,
    ImpactResponse,
    TransferHistoryResponse,
    TransferRequest,
    ValidateRosterRequest,
    ValidationResponse,
)
from rostercap.api.services import TransferService

router = APIRouter(prefix="/transfers", tags=["transfers"])


@router.post("/preview", response_model=ImpactResponse)
def preview_transfer(request: TransferRequest, service: TransferService = Depends(get_service)):
    """
    Preview the impact of a transfer without committing it.

    Safe to call on every change in the transfer screen.
    """
    with transfer_errors():
        impact = service.preview_transfer(
            request.team_id,
            players_out=request.players_out,
            players_in=request.players_in,
            week=request.week,
            season=request.season,
        )
    return impact.to_dict()


@router.post("/execute", response_model=ExecuteResponse)
def execute_transfer(request: TransferRequest, service: TransferService = Depends(get_service)):
    """
    Execute a transfer.

    - Re-validates budget and positions server-side
    - Seeds the week's roster from the prior week if needed
    - Updates roster, budget ledger and free transfers as one unit
    """
    with transfer_errors():
        result = service.execute_transfer(
            request.team_id,
            players_out=request.players_out,
            players_in=request.players_in,
            week=request.week,
            season=request.season,
        )
    return result.to_dict()


@router.post("/validate-roster", response_model=ValidationResponse)
def validate_roster(request: ValidateRosterRequest, service: TransferService = Depends(get_service)):
    """Check a proposed roster's cost and position counts."""
    with transfer_errors():
        report = service.validate_roster(request.player_ids, season=request.season, final=request.final)
    return report.to_dict()


@router.get("/history", response_model=TransferHistoryResponse)
def transfer_history(
    season: Optional[int] = Query(None, description="Season (defaults to current season)"),
    week: Optional[int] = Query(None, ge=1),
    limit: int = Query(50, ge=1, le=500),
    service: TransferService = Depends(get_service),
):
    """All transfers for a season, newest first."""
    records = service.transfer_history(season=season, week=week, limit=limit)
    return {"count": len(records), "transfers": [r.to_dict() for r in records]}
