"""Team endpoints: creation, ledger, rosters, transfer log and auto-draft."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from rostercap.api.routers.deps import get_service, transfer_errors
from rostercap.api.schemas.teams import CreateTeamRequest, RosterResponse, TeamResponse
from rostercap.api.schemas.transfers import (
    AutoDraftRequest,
    AutoDraftResponse,
    TransferHistoryResponse,
)
from rostercap.api.services import TransferService

router = APIRouter(prefix="/teams", tags=["teams"])


@router.post("", response_model=TeamResponse, status_code=201)
def create_team(request: CreateTeamRequest, service: TransferService = Depends(get_service)):
    """Create a team with a full budget. Each owner may have one team per season."""
    with transfer_errors():
        team = service.create_team(request.name, request.owner, season=request.season)
    return team.to_dict()


@router.get("/{team_id}", response_model=TeamResponse)
def get_team(team_id: str, service: TransferService = Depends(get_service)):
    with transfer_errors():
        team = service.get_team(team_id)
    return team.to_dict()


@router.get("/{team_id}/roster", response_model=RosterResponse)
def get_roster(
    team_id: str,
    week: Optional[int] = Query(None, ge=1, description="Defaults to current week"),
    season: Optional[int] = Query(None),
    service: TransferService = Depends(get_service),
):
    with transfer_errors():
        return service.get_roster(team_id, week=week, season=season)


@router.get("/{team_id}/transfers", response_model=TransferHistoryResponse)
def get_team_transfers(
    team_id: str,
    season: Optional[int] = Query(None),
    week: Optional[int] = Query(None, ge=1),
    limit: int = Query(50, ge=1, le=500),
    service: TransferService = Depends(get_service),
):
    """A team's transfers, newest first."""
    with transfer_errors():
        records = service.transfer_history(season=season, team_id=team_id, week=week, limit=limit)
    return {"count": len(records), "transfers": [r.to_dict() for r in records]}


@router.post("/{team_id}/auto-draft", response_model=AutoDraftResponse)
def auto_draft(
    team_id: str,
    request: Optional[AutoDraftRequest] = None,
    service: TransferService = Depends(get_service),
):
    """
    Propose players to fill the team's open roster slots.

    Nothing is committed: the client adds the selection to its staged
    purchases and confirms through /transfers/execute. A partial fill is
    a normal response; a full roster or nothing affordable is an error.
    """
    request = request or AutoDraftRequest()
    with transfer_errors():
        result = service.auto_draft_for_team(
            team_id,
            players_out=request.players_out,
            players_in=request.players_in,
            week=request.week,
            season=request.season,
            seed=request.seed,
        )
        result.raise_for_status()
    return result.to_dict()
