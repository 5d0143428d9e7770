"""Admin-controlled season settings."""

from fastapi import APIRouter, Depends, HTTPException

from rostercap.api.routers.deps import get_service
from rostercap.api.schemas.teams import PeriodChangeResponse, PeriodResponse, SetPeriodRequest
from rostercap.api.services import TransferService

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/period", response_model=PeriodResponse)
def get_period(service: TransferService = Depends(get_service)):
    period = service.get_current_period()
    return {
        "period": period.to_setting(),
        "display_name": period.display_name,
        "week": period.week,
        "transfers_are_free": period.transfers_are_free,
    }


@router.put("/period", response_model=PeriodChangeResponse)
def set_period(request: SetPeriodRequest, service: TransferService = Depends(get_service)):
    """
    Change the current period.

    Advancing one week seeds the new week's rosters and resets free transfers.
    """
    try:
        return service.set_current_period(request.value, season=request.season)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
