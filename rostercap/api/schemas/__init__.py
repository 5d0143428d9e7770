"""Pydantic schemas for API request/response models."""

from rostercap.api.schemas.teams import (
    CreateTeamRequest,
    PeriodChangeResponse,
    PeriodResponse,
    RosterResponse,
    SetPeriodRequest,
    TeamResponse,
)
from rostercap.api.schemas.transfers import (
    AutoDraftRequest,
    AutoDraftResponse,
    ExecuteResponse,
    ImpactResponse,
    TransferHistoryResponse,
    TransferRequest,
    ValidateRosterRequest,
    ValidationResponse,
)

__all__ = [
    "AutoDraftRequest",
    "AutoDraftResponse",
    "CreateTeamRequest",
    "ExecuteResponse",
    "ImpactResponse",
    "PeriodChangeResponse",
    "PeriodResponse",
    "RosterResponse",
    "SetPeriodRequest",
    "TeamResponse",
    "TransferHistoryResponse",
    "TransferRequest",
    "ValidateRosterRequest",
    "ValidationResponse",
]
