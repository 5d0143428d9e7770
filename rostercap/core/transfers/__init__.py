"""
Transfer engine.

Preview (impact), commit (executor) and roster validation, all working
against the TransferStore protocol.
"""

from rostercap.core.transfers.errors import (
    ConcurrentTransferConflict,
    InvalidTransfer,
    NoAffordableCandidates,
    PlayerNotFound,
    PlayerNotOnRoster,
    PositionConstraintViolated,
    RosterFull,
    TeamAlreadyExists,
    TeamNotFound,
    TransferError,
    Unaffordable,
)
from rostercap.core.transfers.executor import TransferExecutor, TransferResult
from rostercap.core.transfers.impact import (
    ImpactReport,
    calculate_point_cost,
    calculate_transfer_impact,
    count_transfers,
    effective_week_roster,
    normalize_transfer_request,
)
from rostercap.core.transfers.locks import team_transfer_lock
from rostercap.core.transfers.store import TransferStore
from rostercap.core.transfers.validator import (
    ValidationReport,
    validate_player_set,
    validate_roster,
)

__all__ = [
    # Errors
    "ConcurrentTransferConflict",
    "InvalidTransfer",
    "NoAffordableCandidates",
    "PlayerNotFound",
    "PlayerNotOnRoster",
    "PositionConstraintViolated",
    "RosterFull",
    "TeamAlreadyExists",
    "TeamNotFound",
    "TransferError",
    "Unaffordable",
    # Engine
    "ImpactReport",
    "TransferExecutor",
    "TransferResult",
    "TransferStore",
    "ValidationReport",
    "calculate_point_cost",
    "calculate_transfer_impact",
    "count_transfers",
    "effective_week_roster",
    "normalize_transfer_request",
    "team_transfer_lock",
    "validate_player_set",
    "validate_roster",
]
