"""
Structured errors for the transfer engine.

Each failure carries a stable machine-readable code so the API layer can
map it to an HTTP status while the UI keys its messages off the code.
Storage failures (sqlite3.Error) are deliberately not wrapped: they reach
the caller unchanged so the whole operation can be retried.
"""

from typing import Any, Optional


# Error codes (stable API surface)
UNAFFORDABLE = "UNAFFORDABLE"
POSITION_CONSTRAINT_VIOLATED = "POSITION_CONSTRAINT_VIOLATED"
PLAYER_NOT_ON_ROSTER = "PLAYER_NOT_ON_ROSTER"
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
ROSTER_FULL = "ROSTER_FULL"
NO_AFFORDABLE_CANDIDATES = "NO_AFFORDABLE_CANDIDATES"
TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
TEAM_ALREADY_EXISTS = "TEAM_ALREADY_EXISTS"
INVALID_TRANSFER = "INVALID_TRANSFER"
CONCURRENT_TRANSFER_CONFLICT = "CONCURRENT_TRANSFER_CONFLICT"


class TransferError(Exception):
    """Base class for every rejected transfer-engine request."""

    code: str = INVALID_TRANSFER

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"code": self.code, "error": self.message, "details": self.details}

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class Unaffordable(TransferError):
    """Resulting remaining budget would be negative."""

    code = UNAFFORDABLE


class PositionConstraintViolated(TransferError):
    """Resulting roster breaks the per-position minimums or maximums."""

    code = POSITION_CONSTRAINT_VIOLATED

    def __init__(self, missing_positions: list[str], details: Optional[dict[str, Any]] = None):
        self.missing_positions = list(missing_positions)
        details = dict(details or {})
        details.setdefault("missing_positions", self.missing_positions)
        super().__init__(
            "Transfer would violate position requirements. "
            f"Missing: {', '.join(self.missing_positions)}",
            details,
        )


class PlayerNotOnRoster(TransferError):
    """A player being sold is not on the target week's roster."""

    code = PLAYER_NOT_ON_ROSTER

    def __init__(self, player_id: str, week: int):
        self.player_id = player_id
        super().__init__(
            f"Player {player_id} not in roster for week {week}",
            {"player_id": player_id, "week": week},
        )


class PlayerNotFound(TransferError):
    """A player id has no catalog price."""

    code = PLAYER_NOT_FOUND

    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found", {"player_id": player_id})


class RosterFull(TransferError):
    """The roster has no open slot for another player."""

    code = ROSTER_FULL


class NoAffordableCandidates(TransferError):
    """No candidate fits the remaining budget."""

    code = NO_AFFORDABLE_CANDIDATES


class TeamNotFound(TransferError):
    code = TEAM_NOT_FOUND

    def __init__(self, team_id: str):
        self.team_id = team_id
        super().__init__(f"Team {team_id} not found", {"team_id": team_id})


class TeamAlreadyExists(TransferError):
    """An owner may only hold one team per season."""

    code = TEAM_ALREADY_EXISTS


class InvalidTransfer(TransferError):
    """Malformed request: duplicate ids, a player both sold and bought, bad week."""

    code = INVALID_TRANSFER


class ConcurrentTransferConflict(TransferError):
    """The ledger moved underneath the transaction; the caller should retry."""

    code = CONCURRENT_TRANSFER_CONFLICT
