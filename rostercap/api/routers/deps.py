"""
Shared dependencies for the API routers.

Resolves the service from app state and converts transfer-engine errors
to HTTPException with a {code, error, details} detail body.
"""

from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, Request

from rostercap.api.services import TransferService
from rostercap.core.transfers import errors

# Everything else is a 400
_STATUS_BY_CODE = {
    errors.TEAM_NOT_FOUND: 404,
    errors.PLAYER_NOT_FOUND: 404,
    errors.TEAM_ALREADY_EXISTS: 409,
    errors.CONCURRENT_TRANSFER_CONFLICT: 409,
}


def get_service(request: Request) -> TransferService:
    """Service created by create_app()."""
    return request.app.state.transfer_service


def to_http_exception(exc: errors.TransferError) -> HTTPException:
    return HTTPException(status_code=_STATUS_BY_CODE.get(exc.code, 400), detail=exc.to_dict())


@contextmanager
def transfer_errors() -> Iterator[None]:
    """
    Raise engine errors as HTTP errors.

    A team lock that times out is reported as a conflict the client can retry.
    """
    try:
        yield
    except errors.TransferError as exc:
        raise to_http_exception(exc) from exc
    except TimeoutError as exc:
        raise HTTPException(
            status_code=409,
            detail={
                "code": errors.CONCURRENT_TRANSFER_CONFLICT,
                "error": str(exc),
                "details": {},
            },
        ) from exc
