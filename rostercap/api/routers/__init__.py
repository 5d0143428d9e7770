"""API routers for different resource types."""

from rostercap.api.routers.settings import router as settings_router
from rostercap.api.routers.teams import router as teams_router
from rostercap.api.routers.transfers import router as transfers_router

__all__ = [
    "settings_router",
    "teams_router",
    "transfers_router",
]
