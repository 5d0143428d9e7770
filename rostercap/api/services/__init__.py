"""Business logic services for the API."""

from rostercap.api.services.transfer_service import TransferService

__all__ = ["TransferService"]
