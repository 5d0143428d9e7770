"""Transfer audit records."""

from rostercap.core.transactions.transaction_log import TransferRecord, TransferType

__all__ = [
    "TransferRecord",
    "TransferType",
]
