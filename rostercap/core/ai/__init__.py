"""Automated roster decisions."""

from rostercap.core.ai.auto_draft import (
    DEFAULT_REQUIREMENTS,
    AutoDraftAllocator,
    AutoDraftResult,
    AutoDraftStatus,
    PositionRequirement,
    auto_draft,
)

__all__ = [
    "DEFAULT_REQUIREMENTS",
    "AutoDraftAllocator",
    "AutoDraftResult",
    "AutoDraftStatus",
    "PositionRequirement",
    "auto_draft",
]
