"""Roster enumerations."""

from rostercap.core.enums.positions import Position, RosterSlot

__all__ = [
    "Position",
    "RosterSlot",
]
