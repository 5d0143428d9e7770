"""Position definitions for fantasy roster players."""

from __future__ import annotations

from enum import Enum


class Position(Enum):
    """Natural position of a player in the catalog."""

    QB = "QB"  # Quarterback
    RB = "RB"  # Running Back
    WR = "WR"  # Wide Receiver
    TE = "TE"  # Tight End
    K = "K"  # Kicker
    DEF = "DEF"  # Team defense / special teams unit

    @property
    def is_flex_eligible(self) -> bool:
        """RB and WR can fill the FLEX starting slot."""
        return self in {Position.RB, Position.WR}

    @classmethod
    def parse(cls, value: str | Position) -> Position:
        """Parse a position from a catalog string (case-insensitive)."""
        if isinstance(value, Position):
            return value
        text = str(value).strip().upper()
        if text in {"DST", "D/ST"}:
            text = "DEF"
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Unknown position: {value!r}") from None


class RosterSlot(Enum):
    """
    Labelled roster slot a player occupies for a week.

    Distinct from a player's natural position: a WR can sit in FLEX,
    and every newly bought player starts on the BENCH.
    """

    QB = "QB"
    RB1 = "RB1"
    RB2 = "RB2"
    WR1 = "WR1"
    WR2 = "WR2"
    TE = "TE"
    FLEX = "FLEX"
    K = "K"
    DEF = "DEF"
    BENCH = "BENCH"
