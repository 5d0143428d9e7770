"""
Season period model.

The current period is admin-controlled configuration owned outside the
transfer engine. It is re-read for every operation because moving from
Preseason into Week 1 changes transfer economics mid-session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class PeriodKind(Enum):
    """Major phases of a fantasy season."""

    SETUP = auto()  # League being configured, teams being built
    PRESEASON = auto()  # Before Week 1 kickoff
    WEEK = auto()  # Regular scoring week

    @property
    def transfers_are_free(self) -> bool:
        """Unlimited, free transfers while rosters are being assembled."""
        return self in {PeriodKind.SETUP, PeriodKind.PRESEASON}


@dataclass(frozen=True)
class Period:
    """A point in the season: Setup, Preseason, or Week(n)."""

    kind: PeriodKind
    week: Optional[int] = None

    def __post_init__(self):
        if self.kind == PeriodKind.WEEK:
            if self.week is None or self.week < 1:
                raise ValueError(f"Week period needs a week >= 1, got {self.week!r}")
        elif self.week is not None:
            raise ValueError(f"{self.kind.name} period does not take a week number")

    @classmethod
    def setup(cls) -> Period:
        return cls(PeriodKind.SETUP)

    @classmethod
    def preseason(cls) -> Period:
        return cls(PeriodKind.PRESEASON)

    @classmethod
    def for_week(cls, week: int) -> Period:
        return cls(PeriodKind.WEEK, int(week))

    @property
    def transfers_are_free(self) -> bool:
        return self.kind.transfers_are_free

    @property
    def is_week(self) -> bool:
        return self.kind == PeriodKind.WEEK

    @property
    def display_name(self) -> str:
        if self.kind == PeriodKind.WEEK:
            return f"Week {self.week}"
        return self.kind.name.title()

    def to_setting(self) -> str:
        """Render as stored in the settings table ("Setup", "Preseason", "5")."""
        if self.kind == PeriodKind.WEEK:
            return str(self.week)
        return self.kind.name.title()

    @classmethod
    def parse(cls, value: str | int | Period | None) -> Period:
        """
        Parse a stored period setting.

        Missing values mean Preseason, matching a freshly created season.
        """
        if isinstance(value, Period):
            return value
        if value is None:
            return cls.preseason()
        if isinstance(value, int):
            return cls.for_week(value)
        text = str(value).strip()
        lowered = text.lower()
        if not text or lowered == "preseason":
            return cls.preseason()
        if lowered == "setup":
            return cls.setup()
        if lowered.startswith("week"):
            text = text[4:].strip()
        try:
            return cls.for_week(int(text))
        except ValueError:
            raise ValueError(f"Unrecognized period: {value!r}") from None

    def __str__(self) -> str:
        return self.display_name
