"""
Auto-Draft Allocator - completes an under-filled roster within budget.

A feasibility-preserving greedy fill, not a points optimizer:
- Walks priority-ordered position requirements (hard minimums first,
  then secondary targets that round the roster out)
- Aims each pick at a weighted share of the budget, leaning toward the
  most it can afford rather than hoarding
- Before every pick, reserves floor price for every slot still open, so
  the result can always be completed and never overspends

Phases:
1. Requirements: fill each unmet requirement, ranked by distance from a
   target price
2. Flex: remaining slots go to RB/WR, re-ranked after every pick
3. Desperation: cheapest affordable player of any position on the true
   remaining budget

Each pick is a random choice among the closest few candidates so repeated
runs offer variety. Pass rng or seed to pin the outcome.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

from rostercap.core.enums import Position
from rostercap.core.models import Player, RosterConstraints, round_money
from rostercap.core.transfers.errors import NoAffordableCandidates, RosterFull

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionRequirement:
    """Fill position up to minimum players, aiming at weight x per-slot budget."""

    position: Position
    minimum: int
    weight: float

    def shortfall(self, counts: Counter) -> int:
        return max(0, self.minimum - counts.get(self.position, 0))


# Minimums first (10 players), then secondary targets (5 more to reach 15).
# Weights reflect typical market price per position.
DEFAULT_REQUIREMENTS: tuple[PositionRequirement, ...] = (
    PositionRequirement(Position.QB, 1, 1.3),
    PositionRequirement(Position.RB, 3, 1.2),
    PositionRequirement(Position.WR, 3, 1.2),
    PositionRequirement(Position.TE, 1, 1.0),
    PositionRequirement(Position.K, 1, 0.7),
    PositionRequirement(Position.DEF, 1, 0.7),
    PositionRequirement(Position.QB, 2, 1.1),
    PositionRequirement(Position.TE, 2, 0.9),
    PositionRequirement(Position.WR, 4, 1.1),
    PositionRequirement(Position.K, 2, 0.65),
    PositionRequirement(Position.DEF, 2, 0.65),
)


class AutoDraftStatus(Enum):
    """Outcome of an auto-draft run. None of these are errors."""

    FILLED = "filled"  # Every open slot filled
    PARTIAL = "partial"  # Some slots filled, budget ran out for others
    NONE = "none"  # Nothing affordable
    ROSTER_FULL = "roster_full"  # No open slots to begin with


@dataclass
class AutoDraftResult:
    """Proposed buy-list plus a summary of the run."""

    status: AutoDraftStatus
    selections: list[Player] = field(default_factory=list)
    spent: float = 0.0
    remaining_budget: float = 0.0
    spots_remaining: int = 0  # Open slots before the run
    under_filled_positions: list[str] = field(default_factory=list)

    @property
    def player_ids(self) -> list[str]:
        return [p.id for p in self.selections]

    @property
    def fully_filled(self) -> bool:
        return self.status in {AutoDraftStatus.FILLED, AutoDraftStatus.ROSTER_FULL}

    @property
    def message(self) -> str:
        if self.status == AutoDraftStatus.ROSTER_FULL:
            return "Your roster is already full!"
        if self.status == AutoDraftStatus.NONE:
            return "No affordable players found to add to your roster."
        count = len(self.selections)
        if self.status == AutoDraftStatus.PARTIAL:
            return (
                f"Selected {count} players (spent ${self.spent:.1f}M), but couldn't fill "
                f"all positions due to budget constraints. "
                f"${self.remaining_budget:.1f}M remaining."
            )
        return (
            f"Added {count} players to your roster (spent ${self.spent:.1f}M). "
            f"${self.remaining_budget:.1f}M remaining for flexibility."
        )

    def raise_for_status(self) -> AutoDraftResult:
        """Raise for the outcomes a caller may treat as failures; PARTIAL is returned."""
        if self.status == AutoDraftStatus.ROSTER_FULL:
            raise RosterFull(self.message, {"spots_remaining": 0})
        if self.status == AutoDraftStatus.NONE:
            raise NoAffordableCandidates(
                self.message,
                {"remaining_budget": self.remaining_budget, "spots_remaining": self.spots_remaining},
            )
        return self

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "player_ids": self.player_ids,
            "selections": [p.to_dict() for p in self.selections],
            "spent": self.spent,
            "remaining_budget": self.remaining_budget,
            "fully_filled": self.fully_filled,
            "spots_remaining": self.spots_remaining,
            "under_filled_positions": list(self.under_filled_positions),
            "message": self.message,
        }


class AutoDraftAllocator:
    """
    Greedy roster completion under budget and position constraints.

    Args:
        constraints: Season rules (roster size, floor price, maximums)
        requirements: Priority-ordered requirements (DEFAULT_REQUIREMENTS)
        rng: Randomness source for pick variety
        seed: Seed for a private rng when rng is not given
        buffer: Held back from the target budget (not from ceilings)
        pool_size: Picks are drawn from this many closest candidates
        aggression: Share of the affordable budget a pick aims for
    """

    def __init__(
        self,
        constraints: RosterConstraints,
        requirements: Optional[Sequence[PositionRequirement]] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        buffer: float = 1.0,
        pool_size: int = 5,
        aggression: float = 0.9,
    ):
        self.constraints = constraints
        self.requirements = tuple(requirements or DEFAULT_REQUIREMENTS)
        self.rng = rng if rng is not None else random.Random(seed)
        self.buffer = buffer
        self.pool_size = max(1, pool_size)
        self.aggression = aggression

    @property
    def floor(self) -> float:
        return self.constraints.floor_price

    # =========================================================================
    # Run
    # =========================================================================

    def allocate(
        self,
        effective_roster: Sequence[Player],
        available_players: Iterable[Player],
        budget: float,
    ) -> AutoDraftResult:
        """
        Propose players to complete effective_roster within budget.

        effective_roster is the committed roster adjusted by any staged
        transfer; budget is the remaining budget after that staged transfer.
        """
        budget = round_money(budget)
        spots = self.constraints.roster_size - len(effective_roster)
        if spots <= 0:
            logger.debug("Auto-draft: roster full (%s players)", len(effective_roster))
            return AutoDraftResult(
                status=AutoDraftStatus.ROSTER_FULL,
                remaining_budget=budget,
                spots_remaining=0,
            )

        run = _DraftRun(
            allocator=self,
            roster=effective_roster,
            available=available_players,
            budget=budget,
            spots=spots,
        )
        run.fill_requirements()
        run.fill_flex()
        run.fill_desperation()
        return run.result()

    # =========================================================================
    # Shared pick mechanics
    # =========================================================================

    def pick_from(self, ranked: Sequence[Player]) -> Player:
        """Random choice among the first pool_size ranked candidates."""
        pool = min(self.pool_size, len(ranked))
        return ranked[self.rng.randrange(pool)]


class _DraftRun:
    """Mutable state for one allocate() call."""

    def __init__(
        self,
        allocator: AutoDraftAllocator,
        roster: Sequence[Player],
        available: Iterable[Player],
        budget: float,
        spots: int,
    ):
        self.allocator = allocator
        self.constraints = allocator.constraints
        self.floor = allocator.floor
        self.starting_budget = budget
        self.budget = budget
        self.spots = spots
        self.target_per_slot = max(0.0, budget - allocator.buffer) / spots

        self.counts: Counter = Counter(p.position for p in roster)
        self.selected: list[Player] = []
        self.selected_ids: set[str] = set()
        self.under_filled: list[str] = []

        rostered = {p.id for p in roster}
        seen = set()
        self.candidates: list[Player] = []
        for player in available:
            if player.id in rostered or player.id in seen:
                continue
            seen.add(player.id)
            self.candidates.append(player)

    # --- bookkeeping -------------------------------------------------------

    @property
    def open_slots(self) -> int:
        return self.spots - len(self.selected)

    def ceiling(self) -> float:
        """Most the next pick may cost while keeping floor for every later slot."""
        return round_money(self.budget - (self.open_slots - 1) * self.floor)

    def eligible(self, player: Player) -> bool:
        if player.id in self.selected_ids:
            return False
        maximum = self.constraints.maximum_for(player.position)
        return maximum is None or self.counts.get(player.position, 0) < maximum

    def take(self, player: Player, phase: str, ceiling: float) -> None:
        self.selected.append(player)
        self.selected_ids.add(player.id)
        self.counts[player.position] += 1
        self.budget = round_money(self.budget - player.current_price)
        logger.debug(
            "Auto-draft %s: %s for $%.1fM (max allowed $%.1fM, $%.1fM left, %s slots open)",
            phase, player.display_name, player.current_price, ceiling,
            self.budget, self.open_slots,
        )

    def still_needed(self) -> int:
        """Sum of every requirement's shortfall (tiered requirements overlap)."""
        return sum(req.shortfall(self.counts) for req in self.allocator.requirements)

    def _by_distance(self, players: Iterable[Player], target: float) -> list[Player]:
        return sorted(players, key=lambda p: (abs(p.current_price - target), p.current_price, p.id))

    # --- phases ------------------------------------------------------------

    def fill_requirements(self) -> None:
        for req in self.allocator.requirements:
            needed = req.shortfall(self.counts)
            if needed <= 0 or self.open_slots <= 0:
                continue

            reserved = (self.still_needed() - needed) * self.floor
            available_for_position = self.budget - reserved
            base_target = self.target_per_slot * req.weight
            aggressive_target = self.allocator.aggression * available_for_position / needed
            target = max(self.floor, base_target, aggressive_target)

            ranked = self._by_distance(
                (p for p in self.candidates if p.position == req.position), target
            )
            logger.debug(
                "Auto-draft requirement %s x%s: budget $%.1fM, reserved $%.1fM, target $%.1fM, "
                "%s candidates",
                req.position.value, needed, self.budget, reserved, target, len(ranked),
            )

            for _ in range(needed):
                if self.open_slots <= 0:
                    break
                ceiling = self.ceiling()
                affordable = [
                    p for p in ranked if self.eligible(p) and p.current_price <= ceiling
                ]
                if not affordable:
                    logger.debug(
                        "Auto-draft: no affordable %s under $%.1fM", req.position.value, ceiling
                    )
                    if req.position.value not in self.under_filled:
                        self.under_filled.append(req.position.value)
                    break
                self.take(self.allocator.pick_from(affordable), "requirement", ceiling)

    def fill_flex(self) -> None:
        pool = [p for p in self.candidates if p.position.is_flex_eligible]
        while self.open_slots > 0:
            ceiling = self.ceiling()
            target = max(self.floor, ceiling * self.allocator.aggression)
            affordable = [
                p for p in self._by_distance(pool, target)
                if self.eligible(p) and p.current_price <= ceiling
            ]
            if not affordable:
                break
            self.take(self.allocator.pick_from(affordable), "flex", ceiling)

    def fill_desperation(self) -> None:
        if self.open_slots > 0:
            logger.debug(
                "Auto-draft desperation: %s slots open, $%.1fM left", self.open_slots, self.budget
            )
        cheapest_first = sorted(self.candidates, key=lambda p: (p.current_price, p.id))
        while self.open_slots > 0:
            ceiling = self.ceiling()
            affordable = [
                p for p in cheapest_first if self.eligible(p) and p.current_price <= ceiling
            ]
            if not affordable:
                break
            self.take(self.allocator.pick_from(affordable), "desperation", ceiling)

    def result(self) -> AutoDraftResult:
        if not self.selected:
            status = AutoDraftStatus.NONE
        elif self.open_slots == 0:
            status = AutoDraftStatus.FILLED
        else:
            status = AutoDraftStatus.PARTIAL

        # Requirements the flex and desperation phases made good are not under-filled
        still_short = {
            req.position.value for req in self.allocator.requirements if req.shortfall(self.counts)
        }
        under_filled = [pos for pos in self.under_filled if pos in still_short]

        return AutoDraftResult(
            status=status,
            selections=list(self.selected),
            spent=round_money(self.starting_budget - self.budget),
            remaining_budget=self.budget,
            spots_remaining=self.spots,
            under_filled_positions=under_filled,
        )


def auto_draft(
    effective_roster: Sequence[Player],
    available_players: Iterable[Player],
    budget: float,
    constraints: RosterConstraints,
    *,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> AutoDraftResult:
    """Run the default allocator once. See AutoDraftAllocator."""
    allocator = AutoDraftAllocator(constraints, rng=rng, seed=seed)
    return allocator.allocate(effective_roster, available_players, budget)
