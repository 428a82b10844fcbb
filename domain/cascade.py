"""
Domain: Cascade planning for sale moves.

Contract excerpts implemented here:
- When a sale M moves to a position that conflicts only with cooldown windows of
  lane neighbours, the neighbours are shifted by just enough to restore the
  invariant instead of rejecting the move.
- Each shifted sale keeps its duration, its kind and its order relative to the
  other sales. Only positions change.
- Forward pass: later neighbours are pushed past a running cooldown frontier.
  The frontier also advances past neighbours that did not move, so a push
  propagates down the chain.
- Backward pass: earlier neighbours whose cooldown reaches into the next later
  placed sale are pulled back by overlap + 1 days. A pull that would start
  before the visible timeline origin (horizon_start) is discarded and reported.
- A neighbour touched by both passes is resolved by the forward pass.
- Hard overlaps of M itself are never resolved here; callers reject those.

The planner is pure: it reads its inputs and returns a CascadePlan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple

from .dates import days_between, format_date
from .interval import blocked_until, cooldown_window
from .platform import PlatformRule
from .sale import CascadeShift, Sale, SaleKind


@dataclass(frozen=True, slots=True)
class InfeasibleShift:
    """A backward pull that would have started before the timeline origin."""

    sale_id: str
    required_start: date
    horizon_start: date

    @property
    def reason(self) -> str:
        return (
            f"Cannot shift sale {self.sale_id} to {format_date(self.required_start)}: "
            f"before timeline start {format_date(self.horizon_start)}"
        )


@dataclass(frozen=True, slots=True)
class CascadePlan:
    """
    Proposed shifts for a single move.

    shifts are ordered: forward pass (ascending start), then backward pass
    (descending end). No two entries conflict with each other or with the
    moved sale at its proposed position.
    """

    moved_sale: Sale
    shifts: Tuple[CascadeShift, ...] = field(default_factory=tuple)
    infeasible: Tuple[InfeasibleShift, ...] = field(default_factory=tuple)

    @property
    def feasible(self) -> bool:
        return not self.infeasible

    @property
    def shifted_ids(self) -> FrozenSet[str]:
        return frozenset(s.sale_id for s in self.shifts)

    def apply(self, siblings: Iterable[Sale]) -> List[Sale]:
        """
        Return the lane after the move: shifted siblings replaced, M at its
        proposed position. Inputs are not modified.
        """

        by_id = {s.sale_id: s for s in self.shifts}
        updated: List[Sale] = []
        for sale in siblings:
            if sale.sale_id == self.moved_sale.sale_id:
                continue
            shift = by_id.get(sale.sale_id)
            updated.append(shift.apply_to(sale) if shift is not None else sale)
        updated.append(self.moved_sale)
        return updated


def _resolve_kind(moved_sale_id: str, siblings: List[Sale], sale_kind: Optional[SaleKind]) -> SaleKind:
    if sale_kind is not None:
        return sale_kind
    for sale in siblings:
        if sale.sale_id == moved_sale_id:
            return sale.sale_kind
    return SaleKind.CUSTOM


def _forward_pass(moved: Sale, later: List[Sale], rule: PlatformRule) -> List[CascadeShift]:
    shifts: List[CascadeShift] = []
    occupied_until = moved.end_date
    frontier = blocked_until(moved, rule)

    for sale in sorted(later, key=lambda s: (s.start_date, s.end_date, s.sale_id)):
        # Waived kinds may start inside a cooldown but never on an occupied day.
        floor = occupied_until if rule.waives(sale.sale_kind) else max(frontier, occupied_until)
        placed = sale
        if sale.start_date <= floor:
            shift = CascadeShift.for_sale(sale, days_between(sale.start_date, floor) + 1)
            shifts.append(shift)
            placed = shift.apply_to(sale)
        occupied_until = max(occupied_until, placed.end_date)
        frontier = max(frontier, blocked_until(placed, rule))

    return shifts


def _backward_pass(
    moved: Sale,
    earlier: List[Sale],
    rule: PlatformRule,
    horizon_start: Optional[date],
) -> Tuple[List[CascadeShift], List[InfeasibleShift]]:
    shifts: List[CascadeShift] = []
    infeasible: List[InfeasibleShift] = []

    # Nearest later sale of any kind, and nearest later sale a cooldown can block.
    occupied_from = moved.start_date
    blocked_from: Optional[date] = None if rule.waives(moved.sale_kind) else moved.start_date

    for sale in sorted(earlier, key=lambda s: (s.end_date, s.start_date, s.sale_id), reverse=True):
        needed = 0
        if sale.end_date >= occupied_from:
            needed = days_between(occupied_from, sale.end_date) + 1
        window = cooldown_window(sale, rule)
        if window is not None and blocked_from is not None and window.end >= blocked_from:
            needed = max(needed, days_between(blocked_from, window.end) + 1)

        placed = sale
        if needed:
            shift = CascadeShift.for_sale(sale, -needed)
            if horizon_start is not None and shift.new_start_date < horizon_start:
                infeasible.append(
                    InfeasibleShift(
                        sale_id=sale.sale_id,
                        required_start=shift.new_start_date,
                        horizon_start=horizon_start,
                    )
                )
            else:
                shifts.append(shift)
                placed = shift.apply_to(sale)

        occupied_from = min(occupied_from, placed.start_date)
        if not rule.waives(placed.sale_kind):
            blocked_from = placed.start_date if blocked_from is None else min(blocked_from, placed.start_date)

    return shifts, infeasible


def plan_cascade(
    moved_sale_id: str,
    proposed_start: date,
    proposed_end: date,
    product_id: str,
    platform_id: str,
    rule: PlatformRule,
    siblings: Iterable[Sale],
    *,
    sale_kind: Optional[SaleKind] = None,
    horizon_start: Optional[date] = None,
) -> CascadePlan:
    """
    Compute the neighbour shifts needed for moving `moved_sale_id` to
    [proposed_start, proposed_end] on the (product_id, platform_id) lane.

    sale_kind overrides the moved sale's stored kind (or names the kind of a
    sale being placed for the first time). Without either it defaults to custom.

    Raises:
        ValueError: proposed_end < proposed_start, or rule is for another platform
    """

    if rule.platform_id != platform_id:
        raise ValueError(f"PlatformRule for {rule.platform_id} cannot plan on platform {platform_id}")

    all_sales = list(siblings)
    moved = Sale(
        sale_id=moved_sale_id,
        product_id=product_id,
        platform_id=platform_id,
        start_date=proposed_start,
        end_date=proposed_end,
        sale_kind=_resolve_kind(moved_sale_id, all_sales, sale_kind),
    )

    lane = [
        s
        for s in all_sales
        if s.same_lane(moved) and s.sale_id != moved_sale_id
    ]
    later = [s for s in lane if s.start_date > proposed_end]
    forward = _forward_pass(moved, later, rule)

    pushed: Set[str] = {s.sale_id for s in forward}
    earlier = [s for s in lane if s.end_date < proposed_start and s.sale_id not in pushed]
    backward, infeasible = _backward_pass(moved, earlier, rule, horizon_start)

    return CascadePlan(
        moved_sale=moved,
        shifts=tuple(forward + backward),
        infeasible=tuple(infeasible),
    )


__all__ = [
    "CascadePlan",
    "InfeasibleShift",
    "plan_cascade",
]
