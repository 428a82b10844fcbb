"""
Scheduling service for placing and moving sales.

Orchestrates the pure engine for one UI action (drag end, resize end, form submit):
- Resolves the platform rule, rejecting unknown platforms outright
- Rejects direct overlaps (cascades never resolve double-bookings)
- Plans the cascade, then re-validates the moved sale and every shifted sale
  against the updated lane
- Returns the ordered writes the caller must persist as one transaction

Nothing here performs I/O; persistence lives in commit_service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from domain.cascade import CascadePlan, InfeasibleShift, plan_cascade
from domain.interval import occupied, overlaps
from domain.platform import PlatformRule, PlatformRuleTable
from domain.sale import CascadeShift, Sale
from domain.validation import ConflictKind, ValidationResult, lane_siblings, validate

logger = logging.getLogger(__name__)


class MoveStatus(str, Enum):
    ACCEPTED = "accepted"
    DIRECT_OVERLAP = "direct_overlap"
    COOLDOWN_CONFLICT = "cooldown_conflict"
    CASCADE_INFEASIBLE = "cascade_infeasible"
    UNKNOWN_PLATFORM = "unknown_platform"


@dataclass(frozen=True, slots=True)
class PlacementCheck:
    """
    Result of a plain placement check (no cascading).

    status: ACCEPTED, DIRECT_OVERLAP, COOLDOWN_CONFLICT or UNKNOWN_PLATFORM
    validation: validator output (None when the platform is unknown)
    """
    status: MoveStatus
    reason: Optional[str] = None
    validation: Optional[ValidationResult] = None

    @property
    def valid(self) -> bool:
        return self.status is MoveStatus.ACCEPTED


@dataclass(frozen=True, slots=True)
class MovePlan:
    """
    Result of planning a move.

    status: ACCEPTED when the move plus every shift is legal
    candidate: the moved sale at its proposed position
    shifts: neighbour shifts to persist with it (empty unless ACCEPTED)
    reason: human-readable rejection reason (None when ACCEPTED)
    conflicting_sale_id: sale that blocked the move, when one did
    infeasible: backward shifts that would have crossed the timeline start
    notice: informational message when the move needed shifts
    warnings: advisory messages from the validator (e.g. max_sale_days)
    """
    status: MoveStatus
    candidate: Sale
    shifts: Tuple[CascadeShift, ...] = field(default_factory=tuple)
    reason: Optional[str] = None
    conflicting_sale_id: Optional[str] = None
    infeasible: Tuple[InfeasibleShift, ...] = field(default_factory=tuple)
    notice: Optional[str] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def accepted(self) -> bool:
        return self.status is MoveStatus.ACCEPTED

    @property
    def shift_count(self) -> int:
        return len(self.shifts)

    def writes(self) -> List[Tuple[str, date, date]]:
        """Ordered (sale_id, start, end) writes: the moved sale first, then the shifts."""

        if not self.accepted:
            return []
        writes = [(self.candidate.sale_id, self.candidate.start_date, self.candidate.end_date)]
        writes.extend((s.sale_id, s.new_start_date, s.new_end_date) for s in self.shifts)
        return writes


def _unknown_platform_reason(platform_id: str) -> str:
    return f"Platform not found: {platform_id}"


def check_placement(
    candidate: Sale,
    siblings: Iterable[Sale],
    rules: PlatformRuleTable,
    exclude_id: Optional[str] = None,
) -> PlacementCheck:
    """
    Validate a placement without cascading.

    Safe to call on every pointer move during a drag.
    """
    rule = rules.get(candidate.platform_id)
    if rule is None:
        return PlacementCheck(
            status=MoveStatus.UNKNOWN_PLATFORM,
            reason=_unknown_platform_reason(candidate.platform_id),
        )

    result = validate(candidate, siblings, rule, exclude_id)
    if result.valid:
        return PlacementCheck(status=MoveStatus.ACCEPTED, validation=result)

    status = (
        MoveStatus.DIRECT_OVERLAP
        if result.conflict is ConflictKind.DIRECT_OVERLAP
        else MoveStatus.COOLDOWN_CONFLICT
    )
    return PlacementCheck(status=status, reason=result.reason, validation=result)


def plan_move(
    candidate: Sale,
    siblings: Iterable[Sale],
    rules: PlatformRuleTable,
    *,
    horizon_start: Optional[date] = None,
) -> MovePlan:
    """
    Plan moving (or newly placing) `candidate`, shifting neighbours if needed.

    Args:
        candidate: the sale at its proposed position. Its sale_id is excluded from
            the lane so it never conflicts with its own prior position.
        siblings: current sales (any products/platforms; filtered to the lane)
        rules: platform rule table
        horizon_start: first visible timeline day; backward shifts never go earlier

    Returns:
        MovePlan. Business-rule outcomes are returned, never raised.

    Example:
        plan = plan_move(dragged.moved_to(new_start, new_end), lane_sales, rules)
        if plan.accepted:
            commit_move(plan)
    """
    rule = rules.get(candidate.platform_id)
    if rule is None:
        logger.debug("Move of %s rejected: unknown platform %s", candidate.sale_id, candidate.platform_id)
        return MovePlan(
            status=MoveStatus.UNKNOWN_PLATFORM,
            candidate=candidate,
            reason=_unknown_platform_reason(candidate.platform_id),
        )

    siblings = list(siblings)
    lane = lane_siblings(candidate, siblings, exclude_id=candidate.sale_id)

    # Hard overlaps first: shifting neighbours must never paper over a double-booking.
    span = occupied(candidate)
    double_booked = [s for s in lane if overlaps(span, occupied(s))]
    hard = validate(candidate, double_booked, rule, candidate.sale_id)
    if not hard.valid:
        return MovePlan(
            status=MoveStatus.DIRECT_OVERLAP,
            candidate=candidate,
            reason=hard.reason,
            conflicting_sale_id=hard.conflicting_sale_id,
            warnings=hard.warnings,
        )

    cascade = plan_cascade(
        candidate.sale_id,
        candidate.start_date,
        candidate.end_date,
        candidate.product_id,
        candidate.platform_id,
        rule,
        lane,
        sale_kind=candidate.sale_kind,
        horizon_start=horizon_start,
    )

    if not cascade.feasible:
        first = cascade.infeasible[0]
        logger.warning(
            "Cascade for %s infeasible: %d shift(s) would cross timeline start %s",
            candidate.sale_id,
            len(cascade.infeasible),
            first.horizon_start,
        )
        return MovePlan(
            status=MoveStatus.CASCADE_INFEASIBLE,
            candidate=candidate,
            reason=first.reason,
            conflicting_sale_id=first.sale_id,
            infeasible=cascade.infeasible,
        )

    return _verify(candidate, lane, rule, cascade)


def _verify(candidate: Sale, lane: List[Sale], rule: PlatformRule, cascade: CascadePlan) -> MovePlan:
    shifted = cascade.shifted_ids

    # The moved sale against everything that stays put.
    primary = validate(candidate, [s for s in lane if s.sale_id not in shifted], rule, candidate.sale_id)
    if not primary.valid:
        return _rejected(candidate, primary)

    # Every shifted sale against the fully updated lane, the moved sale included.
    updated = cascade.apply(lane)
    by_id = {s.sale_id: s for s in updated}
    for shift in cascade.shifts:
        result = validate(by_id[shift.sale_id], updated, rule, shift.sale_id)
        if not result.valid:
            return _rejected(candidate, result)

    notice = None
    if cascade.shifts:
        notice = f"{len(cascade.shifts)} neighbouring sale(s) shifted to keep cooldowns"
    logger.debug("Move of %s accepted with %d shift(s)", candidate.sale_id, len(cascade.shifts))

    return MovePlan(
        status=MoveStatus.ACCEPTED,
        candidate=candidate,
        shifts=cascade.shifts,
        notice=notice,
        warnings=primary.warnings,
    )


def _rejected(candidate: Sale, result: ValidationResult) -> MovePlan:
    status = (
        MoveStatus.DIRECT_OVERLAP
        if result.conflict is ConflictKind.DIRECT_OVERLAP
        else MoveStatus.COOLDOWN_CONFLICT
    )
    logger.debug("Move of %s rejected: %s", candidate.sale_id, result.reason)
    return MovePlan(
        status=status,
        candidate=candidate,
        reason=result.reason,
        conflicting_sale_id=result.conflicting_sale_id,
        warnings=result.warnings,
    )


__all__ = [
    "MovePlan",
    "MoveStatus",
    "PlacementCheck",
    "check_placement",
    "plan_move",
]
