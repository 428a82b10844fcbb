"""
Domain: Placement validation.

Contract excerpts implemented here:
- Invariants are scoped to one lane (product_id + platform_id). Sales on other
  lanes never conflict; the sale being moved (exclude_id) never conflicts with
  its own prior position.
- Direct overlap of occupied ranges is always illegal, whatever the kinds.
- With E the earlier-starting and L the later-starting of two sales, E's
  cooldown must not overlap L's occupied range, unless L's kind is waived on the
  platform: the waiver is keyed on the kind that would otherwise be blocked.
- The first violation found is reported with a reason that distinguishes direct
  overlap from cooldown conflict.
- max_sale_days is advisory: exceeding it adds a warning, never a rejection.

validate() is pure and cheap enough to run on every pointer move of a drag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .dates import format_date
from .interval import cooldown_window, duration_days, occupied, overlaps
from .platform import PlatformRule
from .sale import Sale


class ConflictKind(str, Enum):
    DIRECT_OVERLAP = "direct_overlap"
    COOLDOWN_CONFLICT = "cooldown_conflict"


@dataclass(frozen=True, slots=True)
class Conflict:
    kind: ConflictKind
    sale_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """
    Outcome of a placement check.

    valid: True when no lane sibling conflicts with the candidate
    conflict / conflicting_sale_id / reason: first violation (None when valid)
    cooldown_end: last cooldown day of the candidate itself (None when it has no cooldown)
    warnings: advisory notices (e.g. longer than the platform's max_sale_days)
    """

    valid: bool
    conflict: Optional[ConflictKind] = None
    reason: Optional[str] = None
    conflicting_sale_id: Optional[str] = None
    cooldown_end: Optional[date] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)


def lane_siblings(candidate: Sale, siblings: Iterable[Sale], exclude_id: Optional[str] = None) -> List[Sale]:
    """Sales on the candidate's lane, minus exclude_id and the candidate itself, by start date."""

    lane = [
        s
        for s in siblings
        if s.same_lane(candidate)
        and s.sale_id != exclude_id
        and s is not candidate
    ]
    lane.sort(key=lambda s: (s.start_date, s.end_date, s.sale_id))
    return lane


def _describe(sale: Sale) -> str:
    return f"sale {sale.sale_id} ({format_date(sale.start_date)} to {format_date(sale.end_date)})"


def check_pair(candidate: Sale, sibling: Sale, rule: PlatformRule) -> Optional[Conflict]:
    """Check one same-lane pair. Returns the violation, or None."""

    if overlaps(occupied(candidate), occupied(sibling)):
        return Conflict(
            kind=ConflictKind.DIRECT_OVERLAP,
            sale_id=sibling.sale_id,
            reason=f"Direct overlap with {_describe(sibling)}",
        )

    # Occupied ranges are disjoint here, so start order equals end order.
    if candidate.start_date < sibling.start_date:
        earlier, later = candidate, sibling
    else:
        earlier, later = sibling, candidate

    window = cooldown_window(earlier, rule)
    if window is None or rule.waives(later.sale_kind):
        return None
    if not overlaps(window, occupied(later)):
        return None

    if earlier is sibling:
        reason = (
            f"Cooldown conflict: starts during the {rule.cooldown_days}-day cooldown of "
            f"{_describe(sibling)} on {rule.display_name}, which runs until {format_date(window.end)}"
        )
    else:
        reason = (
            f"Cooldown conflict: {_describe(sibling)} starts during this sale's "
            f"{rule.cooldown_days}-day cooldown on {rule.display_name}, which runs until {format_date(window.end)}"
        )
    return Conflict(kind=ConflictKind.COOLDOWN_CONFLICT, sale_id=sibling.sale_id, reason=reason)


def _require_rule_for(candidate: Sale, rule: PlatformRule) -> None:
    if candidate.platform_id != rule.platform_id:
        raise ValueError(
            f"PlatformRule for {rule.platform_id} cannot validate a sale on platform {candidate.platform_id}"
        )


def _advisories(candidate: Sale, rule: PlatformRule) -> Tuple[str, ...]:
    days = duration_days(occupied(candidate))
    if rule.max_sale_days is not None and days > rule.max_sale_days:
        return (f"Sale runs {days} days; {rule.display_name} allows at most {rule.max_sale_days}",)
    return ()


def validate(
    candidate: Sale,
    siblings: Iterable[Sale],
    rule: PlatformRule,
    exclude_id: Optional[str] = None,
) -> ValidationResult:
    """
    Decide whether `candidate` may be placed among `siblings`.

    siblings may span many products and platforms; only the candidate's lane is
    examined. Stops at the first violation.

    Raises:
        ValueError: rule belongs to a different platform than the candidate
    """

    _require_rule_for(candidate, rule)

    window = cooldown_window(candidate, rule)
    cooldown_end = window.end if window is not None else None
    warnings = _advisories(candidate, rule)

    for sibling in lane_siblings(candidate, siblings, exclude_id):
        conflict = check_pair(candidate, sibling, rule)
        if conflict is not None:
            return ValidationResult(
                valid=False,
                conflict=conflict.kind,
                reason=conflict.reason,
                conflicting_sale_id=conflict.sale_id,
                cooldown_end=cooldown_end,
                warnings=warnings,
            )

    return ValidationResult(valid=True, cooldown_end=cooldown_end, warnings=warnings)


def find_conflicts(
    candidate: Sale,
    siblings: Iterable[Sale],
    rule: PlatformRule,
    exclude_id: Optional[str] = None,
) -> List[Conflict]:
    """Every same-lane violation of `candidate`, ordered by sibling start date."""

    _require_rule_for(candidate, rule)

    conflicts: List[Conflict] = []
    for sibling in lane_siblings(candidate, siblings, exclude_id):
        conflict = check_pair(candidate, sibling, rule)
        if conflict is not None:
            conflicts.append(conflict)
    return conflicts


__all__ = [
    "Conflict",
    "ConflictKind",
    "ValidationResult",
    "check_pair",
    "find_conflicts",
    "lane_siblings",
    "validate",
]
