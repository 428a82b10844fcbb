"""
Audit service for stored schedules.

Reports every same-lane pair that breaks an overlap or cooldown rule in data
that is already persisted (e.g. rows written before a platform's cooldown was
raised). Each offending pair is reported once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Set, Tuple

from domain.platform import PlatformRuleTable
from domain.sale import Sale
from domain.validation import ConflictKind, find_conflicts


@dataclass(frozen=True, slots=True)
class LaneConflict:
    """One conflicting pair; sale_id starts on or before other_sale_id."""
    product_id: str
    platform_id: str
    sale_id: str
    other_sale_id: str
    kind: ConflictKind
    reason: str


@dataclass(frozen=True, slots=True)
class AuditReport:
    lanes_checked: int
    sales_checked: int
    conflicts: Tuple[LaneConflict, ...]
    unknown_platforms: Tuple[str, ...]

    @property
    def clean(self) -> bool:
        return not self.conflicts and not self.unknown_platforms


def audit_lanes(sales: Iterable[Sale], rules: PlatformRuleTable) -> AuditReport:
    """
    Check every lane in `sales` against the platform rules.

    Lanes on platforms missing from `rules` are not checked; their platform ids
    are listed in unknown_platforms.
    """
    lanes: Dict[Tuple[str, str], List[Sale]] = {}
    for sale in sales:
        lanes.setdefault(sale.lane, []).append(sale)

    conflicts: List[LaneConflict] = []
    unknown: Set[str] = set()
    checked = 0

    for (product_id, platform_id), lane in sorted(lanes.items()):
        rule = rules.get(platform_id)
        if rule is None:
            unknown.add(platform_id)
            continue

        seen: Set[Tuple[str, str]] = set()
        ordered = sorted(lane, key=lambda s: (s.start_date, s.end_date, s.sale_id))
        for sale in ordered:
            checked += 1
            for conflict in find_conflicts(sale, lane, rule, exclude_id=sale.sale_id):
                pair = tuple(sorted((sale.sale_id, conflict.sale_id)))
                if pair in seen:
                    continue
                seen.add(pair)
                conflicts.append(
                    LaneConflict(
                        product_id=product_id,
                        platform_id=platform_id,
                        sale_id=sale.sale_id,
                        other_sale_id=conflict.sale_id,
                        kind=conflict.kind,
                        reason=conflict.reason,
                    )
                )

    return AuditReport(
        lanes_checked=len(lanes) - sum(1 for _, p in lanes if p in unknown),
        sales_checked=checked,
        conflicts=tuple(conflicts),
        unknown_platforms=tuple(sorted(unknown)),
    )


__all__ = ["AuditReport", "LaneConflict", "audit_lanes"]
