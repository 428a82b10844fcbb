"""
Duplication service for copying an existing sale.

Previews copying a sale:
- to a new start date on the same platform (duration preserved)
- to other platforms, on the same dates or on the new date

Each target is validated independently against the current sales. Nothing is
written; callers persist only the targets they accept.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence

from domain.dates import add_days
from domain.interval import earliest_start_after
from domain.platform import PlatformRuleTable
from domain.sale import Sale
from domain.validation import ValidationResult, validate


@dataclass(frozen=True, slots=True)
class DuplicateTarget:
    """
    One proposed copy of a sale and its validation outcome.

    validation is None when the target platform is unknown; reason says so.
    """
    platform_id: str
    start_date: date
    end_date: date
    valid: bool
    reason: Optional[str] = None
    validation: Optional[ValidationResult] = None


def default_duplicate_start(sale: Sale, rules: PlatformRuleTable) -> date:
    """
    Suggested start for a same-platform copy: the first day after the source
    sale's cooldown.

    Raises:
        PlatformNotFoundError: the source sale's platform has no rule
    """
    return earliest_start_after(sale, rules.require(sale.platform_id))


def _preview(copy: Sale, existing: List[Sale], rules: PlatformRuleTable) -> DuplicateTarget:
    rule = rules.get(copy.platform_id)
    if rule is None:
        return DuplicateTarget(
            platform_id=copy.platform_id,
            start_date=copy.start_date,
            end_date=copy.end_date,
            valid=False,
            reason=f"Platform not found: {copy.platform_id}",
        )

    result = validate(copy, existing, rule)
    return DuplicateTarget(
        platform_id=copy.platform_id,
        start_date=copy.start_date,
        end_date=copy.end_date,
        valid=result.valid,
        reason=result.reason,
        validation=result,
    )


def preview_duplicates(
    sale: Sale,
    existing_sales: Iterable[Sale],
    rules: PlatformRuleTable,
    *,
    new_start: Optional[date] = None,
    include_same_platform: bool = True,
    target_platform_ids: Sequence[str] = (),
    keep_dates_on_other_platforms: bool = True,
) -> List[DuplicateTarget]:
    """
    Validate proposed copies of `sale`.

    Args:
        sale: source sale (its kind and duration are copied)
        existing_sales: current sales; the source sale itself stays in place
        rules: platform rule table
        new_start: start of the dated copy (default: first day after the source's cooldown)
        include_same_platform: preview a dated copy on the source platform
        target_platform_ids: other platforms to copy to (the source platform is skipped)
        keep_dates_on_other_platforms: copy to other platforms on the source dates
            instead of on new_start

    Returns:
        One DuplicateTarget per copy, same-platform copy first.

    Example:
        targets = preview_duplicates(sale, sales, rules, target_platform_ids=["steam", "epic"])
        valid = [t for t in targets if t.valid]
    """
    existing = list(existing_sales)

    dated_start = new_start
    if dated_start is None and (include_same_platform or not keep_dates_on_other_platforms):
        dated_start = default_duplicate_start(sale, rules)

    targets: List[DuplicateTarget] = []

    if include_same_platform and dated_start is not None:
        targets.append(_preview(_copy(sale, sale.platform_id, dated_start), existing, rules))

    for platform_id in target_platform_ids:
        if platform_id == sale.platform_id:
            continue
        if keep_dates_on_other_platforms or dated_start is None:
            start = sale.start_date
        else:
            start = dated_start
        targets.append(_preview(_copy(sale, platform_id, start), existing, rules))

    return targets


def _copy(sale: Sale, platform_id: str, start: date) -> Sale:
    # Copies get their own id so validation never skips the source sale.
    return Sale(
        sale_id=f"{sale.sale_id}:copy:{platform_id}",
        product_id=sale.product_id,
        platform_id=platform_id,
        start_date=start,
        end_date=add_days(start, sale.duration_days - 1),
        sale_kind=sale.sale_kind,
        sale_name=sale.sale_name,
        discount_percentage=sale.discount_percentage,
    )


__all__ = [
    "DuplicateTarget",
    "default_duplicate_start",
    "preview_duplicates",
]
