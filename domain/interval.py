"""
Domain: Interval model for occupied and cooldown spans.

Contract excerpts implemented here:
- A sale occupies [start_date, end_date], both inclusive.
- Cooldown is derived, never stored: [end + 1, end + cooldown_days] for a sale
  whose kind is not waived on its platform. It is absent when cooldown_days == 0
  or the kind is waived.
- overlaps(A, B) is true iff A.start <= B.end and B.start <= A.end. A range that
  ends the day before another starts does not overlap it.
- duration_days = end - start + 1 (minimum 1).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .dates import add_days, days_between
from .platform import PlatformRule
from .sale import Sale


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive calendar-day range."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"DateRange end {self.end} must be >= start {self.start}")


def occupied(sale: Sale) -> DateRange:
    return DateRange(sale.start_date, sale.end_date)


def cooldown_window(sale: Sale, rule: PlatformRule) -> Optional[DateRange]:
    """Post-sale quiet period of `sale` on its platform, or None when there is none."""

    if rule.cooldown_days == 0 or rule.waives(sale.sale_kind):
        return None
    return DateRange(
        add_days(sale.end_date, 1),
        add_days(sale.end_date, rule.cooldown_days),
    )


def blocked_until(sale: Sale, rule: PlatformRule) -> date:
    """Last day `sale` keeps a cooldown-bound neighbour out: cooldown end, or end_date."""

    window = cooldown_window(sale, rule)
    return window.end if window is not None else sale.end_date


def earliest_start_after(sale: Sale, rule: PlatformRule) -> date:
    """First day a cooldown-bound sale may start after `sale` on the same lane."""

    return add_days(blocked_until(sale, rule), 1)


def overlaps(a: DateRange, b: DateRange) -> bool:
    return a.start <= b.end and b.start <= a.end


def duration_days(span: DateRange) -> int:
    return days_between(span.start, span.end) + 1


__all__ = [
    "DateRange",
    "blocked_until",
    "cooldown_window",
    "duration_days",
    "earliest_start_after",
    "occupied",
    "overlaps",
]
