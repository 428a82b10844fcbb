"""
Domain: Sale events and proposed date shifts.

Contract excerpts relevant here:
- A Sale occupies its lane (product_id + platform_id) from start_date to end_date,
  both inclusive, with end_date >= start_date.
- The engine treats a Sale as an immutable value during a planning decision. It
  never mutates an input Sale; moves produce new instances.
- A CascadeShift preserves the shifted sale's duration exactly.

Eligibility decisions live with the validator and the cascade planner.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from .dates import DateLike, add_days, days_between, parse_local_date


class SaleKind(str, Enum):
    CUSTOM = "custom"
    SEASONAL = "seasonal"
    FESTIVAL = "festival"
    SPECIAL = "special"

    @staticmethod
    def parse(value: Optional[str]) -> "SaleKind":
        """
        Resolve a stored sale type.

        Missing values and the legacy 'regular' type map to CUSTOM.
        """

        if value is None or value == "" or value == "regular":
            return SaleKind.CUSTOM
        return SaleKind(value)


@dataclass(frozen=True, slots=True)
class Sale:
    """
    Immutable scheduled discount event.

    Only sale_id, the lane ids, the dates and sale_kind take part in scheduling.
    The remaining fields ride along from storage so callers can round-trip them.
    """

    sale_id: str
    product_id: str
    platform_id: str
    start_date: date
    end_date: date
    sale_kind: SaleKind = SaleKind.CUSTOM
    sale_name: Optional[str] = None
    status: Optional[str] = None
    discount_percentage: Optional[int] = None

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError(
                f"Sale {self.sale_id}: end_date {self.end_date} must be >= start_date {self.start_date}"
            )

    @staticmethod
    def from_iso(
        sale_id: str,
        product_id: str,
        platform_id: str,
        start_date: DateLike,
        end_date: DateLike,
        sale_kind: SaleKind | str = SaleKind.CUSTOM,
    ) -> "Sale":
        """Build a Sale from 'YYYY-MM-DD' strings via the local date normalizer."""

        kind = sale_kind if isinstance(sale_kind, SaleKind) else SaleKind.parse(sale_kind)
        return Sale(
            sale_id=sale_id,
            product_id=product_id,
            platform_id=platform_id,
            start_date=parse_local_date(start_date),
            end_date=parse_local_date(end_date),
            sale_kind=kind,
        )

    @property
    def lane(self) -> Tuple[str, str]:
        return (self.product_id, self.platform_id)

    @property
    def duration_days(self) -> int:
        """Inclusive day count."""

        return days_between(self.start_date, self.end_date) + 1

    def same_lane(self, other: "Sale") -> bool:
        return self.lane == other.lane

    def moved_to(self, start_date: date, end_date: date) -> "Sale":
        """Return a copy placed at new dates; this instance is unchanged."""

        return replace(self, start_date=start_date, end_date=end_date)

    def shifted(self, days: int) -> "Sale":
        """Return a copy moved by `days` (negative moves backward), duration preserved."""

        return self.moved_to(add_days(self.start_date, days), add_days(self.end_date, days))


@dataclass(frozen=True, slots=True)
class CascadeShift:
    """
    A proposed new position for a neighbouring sale.

    old_* dates are kept for reporting; callers persist only
    (sale_id, new_start_date, new_end_date).
    """

    sale_id: str
    old_start_date: date
    old_end_date: date
    new_start_date: date
    new_end_date: date

    def __post_init__(self) -> None:
        if (self.new_end_date - self.new_start_date) != (self.old_end_date - self.old_start_date):
            raise ValueError(f"CascadeShift for {self.sale_id} must preserve the sale's duration")

    @staticmethod
    def for_sale(sale: Sale, days: int) -> "CascadeShift":
        moved = sale.shifted(days)
        return CascadeShift(
            sale_id=sale.sale_id,
            old_start_date=sale.start_date,
            old_end_date=sale.end_date,
            new_start_date=moved.start_date,
            new_end_date=moved.end_date,
        )

    @property
    def shift_days(self) -> int:
        """Signed number of days moved (positive is later)."""

        return days_between(self.old_start_date, self.new_start_date)

    def apply_to(self, sale: Sale) -> Sale:
        if sale.sale_id != self.sale_id:
            raise ValueError(f"CascadeShift for {self.sale_id} cannot be applied to sale {sale.sale_id}")
        return sale.moved_to(self.new_start_date, self.new_end_date)


__all__ = [
    "CascadeShift",
    "Sale",
    "SaleKind",
]
