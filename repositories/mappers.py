"""
Row mapping between Supabase rows and domain values.

Pure helpers shared by the repositories. Every stored date string goes through
the local date normalizer; nothing here imports the database client.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional

from domain.dates import format_date, parse_local_date
from domain.platform import SPECIAL_SALE_KINDS, PlatformRule
from domain.sale import Sale, SaleKind


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def row_to_sale(row: Mapping[str, Any]) -> Sale:
    """Convert a `sales` row into a Sale."""

    return Sale(
        sale_id=str(row["id"]),
        product_id=str(row["product_id"]),
        platform_id=str(row["platform_id"]),
        start_date=parse_local_date(row["start_date"]),
        end_date=parse_local_date(row["end_date"]),
        sale_kind=SaleKind.parse(row.get("sale_type")),
        sale_name=row.get("sale_name"),
        status=row.get("status"),
        discount_percentage=_optional_int(row.get("discount_percentage")),
    )


def _waived_kinds(row: Mapping[str, Any]) -> FrozenSet[SaleKind]:
    explicit = row.get("waives_cooldown_for_kinds")
    if explicit is not None:
        return frozenset(SaleKind(kind) for kind in explicit)
    if row.get("special_sales_no_cooldown"):
        return SPECIAL_SALE_KINDS
    return frozenset()


def row_to_platform_rule(row: Mapping[str, Any]) -> PlatformRule:
    """
    Convert a `platforms` row into a PlatformRule.

    A missing cooldown_days is an error, not zero: an unknown cooldown cannot be
    assumed to allow back-to-back sales.
    """

    if row.get("cooldown_days") is None:
        raise ValueError(f"Platform {row.get('id')} has no cooldown_days")

    return PlatformRule(
        platform_id=str(row["id"]),
        name=row.get("name"),
        cooldown_days=int(row["cooldown_days"]),
        max_sale_days=_optional_int(row.get("max_sale_days")),
        waives_cooldown_for_kinds=_waived_kinds(row),
    )


def sale_writes_payload(writes: Iterable[tuple[str, date, date]]) -> list[Dict[str, str]]:
    """Serialize (sale_id, start, end) writes for the apply_sale_shifts RPC."""

    return [
        {"id": sale_id, "start_date": format_date(start), "end_date": format_date(end)}
        for sale_id, start, end in writes
    ]


__all__ = [
    "row_to_platform_rule",
    "row_to_sale",
    "sale_writes_payload",
]
