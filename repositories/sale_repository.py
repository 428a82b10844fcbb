"""
Sale repository (persistence).

This module provides *only* persistence operations for Sale values. It does not
enforce scheduling rules (cooldowns, overlaps); it fetches lane sales for the
engine and applies the writes of an accepted plan.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence, Tuple

from domain.sale import Sale
from repositories.client import supabase
from repositories.mappers import row_to_sale, sale_writes_payload

# Supabase table name for sales.
# Keep this aligned with your database schema.
_SALES_TABLE: str = "sales"

# Rejected sales never block a lane.
_EXCLUDED_STATUS: str = "rejected"

# PostgreSQL function applying a list of date writes in one transaction.
_APPLY_SHIFTS_RPC: str = "apply_sale_shifts"


def list_lane_sales(product_id: str, platform_id: str) -> List[Sale]:
    """
    Retrieve every active sale on one (product_id, platform_id) lane.

    Returns:
        List[Sale] (possibly empty)
    """

    response = (
        supabase.table(_SALES_TABLE)
        .select("*")
        .eq("product_id", product_id)
        .eq("platform_id", platform_id)
        .neq("status", _EXCLUDED_STATUS)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list lane sales: {error}")

    rows = getattr(response, "data", None) or []
    return [row_to_sale(row) for row in rows]


def list_product_sales(product_id: str) -> List[Sale]:
    """
    Retrieve every active sale of a product across all platforms.

    Used when previewing copies of a sale onto other platforms.
    """

    response = (
        supabase.table(_SALES_TABLE)
        .select("*")
        .eq("product_id", product_id)
        .neq("status", _EXCLUDED_STATUS)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list product sales: {error}")

    rows = getattr(response, "data", None) or []
    return [row_to_sale(row) for row in rows]


def list_active_sales() -> List[Sale]:
    """
    Retrieve every active sale on every lane.

    Used by the lane audit script.
    """

    response = supabase.table(_SALES_TABLE).select("*").neq("status", _EXCLUDED_STATUS).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list sales: {error}")

    rows = getattr(response, "data", None) or []
    return [row_to_sale(row) for row in rows]


def get_sale_by_id(sale_id: str) -> Optional[Sale]:
    """
    Retrieve a single sale by its ID.

    Returns:
        Sale or None if not found
    """

    response = (
        supabase.table(_SALES_TABLE)
        .select("*")
        .eq("id", sale_id)
        .limit(1)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to get sale: {error}")

    rows = getattr(response, "data", None) or []

    if not rows:
        return None

    return row_to_sale(rows[0])


def apply_sale_writes(writes: Sequence[Tuple[str, date, date]]) -> int:
    """
    Persist new dates for several sales as one transaction.

    Calls apply_sale_shifts() which updates every row or none of them, so a
    cascade is never half-applied.

    Args:
        writes: ordered (sale_id, start_date, end_date) tuples

    Returns:
        Number of rows updated

    Raises:
        RuntimeError: the RPC failed; nothing was written
    """
    from postgrest.exceptions import APIError

    if not writes:
        return 0

    try:
        response = supabase.rpc(_APPLY_SHIFTS_RPC, {"p_writes": sale_writes_payload(writes)}).execute()
    except APIError as e:
        raise RuntimeError(f"Failed to apply sale writes: {e}") from e

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to apply sale writes: {error}")

    data = getattr(response, "data", None)
    if isinstance(data, int):
        return data
    return len(writes)


__all__ = [
    "apply_sale_writes",
    "get_sale_by_id",
    "list_active_sales",
    "list_lane_sales",
    "list_product_sales",
]
