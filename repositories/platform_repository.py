"""
Platform repository for loading the platform rule table.

Fetches cooldown_days, max_sale_days and cooldown waivers from the platforms
table. The engine treats the resulting table as read-only.
"""

from __future__ import annotations

from typing import Optional

from domain.platform import PlatformRule, PlatformRuleTable
from repositories.client import supabase
from repositories.mappers import row_to_platform_rule

_PLATFORMS_TABLE: str = "platforms"


def load_platform_rules() -> PlatformRuleTable:
    """
    Load every platform rule.

    Raises:
        RuntimeError: query failed
        ValueError: a platform row has no cooldown_days
    """

    response = supabase.table(_PLATFORMS_TABLE).select("*").execute()

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch platforms: {error}")

    rows = getattr(response, "data", None) or []
    return PlatformRuleTable.of(row_to_platform_rule(row) for row in rows)


def get_platform_rule(platform_id: str) -> Optional[PlatformRule]:
    """
    Get the rule for a single platform.

    Returns:
        PlatformRule or None if the platform does not exist
    """

    response = (
        supabase.table(_PLATFORMS_TABLE)
        .select("*")
        .eq("id", platform_id)
        .limit(1)
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch platform: {error}")

    rows = getattr(response, "data", None) or []

    if not rows:
        return None

    return row_to_platform_rule(rows[0])


__all__ = [
    "get_platform_rule",
    "load_platform_rules",
]
