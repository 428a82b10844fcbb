"""
Tests for `domain/platform.py`.

Covers contract rules:
- cooldown_days must be non-negative.
- The rule table is read-only and reports unknown platforms explicitly.
"""

from __future__ import annotations

import pytest

from domain.platform import SPECIAL_SALE_KINDS, PlatformNotFoundError, PlatformRule, PlatformRuleTable
from domain.sale import SaleKind


def test_platform_rule_rejects_negative_cooldown() -> None:
    with pytest.raises(ValueError):
        PlatformRule(platform_id="steam", cooldown_days=-1)


def test_platform_rule_rejects_non_positive_max_sale_days() -> None:
    with pytest.raises(ValueError):
        PlatformRule(platform_id="steam", cooldown_days=30, max_sale_days=0)


def test_platform_rule_normalizes_waivers_to_frozenset() -> None:
    rule = PlatformRule(
        platform_id="steam",
        cooldown_days=30,
        waives_cooldown_for_kinds={SaleKind.SEASONAL},  # type: ignore[arg-type]
    )

    assert isinstance(rule.waives_cooldown_for_kinds, frozenset)
    assert rule.waives(SaleKind.SEASONAL)
    assert not rule.waives(SaleKind.CUSTOM)


def test_special_sale_kinds() -> None:
    assert SPECIAL_SALE_KINDS == frozenset({SaleKind.SEASONAL, SaleKind.SPECIAL})


def test_rule_table_lookup() -> None:
    """Verify get() returns None and require() raises for unknown platforms."""

    steam = PlatformRule(platform_id="steam", cooldown_days=30, name="Steam")
    table = PlatformRuleTable.of([steam])

    assert table.get("steam") is steam
    assert table.require("steam") is steam
    assert "steam" in table
    assert "epic" not in table
    assert len(table) == 1
    assert list(table) == [steam]
    assert table.get("epic") is None

    with pytest.raises(PlatformNotFoundError) as excinfo:
        table.require("epic")
    assert excinfo.value.platform_id == "epic"
    assert isinstance(excinfo.value, LookupError)


def test_rule_table_rejects_duplicate_platforms() -> None:
    with pytest.raises(ValueError):
        PlatformRuleTable.of(
            [
                PlatformRule(platform_id="steam", cooldown_days=30),
                PlatformRule(platform_id="steam", cooldown_days=28),
            ]
        )


def test_rule_table_is_read_only() -> None:
    table = PlatformRuleTable.of([PlatformRule(platform_id="steam", cooldown_days=30)])

    with pytest.raises(TypeError):
        table._rules["epic"] = PlatformRule(platform_id="epic", cooldown_days=0)  # type: ignore[index]
