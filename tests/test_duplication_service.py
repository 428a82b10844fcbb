"""
Tests for `services/duplication_service.py`.

Covers contract rules:
- A same-platform copy defaults to the first day after the source's cooldown.
- Copies keep the source's duration and kind.
- Each target is validated independently; the source sale stays in place.
- Unknown target platforms are reported as invalid targets.
"""

from __future__ import annotations

from datetime import date

import pytest

from domain.platform import PlatformNotFoundError, PlatformRule, PlatformRuleTable
from domain.sale import Sale, SaleKind
from services.duplication_service import default_duplicate_start, preview_duplicates

RULES = PlatformRuleTable.of([
    PlatformRule(platform_id="steam", cooldown_days=30, name="Steam"),
    PlatformRule(platform_id="epic", cooldown_days=14, name="Epic"),
])

SOURCE = Sale.from_iso("a", "p1", "steam", "2024-01-01", "2024-01-10", SaleKind.FESTIVAL)


def test_default_duplicate_start_is_day_after_cooldown() -> None:
    assert default_duplicate_start(SOURCE, RULES) == date(2024, 2, 10)


def test_default_duplicate_start_unknown_platform() -> None:
    orphan = Sale.from_iso("x", "p1", "gog", "2024-01-01", "2024-01-10")

    with pytest.raises(PlatformNotFoundError):
        default_duplicate_start(orphan, RULES)


def test_same_platform_copy_defaults_after_cooldown() -> None:
    """Verify the dated copy lands on 02-10..02-19 and is valid next to its source."""

    targets = preview_duplicates(SOURCE, [SOURCE], RULES)

    assert len(targets) == 1
    target = targets[0]
    assert target.platform_id == "steam"
    assert (target.start_date, target.end_date) == (date(2024, 2, 10), date(2024, 2, 19))
    assert target.valid is True
    assert target.reason is None


def test_same_platform_copy_inside_cooldown_is_invalid() -> None:
    targets = preview_duplicates(SOURCE, [SOURCE], RULES, new_start=date(2024, 1, 20))

    assert targets[0].valid is False
    assert "Cooldown conflict" in targets[0].reason
    assert targets[0].validation.conflicting_sale_id == "a"


def test_other_platforms_keep_source_dates() -> None:
    epic_sale = Sale.from_iso("e", "p1", "epic", "2024-01-05", "2024-01-07")

    targets = preview_duplicates(
        SOURCE,
        [SOURCE, epic_sale],
        RULES,
        include_same_platform=False,
        target_platform_ids=["epic"],
    )

    assert len(targets) == 1
    assert targets[0].platform_id == "epic"
    assert targets[0].start_date == date(2024, 1, 1)
    assert targets[0].valid is False
    assert targets[0].reason.startswith("Direct overlap")


def test_other_platforms_on_new_date() -> None:
    targets = preview_duplicates(
        SOURCE,
        [SOURCE],
        RULES,
        new_start=date(2024, 5, 1),
        target_platform_ids=["epic"],
        keep_dates_on_other_platforms=False,
    )

    assert [(t.platform_id, t.start_date, t.end_date) for t in targets] == [
        ("steam", date(2024, 5, 1), date(2024, 5, 10)),
        ("epic", date(2024, 5, 1), date(2024, 5, 10)),
    ]
    assert all(t.valid for t in targets)


def test_source_platform_in_targets_is_skipped() -> None:
    targets = preview_duplicates(SOURCE, [SOURCE], RULES, target_platform_ids=["steam", "epic"])

    assert [t.platform_id for t in targets] == ["steam", "epic"]


def test_unknown_target_platform_is_invalid() -> None:
    targets = preview_duplicates(
        SOURCE, [SOURCE], RULES, include_same_platform=False, target_platform_ids=["gog"]
    )

    assert targets[0].valid is False
    assert targets[0].reason == "Platform not found: gog"
    assert targets[0].validation is None


def test_copy_keeps_kind_for_waivers() -> None:
    """Verify a festival copy is allowed inside a cooldown when the platform waives festivals."""

    rules = PlatformRuleTable.of([
        PlatformRule(
            platform_id="steam",
            cooldown_days=30,
            waives_cooldown_for_kinds=frozenset({SaleKind.FESTIVAL}),
        ),
    ])

    targets = preview_duplicates(SOURCE, [SOURCE], rules, new_start=date(2024, 1, 15))

    assert targets[0].valid is True


def test_nothing_requested_returns_no_targets() -> None:
    assert preview_duplicates(SOURCE, [SOURCE], RULES, include_same_platform=False) == []
