"""
Domain: Platform rules.

Contract excerpts implemented here:
- Each platform has one rule: cooldown_days (>= 0), an advisory max_sale_days,
  and the set of sale kinds exempt from the cooldown on that platform.
- The rule table is supplied externally and is read-only to the engine.
- An unknown platform is a definite outcome, never a silent default: a missing
  cooldown rule cannot be assumed to be zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Iterable, Iterator, Mapping, Optional

from .sale import SaleKind

# Kinds waived by the storage flag `special_sales_no_cooldown`.
SPECIAL_SALE_KINDS: FrozenSet[SaleKind] = frozenset({SaleKind.SEASONAL, SaleKind.SPECIAL})


class PlatformNotFoundError(LookupError):
    """Raised when a platform_id has no entry in the rule table."""

    def __init__(self, platform_id: str) -> None:
        super().__init__(f"Platform not found: {platform_id}")
        self.platform_id = platform_id


@dataclass(frozen=True, slots=True)
class PlatformRule:
    platform_id: str
    cooldown_days: int
    max_sale_days: Optional[int] = None
    waives_cooldown_for_kinds: FrozenSet[SaleKind] = field(default_factory=frozenset)
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.cooldown_days < 0:
            raise ValueError("cooldown_days must be >= 0")
        if self.max_sale_days is not None and self.max_sale_days < 1:
            raise ValueError("max_sale_days must be >= 1 when set")
        if not isinstance(self.waives_cooldown_for_kinds, frozenset):
            object.__setattr__(self, "waives_cooldown_for_kinds", frozenset(self.waives_cooldown_for_kinds))

    def waives(self, kind: SaleKind) -> bool:
        return kind in self.waives_cooldown_for_kinds

    @property
    def display_name(self) -> str:
        return self.name or self.platform_id


@dataclass(frozen=True, slots=True)
class PlatformRuleTable:
    """Read-only lookup of PlatformRule by platform_id."""

    _rules: Mapping[str, PlatformRule]

    @staticmethod
    def of(rules: Iterable[PlatformRule]) -> "PlatformRuleTable":
        by_id = {}
        for rule in rules:
            if rule.platform_id in by_id:
                raise ValueError(f"Duplicate platform rule for {rule.platform_id}")
            by_id[rule.platform_id] = rule
        return PlatformRuleTable(_rules=MappingProxyType(by_id))

    def get(self, platform_id: str) -> Optional[PlatformRule]:
        return self._rules.get(platform_id)

    def require(self, platform_id: str) -> PlatformRule:
        rule = self._rules.get(platform_id)
        if rule is None:
            raise PlatformNotFoundError(platform_id)
        return rule

    def __contains__(self, platform_id: object) -> bool:
        return platform_id in self._rules

    def __iter__(self) -> Iterator[PlatformRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)


__all__ = [
    "PlatformNotFoundError",
    "PlatformRule",
    "PlatformRuleTable",
    "SPECIAL_SALE_KINDS",
]
