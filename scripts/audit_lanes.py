#!/usr/bin/env python3
"""
Lane Audit Script

Checks stored sales against the current platform rules and prints every pair
that overlaps or breaks a cooldown. Exits with status 1 when anything is found.

Usage:
    python scripts/audit_lanes.py
    python scripts/audit_lanes.py --product 4a1d6e2b-0c3f-4d5e-8a9b-1c2d3e4f5a6b
    python scripts/audit_lanes.py --platform steam --verbose
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from repositories.platform_repository import load_platform_rules
from repositories.sale_repository import list_active_sales, list_product_sales
from services.audit_service import AuditReport, audit_lanes

logger = logging.getLogger(__name__)


def print_report(report: AuditReport) -> None:
    print("=" * 60)
    print("LANE AUDIT")
    print("=" * 60)
    print(f"Lanes checked:     {report.lanes_checked}")
    print(f"Sales checked:     {report.sales_checked}")
    print(f"Conflicts found:   {len(report.conflicts)}")
    print("=" * 60)

    for conflict in report.conflicts:
        print(f"\n[{conflict.kind.value}] product {conflict.product_id} on {conflict.platform_id}")
        print(f"  sale {conflict.sale_id}: {conflict.reason}")

    for platform_id in report.unknown_platforms:
        print(f"\n[WARNING] Platform not found: {platform_id} (lanes skipped)")


def main() -> int:
    parser = argparse.ArgumentParser(description="Audit stored sales for overlap and cooldown conflicts")
    parser.add_argument("--product", help="Only audit this product_id")
    parser.add_argument("--platform", help="Only audit this platform_id")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        rules = load_platform_rules()
        sales = list_product_sales(args.product) if args.product else list_active_sales()
    except (RuntimeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.platform:
        sales = [s for s in sales if s.platform_id == args.platform]

    logger.debug("Auditing %d sale(s) against %d platform rule(s)", len(sales), len(rules))
    report = audit_lanes(sales, rules)
    print_report(report)

    return 0 if report.clean else 1


if __name__ == "__main__":
    sys.exit(main())
