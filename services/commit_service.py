"""
Commit service for persisting accepted move plans.

Handles:
- Refusing plans the engine did not accept
- Writing the moved sale and every cascade shift in one RPC call, so a partial
  cascade is never persisted
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from services.scheduling_service import MovePlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommitResult:
    """
    Outcome of persisting a plan.

    rows_written: rows updated by the database (moved sale + shifts)
    shifted_count: number of neighbouring sales moved along with it
    """
    sale_id: str
    rows_written: int
    shifted_count: int


def commit_move(plan: MovePlan) -> CommitResult:
    """
    Persist an accepted MovePlan atomically.

    Raises:
        ValueError: the plan was not accepted
        RuntimeError: the database rejected the write; nothing was persisted
    """
    if not plan.accepted:
        raise ValueError(f"Cannot commit a {plan.status.value} plan: {plan.reason}")

    from repositories.sale_repository import apply_sale_writes

    writes = plan.writes()
    rows = apply_sale_writes(writes)

    logger.info(
        "Committed move of %s with %d cascaded shift(s)",
        plan.candidate.sale_id,
        plan.shift_count,
    )
    return CommitResult(
        sale_id=plan.candidate.sale_id,
        rows_written=rows,
        shifted_count=plan.shift_count,
    )


__all__ = ["CommitResult", "commit_move"]
