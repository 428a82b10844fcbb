"""
Sales Scheduling API Endpoints.

Endpoints for validating placements, planning cascading moves, committing
them, and previewing copies of a sale.
"""

from datetime import date
from typing import List, Optional
from uuid import uuid4

from fastapi import APIRouter, HTTPException

from api.models import (
    CommitResponse,
    DuplicatePreviewRequest,
    DuplicatePreviewResponse,
    DuplicateTargetItem,
    ErrorResponse,
    MovePlanResponse,
    MoveRequest,
    PlacementRequest,
    ShiftItem,
    ValidationResponse,
)
from config import get_horizon_start
from domain.platform import PlatformNotFoundError, PlatformRuleTable
from domain.sale import Sale, SaleKind
from domain.validation import validate
from repositories.platform_repository import get_platform_rule, load_platform_rules
from repositories.sale_repository import get_sale_by_id, list_lane_sales, list_product_sales
from services.commit_service import commit_move
from services.duplication_service import preview_duplicates
from services.scheduling_service import MovePlan, plan_move

router = APIRouter()


def _candidate(request: PlacementRequest, siblings: List[Sale]) -> Sale:
    if request.end_date < request.start_date:
        raise HTTPException(status_code=400, detail="end_date must be on or after start_date")

    kind = request.sale_type
    if kind is None:
        stored = next((s for s in siblings if s.sale_id == request.sale_id), None)
        kind = stored.sale_kind if stored is not None else SaleKind.CUSTOM

    return Sale(
        sale_id=request.sale_id or f"new-{uuid4()}",
        product_id=request.product_id,
        platform_id=request.platform_id,
        start_date=request.start_date,
        end_date=request.end_date,
        sale_kind=kind,
    )


def _lane_rules(platform_id: str) -> PlatformRuleTable:
    rule = get_platform_rule(platform_id)
    if rule is None:
        raise PlatformNotFoundError(platform_id)
    return PlatformRuleTable.of([rule])


def _plan_response(plan: MovePlan) -> MovePlanResponse:
    return MovePlanResponse(
        status=plan.status.value,
        accepted=plan.accepted,
        sale_id=plan.candidate.sale_id,
        start_date=plan.candidate.start_date,
        end_date=plan.candidate.end_date,
        shifts=[
            ShiftItem(
                sale_id=s.sale_id,
                old_start_date=s.old_start_date,
                old_end_date=s.old_end_date,
                new_start_date=s.new_start_date,
                new_end_date=s.new_end_date,
                shift_days=s.shift_days,
            )
            for s in plan.shifts
        ],
        reason=plan.reason,
        conflicting_sale_id=plan.conflicting_sale_id,
        notice=plan.notice,
        warnings=list(plan.warnings),
    )


def _plan(request: MoveRequest) -> MovePlan:
    rules = _lane_rules(request.platform_id)
    horizon_start: Optional[date] = request.horizon_start or get_horizon_start()
    siblings = list_lane_sales(request.product_id, request.platform_id)
    candidate = _candidate(request, siblings)
    return plan_move(candidate, siblings, rules, horizon_start=horizon_start)


@router.post(
    "/sales/validate",
    response_model=ValidationResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Validate Sale Placement",
    description="Check a sale placement against every other sale on its product/platform lane."
)
def validate_placement(request: PlacementRequest):
    """
    Validate a sale placement without shifting any other sale.

    Cheap enough to call while a sale is being dragged.

    **Example request:**
    ```json
    {
      "sale_id": "b2",
      "product_id": "p1",
      "platform_id": "steam",
      "start_date": "2024-01-11",
      "end_date": "2024-01-20",
      "sale_type": "custom"
    }
    ```
    """
    try:
        rules = _lane_rules(request.platform_id)
        siblings = list_lane_sales(request.product_id, request.platform_id)
        candidate = _candidate(request, siblings)
        result = validate(candidate, siblings, rules.require(request.platform_id), exclude_id=request.sale_id)
    except HTTPException:
        raise
    except (RuntimeError, ValueError) as e:
        raise HTTPException(status_code=500, detail=f"Failed to validate sale: {str(e)}")

    return ValidationResponse(
        valid=result.valid,
        conflict=result.conflict.value if result.conflict else None,
        reason=result.reason,
        conflicting_sale_id=result.conflicting_sale_id,
        cooldown_end=result.cooldown_end,
        warnings=list(result.warnings),
    )


@router.post(
    "/sales/plan-move",
    response_model=MovePlanResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Plan Sale Move",
    description="Plan a move, shifting neighbouring sales when only cooldowns are in the way."
)
def plan_sale_move(request: MoveRequest):
    """
    Plan a move without persisting anything.

    **Outcomes (status):**
    - `accepted`: legal as-is or after the listed shifts
    - `direct_overlap`: the sale would share a day with another sale
    - `cooldown_conflict`: a cooldown conflict remains after cascading
    - `cascade_infeasible`: a shift would start before the timeline start
    """
    try:
        plan = _plan(request)
    except (RuntimeError, ValueError) as e:
        raise HTTPException(status_code=500, detail=f"Failed to plan move: {str(e)}")

    return _plan_response(plan)


@router.post(
    "/sales/commit-move",
    response_model=CommitResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Commit Sale Move",
    description="Plan a move and persist it with every cascaded shift in one transaction."
)
def commit_sale_move(request: MoveRequest):
    """
    Plan and persist a move.

    The plan is recomputed from current data; a plan that is not accepted is
    rejected with 409 and nothing is written.
    """
    if not request.sale_id:
        raise HTTPException(status_code=400, detail="sale_id is required to commit a move")

    try:
        plan = _plan(request)
        if not plan.accepted:
            raise HTTPException(status_code=409, detail=plan.reason)
        result = commit_move(plan)
    except HTTPException:
        raise
    except (RuntimeError, ValueError) as e:
        raise HTTPException(status_code=500, detail=f"Failed to commit move: {str(e)}")

    return CommitResponse(
        sale_id=result.sale_id,
        rows_written=result.rows_written,
        shifted_count=result.shifted_count,
        plan=_plan_response(plan),
    )


@router.post(
    "/sales/{sale_id}/duplicate-preview",
    response_model=DuplicatePreviewResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Preview Sale Duplicates",
    description="Validate copies of a sale on a new date and/or on other platforms."
)
def preview_sale_duplicates(sale_id: str, request: DuplicatePreviewRequest):
    """
    Preview copies of an existing sale. Nothing is written.

    Unknown target platforms are reported as invalid targets; an unknown
    source platform is a 404.
    """
    try:
        sale = get_sale_by_id(sale_id)
        if sale is None:
            raise HTTPException(status_code=404, detail=f"Sale not found: {sale_id}")

        targets = preview_duplicates(
            sale,
            list_product_sales(sale.product_id),
            load_platform_rules(),
            new_start=request.new_start_date,
            include_same_platform=request.include_same_platform,
            target_platform_ids=request.target_platform_ids,
            keep_dates_on_other_platforms=request.keep_dates_on_other_platforms,
        )
    except HTTPException:
        raise
    except (RuntimeError, ValueError) as e:
        raise HTTPException(status_code=500, detail=f"Failed to preview duplicates: {str(e)}")

    items = [
        DuplicateTargetItem(
            platform_id=t.platform_id,
            start_date=t.start_date,
            end_date=t.end_date,
            valid=t.valid,
            reason=t.reason,
        )
        for t in targets
    ]
    return DuplicatePreviewResponse(
        source_sale_id=sale.sale_id,
        targets=items,
        valid_count=sum(1 for t in targets if t.valid),
    )
