"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
Dates are plain `YYYY-MM-DD` strings on the wire; the field validators route
them through the local date normalizer instead of pydantic's own parsing.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from domain.dates import parse_local_date
from domain.sale import SaleKind


def _normalize(value):
    if value is None:
        return None
    try:
        return parse_local_date(value)
    except TypeError as e:
        # pydantic only turns ValueError into a validation error.
        raise ValueError(str(e)) from e


# ============================================================================
# Placement Models
# ============================================================================

class PlacementRequest(BaseModel):
    """A candidate placement for a sale on one lane."""
    sale_id: Optional[str] = Field(
        None,
        description="ID of the sale being moved; omit when placing a new sale"
    )
    product_id: str
    platform_id: str
    start_date: date
    end_date: date
    sale_type: Optional[SaleKind] = Field(
        None,
        description="Sale kind; defaults to the stored kind of the moved sale, else custom"
    )

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _local_date(cls, value):
        return _normalize(value)

    class Config:
        json_schema_extra = {
            "example": {
                "sale_id": "9b2f0e4c-6d8e-4b53-9d36-2f8a1c0e7a11",
                "product_id": "4a1d6e2b-0c3f-4d5e-8a9b-1c2d3e4f5a6b",
                "platform_id": "e7f8a9b0-1c2d-4e3f-8a5b-6c7d8e9f0a1b",
                "start_date": "2024-01-20",
                "end_date": "2024-01-29",
                "sale_type": "custom"
            }
        }


class MoveRequest(PlacementRequest):
    """A move to plan (and optionally commit) with cascading."""
    horizon_start: Optional[date] = Field(
        None,
        description="First visible timeline day; backward shifts never start earlier"
    )

    @field_validator("horizon_start", mode="before")
    @classmethod
    def _local_horizon(cls, value):
        return _normalize(value)


class ValidationResponse(BaseModel):
    """Result of a placement check."""
    valid: bool
    conflict: Optional[str] = None
    reason: Optional[str] = None
    conflicting_sale_id: Optional[str] = None
    cooldown_end: Optional[date] = None
    warnings: List[str] = []

    class Config:
        json_schema_extra = {
            "example": {
                "valid": False,
                "conflict": "cooldown_conflict",
                "reason": "Cooldown conflict: starts during the 30-day cooldown of sale a1 "
                          "(2024-01-01 to 2024-01-10) on Steam, which runs until 2024-02-09",
                "conflicting_sale_id": "a1",
                "cooldown_end": "2024-02-19",
                "warnings": []
            }
        }


# ============================================================================
# Move Models
# ============================================================================

class ShiftItem(BaseModel):
    """One neighbouring sale moved by the cascade."""
    sale_id: str
    old_start_date: date
    old_end_date: date
    new_start_date: date
    new_end_date: date
    shift_days: int


class MovePlanResponse(BaseModel):
    """Planned move and the neighbour shifts it needs."""
    status: str
    accepted: bool
    sale_id: str
    start_date: date
    end_date: date
    shifts: List[ShiftItem]
    reason: Optional[str] = None
    conflicting_sale_id: Optional[str] = None
    notice: Optional[str] = None
    warnings: List[str] = []

    class Config:
        json_schema_extra = {
            "example": {
                "status": "accepted",
                "accepted": True,
                "sale_id": "a1",
                "start_date": "2024-01-20",
                "end_date": "2024-01-29",
                "shifts": [
                    {
                        "sale_id": "b2",
                        "old_start_date": "2024-02-15",
                        "old_end_date": "2024-02-20",
                        "new_start_date": "2024-02-29",
                        "new_end_date": "2024-03-05",
                        "shift_days": 14
                    }
                ],
                "notice": "1 neighbouring sale(s) shifted to keep cooldowns",
                "warnings": []
            }
        }


class CommitResponse(BaseModel):
    """Response after persisting a move."""
    sale_id: str
    rows_written: int
    shifted_count: int
    plan: MovePlanResponse


# ============================================================================
# Duplicate Models
# ============================================================================

class DuplicatePreviewRequest(BaseModel):
    """Copies of an existing sale to preview."""
    new_start_date: Optional[date] = Field(
        None,
        description="Start of the dated copy; defaults to the first day after the source's cooldown"
    )
    include_same_platform: bool = True
    target_platform_ids: List[str] = []
    keep_dates_on_other_platforms: bool = True

    @field_validator("new_start_date", mode="before")
    @classmethod
    def _local_start(cls, value):
        return _normalize(value)


class DuplicateTargetItem(BaseModel):
    platform_id: str
    start_date: date
    end_date: date
    valid: bool
    reason: Optional[str] = None


class DuplicatePreviewResponse(BaseModel):
    source_sale_id: str
    targets: List[DuplicateTargetItem]
    valid_count: int


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    status_code: int

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Not found",
                "detail": "Platform not found: e7f8a9b0-1c2d-4e3f-8a5b-6c7d8e9f0a1b",
                "status_code": 404
            }
        }
