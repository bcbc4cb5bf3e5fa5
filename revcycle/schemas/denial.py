"""
Pydantic Schemas for Denial and Appeal Management.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from revcycle.core.enums import (
    AppealDecision,
    AppealLevel,
    AppealStatus,
    DenialCategory,
    DenialStatus,
    ResolutionType,
)


# =============================================================================
# Input Schemas
# =============================================================================


class AppealCreate(BaseModel):
    level: AppealLevel = AppealLevel.FIRST
    supporting_docs: list[str] = Field(default_factory=list)
    reason: str = Field(..., min_length=1, max_length=4000)


class AppealDecisionCreate(BaseModel):
    decision: AppealDecision
    details: str = ""


class WriteOffCreate(BaseModel):
    amount: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


# =============================================================================
# Response Schemas
# =============================================================================


class AppealResponseDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    received_date: datetime
    decision: AppealDecision
    details: str


class AppealOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    level: AppealLevel
    filed_date: datetime
    deadline: datetime
    reason: str
    supporting_docs: list[str]
    status: AppealStatus
    response: Optional[AppealResponseDetail] = None


class DenialResolutionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: ResolutionType
    date: datetime
    amount: Optional[Decimal] = None
    notes: Optional[str] = None


class DenialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    claim_id: str
    claim_number: str
    denial_date: datetime
    denial_codes: list[str]
    denial_reasons: list[str]
    category: DenialCategory
    appeal_deadline: datetime
    status: DenialStatus
    assigned_to: Optional[str] = None
    resolution: Optional[DenialResolutionOut] = None
    appeals: list[AppealOut]
