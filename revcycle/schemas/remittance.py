"""
Pydantic Schemas for Remittance Posting.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from revcycle.core.enums import (
    AdjustmentGroup,
    PaymentOutcome,
    PostingResult,
    RemittanceStatus,
)
from revcycle.schemas.claim import AdjustmentResponse


# =============================================================================
# Input Schemas
# =============================================================================


class AdjustmentInput(BaseModel):
    code: str = Field(..., min_length=1, max_length=20, description="CARC code, e.g. CO-45")
    group: AdjustmentGroup
    amount: Decimal
    description: str = ""
    reason: str = ""


class ClaimPaymentInput(BaseModel):
    """One per-claim outcome on a remittance."""

    claim_number: str = Field(..., min_length=1)
    charged_amount: Optional[Decimal] = Field(
        None, ge=0, description="Defaults to the claim's total charges"
    )
    allowed_amount: Decimal = Field(default=Decimal("0"), ge=0)
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    patient_responsibility: Decimal = Field(default=Decimal("0"), ge=0)
    adjustments: list[AdjustmentInput] = Field(default_factory=list)
    status: PaymentOutcome
    denial_reason: Optional[str] = None
    remark_codes: list[str] = Field(default_factory=list)


class RemittanceCreate(BaseModel):
    """Batch payment notice from one payer."""

    remittance_number: str = Field(..., min_length=1)
    payer_id: str = Field(..., min_length=1)
    check_number: Optional[str] = None
    check_date: Optional[date] = None
    eft_trace_number: Optional[str] = None
    payment_amount: Decimal = Field(..., ge=0)
    claim_payments: list[ClaimPaymentInput] = Field(default_factory=list)


# =============================================================================
# Response Schemas
# =============================================================================


class ClaimPaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    claim_id: str
    claim_number: str
    patient_name: str
    service_date: date
    charged_amount: Decimal
    allowed_amount: Decimal
    paid_amount: Decimal
    patient_responsibility: Decimal
    status: PaymentOutcome
    adjustments: list[AdjustmentResponse]
    denial_reason: Optional[str] = None
    remark_codes: list[str]
    posting_result: PostingResult


class RemittanceExceptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    claim_number: str
    posting_result: PostingResult
    reason: str
    paid_amount: Decimal


class RemittanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    remittance_number: str
    payer_id: str
    payer_name: str
    check_number: Optional[str] = None
    check_date: Optional[date] = None
    eft_trace_number: Optional[str] = None
    payment_amount: Decimal
    posted_amount: Decimal
    unapplied_amount: Decimal
    claim_payments: list[ClaimPaymentResponse]
    exceptions: list[RemittanceExceptionResponse]
    status: RemittanceStatus
    received_at: datetime
    processed_at: Optional[datetime] = None
