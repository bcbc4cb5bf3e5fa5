"""
Pydantic Schemas for Eligibility Verification.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from revcycle.core.enums import (
    CoverageLevel,
    CoverageStatus,
    EligibilitySource,
    NetworkStatus,
    SubscriberRelationship,
)


class EligibilityRequest(BaseModel):
    patient_id: str = Field(..., min_length=1)
    payer_id: str = Field(..., min_length=1)
    member_id: str = Field(..., min_length=1)
    date_of_service: date


class AccumulatorDetail(BaseModel):
    """Deductible or out-of-pocket accumulator."""

    total: Decimal
    met: Decimal
    remaining: Decimal


class BenefitDetail(BaseModel):
    category: str
    network_status: NetworkStatus = NetworkStatus.IN_NETWORK
    coverage_level: CoverageLevel = CoverageLevel.INDIVIDUAL
    deductible: Optional[AccumulatorDetail] = None
    out_of_pocket_max: Optional[AccumulatorDetail] = None
    copay: Optional[Decimal] = None
    coinsurance: Optional[Decimal] = None
    prior_auth_required: bool = False
    referral_required: bool = False
    limitations: Optional[str] = None


class CoverageInfo(BaseModel):
    """What the eligibility collaborator reports for a member."""

    subscriber_name: str
    subscriber_relationship: SubscriberRelationship = SubscriberRelationship.SELF
    coverage_status: CoverageStatus
    effective_date: date
    termination_date: Optional[date] = None
    group_number: Optional[str] = None
    plan_type: str
    plan_name: str
    benefits: list[BenefitDetail] = Field(default_factory=list)
    source: EligibilitySource = EligibilitySource.REALTIME


class Eligibility(CoverageInfo):
    id: str
    patient_id: str
    payer_id: str
    payer_name: str
    member_id: str
    date_of_service: date
    checked_at: datetime

    @property
    def is_eligible(self) -> bool:
        return self.coverage_status == CoverageStatus.ACTIVE
