"""
Pydantic Schemas for Claim Management.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from revcycle.core.enums import (
    AdjustmentGroup,
    AuthorizationStatus,
    ClaimStatus,
    ClaimType,
    DiagnosisCodeSystem,
    NoteType,
    PresentOnAdmission,
    ProcedureCodeSystem,
)


# =============================================================================
# Input Schemas
# =============================================================================


class DiagnosisInput(BaseModel):
    """Diagnosis as supplied by the caller; sequence is assigned on build."""

    code: str = Field(..., min_length=1, max_length=20, description="Diagnosis code")
    code_system: DiagnosisCodeSystem = DiagnosisCodeSystem.ICD10_CM
    description: str = Field(default="", max_length=500)
    is_principal: bool = False
    is_admitting: bool = False
    present_on_admission: Optional[PresentOnAdmission] = None


class ProcedureInput(BaseModel):
    """Procedure as supplied by the caller; sequence and total are derived."""

    code: str = Field(..., min_length=1, max_length=20, description="Procedure code")
    code_system: ProcedureCodeSystem = ProcedureCodeSystem.CPT
    description: str = Field(default="", max_length=500)
    modifiers: list[str] = Field(default_factory=list)
    service_date: Optional[date] = Field(
        None, description="Defaults to the claim's date of service"
    )
    quantity: int = Field(default=1, ge=1)
    unit_price: Decimal = Field(..., ge=0)
    diagnosis_pointers: list[int] = Field(default_factory=lambda: [1])
    authorization: Optional[str] = Field(
        None, description="Prior authorization reference required for this line"
    )
    rendering_provider_id: Optional[str] = None
    rendering_provider_npi: Optional[str] = None


class AuthorizationInput(BaseModel):
    number: str = Field(..., min_length=1, max_length=50)
    status: AuthorizationStatus = AuthorizationStatus.APPROVED
    effective_date: date
    expiration_date: date
    approved_units: Optional[int] = Field(None, ge=0)
    used_units: Optional[int] = Field(None, ge=0)
    diagnosis_codes: list[str] = Field(default_factory=list)
    procedure_codes: list[str] = Field(default_factory=list)


class ClaimCreate(BaseModel):
    """
    Schema for creating a claim.

    Empty diagnosis/procedure lists are accepted here: the claim is created
    in draft and the validator reports what is missing.
    """

    claim_type: ClaimType = ClaimType.PROFESSIONAL

    # Patient
    patient_id: str = Field(..., min_length=1)
    patient_name: str = Field(..., min_length=1)
    patient_dob: Optional[date] = None
    member_id: str = Field(..., min_length=1)
    group_number: Optional[str] = None

    # Payer / provider
    payer_id: str = Field(..., min_length=1)
    provider_id: str = Field(..., min_length=1)
    provider_name: str = Field(..., min_length=1)
    provider_npi: Optional[str] = Field(None, max_length=10)
    facility_id: Optional[str] = None
    facility_name: Optional[str] = None

    # Encounter
    date_of_service: date
    date_of_service_end: Optional[date] = None
    admission_date: Optional[date] = None
    discharge_date: Optional[date] = None
    place_of_service: str = Field(..., min_length=1, max_length=20)

    diagnoses: list[DiagnosisInput] = Field(default_factory=list)
    procedures: list[ProcedureInput] = Field(default_factory=list)
    authorization: Optional[AuthorizationInput] = None

    @model_validator(mode="after")
    def check_service_window(self) -> "ClaimCreate":
        if self.date_of_service_end and self.date_of_service_end < self.date_of_service:
            raise ValueError("date_of_service_end must not precede date_of_service")
        if (
            self.admission_date
            and self.discharge_date
            and self.discharge_date < self.admission_date
        ):
            raise ValueError("discharge_date must not precede admission_date")
        return self


class ClaimListFilters(BaseModel):
    """Filters and pagination for claim listing."""

    patient_id: Optional[str] = None
    payer_id: Optional[str] = None
    provider_id: Optional[str] = None
    status: Optional[ClaimStatus] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    offset: int = Field(default=0, ge=0)
    limit: Optional[int] = Field(default=None, ge=1)


class AcknowledgementCreate(BaseModel):
    """Clearinghouse acknowledgment of a submitted claim."""

    accepted: bool = True
    response_code: Optional[str] = Field(None, max_length=10)
    clearinghouse: Optional[str] = None
    details: Optional[str] = None


class VoidRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class NoteCreate(BaseModel):
    type: NoteType = NoteType.INTERNAL
    content: str = Field(..., min_length=1, max_length=4000)
    created_by: str = Field(..., min_length=1)


# =============================================================================
# Response Schemas
# =============================================================================


class DiagnosisResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sequence: int
    code: str
    code_system: DiagnosisCodeSystem
    description: str
    is_principal: bool
    is_admitting: bool
    present_on_admission: Optional[PresentOnAdmission] = None


class ProcedureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sequence: int
    code: str
    code_system: ProcedureCodeSystem
    description: str
    modifiers: list[str]
    service_date: date
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    diagnosis_pointers: list[int]
    authorization: Optional[str] = None


class ChargeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    procedure_sequence: int
    charge_code: str
    description: str
    quantity: int
    unit_price: Decimal
    total_charge: Decimal


class AdjustmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    group: AdjustmentGroup
    amount: Decimal
    description: str
    reason: str


class AuthorizationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    number: str
    status: AuthorizationStatus
    effective_date: date
    expiration_date: date
    approved_units: Optional[int] = None
    used_units: Optional[int] = None


class SubmissionEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    timestamp: datetime
    event: str
    status: ClaimStatus
    details: Optional[str] = None
    user_id: Optional[str] = None
    response_code: Optional[str] = None
    clearinghouse: Optional[str] = None


class ClaimNoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: NoteType
    content: str
    created_by: str
    created_at: datetime


class ClaimResponse(BaseModel):
    """Schema for claim response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    claim_number: str
    claim_type: ClaimType
    status: ClaimStatus
    patient_id: str
    patient_name: str
    member_id: str
    payer_id: str
    payer_name: str
    provider_id: str
    provider_name: str
    facility_id: Optional[str] = None
    facility_name: Optional[str] = None
    date_of_service: date
    date_of_service_end: Optional[date] = None
    place_of_service: str
    diagnoses: list[DiagnosisResponse]
    procedures: list[ProcedureResponse]
    charges: list[ChargeResponse]
    total_charges: Decimal
    allowed_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    patient_responsibility: Optional[Decimal] = None
    adjustments: list[AdjustmentResponse]
    authorization: Optional[AuthorizationResponse] = None
    submission_history: list[SubmissionEventResponse]
    notes: list[ClaimNoteResponse]
    created_at: datetime
    updated_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    due_date: Optional[datetime] = None


class ClaimListResponse(BaseModel):
    claims: list[ClaimResponse]
    total: int
    offset: int
    limit: int


class ValidationIssueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    field: Optional[str] = None
    message: str


class ValidationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_valid: bool
    errors: list[ValidationIssueResponse]
    warnings: list[ValidationIssueResponse]
