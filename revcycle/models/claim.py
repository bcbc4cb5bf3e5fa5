"""
Claim aggregate.

The claim owns its diagnoses, procedures, charges, adjustments, notes and
submission history. Clinical content is immutable once built; financial
fields are populated only by remittance posting.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

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


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Clinical Content
# =============================================================================


@dataclass(frozen=True)
class Diagnosis:
    """Diagnosis entry, sequenced in input order."""

    sequence: int
    code: str
    code_system: DiagnosisCodeSystem = DiagnosisCodeSystem.ICD10_CM
    description: str = ""
    is_principal: bool = False
    is_admitting: bool = False
    present_on_admission: Optional[PresentOnAdmission] = None


@dataclass(frozen=True)
class Procedure:
    """
    Procedure line.

    `authorization` holds the prior authorization reference the payer requires
    for this line; a non-empty value means the claim must carry an
    authorization before it can pass validation.
    """

    sequence: int
    code: str
    quantity: int
    unit_price: Decimal
    service_date: date
    code_system: ProcedureCodeSystem = ProcedureCodeSystem.CPT
    description: str = ""
    modifiers: tuple[str, ...] = ()
    diagnosis_pointers: tuple[int, ...] = (1,)
    authorization: Optional[str] = None
    rendering_provider_id: Optional[str] = None
    rendering_provider_npi: Optional[str] = None

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def requires_authorization(self) -> bool:
        return bool(self.authorization)


@dataclass(frozen=True)
class Charge:
    """Line-item billing entry mirroring one procedure."""

    id: str
    procedure_sequence: int
    charge_code: str
    description: str
    quantity: int
    unit_price: Decimal
    total_charge: Decimal
    revenue_code: Optional[str] = None
    department: Optional[str] = None


@dataclass(frozen=True)
class Adjustment:
    """Payer-applied adjustment (CARC code within a group)."""

    code: str
    group: AdjustmentGroup
    amount: Decimal
    description: str = ""
    reason: str = ""


@dataclass(frozen=True)
class Authorization:
    """Prior authorization attached to a claim."""

    number: str
    effective_date: date
    expiration_date: date
    status: AuthorizationStatus = AuthorizationStatus.APPROVED
    approved_units: Optional[int] = None
    used_units: Optional[int] = None
    diagnosis_codes: tuple[str, ...] = ()
    procedure_codes: tuple[str, ...] = ()

    def is_expired(self, as_of: datetime) -> bool:
        """The expiration date is valid through the end of that day."""
        return self.expiration_date < as_of.date()


# =============================================================================
# Audit Trail
# =============================================================================


@dataclass(frozen=True)
class SubmissionEvent:
    """One entry in the claim's append-only lifecycle history."""

    timestamp: datetime
    event: str
    status: ClaimStatus
    details: Optional[str] = None
    user_id: Optional[str] = None
    response_code: Optional[str] = None
    clearinghouse: Optional[str] = None


@dataclass(frozen=True)
class ClaimNote:
    id: str
    type: NoteType
    content: str
    created_by: str
    created_at: datetime


# =============================================================================
# Claim
# =============================================================================


@dataclass
class Claim:
    """
    Claim aggregate.

    total_charges is derived from the procedure tuple at construction and
    exposed read-only. The submission history can only be appended to via
    record_event().
    """

    id: str
    claim_number: str
    claim_type: ClaimType

    # Patient
    patient_id: str
    patient_name: str
    member_id: str

    # Payer
    payer_id: str
    payer_name: str

    # Rendering provider
    provider_id: str
    provider_name: str

    # Encounter
    date_of_service: date
    place_of_service: str
    diagnoses: tuple[Diagnosis, ...]
    procedures: tuple[Procedure, ...]
    charges: tuple[Charge, ...]

    created_at: datetime = field(default_factory=utc_now)

    patient_dob: Optional[date] = None
    group_number: Optional[str] = None
    provider_npi: Optional[str] = None
    facility_id: Optional[str] = None
    facility_name: Optional[str] = None
    date_of_service_end: Optional[date] = None
    admission_date: Optional[date] = None
    discharge_date: Optional[date] = None
    authorization: Optional[Authorization] = None

    status: ClaimStatus = ClaimStatus.DRAFT

    # Populated by remittance posting only
    allowed_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    patient_responsibility: Optional[Decimal] = None
    adjustments: tuple[Adjustment, ...] = ()
    posting_keys: set[str] = field(default_factory=set)

    notes: list[ClaimNote] = field(default_factory=list)

    updated_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    due_date: Optional[datetime] = None

    _total_charges: Decimal = field(init=False, repr=False)
    _history: list[SubmissionEvent] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._total_charges = sum(
            (p.total_price for p in self.procedures), Decimal("0")
        )
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def total_charges(self) -> Decimal:
        return self._total_charges

    @property
    def submission_history(self) -> tuple[SubmissionEvent, ...]:
        return tuple(self._history)

    def record_event(self, event: SubmissionEvent) -> None:
        """Append a lifecycle event and stamp the claim as updated."""
        self._history.append(event)
        self.updated_at = event.timestamp

    # =========================================================================
    # Derived Views
    # =========================================================================

    @property
    def principal_diagnoses(self) -> list[Diagnosis]:
        return [d for d in self.diagnoses if d.is_principal]

    @property
    def requires_authorization(self) -> bool:
        return any(p.requires_authorization for p in self.procedures)

    @property
    def total_adjustments(self) -> Decimal:
        return sum((a.amount for a in self.adjustments), Decimal("0"))

    @property
    def outstanding_balance(self) -> Decimal:
        return self.total_charges - (self.paid_amount or Decimal("0"))

    @property
    def aging_start(self) -> datetime:
        """Start of the receivable clock: submission, else creation."""
        return self.submitted_at or self.created_at

    def has_event_matching(self, *fragments: str) -> bool:
        """True when any history event description contains a fragment."""
        lowered = [f.lower() for f in fragments]
        return any(
            any(f in e.event.lower() for f in lowered) for e in self._history
        )
