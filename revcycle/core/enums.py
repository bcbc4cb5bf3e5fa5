"""
Core Enumerations for the Revenue Cycle.

Claim lifecycle, remittance, denial and appeal vocabularies.
"""

from enum import Enum


# =============================================================================
# Claim Enums
# =============================================================================


class ClaimType(str, Enum):
    """Types of healthcare claims."""

    PROFESSIONAL = "professional"  # CMS-1500 style claims
    INSTITUTIONAL = "institutional"  # UB-04 style claims
    DENTAL = "dental"
    PHARMACY = "pharmacy"


class ClaimStatus(str, Enum):
    """Claim lifecycle status.

    State Machine Transitions:
    DRAFT -> READY
    READY -> SUBMITTED
    SUBMITTED -> ACCEPTED | REJECTED
    ACCEPTED -> PENDING | PROCESSING
    PENDING -> PROCESSING
    ACCEPTED | PENDING | PROCESSING -> PAID | PARTIAL_PAID | DENIED
    PARTIAL_PAID -> PAID
    DENIED -> APPEALED
    APPEALED -> PROCESSING | DENIED
    any non-terminal -> VOIDED
    """

    DRAFT = "draft"
    READY = "ready"
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    PENDING = "pending"
    PROCESSING = "processing"
    PAID = "paid"
    PARTIAL_PAID = "partial_paid"
    DENIED = "denied"
    REJECTED = "rejected"
    APPEALED = "appealed"
    VOIDED = "voided"


class DiagnosisCodeSystem(str, Enum):
    """Diagnosis coding systems."""

    ICD10_CM = "ICD-10-CM"
    ICD9_CM = "ICD-9-CM"


class ProcedureCodeSystem(str, Enum):
    """Procedure coding systems."""

    CPT = "CPT"
    HCPCS = "HCPCS"
    ICD10_PCS = "ICD-10-PCS"


class PresentOnAdmission(str, Enum):
    """Present-on-admission indicator for institutional diagnoses."""

    YES = "Y"
    NO = "N"
    UNKNOWN = "U"
    CLINICALLY_UNDETERMINED = "W"


class AuthorizationStatus(str, Enum):
    """Prior authorization status."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    EXPIRED = "expired"


class NoteType(str, Enum):
    """Claim note audience."""

    INTERNAL = "internal"
    PAYER = "payer"
    SYSTEM = "system"


# =============================================================================
# Remittance Enums
# =============================================================================


class AdjustmentGroup(str, Enum):
    """Claim adjustment group code (CAS01)."""

    CO = "CO"  # Contractual Obligations (payer responsibility)
    CR = "CR"  # Corrections and Reversals
    OA = "OA"  # Other Adjustments
    PI = "PI"  # Payor Initiated Reductions
    PR = "PR"  # Patient Responsibility


class PaymentOutcome(str, Enum):
    """Per-claim adjudication outcome on a remittance line."""

    PAID = "paid"
    PARTIAL = "partial"
    DENIED = "denied"


class RemittanceStatus(str, Enum):
    """Remittance batch status."""

    PENDING = "pending"
    PROCESSED = "processed"
    RECONCILED = "reconciled"
    EXCEPTION = "exception"


class PostingResult(str, Enum):
    """What happened to a single remittance line."""

    APPLIED = "applied"
    DUPLICATE = "duplicate"  # Identical outcome already posted
    UNMATCHED = "unmatched"  # Claim number did not resolve
    REJECTED = "rejected"  # Outcome not applicable from the claim's status


# =============================================================================
# Denial & Appeal Enums
# =============================================================================


class DenialCategory(str, Enum):
    """Root-cause classification of a denial."""

    CLINICAL = "clinical"
    ADMINISTRATIVE = "administrative"
    TECHNICAL = "technical"
    AUTHORIZATION = "authorization"


class DenialStatus(str, Enum):
    """Denial work-queue status."""

    NEW = "new"
    IN_REVIEW = "in_review"
    APPEALING = "appealing"
    RESOLVED = "resolved"
    WRITTEN_OFF = "written_off"


class ResolutionType(str, Enum):
    """How a denial was closed."""

    OVERTURNED = "overturned"
    UPHELD = "upheld"
    PARTIAL = "partial"
    WRITTEN_OFF = "written_off"


class AppealLevel(str, Enum):
    """Appeal escalation levels, in order."""

    FIRST = "first"
    SECOND = "second"
    EXTERNAL = "external"
    JUDICIAL = "judicial"


class AppealStatus(str, Enum):
    """Appeal status."""

    PENDING = "pending"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    DENIED = "denied"


class AppealDecision(str, Enum):
    """Payer decision on an appeal."""

    APPROVED = "approved"
    DENIED = "denied"
    PARTIAL = "partial"


# =============================================================================
# Eligibility Enums
# =============================================================================


class CoverageStatus(str, Enum):
    """Eligibility coverage status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"


class SubscriberRelationship(str, Enum):
    """Patient relationship to the subscriber."""

    SELF = "self"
    SPOUSE = "spouse"
    CHILD = "child"
    OTHER = "other"


class NetworkStatus(str, Enum):
    """Network status for a benefit line."""

    IN_NETWORK = "in_network"
    OUT_OF_NETWORK = "out_of_network"


class CoverageLevel(str, Enum):
    """Benefit coverage level."""

    INDIVIDUAL = "individual"
    FAMILY = "family"


class EligibilitySource(str, Enum):
    """Where an eligibility answer came from."""

    REALTIME = "realtime"
    BATCH = "batch"
    MANUAL = "manual"
