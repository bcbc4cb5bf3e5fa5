"""
Domain Models for the Revenue Cycle.

This module exports the claim, remittance and denial aggregates.
"""

from revcycle.models.claim import (
    Adjustment,
    Authorization,
    Charge,
    Claim,
    ClaimNote,
    Diagnosis,
    Procedure,
    SubmissionEvent,
)
from revcycle.models.remittance import (
    ClaimPayment,
    RemittanceAdvice,
    RemittanceException,
)
from revcycle.models.denial import (
    Appeal,
    AppealResponse,
    DenialManagement,
    DenialResolution,
)

__all__ = [
    "Adjustment",
    "Authorization",
    "Charge",
    "Claim",
    "ClaimNote",
    "Diagnosis",
    "Procedure",
    "SubmissionEvent",
    "ClaimPayment",
    "RemittanceAdvice",
    "RemittanceException",
    "Appeal",
    "AppealResponse",
    "DenialManagement",
    "DenialResolution",
]
