"""
Revenue cycle service exceptions.

NotFoundError: the caller supplied an id that does not resolve.
PreconditionFailedError: the aggregate is not in a state that allows the
operation. Validation outcomes are returned as data and never raised.
"""

from typing import Optional


class RevenueCycleError(Exception):
    """Base exception for revenue cycle errors."""

    pass


# =============================================================================
# Not Found
# =============================================================================


class NotFoundError(RevenueCycleError):
    """Raised when a referenced entity does not exist."""

    entity = "Resource"

    def __init__(self, identifier: str, message: Optional[str] = None):
        super().__init__(message or f"{self.entity} not found: {identifier}")
        self.identifier = identifier


class PayerNotFoundError(NotFoundError):
    entity = "Payer"


class ClaimNotFoundError(NotFoundError):
    entity = "Claim"


class DenialNotFoundError(NotFoundError):
    entity = "Denial"


class AppealNotFoundError(NotFoundError):
    entity = "Appeal"


class RemittanceNotFoundError(NotFoundError):
    entity = "Remittance"


# =============================================================================
# Precondition Failed
# =============================================================================


class PreconditionFailedError(RevenueCycleError):
    """Raised when an operation is attempted from the wrong state."""

    pass


class InvalidTransitionError(PreconditionFailedError):
    """Raised when a status transition is not in the claim state graph."""

    def __init__(self, claim_number: str, from_status: str, event: str):
        super().__init__(
            f"Invalid transition for claim {claim_number}: {from_status} + {event}"
        )
        self.claim_number = claim_number
        self.from_status = from_status
        self.event = event


class ClaimNotReadyError(PreconditionFailedError):
    """Raised when submission is attempted on a claim that is not ready."""

    def __init__(self, claim_number: str, status: str):
        super().__init__(
            f"Claim {claim_number} must be validated before submission (status: {status})"
        )
        self.claim_number = claim_number
        self.status = status


class AppealConflictError(PreconditionFailedError):
    """Raised when an appeal is still open or was already decided."""

    pass
