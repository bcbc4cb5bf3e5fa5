"""
Services Layer for the Revenue Cycle.

Exports the claim lifecycle, remittance, denial and analytics services.
"""

from revcycle.services.claim_builder import ClaimBuilder, ClaimNumberGenerator
from revcycle.services.claim_state_machine import (
    ClaimStateMachine,
    TransitionEvent,
    get_claim_state_machine,
)
from revcycle.services.claim_store import ClaimStore
from revcycle.services.claim_validation import (
    ClaimValidator,
    ValidationConfig,
    ValidationResult,
    get_claim_validator,
)
from revcycle.services.denial_manager import DenialManager, categorize_denial
from revcycle.services.eligibility import (
    DemoEligibilityGateway,
    EligibilityGateway,
    EligibilityService,
)
from revcycle.services.events import ClaimOutcomePosted, DomainEvent, EventBus
from revcycle.services.exceptions import (
    ClaimNotFoundError,
    ClaimNotReadyError,
    DenialNotFoundError,
    InvalidTransitionError,
    NotFoundError,
    PayerNotFoundError,
    PreconditionFailedError,
    RevenueCycleError,
)
from revcycle.services.reference_catalog import ReferenceCatalog, get_reference_catalog
from revcycle.services.remittance_processor import RemittanceProcessor
from revcycle.services.revenue_analytics import (
    RevenueAnalyticsEngine,
    compute_revenue_metrics,
)
from revcycle.services.revenue_cycle_service import (
    RevenueCycleService,
    get_revenue_cycle_service,
)
from revcycle.services.submission_tracker import SubmissionTracker

__all__ = [
    # Claims
    "ClaimBuilder",
    "ClaimNumberGenerator",
    "ClaimStateMachine",
    "TransitionEvent",
    "get_claim_state_machine",
    "ClaimStore",
    "ClaimValidator",
    "ValidationConfig",
    "ValidationResult",
    "get_claim_validator",
    "SubmissionTracker",
    # Remittance & denials
    "RemittanceProcessor",
    "DenialManager",
    "categorize_denial",
    "ClaimOutcomePosted",
    "DomainEvent",
    "EventBus",
    # Eligibility
    "EligibilityGateway",
    "DemoEligibilityGateway",
    "EligibilityService",
    # Reference data
    "ReferenceCatalog",
    "get_reference_catalog",
    # Analytics
    "RevenueAnalyticsEngine",
    "compute_revenue_metrics",
    # Facade
    "RevenueCycleService",
    "get_revenue_cycle_service",
    # Errors
    "RevenueCycleError",
    "NotFoundError",
    "PayerNotFoundError",
    "ClaimNotFoundError",
    "DenialNotFoundError",
    "PreconditionFailedError",
    "ClaimNotReadyError",
    "InvalidTransitionError",
]
