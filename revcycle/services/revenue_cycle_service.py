"""
Revenue Cycle Service.

Provides:
- Claim creation, validation, submission and payer progress events
- Eligibility verification
- Remittance posting
- Denial and appeal workflow
- Revenue metrics

Composes the builder, validator, tracker, remittance processor, denial
manager and analytics engine over one claim store. Every claim mutation runs
under that claim's lock.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional
from uuid import uuid4

from revcycle.core.config import RevenueCycleSettings, get_settings
from revcycle.core.enums import (
    AppealDecision,
    AppealLevel,
    ClaimStatus,
    DenialCategory,
    DenialStatus,
)
from revcycle.models.claim import Claim, ClaimNote, utc_now
from revcycle.models.denial import DenialManagement
from revcycle.models.remittance import RemittanceAdvice
from revcycle.schemas.claim import (
    AcknowledgementCreate,
    ClaimCreate,
    ClaimListFilters,
    NoteCreate,
)
from revcycle.schemas.eligibility import Eligibility, EligibilityRequest
from revcycle.schemas.remittance import RemittanceCreate
from revcycle.schemas.revenue import RevenueMetrics, RevenueMetricsQuery
from revcycle.services.claim_builder import ClaimBuilder, ClaimNumberGenerator
from revcycle.services.claim_state_machine import ClaimStateMachine, get_claim_state_machine
from revcycle.services.claim_store import ClaimStore
from revcycle.services.claim_validation import ClaimValidator, ValidationConfig, ValidationResult
from revcycle.services.denial_manager import DenialManager
from revcycle.services.eligibility import EligibilityGateway, EligibilityService
from revcycle.services.events import ClaimOutcomePosted, EventBus
from revcycle.services.exceptions import ClaimNotFoundError, RemittanceNotFoundError
from revcycle.services.reference_catalog import ReferenceCatalog, get_reference_catalog
from revcycle.services.remittance_processor import RemittanceProcessor
from revcycle.services.revenue_analytics import RevenueAnalyticsEngine
from revcycle.services.submission_tracker import SubmissionTracker

logger = logging.getLogger(__name__)


class RevenueCycleService:
    """Entry point for claim lifecycle and revenue operations."""

    def __init__(
        self,
        store: Optional[ClaimStore] = None,
        catalog: Optional[ReferenceCatalog] = None,
        settings: Optional[RevenueCycleSettings] = None,
        state_machine: Optional[ClaimStateMachine] = None,
        eligibility_gateway: Optional[EligibilityGateway] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store or ClaimStore()
        self.catalog = catalog or get_reference_catalog()
        self.settings = settings or get_settings()
        self.event_bus = event_bus or EventBus()
        self.clock = clock

        self.builder = ClaimBuilder(
            catalog=self.catalog, number_generator=ClaimNumberGenerator(), clock=clock
        )
        self.validator = ClaimValidator(ValidationConfig.from_settings(self.settings))
        self.tracker = SubmissionTracker(
            state_machine=state_machine or get_claim_state_machine(),
            settings=self.settings,
            clock=clock,
        )
        self.remittances = RemittanceProcessor(
            store=self.store,
            tracker=self.tracker,
            event_bus=self.event_bus,
            catalog=self.catalog,
            clock=clock,
        )
        self.denials = DenialManager(
            store=self.store,
            tracker=self.tracker,
            catalog=self.catalog,
            settings=self.settings,
            clock=clock,
        )
        self.eligibility = EligibilityService(
            gateway=eligibility_gateway, catalog=self.catalog, clock=clock
        )
        self.analytics = RevenueAnalyticsEngine(store=self.store, clock=clock)

        self.event_bus.subscribe(ClaimOutcomePosted, self.denials.handle_outcome_posted)

    # =========================================================================
    # Claims
    # =========================================================================

    def create_claim(self, data: ClaimCreate) -> Claim:
        """
        Create a draft claim.

        Raises:
            PayerNotFoundError: if the payer id does not resolve
        """
        claim = self.builder.build(data)
        self.tracker.record_creation(claim)
        self.store.add_claim(claim)

        logger.info(
            f"Created claim {claim.claim_number} for patient {claim.patient_id}: "
            f"{claim.total_charges}"
        )
        return claim

    def get_claim(self, claim_id: str) -> Claim:
        claim = self.store.get_claim(claim_id)
        if claim is None:
            raise ClaimNotFoundError(claim_id)
        return claim

    def list_claims(self, filters: Optional[ClaimListFilters] = None) -> tuple[list[Claim], int]:
        """
        List claims with filters and pagination, newest created first.

        Returns:
            Tuple of (claims page, total matching count)
        """
        filters = filters or ClaimListFilters()
        limit = self.page_limit(filters.limit)

        matching = [
            c
            for c in self.store.list_claims()
            if (filters.patient_id is None or c.patient_id == filters.patient_id)
            and (filters.payer_id is None or c.payer_id == filters.payer_id)
            and (filters.provider_id is None or c.provider_id == filters.provider_id)
            and (filters.status is None or c.status == filters.status)
            and (filters.from_date is None or c.date_of_service >= filters.from_date)
            and (filters.to_date is None or c.date_of_service <= filters.to_date)
        ]
        matching.sort(key=lambda c: (c.created_at, c.claim_number), reverse=True)

        return matching[filters.offset:filters.offset + limit], len(matching)

    def page_limit(self, requested: Optional[int]) -> int:
        return min(requested or self.settings.DEFAULT_PAGE_LIMIT, self.settings.MAX_PAGE_LIMIT)

    async def validate_claim(self, claim_id: str) -> ValidationResult:
        """
        Validate a claim; a clean draft is promoted to ready.

        Validation issues are returned, never raised.
        """
        claim = self.get_claim(claim_id)
        async with self.store.lock_for(claim.id):
            now = self.clock()
            result = self.validator.validate(claim, now)
            if result.is_valid and claim.status == ClaimStatus.DRAFT:
                self.tracker.mark_ready(claim, now)
        return result

    async def submit_claim(
        self,
        claim_id: str,
        clearinghouse: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Claim:
        """
        Submit a ready claim.

        Raises:
            ClaimNotFoundError: if the claim id does not resolve
            ClaimNotReadyError: if the claim is not in ready status
        """
        claim = self.get_claim(claim_id)
        async with self.store.lock_for(claim.id):
            self.tracker.submit(claim, clearinghouse=clearinghouse, user_id=user_id)
        return claim

    async def acknowledge_claim(self, claim_id: str, data: AcknowledgementCreate) -> Claim:
        """Apply a clearinghouse acknowledgment (accept or reject)."""
        claim = self.get_claim(claim_id)
        async with self.store.lock_for(claim.id):
            self.tracker.acknowledge(
                claim,
                accepted=data.accepted,
                response_code=data.response_code,
                clearinghouse=data.clearinghouse,
                details=data.details,
            )
        return claim

    async def mark_pending(self, claim_id: str, details: Optional[str] = None) -> Claim:
        claim = self.get_claim(claim_id)
        async with self.store.lock_for(claim.id):
            self.tracker.mark_pending(claim, details=details)
        return claim

    async def mark_processing(self, claim_id: str, details: Optional[str] = None) -> Claim:
        claim = self.get_claim(claim_id)
        async with self.store.lock_for(claim.id):
            self.tracker.mark_processing(claim, details=details)
        return claim

    async def void_claim(
        self, claim_id: str, reason: str, user_id: Optional[str] = None
    ) -> Claim:
        claim = self.get_claim(claim_id)
        async with self.store.lock_for(claim.id):
            self.tracker.void(claim, reason=reason, user_id=user_id)
        return claim

    async def add_note(self, claim_id: str, data: NoteCreate) -> ClaimNote:
        claim = self.get_claim(claim_id)
        async with self.store.lock_for(claim.id):
            note = ClaimNote(
                id=str(uuid4()),
                type=data.type,
                content=data.content,
                created_by=data.created_by,
                created_at=self.clock(),
            )
            claim.notes.append(note)
            claim.updated_at = note.created_at
        return note

    # =========================================================================
    # Eligibility
    # =========================================================================

    async def check_eligibility(self, request: EligibilityRequest) -> Eligibility:
        return await self.eligibility.check_eligibility(request)

    # =========================================================================
    # Remittances
    # =========================================================================

    async def process_remittance(self, data: RemittanceCreate) -> RemittanceAdvice:
        return await self.remittances.process(data)

    def get_remittance(self, remittance_id: str) -> RemittanceAdvice:
        remittance = self.store.get_remittance(remittance_id)
        if remittance is None:
            raise RemittanceNotFoundError(remittance_id)
        return remittance

    def list_remittances(self, payer_id: Optional[str] = None) -> list[RemittanceAdvice]:
        """Remittances, most recently received first."""
        remittances = [
            r
            for r in self.store.list_remittances()
            if payer_id is None or r.payer_id == payer_id
        ]
        return sorted(remittances, key=lambda r: r.received_at, reverse=True)

    # =========================================================================
    # Denials & Appeals
    # =========================================================================

    def list_denials(
        self,
        status: Optional[DenialStatus] = None,
        category: Optional[DenialCategory] = None,
    ) -> list[DenialManagement]:
        return self.denials.list_denials(status=status, category=category)

    def get_denial(self, denial_id: str) -> DenialManagement:
        return self.denials.get_denial(denial_id)

    def start_review(self, denial_id: str, assigned_to: Optional[str] = None) -> DenialManagement:
        return self.denials.start_review(denial_id, assigned_to=assigned_to)

    def write_off_denial(
        self,
        denial_id: str,
        amount: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> DenialManagement:
        return self.denials.write_off_denial(denial_id, amount=amount, notes=notes)

    async def file_appeal(
        self,
        denial_id: str,
        level: AppealLevel,
        supporting_docs: list[str],
        reason: str,
    ) -> DenialManagement:
        return await self.denials.file_appeal(denial_id, level, supporting_docs, reason)

    async def record_appeal_decision(
        self,
        denial_id: str,
        appeal_id: str,
        decision: AppealDecision,
        details: str = "",
    ) -> DenialManagement:
        return await self.denials.record_appeal_decision(
            denial_id, appeal_id, decision, details
        )

    # =========================================================================
    # Analytics
    # =========================================================================

    def get_revenue_metrics(self, query: RevenueMetricsQuery) -> RevenueMetrics:
        return self.analytics.get_revenue_metrics(query)


# =============================================================================
# Singleton Instance
# =============================================================================


_service: Optional[RevenueCycleService] = None


def get_revenue_cycle_service() -> RevenueCycleService:
    """Get the process-wide revenue cycle service."""
    global _service
    if _service is None:
        _service = RevenueCycleService()
    return _service
