"""
Denial & Appeal Manager.

Provides:
- Denial categorization from adjustment codes
- Denial work items with a fixed appeal filing window
- Appeal filing and decisions, propagated to the parent claim

Denials are created from ClaimOutcomePosted events; the manager never
touches remittance posting directly.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Optional
from uuid import uuid4

from revcycle.core.config import RevenueCycleSettings, get_settings
from revcycle.core.enums import (
    AdjustmentGroup,
    AppealDecision,
    AppealLevel,
    AppealStatus,
    DenialCategory,
    DenialStatus,
    ResolutionType,
)
from revcycle.models.claim import Adjustment, Claim, utc_now
from revcycle.models.denial import (
    Appeal,
    AppealResponse,
    DenialManagement,
    DenialResolution,
)
from revcycle.services.claim_state_machine import TransitionEvent
from revcycle.services.claim_store import ClaimStore
from revcycle.services.events import ClaimOutcomePosted
from revcycle.services.exceptions import (
    AppealConflictError,
    AppealNotFoundError,
    ClaimNotFoundError,
    DenialNotFoundError,
    PreconditionFailedError,
)
from revcycle.services.reference_catalog import ReferenceCatalog, get_reference_catalog
from revcycle.services.submission_tracker import SubmissionTracker

logger = logging.getLogger(__name__)


def _qualified_code(adjustment: Adjustment) -> str:
    """CARC code with its group prefix, e.g. "50" in group CO -> "CO-50"."""
    if "-" in adjustment.code:
        return adjustment.code
    return f"{adjustment.group.value}-{adjustment.code}"


def categorize_denial(
    adjustments: Iterable[Adjustment],
    catalog: Optional[ReferenceCatalog] = None,
) -> DenialCategory:
    """
    Map adjustment codes to a denial category.

    Categories are checked in catalog order; unknown codes fall through to
    technical.
    """
    catalog = catalog or get_reference_catalog()
    codes = {_qualified_code(a) for a in adjustments}
    for category, category_codes in catalog.denial_categories:
        if codes & category_codes:
            return category
    return DenialCategory.TECHNICAL


class DenialManager:
    """Tracks denials and their appeals."""

    def __init__(
        self,
        store: ClaimStore,
        tracker: SubmissionTracker,
        catalog: Optional[ReferenceCatalog] = None,
        settings: Optional[RevenueCycleSettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.tracker = tracker
        self.catalog = catalog or get_reference_catalog()
        self.settings = settings or get_settings()
        self.clock = clock

    # =========================================================================
    # Denial Creation
    # =========================================================================

    async def handle_outcome_posted(self, event: ClaimOutcomePosted) -> None:
        """Event handler: open a denial for each denied posting."""
        if not event.is_denial:
            return

        claim = self.store.get_claim(event.claim_id)
        if claim is None:
            raise ClaimNotFoundError(event.claim_id)

        if any(not d.is_closed for d in self.store.denials_for_claim(claim.id)):
            logger.info(
                f"Claim {claim.claim_number} already has an open denial, "
                f"remittance {event.remittance_number} not re-opened"
            )
            return

        self.create_denial(
            claim,
            event.adjustments,
            denied_at=event.occurred_at,
            denial_reason=event.denial_reason,
        )

    def create_denial(
        self,
        claim: Claim,
        adjustments: Iterable[Adjustment],
        denied_at: Optional[datetime] = None,
        denial_reason: Optional[str] = None,
    ) -> DenialManagement:
        """
        Create a denial work item for a denied claim.

        Only payer-responsibility (CO) codes are kept as denial codes; every
        adjustment contributes a human-readable reason.
        """
        adjustments = tuple(adjustments)
        denied_at = denied_at or self.clock()

        codes = tuple(
            _qualified_code(a) for a in adjustments if a.group == AdjustmentGroup.CO
        )
        reasons = [
            self.catalog.describe_denial_code(_qualified_code(a)) or a.description or a.code
            for a in adjustments
        ]
        if denial_reason and denial_reason not in reasons:
            reasons.append(denial_reason)

        denial = DenialManagement(
            id=str(uuid4()),
            claim_id=claim.id,
            claim_number=claim.claim_number,
            denial_date=denied_at,
            denial_codes=codes,
            denial_reasons=tuple(reasons),
            category=categorize_denial(adjustments, self.catalog),
            appeal_deadline=denied_at
            + timedelta(days=self.settings.APPEAL_FILING_WINDOW_DAYS),
        )
        self.store.add_denial(denial)

        logger.info(
            f"Denial created for claim {claim.claim_number}: "
            f"category={denial.category.value}, codes={list(codes)}"
        )
        return denial

    # =========================================================================
    # Queries
    # =========================================================================

    def get_denial(self, denial_id: str) -> DenialManagement:
        denial = self.store.get_denial(denial_id)
        if denial is None:
            raise DenialNotFoundError(denial_id)
        return denial

    def list_denials(
        self,
        status: Optional[DenialStatus] = None,
        category: Optional[DenialCategory] = None,
    ) -> list[DenialManagement]:
        """Denials, most recent first."""
        denials = [
            d
            for d in self.store.list_denials()
            if (status is None or d.status == status)
            and (category is None or d.category == category)
        ]
        return sorted(denials, key=lambda d: d.denial_date, reverse=True)

    # =========================================================================
    # Work Queue
    # =========================================================================

    def start_review(
        self, denial_id: str, assigned_to: Optional[str] = None
    ) -> DenialManagement:
        denial = self.get_denial(denial_id)
        if denial.status != DenialStatus.NEW:
            raise PreconditionFailedError(
                f"Denial {denial_id} cannot enter review from {denial.status.value}"
            )
        denial.status = DenialStatus.IN_REVIEW
        if assigned_to:
            denial.assigned_to = assigned_to
        return denial

    def write_off_denial(
        self,
        denial_id: str,
        amount: Optional[Decimal] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DenialManagement:
        """Close a denial without further appeal."""
        denial = self.get_denial(denial_id)
        if denial.is_closed:
            raise PreconditionFailedError(
                f"Denial {denial_id} is already {denial.status.value}"
            )
        if denial.open_appeal() is not None:
            raise AppealConflictError(
                f"Denial {denial_id} has an open appeal and cannot be written off"
            )

        if amount is None:
            claim = self.store.get_claim(denial.claim_id)
            amount = claim.outstanding_balance if claim else None

        denial.status = DenialStatus.WRITTEN_OFF
        denial.resolution = DenialResolution(
            type=ResolutionType.WRITTEN_OFF,
            date=now or self.clock(),
            amount=amount,
            notes=notes,
        )
        logger.info(f"Denial {denial_id} written off: {amount}")
        return denial

    # =========================================================================
    # Appeals
    # =========================================================================

    async def file_appeal(
        self,
        denial_id: str,
        level: AppealLevel,
        supporting_docs: Iterable[str],
        reason: str,
        now: Optional[datetime] = None,
    ) -> DenialManagement:
        """
        File an appeal against a denial.

        Transitions the parent claim DENIED -> APPEALED.

        Raises:
            DenialNotFoundError: if the denial id does not resolve
            AppealConflictError: if an appeal is still awaiting a decision
            InvalidTransitionError: if the claim is not in denied status
        """
        denial = self.get_denial(denial_id)
        if denial.is_closed:
            raise PreconditionFailedError(
                f"Denial {denial_id} is already {denial.status.value}"
            )
        open_appeal = denial.open_appeal()
        if open_appeal is not None:
            raise AppealConflictError(
                f"Denial {denial_id} already has an open {open_appeal.level.value} level appeal"
            )

        claim = self._get_claim(denial)
        now = now or self.clock()

        async with self.store.lock_for(claim.id):
            self.tracker.transition(
                claim,
                TransitionEvent.APPEAL,
                f"Appeal filed: {level.value} level",
                now=now,
                details=reason,
            )
            denial.appeals.append(
                Appeal(
                    id=str(uuid4()),
                    level=level,
                    filed_date=now,
                    deadline=now + timedelta(days=self.settings.APPEAL_RESPONSE_WINDOW_DAYS),
                    reason=reason,
                    supporting_docs=tuple(supporting_docs),
                )
            )
            denial.status = DenialStatus.APPEALING

        logger.info(f"Appeal filed for claim {claim.claim_number}: {level.value} level")
        return denial

    async def record_appeal_decision(
        self,
        denial_id: str,
        appeal_id: str,
        decision: AppealDecision,
        details: str = "",
        now: Optional[datetime] = None,
    ) -> DenialManagement:
        """
        Apply the payer's decision on an appeal.

        Approved or partial: the denial is resolved and the claim goes back
        to processing for re-adjudication. Denied: the claim returns to
        denied and the denial goes back to review for the next level; a
        denied judicial appeal resolves the denial as upheld.
        """
        denial = self.get_denial(denial_id)
        appeal = denial.get_appeal(appeal_id)
        if appeal is None:
            raise AppealNotFoundError(appeal_id)
        if not appeal.is_open:
            raise AppealConflictError(
                f"Appeal {appeal_id} was already decided: {appeal.status.value}"
            )

        claim = self._get_claim(denial)
        now = now or self.clock()

        async with self.store.lock_for(claim.id):
            if decision == AppealDecision.DENIED:
                self.tracker.transition(
                    claim,
                    TransitionEvent.APPEAL_DENIED,
                    f"Appeal denied: {appeal.level.value} level",
                    now=now,
                    details=details or None,
                )
                appeal.status = AppealStatus.DENIED
                if appeal.level == AppealLevel.JUDICIAL:
                    denial.status = DenialStatus.RESOLVED
                    denial.resolution = DenialResolution(
                        type=ResolutionType.UPHELD, date=now, notes=details or None
                    )
                else:
                    denial.status = DenialStatus.IN_REVIEW
            else:
                self.tracker.transition(
                    claim,
                    TransitionEvent.START_PROCESSING,
                    f"Appeal {decision.value}: {appeal.level.value} level",
                    now=now,
                    details=details or None,
                )
                appeal.status = AppealStatus.APPROVED
                denial.status = DenialStatus.RESOLVED
                denial.resolution = DenialResolution(
                    type=(
                        ResolutionType.OVERTURNED
                        if decision == AppealDecision.APPROVED
                        else ResolutionType.PARTIAL
                    ),
                    date=now,
                    notes=details or None,
                )

            appeal.response = AppealResponse(
                received_date=now, decision=decision, details=details
            )

        logger.info(
            f"Appeal {appeal.level.value} level for claim {claim.claim_number} "
            f"decided: {decision.value}"
        )
        return denial

    def _get_claim(self, denial: DenialManagement) -> Claim:
        claim = self.store.get_claim(denial.claim_id)
        if claim is None:
            raise ClaimNotFoundError(denial.claim_id)
        return claim
