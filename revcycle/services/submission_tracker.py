"""
Submission Tracker.

Applies status transitions to a claim and appends the matching audit event.
Every status change in the system goes through transition(), so the history
always records the status the claim held after each step.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from revcycle.core.config import RevenueCycleSettings, get_settings
from revcycle.core.enums import ClaimStatus
from revcycle.models.claim import Claim, SubmissionEvent, utc_now
from revcycle.services.claim_state_machine import (
    ClaimStateMachine,
    TransitionEvent,
    TransitionRequest,
    get_claim_state_machine,
)
from revcycle.services.exceptions import ClaimNotReadyError, InvalidTransitionError

logger = logging.getLogger(__name__)

ACCEPTED_RESPONSE_CODE = "A1"
REJECTED_RESPONSE_CODE = "R1"


class SubmissionTracker:
    """Drives claims through submission and records lifecycle events."""

    def __init__(
        self,
        state_machine: Optional[ClaimStateMachine] = None,
        settings: Optional[RevenueCycleSettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.state_machine = state_machine or get_claim_state_machine()
        self.settings = settings or get_settings()
        self.clock = clock

    def transition(
        self,
        claim: Claim,
        event: TransitionEvent,
        description: str,
        *,
        now: Optional[datetime] = None,
        reason: Optional[str] = None,
        details: Optional[str] = None,
        user_id: Optional[str] = None,
        response_code: Optional[str] = None,
        clearinghouse: Optional[str] = None,
    ) -> SubmissionEvent:
        """
        Move the claim along the state graph and append a history event.

        Raises:
            InvalidTransitionError: if the event is not allowed from the
                claim's current status
        """
        now = now or self.clock()
        request = TransitionRequest(
            claim_number=claim.claim_number,
            current_status=claim.status,
            event=event,
            triggered_by=user_id,
            reason=reason,
            requested_at=now,
        )
        outcome = self.state_machine.apply(request)
        if not outcome.allowed:
            raise InvalidTransitionError(claim.claim_number, claim.status.value, event.value)

        claim.status = outcome.to_status
        entry = SubmissionEvent(
            timestamp=now,
            event=description,
            status=claim.status,
            details=details or reason,
            user_id=user_id,
            response_code=response_code,
            clearinghouse=clearinghouse,
        )
        claim.record_event(entry)
        return entry

    def record_creation(self, claim: Claim) -> SubmissionEvent:
        """Seed the history of a newly built claim."""
        entry = SubmissionEvent(
            timestamp=claim.created_at,
            event="Claim created",
            status=claim.status,
        )
        claim.record_event(entry)
        return entry

    def mark_ready(self, claim: Claim, now: Optional[datetime] = None) -> SubmissionEvent:
        return self.transition(claim, TransitionEvent.VALIDATE, "Claim validated", now=now)

    def submit(
        self,
        claim: Claim,
        now: Optional[datetime] = None,
        clearinghouse: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Claim:
        """
        Submit a validated claim.

        Transitions: READY -> SUBMITTED and sets the response due date.
        """
        if claim.status != ClaimStatus.READY:
            raise ClaimNotReadyError(claim.claim_number, claim.status.value)

        now = now or self.clock()
        self.transition(
            claim,
            TransitionEvent.SUBMIT,
            "Claim submitted",
            now=now,
            user_id=user_id,
            clearinghouse=clearinghouse or self.settings.DEFAULT_CLEARINGHOUSE,
        )
        claim.submitted_at = now
        claim.due_date = now + timedelta(days=self.settings.CLAIM_RESPONSE_WINDOW_DAYS)

        logger.info(f"Claim {claim.claim_number} submitted, due {claim.due_date.isoformat()}")
        return claim

    def acknowledge(
        self,
        claim: Claim,
        accepted: bool,
        response_code: Optional[str] = None,
        clearinghouse: Optional[str] = None,
        details: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SubmissionEvent:
        """Record the clearinghouse acknowledgment for a submitted claim."""
        clearinghouse = clearinghouse or self.settings.DEFAULT_CLEARINGHOUSE
        if accepted:
            return self.transition(
                claim,
                TransitionEvent.ACCEPT,
                "Claim accepted by clearinghouse",
                now=now,
                details=details,
                response_code=response_code or ACCEPTED_RESPONSE_CODE,
                clearinghouse=clearinghouse,
            )
        return self.transition(
            claim,
            TransitionEvent.REJECT,
            "Claim rejected by clearinghouse",
            now=now,
            reason=details or "Rejected by clearinghouse",
            response_code=response_code or REJECTED_RESPONSE_CODE,
            clearinghouse=clearinghouse,
        )

    def mark_pending(self, claim: Claim, details: Optional[str] = None) -> SubmissionEvent:
        return self.transition(
            claim, TransitionEvent.QUEUE, "Claim pending payer review", details=details
        )

    def mark_processing(
        self,
        claim: Claim,
        description: str = "Claim in payer processing",
        details: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SubmissionEvent:
        return self.transition(
            claim,
            TransitionEvent.START_PROCESSING,
            description,
            details=details,
            now=now,
        )

    def void(
        self,
        claim: Claim,
        reason: str,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SubmissionEvent:
        entry = self.transition(
            claim,
            TransitionEvent.VOID,
            "Claim voided",
            now=now,
            reason=reason,
            user_id=user_id,
        )
        logger.info(f"Claim {claim.claim_number} voided: {reason}")
        return entry
