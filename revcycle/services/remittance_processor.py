"""
Remittance Processor.

Posts a payer's batch payment notice against claims:
- Resolves each line by claim number; unresolved lines are recorded as
  exceptions and the rest of the batch still posts
- Applies allowed/paid/patient-responsibility/adjustments verbatim and moves
  the claim to paid, partial_paid or denied
- Skips lines identical to any outcome already posted on the claim, so a
  retried batch does not double-post
- Rejects lines paying more than the claim charged
- Emits ClaimOutcomePosted for every applied line; the denial manager
  consumes the denied ones

Lines for different claims are posted concurrently; lines for the same claim
are applied in input order under that claim's lock.
"""

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from revcycle.core.enums import ClaimStatus, PaymentOutcome, PostingResult
from revcycle.models.claim import Adjustment, Claim, utc_now
from revcycle.models.remittance import (
    ClaimPayment,
    RemittanceAdvice,
    RemittanceException,
)
from revcycle.schemas.remittance import ClaimPaymentInput, RemittanceCreate
from revcycle.services.claim_state_machine import OUTCOME_EVENTS, TransitionEvent
from revcycle.services.claim_store import ClaimStore
from revcycle.services.events import ClaimOutcomePosted, EventBus
from revcycle.services.reference_catalog import ReferenceCatalog, get_reference_catalog
from revcycle.services.submission_tracker import SubmissionTracker

logger = logging.getLogger(__name__)


@dataclass
class LinePosting:
    """Result of posting one remittance line, keyed by its input position."""

    index: int
    payment: Optional[ClaimPayment] = None
    exception: Optional[RemittanceException] = None
    event: Optional[ClaimOutcomePosted] = None


def posting_key(line: ClaimPaymentInput) -> str:
    """
    Fingerprint of a remittance outcome.

    Two lines with the same status, amounts and adjustments for the same
    claim number are the same posting.
    """
    adjustments = sorted(
        f"{a.group.value}:{a.code}:{a.amount.normalize()}" for a in line.adjustments
    )
    raw = "|".join(
        [
            line.claim_number,
            line.status.value,
            str(line.allowed_amount.normalize()),
            str(line.paid_amount.normalize()),
            str(line.patient_responsibility.normalize()),
            ",".join(adjustments),
        ]
    )
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class RemittanceProcessor:
    """Applies remittance advice to the claim population."""

    def __init__(
        self,
        store: ClaimStore,
        tracker: SubmissionTracker,
        event_bus: EventBus,
        catalog: Optional[ReferenceCatalog] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.tracker = tracker
        self.event_bus = event_bus
        self.catalog = catalog or get_reference_catalog()
        self.clock = clock

    async def process(self, data: RemittanceCreate) -> RemittanceAdvice:
        """
        Process a remittance batch.

        Returns:
            The closed RemittanceAdvice: processed when every line resolved,
            exception otherwise

        Raises:
            PayerNotFoundError: if the remittance payer does not resolve
        """
        payer = self.catalog.get_payer(data.payer_id)
        now = self.clock()

        remittance = RemittanceAdvice(
            id=str(uuid4()),
            remittance_number=data.remittance_number,
            payer_id=payer.id,
            payer_name=payer.name,
            payment_amount=data.payment_amount,
            received_at=now,
            check_number=data.check_number,
            check_date=data.check_date,
            eft_trace_number=data.eft_trace_number,
        )

        # Group by claim number, preserving input order within each claim
        lines_by_claim: dict[str, list[tuple[int, ClaimPaymentInput]]] = {}
        for index, line in enumerate(data.claim_payments):
            lines_by_claim.setdefault(line.claim_number, []).append((index, line))

        grouped = await asyncio.gather(
            *(
                self._post_claim_lines(claim_number, lines, remittance, now)
                for claim_number, lines in lines_by_claim.items()
            )
        )
        postings = sorted(
            (posting for group in grouped for posting in group),
            key=lambda p: p.index,
        )

        for posting in postings:
            if posting.payment is not None:
                remittance.add_payment(posting.payment)
            if posting.exception is not None:
                remittance.add_exception(posting.exception)

        for posting in postings:
            if posting.event is not None:
                await self.event_bus.publish(posting.event)

        remittance.close(self.clock())
        self.store.add_remittance(remittance)

        logger.info(
            f"Remittance {remittance.remittance_number} {remittance.status.value}: "
            f"{len(remittance.claim_payments)} matched, "
            f"{len(remittance.exceptions)} exceptions"
        )
        return remittance

    async def _post_claim_lines(
        self,
        claim_number: str,
        lines: list[tuple[int, ClaimPaymentInput]],
        remittance: RemittanceAdvice,
        now: datetime,
    ) -> list[LinePosting]:
        claim = self.store.get_claim_by_number(claim_number)
        if claim is None:
            logger.warning(
                f"Remittance {remittance.remittance_number}: claim {claim_number} not found"
            )
            return [
                LinePosting(
                    index=index,
                    exception=RemittanceException(
                        claim_number=claim_number,
                        posting_result=PostingResult.UNMATCHED,
                        reason="Claim number not found",
                        paid_amount=line.paid_amount,
                    ),
                )
                for index, line in lines
            ]

        async with self.store.lock_for(claim.id):
            return [
                self._apply_line(claim, index, line, remittance, now)
                for index, line in lines
            ]

    def _apply_line(
        self,
        claim: Claim,
        index: int,
        line: ClaimPaymentInput,
        remittance: RemittanceAdvice,
        now: datetime,
    ) -> LinePosting:
        """Apply one outcome to a claim. Caller holds the claim's lock."""
        key = posting_key(line)
        if key in claim.posting_keys:
            logger.info(
                f"Remittance {remittance.remittance_number}: duplicate outcome "
                f"for claim {claim.claim_number} ignored"
            )
            return LinePosting(
                index=index,
                payment=self._payment_record(claim, line, PostingResult.DUPLICATE),
            )

        rejection = self._rejection_reason(claim, line, remittance)
        if rejection:
            logger.warning(
                f"Remittance {remittance.remittance_number}: line for claim "
                f"{claim.claim_number} not applied: {rejection}"
            )
            return LinePosting(
                index=index,
                exception=RemittanceException(
                    claim_number=claim.claim_number,
                    posting_result=PostingResult.REJECTED,
                    reason=rejection,
                    paid_amount=line.paid_amount,
                ),
            )

        if claim.status == ClaimStatus.SUBMITTED:
            self.tracker.transition(
                claim,
                TransitionEvent.ACCEPT,
                "Claim accepted (implied by remittance)",
                now=now,
                details=f"Remittance {remittance.remittance_number}",
            )

        self.tracker.transition(
            claim,
            OUTCOME_EVENTS[line.status],
            f"Payment processed: {line.status.value}",
            now=now,
            details=(
                f"Paid: {line.paid_amount}, Patient resp: {line.patient_responsibility}"
            ),
        )

        adjustments = tuple(
            Adjustment(
                code=a.code,
                group=a.group,
                amount=a.amount,
                description=a.description,
                reason=a.reason,
            )
            for a in line.adjustments
        )
        claim.allowed_amount = line.allowed_amount
        claim.paid_amount = line.paid_amount
        claim.patient_responsibility = line.patient_responsibility
        claim.adjustments = adjustments
        claim.posting_keys.add(key)
        if line.status == PaymentOutcome.PAID:
            claim.paid_at = now

        return LinePosting(
            index=index,
            payment=self._payment_record(claim, line, PostingResult.APPLIED),
            event=ClaimOutcomePosted(
                occurred_at=now,
                claim_id=claim.id,
                claim_number=claim.claim_number,
                remittance_number=remittance.remittance_number,
                outcome=line.status,
                paid_amount=line.paid_amount,
                adjustments=adjustments,
                denial_reason=line.denial_reason,
            ),
        )

    def _rejection_reason(
        self,
        claim: Claim,
        line: ClaimPaymentInput,
        remittance: RemittanceAdvice,
    ) -> Optional[str]:
        if claim.payer_id != remittance.payer_id:
            return f"Claim is billed to payer {claim.payer_id}"
        if line.paid_amount > claim.total_charges:
            return (
                f"Paid amount {line.paid_amount} exceeds claim charges {claim.total_charges}"
            )

        # A remittance before the clearinghouse acknowledgment implies acceptance
        status = (
            ClaimStatus.ACCEPTED if claim.status == ClaimStatus.SUBMITTED else claim.status
        )
        if self.tracker.state_machine.get_transition(status, OUTCOME_EVENTS[line.status]) is None:
            return f"Outcome {line.status.value} cannot be applied to a {claim.status.value} claim"
        return None

    def _payment_record(
        self,
        claim: Claim,
        line: ClaimPaymentInput,
        result: PostingResult,
    ) -> ClaimPayment:
        return ClaimPayment(
            claim_id=claim.id,
            claim_number=claim.claim_number,
            patient_name=claim.patient_name,
            service_date=claim.date_of_service,
            charged_amount=(
                line.charged_amount if line.charged_amount is not None else claim.total_charges
            ),
            allowed_amount=line.allowed_amount,
            paid_amount=line.paid_amount,
            patient_responsibility=line.patient_responsibility,
            status=line.status,
            adjustments=tuple(
                Adjustment(
                    code=a.code,
                    group=a.group,
                    amount=a.amount,
                    description=a.description,
                    reason=a.reason,
                )
                for a in line.adjustments
            ),
            denial_reason=line.denial_reason,
            remark_codes=tuple(line.remark_codes),
            posting_result=result,
        )
