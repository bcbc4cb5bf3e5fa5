"""
Remittance advice models.

A remittance is received as pending, collects one entry per line while it is
processed, and is closed as processed or exception. Once closed it rejects
further lines.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from revcycle.core.enums import PaymentOutcome, PostingResult, RemittanceStatus
from revcycle.models.claim import Adjustment


@dataclass(frozen=True)
class ClaimPayment:
    """
    A remittance line resolved against a claim.

    Patient name and service date are copied from the claim when the line is
    posted and are not re-read later.
    """

    claim_id: str
    claim_number: str
    patient_name: str
    service_date: date
    charged_amount: Decimal
    allowed_amount: Decimal
    paid_amount: Decimal
    patient_responsibility: Decimal
    status: PaymentOutcome
    adjustments: tuple[Adjustment, ...] = ()
    denial_reason: Optional[str] = None
    remark_codes: tuple[str, ...] = ()
    posting_result: PostingResult = PostingResult.APPLIED


@dataclass(frozen=True)
class RemittanceException:
    """A remittance line that could not be applied."""

    claim_number: str
    posting_result: PostingResult
    reason: str
    paid_amount: Decimal = Decimal("0")


@dataclass
class RemittanceAdvice:
    id: str
    remittance_number: str
    payer_id: str
    payer_name: str
    payment_amount: Decimal
    received_at: datetime
    check_number: Optional[str] = None
    check_date: Optional[date] = None
    eft_trace_number: Optional[str] = None
    claim_payments: list[ClaimPayment] = field(default_factory=list)
    exceptions: list[RemittanceException] = field(default_factory=list)
    status: RemittanceStatus = RemittanceStatus.PENDING
    processed_at: Optional[datetime] = None

    @property
    def is_closed(self) -> bool:
        return self.status != RemittanceStatus.PENDING

    def add_payment(self, payment: ClaimPayment) -> None:
        self._ensure_open()
        self.claim_payments.append(payment)

    def add_exception(self, exception: RemittanceException) -> None:
        self._ensure_open()
        self.exceptions.append(exception)

    def close(self, processed_at: datetime) -> None:
        """Mark processed, or exception when any line could not be applied."""
        self._ensure_open()
        self.status = (
            RemittanceStatus.EXCEPTION if self.exceptions else RemittanceStatus.PROCESSED
        )
        self.processed_at = processed_at

    def _ensure_open(self) -> None:
        if self.is_closed:
            raise ValueError(f"Remittance {self.remittance_number} is already {self.status.value}")

    @property
    def posted_amount(self) -> Decimal:
        """Payments applied by this batch (duplicates excluded)."""
        return sum(
            (
                p.paid_amount
                for p in self.claim_payments
                if p.posting_result == PostingResult.APPLIED
            ),
            Decimal("0"),
        )

    @property
    def unapplied_amount(self) -> Decimal:
        """Portion of the payer's payment not matched to any claim line."""
        matched = sum((p.paid_amount for p in self.claim_payments), Decimal("0"))
        return self.payment_amount - matched
