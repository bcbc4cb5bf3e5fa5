"""
Claim Lifecycle Graph.

Provides:
- The allowed status graph of a claim, keyed by (status, event)
- Transition checks with reason enforcement for voids and rejections
- Post-transition hooks
- Status groupings used by posting and analytics

Lifecycle:
    DRAFT -> READY                            (validation passed)
    READY -> SUBMITTED
    SUBMITTED -> ACCEPTED | REJECTED          (clearinghouse acknowledgment)
    ACCEPTED -> PENDING | PROCESSING          (payer progress)
    PENDING -> PROCESSING
    ACCEPTED | PENDING | PROCESSING -> PAID | PARTIAL_PAID | DENIED
    PARTIAL_PAID -> PAID
    DENIED -> APPEALED
    APPEALED -> PROCESSING                    (appeal approved)
    APPEALED -> DENIED                        (appeal denied)
    any non-terminal -> VOIDED

Terminal: PAID, VOIDED, REJECTED
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from revcycle.core.enums import ClaimStatus, PaymentOutcome

logger = logging.getLogger(__name__)


class TransitionEvent(str, Enum):
    """Lifecycle events a claim can receive."""

    VALIDATE = "validate"
    SUBMIT = "submit"
    ACCEPT = "accept"
    REJECT = "reject"
    QUEUE = "queue"
    START_PROCESSING = "start_processing"
    POST_PAYMENT = "post_payment"
    POST_PARTIAL_PAYMENT = "post_partial_payment"
    POST_DENIAL = "post_denial"
    APPEAL = "appeal"
    APPEAL_DENIED = "appeal_denied"
    VOID = "void"


@dataclass(frozen=True)
class Transition:
    """One edge of the lifecycle graph."""

    from_status: ClaimStatus
    to_status: ClaimStatus
    event: TransitionEvent
    requires_reason: bool = False


@dataclass
class TransitionRequest:
    """A claim asking to move along the graph."""

    claim_number: str
    current_status: ClaimStatus
    event: TransitionEvent
    requested_at: datetime
    triggered_by: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class TransitionOutcome:
    allowed: bool
    from_status: ClaimStatus
    to_status: Optional[ClaimStatus] = None
    error: Optional[str] = None


TransitionHook = Callable[[TransitionRequest, TransitionOutcome], None]

TERMINAL_STATUSES = frozenset(
    {ClaimStatus.PAID, ClaimStatus.VOIDED, ClaimStatus.REJECTED}
)

IN_FLIGHT_STATUSES = frozenset(
    {
        ClaimStatus.SUBMITTED,
        ClaimStatus.ACCEPTED,
        ClaimStatus.PENDING,
        ClaimStatus.PROCESSING,
    }
)

ADJUDICABLE_STATUSES = (
    ClaimStatus.ACCEPTED,
    ClaimStatus.PENDING,
    ClaimStatus.PROCESSING,
)

OUTCOME_EVENTS: dict[PaymentOutcome, TransitionEvent] = {
    PaymentOutcome.PAID: TransitionEvent.POST_PAYMENT,
    PaymentOutcome.PARTIAL: TransitionEvent.POST_PARTIAL_PAYMENT,
    PaymentOutcome.DENIED: TransitionEvent.POST_DENIAL,
}


# =============================================================================
# Lifecycle Graph
# =============================================================================


def _lifecycle_edges() -> list[Transition]:
    edges = [
        Transition(ClaimStatus.DRAFT, ClaimStatus.READY, TransitionEvent.VALIDATE),
        Transition(ClaimStatus.READY, ClaimStatus.SUBMITTED, TransitionEvent.SUBMIT),
        Transition(ClaimStatus.SUBMITTED, ClaimStatus.ACCEPTED, TransitionEvent.ACCEPT),
        Transition(
            ClaimStatus.SUBMITTED,
            ClaimStatus.REJECTED,
            TransitionEvent.REJECT,
            requires_reason=True,
        ),
        Transition(ClaimStatus.ACCEPTED, ClaimStatus.PENDING, TransitionEvent.QUEUE),
        Transition(
            ClaimStatus.ACCEPTED, ClaimStatus.PROCESSING, TransitionEvent.START_PROCESSING
        ),
        Transition(
            ClaimStatus.PENDING, ClaimStatus.PROCESSING, TransitionEvent.START_PROCESSING
        ),
        Transition(
            ClaimStatus.PARTIAL_PAID, ClaimStatus.PAID, TransitionEvent.POST_PAYMENT
        ),
        Transition(ClaimStatus.DENIED, ClaimStatus.APPEALED, TransitionEvent.APPEAL),
        Transition(
            ClaimStatus.APPEALED, ClaimStatus.PROCESSING, TransitionEvent.START_PROCESSING
        ),
        Transition(
            ClaimStatus.APPEALED, ClaimStatus.DENIED, TransitionEvent.APPEAL_DENIED
        ),
    ]

    # Remittance outcomes
    for status in ADJUDICABLE_STATUSES:
        edges.extend(
            [
                Transition(status, ClaimStatus.PAID, TransitionEvent.POST_PAYMENT),
                Transition(
                    status, ClaimStatus.PARTIAL_PAID, TransitionEvent.POST_PARTIAL_PAYMENT
                ),
                Transition(status, ClaimStatus.DENIED, TransitionEvent.POST_DENIAL),
            ]
        )

    # Administrative void
    for status in ClaimStatus:
        if status not in TERMINAL_STATUSES:
            edges.append(
                Transition(
                    status,
                    ClaimStatus.VOIDED,
                    TransitionEvent.VOID,
                    requires_reason=True,
                )
            )

    return edges


LIFECYCLE_EDGES: list[Transition] = _lifecycle_edges()


# =============================================================================
# Graph Walker
# =============================================================================


class ClaimStateMachine:
    """
    Decides whether a claim may take a lifecycle event.

    The machine never mutates a claim; the submission tracker applies the
    returned status and records history.
    """

    def __init__(self, edges: Optional[list[Transition]] = None):
        self._edges: dict[tuple[ClaimStatus, TransitionEvent], Transition] = {}
        self._outgoing: dict[ClaimStatus, list[Transition]] = {}
        self._hooks: dict[TransitionEvent, list[TransitionHook]] = {}

        for edge in edges if edges is not None else LIFECYCLE_EDGES:
            self._edges[(edge.from_status, edge.event)] = edge
            self._outgoing.setdefault(edge.from_status, []).append(edge)

    def outgoing(self, status: ClaimStatus) -> list[Transition]:
        return self._outgoing.get(status, [])

    def allowed_events(self, status: ClaimStatus) -> list[TransitionEvent]:
        return [edge.event for edge in self.outgoing(status)]

    def reachable_statuses(self, status: ClaimStatus) -> list[ClaimStatus]:
        return [edge.to_status for edge in self.outgoing(status)]

    def is_reachable(self, from_status: ClaimStatus, to_status: ClaimStatus) -> bool:
        """True when a single event leads from one status to the other."""
        return to_status in self.reachable_statuses(from_status)

    def get_transition(
        self,
        from_status: ClaimStatus,
        event: TransitionEvent,
    ) -> Optional[Transition]:
        return self._edges.get((from_status, event))

    def check(self, request: TransitionRequest) -> TransitionOutcome:
        """
        Check a request against the graph without side effects.

        Returns:
            TransitionOutcome with the target status, or the refusal reason
        """
        edge = self.get_transition(request.current_status, request.event)
        if edge is None:
            return TransitionOutcome(
                allowed=False,
                from_status=request.current_status,
                error=(
                    f"No {request.event.value} event from "
                    f"{request.current_status.value}"
                ),
            )

        if edge.requires_reason and not request.reason:
            return TransitionOutcome(
                allowed=False,
                from_status=request.current_status,
                error=f"A reason is required to {request.event.value} a claim",
            )

        return TransitionOutcome(
            allowed=True,
            from_status=request.current_status,
            to_status=edge.to_status,
        )

    def apply(self, request: TransitionRequest) -> TransitionOutcome:
        """Check a request and run the hooks registered for its event."""
        outcome = self.check(request)
        if not outcome.allowed:
            logger.warning(f"Claim {request.claim_number} refused: {outcome.error}")
            return outcome

        for hook in self._hooks.get(request.event, []):
            try:
                hook(request, outcome)
            except Exception:
                logger.exception(
                    f"Hook for {request.event.value} failed on claim {request.claim_number}"
                )

        logger.info(
            f"Claim {request.claim_number}: "
            f"{outcome.from_status.value} -> {outcome.to_status.value}"
        )
        return outcome

    def add_hook(self, event: TransitionEvent, hook: TransitionHook) -> None:
        self._hooks.setdefault(event, []).append(hook)


# =============================================================================
# Status Groups
# =============================================================================


def is_terminal_status(status: ClaimStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_in_flight_status(status: ClaimStatus) -> bool:
    """Submitted to the payer and not yet adjudicated."""
    return status in IN_FLIGHT_STATUSES


def is_open_receivable(status: ClaimStatus) -> bool:
    """Counts toward a payer's outstanding balance."""
    return status not in (ClaimStatus.PAID, ClaimStatus.DENIED, ClaimStatus.VOIDED)


_state_machine: Optional[ClaimStateMachine] = None


def get_claim_state_machine() -> ClaimStateMachine:
    global _state_machine
    if _state_machine is None:
        _state_machine = ClaimStateMachine()
    return _state_machine
