"""
Domain Events.

Remittance posting emits a ClaimOutcomePosted event per applied line; the
denial manager subscribes to it. The bus keeps every published event so the
call chain can be inspected and replayed in tests.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from revcycle.core.enums import PaymentOutcome
from revcycle.models.claim import Adjustment, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    occurred_at: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass(frozen=True)
class ClaimOutcomePosted(DomainEvent):
    """A remittance outcome was applied to a claim."""

    claim_id: str = ""
    claim_number: str = ""
    remittance_number: str = ""
    outcome: PaymentOutcome = PaymentOutcome.PAID
    paid_amount: Decimal = Decimal("0")
    adjustments: tuple[Adjustment, ...] = ()
    denial_reason: Optional[str] = None

    @property
    def is_denial(self) -> bool:
        return self.outcome == PaymentOutcome.DENIED


EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventBus:
    """In-process publish/subscribe for domain events."""

    def __init__(self):
        self._handlers: dict[type, list[EventHandler]] = {}
        self._published: list[DomainEvent] = []

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: type, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: DomainEvent) -> None:
        """
        Deliver an event to its subscribers in registration order.

        Handler errors propagate to the publisher.
        """
        self._published.append(event)
        handlers = self._handlers.get(type(event), [])
        logger.debug(f"Publishing {type(event).__name__} {event.id} to {len(handlers)} handlers")
        for handler in handlers:
            await handler(event)

    @property
    def published(self) -> tuple[DomainEvent, ...]:
        return tuple(self._published)
