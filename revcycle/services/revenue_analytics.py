"""
Revenue Analytics Engine.

Aggregates the claim population over a reporting window:
- Charges, payments, adjustments and net revenue
- Collection, denial and clean-claim rates
- Days in A/R and the five-bucket aging report over in-flight claims
- Per-payer and per-service breakdowns

The computation is a pure function of (claims, query, now); it reads claim
snapshots and takes no locks.
"""

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, Optional

from revcycle.core.enums import ClaimStatus
from revcycle.models.claim import Claim, utc_now
from revcycle.schemas.revenue import (
    AgingBucket,
    PayerBreakdown,
    RevenueMetrics,
    RevenueMetricsQuery,
    ServiceBreakdown,
)
from revcycle.services.claim_state_machine import is_in_flight_status, is_open_receivable
from revcycle.services.claim_store import ClaimStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENTS = Decimal("0.01")

# (label, min_days, max_days); upper bounds are inclusive
AGING_BUCKETS: tuple[tuple[str, int, Optional[int]], ...] = (
    ("0-30", 0, 30),
    ("31-60", 31, 60),
    ("61-90", 61, 90),
    ("91-120", 91, 120),
    (">120", 121, None),
)

UNCLEAN_EVENT_MARKERS = ("rejected", "error")


def days_outstanding(claim: Claim, now: datetime) -> int:
    """Whole days since the receivable clock started."""
    return (now - claim.aging_start).days


def _bucket_index(days: int) -> int:
    for index, (_, _, max_days) in enumerate(AGING_BUCKETS):
        if max_days is None or days <= max_days:
            return index
    return len(AGING_BUCKETS) - 1


def _ratio(numerator, denominator) -> float:
    if not denominator:
        return 0.0
    return float(Decimal(numerator) / Decimal(denominator))


def filter_claims(claims: Iterable[Claim], query: RevenueMetricsQuery) -> list[Claim]:
    return [
        c
        for c in claims
        if query.from_date <= c.date_of_service <= query.to_date
        and (query.provider_id is None or c.provider_id == query.provider_id)
    ]


def compute_revenue_metrics(
    claims: Iterable[Claim],
    query: RevenueMetricsQuery,
    now: datetime,
) -> RevenueMetrics:
    """
    Compute revenue metrics for claims with a date of service in the window.

    Args:
        claims: Claim population snapshot
        query: Reporting window and optional provider filter
        now: Reference time for days in A/R and aging

    Returns:
        RevenueMetrics read model
    """
    filtered = filter_claims(claims, query)

    total_charges = sum((c.total_charges for c in filtered), ZERO)
    total_payments = sum((c.paid_amount or ZERO for c in filtered), ZERO)
    total_adjustments = sum((c.total_adjustments for c in filtered), ZERO)

    denied = [c for c in filtered if c.status == ClaimStatus.DENIED]
    clean = [c for c in filtered if not c.has_event_matching(*UNCLEAN_EVENT_MARKERS)]

    # Days in A/R and aging over in-flight claims
    buckets = [
        AgingBucket(bucket=label, min_days=min_days, max_days=max_days)
        for label, min_days, max_days in AGING_BUCKETS
    ]
    in_flight = [c for c in filtered if is_in_flight_status(c.status)]
    total_days = 0
    for claim in in_flight:
        days = days_outstanding(claim, now)
        total_days += days
        bucket = buckets[_bucket_index(days)]
        bucket.amount += claim.outstanding_balance
        bucket.count += 1

    days_in_ar = 0
    if in_flight:
        days_in_ar = int(
            (Decimal(total_days) / len(in_flight)).quantize(Decimal("1"), ROUND_HALF_UP)
        )

    # Per-payer breakdown, in first-seen order
    by_payer: dict[str, PayerBreakdown] = {}
    for claim in filtered:
        entry = by_payer.setdefault(claim.payer_name, PayerBreakdown(payer=claim.payer_name))
        entry.charges += claim.total_charges
        entry.payments += claim.paid_amount or ZERO
        if is_open_receivable(claim.status):
            entry.ar += claim.outstanding_balance

    # Per-service breakdown; payments apportioned by each line's share of charges
    by_service: dict[str, ServiceBreakdown] = {}
    for claim in filtered:
        paid = claim.paid_amount or ZERO
        for procedure in claim.procedures:
            entry = by_service.setdefault(
                procedure.code, ServiceBreakdown(service=procedure.code)
            )
            entry.charges += procedure.total_price
            if paid and claim.total_charges:
                share = paid * procedure.total_price / claim.total_charges
                entry.payments += share.quantize(CENTS, ROUND_HALF_UP)

    metrics = RevenueMetrics(
        period=f"{query.from_date.isoformat()} - {query.to_date.isoformat()}",
        claim_count=len(filtered),
        total_charges=total_charges,
        total_payments=total_payments,
        total_adjustments=total_adjustments,
        net_revenue=total_payments - total_adjustments,
        days_in_ar=days_in_ar,
        collection_rate=_ratio(total_payments, total_charges),
        denial_rate=_ratio(len(denied), len(filtered)),
        clean_claim_rate=_ratio(len(clean), len(filtered)),
        by_payer=list(by_payer.values()),
        by_service=list(by_service.values()),
        aging_buckets=buckets,
    )

    logger.debug(
        f"Revenue metrics {metrics.period}: {metrics.claim_count} claims, "
        f"collection_rate={metrics.collection_rate:.3f}"
    )
    return metrics


class RevenueAnalyticsEngine:
    """Reads a snapshot of the claim store and computes metrics."""

    def __init__(self, store: ClaimStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def get_revenue_metrics(
        self,
        query: RevenueMetricsQuery,
        now: Optional[datetime] = None,
    ) -> RevenueMetrics:
        return compute_revenue_metrics(self.store.list_claims(), query, now or self.clock())
