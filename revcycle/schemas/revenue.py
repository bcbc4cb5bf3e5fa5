"""
Revenue Metrics Read Model.

Recomputed on demand for a reporting window; never persisted.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class RevenueMetricsQuery(BaseModel):
    from_date: date
    to_date: date
    provider_id: Optional[str] = None

    @model_validator(mode="after")
    def check_window(self) -> "RevenueMetricsQuery":
        if self.to_date < self.from_date:
            raise ValueError("to_date must not precede from_date")
        return self


class PayerBreakdown(BaseModel):
    payer: str
    charges: Decimal = Decimal("0")
    payments: Decimal = Decimal("0")
    ar: Decimal = Field(default=Decimal("0"), description="Outstanding balance on open claims")


class ServiceBreakdown(BaseModel):
    service: str
    charges: Decimal = Decimal("0")
    payments: Decimal = Decimal("0")


class AgingBucket(BaseModel):
    bucket: str
    min_days: int
    max_days: Optional[int] = None
    amount: Decimal = Decimal("0")
    count: int = 0


class RevenueMetrics(BaseModel):
    period: str
    claim_count: int
    total_charges: Decimal
    total_payments: Decimal
    total_adjustments: Decimal
    net_revenue: Decimal
    days_in_ar: int
    collection_rate: float
    denial_rate: float
    clean_claim_rate: float
    by_payer: list[PayerBreakdown]
    by_service: list[ServiceBreakdown]
    aging_buckets: list[AgingBucket]
