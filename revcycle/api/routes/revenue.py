"""
Revenue Metrics API Endpoints.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError as PydanticValidationError

from revcycle.api.deps import get_service
from revcycle.schemas.revenue import RevenueMetrics, RevenueMetricsQuery
from revcycle.services.revenue_cycle_service import RevenueCycleService
from revcycle.utils.errors import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/revenue",
    tags=["revenue"],
)


@router.get("/metrics", response_model=RevenueMetrics)
async def get_revenue_metrics(
    from_date: date = Query(...),
    to_date: date = Query(...),
    provider_id: Optional[str] = Query(None),
    service: RevenueCycleService = Depends(get_service),
) -> RevenueMetrics:
    """Revenue metrics for claims with a date of service in [from_date, to_date]."""
    try:
        query = RevenueMetricsQuery(
            from_date=from_date, to_date=to_date, provider_id=provider_id
        )
    except PydanticValidationError as e:
        raise ValidationError(str(e.errors()[0]["msg"]))
    return service.get_revenue_metrics(query)
